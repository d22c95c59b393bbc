import asyncio
from decimal import ROUND_HALF_UP, Decimal
from typing import Awaitable, Callable, Optional, TypeVar, Union

import structlog

from core.models.batch_result import BatchResult, CampaignOutcome, CampaignState
from core.models.provisioning import (
    MICROS_PER_UNIT,
    AdGroupDefinition,
    CampaignDefinition,
    CampaignDefinitions,
    CampaignKind,
    CreatedResource,
    KeywordSpec,
    ResourceStatus,
)
from core.provisioning.ad_copy import AdCopyProfile, build_ad_copy
from core.provisioning.ports import CampaignMirror, CampaignPlatform, MirrorStore
from core.result import Result
from exceptions.custom_exceptions import BaseAppException

logger = structlog.get_logger(__name__)

T = TypeVar("T")

DEFAULT_REMOTE_CALL_TIMEOUT = 120.0
DUPLICATE_NAME_ERROR = "Duplicate campaign name in definitions"


def to_micros(amount: Union[float, int, str, Decimal]) -> int:
    """Currency units to the platform's integer micro-units, rounded half up."""
    micros = Decimal(str(amount)) * MICROS_PER_UNIT
    return int(micros.to_integral_value(rounding=ROUND_HALF_UP))


class ProvisioningOrchestrator:
    """Drives budget -> campaign -> ad groups -> keywords -> ads for a batch.

    Budget and campaign failures end that campaign only. Ad group, keyword and
    ad failures are recorded against the campaign and the loop moves on. A step
    counts as created only once its remote call and its mirror write both
    succeed.
    """

    def __init__(
        self,
        platform: CampaignPlatform,
        mirror: MirrorStore,
        ad_copy_profile: AdCopyProfile = AdCopyProfile(),
        *,
        remote_call_timeout: Optional[float] = DEFAULT_REMOTE_CALL_TIMEOUT,
        max_concurrent_campaigns: int = 1,
        default_cpc_bid_micros: Optional[int] = None,
    ):
        self.platform = platform
        self.mirror = mirror
        self.ad_copy_profile = ad_copy_profile
        self.remote_call_timeout = remote_call_timeout
        self.max_concurrent_campaigns = max(1, max_concurrent_campaigns)
        self.default_cpc_bid_micros = default_cpc_bid_micros

    async def run(self, definitions: CampaignDefinitions) -> BatchResult:
        campaigns = definitions.campaigns
        logger.info(
            "Starting provisioning run",
            campaigns=len(campaigns),
            ad_groups=len(definitions.ad_groups),
            keywords=len(definitions.keywords),
            concurrency=self.max_concurrent_campaigns,
        )

        seen = set()
        duplicates = set()
        for index, campaign in enumerate(campaigns):
            if campaign.name in seen:
                duplicates.add(index)
            seen.add(campaign.name)

        async def provision(index: int, campaign: CampaignDefinition) -> CampaignOutcome:
            if index in duplicates:
                logger.warning("Skipping duplicate campaign", campaign=campaign.name)
                return CampaignOutcome(campaign.name).fail(DUPLICATE_NAME_ERROR)
            return await self._provision_isolated(campaign, definitions)

        if self.max_concurrent_campaigns == 1:
            outcomes = []
            for index, campaign in enumerate(campaigns):
                outcomes.append(await provision(index, campaign))
        else:
            semaphore = asyncio.Semaphore(self.max_concurrent_campaigns)

            async def provision_with_limit(index, campaign):
                async with semaphore:
                    return await provision(index, campaign)

            outcomes = await asyncio.gather(
                *(provision_with_limit(i, c) for i, c in enumerate(campaigns))
            )

        result = BatchResult(outcomes=tuple(outcomes))
        logger.info(
            "Provisioning run finished",
            succeeded=len(result.succeeded),
            failed=len(result.failed),
        )
        return result

    async def _provision_isolated(
        self, definition: CampaignDefinition, definitions: CampaignDefinitions
    ) -> CampaignOutcome:
        try:
            return await self.provision_campaign(definition, definitions)
        except Exception as e:
            # Anything escaping the step helpers (e.g. the mirror session itself)
            logger.error(
                "Campaign provisioning aborted",
                campaign=definition.name,
                error=str(e),
                exc_info=True,
            )
            return CampaignOutcome(definition.name).fail(_error_message(e))

    async def provision_campaign(
        self, definition: CampaignDefinition, definitions: CampaignDefinitions
    ) -> CampaignOutcome:
        outcome = CampaignOutcome(definition.name)
        ad_groups = definitions.ad_groups_for(definition.name)
        budget_micros = to_micros(definition.daily_budget)
        log = logger.bind(campaign=definition.name)
        log.info(
            "Creating campaign",
            budget=definition.daily_budget,
            budget_micros=budget_micros,
            ad_groups=len(ad_groups),
            kind=definition.kind.value,
        )

        if budget_micros <= 0:
            log.error("Campaign has no daily budget", raw_budget=definition.daily_budget)
            return outcome.fail("Daily budget must be greater than 0")

        async with self.mirror.campaign_session() as mirror:
            budget = await self._remote(
                self.platform.create_campaign_budget,
                f"{definition.name} Budget",
                budget_micros,
            )
            if not budget.ok:
                log.error("Budget creation failed", error=budget.error)
                return outcome.fail(f"Budget creation failed: {budget.error}")
            outcome = outcome.advance(CampaignState.BUDGET_CREATED)
            log.info("Budget created", resource_name=budget.value)

            campaign = await self._remote(
                self.platform.create_campaign,
                name=definition.name,
                budget_resource_name=budget.value,
                bidding_strategy=definition.bidding_strategy,
                status=ResourceStatus.PAUSED,
                networks=definition.networks,
            )
            if not campaign.ok:
                log.error("Campaign creation failed", error=campaign.error)
                return outcome.fail(f"Campaign creation failed: {campaign.error}")

            campaign_row = await self._local(
                mirror.record_campaign,
                definition,
                campaign.value,
                budget_micros,
                ResourceStatus.PAUSED,
            )
            if not campaign_row.ok:
                log.error(
                    "Campaign mirror write failed",
                    resource_name=campaign.value.resource_name,
                    error=campaign_row.error,
                )
                return outcome.fail(
                    f"Campaign mirror write failed: {campaign_row.error} "
                    f"(paused remote campaign {campaign.value.resource_name} exists)"
                )

            outcome = outcome.advance(
                CampaignState.CAMPAIGN_CREATED,
                campaign_resource_name=campaign.value.resource_name,
            )
            log.info(
                "Campaign created",
                resource_name=campaign.value.resource_name,
                campaign_id=campaign.value.id,
            )

            for ad_group in ad_groups:
                outcome = await self._provision_ad_group(
                    mirror,
                    definition,
                    ad_group,
                    definitions,
                    campaign.value,
                    campaign_row.value,
                    outcome,
                )

        outcome = outcome.advance(CampaignState.CAMPAIGN_COMPLETE)
        log.info(
            "Campaign complete",
            ad_groups=outcome.ad_groups.to_dict(),
            keywords=outcome.keywords.to_dict(),
            ads=outcome.ads.to_dict(),
        )
        return outcome

    async def _provision_ad_group(
        self,
        mirror: CampaignMirror,
        definition: CampaignDefinition,
        ad_group: AdGroupDefinition,
        definitions: CampaignDefinitions,
        campaign: CreatedResource,
        campaign_row_id: int,
        outcome: CampaignOutcome,
    ) -> CampaignOutcome:
        log = logger.bind(campaign=definition.name, ad_group=ad_group.name)

        created = await self._remote(
            self.platform.create_ad_group,
            name=ad_group.name,
            campaign_resource_name=campaign.resource_name,
            status=ResourceStatus.ENABLED,
            cpc_bid_micros=self.default_cpc_bid_micros,
        )
        if created.ok:
            row = await self._local(
                mirror.record_ad_group,
                campaign_row_id,
                ad_group.name,
                created.value,
                self.default_cpc_bid_micros,
            )
            if not row.ok:
                created = Result.failure(f"mirror write failed: {row.error}")

        if not created.ok:
            log.warning("Ad group creation failed", error=created.error)
            return outcome.advance(
                outcome.state, ad_groups=outcome.ad_groups.add(1, 0)
            ).warn(f"Ad group '{ad_group.name}' failed: {created.error}")

        ad_group_resource = created.value
        ad_group_row_id = row.value
        outcome = outcome.advance(
            CampaignState.AD_GROUP_CREATED, ad_groups=outcome.ad_groups.add(1, 1)
        )
        log.info("Ad group created", resource_name=ad_group_resource.resource_name)

        outcome = await self._add_keywords(
            mirror, definition, ad_group, definitions, ad_group_resource, ad_group_row_id, outcome
        )
        if definition.kind != CampaignKind.CALLS_ONLY:
            outcome = await self._create_ad(
                mirror, definition, ad_group, ad_group_resource, ad_group_row_id, outcome
            )
        return outcome

    async def _add_keywords(
        self,
        mirror: CampaignMirror,
        definition: CampaignDefinition,
        ad_group: AdGroupDefinition,
        definitions: CampaignDefinitions,
        ad_group_resource: CreatedResource,
        ad_group_row_id: int,
        outcome: CampaignOutcome,
    ) -> CampaignOutcome:
        keyword_defs = definitions.keywords_for(definition.name, ad_group.name)
        if not keyword_defs:
            return outcome

        log = logger.bind(campaign=definition.name, ad_group=ad_group.name)
        specs = [
            KeywordSpec(text=kw.text, match_type=kw.match_type, final_url=kw.final_url)
            for kw in keyword_defs
        ]
        added = await self._remote(
            self.platform.add_keywords, ad_group_resource.resource_name, specs
        )
        if added.ok:
            rows = await self._local(mirror.record_keywords, ad_group_row_id, added.value)
            if not rows.ok:
                added = Result.failure(
                    f"{len(added.value)} keywords exist remotely but none were mirrored: {rows.error}"
                )

        if not added.ok:
            log.warning("Keyword batch failed", error=added.error, keywords=len(specs))
            return outcome.advance(
                outcome.state, keywords=outcome.keywords.add(len(specs), 0)
            ).warn(f"Keywords for '{ad_group.name}' failed: {added.error}")

        log.info("Keywords added", count=len(added.value))
        return outcome.advance(
            CampaignState.KEYWORDS_ADDED,
            keywords=outcome.keywords.add(len(specs), len(added.value)),
        )

    async def _create_ad(
        self,
        mirror: CampaignMirror,
        definition: CampaignDefinition,
        ad_group: AdGroupDefinition,
        ad_group_resource: CreatedResource,
        ad_group_row_id: int,
        outcome: CampaignOutcome,
    ) -> CampaignOutcome:
        log = logger.bind(campaign=definition.name, ad_group=ad_group.name)

        try:
            ad_copy = build_ad_copy(
                definition.kind, ad_group.name, ad_group.final_url, self.ad_copy_profile
            )
        except BaseAppException as e:
            log.warning("Ad copy rejected before submission", error=e.message, details=e.details)
            ad = Result.failure(e.message)
        else:
            ad = await self._remote(
                self.platform.create_responsive_search_ad,
                ad_group_resource.resource_name,
                ad_copy,
                ad_group.final_url,
            )
            if ad.ok:
                row = await self._local(
                    mirror.record_ad, ad_group_row_id, ad.value, ad_copy, ad_group.final_url
                )
                if not row.ok:
                    ad = Result.failure(f"mirror write failed: {row.error}")

        if not ad.ok:
            log.warning("Ad creation failed", error=ad.error)
            return outcome.advance(outcome.state, ads=outcome.ads.add(1, 0)).warn(
                f"Ad for '{ad_group.name}' failed: {ad.error}"
            )

        log.info(
            "Responsive search ad created",
            resource_name=ad.value.resource_name,
            headlines=len(ad_copy.headlines),
            descriptions=len(ad_copy.descriptions),
        )
        return outcome.advance(CampaignState.AD_CREATED, ads=outcome.ads.add(1, 1))

    async def _remote(self, call: Callable[..., Awaitable[T]], *args, **kwargs) -> Result[T]:
        return await _attempt(call, self.remote_call_timeout, *args, **kwargs)

    async def _local(self, call: Callable[..., Awaitable[T]], *args, **kwargs) -> Result[T]:
        return await _attempt(call, None, *args, **kwargs)


async def _attempt(
    call: Callable[..., Awaitable[T]], timeout: Optional[float], *args, **kwargs
) -> Result[T]:
    try:
        return Result.success(await asyncio.wait_for(call(*args, **kwargs), timeout))
    except asyncio.TimeoutError:
        return Result.failure(f"{_call_name(call)} timed out after {timeout}s")
    except Exception as e:
        return Result.failure(_error_message(e))


def _call_name(call: Callable) -> str:
    return getattr(call, "__name__", "remote call")


def _error_message(error: Exception) -> str:
    if isinstance(error, BaseAppException):
        return error.message
    return str(error) or type(error).__name__


