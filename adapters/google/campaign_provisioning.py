import re
from typing import Any, Dict, List, Optional, Sequence

import structlog

from adapters.google.client import GoogleAdsClient
from adapters.google.mutation import utils
from adapters.google.mutation.operation_builders.campaign_operation_builder import (
    CampaignOperationBuilder,
)
from adapters.google.mutation.operation_builders.conversion_action_builder import (
    ConversionActionBuilder,
)
from adapters.google.mutation.operation_builders.keyword_operation_builder import (
    KeywordOperationBuilder,
)
from adapters.google.mutation.operation_builders.responsive_search_ad_builder import (
    ResponsiveSearchAdBuilder,
)
from core.models.provisioning import (
    AdCopySet,
    BiddingStrategy,
    ConversionActionConfig,
    ConversionActionResult,
    CreatedKeyword,
    CreatedResource,
    KeywordSpec,
    ResourceStatus,
    extract_numeric_id,
)
from core.provisioning.conversion_label import extract_label_from_snippets
from exceptions.custom_exceptions import BusinessValidationException, GoogleAPIException

logger = structlog.get_logger(__name__)

_NUMERIC_ID = re.compile(r"^\d+$")


class GoogleAdsCampaignAdapter:
    """Google Ads implementation of the provisioning platform port."""

    CONVERSION_ACTION_FIELDS = """
        conversion_action.id,
        conversion_action.name,
        conversion_action.resource_name,
        conversion_action.category,
        conversion_action.status,
        conversion_action.type,
        conversion_action.tag_snippets
    """

    LIST_CONVERSION_ACTIONS_QUERY = f"""
    SELECT {CONVERSION_ACTION_FIELDS}
    FROM conversion_action
    WHERE conversion_action.status != 'REMOVED'
    ORDER BY conversion_action.name
    """

    GET_CONVERSION_ACTION_QUERY = f"""
    SELECT {CONVERSION_ACTION_FIELDS}
    FROM conversion_action
    WHERE conversion_action.id = {{conversion_action_id}}
    """

    def __init__(self, client: GoogleAdsClient) -> None:
        self.client = client
        self.campaign_builder = CampaignOperationBuilder()
        self.keyword_builder = KeywordOperationBuilder()
        self.ad_builder = ResponsiveSearchAdBuilder()
        self.conversion_builder = ConversionActionBuilder()

    async def create_campaign_budget(self, name: str, amount_micros: int) -> str:
        operations = self.campaign_builder.build_budget_ops(name, amount_micros)
        results = await self.client.mutate("campaignBudgets", operations)
        return self._single(results, "campaignBudgets").resource_name

    async def create_campaign(
        self,
        name: str,
        budget_resource_name: str,
        bidding_strategy: BiddingStrategy,
        status: ResourceStatus = ResourceStatus.PAUSED,
        networks: str = "",
        target_cpa_micros: Optional[int] = None,
    ) -> CreatedResource:
        operations = self.campaign_builder.build_campaign_ops(
            name=name,
            budget_resource_name=budget_resource_name,
            bidding_strategy=bidding_strategy,
            status=status,
            networks=networks,
            target_cpa_micros=target_cpa_micros,
        )
        results = await self.client.mutate("campaigns", operations)
        return self._single(results, "campaigns")

    async def create_ad_group(
        self,
        name: str,
        campaign_resource_name: str,
        status: ResourceStatus = ResourceStatus.ENABLED,
        cpc_bid_micros: Optional[int] = None,
    ) -> CreatedResource:
        operations = self.campaign_builder.build_ad_group_ops(
            name=name,
            campaign_resource_name=campaign_resource_name,
            status=status,
            cpc_bid_micros=cpc_bid_micros,
        )
        results = await self.client.mutate("adGroups", operations)
        return self._single(results, "adGroups")

    async def add_keywords(
        self, ad_group_resource_name: str, keywords: Sequence[KeywordSpec]
    ) -> List[CreatedKeyword]:
        if not keywords:
            return []
        operations = self.keyword_builder.build_keywords_ops(ad_group_resource_name, keywords)
        results = await self.client.mutate("adGroupCriteria", operations)

        names = utils.resource_names(results)
        if len(names) != len(keywords) or not all(names):
            raise GoogleAPIException(
                "Keyword mutate returned an unexpected result set",
                details={"requested": len(keywords), "returned": len(names)},
            )
        return [
            CreatedKeyword(
                resource_name=name,
                id=extract_numeric_id(name),
                text=keyword.text,
                match_type=keyword.match_type,
            )
            for name, keyword in zip(names, keywords)
        ]

    async def create_responsive_search_ad(
        self, ad_group_resource_name: str, ad_copy: AdCopySet, final_url: str
    ) -> CreatedResource:
        operations = self.ad_builder.build_ad_ops(ad_group_resource_name, ad_copy, final_url)
        results = await self.client.mutate("adGroupAds", operations)
        return self._single(results, "adGroupAds")

    async def create_conversion_action(
        self, config: ConversionActionConfig
    ) -> ConversionActionResult:
        logger.info(
            "Creating conversion action",
            name=config.name,
            category=config.category.value,
            value=config.value,
        )
        operations = self.conversion_builder.build_conversion_action_ops(config)
        results = await self.client.mutate("conversionActions", operations)
        created = self._single(results, "conversionActions")

        # Tag snippets are only readable after creation
        action = await self.get_conversion_action(created.id)
        if action is None:
            raise GoogleAPIException(
                "Created conversion action could not be read back",
                details={"resource_name": created.resource_name},
            )
        logger.info(
            "Conversion action created",
            id=action.id,
            name=action.name,
            has_label=bool(action.label),
        )
        return action

    async def list_conversion_actions(self) -> List[ConversionActionResult]:
        rows = await self.client.search(self.LIST_CONVERSION_ACTIONS_QUERY)
        actions = [self._to_conversion_action(row) for row in rows]
        logger.info("Fetched conversion actions", count=len(actions))
        return actions

    async def get_conversion_action(
        self, conversion_action_id: str
    ) -> Optional[ConversionActionResult]:
        conversion_action_id = str(conversion_action_id).strip()
        if not _NUMERIC_ID.match(conversion_action_id):
            raise BusinessValidationException(
                "Conversion action id must be numeric",
                details={"conversion_action_id": conversion_action_id},
            )
        rows = await self.client.search(
            self.GET_CONVERSION_ACTION_QUERY.format(conversion_action_id=conversion_action_id)
        )
        if not rows:
            return None
        return self._to_conversion_action(rows[0])

    def _to_conversion_action(self, row: Dict[str, Any]) -> ConversionActionResult:
        action = row.get("conversionAction", {})
        resource_name = action.get("resourceName", "")
        name = action.get("name", "")
        return ConversionActionResult(
            resource_name=resource_name,
            id=str(action.get("id") or extract_numeric_id(resource_name)),
            name=name,
            category=action.get("category", ""),
            status=action.get("status", ""),
            label=extract_label_from_snippets(action.get("tagSnippets", []), action_name=name),
        )

    @staticmethod
    def _single(results: List[Dict[str, Any]], service: str) -> CreatedResource:
        names = utils.resource_names(results)
        if not names or not names[0]:
            raise GoogleAPIException(
                f"No resource returned from {service}:mutate",
                details={"service": service},
            )
        return CreatedResource.from_resource_name(names[0])
