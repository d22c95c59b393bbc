from pathlib import Path

import structlog

from adapters.google.campaign_provisioning import GoogleAdsCampaignAdapter
from adapters.google.client import GoogleAdsClient
from config.settings import GoogleAdsSettings, ProvisioningSettings
from core.models.batch_result import BatchResult
from core.models.provisioning import CampaignDefinitions
from core.provisioning.ad_copy import AdCopyProfile
from core.provisioning.definition_parser import load_campaign_definitions
from core.provisioning.orchestrator import ProvisioningOrchestrator
from core.provisioning.ports import CampaignPlatform, MirrorStore
from db.mirror_repository import SqlMirrorStore
from exceptions.custom_exceptions import ConfigurationException

logger = structlog.get_logger(__name__)


class CampaignProvisioningService:
    """Loads the definition document and runs one provisioning batch."""

    def __init__(
        self,
        platform: CampaignPlatform,
        mirror: MirrorStore,
        settings: ProvisioningSettings,
        ad_copy_profile: AdCopyProfile = AdCopyProfile(),
    ):
        self.settings = settings
        self.orchestrator = ProvisioningOrchestrator(
            platform,
            mirror,
            ad_copy_profile,
            remote_call_timeout=settings.remote_call_timeout,
            max_concurrent_campaigns=settings.max_concurrent_campaigns,
            default_cpc_bid_micros=settings.default_cpc_bid_micros,
        )

    @classmethod
    def for_google_ads(
        cls,
        google_settings: GoogleAdsSettings,
        settings: ProvisioningSettings,
        engine,
        ad_copy_profile: AdCopyProfile = AdCopyProfile(),
    ) -> "CampaignProvisioningService":
        platform = GoogleAdsCampaignAdapter(GoogleAdsClient(google_settings))
        return cls(platform, SqlMirrorStore(engine), settings, ad_copy_profile)

    def load_definitions(self) -> CampaignDefinitions:
        path = Path(self.settings.definitions_path)
        if not path.is_file():
            raise ConfigurationException(
                f"Campaign definitions file not found: {path}",
                details={"path": str(path)},
            )
        definitions = load_campaign_definitions(path, strict=self.settings.strict_definitions)
        for row in definitions.skipped_rows:
            logger.warning(
                "Skipped definition row",
                section=row.section,
                line=row.line_number,
                cells=row.cells,
                required=row.required,
            )
        return definitions

    async def provision(self) -> BatchResult:
        definitions = self.load_definitions()
        if not definitions.campaigns:
            logger.warning("No campaigns to provision", path=self.settings.definitions_path)
            return BatchResult()

        result = await self.orchestrator.run(definitions)
        log_batch_result(result)
        return result


def log_batch_result(result: BatchResult) -> None:
    """Emit the run summary as log events; the result itself is the record."""
    logger.info("=" * 60)
    logger.info(
        "Provisioning summary",
        total=len(result.outcomes),
        succeeded=len(result.succeeded),
        failed=len(result.failed),
    )
    logger.info("=" * 60)

    for outcome in result.succeeded:
        logger.info(
            "Campaign succeeded",
            campaign=outcome.campaign_name,
            resource_name=outcome.campaign_resource_name,
            ad_groups=outcome.ad_groups.to_dict(),
            keywords=outcome.keywords.to_dict(),
            ads=outcome.ads.to_dict(),
            warnings=len(outcome.warnings),
        )
        for warning in outcome.warnings:
            logger.warning("Campaign warning", campaign=outcome.campaign_name, warning=warning)

    for outcome in result.failed:
        logger.warning(
            "Campaign failed",
            campaign=outcome.campaign_name,
            state=outcome.state.value,
            error=outcome.error,
        )
