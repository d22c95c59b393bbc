"""Interfaces the orchestrator is built against.

``CampaignPlatform`` is the remote advertising API; ``MirrorStore`` is the local
database that echoes every created resource. Both are injected so the
pipeline can run against fakes.
"""

from typing import AsyncContextManager, List, Optional, Protocol, Sequence

from core.models.provisioning import (
    AdCopySet,
    BiddingStrategy,
    CampaignDefinition,
    ConversionActionConfig,
    ConversionActionResult,
    CreatedKeyword,
    CreatedResource,
    KeywordSpec,
    ResourceStatus,
)


class CampaignPlatform(Protocol):
    async def create_campaign_budget(self, name: str, amount_micros: int) -> str:
        ...

    async def create_campaign(
        self,
        name: str,
        budget_resource_name: str,
        bidding_strategy: BiddingStrategy,
        status: ResourceStatus = ResourceStatus.PAUSED,
        networks: str = "",
        target_cpa_micros: Optional[int] = None,
    ) -> CreatedResource:
        ...

    async def create_ad_group(
        self,
        name: str,
        campaign_resource_name: str,
        status: ResourceStatus = ResourceStatus.ENABLED,
        cpc_bid_micros: Optional[int] = None,
    ) -> CreatedResource:
        ...

    async def add_keywords(
        self, ad_group_resource_name: str, keywords: Sequence[KeywordSpec]
    ) -> List[CreatedKeyword]:
        ...

    async def create_responsive_search_ad(
        self, ad_group_resource_name: str, ad_copy: AdCopySet, final_url: str
    ) -> CreatedResource:
        ...

    async def create_conversion_action(
        self, config: ConversionActionConfig
    ) -> ConversionActionResult:
        ...

    async def list_conversion_actions(self) -> List[ConversionActionResult]:
        ...

    async def get_conversion_action(
        self, conversion_action_id: str
    ) -> Optional[ConversionActionResult]:
        ...


class CampaignMirror(Protocol):
    """Insert-only writer for one campaign's rows."""

    async def record_campaign(
        self,
        definition: CampaignDefinition,
        resource: CreatedResource,
        budget_amount_micros: int,
        status: ResourceStatus,
    ) -> int:
        ...

    async def record_ad_group(
        self,
        campaign_row_id: int,
        name: str,
        resource: CreatedResource,
        cpc_bid_micros: Optional[int] = None,
    ) -> int:
        ...

    async def record_keywords(
        self, ad_group_row_id: int, keywords: Sequence[CreatedKeyword]
    ) -> List[int]:
        ...

    async def record_ad(
        self,
        ad_group_row_id: int,
        resource: CreatedResource,
        ad_copy: AdCopySet,
        final_url: str,
    ) -> int:
        ...


class MirrorStore(Protocol):
    def campaign_session(self) -> AsyncContextManager[CampaignMirror]:
        ...
