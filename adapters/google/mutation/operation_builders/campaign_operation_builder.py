from typing import Any, Dict, List, Optional

import structlog

from adapters.google.mutation import utils
from adapters.google.mutation.mutation_config import CONFIG
from core.models.provisioning import BiddingStrategy, ResourceStatus
from exceptions.custom_exceptions import BusinessValidationException

logger = structlog.get_logger(__name__)


class CampaignOperationBuilder:
    """Create operations for the budget, campaign and ad group levels."""

    def build_budget_ops(self, name: str, amount_micros: int) -> List[Dict[str, Any]]:
        if amount_micros <= 0:
            raise BusinessValidationException(
                "Campaign budget must be greater than 0",
                details={"budget_name": name, "amount_micros": amount_micros},
            )
        return [
            {
                "create": {
                    "name": name,
                    "amountMicros": amount_micros,
                    "deliveryMethod": CONFIG.CAMPAIGNS.BUDGET_DELIVERY_METHOD,
                    "explicitlyShared": False,
                }
            }
        ]

    def build_campaign_ops(
        self,
        name: str,
        budget_resource_name: str,
        bidding_strategy: BiddingStrategy,
        status: ResourceStatus = ResourceStatus.PAUSED,
        networks: str = "",
        target_cpa_micros: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        campaign = {
            "name": name,
            "status": ResourceStatus(status).value,
            "advertisingChannelType": CONFIG.CAMPAIGNS.ADVERTISING_CHANNEL_TYPE,
            "campaignBudget": budget_resource_name,
            "networkSettings": utils.network_settings(networks),
            "containsEuPoliticalAdvertising": CONFIG.CAMPAIGNS.EU_POLITICAL_ADVERTISING,
            **utils.bidding_fields(bidding_strategy, target_cpa_micros),
        }
        logger.debug(
            "campaign_operation_built",
            name=name,
            bidding=bidding_strategy.value,
            networks=campaign["networkSettings"],
        )
        return [{"create": campaign}]

    def build_ad_group_ops(
        self,
        name: str,
        campaign_resource_name: str,
        status: ResourceStatus = ResourceStatus.ENABLED,
        cpc_bid_micros: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        ad_group = {
            "name": name,
            "campaign": campaign_resource_name,
            "status": ResourceStatus(status).value,
            "type": CONFIG.CAMPAIGNS.AD_GROUP_TYPE,
        }
        if cpc_bid_micros:
            ad_group["cpcBidMicros"] = cpc_bid_micros
        return [{"create": ad_group}]
