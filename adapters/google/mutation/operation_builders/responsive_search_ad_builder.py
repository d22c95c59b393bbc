import structlog
from typing import List, Dict, Any

from adapters.google.mutation import utils
from adapters.google.mutation.mutation_validator import MutationValidator
from core.models.provisioning import AdCopySet, ResourceStatus

logger = structlog.get_logger(__name__)


class ResponsiveSearchAdBuilder:
    def __init__(self):
        self.validator = MutationValidator()

    def build_ad_ops(
        self,
        ad_group_resource_name: str,
        ad_copy: AdCopySet,
        final_url: str,
        status: ResourceStatus = ResourceStatus.ENABLED,
    ) -> List[Dict[str, Any]]:
        self.validator.ensure_valid_ad(ad_copy, final_url)

        responsive_search_ad = {
            "headlines": utils.text_assets(ad_copy.headlines),
            "descriptions": utils.text_assets(ad_copy.descriptions),
        }
        if ad_copy.path1:
            responsive_search_ad["path1"] = ad_copy.path1
            if ad_copy.path2:
                responsive_search_ad["path2"] = ad_copy.path2

        logger.info(
            "responsive_search_ad_operation_built",
            headlines=len(ad_copy.headlines),
            descriptions=len(ad_copy.descriptions),
        )
        return [
            {
                "create": {
                    "adGroup": ad_group_resource_name,
                    "status": ResourceStatus(status).value,
                    "ad": {
                        "finalUrls": [final_url],
                        "responsiveSearchAd": responsive_search_ad,
                    },
                }
            }
        ]
