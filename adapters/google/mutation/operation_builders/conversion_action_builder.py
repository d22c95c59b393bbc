from typing import Any, Dict, List

from adapters.google.mutation.mutation_config import CONFIG
from core.models.provisioning import ConversionActionConfig


class ConversionActionBuilder:
    def build_conversion_action_ops(
        self, config: ConversionActionConfig
    ) -> List[Dict[str, Any]]:
        attribution_model = CONFIG.CONVERSION_ACTIONS.ATTRIBUTION_MODELS[
            config.attribution_model.value
        ]
        return [
            {
                "create": {
                    "name": config.name,
                    "category": config.category.value,
                    "type": CONFIG.CONVERSION_ACTIONS.TYPE,
                    "status": config.status.value,
                    "countingType": config.counting_type.value,
                    "viewThroughLookbackWindowDays": config.view_through_lookback_window_days,
                    "clickThroughLookbackWindowDays": config.click_through_lookback_window_days,
                    "attributionModelSettings": {"attributionModel": attribution_model},
                    "valueSettings": {
                        "defaultValue": config.value,
                        "alwaysUseDefaultValue": True,
                    },
                }
            }
        ]
