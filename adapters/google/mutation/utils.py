from typing import Any, Dict, Iterable, List, Optional

import structlog

from core.models.provisioning import BiddingStrategy

logger = structlog.get_logger(__name__)


def text_assets(texts: Iterable[str]) -> List[Dict[str, Any]]:
    """Headlines/descriptions in the REST AdTextAsset shape."""
    return [{"text": text} for text in texts]


def network_settings(networks: str) -> Dict[str, bool]:
    """Map the free-text networks column ("Google Search, Search Partners") to flags."""
    lowered = (networks or "").lower()
    return {
        "targetGoogleSearch": True,
        "targetSearchNetwork": "partner" in lowered,
        "targetContentNetwork": "display" in lowered,
        "targetPartnerSearchNetwork": False,
    }


def bidding_fields(
    strategy: BiddingStrategy, target_cpa_micros: Optional[int] = None
) -> Dict[str, Any]:
    """Campaign bidding oneof for the given strategy."""
    if strategy == BiddingStrategy.MANUAL_CPC:
        return {"manualCpc": {}}
    if strategy == BiddingStrategy.TARGET_CPA:
        return {"targetCpa": {"targetCpaMicros": target_cpa_micros} if target_cpa_micros else {}}
    if strategy != BiddingStrategy.MAXIMIZE_CONVERSIONS:
        logger.warning("Unknown bidding strategy, using maximizeConversions", strategy=strategy)
    return {"maximizeConversions": {}}


def resource_names(results: List[Dict[str, Any]]) -> List[str]:
    """resourceName of every mutate result, in request order."""
    return [result.get("resourceName", "") for result in results]
