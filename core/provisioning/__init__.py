from .ad_copy import AdCopyProfile, build_ad_copy, truncate_to_limit
from .conversion_label import extract_label, extract_label_from_snippets
from .definition_parser import load_campaign_definitions, parse_campaign_definitions
from .orchestrator import ProvisioningOrchestrator, to_micros
from .ports import CampaignMirror, CampaignPlatform, MirrorStore

__all__ = [
    "AdCopyProfile",
    "build_ad_copy",
    "truncate_to_limit",
    "extract_label",
    "extract_label_from_snippets",
    "load_campaign_definitions",
    "parse_campaign_definitions",
    "ProvisioningOrchestrator",
    "to_micros",
    "CampaignMirror",
    "CampaignPlatform",
    "MirrorStore",
]
