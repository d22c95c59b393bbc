from dataclasses import dataclass, field
from typing import Dict, FrozenSet

from core.models.provisioning import (
    DESCRIPTION_MAX_COUNT,
    DESCRIPTION_MAX_LENGTH,
    DESCRIPTION_MIN_COUNT,
    HEADLINE_MAX_COUNT,
    HEADLINE_MAX_LENGTH,
    HEADLINE_MIN_COUNT,
    KEYWORD_MAX_LENGTH,
    PATH_MAX_LENGTH,
    URL_MAX_LENGTH,
    MatchType,
)

# Source for System limits: https://developers.google.com/google-ads/api/docs/best-practices/system-limits


@dataclass(frozen=True)
class _HeadlineConfig:
    """Constraints for RSA headlines."""

    # Source: https://support.google.com/google-ads/answer/7684791
    MAX_LENGTH: int = HEADLINE_MAX_LENGTH
    MIN_COUNT: int = HEADLINE_MIN_COUNT
    MAX_COUNT: int = HEADLINE_MAX_COUNT


@dataclass(frozen=True)
class _DescriptionConfig:
    """Constraints for RSA descriptions."""

    # Source: https://support.google.com/google-ads/answer/7684791
    MAX_LENGTH: int = DESCRIPTION_MAX_LENGTH
    MIN_COUNT: int = DESCRIPTION_MIN_COUNT
    MAX_COUNT: int = DESCRIPTION_MAX_COUNT


@dataclass(frozen=True)
class _DisplayPathConfig:
    # Source: https://developers.google.com/google-ads/api/reference/rpc/v21/ResponsiveSearchAdInfo
    MAX_LENGTH: int = PATH_MAX_LENGTH


@dataclass(frozen=True)
class _KeywordConfig:
    """Constraints for Keyword criteria."""

    # Source: https://developers.google.com/google-ads/api/reference/rpc/v21/KeywordInfo
    MAX_LENGTH: int = KEYWORD_MAX_LENGTH
    VALID_MATCH_TYPES: FrozenSet[str] = field(
        default_factory=lambda: frozenset(m.value for m in MatchType)
    )


@dataclass(frozen=True)
class _CampaignConfig:
    """Fixed values for every campaign this service creates."""

    ADVERTISING_CHANNEL_TYPE: str = "SEARCH"
    AD_GROUP_TYPE: str = "SEARCH_STANDARD"
    BUDGET_DELIVERY_METHOD: str = "STANDARD"
    # Required on campaign create since v19.2
    EU_POLITICAL_ADVERTISING: str = "DOES_NOT_CONTAIN_EU_POLITICAL_ADVERTISING"


@dataclass(frozen=True)
class _ConversionActionConfig:
    # Source: https://developers.google.com/google-ads/api/reference/rpc/v21/AttributionModelEnum.AttributionModel
    TYPE: str = "WEBPAGE"
    ATTRIBUTION_MODELS: Dict[str, str] = field(
        default_factory=lambda: {
            "DATA_DRIVEN": "GOOGLE_SEARCH_ATTRIBUTION_DATA_DRIVEN",
            "LAST_CLICK": "GOOGLE_ADS_LAST_CLICK",
            "FIRST_CLICK": "GOOGLE_SEARCH_ATTRIBUTION_FIRST_CLICK",
            "LINEAR": "GOOGLE_SEARCH_ATTRIBUTION_LINEAR",
            "TIME_DECAY": "GOOGLE_SEARCH_ATTRIBUTION_TIME_DECAY",
            "POSITION_BASED": "GOOGLE_SEARCH_ATTRIBUTION_POSITION_BASED",
        }
    )


@dataclass(frozen=True)
class GoogleAdsMutationConfig:
    """Centralized, immutable configuration for Google Ads mutations."""

    HEADLINES: _HeadlineConfig = _HeadlineConfig()
    DESCRIPTIONS: _DescriptionConfig = _DescriptionConfig()
    PATHS: _DisplayPathConfig = _DisplayPathConfig()
    KEYWORDS: _KeywordConfig = field(default_factory=_KeywordConfig)
    CAMPAIGNS: _CampaignConfig = _CampaignConfig()
    CONVERSION_ACTIONS: _ConversionActionConfig = field(
        default_factory=_ConversionActionConfig
    )

    URL_MAX_LENGTH: int = URL_MAX_LENGTH


# Global immutable configuration instance
CONFIG = GoogleAdsMutationConfig()
