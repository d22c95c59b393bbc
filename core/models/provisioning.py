from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from pydantic import BaseModel, ConfigDict, Field

from exceptions.custom_exceptions import AdCopyValidationException

# Single source of truth for Google Ads text limits. The mutation layer in
# 'adapters' re-exports these through its CONFIG object.
# Source: https://support.google.com/google-ads/answer/7684791

HEADLINE_MAX_LENGTH = 30
HEADLINE_MIN_COUNT = 3
HEADLINE_MAX_COUNT = 15
DESCRIPTION_MAX_LENGTH = 90
DESCRIPTION_MIN_COUNT = 2
DESCRIPTION_MAX_COUNT = 4
PATH_MAX_LENGTH = 15
KEYWORD_MAX_LENGTH = 80
URL_MAX_LENGTH = 2048

MICROS_PER_UNIT = 1_000_000


class BiddingStrategy(str, Enum):
    MANUAL_CPC = "MANUAL_CPC"
    MAXIMIZE_CONVERSIONS = "MAXIMIZE_CONVERSIONS"
    TARGET_CPA = "TARGET_CPA"


class MatchType(str, Enum):
    EXACT = "EXACT"
    PHRASE = "PHRASE"
    BROAD = "BROAD"


class CampaignKind(str, Enum):
    BRAND = "BRAND"
    LOCATION_TARGETED = "LOCATION_TARGETED"
    CALLS_ONLY = "CALLS_ONLY"


class ResourceStatus(str, Enum):
    ENABLED = "ENABLED"
    PAUSED = "PAUSED"


class ConversionCategory(str, Enum):
    LEAD = "LEAD"
    PURCHASE = "PURCHASE"
    SIGNUP = "SIGNUP"
    PAGE_VIEW = "PAGE_VIEW"
    DOWNLOAD = "DOWNLOAD"


class CountingType(str, Enum):
    ONE_PER_CLICK = "ONE_PER_CLICK"
    MANY_PER_CLICK = "MANY_PER_CLICK"


class AttributionModel(str, Enum):
    DATA_DRIVEN = "DATA_DRIVEN"
    LAST_CLICK = "LAST_CLICK"
    FIRST_CLICK = "FIRST_CLICK"
    LINEAR = "LINEAR"
    TIME_DECAY = "TIME_DECAY"
    POSITION_BASED = "POSITION_BASED"


class ConversionActionStatus(str, Enum):
    ENABLED = "ENABLED"
    REMOVED = "REMOVED"


# ---------------------------------------------------------------------------
# Parsed definitions (read-only inputs for one run)
# ---------------------------------------------------------------------------


class CampaignDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    campaign_type: str = ""
    daily_budget: float = 0.0
    bidding_strategy: BiddingStrategy = BiddingStrategy.MAXIMIZE_CONVERSIONS
    networks: str = ""
    languages: str = ""
    locations: str = ""
    kind: CampaignKind = CampaignKind.LOCATION_TARGETED


class AdGroupDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    campaign_name: str
    name: str
    final_url: str


class KeywordDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    campaign_name: str
    ad_group_name: str
    text: str
    match_type: MatchType = MatchType.EXACT
    final_url: str = ""


class SkippedRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    section: str
    line_number: int
    cells: int
    required: int


class CampaignDefinitions(BaseModel):
    """Everything one definition document yields, in input order."""

    model_config = ConfigDict(frozen=True)

    campaigns: Tuple[CampaignDefinition, ...] = ()
    ad_groups: Tuple[AdGroupDefinition, ...] = ()
    keywords: Tuple[KeywordDefinition, ...] = ()
    skipped_rows: Tuple[SkippedRow, ...] = ()

    def ad_groups_for(self, campaign_name: str) -> List[AdGroupDefinition]:
        return [ag for ag in self.ad_groups if ag.campaign_name == campaign_name]

    def keywords_for(
        self, campaign_name: str, ad_group_name: str
    ) -> List[KeywordDefinition]:
        return [
            kw
            for kw in self.keywords
            if kw.campaign_name == campaign_name and kw.ad_group_name == ad_group_name
        ]


# ---------------------------------------------------------------------------
# Remote results
# ---------------------------------------------------------------------------


def extract_numeric_id(resource_name: str) -> str:
    """'customers/1/adGroupAds/22~33' -> '33', 'customers/1/campaigns/9' -> '9'."""
    tail = resource_name.rstrip("/").split("/")[-1] if resource_name else ""
    return tail.split("~")[-1]


@dataclass(frozen=True)
class CreatedResource:
    resource_name: str
    id: str

    @classmethod
    def from_resource_name(cls, resource_name: str) -> "CreatedResource":
        if not resource_name:
            raise ValueError("resource_name is required")
        return cls(resource_name=resource_name, id=extract_numeric_id(resource_name))


@dataclass(frozen=True)
class CreatedKeyword(CreatedResource):
    text: str = ""
    match_type: MatchType = MatchType.EXACT


@dataclass(frozen=True)
class KeywordSpec:
    text: str
    match_type: MatchType
    final_url: str = ""


@dataclass(frozen=True)
class AdCopySet:
    """Responsive search ad text that already satisfies platform limits."""

    headlines: Tuple[str, ...]
    descriptions: Tuple[str, ...]
    path1: str = ""
    path2: str = ""

    def __post_init__(self):
        object.__setattr__(self, "headlines", tuple(self.headlines))
        object.__setattr__(self, "descriptions", tuple(self.descriptions))
        problems = ad_copy_problems(
            self.headlines, self.descriptions, self.path1, self.path2
        )
        if problems:
            raise AdCopyValidationException(
                "Ad copy violates platform limits", details={"errors": problems}
            )


def ad_copy_problems(
    headlines, descriptions, path1: str = "", path2: str = ""
) -> List[str]:
    problems = []
    if not HEADLINE_MIN_COUNT <= len(headlines) <= HEADLINE_MAX_COUNT:
        problems.append(
            f"{len(headlines)} headlines (must be {HEADLINE_MIN_COUNT}-{HEADLINE_MAX_COUNT})"
        )
    if not DESCRIPTION_MIN_COUNT <= len(descriptions) <= DESCRIPTION_MAX_COUNT:
        problems.append(
            f"{len(descriptions)} descriptions (must be {DESCRIPTION_MIN_COUNT}-{DESCRIPTION_MAX_COUNT})"
        )
    for text in headlines:
        if not text or len(text) > HEADLINE_MAX_LENGTH:
            problems.append(f"Headline length {len(text)} out of range: {text!r}")
    for text in descriptions:
        if not text or len(text) > DESCRIPTION_MAX_LENGTH:
            problems.append(f"Description length {len(text)} out of range: {text!r}")
    for label, path in (("path1", path1), ("path2", path2)):
        if path and len(path) > PATH_MAX_LENGTH:
            problems.append(f"{label} too long ({len(path)} > {PATH_MAX_LENGTH})")
    if path2 and not path1:
        problems.append("path2 requires path1")
    return problems


# ---------------------------------------------------------------------------
# Conversion actions
# ---------------------------------------------------------------------------


class ConversionActionConfig(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    category: ConversionCategory = ConversionCategory.LEAD
    value: float = Field(0, ge=0)
    counting_type: CountingType = CountingType.ONE_PER_CLICK
    attribution_model: AttributionModel = AttributionModel.DATA_DRIVEN
    view_through_lookback_window_days: int = Field(30, ge=1, le=30)
    click_through_lookback_window_days: int = Field(90, ge=1, le=90)
    status: ConversionActionStatus = ConversionActionStatus.ENABLED


class ConversionActionResult(BaseModel):
    resource_name: str
    id: str
    name: str
    category: str = ""
    status: str = ""
    label: str = ""
