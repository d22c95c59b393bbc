"""Parse the pipe-table campaign build document into definition records.

The document is markdown: a "Campaigns", an "Ad Groups" and a "Keywords"
section, each holding a pipe-delimited table. Anything after those sections
(RSAs, sitelinks, notes) is not read.
"""

import re
from pathlib import Path
from typing import List, Optional

import structlog

from core.models.provisioning import (
    AdGroupDefinition,
    BiddingStrategy,
    CampaignDefinition,
    CampaignDefinitions,
    CampaignKind,
    KeywordDefinition,
    MatchType,
    SkippedRow,
)
from exceptions.custom_exceptions import DefinitionParseException

logger = structlog.get_logger(__name__)

CAMPAIGNS = "campaigns"
AD_GROUPS = "ad groups"
KEYWORDS = "keywords"

_SECTION_PATTERNS = (
    (re.compile(r"^campaigns\b", re.IGNORECASE), CAMPAIGNS),
    (re.compile(r"^ad[\s_-]?groups\b", re.IGNORECASE), AD_GROUPS),
    (re.compile(r"^keywords\b", re.IGNORECASE), KEYWORDS),
)

MIN_CELLS = {CAMPAIGNS: 6, AD_GROUPS: 3, KEYWORDS: 4}

HEADER_TOKENS = frozenset(
    {"campaign", "campaign name", "ad group", "ad group name", "keyword", "name"}
)

_HEADING = re.compile(r"^#{1,6}\s*(.+?)\s*#*$")
_SEPARATOR_CELL = re.compile(r"^:?-+:?$")
_LEADING_NUMBER = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)")

_BIDDING_ALIASES = {
    "MANUAL_CPC": BiddingStrategy.MANUAL_CPC,
    "MAXIMIZE_CONVERSIONS": BiddingStrategy.MAXIMIZE_CONVERSIONS,
    "MAX_CONVERSIONS": BiddingStrategy.MAXIMIZE_CONVERSIONS,
    "TARGET_CPA": BiddingStrategy.TARGET_CPA,
    "TCPA": BiddingStrategy.TARGET_CPA,
}


def parse_campaign_definitions(raw_text: str, strict: bool = False) -> CampaignDefinitions:
    """Turn a definition document into campaigns, ad groups and keywords.

    Rows with fewer cells than their section needs are dropped and recorded in
    ``skipped_rows``. With ``strict`` they raise ``DefinitionParseException``.
    """
    section: Optional[str] = None
    campaigns: List[CampaignDefinition] = []
    ad_groups: List[AdGroupDefinition] = []
    keywords: List[KeywordDefinition] = []
    skipped: List[SkippedRow] = []

    for line_number, raw_line in enumerate((raw_text or "").splitlines(), start=1):
        line = raw_line.strip()

        heading = _HEADING.match(line)
        if heading:
            name = _section_name(heading.group(1))
            if name:
                section = name
                continue
            if section is not None:
                logger.debug("Stopping at unrelated section", heading=heading.group(1), line=line_number)
                break
            continue

        if section is None or not line.startswith("|"):
            continue

        cells = [cell.strip() for cell in line.split("|")]
        cells = [cell for cell in cells if cell]
        if not cells or _is_separator(cells) or cells[0].lower() in HEADER_TOKENS:
            continue

        required = MIN_CELLS[section]
        if len(cells) < required:
            row = SkippedRow(section=section, line_number=line_number, cells=len(cells), required=required)
            if strict:
                raise DefinitionParseException(
                    f"Row on line {line_number} in '{section}' has {len(cells)} cells, needs {required}",
                    details=row.model_dump(),
                )
            skipped.append(row)
            continue

        if section == CAMPAIGNS:
            campaigns.append(_campaign_from_cells(cells))
        elif section == AD_GROUPS:
            ad_groups.append(
                AdGroupDefinition(campaign_name=cells[0], name=cells[1], final_url=cells[2])
            )
        else:
            keywords.append(
                KeywordDefinition(
                    campaign_name=cells[0],
                    ad_group_name=cells[1],
                    text=cells[2],
                    match_type=parse_match_type(cells[3]),
                    final_url=cells[4] if len(cells) > 4 else "",
                )
            )

    if skipped:
        logger.warning(
            "Dropped short definition rows",
            count=len(skipped),
            lines=[row.line_number for row in skipped],
        )

    return CampaignDefinitions(
        campaigns=tuple(campaigns),
        ad_groups=tuple(ad_groups),
        keywords=tuple(keywords),
        skipped_rows=tuple(skipped),
    )


def load_campaign_definitions(path, strict: bool = False) -> CampaignDefinitions:
    text = Path(path).read_text(encoding="utf-8")
    definitions = parse_campaign_definitions(text, strict=strict)
    logger.info(
        "Parsed campaign definitions",
        path=str(path),
        campaigns=len(definitions.campaigns),
        ad_groups=len(definitions.ad_groups),
        keywords=len(definitions.keywords),
        skipped_rows=len(definitions.skipped_rows),
    )
    return definitions


def parse_budget(value: str) -> float:
    """Permissive number parse: '$1,250.50/day' -> 1250.5, 'TBD' -> 0."""
    cleaned = (value or "").strip().lstrip("$€£").replace(",", "").strip()
    match = _LEADING_NUMBER.match(cleaned)
    return float(match.group(0)) if match else 0.0


def parse_bidding_strategy(value: str) -> BiddingStrategy:
    key = re.sub(r"[\s\-]+", "_", (value or "").strip().upper())
    return _BIDDING_ALIASES.get(key, BiddingStrategy.MAXIMIZE_CONVERSIONS)


def parse_match_type(value: str) -> MatchType:
    normalized = (value or "").strip()
    if normalized.startswith("[") and normalized.endswith("]"):
        return MatchType.EXACT
    if len(normalized) > 1 and normalized[0] == normalized[-1] == '"':
        return MatchType.PHRASE
    try:
        return MatchType(normalized.upper())
    except ValueError:
        return MatchType.EXACT


def campaign_kind(name: str, campaign_type: str = "") -> CampaignKind:
    haystack = f"{campaign_type} {name}".lower()
    if "calls only" in haystack or "call only" in haystack:
        return CampaignKind.CALLS_ONLY
    if "brand" in haystack:
        return CampaignKind.BRAND
    return CampaignKind.LOCATION_TARGETED


def _campaign_from_cells(cells: List[str]) -> CampaignDefinition:
    return CampaignDefinition(
        name=cells[0],
        campaign_type=cells[1],
        daily_budget=parse_budget(cells[2]),
        bidding_strategy=parse_bidding_strategy(cells[3]),
        networks=cells[4],
        languages=cells[5],
        locations=cells[6] if len(cells) > 6 else "",
        kind=campaign_kind(cells[0], cells[1]),
    )


def _section_name(heading: str) -> Optional[str]:
    for pattern, name in _SECTION_PATTERNS:
        if pattern.match(heading.strip()):
            return name
    return None


def _is_separator(cells: List[str]) -> bool:
    return all(_SEPARATOR_CELL.match(cell) for cell in cells)
