from pathlib import Path

import pytest

from core.models.provisioning import BiddingStrategy, CampaignKind, MatchType
from core.provisioning.definition_parser import (
    campaign_kind,
    load_campaign_definitions,
    parse_bidding_strategy,
    parse_budget,
    parse_campaign_definitions,
    parse_match_type,
)
from exceptions.custom_exceptions import DefinitionParseException

BUILD_SHEET = """
# Q3 build sheet

Some notes for the account team.

## Campaigns

| Campaign | Type | Budget | Bidding | Networks | Languages | Locations |
|---|---|---|---|---|---|---|
| Brand Search | Search - Brand | $50 | Maximize Conversions | Google Search | English | Colorado |
| Denver Local | Search | 1,250.50 | Target CPA | Google Search, Search Partners | English | Denver, CO |

## Ad Groups

| Campaign | Ad Group | Final URL |
|:---|:---:|---:|
| Brand Search | Colorado — Brand | https://example.com/ |
| Denver Local | Denver — Assisted Living | https://example.com/al |
| Denver Local | Denver — Memory Care | https://example.com/mc |
| Denver Local | Denver — Independent Living | https://example.com/il |
| Denver Local | Denver — Respite Care | https://example.com/rc |

## Keywords

| Campaign | Ad Group | Keyword | Match |
|---|---|---|---|
| Brand Search | Colorado — Brand | brand name | Exact |
| Brand Search | Colorado — Brand | brand senior living | Phrase |
| Denver Local | Denver — Assisted Living | assisted living denver | Exact |
| Denver Local | Denver — Assisted Living | assisted living near me | [exact] |
| Denver Local | Denver — Memory Care | memory care denver | Phrase |
| Denver Local | Denver — Memory Care | dementia care denver | "phrase" |
| Denver Local | Denver — Independent Living | independent living denver | Broad |
| Denver Local | Denver — Independent Living | 55+ living denver | broad |
| Denver Local | Denver — Respite Care | respite care denver | Exact | https://example.com/rc?kw=1 |
| Denver Local | Denver — Respite Care | short term stay denver | Unknown |

## Sitelinks

| Campaign | Text | URL |
|---|---|---|
| Brand Search | Schedule a Tour | https://example.com/tour |
"""


def test_parses_expected_row_counts_and_owners():
    definitions = parse_campaign_definitions(BUILD_SHEET)

    assert len(definitions.campaigns) == 2
    assert len(definitions.ad_groups) == 5
    assert len(definitions.keywords) == 10
    assert definitions.skipped_rows == ()

    campaign_names = {c.name for c in definitions.campaigns}
    assert {ag.campaign_name for ag in definitions.ad_groups} <= campaign_names
    for kw in definitions.keywords:
        assert kw.ad_group_name in {
            ag.name for ag in definitions.ad_groups_for(kw.campaign_name)
        }


def test_preserves_input_order():
    definitions = parse_campaign_definitions(BUILD_SHEET)

    assert [c.name for c in definitions.campaigns] == ["Brand Search", "Denver Local"]
    assert [ag.name for ag in definitions.ad_groups_for("Denver Local")] == [
        "Denver — Assisted Living",
        "Denver — Memory Care",
        "Denver — Independent Living",
        "Denver — Respite Care",
    ]


def test_campaign_columns_are_mapped():
    brand, local = parse_campaign_definitions(BUILD_SHEET).campaigns

    assert brand.daily_budget == 50.0
    assert brand.bidding_strategy == BiddingStrategy.MAXIMIZE_CONVERSIONS
    assert brand.kind == CampaignKind.BRAND
    assert brand.locations == "Colorado"

    assert local.daily_budget == 1250.5
    assert local.bidding_strategy == BiddingStrategy.TARGET_CPA
    assert local.networks == "Google Search, Search Partners"
    assert local.kind == CampaignKind.LOCATION_TARGETED


def test_keyword_match_types_and_url_override():
    definitions = parse_campaign_definitions(BUILD_SHEET)
    by_text = {kw.text: kw for kw in definitions.keywords}

    assert by_text["brand senior living"].match_type == MatchType.PHRASE
    assert by_text["assisted living near me"].match_type == MatchType.EXACT
    assert by_text["dementia care denver"].match_type == MatchType.PHRASE
    assert by_text["55+ living denver"].match_type == MatchType.BROAD
    assert by_text["short term stay denver"].match_type == MatchType.EXACT
    assert by_text["respite care denver"].final_url == "https://example.com/rc?kw=1"
    assert by_text["brand name"].final_url == ""


def test_stops_at_first_unrelated_section():
    definitions = parse_campaign_definitions(BUILD_SHEET)

    assert all(kw.text != "Schedule a Tour" for kw in definitions.keywords)
    assert len(definitions.keywords) == 10


def test_rows_after_unrelated_heading_are_ignored_even_if_sections_repeat():
    text = """
## Campaigns
| Only One | Search | 10 | Manual CPC | Google Search | English |
## Ads
| Two | Search | 10 | Manual CPC | Google Search | English |
## Campaigns
| Three | Search | 10 | Manual CPC | Google Search | English |
"""
    definitions = parse_campaign_definitions(text)

    assert [c.name for c in definitions.campaigns] == ["Only One"]


def test_short_rows_are_skipped_and_recorded():
    text = """
## Campaigns
| Good | Search | 10 | Manual CPC | Google Search | English |
| Short | Search | 10 |
## Ad Groups
| Good | Group |
"""
    definitions = parse_campaign_definitions(text)

    assert [c.name for c in definitions.campaigns] == ["Good"]
    assert definitions.ad_groups == ()
    assert [(r.section, r.line_number, r.cells, r.required) for r in definitions.skipped_rows] == [
        ("campaigns", 4, 3, 6),
        ("ad groups", 6, 2, 3),
    ]


def test_strict_mode_rejects_short_rows():
    text = "## Keywords\n| Campaign A | Group A | keyword |\n"

    with pytest.raises(DefinitionParseException) as exc_info:
        parse_campaign_definitions(text, strict=True)

    assert exc_info.value.details["line_number"] == 2
    assert exc_info.value.details["required"] == 4


def test_text_outside_sections_and_empty_input():
    assert parse_campaign_definitions("").campaigns == ()
    assert parse_campaign_definitions("| a | b | c | d | e | f |").campaigns == ()


def test_load_reads_utf8_file(tmp_path: Path):
    path = tmp_path / "defs.md"
    path.write_text(BUILD_SHEET, encoding="utf-8")

    definitions = load_campaign_definitions(path)

    assert definitions.ad_groups[0].name == "Colorado — Brand"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("50", 50.0),
        ("$50", 50.0),
        ("1,000", 1000.0),
        ("$75.50/day", 75.5),
        ("€20", 20.0),
        ("TBD", 0.0),
        ("", 0.0),
    ],
)
def test_parse_budget(raw, expected):
    assert parse_budget(raw) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Manual CPC", BiddingStrategy.MANUAL_CPC),
        ("manual-cpc", BiddingStrategy.MANUAL_CPC),
        ("Maximize Conversions", BiddingStrategy.MAXIMIZE_CONVERSIONS),
        ("Target CPA", BiddingStrategy.TARGET_CPA),
        ("tCPA", BiddingStrategy.TARGET_CPA),
        ("Enhanced something", BiddingStrategy.MAXIMIZE_CONVERSIONS),
    ],
)
def test_parse_bidding_strategy(raw, expected):
    assert parse_bidding_strategy(raw) == expected


def test_parse_match_type_defaults_to_exact():
    assert parse_match_type("phrase") == MatchType.PHRASE
    assert parse_match_type("BROAD") == MatchType.BROAD
    assert parse_match_type("") == MatchType.EXACT
    assert parse_match_type("modified broad") == MatchType.EXACT


def test_campaign_kind():
    assert campaign_kind("Stage Senior - Calls Only", "Calls Only") == CampaignKind.CALLS_ONLY
    assert campaign_kind("Company Brand") == CampaignKind.BRAND
    assert campaign_kind("Littleton", "Search - Brand") == CampaignKind.BRAND
    assert campaign_kind("Littleton", "Search") == CampaignKind.LOCATION_TARGETED
