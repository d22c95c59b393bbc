import pytest

from core.models.batch_result import CampaignState
from core.models.provisioning import (
    AdGroupDefinition,
    BiddingStrategy,
    CampaignDefinition,
    CampaignDefinitions,
    CampaignKind,
    KeywordDefinition,
    MatchType,
    ResourceStatus,
)
from core.provisioning.orchestrator import (
    DUPLICATE_NAME_ERROR,
    ProvisioningOrchestrator,
    to_micros,
)


def _definitions(layout: dict, kinds: dict = None, budgets: dict = None) -> CampaignDefinitions:
    """{campaign: {ad_group: [keyword, ...]}} -> CampaignDefinitions."""
    kinds = kinds or {}
    budgets = budgets or {}
    campaigns, ad_groups, keywords = [], [], []
    for campaign, groups in layout.items():
        campaigns.append(
            CampaignDefinition(
                name=campaign,
                campaign_type="Search",
                daily_budget=budgets.get(campaign, 50.0),
                bidding_strategy=BiddingStrategy.MAXIMIZE_CONVERSIONS,
                networks="Google Search",
                languages="English",
                locations="Denver, CO",
                kind=kinds.get(campaign, CampaignKind.LOCATION_TARGETED),
            )
        )
        for group, texts in groups.items():
            ad_groups.append(
                AdGroupDefinition(
                    campaign_name=campaign,
                    name=group,
                    final_url=f"https://example.com/{group.split(' — ')[-1].lower().replace(' ', '-')}",
                )
            )
            for text in texts:
                keywords.append(
                    KeywordDefinition(
                        campaign_name=campaign,
                        ad_group_name=group,
                        text=text,
                        match_type=MatchType.PHRASE,
                    )
                )
    return CampaignDefinitions(
        campaigns=tuple(campaigns), ad_groups=tuple(ad_groups), keywords=tuple(keywords)
    )


THREE_GROUPS = {
    "Denver Local": {
        "Denver — Assisted Living": ["assisted living denver", "assisted living near me"],
        "Denver — Memory Care": ["memory care denver"],
        "Denver — Independent Living": ["independent living denver"],
    }
}


@pytest.mark.parametrize(
    "amount, expected",
    [(50.0, 50_000_000), (0.01, 10_000), (75.5, 75_500_000), (1250.5, 1_250_500_000), (0, 0)],
)
def test_to_micros(amount, expected):
    assert to_micros(amount) == expected


@pytest.mark.asyncio
async def test_provisions_full_hierarchy(platform, mirror_store):
    orchestrator = ProvisioningOrchestrator(platform, mirror_store)

    result = await orchestrator.run(_definitions(THREE_GROUPS))

    outcome = result.outcome_for("Denver Local")
    assert outcome.succeeded
    assert outcome.state == CampaignState.CAMPAIGN_COMPLETE
    assert outcome.campaign_resource_name.startswith("customers/1234567890/campaigns/")
    assert outcome.ad_groups.to_dict() == {"attempted": 3, "created": 3}
    assert outcome.keywords.to_dict() == {"attempted": 4, "created": 4}
    assert outcome.ads.to_dict() == {"attempted": 3, "created": 3}
    assert outcome.warnings == ()

    assert platform.budgets == [{"name": "Denver Local Budget", "amount_micros": 50_000_000}]
    assert platform.campaigns[0]["status"] == ResourceStatus.PAUSED
    assert platform.campaigns[0]["budget"].startswith("customers/1234567890/campaignBudgets/")
    assert [ad["final_url"] for ad in platform.ads] == [
        "https://example.com/assisted-living",
        "https://example.com/memory-care",
        "https://example.com/independent-living",
    ]

    tables = mirror_store.tables
    assert len(tables["campaigns"]) == 1
    assert len(tables["ad_groups"]) == 3
    assert len(tables["keywords"]) == 4
    assert len(tables["ads"]) == 3
    assert tables["campaigns"][0]["budget_amount_micros"] == 50_000_000


@pytest.mark.asyncio
async def test_ad_group_failure_is_isolated(make_platform, mirror_store):
    platform = make_platform(fail_on={"create_ad_group": {"Denver — Memory Care"}})
    orchestrator = ProvisioningOrchestrator(platform, mirror_store)

    result = await orchestrator.run(_definitions(THREE_GROUPS))

    outcome = result.outcome_for("Denver Local")
    assert outcome.succeeded
    assert outcome.ad_groups.attempted == 3
    assert outcome.ad_groups.created == 2
    assert outcome.keywords.to_dict() == {"attempted": 3, "created": 3}
    assert outcome.ads.to_dict() == {"attempted": 2, "created": 2}
    assert len(outcome.warnings) == 1
    assert "Denver — Memory Care" in outcome.warnings[0]

    keyword_groups = [batch["ad_group"] for batch in platform.keyword_batches]
    assert "Denver — Memory Care" not in keyword_groups
    assert len(mirror_store.tables["ad_groups"]) == 2


@pytest.mark.asyncio
async def test_campaign_failure_does_not_stop_batch(make_platform, mirror_store):
    layout = {
        "Campaign A": {"A — Assisted Living": ["a one"]},
        "Campaign B": {"B — Assisted Living": ["b one"]},
        "Campaign C": {"C — Assisted Living": ["c one"]},
    }
    platform = make_platform(fail_on={"create_campaign": {"Campaign B"}})
    orchestrator = ProvisioningOrchestrator(platform, mirror_store)

    result = await orchestrator.run(_definitions(layout))

    assert [o.campaign_name for o in result.succeeded] == ["Campaign A", "Campaign C"]
    failed = result.outcome_for("Campaign B")
    assert failed.state == CampaignState.CAMPAIGN_FAILED
    assert failed.error.startswith("Campaign creation failed")
    assert failed.ad_groups.attempted == 0
    assert [g["name"] for g in platform.ad_groups] == ["A — Assisted Living", "C — Assisted Living"]
    assert [c["name"] for c in mirror_store.tables["campaigns"]] == ["Campaign A", "Campaign C"]


@pytest.mark.asyncio
async def test_budget_failure_skips_campaign_creation(make_platform, mirror_store):
    platform = make_platform(fail_on={"create_campaign_budget": True})
    orchestrator = ProvisioningOrchestrator(platform, mirror_store)

    result = await orchestrator.run(_definitions(THREE_GROUPS))

    outcome = result.outcome_for("Denver Local")
    assert not outcome.succeeded
    assert outcome.error.startswith("Budget creation failed")
    assert platform.campaigns == []
    assert mirror_store.tables["campaigns"] == []


@pytest.mark.asyncio
async def test_keyword_failure_still_creates_ad(make_platform, mirror_store):
    platform = make_platform(fail_on={"add_keywords": {"Denver — Assisted Living"}})
    orchestrator = ProvisioningOrchestrator(platform, mirror_store)

    result = await orchestrator.run(_definitions(THREE_GROUPS))

    outcome = result.outcome_for("Denver Local")
    assert outcome.succeeded
    assert outcome.keywords.to_dict() == {"attempted": 4, "created": 2}
    assert outcome.ads.to_dict() == {"attempted": 3, "created": 3}
    assert any("Keywords for 'Denver — Assisted Living'" in w for w in outcome.warnings)


@pytest.mark.asyncio
async def test_ad_failure_is_a_warning(make_platform, mirror_store):
    platform = make_platform(fail_on={"create_responsive_search_ad": True})
    orchestrator = ProvisioningOrchestrator(platform, mirror_store)

    result = await orchestrator.run(_definitions(THREE_GROUPS))

    outcome = result.outcome_for("Denver Local")
    assert outcome.succeeded
    assert outcome.ads.to_dict() == {"attempted": 3, "created": 0}
    assert len(outcome.warnings) == 3
    assert mirror_store.tables["ads"] == []


@pytest.mark.asyncio
async def test_calls_only_campaigns_create_no_ads(platform, mirror_store):
    layout = {"Calls Only": {"Colorado — Senior Living": ["senior living colorado"]}}
    orchestrator = ProvisioningOrchestrator(platform, mirror_store)

    result = await orchestrator.run(
        _definitions(layout, kinds={"Calls Only": CampaignKind.CALLS_ONLY})
    )

    outcome = result.outcome_for("Calls Only")
    assert outcome.succeeded
    assert outcome.ads.attempted == 0
    assert outcome.keywords.created == 1
    assert platform.ads == []


@pytest.mark.asyncio
async def test_brand_campaign_uses_brand_copy(platform, mirror_store):
    layout = {"Company Brand": {"Colorado — Brand": ["stage senior"]}}
    orchestrator = ProvisioningOrchestrator(platform, mirror_store)

    await orchestrator.run(_definitions(layout, kinds={"Company Brand": CampaignKind.BRAND}))

    headlines = platform.ads[0]["ad_copy"].headlines
    assert headlines[0] == "Stage Senior Senior Living"


@pytest.mark.asyncio
async def test_duplicate_campaign_names_are_rejected(platform, mirror_store):
    definitions = _definitions({"Dup": {"Dup — Assisted Living": ["kw"]}})
    definitions = CampaignDefinitions(
        campaigns=definitions.campaigns * 2,
        ad_groups=definitions.ad_groups,
        keywords=definitions.keywords,
    )
    orchestrator = ProvisioningOrchestrator(platform, mirror_store)

    result = await orchestrator.run(definitions)

    first, second = result.outcomes
    assert first.succeeded
    assert not second.succeeded
    assert second.error == DUPLICATE_NAME_ERROR
    assert len(platform.budgets) == 1


@pytest.mark.asyncio
async def test_zero_budget_fails_without_remote_calls(platform, mirror_store):
    orchestrator = ProvisioningOrchestrator(platform, mirror_store)

    result = await orchestrator.run(
        _definitions(THREE_GROUPS, budgets={"Denver Local": 0.0})
    )

    assert result.outcome_for("Denver Local").error == "Daily budget must be greater than 0"
    assert platform.calls == []


@pytest.mark.asyncio
async def test_remote_call_timeout_fails_that_level(make_platform, mirror_store):
    platform = make_platform(hang_on={"create_campaign": True})
    orchestrator = ProvisioningOrchestrator(platform, mirror_store, remote_call_timeout=0.05)

    result = await orchestrator.run(_definitions(THREE_GROUPS))

    outcome = result.outcome_for("Denver Local")
    assert not outcome.succeeded
    assert "timed out" in outcome.error


@pytest.mark.asyncio
async def test_campaign_mirror_failure_is_fatal_for_campaign(platform, make_mirror_store):
    mirror_store = make_mirror_store(fail_on={"campaigns"})
    orchestrator = ProvisioningOrchestrator(platform, mirror_store)

    result = await orchestrator.run(_definitions(THREE_GROUPS))

    outcome = result.outcome_for("Denver Local")
    assert not outcome.succeeded
    assert outcome.error.startswith("Campaign mirror write failed")
    assert platform.campaigns[0]["name"] == "Denver Local"
    assert "customers/1234567890/campaigns/" in outcome.error
    assert platform.ad_groups == []


@pytest.mark.asyncio
async def test_ad_group_mirror_failure_skips_children(platform, make_mirror_store):
    mirror_store = make_mirror_store(fail_on={"ad_groups"})
    orchestrator = ProvisioningOrchestrator(platform, mirror_store)

    result = await orchestrator.run(_definitions(THREE_GROUPS))

    outcome = result.outcome_for("Denver Local")
    assert outcome.succeeded
    assert outcome.ad_groups.to_dict() == {"attempted": 3, "created": 0}
    assert platform.keyword_batches == []
    assert platform.ads == []


@pytest.mark.asyncio
async def test_default_cpc_bid_is_applied_to_ad_groups(platform, mirror_store):
    orchestrator = ProvisioningOrchestrator(
        platform, mirror_store, default_cpc_bid_micros=2_000_000
    )

    await orchestrator.run(_definitions(THREE_GROUPS))

    assert {g["cpc_bid_micros"] for g in platform.ad_groups} == {2_000_000}


@pytest.mark.asyncio
async def test_concurrent_run_keeps_input_order(platform, mirror_store):
    layout = {
        f"Campaign {i}": {f"City {i} — Assisted Living": [f"kw {i}"]} for i in range(5)
    }
    orchestrator = ProvisioningOrchestrator(
        platform, mirror_store, max_concurrent_campaigns=3
    )

    result = await orchestrator.run(_definitions(layout))

    assert [o.campaign_name for o in result.outcomes] == list(layout)
    assert all(o.succeeded for o in result.outcomes)
    assert mirror_store.sessions_opened == 5


@pytest.mark.asyncio
async def test_result_projection(make_platform, mirror_store):
    layout = {
        "Campaign A": {"A — Assisted Living": ["a one"]},
        "Campaign B": {"B — Assisted Living": ["b one"]},
    }
    platform = make_platform(fail_on={"create_campaign": {"Campaign B"}})
    orchestrator = ProvisioningOrchestrator(platform, mirror_store)

    result = await orchestrator.run(_definitions(layout))

    summary = result.to_dict()
    assert summary["total"] == 2
    assert summary["succeeded"] == 1
    assert summary["campaigns"][1]["status"] == "failed"
    lines = result.summary_lines()
    assert lines[0] == "Successful: 1/2"
    assert "Failed: 1/2" in lines


@pytest.mark.asyncio
async def test_each_resource_is_mirrored_before_the_next_remote_call(make_platform, make_mirror_store):
    platform = make_platform()
    mirror_store = make_mirror_store(log=platform.calls)
    orchestrator = ProvisioningOrchestrator(platform, mirror_store)

    await orchestrator.run(_definitions(THREE_GROUPS))

    def ad_group_steps(keyword_count):
        return (
            ["create_ad_group", "record_ad_group", "add_keywords"]
            + ["record_keyword"] * keyword_count
            + ["create_responsive_search_ad", "record_ad"]
        )

    assert [method for method, _ in platform.calls] == (
        ["create_campaign_budget", "create_campaign", "record_campaign"]
        + ad_group_steps(2)
        + ad_group_steps(1)
        + ad_group_steps(1)
    )


@pytest.mark.asyncio
async def test_interrupted_run_leaves_a_mirrored_prefix(make_platform, mirror_store):
    platform = make_platform(hang_on={"create_ad_group": {"Denver — Memory Care"}})
    orchestrator = ProvisioningOrchestrator(platform, mirror_store, remote_call_timeout=0.05)

    result = await orchestrator.run(_definitions(THREE_GROUPS))

    outcome = result.outcome_for("Denver Local")
    assert outcome.ad_groups.to_dict() == {"attempted": 3, "created": 2}
    assert [row["name"] for row in mirror_store.tables["campaigns"]] == ["Denver Local"]
    assert [row["name"] for row in mirror_store.tables["ad_groups"]] == [
        "Denver — Assisted Living",
        "Denver — Independent Living",
    ]
    assert len(mirror_store.tables["keywords"]) == 3
