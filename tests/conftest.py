"""
Shared fixtures: in-memory fakes for the Google Ads platform and the local
mirror, plus a throwaway SQLite database for repository tests.
"""

import asyncio
import itertools
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, List, Optional

import pytest
import pytest_asyncio  # type: ignore
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from core.models.provisioning import (
    ConversionActionResult,
    CreatedKeyword,
    CreatedResource,
    ResourceStatus,
    extract_numeric_id,
)
from db.tables import create_tables
from exceptions.custom_exceptions import DatabaseException, GoogleAPIException


class FakeCampaignPlatform:
    """Records every call; raises or hangs for names listed in ``fail_on`` / ``hang_on``.

    ``fail_on`` maps a method name to the set of keys (campaign name, ad group
    name, budget name) that should fail, or True to fail every call.
    """

    def __init__(self, fail_on: Optional[Dict] = None, hang_on: Optional[Dict] = None):
        self.fail_on = fail_on or {}
        self.hang_on = hang_on or {}
        self.calls: List[tuple] = []
        self.budgets: List[dict] = []
        self.campaigns: List[dict] = []
        self.ad_groups: List[dict] = []
        self.keyword_batches: List[dict] = []
        self.ads: List[dict] = []
        self.conversion_actions: Dict[str, ConversionActionResult] = {}
        self._ids = itertools.count(1000)
        self._ad_group_names: Dict[str, str] = {}

    async def _check(self, method: str, key: str) -> None:
        self.calls.append((method, key))
        hang = self.hang_on.get(method)
        if hang is True or (hang and key in hang):
            await asyncio.sleep(3600)
        rule = self.fail_on.get(method)
        if rule is True or (rule and key in rule):
            raise GoogleAPIException(f"{method} rejected for {key}", details={"key": key})

    def _resource(self, collection: str) -> CreatedResource:
        return CreatedResource.from_resource_name(f"customers/1234567890/{collection}/{next(self._ids)}")

    async def create_campaign_budget(self, name, amount_micros):
        await self._check("create_campaign_budget", name)
        self.budgets.append({"name": name, "amount_micros": amount_micros})
        return self._resource("campaignBudgets").resource_name

    async def create_campaign(
        self,
        name,
        budget_resource_name,
        bidding_strategy,
        status=ResourceStatus.PAUSED,
        networks="",
        target_cpa_micros=None,
    ):
        await self._check("create_campaign", name)
        self.campaigns.append(
            {
                "name": name,
                "budget": budget_resource_name,
                "bidding_strategy": bidding_strategy,
                "status": status,
                "networks": networks,
            }
        )
        return self._resource("campaigns")

    async def create_ad_group(
        self, name, campaign_resource_name, status=ResourceStatus.ENABLED, cpc_bid_micros=None
    ):
        await self._check("create_ad_group", name)
        resource = self._resource("adGroups")
        self._ad_group_names[resource.resource_name] = name
        self.ad_groups.append(
            {
                "name": name,
                "campaign": campaign_resource_name,
                "status": status,
                "cpc_bid_micros": cpc_bid_micros,
            }
        )
        return resource

    async def add_keywords(self, ad_group_resource_name, keywords):
        name = self._ad_group_names[ad_group_resource_name]
        await self._check("add_keywords", name)
        self.keyword_batches.append({"ad_group": name, "keywords": list(keywords)})
        created = []
        for keyword in keywords:
            criterion = f"{extract_numeric_id(ad_group_resource_name)}~{next(self._ids)}"
            created.append(
                CreatedKeyword(
                    resource_name=f"customers/1234567890/adGroupCriteria/{criterion}",
                    id=criterion.split("~")[-1],
                    text=keyword.text,
                    match_type=keyword.match_type,
                )
            )
        return created

    async def create_responsive_search_ad(self, ad_group_resource_name, ad_copy, final_url):
        name = self._ad_group_names[ad_group_resource_name]
        await self._check("create_responsive_search_ad", name)
        self.ads.append({"ad_group": name, "ad_copy": ad_copy, "final_url": final_url})
        ad_group_id = extract_numeric_id(ad_group_resource_name)
        return CreatedResource.from_resource_name(
            f"customers/1234567890/adGroupAds/{ad_group_id}~{next(self._ids)}"
        )

    async def create_conversion_action(self, config):
        await self._check("create_conversion_action", config.name)
        action_id = str(next(self._ids))
        action = ConversionActionResult(
            resource_name=f"customers/1234567890/conversionActions/{action_id}",
            id=action_id,
            name=config.name,
            category=config.category.value,
            status=config.status.value,
            label="AbC-D_efG-h12_34-567",
        )
        self.conversion_actions[action_id] = action
        return action

    async def list_conversion_actions(self):
        await self._check("list_conversion_actions", "")
        return list(self.conversion_actions.values())

    async def get_conversion_action(self, conversion_action_id):
        await self._check("get_conversion_action", conversion_action_id)
        return self.conversion_actions.get(conversion_action_id)


class FakeMirror:
    def __init__(self, store: "FakeMirrorStore"):
        self.store = store

    def _insert(self, table: str, row: dict) -> int:
        self.store.log.append((f"record_{table[:-1]}", row.get("name") or row["resource_name"]))
        if table in self.store.fail_on:
            raise DatabaseException(f"Failed to record {table} in local mirror")
        rows = self.store.tables[table]
        row_id = len(rows) + 1
        rows.append({"id": row_id, **row})
        return row_id

    async def record_campaign(self, definition, resource, budget_amount_micros, status):
        return self._insert(
            "campaigns",
            {
                "name": definition.name,
                "resource_name": resource.resource_name,
                "budget_amount_micros": budget_amount_micros,
                "status": status,
            },
        )

    async def record_ad_group(self, campaign_row_id, name, resource, cpc_bid_micros=None):
        return self._insert(
            "ad_groups",
            {"campaign_id": campaign_row_id, "name": name, "resource_name": resource.resource_name},
        )

    async def record_keywords(self, ad_group_row_id, keywords):
        return [
            self._insert(
                "keywords",
                {"ad_group_id": ad_group_row_id, "text": kw.text, "resource_name": kw.resource_name},
            )
            for kw in keywords
        ]

    async def record_ad(self, ad_group_row_id, resource, ad_copy, final_url):
        return self._insert(
            "ads",
            {"ad_group_id": ad_group_row_id, "resource_name": resource.resource_name, "final_url": final_url},
        )


class FakeMirrorStore:
    def __init__(self, fail_on=(), log: Optional[List[tuple]] = None):
        self.fail_on = set(fail_on)
        # share a platform's ``calls`` list here to see remote and mirror steps interleaved
        self.log = log if log is not None else []
        self.sessions_opened = 0
        self.tables: Dict[str, List[dict]] = {
            "campaigns": [],
            "ad_groups": [],
            "keywords": [],
            "ads": [],
        }

    @asynccontextmanager
    async def campaign_session(self):
        self.sessions_opened += 1
        yield FakeMirror(self)

    async def list_campaigns(self):
        return list(self.tables["campaigns"])


@pytest.fixture
def platform() -> FakeCampaignPlatform:
    return FakeCampaignPlatform()


@pytest.fixture
def mirror_store() -> FakeMirrorStore:
    return FakeMirrorStore()


@pytest.fixture
def make_platform():
    return FakeCampaignPlatform


@pytest.fixture
def make_mirror_store():
    return FakeMirrorStore


@pytest_asyncio.fixture(scope="function")
async def sqlite_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'mirror.db'}")
    await create_tables(engine)

    yield engine

    await engine.dispose()
