import json
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from core.models.provisioning import (
    AdCopySet,
    CampaignDefinition,
    CreatedKeyword,
    CreatedResource,
    ResourceStatus,
)
from exceptions.custom_exceptions import DatabaseException

logger = structlog.get_logger(__name__)


class GoogleAdsMirrorRepository:
    """Insert-only writer for google_ads_* rows.

    Campaign, ad group and ad rows commit one by one. A keyword batch commits
    once, so a failed batch leaves none of its rows behind.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def record_campaign(
        self,
        definition: CampaignDefinition,
        resource: CreatedResource,
        budget_amount_micros: int,
        status: ResourceStatus,
        target_cpa_micros: Optional[int] = None,
    ) -> int:
        return await self._insert_returning_id(
            """
                INSERT INTO google_ads_campaigns
                (name, resource_name, campaign_id, campaign_type, status,
                 budget_amount_micros, bidding_strategy, target_cpa_micros,
                 networks, languages, locations)
                VALUES (:name, :resource_name, :campaign_id, :campaign_type, :status,
                        :budget_amount_micros, :bidding_strategy, :target_cpa_micros,
                        :networks, :languages, :locations)
                RETURNING id
            """,
            {
                "name": definition.name,
                "resource_name": resource.resource_name,
                "campaign_id": resource.id,
                "campaign_type": definition.campaign_type,
                "status": ResourceStatus(status).value,
                "budget_amount_micros": budget_amount_micros,
                "bidding_strategy": definition.bidding_strategy.value,
                "target_cpa_micros": target_cpa_micros,
                "networks": definition.networks,
                "languages": definition.languages,
                "locations": definition.locations,
            },
            entity="campaign",
        )

    async def record_ad_group(
        self,
        campaign_row_id: int,
        name: str,
        resource: CreatedResource,
        cpc_bid_micros: Optional[int] = None,
    ) -> int:
        return await self._insert_returning_id(
            """
                INSERT INTO google_ads_ad_groups
                (campaign_id, name, resource_name, ad_group_id, cpc_bid_micros)
                VALUES (:campaign_id, :name, :resource_name, :ad_group_id, :cpc_bid_micros)
                RETURNING id
            """,
            {
                "campaign_id": campaign_row_id,
                "name": name,
                "resource_name": resource.resource_name,
                "ad_group_id": resource.id,
                "cpc_bid_micros": cpc_bid_micros,
            },
            entity="ad_group",
        )

    async def record_keywords(
        self, ad_group_row_id: int, keywords: Sequence[CreatedKeyword]
    ) -> List[int]:
        ids = []
        for keyword in keywords:
            ids.append(
                await self._insert_returning_id(
                    """
                        INSERT INTO google_ads_keywords
                        (ad_group_id, keyword_text, match_type, resource_name, criterion_id)
                        VALUES (:ad_group_id, :keyword_text, :match_type, :resource_name, :criterion_id)
                        RETURNING id
                    """,
                    {
                        "ad_group_id": ad_group_row_id,
                        "keyword_text": keyword.text,
                        "match_type": keyword.match_type.value,
                        "resource_name": keyword.resource_name,
                        "criterion_id": keyword.id,
                    },
                    entity="keyword",
                    commit=False,
                )
            )
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Mirror keyword batch commit failed", keywords=len(ids), error=str(e))
            raise DatabaseException(
                "Failed to record keywords in local mirror",
                details={"entity": "keyword", "count": len(ids)},
            ) from e
        return ids

    async def record_ad(
        self,
        ad_group_row_id: int,
        resource: CreatedResource,
        ad_copy: AdCopySet,
        final_url: str,
    ) -> int:
        return await self._insert_returning_id(
            """
                INSERT INTO google_ads_ads
                (ad_group_id, resource_name, ad_id, headlines, descriptions, path1, path2, final_url)
                VALUES (:ad_group_id, :resource_name, :ad_id, :headlines, :descriptions,
                        :path1, :path2, :final_url)
                RETURNING id
            """,
            {
                "ad_group_id": ad_group_row_id,
                "resource_name": resource.resource_name,
                "ad_id": resource.id,
                "headlines": json.dumps(list(ad_copy.headlines)),
                "descriptions": json.dumps(list(ad_copy.descriptions)),
                "path1": ad_copy.path1 or None,
                "path2": ad_copy.path2 or None,
                "final_url": final_url,
            },
            entity="ad",
        )

    async def list_campaigns(self) -> List[Dict[str, Any]]:
        result = await self.session.execute(
            text("""
                SELECT c.id, c.name, c.resource_name, c.campaign_id, c.status,
                       c.budget_amount_micros, c.bidding_strategy, c.created_at,
                       COUNT(ag.id) AS ad_group_count
                FROM google_ads_campaigns c
                LEFT JOIN google_ads_ad_groups ag ON ag.campaign_id = c.id
                GROUP BY c.id, c.name, c.resource_name, c.campaign_id, c.status,
                         c.budget_amount_micros, c.bidding_strategy, c.created_at
                ORDER BY c.id
            """)
        )
        return [dict(row._mapping) for row in result.fetchall()]

    async def _insert_returning_id(
        self, statement: str, params: Dict[str, Any], entity: str, commit: bool = True
    ) -> int:
        try:
            result = await self.session.execute(text(statement), params)
            row = result.fetchone()
            if not row:
                raise SQLAlchemyError(f"Insert into mirror returned no id for {entity}")
            if commit:
                await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                "Mirror write failed",
                entity=entity,
                resource_name=params.get("resource_name"),
                error=str(e),
            )
            raise DatabaseException(
                f"Failed to record {entity} in local mirror",
                details={"entity": entity, "resource_name": params.get("resource_name")},
            ) from e
        return row.id


class SqlMirrorStore:
    """Opens one session per campaign so concurrent campaigns never share one."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    @asynccontextmanager
    async def campaign_session(self) -> AsyncIterator[GoogleAdsMirrorRepository]:
        async with AsyncSession(self.engine, expire_on_commit=False) as session:
            yield GoogleAdsMirrorRepository(session)

    async def list_campaigns(self) -> List[Dict[str, Any]]:
        async with AsyncSession(self.engine) as session:
            return await GoogleAdsMirrorRepository(session).list_campaigns()
