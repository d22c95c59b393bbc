from typing import List

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from core.models.provisioning import ConversionActionResult
from exceptions.custom_exceptions import DatabaseException

logger = structlog.get_logger(__name__)


class ConversionActionRepository:
    """Local copy of the account's conversion actions and their labels."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    async def list_all(self) -> List[ConversionActionResult]:
        async with AsyncSession(self.engine) as session:
            result = await session.execute(
                text("""
                    SELECT conversion_action_id, resource_name, name, category, status, label
                    FROM google_ads_conversion_actions
                    ORDER BY name
                """)
            )
            return [
                ConversionActionResult(
                    resource_name=row.resource_name,
                    id=row.conversion_action_id,
                    name=row.name,
                    category=row.category or "",
                    status=row.status or "",
                    label=row.label or "",
                )
                for row in result.fetchall()
            ]

    async def upsert(self, action: ConversionActionResult) -> bool:
        """Insert or refresh one action. Returns True when the row is new."""
        params = {
            "conversion_action_id": action.id,
            "resource_name": action.resource_name,
            "name": action.name,
            "category": action.category,
            "status": action.status,
            "label": action.label,
        }
        async with AsyncSession(self.engine) as session:
            try:
                existing = await session.execute(
                    text(
                        "SELECT id FROM google_ads_conversion_actions "
                        "WHERE conversion_action_id = :conversion_action_id"
                    ),
                    {"conversion_action_id": action.id},
                )
                if existing.fetchone():
                    await session.execute(
                        text("""
                            UPDATE google_ads_conversion_actions
                            SET resource_name = :resource_name, name = :name,
                                category = :category, status = :status, label = :label,
                                synced_at = CURRENT_TIMESTAMP
                            WHERE conversion_action_id = :conversion_action_id
                        """),
                        params,
                    )
                    created = False
                else:
                    await session.execute(
                        text("""
                            INSERT INTO google_ads_conversion_actions
                            (conversion_action_id, resource_name, name, category, status, label)
                            VALUES (:conversion_action_id, :resource_name, :name,
                                    :category, :status, :label)
                        """),
                        params,
                    )
                    created = True
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(
                    "Conversion action upsert failed",
                    conversion_action_id=action.id,
                    error=str(e),
                )
                raise DatabaseException(
                    "Failed to store conversion action",
                    details={"conversion_action_id": action.id},
                ) from e
        return created
