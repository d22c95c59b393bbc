from typing import Dict, List

import structlog

from core.models.provisioning import ConversionActionConfig, ConversionActionResult
from core.provisioning.ports import CampaignPlatform
from db.conversion_action_repository import ConversionActionRepository
from exceptions.custom_exceptions import ResourceNotFoundException

logger = structlog.get_logger(__name__)


class ConversionActionService:
    def __init__(self, platform: CampaignPlatform, repository: ConversionActionRepository):
        self.platform = platform
        self.repository = repository

    async def list_conversion_actions(self) -> List[ConversionActionResult]:
        """Stored actions; call sync() to refresh them from Google Ads."""
        return await self.repository.list_all()

    async def get_conversion_action(self, conversion_action_id: str) -> ConversionActionResult:
        action = await self.platform.get_conversion_action(conversion_action_id)
        if action is None:
            raise ResourceNotFoundException(
                f"Conversion action {conversion_action_id} not found",
                details={"conversion_action_id": conversion_action_id},
            )
        return action

    async def create_conversion_action(
        self, config: ConversionActionConfig
    ) -> ConversionActionResult:
        action = await self.platform.create_conversion_action(config)
        await self.repository.upsert(action)
        if not action.label:
            logger.warning(
                "Conversion action created without a label",
                id=action.id,
                name=action.name,
            )
        return action

    async def sync(self) -> Dict[str, int]:
        """Pull every non-removed action from Google Ads into the local table."""
        actions = await self.platform.list_conversion_actions()
        synced = updated = 0
        for action in actions:
            if await self.repository.upsert(action):
                synced += 1
            else:
                updated += 1
        logger.info("Conversion actions synced", synced=synced, updated=updated)
        return {"synced_count": synced, "updated_count": updated}
