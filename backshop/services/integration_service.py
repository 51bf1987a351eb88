"""Integration registry service"""

from typing import List, Dict, Any, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
import logging

from backshop.core.exceptions import (
    NotFoundException,
    IntegrationConfigurationException,
    parse_uuid,
)
from backshop.models.base import utcnow
from backshop.models.integration import Integration, IntegrationType, IntegrationStatus

logger = logging.getLogger(__name__)

class IntegrationService:
    """CRUD, selection and usage tracking for messaging integrations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: Dict[str, Any]) -> Integration:
        """Create integration"""
        integration = Integration(**data)
        self.db.add(integration)
        await self.db.commit()

        logger.info(f"Integration created: {integration.type.value} '{integration.name}'")
        return integration

    async def find_all(self, include_inactive: bool = False) -> List[Integration]:
        """List integrations, newest first"""
        stmt = select(Integration)
        if not include_inactive:
            stmt = stmt.where(Integration.is_active.is_(True))
        stmt = stmt.order_by(Integration.created_at.desc())

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def find_by_type(
        self,
        integration_type: IntegrationType,
        include_inactive: bool = False
    ) -> List[Integration]:
        """List integrations of one type, newest first"""
        stmt = select(Integration).where(Integration.type == integration_type)
        if not include_inactive:
            stmt = stmt.where(Integration.is_active.is_(True))
        stmt = stmt.order_by(Integration.created_at.desc())

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def find_active_by_type(self, integration_type: IntegrationType) -> List[Integration]:
        """Active integrations of one type, highest priority first"""
        result = await self.db.execute(
            select(Integration)
            .where(
                Integration.type == integration_type,
                Integration.is_active.is_(True),
                Integration.status == IntegrationStatus.ACTIVE,
            )
            .order_by(Integration.priority.desc(), Integration.created_at.desc())
        )
        return list(result.scalars().all())

    async def resolve_active(self, integration_type: IntegrationType) -> Optional[Integration]:
        """
        Pick the integration to use for a type

        Returns:
            Highest priority active integration, or None when there is none

        Raises:
            IntegrationConfigurationException: If several integrations share the top priority
        """
        candidates = await self.find_active_by_type(integration_type)
        if not candidates:
            return None

        top = candidates[0]
        tied = [c for c in candidates if c.priority == top.priority]
        if len(tied) > 1:
            names = ", ".join(c.name for c in tied)
            raise IntegrationConfigurationException(
                f"{len(tied)} active {integration_type.value} integrations share priority "
                f"{top.priority}: {names}"
            )

        return top

    async def find_one(self, integration_id: Any) -> Integration:
        """Get integration by ID or raise NotFound"""
        integration = await self.db.get(Integration, parse_uuid(integration_id, "integration id"))
        if not integration:
            raise NotFoundException(f"Integration with ID {integration_id} not found")
        return integration

    async def update(self, integration_id: Any, data: Dict[str, Any]) -> Integration:
        """Partially update integration"""
        integration = await self.find_one(integration_id)
        integration.update_from_dict(data, exclude=["id", "created_at", "updated_at"])
        await self.db.commit()
        return integration

    async def remove(self, integration_id: Any) -> Integration:
        """Delete integration"""
        integration = await self.find_one(integration_id)
        await self.db.delete(integration)
        await self.db.commit()
        return integration

    async def activate(self, integration_id: Any) -> Integration:
        return await self.update(
            integration_id,
            {"is_active": True, "status": IntegrationStatus.ACTIVE}
        )

    async def deactivate(self, integration_id: Any) -> Integration:
        return await self.update(
            integration_id,
            {"is_active": False, "status": IntegrationStatus.INACTIVE}
        )

    async def record_usage(self, integration: Integration) -> None:
        """Count a successful send"""
        integration.usage_count = (integration.usage_count or 0) + 1
        integration.last_used_at = utcnow()
        await self.db.commit()

    async def record_error(self, integration: Integration, error: str) -> None:
        """Store a failed send and flag the integration as erroring"""
        integration.last_error = error
        integration.last_error_at = utcnow()
        integration.status = IntegrationStatus.ERROR
        await self.db.commit()

    async def get_statistics(self) -> Dict[str, Any]:
        """Counts by activity and type"""
        total = (await self.db.execute(select(func.count()).select_from(Integration))).scalar() or 0
        active = (
            await self.db.execute(
                select(func.count()).select_from(Integration).where(Integration.is_active.is_(True))
            )
        ).scalar() or 0

        result = await self.db.execute(
            select(Integration.type, func.count()).group_by(Integration.type)
        )
        by_type = {row[0].value: row[1] for row in result.all()}

        return {
            "total": total,
            "active": active,
            "inactive": total - active,
            "by_type": by_type,
        }
