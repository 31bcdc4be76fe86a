"""Audit trail recording and querying."""

import logging
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.audit_log import AuditLog
from ..schemas.audit import AuditLogFilters
from ..schemas.common import PaginationParams

logger = logging.getLogger(__name__)


class AuditService:
    """Service for writing and reading audit log entries."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def record(
        self,
        tenant_id: UUID,
        user_id: Optional[UUID],
        action: str,
        entity: str,
        entity_id: Optional[Any] = None,
        diff: Optional[dict[str, Any]] = None,
        ip_address: Optional[str] = None,
    ) -> AuditLog:
        """
        Add an audit entry to the current session.

        The entry is committed together with the change it describes.
        """
        entry = AuditLog(
            tenant_id=tenant_id,
            user_id=user_id,
            action=action,
            entity=entity,
            entity_id=str(entity_id) if entity_id is not None else None,
            diff_json=diff,
            ip_address=ip_address,
        )
        self.db.add(entry)

        logger.debug(
            "Audit entry recorded",
            extra={
                "tenant_id": str(tenant_id),
                "action": action,
                "entity": entity,
                "entity_id": entry.entity_id,
            }
        )
        return entry

    async def list_logs(
        self,
        tenant_id: UUID,
        filters: AuditLogFilters,
        pagination: PaginationParams,
    ) -> tuple[list[AuditLog], int]:
        """Newest-first page of audit entries matching ``filters``."""
        conditions = [AuditLog.tenant_id == tenant_id]
        if filters.entity:
            conditions.append(AuditLog.entity == filters.entity)
        if filters.entity_id:
            conditions.append(AuditLog.entity_id == filters.entity_id)
        if filters.user_id:
            conditions.append(AuditLog.user_id == filters.user_id)
        if filters.action:
            conditions.append(AuditLog.action == filters.action)
        if filters.date_from:
            conditions.append(AuditLog.created_at >= filters.date_from)
        if filters.date_to:
            conditions.append(AuditLog.created_at <= filters.date_to)

        total = await self.db.scalar(select(func.count()).select_from(AuditLog).where(*conditions))

        stmt = (
            select(AuditLog)
            .where(*conditions)
            .order_by(AuditLog.created_at.desc())
            .offset(pagination.offset)
            .limit(pagination.limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total or 0
