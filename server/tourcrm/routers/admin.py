"""Administrative routers: audit trail and data retention."""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import Pagination, require_roles
from ..models.enums import UserRole
from ..schemas.audit import AuditLog, AuditLogFilters
from ..schemas.auth import CurrentUser
from ..schemas.common import PaginatedResponse, PaginationParams
from ..schemas.retention import RetentionRunResult, RetentionStats
from ..services.audit_service import AuditService
from ..services.retention_service import RetentionService

logger = logging.getLogger(__name__)

audit_router = APIRouter(prefix="/v1/audit-logs", tags=["admin"])
retention_router = APIRouter(prefix="/v1/admin/retention", tags=["admin"])

DB_DEPENDENCY = Depends(get_db)
ADMINS = Depends(require_roles(UserRole.ADMIN))


@audit_router.get("", response_model=PaginatedResponse[AuditLog])
async def list_audit_logs(
    entity: Optional[str] = Query(None, max_length=50),
    entity_id: Optional[str] = Query(None, max_length=64),
    user_id: Optional[UUID] = Query(None),
    action: Optional[str] = Query(None, max_length=50),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    pagination: PaginationParams = Pagination,
    current_user: CurrentUser = ADMINS,
    db: AsyncSession = DB_DEPENDENCY,
):
    filters = AuditLogFilters(
        entity=entity,
        entity_id=entity_id,
        user_id=user_id,
        action=action,
        date_from=date_from,
        date_to=date_to,
    )
    logs, total = await AuditService(db).list_logs(current_user.tenant_uuid, filters, pagination)
    return PaginatedResponse[AuditLog].build([AuditLog.model_validate(log) for log in logs], total, pagination)


@retention_router.get("/stats", response_model=RetentionStats)
async def retention_stats(current_user: CurrentUser = ADMINS, db: AsyncSession = DB_DEPENDENCY):
    """Retention policy and the rows the next run would touch in this tenant."""
    return await RetentionService(db).get_stats(current_user.tenant_uuid)


@retention_router.post("/run", response_model=RetentionRunResult)
async def run_retention(current_user: CurrentUser = ADMINS, db: AsyncSession = DB_DEPENDENCY):
    """Run archiving and purging now for the caller's tenant."""
    result = await RetentionService(db).run_now(current_user.tenant_uuid)
    logger.info(
        "Manual retention run",
        extra={"tenant_id": current_user.tenant_id, "user_id": current_user.user_id, **result.model_dump()}
    )
    return result
