"""Data retention: archiving stale clients and purging expired records."""

import logging
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, exists, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.observability import metrics_collector
from ..models.audit_log import AuditLog
from ..models.booking import Booking
from ..models.client import Client, Lead
from ..models.enums import LeadStatus
from ..models.idempotency import IdempotencyKey
from ..models.quotation import Quotation
from ..schemas.retention import RetentionPolicy, RetentionRunResult, RetentionStats

logger = logging.getLogger(__name__)

ARCHIVE_SCHEDULE = "Every 24 hours"
PURGE_SCHEDULE = "Every 7 days"


def current_policy() -> RetentionPolicy:
    """Retention windows from settings."""
    return RetentionPolicy(
        client_inactive_days=settings.retention_client_inactive_days,
        audit_log_days=settings.retention_audit_log_days,
        idempotency_key_days=settings.retention_idempotency_key_days,
        lead_days=settings.retention_lead_days,
        booking_archive_days=settings.retention_booking_archive_days,
    )


def _cutoff(days: int, now: Optional[datetime] = None) -> datetime:
    return (now or datetime.utcnow()) - timedelta(days=days)


class RetentionService:
    """
    Applies the retention policy.

    Every operation accepts an optional tenant; without one it applies to all
    tenants, which is how the background workers call it.
    """

    def __init__(self, db: AsyncSession, policy: Optional[RetentionPolicy] = None):
        self.db = db
        self.policy = policy or current_policy()

    def _stale_client_conditions(self, tenant_id: Optional[UUID], now: Optional[datetime] = None) -> list:
        cutoff = _cutoff(self.policy.client_inactive_days, now)
        recent_booking = exists().where(
            Booking.client_id == Client.id,
            Booking.created_at >= cutoff,
        )
        conditions = [Client.is_active.is_(True), Client.updated_at < cutoff, ~recent_booking]
        if tenant_id is not None:
            conditions.append(Client.tenant_id == tenant_id)
        return conditions

    def _old_audit_conditions(self, tenant_id: Optional[UUID], now: Optional[datetime] = None) -> list:
        conditions = [AuditLog.created_at < _cutoff(self.policy.audit_log_days, now)]
        if tenant_id is not None:
            conditions.append(AuditLog.tenant_id == tenant_id)
        return conditions

    def _old_key_conditions(self, tenant_id: Optional[UUID], now: Optional[datetime] = None) -> list:
        conditions = [IdempotencyKey.created_at < _cutoff(self.policy.idempotency_key_days, now)]
        if tenant_id is not None:
            conditions.append(IdempotencyKey.tenant_id == tenant_id)
        return conditions

    def _dead_lead_conditions(self, tenant_id: Optional[UUID], now: Optional[datetime] = None) -> list:
        has_quotation = exists().where(Quotation.lead_id == Lead.id)
        conditions = [
            Lead.created_at < _cutoff(self.policy.lead_days, now),
            Lead.status == LeadStatus.LOST.value,
            ~has_quotation,
        ]
        if tenant_id is not None:
            conditions.append(Lead.tenant_id == tenant_id)
        return conditions

    async def archive_inactive_clients(self, tenant_id: Optional[UUID] = None) -> int:
        """Mark clients without recent activity or bookings as inactive."""
        stmt = (
            update(Client)
            .where(*self._stale_client_conditions(tenant_id))
            .values(is_active=False)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount or 0

    async def delete_old_audit_logs(self, tenant_id: Optional[UUID] = None) -> int:
        stmt = delete(AuditLog).where(*self._old_audit_conditions(tenant_id))
        result = await self.db.execute(stmt.execution_options(synchronize_session=False))
        return result.rowcount or 0

    async def delete_old_idempotency_keys(self, tenant_id: Optional[UUID] = None) -> int:
        stmt = delete(IdempotencyKey).where(*self._old_key_conditions(tenant_id))
        result = await self.db.execute(stmt.execution_options(synchronize_session=False))
        return result.rowcount or 0

    async def delete_old_leads(self, tenant_id: Optional[UUID] = None) -> int:
        """Delete LOST leads past the window that never got a quotation."""
        stmt = delete(Lead).where(*self._dead_lead_conditions(tenant_id))
        result = await self.db.execute(stmt.execution_options(synchronize_session=False))
        return result.rowcount or 0

    async def run_archive(self, tenant_id: Optional[UUID] = None) -> RetentionRunResult:
        """Archiving pass, run daily by the archive worker."""
        archived = await self.archive_inactive_clients(tenant_id)
        await self.db.commit()

        metrics_collector.record_retention("clients_archived", archived)
        metrics_collector.set_last_retention_run("archive")
        logger.info(
            f"Archived {archived} inactive clients",
            extra={
                "tenant_id": str(tenant_id) if tenant_id else None,
                "inactive_after_days": self.policy.client_inactive_days,
            }
        )
        return RetentionRunResult(clients_archived=archived)

    async def run_purge(self, tenant_id: Optional[UUID] = None) -> RetentionRunResult:
        """Deletion pass, run weekly by the purge worker."""
        result = RetentionRunResult(
            audit_logs_deleted=await self.delete_old_audit_logs(tenant_id),
            idempotency_keys_deleted=await self.delete_old_idempotency_keys(tenant_id),
            leads_deleted=await self.delete_old_leads(tenant_id),
        )
        await self.db.commit()

        metrics_collector.record_retention("audit_logs_deleted", result.audit_logs_deleted)
        metrics_collector.record_retention("idempotency_keys_deleted", result.idempotency_keys_deleted)
        metrics_collector.record_retention("leads_deleted", result.leads_deleted)
        metrics_collector.set_last_retention_run("purge")
        logger.info(
            "Retention purge completed",
            extra={"tenant_id": str(tenant_id) if tenant_id else None, **result.model_dump()}
        )
        return result

    async def run_now(self, tenant_id: Optional[UUID] = None) -> RetentionRunResult:
        """Run both passes immediately and return the combined counts."""
        logger.info("Running data retention manually", extra={"tenant_id": str(tenant_id) if tenant_id else None})
        try:
            archived = await self.run_archive(tenant_id)
            purged = await self.run_purge(tenant_id)
        except Exception:
            await self.db.rollback()
            logger.error("Failed to run data retention", exc_info=True)
            raise

        return purged.model_copy(update={"clients_archived": archived.clients_archived})

    async def _count(self, model, conditions: list) -> int:
        total = await self.db.scalar(select(func.count()).select_from(model).where(*conditions))
        return total or 0

    async def get_stats(self, tenant_id: UUID) -> RetentionStats:
        """Rows the next run would touch for ``tenant_id``."""
        now = datetime.utcnow()
        booking_cutoff = _cutoff(self.policy.booking_archive_days, now)
        pending = {
            "clients_to_archive": await self._count(Client, self._stale_client_conditions(tenant_id, now)),
            "audit_logs_to_delete": await self._count(AuditLog, self._old_audit_conditions(tenant_id, now)),
            "idempotency_keys_to_delete": await self._count(
                IdempotencyKey, self._old_key_conditions(tenant_id, now)
            ),
            "leads_to_delete": await self._count(Lead, self._dead_lead_conditions(tenant_id, now)),
            "bookings_past_archive_window": await self._count(
                Booking, [Booking.tenant_id == tenant_id, Booking.end_date < booking_cutoff.date()]
            ),
        }
        return RetentionStats(
            retention_policy=self.policy,
            pending_actions=pending,
            next_run={"archive": ARCHIVE_SCHEDULE, "purge": PURGE_SCHEDULE},
        )
