"""Lead service for business logic operations."""

import logging
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..models.client import Lead
from ..models.enums import ACTIVE_LEAD_STATUSES, LeadStatus
from ..schemas.client import CreateLeadRequest, UpdateLeadRequest
from ..schemas.common import PaginationParams
from .client_service import ClientService

logger = logging.getLogger(__name__)


class LeadService:
    """Service for lead-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_lead_by_id(self, tenant_id: UUID, lead_id: UUID) -> Optional[Lead]:
        stmt = select(Lead).where(Lead.id == lead_id, Lead.tenant_id == tenant_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_lead_by_id_or_raise(self, tenant_id: UUID, lead_id: UUID) -> Lead:
        lead = await self.get_lead_by_id(tenant_id, lead_id)
        if lead is None:
            raise NotFoundError(resource_type="lead", resource_id=str(lead_id))
        return lead

    async def list_leads(
        self,
        tenant_id: UUID,
        pagination: PaginationParams,
        status: Optional[LeadStatus] = None,
        client_id: Optional[UUID] = None,
    ) -> tuple[list[Lead], int]:
        conditions = [Lead.tenant_id == tenant_id]
        if status:
            conditions.append(Lead.status == status.value)
        if client_id:
            conditions.append(Lead.client_id == client_id)

        total = await self.db.scalar(select(func.count()).select_from(Lead).where(*conditions))
        stmt = (
            select(Lead)
            .where(*conditions)
            .order_by(Lead.inquiry_date.desc())
            .offset(pagination.offset)
            .limit(pagination.limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total or 0

    async def find_active_duplicate(self, tenant_id: UUID, client_id: UUID) -> Optional[Lead]:
        """An open lead for ``client_id`` created inside the dedup window."""
        window_start = datetime.utcnow() - timedelta(days=settings.lead_dedup_window_days)
        stmt = (
            select(Lead)
            .where(
                Lead.tenant_id == tenant_id,
                Lead.client_id == client_id,
                Lead.status.in_([s.value for s in ACTIVE_LEAD_STATUSES]),
                Lead.created_at >= window_start,
            )
            .order_by(Lead.created_at.desc())
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def create_lead(self, tenant_id: UUID, request: CreateLeadRequest) -> Lead:
        """
        Create a lead.

        Raises:
            ValidationError: If the client does not exist in the tenant
            ConflictError: If the client already has an open lead in the dedup window
        """
        if request.client_id is not None:
            client = await ClientService(self.db).get_client_by_id(tenant_id, request.client_id)
            if client is None:
                raise ValidationError(
                    detail=f"Client with ID {request.client_id} not found",
                    errors={"client_id": str(request.client_id)},
                )

            duplicate = await self.find_active_duplicate(tenant_id, request.client_id)
            if duplicate is not None:
                raise ConflictError(
                    detail=f"Active lead already exists for this client (Lead #{duplicate.id})",
                    conflicting_resource={"id": str(duplicate.id), "status": duplicate.status},
                    code="DUPLICATE_LEAD",
                )

        data = request.model_dump()
        if data.get("inquiry_date") is None:
            data["inquiry_date"] = datetime.utcnow()

        lead = Lead(tenant_id=tenant_id, **data)
        self.db.add(lead)
        await self.db.commit()
        await self.db.refresh(lead)

        logger.info(
            "Lead created",
            extra={
                "tenant_id": str(tenant_id),
                "lead_id": str(lead.id),
                "client_id": str(lead.client_id) if lead.client_id else None,
                "source": lead.source,
            }
        )
        return lead

    async def update_lead(self, tenant_id: UUID, lead_id: UUID, request: UpdateLeadRequest) -> Lead:
        lead = await self.get_lead_by_id_or_raise(tenant_id, lead_id)
        changes = request.model_dump(exclude_unset=True)

        if changes.get("client_id") is not None:
            client = await ClientService(self.db).get_client_by_id(tenant_id, changes["client_id"])
            if client is None:
                raise ValidationError(
                    detail=f"Client with ID {changes['client_id']} not found",
                    errors={"client_id": str(changes["client_id"])},
                )

        for field, value in changes.items():
            setattr(lead, field, value)

        await self.db.commit()
        await self.db.refresh(lead)
        return lead

    async def delete_lead(self, tenant_id: UUID, lead_id: UUID) -> None:
        lead = await self.get_lead_by_id_or_raise(tenant_id, lead_id)
        await self.db.delete(lead)
        await self.db.commit()
        logger.info("Lead deleted", extra={"tenant_id": str(tenant_id), "lead_id": str(lead_id)})
