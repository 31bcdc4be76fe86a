"""Lead router."""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import ALL_STAFF, SALES, Pagination, require_roles
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..models.enums import LeadStatus
from ..schemas.auth import CurrentUser
from ..schemas.client import CreateLeadRequest, Lead, UpdateLeadRequest
from ..schemas.common import MessageResponse, PaginatedResponse, PaginationParams
from ..services.lead_service import LeadService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/leads", tags=["leads"])

DB_DEPENDENCY = Depends(get_db)
STAFF = Depends(require_roles(*ALL_STAFF))
EDITORS = Depends(require_roles(*SALES))


@router.get("", response_model=PaginatedResponse[Lead])
async def list_leads(
    status_filter: Optional[LeadStatus] = Query(None, alias="status"),
    client_id: Optional[UUID] = Query(None),
    pagination: PaginationParams = Pagination,
    current_user: CurrentUser = STAFF,
    db: AsyncSession = DB_DEPENDENCY,
):
    leads, total = await LeadService(db).list_leads(
        current_user.tenant_uuid, pagination, status=status_filter, client_id=client_id
    )
    return PaginatedResponse[Lead].build([Lead.model_validate(lead) for lead in leads], total, pagination)


@router.get("/{lead_id}", response_model=Lead)
async def get_lead(lead_id: UUID, current_user: CurrentUser = STAFF, db: AsyncSession = DB_DEPENDENCY):
    lead = await LeadService(db).get_lead_by_id_or_raise(current_user.tenant_uuid, lead_id)
    return Lead.model_validate(lead)


@router.post("", response_model=Lead, status_code=status.HTTP_201_CREATED)
async def create_lead(
    request: CreateLeadRequest,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    """
    Create a lead.

    A second active lead for the same client inside the dedup window is
    rejected with 409.
    """
    try:
        lead = await LeadService(db).create_lead(current_user.tenant_uuid, request)

        logger.info(
            "Lead created successfully",
            extra={
                "tenant_id": current_user.tenant_id,
                "lead_id": str(lead.id),
                "client_id": str(request.client_id) if request.client_id else None,
            }
        )
        return Lead.model_validate(lead)

    except ProblemDetailsException:
        raise

    except Exception as e:
        error = InternalServerError()
        logger.error(
            "Unexpected error in lead creation",
            extra={"tenant_id": current_user.tenant_id, "error": str(e), "error_id": error.problem_details["error_id"]},
            exc_info=True
        )
        raise error from e


@router.patch("/{lead_id}", response_model=Lead)
async def update_lead(
    lead_id: UUID,
    request: UpdateLeadRequest,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    lead = await LeadService(db).update_lead(current_user.tenant_uuid, lead_id, request)
    return Lead.model_validate(lead)


@router.delete("/{lead_id}", response_model=MessageResponse)
async def delete_lead(lead_id: UUID, current_user: CurrentUser = EDITORS, db: AsyncSession = DB_DEPENDENCY):
    await LeadService(db).delete_lead(current_user.tenant_uuid, lead_id)
    return MessageResponse(message="Lead deleted")
