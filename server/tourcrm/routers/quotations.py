"""Quotation router: CRUD and the send/accept/reject workflow."""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import ALL_STAFF, SALES, IdempotencyKey, Pagination, require_roles
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..models.enums import QuotationStatus
from ..schemas.auth import CurrentUser
from ..schemas.booking import Booking
from ..schemas.common import MessageResponse, PaginatedResponse, PaginationParams
from ..schemas.quotation import (
    CreateQuotationRequest,
    Quotation,
    QuotationStats,
    QuotationTransition,
    UpdateQuotationRequest,
)
from ..services.quotation_service import QuotationService
from .idempotent import handle_idempotent_operation

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/quotations", tags=["quotations"])

DB_DEPENDENCY = Depends(get_db)
STAFF = Depends(require_roles(*ALL_STAFF))
EDITORS = Depends(require_roles(*SALES))


@router.get("", response_model=PaginatedResponse[Quotation])
async def list_quotations(
    status_filter: Optional[QuotationStatus] = Query(None, alias="status"),
    lead_id: Optional[UUID] = Query(None),
    pagination: PaginationParams = Pagination,
    current_user: CurrentUser = STAFF,
    db: AsyncSession = DB_DEPENDENCY,
):
    quotations, total = await QuotationService(db).list_quotations(
        current_user.tenant_uuid, pagination, status=status_filter, lead_id=lead_id
    )
    return PaginatedResponse[Quotation].build(
        [Quotation.model_validate(q) for q in quotations], total, pagination
    )


@router.get("/stats", response_model=QuotationStats)
async def quotation_stats(current_user: CurrentUser = STAFF, db: AsyncSession = DB_DEPENDENCY):
    return await QuotationService(db).get_stats_by_status(current_user.tenant_uuid)


@router.get("/{quotation_id}", response_model=Quotation)
async def get_quotation(quotation_id: UUID, current_user: CurrentUser = STAFF, db: AsyncSession = DB_DEPENDENCY):
    quotation = await QuotationService(db).get_quotation_by_id_or_raise(current_user.tenant_uuid, quotation_id)
    return Quotation.model_validate(quotation)


@router.post("", response_model=Quotation, status_code=status.HTTP_201_CREATED)
async def create_quotation(
    request: CreateQuotationRequest,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    """Create a DRAFT quotation for a lead."""
    quotation = await QuotationService(db).create_quotation(current_user.tenant_uuid, request)
    return Quotation.model_validate(quotation)


@router.patch("/{quotation_id}", response_model=Quotation)
async def update_quotation(
    quotation_id: UUID,
    request: UpdateQuotationRequest,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    quotation = await QuotationService(db).update_quotation(current_user.tenant_uuid, quotation_id, request)
    return Quotation.model_validate(quotation)


@router.delete("/{quotation_id}", response_model=MessageResponse)
async def delete_quotation(
    quotation_id: UUID,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    await QuotationService(db).delete_quotation(current_user.tenant_uuid, quotation_id)
    return MessageResponse(message="Quotation deleted")


@router.post("/{quotation_id}/send", response_model=QuotationTransition)
async def send_quotation(
    quotation_id: UUID,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    quotation, message = await QuotationService(db).send_quotation(
        current_user.tenant_uuid, quotation_id, user_id=current_user.user_uuid
    )
    return QuotationTransition(quotation=Quotation.model_validate(quotation), message=message)


@router.post("/{quotation_id}/accept", response_model=QuotationTransition)
async def accept_quotation(
    quotation_id: UUID,
    http_request: Request,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
    idempotency_key: str = IdempotencyKey,
) -> JSONResponse:
    """
    Accept a SENT quotation, creating a booking at the locked exchange rate.

    This operation is idempotent based on the Idempotency-Key header.
    """
    quotation_service = QuotationService(db)

    async def operation():
        quotation, booking = await quotation_service.accept_quotation(
            current_user.tenant_uuid, quotation_id, user_id=current_user.user_uuid
        )
        response_data = QuotationTransition(
            quotation=Quotation.model_validate(quotation),
            message=f"Quotation accepted. Booking {booking.booking_code} created.",
            booking=Booking.model_validate(booking),
        )

        logger.info(
            "Quotation accepted successfully",
            extra={
                "tenant_id": current_user.tenant_id,
                "quotation_id": str(quotation_id),
                "booking_id": str(booking.id),
                "booking_code": booking.booking_code,
                "idempotency_key": idempotency_key,
            }
        )
        return response_data.model_dump(mode="json")

    try:
        return await handle_idempotent_operation(
            request=http_request,
            db=db,
            tenant_id=current_user.tenant_uuid,
            idempotency_key=idempotency_key,
            request_body={"quotation_id": str(quotation_id)},
            operation_func=operation,
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        error = InternalServerError()
        logger.error(
            "Unexpected error in quotation acceptance",
            extra={
                "tenant_id": current_user.tenant_id,
                "quotation_id": str(quotation_id),
                "idempotency_key": idempotency_key,
                "error": str(e),
                "error_id": error.problem_details["error_id"],
            },
            exc_info=True
        )
        raise error from e


@router.post("/{quotation_id}/reject", response_model=QuotationTransition)
async def reject_quotation(
    quotation_id: UUID,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    quotation, message = await QuotationService(db).reject_quotation(
        current_user.tenant_uuid, quotation_id, user_id=current_user.user_uuid
    )
    return QuotationTransition(quotation=Quotation.model_validate(quotation), message=message)
