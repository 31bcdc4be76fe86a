"""Client and vendor payment routers."""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import FINANCE, IdempotencyKey, Pagination, require_roles
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..models.enums import PaymentStatus
from ..schemas.auth import CurrentUser
from ..schemas.common import MessageResponse, PaginatedResponse, PaginationParams
from ..schemas.payment import (
    ClientPayment,
    ClientPaymentStats,
    CreateClientPaymentRequest,
    CreateVendorPaymentRequest,
    UpdateClientPaymentRequest,
    UpdateVendorPaymentRequest,
    VendorPayment,
)
from ..services.payment_service import ClientPaymentService, VendorPaymentService
from .idempotent import handle_idempotent_operation

logger = logging.getLogger(__name__)

client_payments_router = APIRouter(prefix="/v1/client-payments", tags=["payments"])
vendor_payments_router = APIRouter(prefix="/v1/vendor-payments", tags=["payments"])

DB_DEPENDENCY = Depends(get_db)
FINANCE_STAFF = Depends(require_roles(*FINANCE))


# Client payments

@client_payments_router.get("", response_model=List[ClientPayment])
async def list_client_payments(
    booking_id: Optional[UUID] = Query(None),
    current_user: CurrentUser = FINANCE_STAFF,
    db: AsyncSession = DB_DEPENDENCY,
):
    payments = await ClientPaymentService(db).list_payments(current_user.tenant_uuid, booking_id=booking_id)
    return [ClientPayment.model_validate(p) for p in payments]


@client_payments_router.get("/stats", response_model=ClientPaymentStats)
async def client_payment_stats(current_user: CurrentUser = FINANCE_STAFF, db: AsyncSession = DB_DEPENDENCY):
    return await ClientPaymentService(db).get_stats(current_user.tenant_uuid)


@client_payments_router.get("/{payment_id}", response_model=ClientPayment)
async def get_client_payment(payment_id: UUID, current_user: CurrentUser = FINANCE_STAFF, db: AsyncSession = DB_DEPENDENCY):
    payment = await ClientPaymentService(db).get_payment_by_id_or_raise(current_user.tenant_uuid, payment_id)
    return ClientPayment.model_validate(payment)


@client_payments_router.post("", response_model=ClientPayment, status_code=status.HTTP_201_CREATED)
async def create_client_payment(
    request: CreateClientPaymentRequest,
    http_request: Request,
    current_user: CurrentUser = FINANCE_STAFF,
    db: AsyncSession = DB_DEPENDENCY,
    idempotency_key: str = IdempotencyKey,
) -> JSONResponse:
    """
    Record a payment received from a client.

    This operation is idempotent based on the Idempotency-Key header.
    """
    payment_service = ClientPaymentService(db)

    async def operation():
        payment = await payment_service.create_payment(
            current_user.tenant_uuid, request, user_id=current_user.user_uuid
        )
        return ClientPayment.model_validate(payment).model_dump(mode="json")

    try:
        return await handle_idempotent_operation(
            request=http_request,
            db=db,
            tenant_id=current_user.tenant_uuid,
            idempotency_key=idempotency_key,
            request_body=request.model_dump(mode="json"),
            operation_func=operation,
            status_code=status.HTTP_201_CREATED,
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        error = InternalServerError()
        logger.error(
            "Unexpected error in client payment creation",
            extra={
                "tenant_id": current_user.tenant_id,
                "booking_id": str(request.booking_id),
                "idempotency_key": idempotency_key,
                "error": str(e),
                "error_id": error.problem_details["error_id"],
            },
            exc_info=True
        )
        raise error from e


@client_payments_router.patch("/{payment_id}", response_model=ClientPayment)
async def update_client_payment(
    payment_id: UUID,
    request: UpdateClientPaymentRequest,
    current_user: CurrentUser = FINANCE_STAFF,
    db: AsyncSession = DB_DEPENDENCY,
):
    payment = await ClientPaymentService(db).update_payment(current_user.tenant_uuid, payment_id, request)
    return ClientPayment.model_validate(payment)


@client_payments_router.delete("/{payment_id}", response_model=MessageResponse)
async def delete_client_payment(payment_id: UUID, current_user: CurrentUser = FINANCE_STAFF, db: AsyncSession = DB_DEPENDENCY):
    await ClientPaymentService(db).delete_payment(current_user.tenant_uuid, payment_id)
    return MessageResponse(message="Payment deleted")


# Vendor payments

@vendor_payments_router.get("", response_model=PaginatedResponse[VendorPayment])
async def list_vendor_payments(
    booking_id: Optional[UUID] = Query(None),
    vendor_id: Optional[UUID] = Query(None),
    status_filter: Optional[PaymentStatus] = Query(None, alias="status"),
    pagination: PaginationParams = Pagination,
    current_user: CurrentUser = FINANCE_STAFF,
    db: AsyncSession = DB_DEPENDENCY,
):
    payments, total = await VendorPaymentService(db).list_payments(
        current_user.tenant_uuid, pagination, booking_id=booking_id, vendor_id=vendor_id, status=status_filter
    )
    return PaginatedResponse[VendorPayment].build(
        [VendorPayment.model_validate(p) for p in payments], total, pagination
    )


@vendor_payments_router.get("/{payment_id}", response_model=VendorPayment)
async def get_vendor_payment(payment_id: UUID, current_user: CurrentUser = FINANCE_STAFF, db: AsyncSession = DB_DEPENDENCY):
    payment = await VendorPaymentService(db).get_payment_by_id_or_raise(current_user.tenant_uuid, payment_id)
    return VendorPayment.model_validate(payment)


@vendor_payments_router.post("", response_model=VendorPayment, status_code=status.HTTP_201_CREATED)
async def create_vendor_payment(
    request: CreateVendorPaymentRequest,
    http_request: Request,
    current_user: CurrentUser = FINANCE_STAFF,
    db: AsyncSession = DB_DEPENDENCY,
    idempotency_key: str = IdempotencyKey,
) -> JSONResponse:
    """
    Schedule or record a payment to a vendor.

    This operation is idempotent based on the Idempotency-Key header.
    """
    payment_service = VendorPaymentService(db)

    async def operation():
        payment = await payment_service.create_payment(
            current_user.tenant_uuid, request, user_id=current_user.user_uuid
        )
        return VendorPayment.model_validate(payment).model_dump(mode="json")

    try:
        return await handle_idempotent_operation(
            request=http_request,
            db=db,
            tenant_id=current_user.tenant_uuid,
            idempotency_key=idempotency_key,
            request_body=request.model_dump(mode="json"),
            operation_func=operation,
            status_code=status.HTTP_201_CREATED,
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        error = InternalServerError()
        logger.error(
            "Unexpected error in vendor payment creation",
            extra={
                "tenant_id": current_user.tenant_id,
                "vendor_id": str(request.vendor_id),
                "idempotency_key": idempotency_key,
                "error": str(e),
                "error_id": error.problem_details["error_id"],
            },
            exc_info=True
        )
        raise error from e


@vendor_payments_router.patch("/{payment_id}", response_model=VendorPayment)
async def update_vendor_payment(
    payment_id: UUID,
    request: UpdateVendorPaymentRequest,
    current_user: CurrentUser = FINANCE_STAFF,
    db: AsyncSession = DB_DEPENDENCY,
):
    payment = await VendorPaymentService(db).update_payment(current_user.tenant_uuid, payment_id, request)
    return VendorPayment.model_validate(payment)


@vendor_payments_router.delete("/{payment_id}", response_model=MessageResponse)
async def delete_vendor_payment(payment_id: UUID, current_user: CurrentUser = FINANCE_STAFF, db: AsyncSession = DB_DEPENDENCY):
    await VendorPaymentService(db).delete_payment(current_user.tenant_uuid, payment_id)
    return MessageResponse(message="Payment deleted")
