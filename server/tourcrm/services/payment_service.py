"""Client and vendor payment services."""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.exceptions import NotFoundError, ValidationError
from ..core.observability import metrics_collector
from ..models.enums import PaymentStatus
from ..models.payment import PaymentClient, PaymentVendor
from ..schemas.common import PaginationParams
from ..schemas.payment import (
    ClientPaymentStats,
    CreateClientPaymentRequest,
    CreateVendorPaymentRequest,
    PaymentBreakdown,
    UpdateClientPaymentRequest,
    UpdateVendorPaymentRequest,
)
from .audit_service import AuditService
from .booking_service import BookingService
from .catalog_service import VendorService

logger = logging.getLogger(__name__)

# Statuses that count towards what a client has paid
COUNTED_STATUSES = (PaymentStatus.COMPLETED, PaymentStatus.PENDING)


class PaymentLimitExceededError(ValidationError):
    """Exception when a client payment would exceed the booking total."""

    def __init__(self, amount: float, total: float, remaining: float):
        super().__init__(
            detail=(
                f"Payment amount {amount:.2f} EUR would exceed booking total. "
                f"Total: {total:.2f} EUR, Remaining: {remaining:.2f} EUR"
            ),
            errors={"amount_eur": amount, "total_eur": total, "remaining_eur": remaining},
            code="PAYMENT_EXCEEDS_TOTAL",
        )


class ClientPaymentService:
    """Service for payments received from clients."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def get_payment_by_id(self, tenant_id: UUID, payment_id: UUID) -> Optional[PaymentClient]:
        stmt = select(PaymentClient).where(
            PaymentClient.id == payment_id,
            PaymentClient.tenant_id == tenant_id,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_payment_by_id_or_raise(self, tenant_id: UUID, payment_id: UUID) -> PaymentClient:
        payment = await self.get_payment_by_id(tenant_id, payment_id)
        if payment is None:
            raise NotFoundError(resource_type="payment", resource_id=str(payment_id))
        return payment

    async def list_payments(self, tenant_id: UUID, booking_id: Optional[UUID] = None) -> list[PaymentClient]:
        """Payments newest first, optionally for one booking."""
        conditions = [PaymentClient.tenant_id == tenant_id]
        if booking_id:
            conditions.append(PaymentClient.booking_id == booking_id)
        stmt = select(PaymentClient).where(*conditions).order_by(PaymentClient.paid_at.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def paid_total(self, tenant_id: UUID, booking_id: UUID, exclude_id: Optional[UUID] = None) -> float:
        conditions = [
            PaymentClient.tenant_id == tenant_id,
            PaymentClient.booking_id == booking_id,
            PaymentClient.status.in_([s.value for s in COUNTED_STATUSES]),
        ]
        if exclude_id is not None:
            conditions.append(PaymentClient.id != exclude_id)
        total = await self.db.scalar(
            select(func.coalesce(func.sum(PaymentClient.amount_eur), 0)).where(*conditions)
        )
        return float(total or 0)

    async def _check_limit(
        self,
        tenant_id: UUID,
        booking_total: float,
        booking_id: UUID,
        amount: float,
        status: PaymentStatus,
        exclude_id: Optional[UUID] = None,
    ) -> None:
        if not settings.enforce_payment_limit or PaymentStatus(status) not in COUNTED_STATUSES:
            return
        already_paid = await self.paid_total(tenant_id, booking_id, exclude_id=exclude_id)
        # Compare in cents to avoid float noise
        if round((already_paid + amount) * 100) > round(booking_total * 100):
            raise PaymentLimitExceededError(
                amount=amount,
                total=booking_total,
                remaining=max(booking_total - already_paid, 0.0),
            )

    async def create_payment(
        self, tenant_id: UUID, request: CreateClientPaymentRequest, user_id: Optional[UUID] = None
    ) -> PaymentClient:
        """
        Record a client payment.

        Raises:
            NotFoundError: If the booking does not exist in the tenant
            PaymentLimitExceededError: If the payment pushes the paid total above the booking total
        """
        booking = await BookingService(self.db).get_booking_by_id_or_raise(tenant_id, request.booking_id)
        await self._check_limit(
            tenant_id, booking.total_sell_eur, booking.id, request.amount_eur, request.status
        )

        data = request.model_dump()
        if data.get("paid_at") is None:
            data["paid_at"] = datetime.utcnow()

        payment = PaymentClient(tenant_id=tenant_id, **data)
        self.db.add(payment)
        await self.db.flush()
        self.audit.record(
            tenant_id, user_id, "CREATE", "payment_client", payment.id,
            {"booking_id": str(booking.id), "amount_eur": request.amount_eur, "method": request.method.value},
        )
        await self.db.commit()
        await self.db.refresh(payment)

        metrics_collector.record_client_payment(request.amount_eur)
        logger.info(
            "Client payment recorded",
            extra={
                "tenant_id": str(tenant_id),
                "payment_id": str(payment.id),
                "booking_id": str(booking.id),
                "amount_eur": request.amount_eur,
                "method": request.method.value,
            }
        )
        return payment

    async def update_payment(
        self, tenant_id: UUID, payment_id: UUID, request: UpdateClientPaymentRequest
    ) -> PaymentClient:
        payment = await self.get_payment_by_id_or_raise(tenant_id, payment_id)
        changes = request.model_dump(exclude_unset=True)

        if "amount_eur" in changes or "status" in changes:
            booking = await BookingService(self.db).get_booking_by_id_or_raise(tenant_id, payment.booking_id)
            await self._check_limit(
                tenant_id,
                booking.total_sell_eur,
                booking.id,
                changes.get("amount_eur", payment.amount_eur),
                changes.get("status") or payment.status,
                exclude_id=payment.id,
            )

        for field, value in changes.items():
            setattr(payment, field, value)

        await self.db.commit()
        await self.db.refresh(payment)
        return payment

    async def delete_payment(self, tenant_id: UUID, payment_id: UUID) -> None:
        payment = await self.get_payment_by_id_or_raise(tenant_id, payment_id)
        await self.db.delete(payment)
        await self.db.commit()

    async def get_stats(self, tenant_id: UUID) -> ClientPaymentStats:
        """Totals by method and by status."""
        async def _grouped(column):
            stmt = (
                select(column, func.count(PaymentClient.id), func.coalesce(func.sum(PaymentClient.amount_eur), 0))
                .where(PaymentClient.tenant_id == tenant_id)
                .group_by(column)
                .order_by(column)
            )
            rows = (await self.db.execute(stmt)).all()
            return [PaymentBreakdown(key=key, count=count, total_eur=round(float(total), 2)) for key, count, total in rows]

        by_method = await _grouped(PaymentClient.method)
        by_status = await _grouped(PaymentClient.status)
        return ClientPaymentStats(
            total_count=sum(b.count for b in by_method),
            total_eur=round(sum(b.total_eur for b in by_method), 2),
            by_method=by_method,
            by_status=by_status,
        )


class VendorPaymentService:
    """Service for payments owed to vendors."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def get_payment_by_id(self, tenant_id: UUID, payment_id: UUID) -> Optional[PaymentVendor]:
        stmt = select(PaymentVendor).where(
            PaymentVendor.id == payment_id,
            PaymentVendor.tenant_id == tenant_id,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_payment_by_id_or_raise(self, tenant_id: UUID, payment_id: UUID) -> PaymentVendor:
        payment = await self.get_payment_by_id(tenant_id, payment_id)
        if payment is None:
            raise NotFoundError(resource_type="vendor_payment", resource_id=str(payment_id))
        return payment

    async def list_payments(
        self,
        tenant_id: UUID,
        pagination: PaginationParams,
        booking_id: Optional[UUID] = None,
        vendor_id: Optional[UUID] = None,
        status: Optional[PaymentStatus] = None,
    ) -> tuple[list[PaymentVendor], int]:
        conditions = [PaymentVendor.tenant_id == tenant_id]
        if booking_id:
            conditions.append(PaymentVendor.booking_id == booking_id)
        if vendor_id:
            conditions.append(PaymentVendor.vendor_id == vendor_id)
        if status:
            conditions.append(PaymentVendor.status == status.value)

        total = await self.db.scalar(select(func.count()).select_from(PaymentVendor).where(*conditions))
        stmt = (
            select(PaymentVendor)
            .where(*conditions)
            .order_by(PaymentVendor.due_at)
            .offset(pagination.offset)
            .limit(pagination.limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total or 0

    async def create_payment(
        self, tenant_id: UUID, request: CreateVendorPaymentRequest, user_id: Optional[UUID] = None
    ) -> PaymentVendor:
        """
        Schedule or record a vendor payment.

        Raises:
            NotFoundError: If the booking or the vendor does not exist in the tenant
        """
        await BookingService(self.db).get_booking_by_id_or_raise(tenant_id, request.booking_id)
        await VendorService(self.db).get_vendor_by_id_or_raise(tenant_id, request.vendor_id)

        payment = PaymentVendor(tenant_id=tenant_id, **request.model_dump())
        self.db.add(payment)
        await self.db.flush()
        self.audit.record(
            tenant_id, user_id, "CREATE", "payment_vendor", payment.id,
            {
                "booking_id": str(request.booking_id),
                "vendor_id": str(request.vendor_id),
                "amount_try": request.amount_try,
            },
        )
        await self.db.commit()
        await self.db.refresh(payment)

        metrics_collector.record_vendor_payment()
        logger.info(
            "Vendor payment recorded",
            extra={
                "tenant_id": str(tenant_id),
                "payment_id": str(payment.id),
                "vendor_id": str(request.vendor_id),
                "amount_try": request.amount_try,
                "due_at": request.due_at.isoformat(),
            }
        )
        return payment

    async def update_payment(
        self, tenant_id: UUID, payment_id: UUID, request: UpdateVendorPaymentRequest
    ) -> PaymentVendor:
        payment = await self.get_payment_by_id_or_raise(tenant_id, payment_id)
        changes = request.model_dump(exclude_unset=True)
        if changes.get("status") == PaymentStatus.COMPLETED and not changes.get("paid_at") and not payment.paid_at:
            changes["paid_at"] = datetime.utcnow()

        for field, value in changes.items():
            setattr(payment, field, value)

        await self.db.commit()
        await self.db.refresh(payment)
        return payment

    async def delete_payment(self, tenant_id: UUID, payment_id: UUID) -> None:
        payment = await self.get_payment_by_id_or_raise(tenant_id, payment_id)
        await self.db.delete(payment)
        await self.db.commit()
