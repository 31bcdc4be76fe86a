"""Booking service for business logic operations."""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.observability import metrics_collector
from ..models.booking import Booking, BookingItem
from ..models.enums import BookingStatus
from ..models.quotation import Quotation
from ..schemas.booking import (
    BookingPnL,
    BookingStats,
    BookingStatusStats,
    CreateBookingItemRequest,
    CreateBookingRequest,
    UpdateBookingRequest,
)
from ..schemas.common import PaginationParams
from .client_service import ClientService

logger = logging.getLogger(__name__)


class DuplicateBookingCodeError(ConflictError):
    """Exception when a booking code is already used inside the tenant."""

    def __init__(self, booking_code: str):
        super().__init__(
            detail=f"Booking with code {booking_code} already exists",
            conflicting_resource={"booking_code": booking_code},
            code="BOOKING_CODE_EXISTS",
        )


async def next_booking_code(db: AsyncSession, tenant_id: UUID, year: Optional[int] = None) -> str:
    """``BK-<year>-<NNNN>`` one past the highest number already used that year."""
    year = year or datetime.utcnow().year
    prefix = f"BK-{year}-"
    codes = await db.scalars(
        select(Booking.booking_code).where(
            Booking.tenant_id == tenant_id, Booking.booking_code.like(f"{prefix}%")
        )
    )
    highest = 0
    for code in codes:
        suffix = code[len(prefix):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{prefix}{highest + 1:04d}"


def _round2(value: float) -> float:
    return round(value, 2)


class BookingService:
    """Service for booking-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_booking_by_id(
        self, tenant_id: UUID, booking_id: UUID, with_items: bool = False
    ) -> Optional[Booking]:
        stmt = select(Booking).where(Booking.id == booking_id, Booking.tenant_id == tenant_id)
        if with_items:
            stmt = stmt.options(selectinload(Booking.items))
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_booking_by_id_or_raise(
        self, tenant_id: UUID, booking_id: UUID, with_items: bool = False
    ) -> Booking:
        """
        Get booking by ID or raise NotFoundError.

        Raises:
            NotFoundError: If booking not found in the tenant
        """
        booking = await self.get_booking_by_id(tenant_id, booking_id, with_items=with_items)
        if booking is None:
            raise NotFoundError(resource_type="booking", resource_id=str(booking_id))
        return booking

    async def _code_taken(self, tenant_id: UUID, booking_code: str, exclude_id: Optional[UUID] = None) -> bool:
        conditions = [Booking.tenant_id == tenant_id, Booking.booking_code == booking_code]
        if exclude_id is not None:
            conditions.append(Booking.id != exclude_id)
        return (await self.db.scalar(select(Booking.id).where(*conditions))) is not None

    async def list_bookings(
        self,
        tenant_id: UUID,
        pagination: PaginationParams,
        status: Optional[BookingStatus] = None,
        client_id: Optional[UUID] = None,
    ) -> tuple[list[Booking], int]:
        conditions = [Booking.tenant_id == tenant_id]
        if status:
            conditions.append(Booking.status == status.value)
        if client_id:
            conditions.append(Booking.client_id == client_id)

        total = await self.db.scalar(select(func.count()).select_from(Booking).where(*conditions))
        stmt = (
            select(Booking)
            .where(*conditions)
            .order_by(Booking.start_date.desc())
            .offset(pagination.offset)
            .limit(pagination.limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total or 0

    async def create_booking(self, tenant_id: UUID, request: CreateBookingRequest) -> Booking:
        """
        Create a booking with optional items.

        Raises:
            NotFoundError: If the client does not exist in the tenant
            DuplicateBookingCodeError: If the booking code is taken
        """
        await ClientService(self.db).get_client_by_id_or_raise(tenant_id, request.client_id)
        if request.quotation_id is not None:
            quotation_found = await self.db.scalar(
                select(Quotation.id).where(Quotation.id == request.quotation_id, Quotation.tenant_id == tenant_id)
            )
            if quotation_found is None:
                raise ValidationError(detail=f"Quotation {request.quotation_id} not found")

        booking_code = request.booking_code or await next_booking_code(self.db, tenant_id)
        if await self._code_taken(tenant_id, booking_code):
            raise DuplicateBookingCodeError(booking_code)

        data = request.model_dump(exclude={"items", "booking_code"})
        booking = Booking(tenant_id=tenant_id, booking_code=booking_code, **data)
        booking.items = [
            BookingItem(tenant_id=tenant_id, **item.model_dump()) for item in request.items
        ]
        self.db.add(booking)
        await self.db.commit()

        metrics_collector.record_booking_created(source="direct")
        logger.info(
            "Booking created",
            extra={
                "tenant_id": str(tenant_id),
                "booking_id": str(booking.id),
                "booking_code": booking_code,
                "items": len(request.items),
            }
        )
        return await self.get_booking_by_id_or_raise(tenant_id, booking.id, with_items=True)

    async def update_booking(
        self, tenant_id: UUID, booking_id: UUID, request: UpdateBookingRequest
    ) -> Booking:
        booking = await self.get_booking_by_id_or_raise(tenant_id, booking_id)
        changes = request.model_dump(exclude_unset=True)

        code = changes.get("booking_code")
        if code and code != booking.booking_code and await self._code_taken(tenant_id, code, booking.id):
            raise DuplicateBookingCodeError(code)

        start = changes.get("start_date", booking.start_date)
        end = changes.get("end_date", booking.end_date)
        if end < start:
            raise ValidationError(detail="end_date must not be before start_date")

        for field, value in changes.items():
            setattr(booking, field, value)

        await self.db.commit()
        await self.db.refresh(booking)
        return booking

    async def delete_booking(self, tenant_id: UUID, booking_id: UUID) -> None:
        booking = await self.get_booking_by_id_or_raise(tenant_id, booking_id, with_items=True)
        await self.db.delete(booking)
        await self.db.commit()
        logger.info("Booking deleted", extra={"tenant_id": str(tenant_id), "booking_id": str(booking_id)})

    async def list_items(self, tenant_id: UUID, booking_id: UUID) -> list[BookingItem]:
        await self.get_booking_by_id_or_raise(tenant_id, booking_id)
        stmt = (
            select(BookingItem)
            .where(BookingItem.tenant_id == tenant_id, BookingItem.booking_id == booking_id)
            .order_by(BookingItem.service_date, BookingItem.created_at)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def add_item(
        self, tenant_id: UUID, booking_id: UUID, request: CreateBookingItemRequest
    ) -> BookingItem:
        await self.get_booking_by_id_or_raise(tenant_id, booking_id)
        item = BookingItem(tenant_id=tenant_id, booking_id=booking_id, **request.model_dump())
        self.db.add(item)
        await self.db.commit()
        await self.db.refresh(item)
        return item

    async def remove_item(self, tenant_id: UUID, booking_id: UUID, item_id: UUID) -> None:
        stmt = select(BookingItem).where(
            BookingItem.id == item_id,
            BookingItem.booking_id == booking_id,
            BookingItem.tenant_id == tenant_id,
        )
        item = (await self.db.execute(stmt)).scalar_one_or_none()
        if item is None:
            raise NotFoundError(resource_type="booking_item", resource_id=str(item_id))
        await self.db.delete(item)
        await self.db.commit()

    async def get_stats_by_status(self, tenant_id: UUID) -> BookingStats:
        stmt = (
            select(Booking.status, func.count(Booking.id), func.coalesce(func.sum(Booking.total_sell_eur), 0))
            .where(Booking.tenant_id == tenant_id)
            .group_by(Booking.status)
            .order_by(Booking.status)
        )
        rows = (await self.db.execute(stmt)).all()
        return BookingStats(by_status=[
            BookingStatusStats(status=status, count=count, total_sell_eur=_round2(float(total)))
            for status, count, total in rows
        ])

    async def calculate_pnl(self, tenant_id: UUID, booking_id: UUID) -> BookingPnL:
        """
        Profit and loss at the booking's locked exchange rate.

        Revenue is the sum of item sell prices, cost is the sum of item TRY
        costs converted at the locked rate.

        Raises:
            ValidationError: If the locked exchange rate is not positive
        """
        booking = await self.get_booking_by_id_or_raise(tenant_id, booking_id, with_items=True)

        rate = booking.locked_exchange_rate or 0
        if rate <= 0:
            raise ValidationError(detail="Locked exchange rate is not set for this booking")

        revenue_eur = sum(item.unit_price_eur * item.qty for item in booking.items)
        cost_try = sum(item.unit_cost_try * item.qty for item in booking.items)
        cost_eur = cost_try / rate
        profit_eur = revenue_eur - cost_eur
        margin_pct = profit_eur / revenue_eur * 100 if revenue_eur > 0 else 0.0

        return BookingPnL(
            booking_id=booking.id,
            booking_code=booking.booking_code,
            locked_exchange_rate=rate,
            revenue_eur=_round2(revenue_eur),
            cost_try=_round2(cost_try),
            cost_eur=_round2(cost_eur),
            profit_eur=_round2(profit_eur),
            margin_pct=_round2(margin_pct),
        )
