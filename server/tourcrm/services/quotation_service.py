"""Quotation service: CRUD and the DRAFT -> SENT -> ACCEPTED | REJECTED workflow."""

import logging
from datetime import date
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.exceptions import ConflictError, InvalidStateTransitionError, NotFoundError, ValidationError
from ..core.observability import metrics_collector
from ..models.booking import Booking, BookingItem
from ..models.client import Lead
from ..models.enums import BookingStatus, Currency, LeadStatus, QuotationStatus
from ..models.quotation import Quotation
from ..schemas.common import PaginationParams
from ..schemas.quotation import (
    CreateQuotationRequest,
    QuotationItem,
    QuotationStats,
    QuotationStatusStats,
    UpdateQuotationRequest,
)
from .audit_service import AuditService
from .booking_service import DuplicateBookingCodeError, next_booking_code
from .exchange_rate_service import ExchangeRateService
from .lead_service import LeadService

logger = logging.getLogger(__name__)


def quotation_items(quotation: Quotation) -> list[QuotationItem]:
    """Parsed ``custom_json.items`` of a quotation."""
    raw = (quotation.custom_json or {}).get("items") or []
    return [QuotationItem.model_validate(item) for item in raw]


def booking_dates(custom_json: dict[str, Any], items: list[QuotationItem]) -> tuple[date, date]:
    """
    Travel window for a booking created from a quotation.

    Explicit ``start_date``/``end_date`` in ``custom_json`` win; otherwise the
    span of the item service dates; otherwise today.
    """
    service_dates = [item.service_date for item in items if item.service_date]

    start = custom_json.get("start_date")
    end = custom_json.get("end_date")
    start = date.fromisoformat(start) if isinstance(start, str) else start
    end = date.fromisoformat(end) if isinstance(end, str) else end

    if start is None:
        start = min(service_dates) if service_dates else date.today()
    if end is None:
        end = max(service_dates) if service_dates else start
    if end < start:
        end = start
    return start, end


class QuotationService:
    """Service for quotation-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def get_quotation_by_id(self, tenant_id: UUID, quotation_id: UUID) -> Optional[Quotation]:
        stmt = (
            select(Quotation)
            .where(Quotation.id == quotation_id, Quotation.tenant_id == tenant_id)
            .options(
                selectinload(Quotation.lead).selectinload(Lead.client),
                selectinload(Quotation.booking),
            )
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_quotation_by_id_or_raise(self, tenant_id: UUID, quotation_id: UUID) -> Quotation:
        """
        Get quotation by ID or raise NotFoundError.

        Raises:
            NotFoundError: If quotation not found in the tenant
        """
        quotation = await self.get_quotation_by_id(tenant_id, quotation_id)
        if quotation is None:
            raise NotFoundError(resource_type="quotation", resource_id=str(quotation_id))
        return quotation

    async def list_quotations(
        self,
        tenant_id: UUID,
        pagination: PaginationParams,
        status: Optional[QuotationStatus] = None,
        lead_id: Optional[UUID] = None,
    ) -> tuple[list[Quotation], int]:
        conditions = [Quotation.tenant_id == tenant_id]
        if status:
            conditions.append(Quotation.status == status.value)
        if lead_id:
            conditions.append(Quotation.lead_id == lead_id)

        total = await self.db.scalar(select(func.count()).select_from(Quotation).where(*conditions))
        stmt = (
            select(Quotation)
            .where(*conditions)
            .order_by(Quotation.created_at.desc())
            .offset(pagination.offset)
            .limit(pagination.limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total or 0

    async def create_quotation(self, tenant_id: UUID, request: CreateQuotationRequest) -> Quotation:
        """
        Create a DRAFT quotation for an existing lead.

        Raises:
            NotFoundError: If the lead does not exist in the tenant
        """
        await LeadService(self.db).get_lead_by_id_or_raise(tenant_id, request.lead_id)

        quotation = Quotation(
            tenant_id=tenant_id,
            status=QuotationStatus.DRAFT,
            **request.model_dump(),
        )
        self.db.add(quotation)
        await self.db.commit()

        logger.info(
            "Quotation created",
            extra={
                "tenant_id": str(tenant_id),
                "quotation_id": str(quotation.id),
                "lead_id": str(request.lead_id),
                "sell_price_eur": request.sell_price_eur,
            }
        )
        return await self.get_quotation_by_id_or_raise(tenant_id, quotation.id)

    async def update_quotation(
        self, tenant_id: UUID, quotation_id: UUID, request: UpdateQuotationRequest
    ) -> Quotation:
        quotation = await self.get_quotation_by_id_or_raise(tenant_id, quotation_id)
        changes = request.model_dump(exclude_unset=True)

        for field, value in changes.items():
            setattr(quotation, field, value)

        await self.db.commit()
        await self.db.refresh(quotation)
        return quotation

    async def delete_quotation(self, tenant_id: UUID, quotation_id: UUID) -> None:
        quotation = await self.get_quotation_by_id_or_raise(tenant_id, quotation_id)
        await self.db.delete(quotation)
        await self.db.commit()
        logger.info(
            "Quotation deleted",
            extra={"tenant_id": str(tenant_id), "quotation_id": str(quotation_id)}
        )

    async def send_quotation(
        self, tenant_id: UUID, quotation_id: UUID, user_id: Optional[UUID] = None
    ) -> tuple[Quotation, str]:
        """
        Move a DRAFT quotation to SENT.

        Returns:
            The quotation and a confirmation message naming the recipient

        Raises:
            InvalidStateTransitionError: If the quotation is not a DRAFT
            ValidationError: If the client has no email address
        """
        quotation = await self.get_quotation_by_id_or_raise(tenant_id, quotation_id)

        if quotation.status != QuotationStatus.DRAFT:
            raise InvalidStateTransitionError(
                "Only DRAFT quotations can be sent", current_status=quotation.status, action="send"
            )

        client = quotation.lead.client if quotation.lead else None
        if client is None or not client.email:
            raise ValidationError(
                detail="Cannot send quotation: No email address found for the associated client"
            )

        quotation.status = QuotationStatus.SENT
        if quotation.lead.status in (LeadStatus.NEW, LeadStatus.CONTACTED):
            quotation.lead.status = LeadStatus.QUOTED
        self.audit.record(
            tenant_id, user_id, "SEND", "quotation", quotation.id,
            {"status": {"from": QuotationStatus.DRAFT.value, "to": QuotationStatus.SENT.value}},
        )
        await self.db.commit()

        metrics_collector.record_quotation_transition(QuotationStatus.SENT.value)
        logger.info(
            "Quotation sent",
            extra={"tenant_id": str(tenant_id), "quotation_id": str(quotation_id), "recipient": client.email}
        )
        return quotation, f"Quotation sent successfully to {client.email}"

    async def accept_quotation(
        self, tenant_id: UUID, quotation_id: UUID, user_id: Optional[UUID] = None
    ) -> tuple[Quotation, Booking]:
        """
        Accept a SENT quotation and turn it into a booking.

        The booking, its items and the status change are written in one
        transaction at the latest TRY/EUR rate, which is locked on the booking.

        Raises:
            NotFoundError: If quotation not found
            ConflictError: If already accepted or a booking already exists
            InvalidStateTransitionError: If the quotation is not SENT
            ValidationError: If there is no client or no exchange rate
        """
        quotation = await self.get_quotation_by_id_or_raise(tenant_id, quotation_id)

        if quotation.status == QuotationStatus.ACCEPTED:
            raise ConflictError(
                detail="Quotation has already been accepted",
                code="QUOTATION_ALREADY_ACCEPTED",
            )

        if quotation.booking is not None:
            raise ConflictError(
                detail=(
                    f"A booking already exists for this quotation "
                    f"(Booking Code: {quotation.booking.booking_code})"
                ),
                conflicting_resource={
                    "booking_id": str(quotation.booking.id),
                    "booking_code": quotation.booking.booking_code,
                },
                code="QUOTATION_BOOKING_EXISTS",
            )

        if quotation.status != QuotationStatus.SENT:
            raise InvalidStateTransitionError(
                "Only SENT quotations can be accepted", current_status=quotation.status, action="accept"
            )

        client = quotation.lead.client if quotation.lead else None
        if client is None:
            raise ValidationError(detail="Quotation lead has no associated client")

        rate = await ExchangeRateService(self.db).get_latest_rate(
            tenant_id, Currency.TRY, Currency.EUR, date.today()
        )
        if rate is None:
            raise ValidationError(detail="No exchange rate found for TRY to EUR")

        items = quotation_items(quotation)
        start_date, end_date = booking_dates(quotation.custom_json or {}, items)

        try:
            booking_code = await next_booking_code(self.db, tenant_id)
            booking = Booking(
                tenant_id=tenant_id,
                quotation=quotation,
                client_id=client.id,
                booking_code=booking_code,
                start_date=start_date,
                end_date=end_date,
                locked_exchange_rate=rate,
                total_cost_try=quotation.calc_cost_try,
                total_sell_eur=quotation.sell_price_eur,
                status=BookingStatus.CONFIRMED,
            )
            booking.items = [
                BookingItem(
                    tenant_id=tenant_id,
                    item_type=item.item_type,
                    description=item.description,
                    service_offering_id=item.service_offering_id,
                    vendor_id=item.vendor_id,
                    service_date=item.service_date,
                    qty=item.qty,
                    unit_cost_try=item.unit_cost_try,
                    unit_price_eur=item.unit_price_eur,
                )
                for item in items
            ]
            self.db.add(booking)

            quotation.status = QuotationStatus.ACCEPTED
            quotation.exchange_rate_used = rate
            quotation.lead.status = LeadStatus.WON
            self.audit.record(
                tenant_id, user_id, "ACCEPT", "quotation", quotation.id,
                {
                    "status": {"from": QuotationStatus.SENT.value, "to": QuotationStatus.ACCEPTED.value},
                    "booking_code": booking_code,
                    "locked_exchange_rate": rate,
                },
            )
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if "booking_code" in str(e.orig) or "uq_booking_tenant_code" in str(e.orig):
                logger.warning(
                    "Booking code collided during acceptance",
                    extra={"tenant_id": str(tenant_id), "quotation_id": str(quotation_id), "booking_code": booking_code}
                )
                raise DuplicateBookingCodeError(booking_code)
            logger.warning(
                "Quotation acceptance lost a race",
                extra={"tenant_id": str(tenant_id), "quotation_id": str(quotation_id), "error": str(e.orig)}
            )
            raise ConflictError(
                detail="Quotation has already been accepted",
                code="QUOTATION_ALREADY_ACCEPTED",
            )
        except Exception:
            await self.db.rollback()
            raise

        metrics_collector.record_quotation_transition(QuotationStatus.ACCEPTED.value)
        metrics_collector.record_booking_created(source="quotation")
        logger.info(
            "Quotation accepted",
            extra={
                "tenant_id": str(tenant_id),
                "quotation_id": str(quotation_id),
                "booking_id": str(booking.id),
                "booking_code": booking_code,
                "locked_exchange_rate": rate,
                "items": len(items),
            }
        )
        return quotation, booking

    async def reject_quotation(
        self, tenant_id: UUID, quotation_id: UUID, user_id: Optional[UUID] = None
    ) -> tuple[Quotation, str]:
        """
        Move a SENT quotation to REJECTED.

        Raises:
            InvalidStateTransitionError: If the quotation is not SENT
        """
        quotation = await self.get_quotation_by_id_or_raise(tenant_id, quotation_id)

        if quotation.status != QuotationStatus.SENT:
            raise InvalidStateTransitionError(
                "Only SENT quotations can be rejected", current_status=quotation.status, action="reject"
            )

        quotation.status = QuotationStatus.REJECTED
        self.audit.record(
            tenant_id, user_id, "REJECT", "quotation", quotation.id,
            {"status": {"from": QuotationStatus.SENT.value, "to": QuotationStatus.REJECTED.value}},
        )
        await self.db.commit()

        metrics_collector.record_quotation_transition(QuotationStatus.REJECTED.value)
        logger.info(
            "Quotation rejected",
            extra={"tenant_id": str(tenant_id), "quotation_id": str(quotation_id)}
        )
        return quotation, "Quotation rejected."

    async def get_stats_by_status(self, tenant_id: UUID) -> QuotationStats:
        stmt = (
            select(
                Quotation.status,
                func.count(Quotation.id),
                func.coalesce(func.sum(Quotation.calc_cost_try), 0),
                func.coalesce(func.sum(Quotation.sell_price_eur), 0),
            )
            .where(Quotation.tenant_id == tenant_id)
            .group_by(Quotation.status)
            .order_by(Quotation.status)
        )
        rows = (await self.db.execute(stmt)).all()
        return QuotationStats(by_status=[
            QuotationStatusStats(
                status=status,
                count=count,
                total_cost_try=round(float(cost), 2),
                total_sell_eur=round(float(sell), 2),
            )
            for status, count, cost, sell in rows
        ])
