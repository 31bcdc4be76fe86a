"""Client timeline: leads, quotations, bookings, payments and audit entries in one feed."""

import json
import logging
from datetime import datetime, time
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.audit_log import AuditLog
from ..models.booking import Booking
from ..models.client import Lead
from ..models.payment import PaymentClient
from ..models.quotation import Quotation
from ..schemas.timeline import ClientTimeline, TimelineEntry, TimelineEntryType
from .client_service import ClientService

logger = logging.getLogger(__name__)

AUDIT_ENTRY_LIMIT = 50


def _value(field: Any) -> Any:
    return getattr(field, "value", field)


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def lead_entry(lead: Lead) -> TimelineEntry:
    total_pax = lead.pax_adults + lead.pax_children
    return TimelineEntry(
        type=TimelineEntryType.LEAD,
        date=lead.inquiry_date,
        title=f"Lead created from {lead.source or 'Unknown source'}",
        description=lead.notes or f"Lead inquiry for {lead.destination or 'tour'} - {total_pax} pax",
        data={
            "id": str(lead.id),
            "source": lead.source,
            "destination": lead.destination,
            "status": _value(lead.status),
            "pax_adults": lead.pax_adults,
            "pax_children": lead.pax_children,
            "total_pax": total_pax,
        },
    )


def quotation_entry(quotation: Quotation) -> TimelineEntry:
    title = (quotation.custom_json or {}).get("title") or "Custom quotation"
    return TimelineEntry(
        type=TimelineEntryType.QUOTATION,
        date=quotation.created_at,
        title=f"Quotation - {_value(quotation.status)}",
        description=f"Total: €{quotation.sell_price_eur:.2f} | {title}",
        data={
            "id": str(quotation.id),
            "status": _value(quotation.status),
            "sell_price_eur": quotation.sell_price_eur,
            "title": title,
            "lead_id": str(quotation.lead_id),
        },
    )


def booking_entry(booking: Booking) -> TimelineEntry:
    return TimelineEntry(
        type=TimelineEntryType.BOOKING,
        date=booking.created_at,
        title=f"Booking {booking.booking_code} - {_value(booking.status)}",
        description=(
            f"{booking.start_date.isoformat()} to {booking.end_date.isoformat()} | €{booking.total_sell_eur:.2f}"
        ),
        data={
            "id": str(booking.id),
            "booking_code": booking.booking_code,
            "status": _value(booking.status),
            "start_date": booking.start_date.isoformat(),
            "end_date": booking.end_date.isoformat(),
            "total_sell_eur": booking.total_sell_eur,
        },
    )


def payment_entry(payment: PaymentClient, booking_code: str) -> TimelineEntry:
    return TimelineEntry(
        type=TimelineEntryType.PAYMENT,
        date=_as_datetime(payment.paid_at),
        title=f"Payment received: €{payment.amount_eur:.2f}",
        description=(
            f"Method: {_value(payment.method)} | Booking: {booking_code} | Status: {_value(payment.status)}"
        ),
        data={
            "id": str(payment.id),
            "amount_eur": payment.amount_eur,
            "method": _value(payment.method),
            "status": _value(payment.status),
            "booking_id": str(payment.booking_id),
            "booking_code": booking_code,
            "txn_ref": payment.txn_ref,
        },
    )


def audit_entry(log: AuditLog) -> TimelineEntry:
    return TimelineEntry(
        type=TimelineEntryType.AUDIT,
        date=log.created_at,
        title=log.action.replace("_", " "),
        description=json.dumps(log.diff_json) if log.diff_json else log.action,
        data={
            "id": str(log.id),
            "action": log.action,
            "user_id": str(log.user_id) if log.user_id else None,
            "entity": log.entity,
            "entity_id": log.entity_id,
            "diff_json": log.diff_json,
        },
    )


class TimelineService:
    """Builds a client's activity timeline from the rows that reference it."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_client_timeline(
        self, tenant_id: UUID, client_id: UUID, limit: Optional[int] = None
    ) -> ClientTimeline:
        """
        Every lead, quotation, booking and client payment of the client, plus
        its most recent audit entries, newest first.

        Raises:
            NotFoundError: If the client does not exist in the tenant
        """
        await ClientService(self.db).get_client_by_id_or_raise(tenant_id, client_id)

        leads = await self.db.scalars(
            select(Lead).where(Lead.tenant_id == tenant_id, Lead.client_id == client_id)
        )
        quotations = await self.db.scalars(
            select(Quotation)
            .join(Lead, Quotation.lead_id == Lead.id)
            .where(Quotation.tenant_id == tenant_id, Lead.client_id == client_id)
        )
        bookings = await self.db.scalars(
            select(Booking).where(Booking.tenant_id == tenant_id, Booking.client_id == client_id)
        )
        payments = await self.db.execute(
            select(PaymentClient, Booking.booking_code)
            .join(Booking, PaymentClient.booking_id == Booking.id)
            .where(PaymentClient.tenant_id == tenant_id, Booking.client_id == client_id)
        )
        audit_logs = await self.db.scalars(
            select(AuditLog)
            .where(
                AuditLog.tenant_id == tenant_id,
                AuditLog.entity == "client",
                AuditLog.entity_id == str(client_id),
            )
            .order_by(AuditLog.created_at.desc())
            .limit(AUDIT_ENTRY_LIMIT)
        )

        timeline = [lead_entry(lead) for lead in leads]
        timeline += [quotation_entry(quotation) for quotation in quotations]
        timeline += [booking_entry(booking) for booking in bookings]
        timeline += [payment_entry(payment, code) for payment, code in payments.all()]
        timeline += [audit_entry(log) for log in audit_logs]
        timeline.sort(key=lambda entry: entry.date, reverse=True)

        logger.debug(
            "Client timeline built",
            extra={"tenant_id": str(tenant_id), "client_id": str(client_id), "entries": len(timeline)}
        )
        return ClientTimeline(
            client_id=client_id,
            total=len(timeline),
            timeline=timeline[:limit] if limit else timeline,
        )
