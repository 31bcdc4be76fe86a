"""Unit tests for the quotation workflow and booking creation on acceptance."""

from datetime import date, datetime

import pytest
from sqlalchemy import select

from tourcrm.core.exceptions import ConflictError, InvalidStateTransitionError, ValidationError
from tourcrm.models import AuditLog, Client, Lead
from tourcrm.models.enums import BookingStatus, LeadStatus, QuotationStatus
from tourcrm.schemas.booking import CreateBookingRequest
from tourcrm.schemas.quotation import CreateQuotationRequest, QuotationItem
from tourcrm.services import quotation_service
from tourcrm.services.booking_service import BookingService, next_booking_code
from tourcrm.services.quotation_service import QuotationService, booking_dates


async def create_quotation(session, tenant, lead, items, **kwargs):
    request = CreateQuotationRequest(
        lead_id=lead.id,
        custom_json={"items": items},
        calc_cost_try=kwargs.pop("calc_cost_try", 9500),
        sell_price_eur=kwargs.pop("sell_price_eur", 360),
        **kwargs,
    )
    return await QuotationService(session).create_quotation(tenant.id, request)


@pytest.mark.asyncio
async def test_new_quotation_is_draft(test_session, tenant, lead_record, sample_quotation_items):
    quotation = await create_quotation(test_session, tenant, lead_record, sample_quotation_items)

    assert quotation.status == QuotationStatus.DRAFT
    assert quotation.lead_id == lead_record.id
    assert len(quotation.custom_json["items"]) == 2


@pytest.mark.asyncio
async def test_send_moves_draft_to_sent(test_session, tenant, lead_record, sample_quotation_items):
    service = QuotationService(test_session)
    quotation = await create_quotation(test_session, tenant, lead_record, sample_quotation_items)

    sent, message = await service.send_quotation(tenant.id, quotation.id)

    assert sent.status == QuotationStatus.SENT
    assert "ayse@example.com" in message
    assert sent.lead.status == LeadStatus.QUOTED


@pytest.mark.asyncio
async def test_send_twice_is_rejected(test_session, tenant, lead_record, sample_quotation_items):
    service = QuotationService(test_session)
    quotation = await create_quotation(test_session, tenant, lead_record, sample_quotation_items)
    await service.send_quotation(tenant.id, quotation.id)

    with pytest.raises(InvalidStateTransitionError):
        await service.send_quotation(tenant.id, quotation.id)


@pytest.mark.asyncio
async def test_send_requires_client_email(test_session, tenant, sample_quotation_items):
    client = Client(tenant_id=tenant.id, name="No Email")
    test_session.add(client)
    await test_session.flush()
    lead = Lead(tenant_id=tenant.id, client_id=client.id, status=LeadStatus.NEW)
    test_session.add(lead)
    await test_session.commit()

    quotation = await create_quotation(test_session, tenant, lead, sample_quotation_items)

    with pytest.raises(ValidationError) as exc_info:
        await QuotationService(test_session).send_quotation(tenant.id, quotation.id)
    assert "No email address" in exc_info.value.detail["detail"]


@pytest.mark.asyncio
async def test_draft_cannot_be_accepted(test_session, tenant, lead_record, try_eur_rate, sample_quotation_items):
    quotation = await create_quotation(test_session, tenant, lead_record, sample_quotation_items)

    with pytest.raises(InvalidStateTransitionError):
        await QuotationService(test_session).accept_quotation(tenant.id, quotation.id)


@pytest.mark.asyncio
async def test_accept_requires_exchange_rate(test_session, tenant, lead_record, sample_quotation_items):
    service = QuotationService(test_session)
    quotation = await create_quotation(test_session, tenant, lead_record, sample_quotation_items)
    await service.send_quotation(tenant.id, quotation.id)

    with pytest.raises(ValidationError) as exc_info:
        await service.accept_quotation(tenant.id, quotation.id)

    assert "No exchange rate" in exc_info.value.detail["detail"]
    refreshed = await service.get_quotation_by_id_or_raise(tenant.id, quotation.id)
    assert refreshed.status == QuotationStatus.SENT


@pytest.mark.asyncio
async def test_accept_creates_booking(
    test_session, tenant, lead_record, client_record, try_eur_rate, sample_quotation_items
):
    service = QuotationService(test_session)
    quotation = await create_quotation(test_session, tenant, lead_record, sample_quotation_items)
    await service.send_quotation(tenant.id, quotation.id)

    accepted, booking = await service.accept_quotation(tenant.id, quotation.id)

    assert accepted.status == QuotationStatus.ACCEPTED
    assert accepted.exchange_rate_used == 35.5
    assert accepted.lead.status == LeadStatus.WON

    assert booking.quotation_id == quotation.id
    assert booking.client_id == client_record.id
    assert booking.status == BookingStatus.CONFIRMED
    assert booking.locked_exchange_rate == 35.5
    assert booking.total_cost_try == 9500
    assert booking.total_sell_eur == 360
    assert booking.booking_code == f"BK-{datetime.utcnow().year}-0001"
    assert len(booking.items) == 2
    assert booking.start_date == date.fromisoformat(sample_quotation_items[0]["service_date"])
    assert booking.end_date == date.fromisoformat(sample_quotation_items[1]["service_date"])

    audit = (await test_session.execute(
        select(AuditLog).where(AuditLog.action == "ACCEPT", AuditLog.entity_id == str(quotation.id))
    )).scalar_one()
    assert audit.diff_json["booking_code"] == booking.booking_code


@pytest.mark.asyncio
async def test_second_accept_conflicts(test_session, tenant, lead_record, try_eur_rate, sample_quotation_items):
    service = QuotationService(test_session)
    quotation = await create_quotation(test_session, tenant, lead_record, sample_quotation_items)
    await service.send_quotation(tenant.id, quotation.id)
    await service.accept_quotation(tenant.id, quotation.id)

    with pytest.raises(ConflictError) as exc_info:
        await service.accept_quotation(tenant.id, quotation.id)

    assert exc_info.value.problem_details["code"] == "QUOTATION_ALREADY_ACCEPTED"


async def accept_new_quotation(session, tenant, lead, items):
    service = QuotationService(session)
    quotation = await create_quotation(session, tenant, lead, items)
    await service.send_quotation(tenant.id, quotation.id)
    return await service.accept_quotation(tenant.id, quotation.id)


@pytest.mark.asyncio
async def test_accept_after_booking_deleted(test_session, tenant, lead_record, try_eur_rate, sample_quotation_items):
    year = datetime.utcnow().year
    _, first = await accept_new_quotation(test_session, tenant, lead_record, sample_quotation_items)
    _, second = await accept_new_quotation(test_session, tenant, lead_record, sample_quotation_items)
    assert (first.booking_code, second.booking_code) == (f"BK-{year}-0001", f"BK-{year}-0002")

    await BookingService(test_session).delete_booking(tenant.id, first.id)

    accepted, third = await accept_new_quotation(test_session, tenant, lead_record, sample_quotation_items)

    assert accepted.status == QuotationStatus.ACCEPTED
    assert third.booking_code == f"BK-{year}-0003"


@pytest.mark.asyncio
async def test_booking_code_follows_highest_manual_code(test_session, tenant, client_record):
    year = datetime.utcnow().year
    await BookingService(test_session).create_booking(
        tenant.id,
        CreateBookingRequest(
            client_id=client_record.id,
            booking_code=f"BK-{year}-0007",
            start_date=date.today(),
            end_date=date.today(),
            locked_exchange_rate=35.0,
        ),
    )

    assert await next_booking_code(test_session, tenant.id) == f"BK-{year}-0008"
    assert await next_booking_code(test_session, tenant.id, year=year + 1) == f"BK-{year + 1}-0001"


@pytest.mark.asyncio
async def test_code_collision_is_not_reported_as_accepted(
    test_session, tenant, lead_record, try_eur_rate, sample_quotation_items, monkeypatch
):
    _, existing = await accept_new_quotation(test_session, tenant, lead_record, sample_quotation_items)
    service = QuotationService(test_session)
    quotation = await create_quotation(test_session, tenant, lead_record, sample_quotation_items)
    await service.send_quotation(tenant.id, quotation.id)
    taken_code = existing.booking_code

    async def reuse_code(db, tenant_id, year=None):
        return taken_code

    monkeypatch.setattr(quotation_service, "next_booking_code", reuse_code)

    with pytest.raises(ConflictError) as exc_info:
        await service.accept_quotation(tenant.id, quotation.id)

    assert exc_info.value.problem_details["code"] == "BOOKING_CODE_EXISTS"
    refreshed = await service.get_quotation_by_id_or_raise(tenant.id, quotation.id)
    assert refreshed.status == QuotationStatus.SENT


@pytest.mark.asyncio
async def test_reject_sent_quotation(test_session, tenant, lead_record, sample_quotation_items):
    service = QuotationService(test_session)
    quotation = await create_quotation(test_session, tenant, lead_record, sample_quotation_items)
    await service.send_quotation(tenant.id, quotation.id)

    rejected, message = await service.reject_quotation(tenant.id, quotation.id)

    assert rejected.status == QuotationStatus.REJECTED
    assert message == "Quotation rejected."

    with pytest.raises(InvalidStateTransitionError):
        await service.accept_quotation(tenant.id, quotation.id)


@pytest.mark.asyncio
async def test_draft_cannot_be_rejected(test_session, tenant, lead_record, sample_quotation_items):
    quotation = await create_quotation(test_session, tenant, lead_record, sample_quotation_items)

    with pytest.raises(InvalidStateTransitionError):
        await QuotationService(test_session).reject_quotation(tenant.id, quotation.id)


@pytest.mark.asyncio
async def test_stats_group_by_status(test_session, tenant, lead_record, sample_quotation_items):
    service = QuotationService(test_session)
    first = await create_quotation(test_session, tenant, lead_record, sample_quotation_items)
    await create_quotation(test_session, tenant, lead_record, sample_quotation_items, sell_price_eur=100)
    await service.send_quotation(tenant.id, first.id)

    stats = await service.get_stats_by_status(tenant.id)

    by_status = {row.status: row for row in stats.by_status}
    assert by_status[QuotationStatus.DRAFT].count == 1
    assert by_status[QuotationStatus.DRAFT].total_sell_eur == 100
    assert by_status[QuotationStatus.SENT].count == 1


def test_booking_dates_prefer_explicit_window():
    items = [QuotationItem(item_type="HOTEL", service_date=date(2025, 6, 10))]
    start, end = booking_dates({"start_date": "2025-06-01", "end_date": "2025-06-14"}, items)
    assert (start, end) == (date(2025, 6, 1), date(2025, 6, 14))


def test_booking_dates_span_items():
    items = [
        QuotationItem(item_type="HOTEL", service_date=date(2025, 6, 12)),
        QuotationItem(item_type="GUIDE", service_date=date(2025, 6, 10)),
        QuotationItem(item_type="FEE"),
    ]
    assert booking_dates({}, items) == (date(2025, 6, 10), date(2025, 6, 12))


def test_booking_dates_default_to_today():
    assert booking_dates({}, []) == (date.today(), date.today())
