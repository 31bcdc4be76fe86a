"""Tests for the client activity timeline."""

from datetime import date, datetime, timedelta

import pytest
import pytest_asyncio

from tourcrm.core.exceptions import NotFoundError
from tourcrm.models import Client
from tourcrm.models.booking import Booking
from tourcrm.models.client import Lead
from tourcrm.models.enums import (
    BookingStatus,
    LeadStatus,
    PaymentMethod,
    PaymentStatus,
    QuotationStatus,
)
from tourcrm.models.payment import PaymentClient
from tourcrm.models.quotation import Quotation
from tourcrm.schemas.client import UpdateClientRequest
from tourcrm.schemas.timeline import TimelineEntryType
from tourcrm.services.client_service import ClientService
from tourcrm.services.timeline_service import TimelineService


def days_ago(days: int) -> datetime:
    return datetime.utcnow() - timedelta(days=days)


@pytest_asyncio.fixture
async def client_history(test_session, tenant, client_record):
    """A lead, quotation, booking and payment spread over the last ten days."""
    lead = Lead(
        tenant_id=tenant.id,
        client_id=client_record.id,
        source="instagram",
        destination="Ephesus",
        pax_adults=2,
        pax_children=1,
        status=LeadStatus.WON,
        inquiry_date=days_ago(10),
    )
    test_session.add(lead)
    await test_session.flush()

    test_session.add(Quotation(
        tenant_id=tenant.id,
        lead_id=lead.id,
        custom_json={"title": "Ephesus in three days"},
        sell_price_eur=1500,
        status=QuotationStatus.ACCEPTED,
        created_at=days_ago(5),
    ))
    booking = Booking(
        tenant_id=tenant.id,
        client_id=client_record.id,
        booking_code="BK-2026-0042",
        start_date=date.today() + timedelta(days=20),
        end_date=date.today() + timedelta(days=23),
        locked_exchange_rate=35.0,
        total_cost_try=30000,
        total_sell_eur=1500,
        status=BookingStatus.CONFIRMED,
        created_at=days_ago(2),
    )
    test_session.add(booking)
    await test_session.flush()

    test_session.add(PaymentClient(
        tenant_id=tenant.id,
        booking_id=booking.id,
        amount_eur=500,
        method=PaymentMethod.CREDIT_CARD,
        status=PaymentStatus.COMPLETED,
        paid_at=days_ago(1),
    ))
    await test_session.commit()
    return booking


@pytest.mark.asyncio
async def test_timeline_is_newest_first(test_session, tenant, admin_user, client_record, client_history):
    await ClientService(test_session).update_client(
        tenant.id, client_record.id, UpdateClientRequest(phone="+90 555 000 0000"), user_id=admin_user.id
    )

    timeline = await TimelineService(test_session).get_client_timeline(tenant.id, client_record.id)

    assert timeline.total == 5
    assert [entry.type for entry in timeline.timeline] == [
        TimelineEntryType.AUDIT,
        TimelineEntryType.PAYMENT,
        TimelineEntryType.BOOKING,
        TimelineEntryType.QUOTATION,
        TimelineEntryType.LEAD,
    ]

    audit, payment, booking, quotation, lead = timeline.timeline
    assert audit.data["action"] == "UPDATE"
    assert audit.data["diff_json"] == {"phone": "+90 555 000 0000"}
    assert payment.data["booking_code"] == "BK-2026-0042"
    assert payment.title == "Payment received: €500.00"
    assert booking.title == "Booking BK-2026-0042 - CONFIRMED"
    assert quotation.data["title"] == "Ephesus in three days"
    assert lead.data["total_pax"] == 3
    assert lead.title == "Lead created from instagram"


@pytest.mark.asyncio
async def test_timeline_limit_keeps_total(test_session, tenant, client_record, client_history):
    timeline = await TimelineService(test_session).get_client_timeline(tenant.id, client_record.id, limit=2)

    assert timeline.total == 4
    assert [entry.type for entry in timeline.timeline] == [TimelineEntryType.PAYMENT, TimelineEntryType.BOOKING]


@pytest.mark.asyncio
async def test_timeline_skips_other_clients(test_session, tenant, client_record, client_history):
    stranger = Client(tenant_id=tenant.id, name="Someone Else")
    test_session.add(stranger)
    await test_session.commit()

    timeline = await TimelineService(test_session).get_client_timeline(tenant.id, stranger.id)

    assert timeline.total == 0
    assert timeline.timeline == []


@pytest.mark.asyncio
async def test_deactivation_is_on_the_timeline(test_session, tenant, client_record):
    await ClientService(test_session).remove_client(tenant.id, client_record.id)

    timeline = await TimelineService(test_session).get_client_timeline(tenant.id, client_record.id)

    assert [entry.data["action"] for entry in timeline.timeline] == ["DEACTIVATE"]
    assert timeline.timeline[0].data["diff_json"] == {"is_active": {"from": True, "to": False}}


@pytest.mark.asyncio
async def test_timeline_of_another_tenants_client(test_session, other_tenant, client_record):
    with pytest.raises(NotFoundError):
        await TimelineService(test_session).get_client_timeline(other_tenant.id, client_record.id)


@pytest.mark.asyncio
async def test_timeline_endpoint(test_client, operations_headers, other_tenant_headers, client_record, client_history):
    response = await test_client.get(
        f"/v1/clients/{client_record.id}/timeline", params={"limit": 1}, headers=operations_headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["client_id"] == str(client_record.id)
    assert data["total"] == 4
    assert data["timeline"][0]["type"] == "PAYMENT"

    hidden = await test_client.get(f"/v1/clients/{client_record.id}/timeline", headers=other_tenant_headers)
    assert hidden.status_code == 404
