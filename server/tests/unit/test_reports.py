"""Tests for the profit and loss, revenue and leads reports."""

from datetime import date, datetime, timedelta

import pytest
import pytest_asyncio

from tourcrm.core.exceptions import ValidationError
from tourcrm.models.booking import Booking
from tourcrm.models.catalog import Vendor
from tourcrm.models.client import Lead
from tourcrm.models.enums import (
    BookingStatus,
    LeadStatus,
    PaymentMethod,
    PaymentStatus,
    VendorType,
)
from tourcrm.models.payment import PaymentClient, PaymentVendor
from tourcrm.models.quotation import Quotation
from tourcrm.schemas.report import LeadReportFilters, ReportFilters
from tourcrm.services.report_service import ReportService


async def add_booking(session, tenant, client, code, total_sell_eur, status=BookingStatus.CONFIRMED):
    start = date.today() + timedelta(days=30)
    booking = Booking(
        tenant_id=tenant.id,
        client_id=client.id,
        booking_code=code,
        start_date=start,
        end_date=start + timedelta(days=3),
        locked_exchange_rate=35.5,
        total_cost_try=17750,
        total_sell_eur=total_sell_eur,
        status=status,
    )
    session.add(booking)
    await session.flush()
    return booking


def client_payment(tenant, booking, amount, status=PaymentStatus.COMPLETED):
    return PaymentClient(
        tenant_id=tenant.id,
        booking_id=booking.id,
        amount_eur=amount,
        method=PaymentMethod.BANK_TRANSFER,
        status=status,
        paid_at=datetime.utcnow(),
    )


@pytest_asyncio.fixture
async def vendor_booking(test_session, tenant, client_record):
    """A 1000 EUR booking that has paid a vendor 17750 TRY."""
    booking = await add_booking(test_session, tenant, client_record, "BK-2026-0001", 1000)
    vendor = Vendor(tenant_id=tenant.id, name="Goreme Transfers", vendor_type=VendorType.TRANSPORT)
    test_session.add(vendor)
    await test_session.flush()
    test_session.add(PaymentVendor(
        tenant_id=tenant.id,
        booking_id=booking.id,
        vendor_id=vendor.id,
        amount_try=17750,
        due_at=date.today(),
        status=PaymentStatus.COMPLETED,
    ))
    await test_session.commit()
    return booking


@pytest_asyncio.fixture
async def paid_booking(test_session, tenant, vendor_booking):
    test_session.add_all([
        client_payment(tenant, vendor_booking, 1000),
        client_payment(tenant, vendor_booking, 200, status=PaymentStatus.FAILED),
    ])
    await test_session.commit()
    return vendor_booking


@pytest.mark.asyncio
async def test_pnl_converts_vendor_costs(test_session, tenant, try_eur_rate, paid_booking):
    report = await ReportService(test_session).get_pnl_report(tenant.id, ReportFilters())

    assert report.revenue.total_eur == 1000.0
    assert report.revenue.transaction_count == 1
    assert report.costs.total_try == 17750.0
    assert report.costs.exchange_rate_used == pytest.approx(35.5)
    assert report.costs.total_eur == 500.0
    assert report.profit.net_profit_eur == 500.0
    assert report.profit.profit_margin_pct == 50.0


@pytest.mark.asyncio
async def test_pnl_needs_a_rate_for_vendor_costs(test_session, tenant, paid_booking):
    with pytest.raises(ValidationError) as exc_info:
        await ReportService(test_session).get_pnl_report(tenant.id, ReportFilters())

    assert exc_info.value.problem_details["code"] == "EXCHANGE_RATE_MISSING"


@pytest.mark.asyncio
async def test_pnl_without_activity(test_session, tenant):
    report = await ReportService(test_session).get_pnl_report(tenant.id, ReportFilters())

    assert report.revenue.total_eur == 0.0
    assert report.costs.total_eur == 0.0
    assert report.profit.profit_margin_pct == 0.0


@pytest.mark.asyncio
async def test_pnl_period_excludes_other_days(test_session, tenant, try_eur_rate, paid_booking):
    tomorrow = date.today() + timedelta(days=1)

    report = await ReportService(test_session).get_pnl_report(
        tenant.id, ReportFilters(date_from=tomorrow, date_to=tomorrow)
    )

    assert report.revenue.transaction_count == 0
    assert report.costs.transaction_count == 0
    assert report.period.date_from == tomorrow


@pytest.mark.asyncio
async def test_revenue_by_status(test_session, tenant, client_record, paid_booking):
    await add_booking(test_session, tenant, client_record, "BK-2026-0002", 400, status=BookingStatus.CANCELLED)
    test_session.add(client_payment(tenant, paid_booking, 300, status=PaymentStatus.PENDING))
    await test_session.commit()

    today = date.today()
    report = await ReportService(test_session).get_revenue_report(
        tenant.id, ReportFilters(date_from=today, date_to=today)
    )

    assert report.summary.total_bookings_value_eur == 1400.0
    assert report.summary.total_bookings_count == 2
    assert report.summary.total_received_eur == 1000.0
    assert {row.status: row.amount_eur for row in report.by_payment_status} == {
        PaymentStatus.COMPLETED: 1000.0,
        PaymentStatus.FAILED: 200.0,
        PaymentStatus.PENDING: 300.0,
    }
    assert {row.status: row.count for row in report.by_booking_status} == {
        BookingStatus.CANCELLED: 1,
        BookingStatus.CONFIRMED: 1,
    }


@pytest_asyncio.fixture
async def pipeline(test_session, tenant, client_record, lead_record):
    """Four leads: one new (the lead_record), two won and one lost."""
    won = Lead(
        tenant_id=tenant.id,
        client_id=client_record.id,
        source="instagram",
        pax_adults=2,
        budget_eur=1000,
        status=LeadStatus.WON,
    )
    test_session.add_all([
        won,
        Lead(tenant_id=tenant.id, pax_adults=2, budget_eur=3000, status=LeadStatus.WON),
        Lead(tenant_id=tenant.id, source="website", pax_adults=1, status=LeadStatus.LOST),
    ])
    await test_session.flush()
    test_session.add(Quotation(tenant_id=tenant.id, lead_id=won.id, custom_json={}, sell_price_eur=900))
    await test_session.commit()


@pytest.mark.asyncio
async def test_leads_report(test_session, tenant, pipeline):
    report = await ReportService(test_session).get_leads_report(tenant.id, LeadReportFilters())

    summary = report.summary
    assert summary.total_leads == 4
    assert summary.won_leads == 2
    assert summary.lost_leads == 1
    assert summary.conversion_rate == 50.0
    assert summary.average_budget_eur == 2000.0
    assert summary.leads_with_quotations == 1

    assert report.by_source[0].source == "website"
    assert report.by_source[0].count == 2
    assert {row.source: row.percentage for row in report.by_source} == {
        "website": 50.0,
        "instagram": 25.0,
        "Unknown": 25.0,
    }


@pytest.mark.asyncio
async def test_leads_report_by_status(test_session, tenant, pipeline):
    report = await ReportService(test_session).get_leads_report(
        tenant.id, LeadReportFilters(status=LeadStatus.WON)
    )

    assert report.summary.total_leads == 2
    assert report.summary.conversion_rate == 100.0
    assert [row.status for row in report.by_status] == [LeadStatus.WON]


@pytest.mark.asyncio
async def test_pnl_endpoint(test_client, accounting_headers, try_eur_rate, paid_booking):
    response = await test_client.get("/v1/reports/pnl", headers=accounting_headers)

    assert response.status_code == 200, response.text
    assert response.json()["profit"]["net_profit_eur"] == 500.0


@pytest.mark.asyncio
async def test_finance_reports_need_finance_role(test_client, agent_headers):
    for path in ("/v1/reports/pnl", "/v1/reports/revenue"):
        response = await test_client.get(path, headers=agent_headers)
        assert response.status_code == 403


@pytest.mark.asyncio
async def test_leads_endpoint(test_client, operations_headers, accounting_headers, pipeline):
    response = await test_client.get("/v1/reports/leads", params={"status": "LOST"}, headers=operations_headers)

    assert response.status_code == 200, response.text
    assert response.json()["summary"]["total_leads"] == 1

    denied = await test_client.get("/v1/reports/leads", headers=accounting_headers)
    assert denied.status_code == 403


@pytest.mark.asyncio
async def test_reversed_date_range_is_rejected(test_client, accounting_headers):
    response = await test_client.get(
        "/v1/reports/revenue",
        params={"date_from": "2026-03-01", "date_to": "2026-02-01"},
        headers=accounting_headers,
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_DATE_RANGE"
