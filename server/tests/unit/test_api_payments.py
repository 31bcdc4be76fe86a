"""API tests for client payments, including idempotent replay."""

from datetime import date, timedelta

import pytest
import pytest_asyncio

from tourcrm.schemas.booking import CreateBookingRequest
from tourcrm.services.booking_service import BookingService


@pytest_asyncio.fixture
async def booking(test_session, tenant, client_record):
    start = date.today() + timedelta(days=45)
    return await BookingService(test_session).create_booking(
        tenant.id,
        CreateBookingRequest(
            client_id=client_record.id,
            start_date=start,
            end_date=start + timedelta(days=5),
            locked_exchange_rate=35.0,
            total_cost_try=28000,
            total_sell_eur=1000,
        ),
    )


def payment_body(booking, amount):
    return {"booking_id": str(booking.id), "amount_eur": amount, "method": "BANK_TRANSFER"}


@pytest.mark.asyncio
async def test_payment_requires_idempotency_key(test_client, accounting_headers, booking):
    response = await test_client.post("/v1/client-payments", json=payment_body(booking, 100), headers=accounting_headers)

    assert response.status_code == 409
    assert response.json()["code"] == "IDEMPOTENCY_KEY_REQUIRED"


@pytest.mark.asyncio
async def test_repeated_payment_is_replayed(test_client, accounting_headers, booking):
    headers = {**accounting_headers, "Idempotency-Key": "pay-1"}

    first = await test_client.post("/v1/client-payments", json=payment_body(booking, 250), headers=headers)
    replay = await test_client.post("/v1/client-payments", json=payment_body(booking, 250), headers=headers)

    assert first.status_code == 201, first.text
    assert replay.status_code == 201
    assert replay.headers["Idempotent-Replayed"] == "true"
    assert replay.json()["id"] == first.json()["id"]

    listed = await test_client.get(f"/v1/client-payments?booking_id={booking.id}", headers=accounting_headers)
    assert len(listed.json()) == 1


@pytest.mark.asyncio
async def test_reused_key_with_other_body(test_client, accounting_headers, booking):
    headers = {**accounting_headers, "Idempotency-Key": "pay-1"}
    await test_client.post("/v1/client-payments", json=payment_body(booking, 250), headers=headers)

    response = await test_client.post("/v1/client-payments", json=payment_body(booking, 300), headers=headers)

    assert response.status_code == 422
    assert response.json()["code"] == "IDEMPOTENCY_KEY_MISMATCH"


@pytest.mark.asyncio
async def test_payment_over_total(test_client, accounting_headers, booking):
    response = await test_client.post(
        "/v1/client-payments",
        json=payment_body(booking, 1000.01),
        headers={**accounting_headers, "Idempotency-Key": "pay-1"},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "PAYMENT_EXCEEDS_TOTAL"

    # Failures are not stored, so the same key runs the operation again
    retry = await test_client.post(
        "/v1/client-payments",
        json=payment_body(booking, 1000.01),
        headers={**accounting_headers, "Idempotency-Key": "pay-1"},
    )
    assert retry.status_code == 400
    assert "Idempotent-Replayed" not in retry.headers


@pytest.mark.asyncio
async def test_agent_cannot_record_payments(test_client, agent_headers, booking):
    response = await test_client.post(
        "/v1/client-payments",
        json=payment_body(booking, 100),
        headers={**agent_headers, "Idempotency-Key": "pay-1"},
    )

    assert response.status_code == 403
