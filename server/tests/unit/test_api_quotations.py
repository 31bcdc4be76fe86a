"""API tests for the quotation workflow and idempotent acceptance."""

import pytest


async def sent_quotation(test_client, headers, lead_record, items):
    created = await test_client.post(
        "/v1/quotations",
        json={
            "lead_id": str(lead_record.id),
            "custom_json": {"items": items},
            "calc_cost_try": 9500,
            "sell_price_eur": 360,
        },
        headers=headers,
    )
    assert created.status_code == 201, created.text
    assert created.json()["status"] == "DRAFT"

    quotation_id = created.json()["id"]
    sent = await test_client.post(f"/v1/quotations/{quotation_id}/send", headers=headers)
    assert sent.status_code == 200, sent.text
    assert sent.json()["quotation"]["status"] == "SENT"
    return quotation_id


@pytest.mark.asyncio
async def test_accept_requires_idempotency_key(
    test_client, admin_headers, lead_record, try_eur_rate, sample_quotation_items
):
    quotation_id = await sent_quotation(test_client, admin_headers, lead_record, sample_quotation_items)

    response = await test_client.post(f"/v1/quotations/{quotation_id}/accept", headers=admin_headers)

    assert response.status_code == 409
    assert response.json()["code"] == "IDEMPOTENCY_KEY_REQUIRED"


@pytest.mark.asyncio
async def test_accept_creates_booking_once(
    test_client, admin_headers, lead_record, try_eur_rate, sample_quotation_items
):
    quotation_id = await sent_quotation(test_client, admin_headers, lead_record, sample_quotation_items)
    headers = {**admin_headers, "Idempotency-Key": "accept-1"}

    first = await test_client.post(f"/v1/quotations/{quotation_id}/accept", headers=headers)

    assert first.status_code == 200, first.text
    body = first.json()
    assert body["quotation"]["status"] == "ACCEPTED"
    assert body["booking"]["locked_exchange_rate"] == 35.5
    assert body["booking"]["booking_code"] in body["message"]
    assert "Idempotent-Replayed" not in first.headers

    replay = await test_client.post(f"/v1/quotations/{quotation_id}/accept", headers=headers)

    assert replay.status_code == 200
    assert replay.headers["Idempotent-Replayed"] == "true"
    assert replay.json() == body

    bookings = await test_client.get("/v1/bookings", headers=admin_headers)
    assert bookings.json()["meta"]["total"] == 1


@pytest.mark.asyncio
async def test_second_accept_with_new_key_conflicts(
    test_client, admin_headers, lead_record, try_eur_rate, sample_quotation_items
):
    quotation_id = await sent_quotation(test_client, admin_headers, lead_record, sample_quotation_items)
    await test_client.post(
        f"/v1/quotations/{quotation_id}/accept",
        headers={**admin_headers, "Idempotency-Key": "accept-1"},
    )

    response = await test_client.post(
        f"/v1/quotations/{quotation_id}/accept",
        headers={**admin_headers, "Idempotency-Key": "accept-2"},
    )

    assert response.status_code == 409
    assert response.json()["code"] == "QUOTATION_ALREADY_ACCEPTED"


@pytest.mark.asyncio
async def test_accept_without_exchange_rate_is_not_stored(
    test_client, admin_headers, lead_record, sample_quotation_items
):
    quotation_id = await sent_quotation(test_client, admin_headers, lead_record, sample_quotation_items)
    headers = {**admin_headers, "Idempotency-Key": "accept-1"}

    response = await test_client.post(f"/v1/quotations/{quotation_id}/accept", headers=headers)

    assert response.status_code == 400
    fetched = await test_client.get(f"/v1/quotations/{quotation_id}", headers=admin_headers)
    assert fetched.json()["status"] == "SENT"


@pytest.mark.asyncio
async def test_draft_cannot_be_accepted(test_client, admin_headers, lead_record, sample_quotation_items):
    created = await test_client.post(
        "/v1/quotations",
        json={"lead_id": str(lead_record.id), "custom_json": {"items": sample_quotation_items}},
        headers=admin_headers,
    )

    response = await test_client.post(
        f"/v1/quotations/{created.json()['id']}/accept",
        headers={**admin_headers, "Idempotency-Key": "accept-1"},
    )

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_STATE_TRANSITION"


@pytest.mark.asyncio
async def test_reject_sent_quotation(test_client, admin_headers, lead_record, sample_quotation_items):
    quotation_id = await sent_quotation(test_client, admin_headers, lead_record, sample_quotation_items)

    response = await test_client.post(f"/v1/quotations/{quotation_id}/reject", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["quotation"]["status"] == "REJECTED"


@pytest.mark.asyncio
async def test_invalid_item_type_is_rejected(test_client, admin_headers, lead_record):
    response = await test_client.post(
        "/v1/quotations",
        json={
            "lead_id": str(lead_record.id),
            "custom_json": {"items": [{"item_type": "SPACESHIP", "qty": 1}]},
        },
        headers=admin_headers,
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_accounting_cannot_accept(test_client, accounting_headers, lead_record):
    response = await test_client.post(
        f"/v1/quotations/{lead_record.id}/accept",
        headers={**accounting_headers, "Idempotency-Key": "accept-1"},
    )

    assert response.status_code == 403
