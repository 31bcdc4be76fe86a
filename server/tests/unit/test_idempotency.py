"""Unit tests for idempotency key storage and replay."""

from datetime import datetime, timedelta

import pytest
from sqlalchemy import select

from tourcrm.models.idempotency import IdempotencyKey
from tourcrm.services.idempotency_service import (
    IdempotencyMismatchError,
    IdempotencyService,
    compute_request_hash,
)

PATH = "/v1/client-payments"


def test_request_hash_ignores_key_order():
    assert compute_request_hash({"a": 1, "b": [1, 2]}) == compute_request_hash({"b": [1, 2], "a": 1})
    assert compute_request_hash({"a": 1}) != compute_request_hash({"a": 2})
    assert len(compute_request_hash({})) == 64


@pytest.mark.asyncio
async def test_unknown_key_returns_none(test_session, tenant):
    service = IdempotencyService(test_session)
    assert await service.check_idempotency(tenant.id, "key-1", PATH, "POST", {"amount": 10}) is None


@pytest.mark.asyncio
async def test_stored_response_is_replayed(test_session, tenant):
    service = IdempotencyService(test_session)
    body = {"amount": 10}

    stored = await service.store_response(tenant.id, "key-1", PATH, "post", body, 201, {"id": "p-1"})
    cached = await service.check_idempotency(tenant.id, "key-1", PATH, "POST", body)

    assert stored is True
    assert cached == (201, {"id": "p-1"})


@pytest.mark.asyncio
async def test_reused_key_with_other_body_is_rejected(test_session, tenant):
    service = IdempotencyService(test_session)
    await service.store_response(tenant.id, "key-1", PATH, "POST", {"amount": 10}, 201, {"id": "p-1"})

    with pytest.raises(IdempotencyMismatchError) as exc_info:
        await service.check_idempotency(tenant.id, "key-1", PATH, "POST", {"amount": 11})

    assert exc_info.value.status_code == 422
    assert exc_info.value.problem_details["code"] == "IDEMPOTENCY_KEY_MISMATCH"


@pytest.mark.asyncio
async def test_failures_are_not_stored(test_session, tenant):
    service = IdempotencyService(test_session)

    stored = await service.store_response(tenant.id, "key-1", PATH, "POST", {}, 409, {"title": "Conflict"})

    assert stored is False
    assert await service.check_idempotency(tenant.id, "key-1", PATH, "POST", {}) is None


@pytest.mark.asyncio
async def test_keys_are_scoped_per_tenant(test_session, tenant, other_tenant):
    service = IdempotencyService(test_session)
    await service.store_response(tenant.id, "shared", PATH, "POST", {"amount": 10}, 201, {"id": "p-1"})

    assert await service.check_idempotency(other_tenant.id, "shared", PATH, "POST", {"amount": 99}) is None


@pytest.mark.asyncio
async def test_duplicate_store_is_ignored(test_session, tenant):
    service = IdempotencyService(test_session)
    await service.store_response(tenant.id, "key-1", PATH, "POST", {}, 201, {"id": "first"})

    stored = await service.store_response(tenant.id, "key-1", PATH, "POST", {}, 201, {"id": "second"})

    assert stored is False
    assert await service.check_idempotency(tenant.id, "key-1", PATH, "POST", {}) == (201, {"id": "first"})


@pytest.mark.asyncio
async def test_expired_key_runs_again(test_session, tenant):
    service = IdempotencyService(test_session)
    await service.store_response(tenant.id, "key-1", PATH, "POST", {}, 201, {"id": "p-1"}, ttl_hours=0)

    assert await service.check_idempotency(tenant.id, "key-1", PATH, "POST", {"other": True}) is None
    remaining = (await test_session.execute(select(IdempotencyKey))).scalars().all()
    assert remaining == []


@pytest.mark.asyncio
async def test_cleanup_expired_records(test_session, tenant):
    test_session.add(IdempotencyKey(
        tenant_id=tenant.id,
        key="old",
        request_path=PATH,
        request_method="POST",
        request_body_hash=compute_request_hash({}),
        response_status=201,
        response_body="{}",
        expires_at=datetime.utcnow() - timedelta(hours=1),
    ))
    await test_session.commit()
    service = IdempotencyService(test_session)
    await service.store_response(tenant.id, "fresh", PATH, "POST", {}, 201, {})

    assert await service.cleanup_expired_records() == 1
    keys = (await test_session.execute(select(IdempotencyKey.key))).scalars().all()
    assert keys == ["fresh"]
