"""Unit tests for the data retention service."""

from datetime import date, datetime, timedelta

import pytest
from sqlalchemy import select

from tourcrm.models import AuditLog, Booking, Client, IdempotencyKey, Lead, Quotation
from tourcrm.models.enums import LeadStatus
from tourcrm.schemas.retention import RetentionPolicy
from tourcrm.services.idempotency_service import compute_request_hash
from tourcrm.services.retention_service import RetentionService

POLICY = RetentionPolicy(
    client_inactive_days=365,
    audit_log_days=90,
    idempotency_key_days=30,
    lead_days=180,
    booking_archive_days=365,
)


def days_ago(days: int) -> datetime:
    return datetime.utcnow() - timedelta(days=days)


def make_client(tenant, name, updated_days_ago):
    stamp = days_ago(updated_days_ago)
    return Client(tenant_id=tenant.id, name=name, created_at=stamp, updated_at=stamp)


def make_booking(tenant, client, code, created_days_ago):
    start = date.today() - timedelta(days=created_days_ago)
    return Booking(
        tenant_id=tenant.id,
        client_id=client.id,
        booking_code=code,
        start_date=start,
        end_date=start + timedelta(days=3),
        locked_exchange_rate=35.0,
        created_at=days_ago(created_days_ago),
    )


@pytest.mark.asyncio
async def test_archives_only_stale_clients_without_recent_bookings(test_session, tenant):
    stale = make_client(tenant, "Stale", 400)
    travelling = make_client(tenant, "Recently Booked", 400)
    fresh = make_client(tenant, "Fresh", 10)
    test_session.add_all([stale, travelling, fresh])
    await test_session.flush()
    test_session.add(make_booking(tenant, travelling, "BK-1", 20))
    await test_session.commit()

    result = await RetentionService(test_session, POLICY).run_archive(tenant.id)

    assert result.clients_archived == 1
    rows = (await test_session.execute(
        select(Client.name, Client.is_active).order_by(Client.name)
    )).all()
    assert dict(rows) == {"Fresh": True, "Recently Booked": True, "Stale": False}


@pytest.mark.asyncio
async def test_purge_removes_expired_records(test_session, tenant, client_record):
    test_session.add_all([
        AuditLog(tenant_id=tenant.id, action="CREATE", entity="client", created_at=days_ago(100)),
        AuditLog(tenant_id=tenant.id, action="CREATE", entity="client", created_at=days_ago(5)),
        IdempotencyKey(
            tenant_id=tenant.id,
            key="old",
            request_path="/v1/client-payments",
            request_method="POST",
            request_body_hash=compute_request_hash({}),
            response_status=201,
            response_body="{}",
            expires_at=days_ago(39),
            created_at=days_ago(40),
        ),
    ])
    dead = Lead(tenant_id=tenant.id, status=LeadStatus.LOST, created_at=days_ago(200))
    quoted = Lead(tenant_id=tenant.id, status=LeadStatus.LOST, created_at=days_ago(200))
    open_lead = Lead(tenant_id=tenant.id, status=LeadStatus.NEW, created_at=days_ago(200))
    test_session.add_all([dead, quoted, open_lead])
    await test_session.flush()
    test_session.add(Quotation(tenant_id=tenant.id, lead_id=quoted.id, custom_json={}))
    await test_session.commit()

    result = await RetentionService(test_session, POLICY).run_purge(tenant.id)

    assert result.audit_logs_deleted == 1
    assert result.idempotency_keys_deleted == 1
    assert result.leads_deleted == 1
    remaining = set((await test_session.execute(select(Lead.id))).scalars().all())
    assert remaining == {quoted.id, open_lead.id}


@pytest.mark.asyncio
async def test_tenant_scoped_run_leaves_other_tenants(test_session, tenant, other_tenant):
    test_session.add_all([make_client(tenant, "Mine", 400), make_client(other_tenant, "Theirs", 400)])
    await test_session.commit()

    result = await RetentionService(test_session, POLICY).run_now(tenant.id)

    assert result.clients_archived == 1
    theirs = (await test_session.execute(select(Client).where(Client.name == "Theirs"))).scalar_one()
    await test_session.refresh(theirs)
    assert theirs.is_active is True


@pytest.mark.asyncio
async def test_unscoped_run_covers_all_tenants(test_session, tenant, other_tenant):
    test_session.add_all([make_client(tenant, "Mine", 400), make_client(other_tenant, "Theirs", 400)])
    await test_session.commit()

    result = await RetentionService(test_session, POLICY).run_archive()

    assert result.clients_archived == 2


@pytest.mark.asyncio
async def test_stats_report_pending_actions(test_session, tenant):
    client = make_client(tenant, "Stale", 400)
    test_session.add(client)
    await test_session.flush()
    test_session.add(make_booking(tenant, client, "BK-OLD", 800))
    test_session.add(Lead(tenant_id=tenant.id, status=LeadStatus.LOST, created_at=days_ago(365)))
    await test_session.commit()

    stats = await RetentionService(test_session, POLICY).get_stats(tenant.id)

    assert stats.retention_policy == POLICY
    assert stats.pending_actions == {
        "clients_to_archive": 1,
        "audit_logs_to_delete": 0,
        "idempotency_keys_to_delete": 0,
        "leads_to_delete": 1,
        "bookings_past_archive_window": 1,
    }
    assert set(stats.next_run) == {"archive", "purge"}
