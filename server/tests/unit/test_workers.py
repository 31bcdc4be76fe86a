"""Tests for the background worker loop and the retention workers."""

import asyncio
from datetime import datetime, timedelta

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tourcrm.models import AuditLog, Client
from tourcrm.workers import retention_workers
from tourcrm.workers.base import BaseWorker
from tourcrm.workers.manager import WorkerManager
from tourcrm.workers.retention_workers import ArchiveWorker, PurgeWorker


class CountingWorker(BaseWorker):
    def __init__(self):
        super().__init__(name="Counting", interval_seconds=3600)
        self.calls = 0

    async def process(self) -> None:
        self.calls += 1


@pytest.fixture
def worker_sessions(test_engine, monkeypatch):
    """Point the retention workers at the test database."""
    factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    monkeypatch.setattr(retention_workers, "async_session_factory", factory)
    return factory


@pytest.mark.asyncio
async def test_worker_runs_once_then_stops():
    worker = CountingWorker()

    await worker.start()
    await asyncio.sleep(0.05)
    assert worker.is_running
    await worker.stop()

    assert worker.calls == 1
    assert worker.last_run_at is not None
    assert not worker.is_running


def test_manager_registers_retention_workers():
    manager = WorkerManager()

    assert manager.get_worker_status() == {"retention_archive": False, "retention_purge": False}
    assert isinstance(manager.get_worker("retention_archive"), ArchiveWorker)
    with pytest.raises(KeyError):
        manager.get_worker("unknown")


@pytest.mark.asyncio
async def test_manager_respects_disabled_workers():
    manager = WorkerManager()

    await manager.start_all()

    assert not any(manager.get_worker_status().values())


@pytest.mark.asyncio
async def test_archive_worker_covers_every_tenant(worker_sessions, test_session, tenant, other_tenant):
    stale = datetime.utcnow() - timedelta(days=5 * 365)
    test_session.add_all([
        Client(tenant_id=tenant.id, name="Mine", created_at=stale, updated_at=stale),
        Client(tenant_id=other_tenant.id, name="Theirs", created_at=stale, updated_at=stale),
    ])
    await test_session.commit()

    await ArchiveWorker().process()

    async with worker_sessions() as db:
        active = (await db.execute(select(Client).where(Client.is_active.is_(True)))).scalars().all()
    assert active == []


@pytest.mark.asyncio
async def test_purge_worker_deletes_old_audit_logs(worker_sessions, test_session, tenant):
    test_session.add(AuditLog(
        tenant_id=tenant.id,
        action="CREATE",
        entity="client",
        created_at=datetime.utcnow() - timedelta(days=8 * 365),
    ))
    await test_session.commit()

    await PurgeWorker().process()

    async with worker_sessions() as db:
        remaining = (await db.execute(select(AuditLog))).scalars().all()
    assert remaining == []
