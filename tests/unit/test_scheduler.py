import pytest
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock
from importer.scheduler import OrphanedJobMonitor
from models.base import ImportItemType, ImportJobStatus
from schemas.jobs import ImportJobRecord


async def _age(job_store, job_id, minutes):
    """Backdate a stored record"""
    record = await job_store.get(job_id)
    record.updated_at = datetime.utcnow() - timedelta(minutes=minutes)
    await job_store._write(record)


async def _seed(job_store, job_id, status=ImportJobStatus.PENDING):
    await job_store.create(ImportJobRecord(id=job_id, tenant_id="t1", item_type=ImportItemType.ASSET_CREATE))
    if status != ImportJobStatus.PENDING:
        await job_store.update(job_id, status=ImportJobStatus.PROCESSING)
    if status.is_terminal:
        await job_store.update(job_id, status=status)


def test_monitor_initialization(job_store):
    monitor = OrphanedJobMonitor(job_store, stale_after_minutes=15, interval_minutes=5)

    assert monitor.scheduler is not None
    assert monitor.stale_after == timedelta(minutes=15)
    assert monitor.interval_minutes == 5


@pytest.mark.asyncio
async def test_stale_jobs_reported(job_store, caplog):
    await _seed(job_store, "stuck", ImportJobStatus.PROCESSING)
    await _seed(job_store, "fresh", ImportJobStatus.PROCESSING)
    await _seed(job_store, "done", ImportJobStatus.COMPLETED)
    await _age(job_store, "stuck", 45)
    await _age(job_store, "done", 45)

    monitor = OrphanedJobMonitor(job_store, stale_after_minutes=30)
    orphans = await monitor.check_orphaned_jobs()

    assert [job.id for job in orphans] == ["stuck"]
    assert "Orphaned import job stuck" in caplog.text
    # Reporting never changes the job
    assert (await job_store.get("stuck")).status == ImportJobStatus.PROCESSING


@pytest.mark.asyncio
async def test_jobs_owned_by_worker_skipped(job_store):
    await _seed(job_store, "slow", ImportJobStatus.PROCESSING)
    await _age(job_store, "slow", 45)
    worker = MagicMock()
    worker.is_active.return_value = True

    monitor = OrphanedJobMonitor(job_store, worker=worker, stale_after_minutes=30)

    assert await monitor.check_orphaned_jobs() == []


@pytest.mark.asyncio
async def test_scan_failure_is_logged(caplog):
    job_store = AsyncMock()
    job_store.list_jobs.side_effect = RuntimeError("database unavailable")

    monitor = OrphanedJobMonitor(job_store)

    assert await monitor.check_orphaned_jobs() == []
    assert "database unavailable" in caplog.text


@pytest.mark.asyncio
async def test_start_registers_interval_job(job_store):
    monitor = OrphanedJobMonitor(job_store, interval_minutes=1)
    monitor.start()
    try:
        job = monitor.scheduler.get_job("orphaned_import_jobs")
        assert job is not None
        assert job.trigger.interval == timedelta(minutes=1)
    finally:
        monitor.stop()
