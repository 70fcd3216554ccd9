"""
Unit tests for background job execution
"""

import asyncio
import pytest
from unittest.mock import AsyncMock
from conftest import make_assets, make_spec
from importer.processor import BatchProcessor
from importer.worker import ImportWorker
from models.base import ImportItemType, ImportJobStatus
from core.exceptions import EmptyItemsError


class SlowItemStore:
    """Item store whose inserts block until released"""

    def __init__(self):
        self.release = asyncio.Event()
        self.calls = 0

    async def insert_rows(self, target, rows):
        self.calls += 1
        await self.release.wait()
        return len(rows)

    async def update_row(self, target, record_id, fields):
        await self.release.wait()


@pytest.mark.asyncio
async def test_submit_returns_pending_record(job_store, item_store):
    worker = ImportWorker(BatchProcessor(job_store, item_store))
    spec = make_spec(ImportItemType.ASSET_CREATE, make_assets(10))

    record = await worker.submit(spec)

    assert record.status == ImportJobStatus.PENDING
    assert worker.is_active(spec.job_id)

    final = await worker.wait(spec.job_id)
    assert final.status == ImportJobStatus.COMPLETED
    assert final.successful_rows == 10
    assert not worker.is_active(spec.job_id)


@pytest.mark.asyncio
async def test_progress_visible_while_running(job_store):
    item_store = SlowItemStore()
    worker = ImportWorker(BatchProcessor(job_store, item_store, chunk_size=5))
    spec = make_spec(ImportItemType.ASSET_CREATE, make_assets(10))

    await worker.submit(spec)
    while item_store.calls == 0:
        await asyncio.sleep(0)

    running = await job_store.get(spec.job_id)
    assert running.status == ImportJobStatus.PROCESSING
    assert running.processed_rows == 0

    item_store.release.set()
    final = await worker.wait(spec.job_id)
    assert final.status == ImportJobStatus.COMPLETED


@pytest.mark.asyncio
async def test_preflight_rejection_schedules_nothing(job_store, item_store):
    worker = ImportWorker(BatchProcessor(job_store, item_store))

    with pytest.raises(EmptyItemsError):
        await worker.submit(make_spec(ImportItemType.ASSET_CREATE, [], job_id="job-empty"))

    assert worker.active_job_ids == []
    assert await job_store.get("job-empty") is None


@pytest.mark.asyncio
async def test_shutdown_leaves_job_processing(job_store):
    item_store = SlowItemStore()
    worker = ImportWorker(BatchProcessor(job_store, item_store))
    spec = make_spec(ImportItemType.ASSET_CREATE, make_assets(3))

    await worker.submit(spec)
    while item_store.calls == 0:
        await asyncio.sleep(0)

    await worker.shutdown()

    assert worker.active_job_ids == []
    assert (await job_store.get(spec.job_id)).status == ImportJobStatus.PROCESSING


@pytest.mark.asyncio
async def test_aborted_run_is_logged_not_raised(job_store, item_store, caplog):
    processor = BatchProcessor(job_store, item_store)
    processor.run = AsyncMock(side_effect=RuntimeError("job store unreachable"))
    worker = ImportWorker(processor)
    spec = make_spec(ImportItemType.ASSET_CREATE, make_assets(1))

    await worker.submit(spec)
    record = await worker.wait(spec.job_id)

    assert record.status == ImportJobStatus.PENDING
    assert "aborted" in caplog.text
