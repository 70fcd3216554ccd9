"""
Unit tests for the job record state machine
"""

import pytest
from pydantic import ValidationError
from importer.stores.memory_store import InMemoryJobStore
from models.base import ImportItemType, ImportJobStatus
from schemas.jobs import ImportJobRecord
from core.exceptions import JobAlreadyExistsError, JobNotFoundError, JobStateError


def _record(job_id="job-1", tenant_id="t1"):
    return ImportJobRecord(id=job_id, tenant_id=tenant_id, item_type=ImportItemType.ASSET_CREATE, total_rows=10)


@pytest.mark.asyncio
async def test_create_and_get(job_store):
    await job_store.create(_record())

    record = await job_store.get("job-1")
    assert record.status == ImportJobStatus.PENDING
    assert record.total_rows == 10
    assert await job_store.get("missing") is None


@pytest.mark.asyncio
async def test_create_refuses_existing_id(job_store):
    await job_store.create(_record())

    with pytest.raises(JobAlreadyExistsError):
        await job_store.create(_record())


@pytest.mark.asyncio
async def test_update_unknown_job(job_store):
    with pytest.raises(JobNotFoundError):
        await job_store.update("missing", progress=10)


@pytest.mark.asyncio
async def test_pending_cannot_skip_processing(job_store):
    await job_store.create(_record())

    with pytest.raises(JobStateError):
        await job_store.update("job-1", status=ImportJobStatus.COMPLETED)


@pytest.mark.asyncio
async def test_terminal_record_is_immutable(job_store):
    await job_store.create(_record())
    await job_store.update("job-1", status=ImportJobStatus.PROCESSING)
    await job_store.update(
        "job-1", status=ImportJobStatus.FAILED, processed_rows=10, failed_rows=10, progress=100
    )

    with pytest.raises(JobStateError):
        await job_store.update("job-1", progress=100)

    with pytest.raises(JobStateError):
        await job_store.update("job-1", status=ImportJobStatus.PROCESSING)


@pytest.mark.asyncio
async def test_inconsistent_counters_rejected(job_store):
    await job_store.create(_record())
    await job_store.update("job-1", status=ImportJobStatus.PROCESSING)

    with pytest.raises(ValidationError):
        await job_store.update("job-1", processed_rows=5, successful_rows=3, failed_rows=1)

    with pytest.raises(ValidationError):
        await job_store.update("job-1", processed_rows=11, successful_rows=11)

    # Rejected writes never reach the store
    assert (await job_store.get("job-1")).processed_rows == 0


@pytest.mark.asyncio
async def test_update_bumps_updated_at(job_store):
    created = await job_store.create(_record())
    updated = await job_store.update("job-1", status=ImportJobStatus.PROCESSING)

    assert updated.updated_at >= created.updated_at
    assert updated.created_at == created.created_at


@pytest.mark.asyncio
async def test_returned_records_are_snapshots(job_store):
    await job_store.create(_record())

    record = await job_store.get("job-1")
    record.progress = 90

    assert (await job_store.get("job-1")).progress == 0


@pytest.mark.asyncio
async def test_list_jobs_filters(job_store):
    await job_store.create(_record("a", tenant_id="t1"))
    await job_store.create(_record("b", tenant_id="t2"))
    await job_store.create(_record("c", tenant_id="t1"))
    await job_store.update("c", status=ImportJobStatus.PROCESSING)

    assert {r.id for r in await job_store.list_jobs(tenant_id="t1")} == {"a", "c"}
    assert [r.id for r in await job_store.list_jobs(statuses=[ImportJobStatus.PROCESSING])] == ["c"]
    assert len(await job_store.list_jobs(limit=2)) == 2
