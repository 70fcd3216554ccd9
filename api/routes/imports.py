"""
Bulk import endpoints: submit a job, poll it, list a tenant's jobs
"""

from fastapi import APIRouter, Depends, Query, Request, Response, status
from typing import Optional, Union
from api.dependencies import get_job_store, get_worker
from importer.base import JobStore
from importer.worker import ImportWorker
from models.base import ImportJobStatus
from schemas.api import (
    ImportJobRequest,
    ImportAcceptedResponse,
    ImportResultResponse,
    ImportJobStatusResponse,
    ImportJobListResponse,
)
from core.config import settings
from core.exceptions import JobNotFoundError
import uuid
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/imports", tags=["Imports"])


@router.post(
    "",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=Union[ImportResultResponse, ImportAcceptedResponse],
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
async def submit_import(
    body: ImportJobRequest,
    request: Request,
    response: Response,
    wait: bool = Query(False, description="Block until the job reaches a terminal state"),
    worker: ImportWorker = Depends(get_worker),
):
    """
    Submit a bulk import job.

    The job record is created before this returns; processing continues in
    the background. With ``wait=true`` the call returns the final counters
    and the error ledger instead.
    """
    request_id = getattr(request.state, "request_id", f"req_{uuid.uuid4().hex[:12]}")
    spec = body.to_spec()

    logger.info(
        f"[{request_id}] POST /imports - job={spec.job_id}, tenant={spec.tenant_id}, "
        f"type={spec.item_type.value}, items={len(spec.items)}, wait={wait}"
    )

    record = await worker.submit(spec)

    if wait:
        final = await worker.wait(spec.job_id)
        response.status_code = status.HTTP_200_OK
        return ImportResultResponse.from_record(final or record)

    return ImportAcceptedResponse(job_id=record.id, status=record.status)


@router.get("/{job_id}", response_model=ImportJobStatusResponse)
async def get_import(job_id: str, job_store: JobStore = Depends(get_job_store)):
    """Current snapshot of one import job"""
    record = await job_store.get(job_id)
    if record is None:
        raise JobNotFoundError(f"Import job {job_id} not found", context={"job_id": job_id})
    return ImportJobStatusResponse.from_record(record)


@router.get("", response_model=ImportJobListResponse)
async def list_imports(
    company_id: str = Query(..., min_length=1, description="Tenant whose jobs to list"),
    status_filter: Optional[ImportJobStatus] = Query(None, alias="status", description="Filter by status"),
    limit: int = Query(20, ge=1, le=settings.JOB_LIST_MAX_LIMIT, description="Maximum jobs returned"),
    job_store: JobStore = Depends(get_job_store),
):
    """A tenant's most recent import jobs, newest first"""
    records = await job_store.list_jobs(
        tenant_id=company_id,
        statuses=[status_filter] if status_filter else None,
        limit=limit,
    )
    jobs = [ImportJobStatusResponse.from_record(record) for record in records]
    return ImportJobListResponse(company_id=company_id, jobs=jobs, count=len(jobs))
