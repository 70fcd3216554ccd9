# ============================================================================
# File: importer/processor.py
# Description: Chunked batch processor for bulk import jobs
# ============================================================================
"""
Batch Processor - applies a bulk import job to storage chunk by chunk.

This module provides:
- Pre-flight validation that rejects malformed jobs before any state exists
- Strictly sequential, input-ordered chunk processing
- Per-chunk failure isolation (a failed chunk never stops later chunks)
- A job record write after every chunk so progress can be polled
- Terminal status computation through the finalizer
"""

from typing import Dict, Any, Iterator, List, Optional
from datetime import datetime
import logging

from importer.base import JobStore, ItemStore
from importer.classifier import classify, ChunkOperation
from importer.finalizer import finalize, compute_progress
from importer.ledger import ErrorLedger
from models.base import ImportJobStatus
from schemas.jobs import ImportJobSpec, ImportJobRecord
from core.config import settings
from core.exceptions import EmptyItemsError, MissingFieldError

logger = logging.getLogger(__name__)


def iter_chunks(items: List[Dict[str, Any]], chunk_size: int) -> Iterator[List[Dict[str, Any]]]:
    """Yield consecutive slices of ``items`` of at most ``chunk_size``"""
    for start in range(0, len(items), chunk_size):
        yield items[start:start + chunk_size]


class BatchProcessor:
    """
    Bulk import orchestrator.

    Responsibilities:
    - Validate the job specification (pre-flight)
    - Create the pending job record
    - Apply the classified operation chunk by chunk
    - Keep counters, progress and the error ledger current after each chunk
    - Hand the processed job to the finalizer
    """

    def __init__(
        self,
        job_store: JobStore,
        item_store: ItemStore,
        chunk_size: Optional[int] = None
    ):
        self.job_store = job_store
        self.item_store = item_store
        self.chunk_size = chunk_size or settings.IMPORT_CHUNK_SIZE

        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")

    def preflight(self, spec: ImportJobSpec) -> ChunkOperation:
        """
        Reject job specifications that must never reach processing.

        Returns:
            The chunk operation for the job's item type

        Raises:
            MissingFieldError: job id or tenant is blank
            EmptyItemsError: the item list is empty
            UnknownJobTypeError: the item type is not recognized
        """
        if not spec.job_id or not spec.job_id.strip():
            raise MissingFieldError("Missing required field: jobId", context={"field_name": "jobId"})

        if not spec.tenant_id or not spec.tenant_id.strip():
            raise MissingFieldError(
                "Missing required field: companyId", context={"field_name": "companyId"}
            )

        if not spec.items:
            raise EmptyItemsError(
                "Import job has no items",
                context={"job_id": spec.job_id}
            )

        return classify(spec.item_type)

    async def accept(self, spec: ImportJobSpec) -> ImportJobRecord:
        """
        Validate ``spec`` and create its pending job record.

        Raises:
            PreflightError: The specification is rejected; no record is created
            JobAlreadyExistsError: A record already exists for the job id
        """
        self.preflight(spec)

        record = await self.job_store.create(
            ImportJobRecord(
                id=spec.job_id,
                tenant_id=spec.tenant_id,
                item_type=spec.item_type,
                status=ImportJobStatus.PENDING,
                total_rows=len(spec.items),
            )
        )

        logger.info(
            f"Accepted import job {spec.job_id} "
            f"(tenant={spec.tenant_id}, type={spec.item_type.value}, items={len(spec.items)})"
        )
        return record

    async def run(self, spec: ImportJobSpec) -> ImportJobRecord:
        """
        Process an accepted job to its terminal state.

        Storage failures inside a chunk are recorded and never abort the run.
        Failures writing the job record itself propagate and leave the job
        in ``processing``.

        Returns:
            The terminal job record
        """
        operation = self.preflight(spec)
        total_rows = len(spec.items)

        record = await self.job_store.update(
            spec.job_id,
            status=ImportJobStatus.PROCESSING,
            started_at=datetime.utcnow(),
            total_rows=total_rows,
        )

        logger.info(
            f"Processing import job {spec.job_id}: {total_rows} items, "
            f"chunk_size={self.chunk_size}, operation={operation!r}"
        )

        ledger = ErrorLedger()
        processed_rows = 0
        successful_rows = 0
        failed_rows = 0

        for chunk_index, chunk in enumerate(iter_chunks(spec.items, self.chunk_size)):
            try:
                await operation.apply(self.item_store, chunk)
                successful_rows += len(chunk)

            except Exception as e:
                failed_rows += len(chunk)
                entry = ledger.record(chunk_index, e, len(chunk))

                logger.error(
                    f"Import job {spec.job_id}: chunk {chunk_index} failed "
                    f"({len(chunk)} items): {entry.message}",
                    extra={"error_context": {
                        "job_id": spec.job_id,
                        "chunk_index": chunk_index,
                        "item_count": len(chunk),
                        "error_type": type(e).__name__,
                        "error_message": entry.message
                    }}
                )

            processed_rows += len(chunk)

            record = await self.job_store.update(
                spec.job_id,
                processed_rows=processed_rows,
                successful_rows=successful_rows,
                failed_rows=failed_rows,
                progress=compute_progress(processed_rows, total_rows),
                error_ledger=ledger.entries,
            )

            logger.debug(
                f"Import job {spec.job_id}: chunk {chunk_index} done, "
                f"progress={record.progress}%"
            )

        return await finalize(self.job_store, record, ledger)

    async def process(self, spec: ImportJobSpec) -> ImportJobRecord:
        """Accept and run ``spec`` in one call, returning the terminal record"""
        await self.accept(spec)
        return await self.run(spec)
