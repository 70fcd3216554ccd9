"""
Finalizer: compute the terminal status of a fully processed job and write it.
"""

from datetime import datetime
import logging

from importer.base import JobStore
from importer.ledger import ErrorLedger
from models.base import ImportJobStatus
from schemas.jobs import ImportJobRecord, ResultSummary
from core.exceptions import JobStateError

logger = logging.getLogger(__name__)


def terminal_status(total_rows: int, failed_rows: int) -> ImportJobStatus:
    """
    A job fails only when every row failed.

    Partial success is reported as ``completed``; callers look at
    ``failed_rows`` or the error ledger to tell it apart from a clean run.
    """
    if total_rows > 0 and failed_rows == total_rows:
        return ImportJobStatus.FAILED
    return ImportJobStatus.COMPLETED


def compute_progress(processed_rows: int, total_rows: int) -> int:
    """Whole percentage of rows processed, floored and capped at 100"""
    if total_rows <= 0:
        return 100
    return min(processed_rows * 100 // total_rows, 100)


async def finalize(job_store: JobStore, record: ImportJobRecord, ledger: ErrorLedger) -> ImportJobRecord:
    """
    Write the terminal job record.

    Raises:
        JobStateError: Not every row has been processed yet
    """
    if record.processed_rows != record.total_rows:
        raise JobStateError(
            f"Import job {record.id} cannot be finalized with "
            f"{record.processed_rows}/{record.total_rows} rows processed",
            context={"job_id": record.id, "current_status": record.status.value}
        )

    status = terminal_status(record.total_rows, record.failed_rows)

    final = await job_store.update(
        record.id,
        status=status,
        progress=100,
        completed_at=datetime.utcnow(),
        error_ledger=ledger.entries,
        result_summary=ResultSummary(
            total=record.total_rows,
            successful=record.successful_rows,
            failed=record.failed_rows,
        ),
    )

    logger.info(
        f"Import job {record.id} {status.value}: "
        f"total={record.total_rows}, successful={record.successful_rows}, "
        f"failed={record.failed_rows}, failed_chunks={len(ledger)}"
    )
    return final
