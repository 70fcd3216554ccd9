"""
Abstract storage interfaces for the import pipeline.

Two seams keep the batch processor independent of where data lives:

- JobStore: durable job records, keyed by job id (get / create / update)
- ItemStore: target collections the imported items are written to
"""

from abc import ABC, abstractmethod
from typing import List, Dict, Any, Optional, Sequence
from datetime import datetime
import enum
import logging

from models.base import ImportJobStatus, JOB_STATUS_TRANSITIONS
from models.asset import Asset
from models.purchase_order_line import PurchaseOrderLine
from schemas.jobs import ImportJobRecord
from core.exceptions import JobNotFoundError, JobStateError

logger = logging.getLogger(__name__)


class TargetCollection(str, enum.Enum):
    """Collections an import can write to"""
    ASSETS = "assets"
    PURCHASE_ORDER_LINES = "purchase_order_lines"


# ORM model backing each collection
TARGET_MODELS = {
    TargetCollection.ASSETS: Asset,
    TargetCollection.PURCHASE_ORDER_LINES: PurchaseOrderLine,
}


class JobStore(ABC):
    """
    Key-value store of import job records.

    Responsibilities:
    - Create a record once per job id
    - Serve snapshots for polling
    - Enforce the job status state machine on every update

    Subclasses implement raw persistence (``_write``); the transition and
    counter checks live here so every backend behaves the same.
    """

    @abstractmethod
    async def get(self, job_id: str) -> Optional[ImportJobRecord]:
        """Return the current record for ``job_id``, or None"""
        pass

    @abstractmethod
    async def create(self, record: ImportJobRecord) -> ImportJobRecord:
        """
        Persist a new record.

        Raises:
            JobAlreadyExistsError: A record with the same id exists
        """
        pass

    @abstractmethod
    async def list_jobs(
        self,
        tenant_id: Optional[str] = None,
        statuses: Optional[Sequence[ImportJobStatus]] = None,
        updated_before: Optional[datetime] = None,
        limit: int = 50
    ) -> List[ImportJobRecord]:
        """Return matching records, newest first"""
        pass

    @abstractmethod
    async def _write(self, record: ImportJobRecord) -> None:
        """Overwrite the stored record with ``record``"""
        pass

    async def update(self, job_id: str, **changes: Any) -> ImportJobRecord:
        """
        Apply ``changes`` to a job record and persist the result.

        Raises:
            JobNotFoundError: No record for ``job_id``
            JobStateError: The record is terminal or the status change is not allowed
            pydantic.ValidationError: The resulting counters are inconsistent
        """
        current = await self.get(job_id)
        if current is None:
            raise JobNotFoundError(
                f"Import job {job_id} not found",
                context={"job_id": job_id}
            )

        requested = changes.get("status", current.status)
        check_transition(current, requested)

        data = current.model_dump()
        data.update(changes)
        data["updated_at"] = datetime.utcnow()
        record = ImportJobRecord(**data)

        await self._write(record)
        return record


def check_transition(current: ImportJobRecord, requested: ImportJobStatus) -> None:
    """Reject writes to terminal records and transitions outside the state machine"""
    if current.is_terminal:
        raise JobStateError(
            f"Import job {current.id} is {current.status.value} and can no longer change",
            context={
                "job_id": current.id,
                "current_status": current.status.value,
                "requested_status": ImportJobStatus(requested).value
            }
        )

    requested = ImportJobStatus(requested)
    if requested != current.status and requested not in JOB_STATUS_TRANSITIONS[current.status]:
        raise JobStateError(
            f"Import job {current.id} cannot move from {current.status.value} to {requested.value}",
            context={
                "job_id": current.id,
                "current_status": current.status.value,
                "requested_status": requested.value
            }
        )


class ItemStore(ABC):
    """
    Target storage for imported items.

    Implementations raise ``core.exceptions.StorageError`` subclasses with a
    plain message; the batch processor records that message per chunk.
    """

    @abstractmethod
    async def insert_rows(self, target: TargetCollection, rows: List[Dict[str, Any]]) -> int:
        """
        Insert ``rows`` as new records in one write.

        Either every row is stored or none is.

        Returns:
            Number of rows inserted
        """
        pass

    @abstractmethod
    async def update_row(
        self,
        target: TargetCollection,
        record_id: str,
        fields: Dict[str, Any]
    ) -> None:
        """
        Overwrite ``fields`` on the record identified by ``record_id``.

        Raises:
            RecordNotFoundError: No record has that id
        """
        pass
