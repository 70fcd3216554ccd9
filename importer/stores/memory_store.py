"""
In-memory job and item stores for tests and local runs
"""

from typing import List, Dict, Any, Optional, Sequence
from datetime import datetime
import uuid
import logging

from importer.base import JobStore, ItemStore, TargetCollection, TARGET_MODELS
from models.base import ImportJobStatus
from schemas.jobs import ImportJobRecord
from core.exceptions import (
    JobAlreadyExistsError,
    StorageError,
    ConstraintViolationError,
    RecordNotFoundError
)

logger = logging.getLogger(__name__)


class InMemoryJobStore(JobStore):
    """
    Job records held in a dict.

    Every persisted version of a record is also kept in ``history`` so the
    sequence of writes for a job can be inspected.
    """

    def __init__(self):
        self._records: Dict[str, ImportJobRecord] = {}
        self.history: Dict[str, List[ImportJobRecord]] = {}

    async def get(self, job_id: str) -> Optional[ImportJobRecord]:
        record = self._records.get(job_id)
        return record.model_copy(deep=True) if record else None

    async def create(self, record: ImportJobRecord) -> ImportJobRecord:
        if record.id in self._records:
            raise JobAlreadyExistsError(
                f"Import job {record.id} already exists",
                context={"job_id": record.id}
            )
        await self._write(record)
        return record.model_copy(deep=True)

    async def list_jobs(
        self,
        tenant_id: Optional[str] = None,
        statuses: Optional[Sequence[ImportJobStatus]] = None,
        updated_before: Optional[datetime] = None,
        limit: int = 50
    ) -> List[ImportJobRecord]:
        jobs = [
            record for record in self._records.values()
            if (tenant_id is None or record.tenant_id == tenant_id)
            and (statuses is None or record.status in statuses)
            and (updated_before is None or record.updated_at < updated_before)
        ]
        jobs.sort(key=lambda record: record.created_at, reverse=True)
        return [record.model_copy(deep=True) for record in jobs[:limit]]

    async def _write(self, record: ImportJobRecord) -> None:
        snapshot = record.model_copy(deep=True)
        self._records[record.id] = snapshot
        self.history.setdefault(record.id, []).append(snapshot.model_copy(deep=True))


class InMemoryItemStore(ItemStore):
    """
    Target collections held in dicts keyed by record id.

    Mirrors the relational schema closely enough to fail the same way:
    unknown columns, values of the wrong type for their column, missing
    NOT NULL columns and duplicate (company_id, serial_number) assets are
    rejected, and a multi-row insert is all-or-nothing.
    """

    MODELS = TARGET_MODELS

    def __init__(self):
        self.tables: Dict[TargetCollection, Dict[str, Dict[str, Any]]] = {
            target: {} for target in self.MODELS
        }

    def rows(self, target: TargetCollection) -> List[Dict[str, Any]]:
        return list(self.tables[target].values())

    async def insert_rows(self, target: TargetCollection, rows: List[Dict[str, Any]]) -> int:
        table = self.tables[target]
        pending: Dict[str, Dict[str, Any]] = {}

        for row in rows:
            self._check_columns(target, row)
            self._check_types(target, row, "INSERT")
            self._check_required(target, row)
            record = dict(row)
            record_id = str(record.get("id") or uuid.uuid4())
            record["id"] = record_id
            if record_id in table or record_id in pending:
                raise ConstraintViolationError(
                    f'duplicate key value violates unique constraint "{target.value}_pkey"',
                    context={"operation": "INSERT", "table_name": target.value, "constraint_name": f"{target.value}_pkey"}
                )
            self._check_unique(target, record, list(table.values()) + list(pending.values()))
            pending[record_id] = record

        table.update(pending)
        return len(pending)

    async def update_row(
        self,
        target: TargetCollection,
        record_id: str,
        fields: Dict[str, Any]
    ) -> None:
        table = self.tables[target]
        current = table.get(str(record_id))
        if current is None:
            raise RecordNotFoundError(
                f"{target.value} record {record_id} not found",
                context={"operation": "UPDATE", "table_name": target.value, "record_id": record_id}
            )

        self._check_columns(target, fields)
        self._check_types(target, fields, "UPDATE")
        updated = {**current, **fields}
        others = [row for key, row in table.items() if key != str(record_id)]
        self._check_unique(target, updated, others)
        table[str(record_id)] = updated

    def _check_columns(self, target: TargetCollection, row: Dict[str, Any]) -> None:
        columns = self.MODELS[target].__table__.c
        for key in row:
            if key not in columns:
                raise StorageError(
                    f'column "{key}" of relation "{target.value}" does not exist',
                    context={"table_name": target.value, "column": key}
                )

    def _check_types(self, target: TargetCollection, row: Dict[str, Any], operation: str) -> None:
        """Reject values the database driver would refuse to bind to the column"""
        columns = self.MODELS[target].__table__.c
        for key, value in row.items():
            column = columns[key]
            if column.primary_key:
                continue
            if value is None:
                if not column.nullable:
                    raise ConstraintViolationError(
                        f'null value in column "{column.name}" of relation "{target.value}" '
                        f'violates not-null constraint',
                        context={"operation": operation, "table_name": target.value, "column": column.name}
                    )
                continue

            expected = column.type.python_type
            # Integers bind to float columns
            if expected is float and isinstance(value, int) and not isinstance(value, bool):
                continue
            if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
                raise StorageError(
                    f'invalid input for column "{column.name}" of relation "{target.value}": '
                    f'expected {expected.__name__}, got {type(value).__name__}',
                    context={"operation": operation, "table_name": target.value, "column": column.name}
                )

    def _check_required(self, target: TargetCollection, row: Dict[str, Any]) -> None:
        for column in self.MODELS[target].__table__.c:
            if column.nullable or column.primary_key or column.default is not None:
                continue
            if row.get(column.key) is None:
                raise ConstraintViolationError(
                    f'null value in column "{column.name}" of relation "{target.value}" '
                    f'violates not-null constraint',
                    context={"operation": "INSERT", "table_name": target.value, "column": column.name}
                )

    def _check_unique(
        self,
        target: TargetCollection,
        record: Dict[str, Any],
        existing: List[Dict[str, Any]]
    ) -> None:
        if target is not TargetCollection.ASSETS:
            return
        key = (record.get("company_id"), record.get("serial_number"))
        if any((row.get("company_id"), row.get("serial_number")) == key for row in existing):
            raise ConstraintViolationError(
                'duplicate key value violates unique constraint "idx_asset_company_serial"',
                context={
                    "table_name": target.value,
                    "constraint_name": "idx_asset_company_serial",
                    "serial_number": record.get("serial_number")
                }
            )
