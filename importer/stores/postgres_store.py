"""
PostgreSQL-backed job and item stores
"""

from typing import List, Dict, Any, Optional, Sequence
from datetime import datetime
import uuid
import logging

from sqlalchemy import select, update, insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from importer.base import JobStore, ItemStore, TargetCollection, TARGET_MODELS
from models.base import ImportJobStatus
from models.import_job import ImportJob
from schemas.jobs import ImportJobRecord
from core.exceptions import (
    JobAlreadyExistsError,
    StorageError,
    ConstraintViolationError,
    RecordNotFoundError
)

logger = logging.getLogger(__name__)


def _record_values(record: ImportJobRecord) -> Dict[str, Any]:
    """ORM attribute values for a job record; ledger and summary dump to plain dicts for JSONB"""
    return record.model_dump()


class PostgresJobStore(JobStore):
    """
    Job records in the ``import_jobs`` table.

    Each call opens its own short-lived session, so a job record write is
    committed independently of the item writes of the same chunk.
    """

    def __init__(self, session_maker: async_sessionmaker):
        self.session_maker = session_maker

    async def get(self, job_id: str) -> Optional[ImportJobRecord]:
        async with self.session_maker() as session:
            row = await session.get(ImportJob, job_id)
            return ImportJobRecord.model_validate(row) if row else None

    async def create(self, record: ImportJobRecord) -> ImportJobRecord:
        async with self.session_maker() as session:
            session.add(ImportJob(**_record_values(record)))
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise JobAlreadyExistsError(
                    f"Import job {record.id} already exists",
                    context={"job_id": record.id},
                    original_exception=e
                )
        return record

    async def list_jobs(
        self,
        tenant_id: Optional[str] = None,
        statuses: Optional[Sequence[ImportJobStatus]] = None,
        updated_before: Optional[datetime] = None,
        limit: int = 50
    ) -> List[ImportJobRecord]:
        stmt = select(ImportJob)
        if tenant_id is not None:
            stmt = stmt.where(ImportJob.tenant_id == tenant_id)
        if statuses is not None:
            stmt = stmt.where(ImportJob.status.in_(list(statuses)))
        if updated_before is not None:
            stmt = stmt.where(ImportJob.updated_at < updated_before)
        stmt = stmt.order_by(ImportJob.created_at.desc()).limit(limit)

        async with self.session_maker() as session:
            result = await session.execute(stmt)
            return [ImportJobRecord.model_validate(row) for row in result.scalars().all()]

    async def _write(self, record: ImportJobRecord) -> None:
        values = _record_values(record)
        job_id = values.pop("id")

        async with self.session_maker() as session:
            await session.execute(
                update(ImportJob)
                .where(ImportJob.id == job_id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            await session.commit()


class PostgresItemStore(ItemStore):
    """
    Imported items in the ``assets`` and ``purchase_order_lines`` tables.

    A chunk insert is one multi-row INSERT in one transaction, so a
    constraint violation on any row leaves the table untouched.
    """

    MODELS = TARGET_MODELS

    def __init__(self, session_maker: async_sessionmaker):
        self.session_maker = session_maker

    async def insert_rows(self, target: TargetCollection, rows: List[Dict[str, Any]]) -> int:
        if not rows:
            return 0

        model = self.MODELS[target]
        for row in rows:
            self._check_columns(target, row)

        async with self.session_maker() as session:
            await self._execute(session, target, "INSERT", insert(model), rows)

        logger.debug(f"Inserted {len(rows)} rows into {target.value}")
        return len(rows)

    async def update_row(
        self,
        target: TargetCollection,
        record_id: str,
        fields: Dict[str, Any]
    ) -> None:
        model = self.MODELS[target]
        try:
            key = uuid.UUID(str(record_id))
        except ValueError:
            raise RecordNotFoundError(
                f"{target.value} record {record_id} not found",
                context={"operation": "UPDATE", "table_name": target.value, "record_id": record_id}
            )

        self._check_columns(target, fields)

        async with self.session_maker() as session:
            if not fields:
                exists = await session.get(model, key)
                if exists is None:
                    raise RecordNotFoundError(
                        f"{target.value} record {record_id} not found",
                        context={"operation": "UPDATE", "table_name": target.value, "record_id": record_id}
                    )
                return

            stmt = (
                update(model)
                .where(model.id == key)
                .values(**fields)
                .execution_options(synchronize_session=False)
            )
            result = await self._execute(session, target, "UPDATE", stmt)

        if result.rowcount == 0:
            raise RecordNotFoundError(
                f"{target.value} record {record_id} not found",
                context={"operation": "UPDATE", "table_name": target.value, "record_id": record_id}
            )

    async def _execute(self, session: AsyncSession, target: TargetCollection, operation: str, stmt, params=None):
        try:
            result = await session.execute(stmt, params) if params is not None else await session.execute(stmt)
            await session.commit()
            return result
        except IntegrityError as e:
            await session.rollback()
            raise ConstraintViolationError(
                str(e.orig),
                context={"operation": operation, "table_name": target.value},
                original_exception=e
            )
        except SQLAlchemyError as e:
            await session.rollback()
            raise StorageError(
                str(getattr(e, "orig", None) or e),
                context={"operation": operation, "table_name": target.value},
                original_exception=e
            )

    def _check_columns(self, target: TargetCollection, row: Dict[str, Any]) -> None:
        columns = self.MODELS[target].__table__.c
        for key in row:
            if key not in columns:
                raise StorageError(
                    f'column "{key}" of relation "{target.value}" does not exist',
                    context={"table_name": target.value, "column": key}
                )
