"""
Unit tests for item stores
"""

import uuid
import pytest
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy.exc import IntegrityError, OperationalError
from conftest import make_assets, make_po_lines
from importer.base import TargetCollection
from importer.stores.postgres_store import PostgresItemStore, PostgresJobStore
from models.base import ImportItemType
from schemas.jobs import ImportJobRecord
from core.exceptions import (
    ConstraintViolationError,
    JobAlreadyExistsError,
    RecordNotFoundError,
    StorageError,
)


class TestInMemoryItemStore:

    @pytest.mark.asyncio
    async def test_insert_assigns_ids(self, item_store):
        count = await item_store.insert_rows(TargetCollection.ASSETS, make_assets(3))

        rows = item_store.rows(TargetCollection.ASSETS)
        assert count == 3
        assert all(uuid.UUID(row["id"]) for row in rows)

    @pytest.mark.asyncio
    async def test_insert_is_all_or_nothing(self, item_store):
        rows = make_assets(3)
        rows[2]["serial_number"] = rows[0]["serial_number"]

        with pytest.raises(ConstraintViolationError):
            await item_store.insert_rows(TargetCollection.ASSETS, rows)

        assert item_store.rows(TargetCollection.ASSETS) == []

    @pytest.mark.asyncio
    async def test_same_serial_allowed_across_tenants(self, item_store):
        await item_store.insert_rows(TargetCollection.ASSETS, make_assets(1, tenant_id="t1"))
        await item_store.insert_rows(TargetCollection.ASSETS, make_assets(1, tenant_id="t2"))

        assert len(item_store.rows(TargetCollection.ASSETS)) == 2

    @pytest.mark.asyncio
    async def test_not_null_column_required(self, item_store):
        line = make_po_lines(1)[0]
        del line["quantity_ordered"]

        with pytest.raises(ConstraintViolationError) as exc_info:
            await item_store.insert_rows(TargetCollection.PURCHASE_ORDER_LINES, [line])

        assert 'column "quantity_ordered"' in exc_info.value.message

    @pytest.mark.asyncio
    async def test_unknown_column_rejected(self, item_store):
        with pytest.raises(StorageError):
            await item_store.insert_rows(TargetCollection.ASSETS, [{**make_assets(1)[0], "colour": "red"}])

    @pytest.mark.asyncio
    async def test_update_row(self, item_store):
        await item_store.insert_rows(TargetCollection.ASSETS, make_assets(1))
        record_id = item_store.rows(TargetCollection.ASSETS)[0]["id"]

        await item_store.update_row(TargetCollection.ASSETS, record_id, {"status": "sold"})

        assert item_store.rows(TargetCollection.ASSETS)[0]["status"] == "sold"

    @pytest.mark.asyncio
    async def test_update_missing_row(self, item_store):
        with pytest.raises(RecordNotFoundError):
            await item_store.update_row(TargetCollection.ASSETS, str(uuid.uuid4()), {"status": "sold"})

    @pytest.mark.asyncio
    async def test_update_cannot_create_duplicate_serial(self, item_store):
        await item_store.insert_rows(TargetCollection.ASSETS, make_assets(2))
        first, second = item_store.rows(TargetCollection.ASSETS)

        with pytest.raises(ConstraintViolationError):
            await item_store.update_row(
                TargetCollection.ASSETS, second["id"], {"serial_number": first["serial_number"]}
            )

    @pytest.mark.asyncio
    async def test_update_rejects_string_for_float_column(self, item_store):
        await item_store.insert_rows(TargetCollection.ASSETS, make_assets(1))
        record_id = item_store.rows(TargetCollection.ASSETS)[0]["id"]

        with pytest.raises(StorageError) as exc_info:
            await item_store.update_row(TargetCollection.ASSETS, record_id, {"purchase_price": "99.5"})

        assert 'column "purchase_price"' in exc_info.value.message
        assert item_store.rows(TargetCollection.ASSETS)[0]["purchase_price"] == 120.0

    @pytest.mark.asyncio
    async def test_update_accepts_int_for_float_column(self, item_store):
        await item_store.insert_rows(TargetCollection.ASSETS, make_assets(1))
        record_id = item_store.rows(TargetCollection.ASSETS)[0]["id"]

        await item_store.update_row(TargetCollection.ASSETS, record_id, {"sale_price": 300})

        assert item_store.rows(TargetCollection.ASSETS)[0]["sale_price"] == 300

    @pytest.mark.asyncio
    async def test_update_null_clears_nullable_column(self, item_store):
        await item_store.insert_rows(TargetCollection.ASSETS, make_assets(1))
        record_id = item_store.rows(TargetCollection.ASSETS)[0]["id"]

        await item_store.update_row(TargetCollection.ASSETS, record_id, {"brand": None})

        assert item_store.rows(TargetCollection.ASSETS)[0]["brand"] is None

    @pytest.mark.asyncio
    async def test_update_null_rejected_for_not_null_column(self, item_store):
        await item_store.insert_rows(TargetCollection.ASSETS, make_assets(1))
        record_id = item_store.rows(TargetCollection.ASSETS)[0]["id"]

        with pytest.raises(ConstraintViolationError) as exc_info:
            await item_store.update_row(TargetCollection.ASSETS, record_id, {"serial_number": None})

        assert 'column "serial_number"' in exc_info.value.message


def _mock_session_maker(session):
    """async_sessionmaker stand-in whose sessions are ``session``"""
    maker = MagicMock()
    maker.return_value.__aenter__.return_value = session
    maker.return_value.__aexit__.return_value = False
    return maker


class TestPostgresItemStore:

    @pytest.mark.asyncio
    async def test_insert_rows_single_statement(self):
        session = AsyncMock()
        session.add = MagicMock()
        store = PostgresItemStore(_mock_session_maker(session))

        count = await store.insert_rows(TargetCollection.ASSETS, make_assets(5))

        assert count == 5
        session.execute.assert_awaited_once()
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_integrity_error_becomes_constraint_violation(self):
        session = AsyncMock()
        session.execute.side_effect = IntegrityError(
            "INSERT", {}, Exception('duplicate key value violates unique constraint "idx_asset_company_serial"')
        )
        store = PostgresItemStore(_mock_session_maker(session))

        with pytest.raises(ConstraintViolationError) as exc_info:
            await store.insert_rows(TargetCollection.ASSETS, make_assets(2))

        assert "idx_asset_company_serial" in exc_info.value.message
        session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_other_database_error_becomes_storage_error(self):
        session = AsyncMock()
        session.execute.side_effect = OperationalError("INSERT", {}, Exception("server closed the connection"))
        store = PostgresItemStore(_mock_session_maker(session))

        with pytest.raises(StorageError) as exc_info:
            await store.insert_rows(TargetCollection.PURCHASE_ORDER_LINES, make_po_lines(1))

        assert exc_info.value.message == "server closed the connection"

    @pytest.mark.asyncio
    async def test_unknown_column_never_reaches_database(self):
        session = AsyncMock()
        store = PostgresItemStore(_mock_session_maker(session))

        with pytest.raises(StorageError):
            await store.insert_rows(TargetCollection.ASSETS, [{**make_assets(1)[0], "colour": "red"}])

        session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_row_no_match(self):
        session = AsyncMock()
        session.execute.return_value = MagicMock(rowcount=0)
        store = PostgresItemStore(_mock_session_maker(session))

        with pytest.raises(RecordNotFoundError):
            await store.update_row(TargetCollection.ASSETS, str(uuid.uuid4()), {"status": "sold"})

    @pytest.mark.asyncio
    async def test_update_row_malformed_id(self):
        session = AsyncMock()
        store = PostgresItemStore(_mock_session_maker(session))

        with pytest.raises(RecordNotFoundError):
            await store.update_row(TargetCollection.ASSETS, "not-a-uuid", {"status": "sold"})

        session.execute.assert_not_awaited()


class TestPostgresJobStore:

    @pytest.mark.asyncio
    async def test_create_duplicate(self):
        session = AsyncMock()
        session.add = MagicMock()
        session.commit.side_effect = IntegrityError("INSERT", {}, Exception("duplicate key"))
        store = PostgresJobStore(_mock_session_maker(session))

        with pytest.raises(JobAlreadyExistsError):
            await store.create(
                ImportJobRecord(id="job-1", tenant_id="t1", item_type=ImportItemType.ASSET_CREATE)
            )

        session.rollback.assert_awaited_once()
