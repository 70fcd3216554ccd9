"""
Item classification: map a job's item type to the operation applied per chunk.

The mapping is resolved once per job. Bulk-insert kinds write a whole chunk
in one statement; the patch kind updates items one at a time and stops at
the first failure, leaving earlier items of the chunk applied.
"""

from abc import ABC, abstractmethod
from functools import lru_cache
from typing import List, Dict, Any, Type
import logging

from pydantic import BaseModel, TypeAdapter, ValidationError as PydanticValidationError

from importer.base import ItemStore, TargetCollection, TARGET_MODELS
from importer.ledger import describe_failure
from models.base import ImportItemType, JOB_TYPE_ALIASES
from schemas.items import AssetCreateItem, PurchaseOrderLineCreateItem, EntityPatchItem
from core.exceptions import ChunkHaltedError, UnknownJobTypeError

logger = logging.getLogger(__name__)


class ChunkOperation(ABC):
    """Storage operation applied to one chunk of items"""

    def __init__(self, target: TargetCollection):
        self.target = target

    @abstractmethod
    async def apply(self, store: ItemStore, chunk: List[Dict[str, Any]]) -> None:
        """Apply the operation; any exception marks the whole chunk failed"""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(target={self.target.value})"


class BulkInsertOperation(ChunkOperation):
    """Insert every item of the chunk as a new row in a single write"""

    def __init__(self, target: TargetCollection, item_schema: Type[BaseModel]):
        super().__init__(target)
        self.item_schema = item_schema

    async def apply(self, store: ItemStore, chunk: List[Dict[str, Any]]) -> None:
        rows = [self.item_schema.model_validate(item).to_row() for item in chunk]
        await store.insert_rows(self.target, rows)


@lru_cache(maxsize=None)
def _adapter(python_type: type) -> TypeAdapter:
    return TypeAdapter(python_type)


def coerce_fields(target: TargetCollection, fields: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convert patch values to the Python type of their column.

    Values read from CSV files arrive as strings; the driver only binds
    values of the column's own type. None is kept so a patch can clear a
    field, and unknown keys pass through for storage to reject.

    Raises:
        ValueError: A value cannot be converted to its column's type
    """
    columns = TARGET_MODELS[target].__table__.c
    coerced = {}
    for key, value in fields.items():
        column = columns.get(key)
        if column is None or value is None:
            coerced[key] = value
            continue
        try:
            coerced[key] = _adapter(column.type.python_type).validate_python(value)
        except PydanticValidationError as e:
            raise ValueError(f"{key}: {e.errors()[0]['msg']} (got {value!r})")
    return coerced


class PatchEachOperation(ChunkOperation):
    """Partially update the record each item points at, one item at a time"""

    async def apply(self, store: ItemStore, chunk: List[Dict[str, Any]]) -> None:
        for offset, item in enumerate(chunk):
            try:
                patch = EntityPatchItem.model_validate(item)
                await store.update_row(self.target, patch.id, coerce_fields(self.target, patch.fields))
            except Exception as e:
                # Items [0, offset) stay applied; the rest of the chunk is skipped
                raise ChunkHaltedError(
                    describe_failure(e),
                    failed_item_offset=offset,
                    context={
                        "operation": "UPDATE",
                        "table_name": self.target.value,
                        "record_id": item.get("id") if isinstance(item, dict) else None
                    },
                    original_exception=e
                )


_OPERATIONS = {
    ImportItemType.ASSET_CREATE: BulkInsertOperation(TargetCollection.ASSETS, AssetCreateItem),
    ImportItemType.PURCHASE_ORDER_LINE_CREATE: BulkInsertOperation(
        TargetCollection.PURCHASE_ORDER_LINES, PurchaseOrderLineCreateItem
    ),
    ImportItemType.ENTITY_PATCH: PatchEachOperation(TargetCollection.ASSETS),
}


def resolve_item_type(job_type: str) -> ImportItemType:
    """
    Resolve a submission ``jobType`` literal.

    Raises:
        UnknownJobTypeError: ``job_type`` is not one of the recognized literals
    """
    try:
        return ImportItemType.from_job_type(job_type)
    except KeyError:
        raise UnknownJobTypeError(
            f"Unknown job type: {job_type}",
            context={"job_type": job_type, "allowed": sorted(JOB_TYPE_ALIASES)}
        )


def classify(item_type: ImportItemType) -> ChunkOperation:
    """
    Return the chunk operation for ``item_type``.

    Raises:
        UnknownJobTypeError: ``item_type`` is not a recognized kind
    """
    try:
        return _OPERATIONS[ImportItemType(item_type)]
    except (KeyError, ValueError):
        raise UnknownJobTypeError(
            f"Unknown item type: {item_type}",
            context={"job_type": str(item_type), "allowed": [t.value for t in ImportItemType]}
        )
