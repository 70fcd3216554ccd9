from sqlalchemy.orm import declarative_base
import enum

Base = declarative_base()


# ============================================================================
# ENUMS
# ============================================================================

class ImportJobStatus(str, enum.Enum):
    """Import job lifecycle status"""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ImportJobStatus.COMPLETED, ImportJobStatus.FAILED)


class ImportItemType(str, enum.Enum):
    """Declared type of every item in an import job"""
    ASSET_CREATE = "asset_create"
    PURCHASE_ORDER_LINE_CREATE = "purchase_order_line_create"
    ENTITY_PATCH = "entity_patch"

    @classmethod
    def from_job_type(cls, job_type: str) -> "ImportItemType":
        """Map a submission ``jobType`` literal to its item type."""
        return JOB_TYPE_ALIASES[job_type]

    @property
    def job_type(self) -> str:
        """Submission ``jobType`` literal for this item type."""
        for alias, kind in JOB_TYPE_ALIASES.items():
            if kind is self:
                return alias
        raise KeyError(self.value)


# Wire literals accepted by the submission endpoint
JOB_TYPE_ALIASES = {
    "assets": ImportItemType.ASSET_CREATE,
    "purchase_order": ImportItemType.PURCHASE_ORDER_LINE_CREATE,
    "bulk_update": ImportItemType.ENTITY_PATCH,
}


# Allowed status transitions; terminal statuses have none
JOB_STATUS_TRANSITIONS = {
    ImportJobStatus.PENDING: {ImportJobStatus.PROCESSING},
    ImportJobStatus.PROCESSING: {
        ImportJobStatus.PROCESSING,
        ImportJobStatus.COMPLETED,
        ImportJobStatus.FAILED,
    },
    ImportJobStatus.COMPLETED: set(),
    ImportJobStatus.FAILED: set(),
}
