"""
Custom exceptions for the bulk import pipeline with structured error context.

Every exception carries a human-readable message plus a context dictionary
so failures can be logged and persisted without leaking raw driver objects
into job records.

Exception Hierarchy:
    ImportPipelineError (base)
    ├── PreflightError
    │   ├── MissingFieldError
    │   ├── EmptyItemsError
    │   └── UnknownJobTypeError
    ├── StorageError
    │   ├── ConstraintViolationError
    │   ├── RecordNotFoundError
    │   └── ChunkHaltedError
    └── JobStoreError
        ├── JobNotFoundError
        ├── JobAlreadyExistsError
        └── JobStateError
"""

from typing import Optional, Dict, Any
from datetime import datetime


class ImportPipelineError(Exception):
    """
    Base exception for all import pipeline errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (job_id, table, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.utcnow()

        self.context["error_timestamp"] = self.timestamp.isoformat()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/storage."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Pre-flight Errors
# ============================================================================

class PreflightError(ImportPipelineError):
    """
    Base exception for job specifications rejected before processing.

    A pre-flight error is fatal to the whole job: no job record is created
    and the caller receives the message synchronously.
    """
    pass


class MissingFieldError(PreflightError):
    """
    Raised when a required job specification field is absent or blank.

    Context should include:
        - field_name: Name of the missing field
    """
    pass


class EmptyItemsError(PreflightError):
    """Raised when a job is submitted with no items."""
    pass


class UnknownJobTypeError(PreflightError):
    """
    Raised when the declared job type is not one of the recognized kinds.

    Context should include:
        - job_type: The rejected value
        - allowed: The accepted values
    """
    pass


# ============================================================================
# Storage Errors
# ============================================================================

class StorageError(ImportPipelineError):
    """
    Base exception for target storage failures while applying a chunk.

    Context should include:
        - operation: INSERT or UPDATE
        - table_name: Target collection
    """
    pass


class ConstraintViolationError(StorageError):
    """
    Raised when a write violates a storage constraint (unique, not-null, FK).

    Context should include:
        - constraint_name: Name of the violated constraint (if known)
    """
    pass


class RecordNotFoundError(StorageError):
    """
    Raised when a partial update targets a record id that does not exist.

    Context should include:
        - record_id: The id that was looked up
    """
    pass


class ChunkHaltedError(StorageError):
    """
    Raised when a per-item chunk stops at its first failing item.

    Items before ``failed_item_offset`` were already applied and stay applied.
    """

    def __init__(
        self,
        message: str,
        failed_item_offset: int,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(message, context, original_exception)
        self.failed_item_offset = failed_item_offset
        self.context["failed_item_offset"] = failed_item_offset


# ============================================================================
# Job Store Errors
# ============================================================================

class JobStoreError(ImportPipelineError):
    """Base exception for job record store failures."""
    pass


class JobNotFoundError(JobStoreError):
    """Raised when a job id has no record."""
    pass


class JobAlreadyExistsError(JobStoreError):
    """Raised when creating a record for a job id that already has one."""
    pass


class JobStateError(JobStoreError):
    """
    Raised on a write to a terminal job record or an illegal status transition.

    Context should include:
        - job_id: The job being written
        - current_status: Status held by the stored record
        - requested_status: Status the write asked for
    """
    pass
