"""
Core utilities and configuration for the bulk import service.

This package provides foundational components used throughout the pipeline:

Modules:
    config: Application configuration and environment variable management
    database: Database engine and async session management
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration

Usage:
    from core.config import settings
    from core.database import async_session_maker
    from core.exceptions import PreflightError, StorageError
    from core.logging import setup_logging
"""

__all__ = [
    "settings",
    "async_session_maker",
    "setup_logging",
    # Exceptions
    "ImportPipelineError",
    "PreflightError",
    "MissingFieldError",
    "EmptyItemsError",
    "UnknownJobTypeError",
    "StorageError",
    "ConstraintViolationError",
    "RecordNotFoundError",
    "ChunkHaltedError",
    "JobStoreError",
    "JobNotFoundError",
    "JobAlreadyExistsError",
    "JobStateError",
]
