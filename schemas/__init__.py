"""
Pydantic schemas for data validation and serialization.

Schemas:
    jobs: Job specifications, job records and error ledger entries
    items: Row shapes for asset, purchase order line and patch items
    api: Submission, polling and health request/response models

Usage:
    from schemas.jobs import ImportJobSpec, ImportJobRecord
    from schemas.api import ImportJobRequest, ImportJobStatusResponse
"""

__all__ = [
    "ImportJobSpec",
    "ImportJobRecord",
    "ErrorLedgerEntry",
    "ResultSummary",
    "AssetCreateItem",
    "PurchaseOrderLineCreateItem",
    "EntityPatchItem",
    "ImportJobRequest",
    "ImportJobStatusResponse",
    "HealthCheckResponse",
]
