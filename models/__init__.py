"""
SQLAlchemy ORM models for database tables.

Models:
    base: Base declarative class and shared enums (ImportJobStatus, ImportItemType)
    import_job: Durable import job record polled by clients
    asset: Inventory assets (insert and patch target)
    purchase_order_line: Purchase order line items (insert target)

Usage:
    from models.import_job import ImportJob
    from models.base import ImportJobStatus, ImportItemType
"""

__all__ = [
    "Base",
    "ImportJobStatus",
    "ImportItemType",
    "ImportJob",
    "Asset",
    "PurchaseOrderLine",
]
