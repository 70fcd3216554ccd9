"""
Bulk import pipeline.

Modules:
    base: JobStore / ItemStore interfaces and the job status state machine
    classifier: Maps an item type to the operation applied per chunk
    ledger: Per-chunk failure records
    finalizer: Terminal status and result summary
    processor: Chunked, sequential batch processor
    worker: Background execution of accepted jobs
    scheduler: APScheduler job that reports orphaned jobs
    readers: CSV / JSON item files

Subpackages:
    stores: In-memory and PostgreSQL store implementations

Usage:
    from importer.processor import BatchProcessor
    from importer.stores.postgres_store import PostgresJobStore, PostgresItemStore

    processor = BatchProcessor(PostgresJobStore(session_maker), PostgresItemStore(session_maker))
    record = await processor.process(spec)
"""

__all__ = [
    "BatchProcessor",
    "ImportWorker",
    "OrphanedJobMonitor",
    "ErrorLedger",
    "JobStore",
    "ItemStore",
    "classify",
    "read_items",
]
