"""
Run one bulk import job from a CSV or JSON file, in the foreground
"""

import argparse
import asyncio
import sys
import os
import uuid
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import settings
from core.database import async_session_maker, engine
from core.exceptions import ImportPipelineError
from core.logging import setup_logging
from importer.classifier import resolve_item_type
from importer.processor import BatchProcessor
from importer.readers import read_items
from importer.stores.postgres_store import PostgresJobStore, PostgresItemStore
from schemas.jobs import ImportJobSpec

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run a bulk import job from a file")
    parser.add_argument("file", help="CSV or JSON file with one item per row/object")
    parser.add_argument("--company-id", required=True, help="Tenant that owns the job")
    parser.add_argument(
        "--job-type",
        required=True,
        help="assets, purchase_order or bulk_update"
    )
    parser.add_argument("--job-id", default=None, help="Job id (defaults to a new UUID)")
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=settings.IMPORT_CHUNK_SIZE,
        help="Items per chunk"
    )
    return parser.parse_args(argv)


async def run_import(args) -> int:
    """Run the job and return a process exit code"""
    try:
        spec = ImportJobSpec(
            job_id=args.job_id or str(uuid.uuid4()),
            tenant_id=args.company_id,
            item_type=resolve_item_type(args.job_type),
            items=read_items(args.file),
        )
        processor = BatchProcessor(
            PostgresJobStore(async_session_maker),
            PostgresItemStore(async_session_maker),
            chunk_size=args.chunk_size,
        )
        record = await processor.process(spec)
    except (ImportPipelineError, ValueError, FileNotFoundError) as e:
        logger.error(f"Import failed: {e}")
        return 2
    finally:
        await engine.dispose()

    for entry in record.error_ledger:
        logger.warning(f"Chunk {entry.chunk_index} ({entry.item_count} items): {entry.message}")

    logger.info(
        f"Job {record.id} {record.status.value}: "
        f"{record.successful_rows} successful, {record.failed_rows} failed"
    )
    return 0 if record.failed_rows == 0 else 1


if __name__ == "__main__":
    setup_logging()
    sys.exit(asyncio.run(run_import(parse_args())))
