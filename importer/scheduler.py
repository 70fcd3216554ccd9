import logging
from datetime import datetime, timedelta
from typing import List, Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from core.config import settings
from importer.base import JobStore
from importer.worker import ImportWorker
from models.base import ImportJobStatus
from schemas.jobs import ImportJobRecord

logger = logging.getLogger(__name__)


class OrphanedJobMonitor:
    """
    Periodically reports jobs stuck in pending/processing.

    A job is orphaned when its record has not been written for
    ``stale_after_minutes`` and no task in this process owns it, which is
    what a killed worker leaves behind. The monitor only logs; it never
    changes a job's status.
    """

    def __init__(
        self,
        job_store: JobStore,
        worker: Optional[ImportWorker] = None,
        stale_after_minutes: Optional[int] = None,
        interval_minutes: Optional[int] = None
    ):
        self.job_store = job_store
        self.worker = worker
        self.stale_after = timedelta(minutes=stale_after_minutes or settings.ORPHAN_AFTER_MINUTES)
        self.interval_minutes = interval_minutes or settings.ORPHAN_CHECK_INTERVAL_MINUTES
        self.scheduler = AsyncIOScheduler()

    async def check_orphaned_jobs(self) -> List[ImportJobRecord]:
        """Job to find and log orphaned import jobs"""
        cutoff = datetime.utcnow() - self.stale_after
        try:
            stale = await self.job_store.list_jobs(
                statuses=[ImportJobStatus.PENDING, ImportJobStatus.PROCESSING],
                updated_before=cutoff,
                limit=settings.JOB_LIST_MAX_LIMIT
            )
        except Exception as e:
            logger.error(f"Orphan monitor: job scan failed - {e}")
            return []

        orphans = [
            job for job in stale
            if self.worker is None or not self.worker.is_active(job.id)
        ]

        for job in orphans:
            logger.warning(
                f"Orphaned import job {job.id} (tenant={job.tenant_id}): "
                f"{job.status.value} since {job.updated_at.isoformat()}, "
                f"{job.processed_rows}/{job.total_rows} rows processed"
            )

        return orphans

    def start(self):
        """Start the scheduler"""
        self.scheduler.add_job(
            self.check_orphaned_jobs,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id="orphaned_import_jobs",
            replace_existing=True
        )
        self.scheduler.start()
        logger.info(f"Orphaned job monitor started (every {self.interval_minutes} min)")

    def stop(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Orphaned job monitor stopped")
