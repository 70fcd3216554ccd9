"""
Background execution of import jobs.

Submission returns as soon as the pending job record exists; processing
runs as an asyncio task in the same event loop. Clients follow progress by
polling the job record.
"""

import asyncio
from typing import Dict, List, Optional
import logging

from importer.processor import BatchProcessor
from schemas.jobs import ImportJobSpec, ImportJobRecord

logger = logging.getLogger(__name__)


class ImportWorker:
    """
    Runs accepted jobs as background tasks.

    One task per job; tasks of different jobs run concurrently, chunks
    within a job never do.
    """

    def __init__(self, processor: BatchProcessor):
        self.processor = processor
        self._tasks: Dict[str, asyncio.Task] = {}

    @property
    def active_job_ids(self) -> List[str]:
        return list(self._tasks)

    def is_active(self, job_id: str) -> bool:
        return job_id in self._tasks

    async def submit(self, spec: ImportJobSpec) -> ImportJobRecord:
        """
        Accept ``spec`` and schedule it.

        Raises:
            PreflightError: The specification is rejected; nothing is scheduled
            JobAlreadyExistsError: A record already exists for the job id
        """
        record = await self.processor.accept(spec)

        task = asyncio.create_task(self._run(spec), name=f"import-job-{spec.job_id}")
        self._tasks[spec.job_id] = task
        task.add_done_callback(lambda _: self._tasks.pop(spec.job_id, None))

        return record

    async def _run(self, spec: ImportJobSpec) -> Optional[ImportJobRecord]:
        try:
            return await self.processor.run(spec)
        except asyncio.CancelledError:
            logger.warning(f"Import job {spec.job_id} cancelled; record left in processing")
            raise
        except Exception:
            logger.exception(f"Import job {spec.job_id} aborted; record left in processing")
            return None

    async def wait(self, job_id: str) -> Optional[ImportJobRecord]:
        """Wait for the job's task (if still running) and return its latest record"""
        task = self._tasks.get(job_id)
        if task is not None:
            await asyncio.wait({task})
        return await self.processor.job_store.get(job_id)

    async def shutdown(self) -> None:
        """Cancel every in-flight job and wait for the tasks to unwind"""
        tasks = list(self._tasks.values())
        if not tasks:
            return

        logger.info(f"Cancelling {len(tasks)} in-flight import jobs")
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
