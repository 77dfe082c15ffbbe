"""
In-memory registry of jobs keyed by identifier.
"""

import asyncio
import logging

from zipjob.models.job import Job, JobSnapshot
from zipjob.utils.ids import new_job_id

log = logging.getLogger(__name__)


class JobStore:
    """
    Maps job identifiers to job records.

    The store's lock guards the mapping only. Job contents are guarded by each
    job's own lock, so lookups never wait on a job's pipeline and vice versa.
    Jobs are never removed.
    """

    def __init__(self) -> None:
        self._jobs: dict[str, Job] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._jobs)

    async def create(self) -> Job:
        """Registers a new empty job in the queued state and returns it."""
        job = Job(id=new_job_id())
        async with self._lock:
            self._jobs[job.id] = job
        log.debug(f"Registered job {job.id} ({len(self._jobs)} total).")
        return job

    async def get(self, job_id: str) -> Job | None:
        """Returns the live job record, or None if the identifier is unknown."""
        async with self._lock:
            return self._jobs.get(job_id)

    async def snapshot(self, job_id: str) -> JobSnapshot | None:
        """Returns a consistent copy of the job's fields, or None if unknown."""
        job = await self.get(job_id)
        if job is None:
            return None
        async with job.lock:
            return job.snapshot()
