"""
The job manager: the single entry point the front end talks to.

It owns the job store, the admission gate and the runner, and keeps track of
the asyncio tasks that execute admitted jobs.
"""

import asyncio
import logging
from pathlib import Path

from zipjob.exceptions import (
    AlreadyStartedError,
    BusyError,
    JobNotFoundError,
    NoItemsError,
    TooManyItemsError,
)
from zipjob.media.fetcher import Fetcher, validate_item_url
from zipjob.models.config import MAX_ITEMS, ServiceConfig
from zipjob.models.job import Job, JobSnapshot, JobState
from zipjob.storage.job_store import JobStore
from zipjob.utils.formatting import format_error
from zipjob.utils.path import create_dir
from zipjob.utils.structured_logger import JobEventLogger, create_structured_logger

from .admission import AdmissionGate
from .job_runner import JobRunner

log = logging.getLogger(__name__)


class JobManager:
    """Creates, mutates and schedules jobs."""

    def __init__(
        self,
        config: ServiceConfig,
        fetcher: Fetcher | None = None,
        events: JobEventLogger | None = None,
    ):
        self.config = config
        self.staging_root = Path(config.staging_dir)
        self.output_root = Path(config.output_dir)
        create_dir(self.staging_root)
        create_dir(self.output_root)

        if events is None:
            log_dir = Path(config.json_log_dir) if config.json_log_dir else None
            _, events = create_structured_logger(log_dir, enable_json=log_dir is not None)
        self.events = events

        self.store = JobStore()
        self.gate = AdmissionGate(config.max_parallel)
        self.fetcher = fetcher or Fetcher(
            timeout=config.fetch_timeout,
            max_bytes=config.max_file_bytes,
            max_attempts=config.fetch_attempts,
        )
        self.runner = JobRunner(
            self.fetcher, self.staging_root, self.output_root, self.events
        )
        self._tasks: set[asyncio.Task] = set()

    async def _get(self, job_id: str) -> Job:
        job = await self.store.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    async def create_job(self) -> JobSnapshot:
        """Registers a new empty job."""
        job = await self.store.create()
        self.events.job_created(job.id, len(self.store))
        async with job.lock:
            return job.snapshot()

    async def add_item(self, job_id: str, url: str) -> tuple[int, int]:
        """
        Validates `url` and appends it to the job.

        Returns:
            (items now attached, item limit)

        Raises:
            JobNotFoundError, AlreadyStartedError, TooManyItemsError,
            UnsupportedTypeError, BadURLError
        """
        job = await self._get(job_id)
        async with job.lock:
            if job.started or job.state is not JobState.QUEUED:
                raise AlreadyStartedError("task already started")
            if len(job.items) >= MAX_ITEMS:
                raise TooManyItemsError(f"items limit reached ({MAX_ITEMS})")
            url = validate_item_url(url)
            job.items.append(url)
            job.added = len(job.items)
            added = job.added
        self.events.item_added(job_id, url, added)
        return added, MAX_ITEMS

    async def run(self, job_id: str) -> None:
        """
        Admits the job and starts it in the background.

        Raises:
            JobNotFoundError, AlreadyStartedError, NoItemsError, BusyError.
            After BusyError the job is left unstarted and may be run again.
        """
        job = await self._get(job_id)
        async with job.lock:
            if job.started:
                raise AlreadyStartedError("task already started")
            if not job.items:
                raise NoItemsError("no items")
            job.started = True
            job.state = JobState.QUEUED
            item_count = len(job.items)

        if not self.gate.try_acquire():
            async with job.lock:
                job.started = False
            self.events.admission_rejected(job_id, self.gate.in_use, self.gate.capacity)
            raise BusyError("too many tasks running")

        self.events.job_started(job_id, item_count, self.gate.in_use, self.gate.capacity)
        task = asyncio.create_task(self._execute(job), name=f"job-{job_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _execute(self, job: Job) -> None:
        async with self.gate.hold():
            try:
                await self.runner.run(job)
            except Exception as e:
                log.error(
                    f"[red]✗ Unexpected error while running job {job.id}: {e}[/red]",
                    exc_info=True,
                )
                async with job.lock:
                    if job.state is JobState.RUNNING:
                        job.finish(JobState.ERROR, f"internal error: {format_error(e)}")

    async def status(self, job_id: str) -> JobSnapshot:
        """Returns a consistent copy of the job's current fields."""
        snapshot = await self.store.snapshot(job_id)
        if snapshot is None:
            raise JobNotFoundError(job_id)
        return snapshot

    async def result_path(self, job_id: str) -> Path | None:
        """Returns the job's archive path if one has been produced."""
        snapshot = await self.status(job_id)
        if not snapshot.result_path:
            return None
        path = Path(snapshot.result_path)
        if not await asyncio.to_thread(path.is_file):
            log.warning(f"[yellow]Archive for job {job_id} is missing: {path}[/yellow]")
            return None
        return path

    @property
    def running(self) -> int:
        """Number of job tasks that have not finished yet."""
        return len(self._tasks)

    async def join(self) -> None:
        """Waits until every job started so far has reached a terminal state."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """Lets in-flight jobs finish, then releases the HTTP session and logs."""
        if self._tasks:
            log.info(f"Waiting for {len(self._tasks)} running job(s) to finish...")
        await self.join()
        await self.fetcher.close()
        self.events.logger.close()
