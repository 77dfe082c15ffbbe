"""
Executes one job's pipeline: fetch every item in order, then package whatever
was fetched.
"""

import asyncio
import logging
import shutil
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from zipjob.exceptions import FetchError, PackagingError
from zipjob.media.fetcher import Fetcher
from zipjob.media.packager import pack
from zipjob.models.job import Job, JobState
from zipjob.utils.formatting import format_duration, format_error
from zipjob.utils.path import create_dir
from zipjob.utils.structured_logger import JobEventLogger

log = logging.getLogger(__name__)

ALL_FAILED_MESSAGE = "all downloads failed"


@asynccontextmanager
async def staging_directory(root: Path, job_id: str) -> AsyncIterator[Path]:
    """Creates a private scratch directory for a job and removes it on exit."""
    path = root / job_id
    await asyncio.to_thread(create_dir, path)
    try:
        yield path
    finally:
        await asyncio.to_thread(shutil.rmtree, path, True)
        log.debug(f"Removed staging directory '{path}'.")


class JobRunner:
    """Runs admitted jobs from `running` to `done` or `error`."""

    def __init__(
        self,
        fetcher: Fetcher,
        staging_root: Path,
        output_root: Path,
        events: JobEventLogger,
    ):
        self.fetcher = fetcher
        self.staging_root = Path(staging_root)
        self.output_root = Path(output_root)
        self.events = events

    def archive_path(self, job_id: str) -> Path:
        return self.output_root / f"{job_id}.zip"

    async def run(self, job: Job) -> None:
        """
        Processes `job` to a terminal state. Never raises for fetch or
        packaging problems; those end up in the job's state and error text.
        """
        async with job.lock:
            job.state = JobState.RUNNING
            job.error_text = ""
            job.done = 0
            items = list(job.items)
            started_at = time.monotonic()

        downloaded: list[Path] = []
        errors: list[str] = []

        async with staging_directory(self.staging_root, job.id) as staging_dir:
            for url in items:
                try:
                    local_path = await self.fetcher.fetch(url, staging_dir)
                except FetchError as e:
                    message = format_error(e)
                    errors.append(f"{url}: {message}")
                    self.events.item_failed(job.id, url, message)
                else:
                    downloaded.append(local_path)
                    self.events.item_fetched(job.id, url, local_path.stat().st_size)
                async with job.lock:
                    job.done = len(downloaded)

            if not downloaded:
                await self._fail(job, ALL_FAILED_MESSAGE, started_at)
                return

            output = self.archive_path(job.id)
            try:
                await asyncio.to_thread(pack, output, downloaded)
            except PackagingError as e:
                await self._fail(job, f"zip error: {e}", started_at)
                return

        async with job.lock:
            job.finish(JobState.DONE, "; ".join(errors), str(output))

        duration = time.monotonic() - started_at
        self.events.job_completed(job.id, len(downloaded), len(errors), output.name, duration)
        if errors:
            log.warning(
                f"[yellow]Job {job.id} finished with {len(errors)} failed "
                f"item(s) in {format_duration(duration)}.[/yellow]"
            )
        else:
            log.info(
                f"[green]✓ Job {job.id} packaged {len(downloaded)} file(s) in "
                f"{format_duration(duration)}.[/green]"
            )

    async def _fail(self, job: Job, message: str, started_at: float) -> None:
        async with job.lock:
            job.finish(JobState.ERROR, message)
        self.events.job_failed(job.id, message, time.monotonic() - started_at)
        log.error(f"[red]✗ Job {job.id} failed: {message}[/red]")
