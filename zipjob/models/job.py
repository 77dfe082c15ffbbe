"""
Job records and their point-in-time snapshots.
"""

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum


class JobState(str, Enum):
    """States of a job. Transitions only move forward."""

    QUEUED = "queued"
    RUNNING = "running"
    DONE = "done"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.DONE, JobState.ERROR)


@dataclass(frozen=True)
class JobSnapshot:
    """An immutable copy of a job's fields, safe to read without locking."""

    id: str
    items: tuple[str, ...]
    started: bool
    state: JobState
    error_text: str
    result_path: str
    added: int
    done: int
    created_at: float
    finished_at: float | None


@dataclass
class Job:
    """
    A unit of work: up to three URLs that are fetched and packaged together.

    Every mutable field is read and written under `lock`. The lock is never
    held across network or disk I/O.
    """

    id: str
    items: list[str] = field(default_factory=list)
    started: bool = False
    state: JobState = JobState.QUEUED
    error_text: str = ""
    result_path: str = ""
    added: int = 0
    done: int = 0
    created_at: float = field(default_factory=time.monotonic)
    finished_at: float | None = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    def snapshot(self) -> JobSnapshot:
        """Copies the current fields. Callers must hold `lock`."""
        return JobSnapshot(
            id=self.id,
            items=tuple(self.items),
            started=self.started,
            state=self.state,
            error_text=self.error_text,
            result_path=self.result_path,
            added=self.added,
            done=self.done,
            created_at=self.created_at,
            finished_at=self.finished_at,
        )

    def finish(self, state: JobState, error_text: str = "", result_path: str = "") -> None:
        """Moves a running job into a terminal state. Callers must hold `lock`."""
        if self.state is not JobState.RUNNING:
            raise RuntimeError(
                f"Job {self.id} cannot move from {self.state.value} to {state.value}."
            )
        if not state.is_terminal:
            raise ValueError(f"{state.value} is not a terminal state.")
        self.state = state
        self.error_text = error_text
        if result_path:
            self.result_path = result_path
        self.finished_at = time.monotonic()
