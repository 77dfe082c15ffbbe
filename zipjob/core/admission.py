"""
Process-wide admission control for running jobs.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

log = logging.getLogger(__name__)


class AdmissionGate:
    """
    A fixed-size pool of run slots with a non-blocking acquire.

    Unlike `asyncio.Semaphore`, a full gate never queues the caller:
    `try_acquire` answers immediately and the caller decides what to do.
    All methods are synchronous, so on a single event loop they cannot
    interleave with each other.
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError("Admission capacity must be at least 1.")
        self._capacity = capacity
        self._in_use = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def in_use(self) -> int:
        return self._in_use

    @property
    def full(self) -> bool:
        return self._in_use >= self._capacity

    def try_acquire(self) -> bool:
        """Takes a slot if one is free. Returns False without waiting otherwise."""
        if self.full:
            return False
        self._in_use += 1
        return True

    def release(self) -> None:
        if self._in_use <= 0:
            raise RuntimeError("AdmissionGate released more times than acquired.")
        self._in_use -= 1

    @asynccontextmanager
    async def hold(self) -> AsyncIterator[None]:
        """
        Scopes a slot that was already taken with `try_acquire`, releasing it on
        every exit path including errors and cancellation.
        """
        try:
            yield
        finally:
            self.release()
            log.debug(f"Admission slot released ({self._in_use}/{self._capacity} in use).")
