"""
Downloads single item URLs into a staging directory, enforcing the type, status
and size rules for job items.
"""

import asyncio
import logging
import time
from pathlib import Path

import aiofiles
import aiohttp
from yarl import URL

from zipjob.exceptions import BadURLError, FetchError, TooLargeError, UnsupportedTypeError
from zipjob.utils.formatting import format_duration, format_error, format_size
from zipjob.utils.path import ALLOWED_EXTENSIONS, local_filename, url_extension

log = logging.getLogger(__name__)

CHUNK_SIZE = 65536  # 64 KB


def validate_item_url(raw_url: str) -> str:
    """
    Checks that a URL can be attached to a job without touching the network.

    Returns the stripped URL. The type is checked before the syntax:
    UnsupportedTypeError when the path does not end in an allowed extension,
    then BadURLError for anything that is not an absolute http(s) URL.
    """
    raw_url = raw_url.strip()
    if not raw_url:
        raise BadURLError("empty url")
    try:
        url = URL(raw_url)
    except (ValueError, TypeError) as e:
        url, parse_error = None, e

    if url_extension(raw_url if url is None else url) is None:
        raise UnsupportedTypeError(
            f"unsupported type, allowed: {', '.join(ALLOWED_EXTENSIONS)}"
        )
    if url is None:
        raise BadURLError(f"bad url: {parse_error}") from parse_error
    if not url.is_absolute() or url.scheme not in ("http", "https") or not url.host:
        raise BadURLError(f"bad url: {raw_url!r} is not an absolute http(s) URL")
    return raw_url


class Fetcher:
    """Fetches item URLs over a shared aiohttp session."""

    def __init__(
        self,
        timeout: float = 15.0,
        max_bytes: int = 25 * 1024 * 1024,
        max_attempts: int = 1,
        base_delay: float = 1.0,
    ):
        """
        Args:
            timeout: Total seconds allowed for one request, body included.
            max_bytes: Largest accepted body; one byte more fails the fetch.
            max_attempts: Tries per URL for connection errors and timeouts.
                HTTP status errors are never retried.
            base_delay: First backoff delay in seconds, doubled per retry.
        """
        self.timeout = timeout
        self.max_bytes = max_bytes
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._session: aiohttp.ClientSession | None = None
        self._session_lock = asyncio.Lock()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Gets or creates the shared session for this fetcher."""
        async with self._session_lock:
            if self._session is None or self._session.closed:
                self._session = aiohttp.ClientSession(
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                )
                log.debug(f"Created fetch session with timeout={self.timeout}s")
            return self._session

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        async with self._session_lock:
            if self._session and not self._session.closed:
                await self._session.close()
                log.debug("Fetch session closed.")
            self._session = None

    async def fetch(self, url: str, staging_dir: Path) -> Path:
        """
        Downloads `url` into `staging_dir` and returns the local path.

        Raises:
            FetchError: on non-200 status, network failure, timeout or a write
                error. TooLargeError when the body exceeds `max_bytes`.
        """
        destination = staging_dir / local_filename(url)
        last_exception: Exception | None = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                return await self._fetch_once(url, destination)
            except (aiohttp.ClientConnectionError, asyncio.TimeoutError) as e:
                last_exception = e
                log.debug(
                    f"Fetch attempt {attempt}/{self.max_attempts} for '{url}' "
                    f"failed: {format_error(e)}"
                )
                if attempt < self.max_attempts:
                    await asyncio.sleep(self.base_delay * (2 ** (attempt - 1)))
            except aiohttp.ClientError as e:
                raise FetchError(format_error(e)) from e

        if isinstance(last_exception, asyncio.TimeoutError):
            raise FetchError(
                f"timed out after {self.timeout:g}s"
            ) from last_exception
        raise FetchError(format_error(last_exception)) from last_exception

    async def _fetch_once(self, url: str, destination: Path) -> Path:
        session = await self._get_session()
        start = time.monotonic()
        async with session.get(url, allow_redirects=True) as response:
            if response.status != 200:
                raise FetchError(f"status {response.status}")

            received = 0
            try:
                async with aiofiles.open(destination, "wb") as f:
                    async for chunk in response.content.iter_chunked(CHUNK_SIZE):
                        received += len(chunk)
                        if received > self.max_bytes:
                            raise TooLargeError(
                                f"file too large (> {format_size(self.max_bytes)})"
                            )
                        await f.write(chunk)
            except (aiohttp.ClientError, asyncio.TimeoutError):
                # Transport errors are OSError subclasses; fetch() retries them.
                raise
            except OSError as e:
                raise FetchError(f"write failed: {format_error(e)}") from e

        log.debug(
            f"Fetched '{url}' -> {destination.name} "
            f"({format_size(received)} in {format_duration(time.monotonic() - start)}, "
            f"{response.headers.get('Content-Type', 'unknown type')})"
        )
        return destination
