"""Tests for item URL validation and the HTTP fetcher."""

import pytest

from zipjob.exceptions import BadURLError, FetchError, TooLargeError, UnsupportedTypeError
from zipjob.media.fetcher import Fetcher, validate_item_url

from .conftest import JPEG_BYTES, PDF_BYTES


@pytest.fixture
async def fetcher():
    fetcher = Fetcher(timeout=2.0, max_bytes=4096)
    yield fetcher
    await fetcher.close()


@pytest.mark.parametrize(
    "raw",
    [
        "https://x/a.pdf",
        "http://example.com/files/b.JPEG",
        "  https://x/a.pdf  ",
        "https://x/a.pdf?sig=123",
    ],
)
def test_validate_accepts_pdf_and_jpeg(raw):
    assert validate_item_url(raw) == raw.strip()


@pytest.mark.parametrize(
    "raw", ["https://x/c.gif", "https://x/c.jpg", "https://x/c", "https://x/?f=a.pdf"]
)
def test_validate_rejects_other_types(raw):
    with pytest.raises(UnsupportedTypeError):
        validate_item_url(raw)


@pytest.mark.parametrize(
    "raw", ["", "   ", "a.pdf", "/x/a.pdf", "ftp://x/a.pdf", "file:///tmp/a.pdf"]
)
def test_validate_rejects_bad_urls(raw):
    with pytest.raises(BadURLError):
        validate_item_url(raw)


@pytest.mark.parametrize("raw", ["ftp://x/a.gif", "a.gif", "http://[::1/a.gif"])
def test_validate_checks_type_before_syntax(raw):
    with pytest.raises(UnsupportedTypeError):
        validate_item_url(raw)


async def test_fetch_writes_body(fetcher, url, tmp_path):
    path = await fetcher.fetch(url("/docs/report.pdf"), tmp_path)
    assert path == tmp_path / "report.pdf"
    assert path.read_bytes() == PDF_BYTES

    path = await fetcher.fetch(url("/img/photo.jpeg"), tmp_path)
    assert path.read_bytes() == JPEG_BYTES


async def test_fetch_non_200_reports_status(fetcher, url, tmp_path):
    with pytest.raises(FetchError, match="404"):
        await fetcher.fetch(url("/status/404/missing.pdf"), tmp_path)


async def test_fetch_enforces_size_ceiling(fetcher, url, tmp_path):
    path = await fetcher.fetch(url("/big/exact.pdf?size=4096"), tmp_path)
    assert path.stat().st_size == 4096

    with pytest.raises(TooLargeError, match="too large"):
        await fetcher.fetch(url("/big/over.pdf?size=4097"), tmp_path)


async def test_fetch_times_out(url, tmp_path):
    fetcher = Fetcher(timeout=0.3)
    try:
        with pytest.raises(FetchError, match="timed out"):
            await fetcher.fetch(url("/slow/late.pdf"), tmp_path)
    finally:
        await fetcher.close()


async def test_status_errors_are_not_retried(url, origin, tmp_path):
    fetcher = Fetcher(max_attempts=3, base_delay=0)
    try:
        with pytest.raises(FetchError, match="500"):
            await fetcher.fetch(url("/status/500/broken.pdf"), tmp_path)
    finally:
        await fetcher.close()
    assert origin.hits["/status/500/broken.pdf"] == 1


async def test_stalled_body_times_out_and_is_retried(url, origin, tmp_path):
    fetcher = Fetcher(timeout=0.5, max_attempts=2, base_delay=0)
    try:
        with pytest.raises(FetchError, match=r"timed out after 0\.5s"):
            await fetcher.fetch(url("/stall/half.pdf"), tmp_path)
    finally:
        await fetcher.close()
    assert origin.hits["/stall/half.pdf"] == 2


async def test_fetch_reports_write_failure(fetcher, url, tmp_path):
    with pytest.raises(FetchError, match="write failed"):
        await fetcher.fetch(url("/docs/a.pdf"), tmp_path / "missing")


async def test_fetch_connection_error_is_wrapped(tmp_path, unused_tcp_port):
    fetcher = Fetcher(timeout=2.0, max_attempts=2, base_delay=0)
    try:
        with pytest.raises(FetchError):
            await fetcher.fetch(f"http://127.0.0.1:{unused_tcp_port}/a.pdf", tmp_path)
    finally:
        await fetcher.close()


async def test_session_is_reused_and_reopened(fetcher, url, tmp_path):
    await fetcher.fetch(url("/docs/a.pdf"), tmp_path)
    session = fetcher._session
    await fetcher.fetch(url("/docs/b.pdf"), tmp_path)
    assert fetcher._session is session

    await fetcher.close()
    assert session.closed
    await fetcher.fetch(url("/docs/c.pdf"), tmp_path)
    assert fetcher._session is not session
