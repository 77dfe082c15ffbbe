"""Shared fixtures: a local origin server to download from and a configured manager."""

import asyncio
from types import SimpleNamespace

import pytest
from aiohttp import web

from zipjob.core.job_manager import JobManager
from zipjob.models.config import ServiceConfig

PDF_BYTES = b"%PDF-1.4\n" + b"a" * 2048 + b"\n%%EOF\n"
JPEG_BYTES = b"\xff\xd8\xff\xe0" + bytes(range(256)) * 8 + b"\xff\xd9"

RELEASE_KEY = web.AppKey("release", asyncio.Event)
HITS_KEY = web.AppKey("hits", dict)


def _count(request: web.Request) -> None:
    hits = request.app[HITS_KEY]
    hits[request.path] = hits.get(request.path, 0) + 1


async def _pdf(request: web.Request) -> web.Response:
    _count(request)
    return web.Response(body=PDF_BYTES, content_type="application/pdf")


async def _jpeg(request: web.Request) -> web.Response:
    _count(request)
    return web.Response(body=JPEG_BYTES, content_type="image/jpeg")


async def _status(request: web.Request) -> web.Response:
    _count(request)
    return web.Response(status=int(request.match_info["code"]), text="nope")


async def _big(request: web.Request) -> web.Response:
    _count(request)
    size = int(request.query.get("size", "4096"))
    return web.Response(body=b"x" * size, content_type="application/pdf")


async def _slow(request: web.Request) -> web.Response:
    _count(request)
    await asyncio.sleep(5)
    return web.Response(body=PDF_BYTES)


async def _stall(request: web.Request) -> web.StreamResponse:
    """Sends the start of a body, then stops sending."""
    _count(request)
    response = web.StreamResponse(headers={"Content-Type": "application/pdf"})
    await response.prepare(request)
    await response.write(PDF_BYTES[:5])
    await asyncio.sleep(5)
    return response


async def _gated(request: web.Request) -> web.Response:
    """Holds the response until the test sets the release event."""
    _count(request)
    await request.app[RELEASE_KEY].wait()
    return web.Response(body=PDF_BYTES, content_type="application/pdf")


@pytest.fixture
async def origin(aiohttp_server):
    """An HTTP server standing in for the remote hosts items are fetched from."""
    app = web.Application()
    app[RELEASE_KEY] = asyncio.Event()
    app[HITS_KEY] = {}
    app.router.add_get("/docs/{name}.pdf", _pdf)
    app.router.add_get("/img/{name}.jpeg", _jpeg)
    app.router.add_get("/status/{code}/{name}", _status)
    app.router.add_get("/big/{name}", _big)
    app.router.add_get("/slow/{name}", _slow)
    app.router.add_get("/gated/{name}", _gated)
    app.router.add_get("/stall/{name}", _stall)
    server = await aiohttp_server(app)
    return SimpleNamespace(server=server, release=app[RELEASE_KEY], hits=app[HITS_KEY])


@pytest.fixture
def url(origin):
    """Builds absolute URLs on the origin server."""

    def make(path: str) -> str:
        return str(origin.server.make_url(path))

    return make


@pytest.fixture
def config(tmp_path):
    return ServiceConfig(
        staging_dir=str(tmp_path / "tmp"),
        output_dir=str(tmp_path / "results"),
        max_parallel=1,
        fetch_timeout=2.0,
    )


@pytest.fixture
async def manager(config):
    manager = JobManager(config)
    yield manager
    await manager.close()
