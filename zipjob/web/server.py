"""
HTTP front end built on aiohttp.web.

Handlers translate requests into JobManager calls and map the manager's
exceptions to status codes. Every error body is `{"error": <message>}`.
"""

import logging
from pathlib import Path

from aiohttp import web

from zipjob.core.job_manager import JobManager
from zipjob.exceptions import (
    AlreadyStartedError,
    BadURLError,
    BusyError,
    JobNotFoundError,
    NoItemsError,
    TooManyItemsError,
    UnsupportedTypeError,
    ZipJobError,
)
from zipjob.models.config import ServiceConfig

log = logging.getLogger(__name__)

MANAGER_KEY = web.AppKey("manager", JobManager)
CONFIG_KEY = web.AppKey("config", ServiceConfig)

# Most specific first; a None message means "use the exception text".
ERROR_RESPONSES: list[tuple[type[ZipJobError], int, str | None]] = [
    (JobNotFoundError, 404, "task not found"),
    (TooManyItemsError, 400, "items limit reached"),
    (UnsupportedTypeError, 400, "only .pdf and .jpeg are allowed"),
    (BadURLError, 400, None),
    (AlreadyStartedError, 409, "task already started"),
    (BusyError, 409, "server is busy, try later"),
    (NoItemsError, 400, "no valid items to process"),
    (ZipJobError, 400, None),
]


def json_error(status: int, message: str) -> web.Response:
    return web.json_response({"error": message}, status=status)


def error_response(error: ZipJobError) -> web.Response:
    """Maps a manager exception to its HTTP response."""
    for exc_type, status, message in ERROR_RESPONSES:
        if isinstance(error, exc_type):
            return json_error(status, message or str(error))
    return json_error(400, str(error))


async def handle_create_task(request: web.Request) -> web.Response:
    snapshot = await request.app[MANAGER_KEY].create_job()
    return web.json_response({"id": snapshot.id}, status=201)


async def handle_add_item(request: web.Request) -> web.Response:
    job_id = request.match_info["id"]
    try:
        body = await request.json()
    except ValueError:
        return json_error(400, "invalid json")
    if not isinstance(body, dict) or not isinstance(body.get("url", ""), str):
        return json_error(400, "invalid json")

    url = body.get("url", "").strip()
    if not url:
        return json_error(400, "empty url")

    try:
        added, limit = await request.app[MANAGER_KEY].add_item(job_id, url)
    except ZipJobError as e:
        return error_response(e)
    return web.json_response({"added": added, "limit": limit})


async def handle_run(request: web.Request) -> web.Response:
    job_id = request.match_info["id"]
    try:
        await request.app[MANAGER_KEY].run(job_id)
    except ZipJobError as e:
        return error_response(e)
    return web.json_response({"status": "accepted"}, status=202)


async def handle_status(request: web.Request) -> web.Response:
    job_id = request.match_info["id"]
    try:
        snapshot = await request.app[MANAGER_KEY].status(job_id)
    except ZipJobError as e:
        return error_response(e)

    result_url = ""
    if snapshot.result_path:
        result_url = request.app[CONFIG_KEY].files_prefix + Path(snapshot.result_path).name
    return web.json_response(
        {
            "status": snapshot.state.value,
            "added": snapshot.added,
            "done": snapshot.done,
            "error": snapshot.error_text,
            "result_url": result_url,
        }
    )


async def handle_result(request: web.Request) -> web.StreamResponse:
    job_id = request.match_info["id"]
    try:
        path = await request.app[MANAGER_KEY].result_path(job_id)
    except JobNotFoundError:
        path = None
    if path is None:
        return json_error(404, "result not ready")
    return web.FileResponse(
        path,
        headers={
            "Content-Type": "application/zip",
            "Content-Disposition": f'attachment; filename="{path.name}"',
        },
    )


async def handle_health(request: web.Request) -> web.Response:
    return web.Response(text="ok")


async def _close_manager(app: web.Application) -> None:
    await app[MANAGER_KEY].close()


def create_app(config: ServiceConfig, manager: JobManager | None = None) -> web.Application:
    """
    Builds the application. The manager is created from `config` unless one
    is supplied, and is closed when the application shuts down.
    """
    app = web.Application()
    app[CONFIG_KEY] = config
    app[MANAGER_KEY] = manager or JobManager(config)

    app.router.add_post("/tasks", handle_create_task)
    app.router.add_post("/tasks/{id}/items", handle_add_item)
    app.router.add_post("/tasks/{id}/run", handle_run)
    app.router.add_get("/tasks/{id}/status", handle_status)
    app.router.add_get("/tasks/{id}/result", handle_result)
    app.router.add_get("/health", handle_health)
    app.router.add_static(config.files_prefix, Path(config.output_dir), show_index=False)

    app.on_cleanup.append(_close_manager)
    return app


def run_server(config: ServiceConfig) -> None:
    """Serves the application until interrupted."""
    app = create_app(config)
    log.info(
        f"[bold cyan]Serving on http://{config.host}:{config.port}[/bold cyan] "
        f"[dim](max parallel jobs: {config.max_parallel}, "
        f"output: {config.output_dir})[/dim]"
    )
    web.run_app(app, host=config.host, port=config.port, print=None)
