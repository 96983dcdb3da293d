# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""HTTP API service implementation for PuppyCloud.

Uses FastAPI for the routes and uvicorn to serve them.  All engine
access goes through a :class:`~.backends.Backend`; this module is the
only place that turns backend errors into user-facing messages.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Optional

import uvicorn
from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from . import __version__
from .backends import (
    Backend,
    BackendError,
    BackendRequestError,
    ListOptions,
    LogOptions,
    RemoveOptions,
    StopOptions,
    create_docker_backend,
    normalize_container_detail,
)
from .config import DaemonConfig
from .container_options import (
    OptionValidationError,
    get_create_schema_json,
    parse_create_options,
)
from .provision import provision_container

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def _backend(request: Request) -> Backend:
    return request.app.state.backend


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def _status_for(error: BackendError) -> int:
    if isinstance(error, BackendRequestError) and 400 <= error.status_code < 600:
        return error.status_code
    return 500


async def _backend_error_handler(request: Request, exc: BackendError) -> JSONResponse:
    status_code = _status_for(exc)
    logger.error("%s %s failed (%d): %s", request.method, request.url.path, status_code, exc)
    return _error(exc.message, status_code)


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------

@router.get("/containers")
async def list_containers(
    request: Request,
    all_containers: bool = Query(False, alias="all"),
) -> dict[str, Any]:
    """List containers; ``?all=true`` includes stopped ones."""
    instances = await _backend(request).list_instances(ListOptions(all=all_containers))
    return {"containers": [i.to_dict() for i in instances]}


@router.post("/containers")
async def create_container(request: Request) -> JSONResponse:
    """Pull the image, create the container and start it.

    Body is validated against the create schema before the engine is
    contacted; validation failures are ``400``.
    """
    try:
        body = await request.json()
    except (ValueError, UnicodeDecodeError):
        return _error("Request body must be valid JSON", 400)

    logger.info("Received container creation request: %s", body)
    try:
        options = parse_create_options(body)
    except OptionValidationError as e:
        logger.info("Validation failed: %s", e)
        return _error(str(e), 400)

    try:
        instance = await provision_container(_backend(request), options)
    except BackendError as e:
        logger.error("Error creating container: %s", e)
        return _error(e.message or "Failed to create container", 500)

    logger.info("Container creation completed: %s", instance.id)
    return JSONResponse({"success": True, "instance": instance.to_dict()})


@router.get("/containers/{instance_id}")
async def inspect_container(request: Request, instance_id: str) -> JSONResponse:
    try:
        document = await _backend(request).inspect_instance(instance_id)
    except BackendRequestError as e:
        if e.is_not_found:
            return _error("Container not found", 404)
        raise
    detail = normalize_container_detail(document, instance_id)
    return JSONResponse({"container": detail.to_dict()})


@router.post("/containers/{instance_id}/start")
async def start_container(request: Request, instance_id: str) -> dict[str, Any]:
    await _backend(request).start_instance(instance_id)
    return {"success": True}


@router.post("/containers/{instance_id}/stop")
async def stop_container(
    request: Request,
    instance_id: str,
    t: Optional[int] = Query(None, ge=0, description="Seconds to wait before killing"),
) -> dict[str, Any]:
    await _backend(request).stop_instance(instance_id, StopOptions(timeout_seconds=t))
    return {"success": True}


@router.delete("/containers/{instance_id}")
async def remove_container(
    request: Request,
    instance_id: str,
    force: bool = False,
    volumes: bool = False,
) -> dict[str, Any]:
    await _backend(request).remove_instance(
        instance_id, RemoveOptions(force=force, remove_volumes=volumes)
    )
    return {"success": True}


@router.get("/containers/{instance_id}/logs")
async def container_logs(
    request: Request,
    instance_id: str,
    stdout: bool = True,
    stderr: bool = True,
    since: Optional[int] = None,
    tail: Optional[str] = None,
) -> Response:
    options = LogOptions(stdout=stdout, stderr=stderr, since=since)
    if tail == "all":
        options = replace(options, tail="all")
    elif tail is not None:
        if not (tail.isascii() and tail.isdigit()):
            return _error("tail must be a non-negative integer or 'all'", 400)
        options = replace(options, tail=int(tail))
    logs = await _backend(request).get_instance_logs(instance_id, options)
    return PlainTextResponse(logs)


@router.get("/schema/create")
async def create_schema() -> Response:
    return Response(get_create_schema_json(), media_type="application/json")


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    return {
        "version": __version__,
        "engine": await _backend(request).is_available(),
    }


def create_app(backend: Backend) -> FastAPI:
    """Build the FastAPI application around *backend*."""
    app = FastAPI(title="PuppyCloud", version=__version__)
    app.state.backend = backend
    app.include_router(router)
    app.add_exception_handler(BackendError, _backend_error_handler)
    return app


class PuppyCloudService:
    """Main HTTP service manager."""

    def __init__(self, config: DaemonConfig, backend: Backend | None = None):
        """Initialize the service.

        Args:
            config: Daemon configuration (listen address, engine socket).
            backend: Engine backend; defaults to Docker at the configured socket.
        """
        self._config = config
        self._backend = backend or create_docker_backend(config.engine)
        self._app = create_app(self._backend)
        self._server: uvicorn.Server | None = None

    @property
    def app(self) -> FastAPI:
        return self._app

    async def start(self) -> None:
        """Prepare the HTTP server."""
        self._server = uvicorn.Server(
            uvicorn.Config(
                self._app,
                host=self._config.host,
                port=self._config.port,
                log_level=self._config.log_level.lower(),
            )
        )
        if not await self._backend.is_available():
            logger.warning(
                "Engine at %s is not responding; requests will fail until it is up",
                self._config.engine.socket_path,
            )
        logger.info(
            "PuppyCloud daemon v%s listening on http://%s:%d (engine: %s)",
            __version__,
            self._config.host,
            self._config.port,
            self._config.engine.socket_path,
        )

    async def run(self) -> None:
        """Serve until the server is told to exit."""
        if self._server is None:
            raise RuntimeError("Service not started")
        await self._server.serve()

    async def stop(self) -> None:
        """Ask the HTTP server to shut down."""
        if self._server is not None:
            self._server.should_exit = True
            self._server = None
