# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Docker Engine API backend.

This module provides a typed async client for the Docker-compatible
engine API, communicating over the Unix socket at /var/run/docker.sock
(or wherever :class:`EngineConfig` points).
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from ..config import EngineConfig
from .base import (
    Backend,
    CreateOptions,
    InstanceInfo,
    ListOptions,
    LogOptions,
    RemoveOptions,
    StopOptions,
)
from .errors import BackendError, BackendRequestError
from .transport import EngineRequest, EngineResponse, EngineTransport, parse_json

logger = logging.getLogger(__name__)


def _segment(instance_id: str) -> str:
    """Percent-encode an identifier for use as one path segment."""
    return quote(instance_id, safe="")


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _strip_slash(name: str | None) -> str | None:
    # The engine reports names as "/name"
    if name is not None and name.startswith("/"):
        return name[1:]
    return name


def _instance_from_summary(summary: dict[str, Any]) -> InstanceInfo | None:
    """Map one entry of ``GET /containers/json`` to an InstanceInfo."""
    instance_id = summary.get("Id")
    if not isinstance(instance_id, str):
        return None

    name = None
    names = summary.get("Names")
    if isinstance(names, list) and names:
        name = _strip_slash(_optional_str(names[0]))

    created = summary.get("Created")
    if isinstance(created, bool) or not isinstance(created, (int, float)):
        created = None

    return InstanceInfo(
        id=instance_id,
        name=name,
        image=_optional_str(summary.get("Image")),
        state=_optional_str(summary.get("State")),
        status=_optional_str(summary.get("Status")),
        created_at=int(created) if created is not None else None,
    )


def build_create_body(options: CreateOptions) -> dict[str, Any]:
    """Encode CreateOptions as a ``POST /containers/create`` body.

    Keys whose value is absent are left out entirely.
    """
    body: dict[str, Any] = {"Image": options.image}
    if options.command is not None:
        body["Cmd"] = list(options.command)
    if options.working_directory is not None:
        body["WorkingDir"] = options.working_directory
    if options.environment is not None:
        body["Env"] = [f"{key}={value}" for key, value in options.environment.items()]
    binds = [volume.to_bind() for volume in options.volumes]
    if binds:
        body["HostConfig"] = {"Binds": binds}
    return body


def _log_params(options: LogOptions) -> list[tuple[str, str]]:
    params = [
        ("stdout", "1" if options.stdout is not False else "0"),
        ("stderr", "1" if options.stderr is not False else "0"),
        ("timestamps", "0"),
        ("follow", "0"),
    ]
    if options.since is not None:
        params.append(("since", str(options.since)))

    tail = options.tail
    if tail == "all":
        params.append(("tail", "all"))
    elif tail is not None:
        if isinstance(tail, bool) or not isinstance(tail, int) or tail < 0:
            raise BackendError(f"tail must be a non-negative integer or 'all', got {tail!r}")
        params.append(("tail", str(tail)))
    return params


class DockerBackend(Backend):
    """Async client for the Docker Engine API over a Unix socket."""

    def __init__(self, config: EngineConfig | None = None):
        self._config = config or EngineConfig()
        self._transport = EngineTransport(self._config)

    @property
    def config(self) -> EngineConfig:
        return self._config

    async def _request(
        self,
        method: str,
        path: str,
        params: list[tuple[str, str]] | None = None,
        body: Any = None,
        headers: dict[str, str | None] | None = None,
    ) -> EngineResponse:
        return await self._transport.execute(
            EngineRequest(
                method=method,
                path=path,
                params=params or (),
                body=body,
                headers=headers,
            )
        )

    # -------------------------------------------------------------------------
    # Instance operations
    # -------------------------------------------------------------------------

    async def list_instances(self, options: ListOptions | None = None) -> list[InstanceInfo]:
        """List containers.

        Args:
            options: ``all=True`` includes stopped containers.

        Returns:
            One InstanceInfo per container the engine reported.
        """
        options = options or ListOptions()
        response = await self._request(
            "GET", "/containers/json", params=[("all", "1" if options.all else "0")]
        )
        payload = parse_json(response)
        if not isinstance(payload, list):
            raise BackendRequestError(
                "Unexpected response from engine API",
                response.status_code,
                response.body_text,
            )

        instances = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            instance = _instance_from_summary(item)
            if instance is not None:
                instances.append(instance)
        return instances

    async def create_instance(self, options: CreateOptions) -> InstanceInfo:
        """Create (but do not start) a container.

        The engine only answers with the new identifier, so ``name`` and
        ``image`` in the result are the values the caller asked for.
        """
        params = [("name", options.name)] if options.name else []
        response = await self._request(
            "POST",
            "/containers/create",
            params=params,
            body=build_create_body(options),
        )
        payload = parse_json(response)
        instance_id = payload.get("Id") if isinstance(payload, dict) else None
        if not isinstance(instance_id, str):
            raise BackendRequestError(
                "Engine create response did not include an Id",
                response.status_code,
                response.body_text,
            )

        warnings = payload.get("Warnings")
        if isinstance(warnings, list):
            for warning in warnings:
                logger.warning("Engine warning creating %s: %s", instance_id, warning)

        return InstanceInfo(id=instance_id, name=options.name, image=options.image)

    async def start_instance(self, instance_id: str) -> None:
        await self._request("POST", f"/containers/{_segment(instance_id)}/start")

    async def stop_instance(self, instance_id: str, options: StopOptions | None = None) -> None:
        options = options or StopOptions()
        params = []
        if options.timeout_seconds is not None:
            params.append(("t", str(options.timeout_seconds)))
        await self._request(
            "POST", f"/containers/{_segment(instance_id)}/stop", params=params
        )

    async def remove_instance(self, instance_id: str, options: RemoveOptions | None = None) -> None:
        options = options or RemoveOptions()
        params = []
        if options.force:
            params.append(("force", "1"))
        if options.remove_volumes:
            params.append(("v", "1"))
        await self._request(
            "DELETE", f"/containers/{_segment(instance_id)}", params=params
        )

    async def inspect_instance(self, instance_id: str) -> dict[str, Any]:
        """Get the raw inspect document for one container.

        See :func:`~.normalize.normalize_container_detail` to turn it into a
        stable shape.
        """
        response = await self._request("GET", f"/containers/{_segment(instance_id)}/json")
        payload = parse_json(response)
        if not isinstance(payload, dict):
            raise BackendRequestError(
                "Unexpected response from engine API",
                response.status_code,
                response.body_text,
            )
        return payload

    async def get_instance_logs(self, instance_id: str, options: LogOptions | None = None) -> str:
        """Fetch a container's logs as raw text (no follow)."""
        response = await self._request(
            "GET",
            f"/containers/{_segment(instance_id)}/logs",
            params=_log_params(options or LogOptions()),
            headers={"Accept": "text/plain"},
        )
        return response.body_text

    # -------------------------------------------------------------------------
    # Images and health
    # -------------------------------------------------------------------------

    async def pull_image(self, image: str) -> None:
        """Pull *image* from its registry.  Progress output is discarded."""
        await self._request("POST", "/images/create", params=[("fromImage", image)])

    async def is_available(self) -> bool:
        """Check if the engine is available and responding.

        Returns:
            True if the engine answered ``/_ping`` successfully.
        """
        try:
            await self._request("GET", "/_ping", headers={"Accept": "text/plain"})
            return True
        except BackendError as e:
            logger.debug("Engine not available: %s", e)
            return False


def create_docker_backend(config: EngineConfig | None = None) -> DockerBackend:
    return DockerBackend(config)
