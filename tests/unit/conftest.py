# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Fixtures for PuppyCloud unit tests.

``engine`` is a fake container engine speaking just enough HTTP/1.1 over
a real Unix socket to exercise the transport end to end.  ``memory_backend``
is an in-memory :class:`Backend` for testing the API and CLI layers.
"""

from __future__ import annotations

import asyncio
import http
import json
import os
import shutil
import tempfile
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qsl, urlsplit

import pytest

from puppycloud.daemon.backends import (
    Backend,
    BackendRequestError,
    CreateOptions,
    DockerBackend,
    InstanceInfo,
    ListOptions,
    LogOptions,
    RemoveOptions,
    StopOptions,
)
from puppycloud.daemon.config import EngineConfig


# ---------------------------------------------------------------------------
# Fake engine over a Unix socket
# ---------------------------------------------------------------------------

@dataclass
class RecordedRequest:
    method: str
    target: str
    headers: dict[str, str]
    body: bytes

    @property
    def path(self) -> str:
        return urlsplit(self.target).path

    @property
    def query(self) -> list[tuple[str, str]]:
        return parse_qsl(urlsplit(self.target).query, keep_blank_values=True)

    def json(self) -> Any:
        return json.loads(self.body)


@dataclass
class _Route:
    method: str
    prefix: str
    status: int
    body: bytes
    content_type: str | None
    hang: bool
    extra_headers: tuple[tuple[str, str], ...] = ()


@dataclass
class FakeEngine:
    socket_path: str
    requests: list[RecordedRequest] = field(default_factory=list)
    _routes: list[_Route] = field(default_factory=list)
    _server: asyncio.AbstractServer | None = None
    _release: asyncio.Event = field(default_factory=asyncio.Event)

    def route(
        self,
        method: str,
        prefix: str,
        *,
        status: int = 200,
        json_body: Any = None,
        text: str | None = None,
        content_type: str | None = None,
        hang: bool = False,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Answer requests whose path starts with *prefix*.  First match wins."""
        if json_body is not None:
            body = json.dumps(json_body).encode()
            content_type = content_type or "application/json"
        else:
            body = (text or "").encode()
        self._routes.append(
            _Route(method, prefix, status, body, content_type, hang, tuple((headers or {}).items()))
        )

    def _match(self, method: str, path: str) -> _Route:
        for r in self._routes:
            if r.method == method and path.startswith(r.prefix):
                return r
        return _Route(method, path, 404, b'{"message": "not found"}', None, False)

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        try:
            request_line = await reader.readline()
            if not request_line:
                return
            method, target, _version = request_line.decode("latin-1").split(" ", 2)
            headers: dict[str, str] = {}
            while True:
                line = await reader.readline()
                if line in (b"\r\n", b"\n", b""):
                    break
                key, _, value = line.decode("latin-1").partition(":")
                headers[key.strip().lower()] = value.strip()
            length = int(headers.get("content-length", "0"))
            body = await reader.readexactly(length) if length else b""

            recorded = RecordedRequest(method, target, headers, body)
            self.requests.append(recorded)

            route = self._match(method, recorded.path)
            if route.hang:
                await self._release.wait()
                return

            head = [
                f"HTTP/1.1 {route.status} {http.HTTPStatus(route.status).phrase}",
                f"Content-Length: {len(route.body)}",
                "Connection: close",
            ]
            if route.content_type:
                head.append(f"Content-Type: {route.content_type}")
            head.extend(f"{k}: {v}" for k, v in route.extra_headers)
            writer.write(("\r\n".join(head) + "\r\n\r\n").encode("latin-1") + route.body)
            await writer.drain()
        except (ConnectionError, asyncio.IncompleteReadError):
            pass
        finally:
            writer.close()

    async def start(self) -> None:
        self._server = await asyncio.start_unix_server(self._handle, path=self.socket_path)

    async def stop(self) -> None:
        self._release.set()
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()


@pytest.fixture
def socket_dir():
    # AF_UNIX paths are limited to ~108 bytes, so stay out of tmp_path
    path = tempfile.mkdtemp(prefix="pc-")
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
async def engine(socket_dir: str):
    fake = FakeEngine(os.path.join(socket_dir, "engine.sock"))
    await fake.start()
    yield fake
    await fake.stop()


@pytest.fixture
def engine_config(engine: FakeEngine) -> EngineConfig:
    return EngineConfig(socket_path=engine.socket_path, request_timeout_ms=5_000)


@pytest.fixture
def backend(engine_config: EngineConfig) -> DockerBackend:
    return DockerBackend(engine_config)


# ---------------------------------------------------------------------------
# In-memory backend
# ---------------------------------------------------------------------------

class MemoryBackend(Backend):
    """Backend keeping containers in a dict; records every call."""

    def __init__(self) -> None:
        self.instances: dict[str, InstanceInfo] = {}
        self.documents: dict[str, dict[str, Any]] = {}
        self.logs: dict[str, str] = {}
        self.calls: list[tuple[str, Any]] = []
        self.available = True
        self.fail: dict[str, BackendRequestError] = {}
        self._next_id = 1

    def _check(self, operation: str, arg: Any) -> None:
        self.calls.append((operation, arg))
        if operation in self.fail:
            raise self.fail[operation]

    def _lookup(self, instance_id: str) -> InstanceInfo:
        if instance_id not in self.instances:
            raise BackendRequestError(f"No such container: {instance_id}", 404)
        return self.instances[instance_id]

    async def list_instances(self, options: ListOptions | None = None) -> list[InstanceInfo]:
        options = options or ListOptions()
        self._check("list", options)
        return [
            i for i in self.instances.values() if options.all or i.state == "running"
        ]

    async def create_instance(self, options: CreateOptions) -> InstanceInfo:
        self._check("create", options)
        instance_id = f"mem{self._next_id:03d}"
        self._next_id += 1
        self.instances[instance_id] = InstanceInfo(
            id=instance_id, name=options.name, image=options.image, state="created"
        )
        return InstanceInfo(id=instance_id, name=options.name, image=options.image)

    async def start_instance(self, instance_id: str) -> None:
        self._check("start", instance_id)
        inst = self._lookup(instance_id)
        self.instances[instance_id] = InstanceInfo(
            id=inst.id, name=inst.name, image=inst.image, state="running"
        )

    async def stop_instance(self, instance_id: str, options: StopOptions | None = None) -> None:
        self._check("stop", (instance_id, options))
        inst = self._lookup(instance_id)
        self.instances[instance_id] = InstanceInfo(
            id=inst.id, name=inst.name, image=inst.image, state="exited"
        )

    async def remove_instance(self, instance_id: str, options: RemoveOptions | None = None) -> None:
        self._check("remove", (instance_id, options))
        self._lookup(instance_id)
        del self.instances[instance_id]

    async def inspect_instance(self, instance_id: str) -> dict[str, Any]:
        self._check("inspect", instance_id)
        inst = self._lookup(instance_id)
        return self.documents.get(instance_id, {"Id": inst.id, "Config": {"Image": inst.image}})

    async def get_instance_logs(self, instance_id: str, options: LogOptions | None = None) -> str:
        self._check("logs", (instance_id, options))
        self._lookup(instance_id)
        return self.logs.get(instance_id, "")

    async def pull_image(self, image: str) -> None:
        self._check("pull", image)

    async def is_available(self) -> bool:
        return self.available


@pytest.fixture
def memory_backend() -> MemoryBackend:
    return MemoryBackend()
