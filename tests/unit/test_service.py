# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Tests for the HTTP API."""

from __future__ import annotations

import httpx
import pytest

from puppycloud.daemon.backends import BackendError, BackendRequestError, InstanceInfo
from puppycloud.daemon.container_options import get_create_schema_json
from puppycloud.daemon.service import create_app


@pytest.fixture
async def api(memory_backend):
    transport = httpx.ASGITransport(app=create_app(memory_backend))
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def _seed(backend, instance_id: str, state: str = "running") -> None:
    backend.instances[instance_id] = InstanceInfo(
        id=instance_id, name=instance_id, image="node:18", state=state
    )


# -- list --


async def test_list_containers(api, memory_backend) -> None:
    _seed(memory_backend, "a1")
    _seed(memory_backend, "b2", state="exited")

    running = await api.get("/api/containers")
    everything = await api.get("/api/containers", params={"all": "true"})

    assert running.status_code == 200
    assert running.json() == {
        "containers": [{"id": "a1", "name": "a1", "image": "node:18", "state": "running"}]
    }
    assert [c["id"] for c in everything.json()["containers"]] == ["a1", "b2"]


async def test_engine_down_maps_to_status(api, memory_backend) -> None:
    memory_backend.fail["list"] = BackendRequestError("connect: no such file", 503)

    response = await api.get("/api/containers")

    assert response.status_code == 503
    assert response.json() == {"error": "connect: no such file"}


# -- create --


async def test_create_container(api, memory_backend) -> None:
    response = await api.post("/api/containers", json={
        "image": "node:18",
        "name": "x",
        "command": "node app.js",
        "environment": {"NODE_ENV": "production"},
    })

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "instance": {"id": "mem001", "name": "x", "image": "node:18"},
    }
    assert [op for op, _arg in memory_backend.calls] == ["pull", "create", "start"]
    create_opts = memory_backend.calls[1][1]
    assert create_opts.command == ["node", "app.js"]


async def test_create_requires_image(api, memory_backend) -> None:
    response = await api.post("/api/containers", json={"name": "x"})

    assert response.status_code == 400
    assert response.json() == {"error": "Image is required"}
    assert memory_backend.calls == []


async def test_create_rejects_malformed_body(api, memory_backend) -> None:
    response = await api.post(
        "/api/containers", content=b"{not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert "error" in response.json()
    assert memory_backend.calls == []


async def test_create_engine_failure(api, memory_backend) -> None:
    memory_backend.fail["create"] = BackendRequestError("name already in use", 409)

    response = await api.post("/api/containers", json={"image": "node:18", "name": "dup"})

    assert response.status_code == 500
    assert response.json() == {"error": "name already in use"}


# -- inspect --


async def test_inspect_container(api, memory_backend) -> None:
    _seed(memory_backend, "c1")
    memory_backend.documents["c1"] = {
        "Id": "c1full",
        "Name": "/c1",
        "State": {"Status": "running"},
        "NetworkSettings": {"Ports": {"80/tcp": []}},
    }

    response = await api.get("/api/containers/c1")

    assert response.status_code == 200
    container = response.json()["container"]
    assert container["id"] == "c1full"
    assert container["name"] == "c1"
    assert container["state"] == "running"
    assert container["ports"] == [{"containerPort": "80/tcp"}]
    assert container["raw"] == memory_backend.documents["c1"]
    assert "labels" not in container


async def test_inspect_not_found(api) -> None:
    response = await api.get("/api/containers/ghost")

    assert response.status_code == 404
    assert response.json() == {"error": "Container not found"}


# -- start / stop / remove / logs --


async def test_lifecycle_routes(api, memory_backend) -> None:
    _seed(memory_backend, "c1", state="created")

    assert (await api.post("/api/containers/c1/start")).json() == {"success": True}
    assert memory_backend.instances["c1"].state == "running"

    assert (await api.post("/api/containers/c1/stop", params={"t": 3})).json() == {"success": True}
    _op, (_id, stop_opts) = memory_backend.calls[-1]
    assert stop_opts.timeout_seconds == 3

    response = await api.delete("/api/containers/c1", params={"force": "true", "volumes": "1"})
    assert response.json() == {"success": True}
    _op, (_id, remove_opts) = memory_backend.calls[-1]
    assert remove_opts.force and remove_opts.remove_volumes
    assert "c1" not in memory_backend.instances


async def test_start_missing_container(api) -> None:
    response = await api.post("/api/containers/ghost/start")
    assert response.status_code == 404
    assert response.json() == {"error": "No such container: ghost"}


async def test_logs(api, memory_backend) -> None:
    _seed(memory_backend, "c1")
    memory_backend.logs["c1"] = "line 1\nline 2\n"

    response = await api.get("/api/containers/c1/logs", params={"tail": "all", "stderr": "false"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text == "line 1\nline 2\n"
    _op, (_id, log_opts) = memory_backend.calls[-1]
    assert log_opts.tail == "all"
    assert log_opts.stderr is False
    assert log_opts.stdout is True


@pytest.mark.parametrize("tail", ["-5", "ten", "\u00b2", "\u0661"])
async def test_logs_bad_tail(api, memory_backend, tail) -> None:
    _seed(memory_backend, "c1")
    response = await api.get("/api/containers/c1/logs", params={"tail": tail})
    assert response.status_code == 400
    assert memory_backend.calls == []


async def test_plain_backend_error_is_500(api, memory_backend) -> None:
    memory_backend.fail["list"] = BackendError("something odd")
    response = await api.get("/api/containers")
    assert response.status_code == 500
    assert response.json() == {"error": "something odd"}


# -- misc --


async def test_create_schema(api) -> None:
    response = await api.get("/api/schema/create")
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    assert response.text == get_create_schema_json()
    assert response.json()["options"][0]["key"] == "image"


async def test_health(api, memory_backend) -> None:
    memory_backend.available = False
    response = await api.get("/api/health")
    assert response.json()["engine"] is False
