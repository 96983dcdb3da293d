# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pytest configuration for PuppyCloud integration tests.

These run against a real container engine.  Point them at one with::

    PUPPYCLOUD_TEST_SOCKET=/var/run/docker.sock pytest tests/integration

Without the variable every test here is skipped.
"""

from __future__ import annotations

import os
import uuid

import pytest

from puppycloud.daemon.backends import DockerBackend, RemoveOptions
from puppycloud.daemon.backends.errors import BackendRequestError
from puppycloud.daemon.config import EngineConfig

# ---------------------------------------------------------------------------
# Engine configuration
# ---------------------------------------------------------------------------

TEST_SOCKET = os.environ.get("PUPPYCLOUD_TEST_SOCKET", "")
TEST_IMAGE = os.environ.get("PUPPYCLOUD_TEST_IMAGE", "alpine:3.19")
TEST_TIMEOUT_MS = int(os.environ.get("PUPPYCLOUD_TEST_TIMEOUT_MS", "120000"))


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if TEST_SOCKET and os.path.exists(TEST_SOCKET):
        return
    skip = pytest.mark.skip(reason="PUPPYCLOUD_TEST_SOCKET not set or missing")
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(skip)


@pytest.fixture
def engine_backend() -> DockerBackend:
    return DockerBackend(
        EngineConfig(socket_path=TEST_SOCKET, request_timeout_ms=TEST_TIMEOUT_MS)
    )


@pytest.fixture
async def container_name(engine_backend: DockerBackend):
    """A unique container name, force-removed after the test."""
    name = f"puppycloud-test-{uuid.uuid4().hex[:8]}"
    yield name
    try:
        await engine_backend.remove_instance(name, RemoveOptions(force=True, remove_volumes=True))
    except BackendRequestError as e:
        if not e.is_not_found:
            raise
