# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Container engine backends - public API re-exports."""

from .base import (
    Backend,
    CreateOptions,
    InstanceInfo,
    ListOptions,
    LogOptions,
    RemoveOptions,
    StopOptions,
    VolumeMount,
)
from .docker import DockerBackend, create_docker_backend
from .errors import BackendError, BackendRequestError
from .normalize import ContainerDetail, MountInfo, PortBinding, normalize_container_detail

__all__ = [
    "Backend",
    "BackendError",
    "BackendRequestError",
    "ContainerDetail",
    "CreateOptions",
    "DockerBackend",
    "InstanceInfo",
    "ListOptions",
    "LogOptions",
    "MountInfo",
    "PortBinding",
    "RemoveOptions",
    "StopOptions",
    "VolumeMount",
    "create_docker_backend",
    "normalize_container_detail",
]
