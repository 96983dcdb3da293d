# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Backend capability interface and the value objects it trades in."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Any, Literal, Union


@dataclass(frozen=True)
class InstanceInfo:
    """Summary of one container as returned by list and create."""

    id: str
    name: str | None = None
    image: str | None = None
    state: str | None = None
    status: str | None = None
    created_at: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Outward JSON shape; absent fields are omitted."""
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "image": self.image,
            "state": self.state,
            "status": self.status,
            "createdAt": self.created_at,
        }
        return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class VolumeMount:
    source: str
    target: str
    read_only: bool = False

    def to_bind(self) -> str:
        """Render as an engine bind string (``source:target[:ro]``)."""
        flag = ":ro" if self.read_only else ""
        return f"{self.source}:{self.target}{flag}"


@dataclass
class CreateOptions:
    """Caller-supplied parameters for a single create call."""

    image: str
    name: str | None = None
    command: list[str] | None = None
    environment: dict[str, str] | None = None
    volumes: list[VolumeMount] = field(default_factory=list)
    working_directory: str | None = None


@dataclass(frozen=True)
class ListOptions:
    all: bool = False


@dataclass(frozen=True)
class StopOptions:
    timeout_seconds: int | None = None


@dataclass(frozen=True)
class RemoveOptions:
    force: bool = False
    remove_volumes: bool = False


Tail = Union[int, Literal["all"]]


@dataclass(frozen=True)
class LogOptions:
    stdout: bool = True
    stderr: bool = True
    since: int | None = None
    tail: Tail | None = None


class Backend(abc.ABC):
    """Operations every container engine backend provides.

    Callers (the HTTP API, the CLI) only ever see this interface, so an
    alternative engine can be dropped in without touching them.
    """

    @abc.abstractmethod
    async def list_instances(self, options: ListOptions | None = None) -> list[InstanceInfo]:
        ...

    @abc.abstractmethod
    async def create_instance(self, options: CreateOptions) -> InstanceInfo:
        ...

    @abc.abstractmethod
    async def start_instance(self, instance_id: str) -> None:
        ...

    @abc.abstractmethod
    async def stop_instance(self, instance_id: str, options: StopOptions | None = None) -> None:
        ...

    @abc.abstractmethod
    async def remove_instance(self, instance_id: str, options: RemoveOptions | None = None) -> None:
        ...

    @abc.abstractmethod
    async def inspect_instance(self, instance_id: str) -> dict[str, Any]:
        """Return the engine's raw inspect document for one instance."""

    @abc.abstractmethod
    async def get_instance_logs(self, instance_id: str, options: LogOptions | None = None) -> str:
        ...

    @abc.abstractmethod
    async def pull_image(self, image: str) -> None:
        ...

    @abc.abstractmethod
    async def is_available(self) -> bool:
        """Check whether the engine is reachable and responding."""
