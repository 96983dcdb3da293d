# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Normalize the engine's inspect document into a stable shape.

The engine's inspect output varies between versions and engines
(Docker, Podman's compat API) and fields are routinely missing or
``null``.  Every field here is extracted independently through the
small ``parse_*`` helpers, which return ``None`` instead of raising when
the value is missing or has the wrong type.  A partially broken document
therefore produces a partially filled :class:`ContainerDetail`, never an
exception.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union


# -----------------------------------------------------------------------------
# Parse helpers
# -----------------------------------------------------------------------------

def parse_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def parse_int(value: Any) -> int | None:
    # bool is an int subclass; a count is never True/False
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def parse_list(value: Any) -> list[Any] | None:
    return value if isinstance(value, list) else None


def parse_str_list(value: Any) -> list[str] | None:
    """Return the string entries of a list, or None if it is not a list."""
    items = parse_list(value)
    if items is None:
        return None
    return [item for item in items if isinstance(item, str)]


def parse_mapping(value: Any) -> Mapping[str, Any] | None:
    return value if isinstance(value, Mapping) else None


def _empty_mapping() -> Mapping[str, Any]:
    return {}


# -----------------------------------------------------------------------------
# Result types
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class PortBinding:
    container_port: str
    host_ip: str | None = None
    host_port: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"containerPort": self.container_port}
        if self.host_ip is not None:
            data["hostIp"] = self.host_ip
        if self.host_port is not None:
            data["hostPort"] = self.host_port
        return data


@dataclass(frozen=True)
class MountInfo:
    source: str | None = None
    destination: str | None = None
    mode: str | None = None
    type: str | None = None
    rw: bool = False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "source": self.source,
            "destination": self.destination,
            "mode": self.mode,
            "type": self.type,
        }
        data = {k: v for k, v in data.items() if v is not None}
        data["rw"] = self.rw
        return data


Command = Union[list[str], str]


@dataclass(frozen=True)
class ContainerDetail:
    """Caller-facing view of one container's inspect document."""

    id: str
    raw: Any
    name: str | None = None
    image: str | None = None
    command: Command | None = None
    created_at: str | None = None
    started_at: str | None = None
    finished_at: str | None = None
    restart_count: int | None = None
    state: str | None = None
    health_status: str | None = None
    environment: list[str] | None = None
    labels: dict[str, str] | None = None
    ports: list[PortBinding] | None = None
    mounts: list[MountInfo] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Outward JSON shape.  Absent fields are omitted; ``raw`` is kept."""
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "image": self.image,
            "command": self.command,
            "createdAt": self.created_at,
            "startedAt": self.started_at,
            "finishedAt": self.finished_at,
            "restartCount": self.restart_count,
            "state": self.state,
            "healthStatus": self.health_status,
            "environment": self.environment,
            "labels": self.labels,
            "ports": [p.to_dict() for p in self.ports] if self.ports else None,
            "mounts": [m.to_dict() for m in self.mounts] if self.mounts else None,
        }
        result = {k: v for k, v in data.items() if v is not None}
        result["raw"] = self.raw
        return result


# -----------------------------------------------------------------------------
# Field extraction
# -----------------------------------------------------------------------------

def _parse_name(value: Any) -> str | None:
    name = parse_str(value)
    if name is not None and name.startswith("/"):
        return name[1:]
    return name


def _parse_command(value: Any) -> Command | None:
    if isinstance(value, str):
        return value
    return parse_str_list(value)


def _parse_labels(value: Any) -> dict[str, str] | None:
    labels = parse_mapping(value)
    if labels is None:
        return None
    filtered = {k: v for k, v in labels.items() if isinstance(v, str)}
    return filtered or None


def _parse_ports(network_settings: Mapping[str, Any]) -> list[PortBinding] | None:
    """Flatten ``NetworkSettings.Ports``.

    Shape: ``{"80/tcp": [{"HostIp": "0.0.0.0", "HostPort": "8080"}], "443/tcp": null}``.
    An exposed port without host bindings still yields one record.
    """
    ports = parse_mapping(network_settings.get("Ports"))
    if ports is None:
        return None

    result: list[PortBinding] = []
    for container_port, bindings in ports.items():
        if not isinstance(container_port, str):
            continue
        entries = [b for b in parse_list(bindings) or [] if isinstance(b, Mapping)]
        if not entries:
            result.append(PortBinding(container_port=container_port))
            continue
        for binding in entries:
            result.append(
                PortBinding(
                    container_port=container_port,
                    host_ip=parse_str(binding.get("HostIp")),
                    host_port=parse_str(binding.get("HostPort")),
                )
            )
    return result or None


def _parse_mounts(value: Any) -> list[MountInfo] | None:
    mounts: list[MountInfo] = []
    for entry in parse_list(value) or []:
        if not isinstance(entry, Mapping):
            continue
        mounts.append(
            MountInfo(
                source=parse_str(entry.get("Source")),
                destination=parse_str(entry.get("Destination")),
                mode=parse_str(entry.get("Mode")),
                type=parse_str(entry.get("Type")),
                rw=entry.get("RW") is True,
            )
        )
    return mounts or None


def normalize_container_detail(document: Any, requested_id: str) -> ContainerDetail:
    """Build a ContainerDetail from a raw inspect document.

    Args:
        document: Whatever ``GET /containers/{id}/json`` decoded to.
        requested_id: Identifier the caller asked for, used when the
            document carries no usable ``Id``.

    Returns:
        The normalized detail.  ``raw`` always holds *document* unchanged.
    """
    doc = parse_mapping(document)
    if doc is None:
        return ContainerDetail(id=requested_id, raw=document)

    config = parse_mapping(doc.get("Config")) or _empty_mapping()
    state = parse_mapping(doc.get("State")) or _empty_mapping()
    health = parse_mapping(state.get("Health")) or _empty_mapping()
    network_settings = parse_mapping(doc.get("NetworkSettings")) or _empty_mapping()

    restart_count = parse_int(state.get("RestartCount"))
    if restart_count is None:
        restart_count = parse_int(doc.get("RestartCount"))

    return ContainerDetail(
        id=parse_str(doc.get("Id")) or requested_id,
        raw=document,
        name=_parse_name(doc.get("Name")),
        image=parse_str(config.get("Image")),
        command=_parse_command(config.get("Cmd")),
        created_at=parse_str(doc.get("Created")),
        started_at=parse_str(state.get("StartedAt")),
        finished_at=parse_str(state.get("FinishedAt")),
        restart_count=restart_count,
        state=parse_str(state.get("Status")),
        health_status=parse_str(health.get("Status")),
        environment=parse_str_list(config.get("Env")),
        labels=_parse_labels(config.get("Labels")),
        ports=_parse_ports(network_settings),
        mounts=_parse_mounts(doc.get("Mounts")),
    )
