# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""PuppyCloud configuration loading.

Configuration is read from (lowest to highest priority):
  1. /usr/lib/puppycloud/puppycloud.conf  (package defaults)
  2. /etc/puppycloud/puppycloud.conf      (system)
  3. ~/.config/puppycloud/puppycloud.conf (user)

followed by the ``PUPPYCLOUD_SOCKET`` and ``PUPPYCLOUD_TIMEOUT_MS``
environment variables.  Files are INI with ``[engine]`` and ``[daemon]``
sections::

    [engine]
    socket_path = /var/run/docker.sock
    request_timeout_ms = 30000

    [daemon]
    host = 127.0.0.1
    port = 3312
    log_level = INFO

The result is an immutable :class:`DaemonConfig` that is built once at
startup and handed to whatever needs it.
"""

from __future__ import annotations

import configparser
import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace

logger = logging.getLogger(__name__)

DEFAULT_SOCKET_PATH = "/var/run/docker.sock"
DEFAULT_REQUEST_TIMEOUT_MS = 30_000
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3312
DEFAULT_LOG_LEVEL = "INFO"

CONFIG_PATHS: tuple[str, ...] = (
    "/usr/lib/puppycloud/puppycloud.conf",
    "/etc/puppycloud/puppycloud.conf",
    os.path.join("~", ".config", "puppycloud", "puppycloud.conf"),
)

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class ConfigError(Exception):
    """Raised when a configuration value is invalid."""


@dataclass(frozen=True)
class EngineConfig:
    """Where the engine lives and how long to wait for it."""

    socket_path: str = DEFAULT_SOCKET_PATH
    request_timeout_ms: int = DEFAULT_REQUEST_TIMEOUT_MS

    def __post_init__(self) -> None:
        if not self.socket_path:
            raise ConfigError("engine socket_path must not be empty")
        if self.request_timeout_ms <= 0:
            raise ConfigError(
                f"request_timeout_ms must be positive, got {self.request_timeout_ms}"
            )

    @property
    def request_timeout(self) -> float:
        """Request timeout in seconds."""
        return self.request_timeout_ms / 1000


@dataclass(frozen=True)
class DaemonConfig:
    engine: EngineConfig = field(default_factory=EngineConfig)
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL


def _parse_int(raw: str, key: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from None


def _parse_log_level(raw: str) -> str:
    level = raw.strip().upper()
    if level not in _LOG_LEVELS:
        raise ConfigError(
            f"log_level must be one of {', '.join(sorted(_LOG_LEVELS))}, got {raw!r}"
        )
    return level


def load_config(
    paths: Sequence[str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> DaemonConfig:
    """Load configuration from the layered config files and environment.

    Args:
        paths: Config files to read, lowest priority first.  Defaults to
            :data:`CONFIG_PATHS`.  Missing files are skipped.
        environ: Environment mapping for overrides.  Defaults to
            ``os.environ``.

    Returns:
        The merged, validated configuration.

    Raises:
        ConfigError: If a value has the wrong type or is out of range.
    """
    if paths is None:
        paths = CONFIG_PATHS
    if environ is None:
        environ = os.environ

    parser = configparser.ConfigParser()
    try:
        read = parser.read([os.path.expanduser(p) for p in paths], encoding="utf-8")
    except configparser.Error as e:
        raise ConfigError(f"Malformed config file: {e}") from e
    for path in read:
        logger.debug("Loaded config from %s", path)

    socket_path = parser.get("engine", "socket_path", fallback=DEFAULT_SOCKET_PATH)
    timeout_ms = DEFAULT_REQUEST_TIMEOUT_MS
    if parser.has_option("engine", "request_timeout_ms"):
        timeout_ms = _parse_int(
            parser.get("engine", "request_timeout_ms"), "engine.request_timeout_ms"
        )

    host = parser.get("daemon", "host", fallback=DEFAULT_HOST)
    port = DEFAULT_PORT
    if parser.has_option("daemon", "port"):
        port = _parse_int(parser.get("daemon", "port"), "daemon.port")
    log_level = _parse_log_level(
        parser.get("daemon", "log_level", fallback=DEFAULT_LOG_LEVEL)
    )

    # Environment wins over every file
    if environ.get("PUPPYCLOUD_SOCKET"):
        socket_path = environ["PUPPYCLOUD_SOCKET"]
    if environ.get("PUPPYCLOUD_TIMEOUT_MS"):
        timeout_ms = _parse_int(environ["PUPPYCLOUD_TIMEOUT_MS"], "PUPPYCLOUD_TIMEOUT_MS")

    return DaemonConfig(
        engine=EngineConfig(socket_path=socket_path, request_timeout_ms=timeout_ms),
        host=host,
        port=port,
        log_level=log_level,
    )


def with_overrides(
    config: DaemonConfig,
    *,
    socket_path: str | None = None,
    host: str | None = None,
    port: int | None = None,
    log_level: str | None = None,
) -> DaemonConfig:
    """Return a copy of *config* with command-line overrides applied."""
    engine = config.engine
    if socket_path:
        engine = replace(engine, socket_path=socket_path)
    return replace(
        config,
        engine=engine,
        host=host or config.host,
        port=port if port is not None else config.port,
        log_level=_parse_log_level(log_level) if log_level else config.log_level,
    )
