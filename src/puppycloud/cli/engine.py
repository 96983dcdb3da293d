# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Engine backend used by CLI commands."""

from typing import Optional

from ..daemon.backends import Backend, create_docker_backend
from ..daemon.config import DaemonConfig, load_config, with_overrides

_backend: Optional[Backend] = None
_socket_override: Optional[str] = None


def configure(socket_path: Optional[str]) -> None:
    """Point the CLI at a different engine socket.  Call before get_backend()."""
    global _socket_override, _backend
    _socket_override = socket_path
    _backend = None


def set_backend(backend: Optional[Backend]) -> None:
    global _backend
    _backend = backend


def load_cli_config() -> DaemonConfig:
    """Load configuration with the ``--socket`` override applied."""
    return with_overrides(load_config(), socket_path=_socket_override)


def get_backend() -> Backend:
    """Return the process-wide backend, building it from config on first use."""
    global _backend
    if _backend is None:
        _backend = create_docker_backend(load_cli_config().engine)
    return _backend
