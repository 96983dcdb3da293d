# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Error taxonomy for container engine backends.

Two kinds only.  :class:`BackendError` is the base for anything a backend
raises; :class:`BackendRequestError` adds the HTTP-style status code and
opaque details for failures tied to a single engine request.

Status code conventions for transport-level failures:

* ``503`` - the socket could not be reached (refused, reset, missing).
* ``504`` - the request did not complete within the configured timeout.

Everything else carries the engine's own HTTP status.
"""

from __future__ import annotations

from typing import Any


class BackendError(Exception):
    """Error from a container engine backend."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BackendRequestError(BackendError):
    """A single engine request failed."""

    def __init__(self, message: str, status_code: int, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.message!r}, "
            f"status_code={self.status_code})"
        )
