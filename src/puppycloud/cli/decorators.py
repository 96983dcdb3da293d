# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Decorators for CLI commands."""

from functools import wraps
from typing import Callable, Coroutine, TypeVar

import typer

from ..daemon.backends import BackendError, BackendRequestError
from ..daemon.config import ConfigError
from .engine import get_backend
from .output import out

R = TypeVar("R")


def require_engine(func: Callable[..., Coroutine[None, None, R]]) -> Callable[..., Coroutine[None, None, R]]:
    """Decorator that checks engine availability and handles BackendError."""
    @wraps(func)
    async def wrapper(*args: object, **kwargs: object) -> R:
        try:
            backend = get_backend()
        except ConfigError as e:
            out.error(f"Invalid configuration: {e}")
            raise typer.Exit(1)

        if not await backend.is_available():
            out.error("Container engine is not available.")
            out.hint("Is the engine running? Check [bold]puppycloud config[/bold] for the socket path.")
            raise typer.Exit(1)

        try:
            return await func(*args, **kwargs)
        except BackendRequestError as e:
            if e.is_not_found:
                out.error(f"Not found: {e}")
            else:
                out.error(f"{e} (status {e.status_code})")
            raise typer.Exit(1)
        except BackendError as e:
            out.error(str(e))
            raise typer.Exit(1)
    return wrapper
