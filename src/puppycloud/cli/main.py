#!/usr/bin/env python3
# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""
PuppyCloud CLI - Main entry point.

Usage:
    puppycloud [OPTIONS] COMMAND [ARGS]...

Manage containers on this host by talking straight to the container
engine's socket.
"""

import os
from datetime import datetime, timezone
from typing import List, Optional

import typer
from rich.table import Table

from . import __version__
from ..daemon.backends import (
    CreateOptions,
    ListOptions,
    LogOptions,
    RemoveOptions,
    StopOptions,
    VolumeMount,
    normalize_container_detail,
)
from ..daemon.config import ConfigError
from ..daemon.provision import provision_container
from .async_typer import AsyncTyper
from .decorators import require_engine
from .engine import configure, get_backend, load_cli_config
from .output import out


# Create the main Typer app
app = AsyncTyper(
    name="puppycloud",
    help="Container lifecycle management over the engine socket",
    add_completion=True,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        out.info(f"puppycloud version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    socket: Optional[str] = typer.Option(
        None,
        "--socket",
        "-H",
        envvar="PUPPYCLOUD_SOCKET",
        help="Container engine Unix socket path.",
    ),
) -> None:
    """
    PuppyCloud - manage containers on a single host.
    """
    if socket:
        configure(socket)


def _parse_env(entries: List[str]) -> dict:
    env: dict = {}
    for entry in entries:
        key, sep, value = entry.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected KEY=VALUE, got {entry!r}", param_hint="--env")
        env[key] = value
    return env


def _parse_volume(spec: str) -> VolumeMount:
    parts = spec.split(":")
    if len(parts) == 3 and parts[2] in ("ro", "rw"):
        return VolumeMount(source=parts[0], target=parts[1], read_only=parts[2] == "ro")
    if len(parts) == 2 and all(parts):
        return VolumeMount(source=parts[0], target=parts[1])
    raise typer.BadParameter(f"expected SRC:DST[:ro], got {spec!r}", param_hint="--volume")


def _format_created(created_at: Optional[int]) -> str:
    if created_at is None:
        return ""
    return datetime.fromtimestamp(created_at, tz=timezone.utc).strftime("%Y-%m-%d %H:%M")


@app.command(name="list")
@require_engine
async def list_containers(
    all_containers: bool = typer.Option(
        False,
        "--all",
        "-a",
        help="Show all containers including stopped ones",
    ),
) -> None:
    """List containers."""
    instances = await get_backend().list_instances(ListOptions(all=all_containers))

    if not instances:
        if all_containers:
            out.dim("No containers found.")
        else:
            out.dim("No running containers. Use --all to see stopped containers.")
        return

    table = Table(title="Containers")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name", style="bold")
    table.add_column("Image", style="yellow")
    table.add_column("State")
    table.add_column("Status", style="dim")
    table.add_column("Created", style="dim")

    for inst in instances:
        state = inst.state or ""
        state_style = "green" if state == "running" else "red"
        table.add_row(
            inst.id[:12],
            inst.name or "",
            inst.image or "",
            f"[{state_style}]{state}[/{state_style}]",
            inst.status or "",
            _format_created(inst.created_at),
        )

    out.console.print(table)


@app.command(
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True}
)
@require_engine
async def create(
    ctx: typer.Context,
    image: str = typer.Argument(..., help="Image to create the container from (e.g. node:18)"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Container name"),
    env: Optional[List[str]] = typer.Option(
        None, "--env", "-e", help="Environment variable KEY=VALUE (repeatable)"
    ),
    volume: Optional[List[str]] = typer.Option(
        None, "--volume", "-v", help="Bind mount SRC:DST[:ro] (repeatable)"
    ),
    workdir: Optional[str] = typer.Option(
        None, "--workdir", "-w", help="Working directory inside the container"
    ),
) -> None:
    """Pull an image, create a container from it and start it.

    Pass a command after ``--``:

        puppycloud create node:18 --name api -- node app.js
    """
    options = CreateOptions(
        image=image,
        name=name,
        command=list(ctx.args) or None,
        environment=_parse_env(env) if env else None,
        volumes=[_parse_volume(v) for v in volume or []],
        working_directory=workdir,
    )
    instance = await provision_container(get_backend(), options)
    out.success(f"Container {instance.name or instance.id[:12]} started ({instance.id[:12]})")


@app.command()
@require_engine
async def start(
    instance_id: str = typer.Argument(..., help="Container ID or name"),
) -> None:
    """Start a stopped container."""
    await get_backend().start_instance(instance_id)
    out.success(f"Started {instance_id}")


@app.command()
@require_engine
async def stop(
    instance_id: str = typer.Argument(..., help="Container ID or name"),
    time: Optional[int] = typer.Option(
        None,
        "--time",
        "-t",
        min=0,
        help="Seconds to wait before killing the container",
    ),
) -> None:
    """Stop a running container."""
    await get_backend().stop_instance(instance_id, StopOptions(timeout_seconds=time))
    out.success(f"Stopped {instance_id}")


@app.command()
@require_engine
async def rm(
    instance_id: str = typer.Argument(..., help="Container ID or name"),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Force removal even if container is running",
    ),
    volumes: bool = typer.Option(
        False,
        "--volumes",
        "-v",
        help="Also remove anonymous volumes",
    ),
) -> None:
    """Remove a container."""
    await get_backend().remove_instance(
        instance_id, RemoveOptions(force=force, remove_volumes=volumes)
    )
    out.success(f"Removed {instance_id}")


@app.command()
@require_engine
async def inspect(
    instance_id: str = typer.Argument(..., help="Container ID or name"),
    raw: bool = typer.Option(False, "--raw", help="Include the engine's raw document"),
) -> None:
    """Show details of a container as JSON."""
    document = await get_backend().inspect_instance(instance_id)
    detail = normalize_container_detail(document, instance_id).to_dict()
    if not raw:
        detail.pop("raw", None)
    out.console.print_json(data=detail)


@app.command()
@require_engine
async def logs(
    instance_id: str = typer.Argument(..., help="Container ID or name"),
    tail: Optional[str] = typer.Option(
        None, "--tail", help="Number of lines from the end, or 'all'"
    ),
    since: Optional[int] = typer.Option(
        None, "--since", help="Only logs since this UNIX timestamp"
    ),
    stdout: bool = typer.Option(True, "--stdout/--no-stdout", help="Include stdout"),
    stderr: bool = typer.Option(True, "--stderr/--no-stderr", help="Include stderr"),
) -> None:
    """Print a container's logs."""
    tail_value = None
    if tail is not None:
        if tail == "all":
            tail_value = "all"
        elif tail.isascii() and tail.isdigit():
            tail_value = int(tail)
        else:
            raise typer.BadParameter("must be a non-negative integer or 'all'", param_hint="--tail")

    text = await get_backend().get_instance_logs(
        instance_id,
        LogOptions(stdout=stdout, stderr=stderr, since=since, tail=tail_value),
    )
    typer.echo(text, nl=False)


@app.command()
@require_engine
async def pull(
    image: str = typer.Argument(..., help="Image to pull (e.g. node:18)"),
) -> None:
    """Pull an image."""
    out.dim(f"Pulling {image}...")
    await get_backend().pull_image(image)
    out.success(f"Pulled {image}")


@app.command(name="config")
def config_cmd(
    key: Optional[str] = typer.Argument(
        None, help="Config key to display (socket_path, request_timeout_ms, host, port, log_level)"
    ),
) -> None:
    """View PuppyCloud configuration.

    Configuration is read from (highest to lowest priority):
      1. PUPPYCLOUD_SOCKET / PUPPYCLOUD_TIMEOUT_MS environment variables
      2. ~/.config/puppycloud/puppycloud.conf  (user)
      3. /etc/puppycloud/puppycloud.conf       (system)
      4. /usr/lib/puppycloud/puppycloud.conf   (package defaults)

    Examples:
        puppycloud config               # Show all config
        puppycloud config socket_path   # Get socket_path value
    """
    try:
        config = load_cli_config()
    except ConfigError as e:
        out.error(f"Invalid configuration: {e}")
        raise typer.Exit(1)

    values = {
        "socket_path": config.engine.socket_path,
        "request_timeout_ms": str(config.engine.request_timeout_ms),
        "host": config.host,
        "port": str(config.port),
        "log_level": config.log_level,
    }

    if key is None:
        table = Table(show_header=True)
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")
        for name, value in values.items():
            table.add_row(name, value)
        out.console.print(table)
        return

    if key not in values:
        out.error(f"Unknown config key: {key}")
        out.hint(f"Valid keys: {', '.join(values)}")
        raise typer.Exit(1)

    out.info(f"{key} = {values[key]}")


def cli() -> None:
    """CLI entry point for the console script."""
    prog_name = os.environ.get("PUPPYCLOUD_PROG_NAME", "puppycloud")
    app(prog_name=prog_name)


if __name__ == "__main__":
    cli()
