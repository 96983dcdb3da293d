# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Entry point for running the daemon directly.

Usage:
    python -m puppycloud.daemon
    python -m puppycloud.daemon --port 8080 --socket /run/podman/podman.sock
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from .config import ConfigError, DaemonConfig, load_config, with_overrides


async def main(config: DaemonConfig) -> None:
    """Run the PuppyCloud HTTP daemon.

    uvicorn installs its own SIGINT/SIGTERM handlers and returns from
    ``serve()`` once one arrives.
    """
    from .service import PuppyCloudService

    service = PuppyCloudService(config)
    try:
        await service.start()
        await service.run()
    finally:
        await service.stop()


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="PuppyCloud container API daemon")
    parser.add_argument("--host", help="Address to listen on")
    parser.add_argument("--port", type=int, help="Port to listen on")
    parser.add_argument("--socket", help="Container engine Unix socket path")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Logging verbosity",
    )
    return parser.parse_args(argv)


def run(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    args = _parse_args(argv)

    try:
        config = with_overrides(
            load_config(),
            socket_path=args.socket,
            host=args.host,
            port=args.port,
            log_level=args.log_level,
        )
    except ConfigError as e:
        print(f"puppycloud-daemon: {e}", file=sys.stderr)
        sys.exit(2)

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        asyncio.run(main(config))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
