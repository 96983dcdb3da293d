# SPDX-FileCopyrightText: 2026 Lasath Fernando <devel@lasath.org>
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""User-facing terminal output for the CLI."""

from rich.console import Console


class Output:
    """Thin wrapper around rich consoles with message styles."""

    def __init__(self) -> None:
        self.console = Console(highlight=False)
        self.err_console = Console(stderr=True, highlight=False)

    def info(self, message: str) -> None:
        self.console.print(message)

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def dim(self, message: str) -> None:
        self.console.print(f"[dim]{message}[/dim]")

    def warning(self, message: str) -> None:
        self.err_console.print(f"[yellow]Warning:[/yellow] {message}")

    def error(self, message: str) -> None:
        self.err_console.print(f"[bold red]Error:[/bold red] {message}")

    def hint(self, message: str) -> None:
        self.err_console.print(f"[dim]Hint:[/dim] {message}")


out = Output()
