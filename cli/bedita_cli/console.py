from __future__ import annotations

from typing import Any, Iterable, NoReturn

import typer
from bedita_client import ApiError, BEditaClientError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console()


def print_json(data) -> None:
    console.print_json(data=data)


def info(msg: str) -> None:
    console.print(f"[bold cyan]•[/] {escape(msg)}")


def ok(msg: str) -> None:
    console.print(f"[bold green]OK[/] {escape(msg)}")


def warn(msg: str) -> None:
    console.print(f"[bold yellow]WARN[/] {escape(msg)}")


def err(msg: str) -> None:
    console.print(f"[bold red]ERR[/] {escape(msg)}")


def fail(msg: str, code: int = 2) -> NoReturn:
    err(msg)
    raise typer.Exit(code=code)


def fail_request(action: str, exc: BEditaClientError) -> NoReturn:
    """Report a failed API call and exit; 401/403 point at ``bedita auth login``."""
    if isinstance(exc, ApiError) and exc.status_code in (401, 403):
        fail(f"Unauthorized: {exc}. Run: bedita auth login")
    fail(f"Failed to {action}: {exc}")


def print_table(title: str, columns: Iterable[str], rows: Iterable[Iterable[Any]]) -> None:
    """Render rows as a rich table; ``None`` cells show as ``-``."""
    columns = list(columns)
    table = Table(title=title)
    for index, column in enumerate(columns):
        table.add_column(column, style="bold" if index == 0 else None)
    for row in rows:
        table.add_row(*("-" if cell is None or cell == "" else str(cell) for cell in row))
    console.print(table)
