"""Rich consoles and output helpers shared by the commands."""

import json as json_mod
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from claims_timeline.errors import ClaimsTimelineError, recovery_suggestions, user_friendly_message

# Status, logging and tables go to stderr; stdout carries JSON only
console = Console(stderr=True)
stdout_console = Console()


def print_ok(msg: str) -> None:
    console.print(f"[green]✓[/green] {msg}")


def print_err(msg: str) -> None:
    console.print(f"[red]✗[/red] {msg}")


def print_warn(msg: str) -> None:
    console.print(f"[yellow]![/yellow] {msg}")


def _cell(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json_mod.dumps(value, ensure_ascii=False, default=str)
    return "-" if value is None else str(value)


def output_result(data: Dict[str, Any], *, ctx: typer.Context, title: str = "") -> None:
    """Print a result mapping as JSON (stdout) or a key/value table (stderr)."""
    if ctx.obj.get("json"):
        stdout_console.print_json(data=data)
        return

    table = Table(title=title or None, show_header=False, box=None)
    table.add_column(style="bold")
    table.add_column()
    for key, value in data.items():
        table.add_row(key, escape(_cell(value)))
    console.print(table)


def output_table(
    rows: List[Dict[str, Any]],
    *,
    ctx: typer.Context,
    title: str = "",
    columns: Optional[List[str]] = None,
) -> None:
    """Print rows as a JSON array or a Rich table; rows with an ``error`` are shown in red."""
    if ctx.obj.get("json"):
        stdout_console.print_json(data=rows)
        return

    if not rows:
        console.print("[dim]No files[/dim]")
        return

    cols = columns or list(rows[0].keys())
    table = Table(title=title or None)
    for col in cols:
        table.add_column(col)
    for row in rows:
        table.add_row(*[escape(_cell(row.get(c))) for c in cols], style="red" if row.get("error") else None)
    console.print(table)


def print_failure(error: BaseException) -> None:
    """Print a user-facing error with its recovery suggestions to stderr."""
    kind = f"[{error.kind.value}] " if isinstance(error, ClaimsTimelineError) else ""
    print_err(f"{kind}{escape(user_friendly_message(error))}")
    suggestions = recovery_suggestions(error)
    if suggestions:
        console.print("[bold]Suggestions:[/bold]")
        for suggestion in suggestions:
            console.print(f"  • {escape(suggestion)}")
