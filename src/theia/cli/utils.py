"""
CLI utility helpers — output formatting, settings and error reporting.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import IO, Any, NoReturn

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from theia.core.config import TheiaSettings, get_settings
from theia.ops.responses import ThroughputAnomalyDetector

console = Console()
err_console = Console(stderr=True)

TAD_COLUMNS = ("NAME", "SPARK APPLICATION", "STATUS", "CREATION TIME", "COMPLETION TIME")

# Wide enough that rows are never wrapped or truncated when piped.
_TABLE_WIDTH = 512


# ── Settings / errors ────────────────────────────────────────────────────


def settings_from_context(ctx: typer.Context) -> TheiaSettings:
    """Settings with the root command's global options applied."""
    obj = ctx.obj or {}
    return get_settings(**obj.get("overrides", {}))


def exit_with_error(exc: BaseException) -> NoReturn:
    """Print ``Error: <exc>`` on stderr and exit 1."""
    err_console.print(Text.assemble(("Error", "bold red"), f": {exc}"), soft_wrap=True)
    raise typer.Exit(code=1)


# ── Renderers ────────────────────────────────────────────────────────────


def render_anomaly_detectors(
    items: list[ThroughputAnomalyDetector],
    *,
    as_json: bool = False,
    stream: IO[str] | None = None,
) -> None:
    """Write TAD jobs as a table (header + one row each) or as JSON.

    An empty list still prints the header row.
    """
    out = Console(file=stream, width=_TABLE_WIDTH, highlight=False)

    if as_json:
        payload = {"items": [asdict(item) for item in items], "total": len(items)}
        out.print_json(json.dumps(payload, default=str))
        return

    table = Table(box=None, show_edge=False, pad_edge=False, header_style="bold")
    for column in TAD_COLUMNS:
        table.add_column(column, no_wrap=True)
    for item in items:
        table.add_row(
            Text(item.name),
            Text(item.spark_application),
            Text(item.state),
            Text(item.creation_time),
            Text(item.end_time),
        )
    out.print(table)


def print_settings(settings: TheiaSettings, *, as_json: bool = False) -> None:
    """Render settings as key/value pairs; the token is masked."""
    data: dict[str, Any] = settings.model_dump()
    if data.get("token"):
        data["token"] = "********"

    if as_json:
        console.print_json(json.dumps(data, default=str))
        return

    table = Table(title="Theia settings", show_lines=False, pad_edge=False)
    table.add_column("Setting")
    table.add_column("Value", overflow="fold")
    for key, value in data.items():
        table.add_row(key, Text("" if value is None else str(value)))
    console.print(table)
