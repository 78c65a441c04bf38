"""
CLI: ``theia config`` — configuration inspection.
"""

from __future__ import annotations

import typer

from theia.cli.utils import print_settings, settings_from_context

app = typer.Typer(no_args_is_help=True)


@app.command("show")
def show_config(
    ctx: typer.Context,
    json_out: bool = typer.Option(False, "--json", help="Print JSON instead of a table."),
) -> None:
    """Show the effective configuration."""
    print_settings(settings_from_context(ctx), as_json=json_out)
