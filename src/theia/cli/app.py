"""
Root Typer application for the Theia CLI.

Global options (``--kubeconfig``, ``--context``, ``--verbose``) are stored on
``ctx.obj["overrides"]`` and applied to settings by every sub-command.
Callers may pre-seed ``ctx.obj["provider"]`` (e.g. ``CliRunner.invoke(...,
obj=...)``) to substitute the connection provider.
"""

from __future__ import annotations

import typer
from typer import Typer

from theia.cli.utils import exit_with_error
from theia.core.config import get_settings
from theia.core.logging import configure_logging

app = Typer(
    name="theia",
    help="theia — command-line client for Theia network flow visibility.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("theia-cli")
        except PackageNotFoundError:
            from theia import __version__ as v
        typer.echo(f"theia {v}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    kubeconfig: str | None = typer.Option(  # noqa: UP007
        None,
        "--kubeconfig",
        "-k",
        help="Path to the kubeconfig file (default loading rules if unset).",
    ),
    context: str | None = typer.Option(None, "--context", help="kubeconfig context to use."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging on stderr."),
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """theia CLI — inspect Theia intelligence jobs."""
    obj = ctx.ensure_object(dict)
    obj["overrides"] = {"kubeconfig": kubeconfig, "context": context}

    try:
        settings = get_settings(**obj["overrides"])
    except ValueError as exc:
        exit_with_error(exc)

    configure_logging(
        level="DEBUG" if verbose else settings.log_level,
        json_format=settings.log_format == "json",
    )


# ── Sub-command registration ─────────────────────────────────────────────

from theia.cli.anomaly_detection import app as ad_app  # noqa: E402
from theia.cli.config import app as config_app  # noqa: E402

app.add_typer(ad_app, name="anomaly-detection", help="Throughput anomaly detection jobs.")
app.add_typer(ad_app, name="tad", help="Alias of anomaly-detection.", hidden=True)
app.add_typer(config_app, name="config", help="Configuration inspection.")
