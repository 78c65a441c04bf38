"""
CLI: ``theia anomaly-detection`` — throughput anomaly detection jobs.
"""

from __future__ import annotations

from functools import partial

import typer

from theia.cli.utils import exit_with_error, render_anomaly_detectors, settings_from_context
from theia.core.errors import TheiaError

app = typer.Typer(no_args_is_help=True)


@app.command("list")
def list_jobs(
    ctx: typer.Context,
    use_cluster_ip: bool = typer.Option(
        False,
        "--use-cluster-ip",
        help="Reach the Theia manager through its Service ClusterIP instead of a port-forward.",
    ),
    json_out: bool = typer.Option(False, "--json", help="Print JSON instead of a table."),
) -> None:
    """List all anomaly detection jobs."""
    from theia.connection.client import setup_theia_client_and_connection
    from theia.ops.anomaly_detection import anomaly_detection_list

    obj = ctx.obj or {}
    provider = obj.get("provider", setup_theia_client_and_connection)

    try:
        settings = settings_from_context(ctx)
        anomaly_detection_list(
            settings,
            use_cluster_ip=use_cluster_ip,
            provider=provider,
            render=partial(render_anomaly_detectors, as_json=json_out),
        )
    except TheiaError as exc:
        exit_with_error(exc)
