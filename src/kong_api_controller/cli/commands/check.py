"""Check command: report connectivity to Kong and Kubernetes."""

from __future__ import annotations

from pathlib import Path

import structlog
import typer
from rich.console import Console
from rich.table import Table

from kong_api_controller.cli.commands._common import load_app_config
from kong_api_controller.integrations.kong.client import KongAdminClient
from kong_api_controller.integrations.kubernetes.client import KubernetesClient
from kong_api_controller.integrations.kubernetes.exceptions import KubernetesError

console = Console()
logger = structlog.get_logger()


def check(
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to the YAML configuration file.",
    ),
    kong_url: str | None = typer.Option(
        None,
        "--kong-url",
        help="Kong Admin API URL (overrides configuration).",
    ),
    kubeconfig: Path | None = typer.Option(
        None,
        "--kubeconfig",
        help="Path to a kubeconfig file.",
    ),
) -> None:
    """Check that both the Kong Admin API and the cluster are reachable."""
    config = load_app_config(config_path, kong_url=kong_url, kubeconfig=kubeconfig)
    logger.info("Checking connectivity")

    table = Table(title="Connectivity")
    table.add_column("Component", style="cyan", no_wrap=True)
    table.add_column("Status")
    table.add_column("Details", style="dim")

    with KongAdminClient(config.kong.connection, config.kong.auth) as kong_client:
        kong_ok = kong_client.check_connection()
    table.add_row(
        "Kong Admin API",
        "[green]ok[/green]" if kong_ok else "[red]unreachable[/red]",
        config.kong.connection.base_url,
    )

    try:
        with KubernetesClient(config.kubernetes) as kube_client:
            kube_ok = kube_client.check_connection()
            kube_details = kube_client.get_current_context()
    except KubernetesError as e:
        kube_ok = False
        kube_details = str(e)
    table.add_row(
        "Kubernetes",
        "[green]ok[/green]" if kube_ok else "[red]unreachable[/red]",
        kube_details,
    )

    console.print(table)
    if not (kong_ok and kube_ok):
        raise typer.Exit(code=1)
