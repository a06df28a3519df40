"""Run command: start the controllers and block until signalled."""

from __future__ import annotations

import signal
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
import typer

from kong_api_controller.cli.commands._common import console, load_app_config
from kong_api_controller.controllers.manager import ControllerManager
from kong_api_controller.integrations.kong.client import KongAdminClient
from kong_api_controller.integrations.kubernetes.client import KubernetesClient
from kong_api_controller.integrations.kubernetes.exceptions import (
    KubernetesError,
    LabelSelectorError,
)

if TYPE_CHECKING:
    from types import FrameType

logger = structlog.get_logger()


def run(
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to the YAML configuration file.",
    ),
    namespace: str | None = typer.Option(
        None,
        "--namespace",
        "-n",
        help="Namespace to watch (overrides configuration).",
    ),
    kong_url: str | None = typer.Option(
        None,
        "--kong-url",
        help="Kong Admin API URL (overrides configuration).",
    ),
    kubeconfig: Path | None = typer.Option(
        None,
        "--kubeconfig",
        help="Path to a kubeconfig file (default: in-cluster or ~/.kube/config).",
    ),
) -> None:
    """Run the route and plugin controllers until SIGINT or SIGTERM."""
    config = load_app_config(config_path, namespace, kong_url, kubeconfig)

    try:
        kube_client = KubernetesClient(config.kubernetes)
    except KubernetesError as e:
        console.print(f"[red]Cannot configure Kubernetes client:[/red] {e}")
        raise typer.Exit(code=1) from e

    kong_client = KongAdminClient(config.kong.connection, config.kong.auth)
    try:
        try:
            manager = ControllerManager(config.controller, kong_client, kube_client)
        except LabelSelectorError as e:
            console.print(f"[red]Invalid label configuration:[/red] {e}")
            raise typer.Exit(code=1) from e

        def _handle_signal(signum: int, frame: FrameType | None) -> None:
            logger.info("shutdown_requested", signal=signal.Signals(signum).name)
            manager.request_stop()

        signal.signal(signal.SIGINT, _handle_signal)
        signal.signal(signal.SIGTERM, _handle_signal)

        logger.info(
            "controller_starting",
            namespace=config.controller.namespace,
            kong_url=config.kong.connection.base_url,
        )
        manager.start()
        manager.wait()
        if not manager.stop():
            logger.warning("shutdown_incomplete")
    finally:
        kong_client.close()
        kube_client.close()
    logger.info("controller_exited")
