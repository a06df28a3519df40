"""Helpers shared by the CLI commands."""

from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from kong_api_controller.core.config import AppConfig, ConfigurationError, load_config

console = Console(stderr=True)


def load_app_config(
    config_path: Path | None,
    namespace: str | None = None,
    kong_url: str | None = None,
    kubeconfig: Path | None = None,
) -> AppConfig:
    """Load configuration and apply command line overrides.

    Command line values win over environment variables, which win over the
    config file.

    Raises:
        typer.Exit: With code 1 if the configuration is invalid.
    """
    try:
        config = load_config(config_path)
        data = config.model_dump()
        if namespace:
            data["controller"]["namespace"] = namespace
        if kong_url:
            data["kong"]["connection"]["base_url"] = kong_url
        if kubeconfig:
            data["kubernetes"]["kubeconfig"] = str(kubeconfig)
        return AppConfig.model_validate(data)
    except (ConfigurationError, ValidationError) as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(code=1) from e
