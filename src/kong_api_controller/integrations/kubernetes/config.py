"""Kubernetes integration configuration models."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class KubernetesConfig(BaseModel):
    """Kubernetes client configuration.

    With no ``kubeconfig`` the client tries the default kubeconfig location
    and then falls back to in-cluster service account credentials.
    """

    model_config = ConfigDict(extra="forbid")

    kubeconfig: str | None = None
    context: str | None = None
    retry_attempts: int = 3

    @field_validator("kubeconfig")
    @classmethod
    def validate_kubeconfig(cls, v: str | None) -> str | None:
        """Expand ~ in kubeconfig path."""
        return str(Path(v).expanduser()) if v else None

    @field_validator("retry_attempts")
    @classmethod
    def validate_retry_attempts(cls, v: int) -> int:
        """Validate retry_attempts is non-negative."""
        if v < 0:
            raise ValueError("retry_attempts must be non-negative")
        return v

    @classmethod
    def from_env(cls, base_config: dict[str, Any] | None = None) -> KubernetesConfig:
        """Create configuration with environment variable overrides.

        Supported environment variables:
            KAC_KUBECONFIG: Path to a kubeconfig file
            KAC_KUBE_CONTEXT: Kubeconfig context to use
        """
        config_dict = dict(base_config) if base_config else {}

        if kubeconfig := os.environ.get("KAC_KUBECONFIG"):
            config_dict["kubeconfig"] = kubeconfig

        if context := os.environ.get("KAC_KUBE_CONTEXT"):
            config_dict["context"] = context

        return cls.model_validate(config_dict)
