"""Application configuration models.

Configuration is read from an optional YAML file and then overridden by
``KAC_*`` environment variables. The controller section is handed to each
controller's constructor; nothing reads it from module state.

Example config.yaml:

    controller:
      namespace: gateway
      api_label: kong.api
      service_selector_label: kong.api.service
      plugin_service_selector_label: kong.plugin.service
      check_interval: 5
    kong:
      connection:
        base_url: http://kong-admin:8001
    kubernetes:
      context: production
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from kong_api_controller.integrations.kong.config import KongConfig
from kong_api_controller.integrations.kubernetes.config import KubernetesConfig
from kong_api_controller.integrations.kubernetes.models.base import ResourceKind

logger = structlog.get_logger()

DEFAULT_CONFIG_FILE = Path.home() / ".config" / "kong-api-controller" / "config.yaml"


class ConfigurationError(Exception):
    """Raised when configuration cannot be read or is invalid."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"{self.message} ({self.path})"
        return self.message


class ResourceDefinitionsConfig(BaseModel):
    """Where the route and plugin definition custom resources are served."""

    model_config = ConfigDict(extra="forbid")

    group: str = "gateway.k8s-kong-api.io"
    version: str = "v1"
    route_plural: str = "gatewayapis"
    plugin_plural: str = "apiplugins"

    @property
    def route_kind(self) -> ResourceKind:
        return ResourceKind(
            kind="GatewayApi", plural=self.route_plural, group=self.group, version=self.version
        )

    @property
    def plugin_kind(self) -> ResourceKind:
        return ResourceKind(
            kind="ApiPlugin", plural=self.plugin_plural, group=self.group, version=self.version
        )


class ControllerConfig(BaseModel):
    """Settings shared by both controllers.

    Attributes:
        namespace: Namespace every watch and lookup is scoped to.
        api_label: Service label marking it as exposed; its value names the
            route definition for the service.
        service_selector_label: Key in a route definition's selector whose
            value is matched against the services' ``service_selector_label``.
        plugin_service_selector_label: Key in a plugin definition's selector
            naming the backing service.
        check_interval: Seconds between cancellation checks; also the
            server-side timeout of each watch subscription.
        resources: Custom resource coordinates of the definition kinds.
    """

    model_config = ConfigDict(extra="forbid")

    namespace: str = "default"
    api_label: str = "kong.api"
    service_selector_label: str = "kong.api.service"
    plugin_service_selector_label: str = "kong.plugin.service"
    check_interval: int = Field(default=5, description="Cancellation check interval (seconds)")
    resources: ResourceDefinitionsConfig = ResourceDefinitionsConfig()

    @field_validator(
        "namespace", "api_label", "service_selector_label", "plugin_service_selector_label"
    )
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        """Reject empty names; label syntax is checked when selectors are built."""
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("check_interval")
    @classmethod
    def validate_check_interval(cls, v: int) -> int:
        """Validate check interval is positive."""
        if v < 1:
            raise ValueError("check_interval must be at least 1 second")
        return v

    @classmethod
    def from_env(cls, base_config: dict[str, Any] | None = None) -> ControllerConfig:
        """Create configuration with environment variable overrides.

        Supported environment variables:
            KAC_NAMESPACE: Namespace to watch
            KAC_API_LABEL: Service label naming the route definition
            KAC_SERVICE_SELECTOR_LABEL: Route definition selector key
            KAC_PLUGIN_SERVICE_SELECTOR_LABEL: Plugin definition selector key
            KAC_CHECK_INTERVAL: Cancellation check interval in seconds
        """
        config_dict = dict(base_config) if base_config else {}

        env_map = {
            "KAC_NAMESPACE": "namespace",
            "KAC_API_LABEL": "api_label",
            "KAC_SERVICE_SELECTOR_LABEL": "service_selector_label",
            "KAC_PLUGIN_SERVICE_SELECTOR_LABEL": "plugin_service_selector_label",
            "KAC_CHECK_INTERVAL": "check_interval",
        }
        for env_var, field_name in env_map.items():
            if value := os.environ.get(env_var):
                config_dict[field_name] = value

        return cls.model_validate(config_dict)


class AppConfig(BaseModel):
    """Complete process configuration."""

    model_config = ConfigDict(extra="forbid")

    controller: ControllerConfig = ControllerConfig()
    kong: KongConfig = KongConfig()
    kubernetes: KubernetesConfig = KubernetesConfig()

    @classmethod
    def from_env(cls, base_config: dict[str, Any] | None = None) -> AppConfig:
        """Build the configuration, letting ``KAC_*`` variables override the file."""
        data = dict(base_config) if base_config else {}
        return cls.model_validate(
            {
                **data,
                "controller": ControllerConfig.from_env(data.get("controller")),
                "kong": KongConfig.from_env(data.get("kong")),
                "kubernetes": KubernetesConfig.from_env(data.get("kubernetes")),
            }
        )

    def to_yaml(self) -> str:
        """Serialize configuration to YAML string."""
        return yaml.safe_dump(
            self.model_dump(mode="json"), default_flow_style=False, sort_keys=False
        )


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file plus environment overrides.

    A missing file at the default location is not an error; a missing file
    that was asked for explicitly is.

    Args:
        path: Config file path, or None for the default location.

    Returns:
        Validated application configuration.

    Raises:
        ConfigurationError: If the file cannot be read, is not valid YAML,
            or fails validation.
    """
    config_path = path or DEFAULT_CONFIG_FILE
    data: dict[str, Any] = {}

    if config_path.exists():
        logger.debug("loading_config", path=str(config_path))
        try:
            loaded = yaml.safe_load(config_path.read_text())
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot read configuration: {e}", config_path) from e
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigurationError("Configuration must be a mapping", config_path)
        data = loaded or {}
    elif path is not None:
        raise ConfigurationError("Configuration file not found", config_path)

    try:
        config = AppConfig.from_env(data)
    except (ValidationError, TypeError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}", config_path) from e

    logger.debug("config_loaded", namespace=config.controller.namespace)
    return config
