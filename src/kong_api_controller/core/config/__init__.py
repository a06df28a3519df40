"""Configuration management with Pydantic validation."""

from kong_api_controller.core.config.models import (
    DEFAULT_CONFIG_FILE,
    AppConfig,
    ConfigurationError,
    ControllerConfig,
    ResourceDefinitionsConfig,
    load_config,
)

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "AppConfig",
    "ConfigurationError",
    "ControllerConfig",
    "ResourceDefinitionsConfig",
    "load_config",
]
