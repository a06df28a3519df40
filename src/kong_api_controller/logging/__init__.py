"""Logging configuration for kong_api_controller."""

from kong_api_controller.logging.config import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
