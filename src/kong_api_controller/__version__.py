"""Version information for kong_api_controller."""

__version__ = "0.3.0"
