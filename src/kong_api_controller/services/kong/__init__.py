"""Kong Gateway service layer - entity managers over the Admin API client.

Managers use the Repository pattern to keep HTTP details out of the
controllers that decide what the gateway should look like.
"""

from kong_api_controller.services.kong.api_manager import APIManager
from kong_api_controller.services.kong.base import BaseEntityManager
from kong_api_controller.services.kong.plugin_manager import APIPluginManager
from kong_api_controller.services.kong.upstream_manager import UpstreamManager

__all__ = [
    "APIManager",
    "APIPluginManager",
    "BaseEntityManager",
    "UpstreamManager",
]
