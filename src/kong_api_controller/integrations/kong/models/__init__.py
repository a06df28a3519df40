"""Kong Admin API entity models."""

from kong_api_controller.integrations.kong.models.api import KongAPI
from kong_api_controller.integrations.kong.models.base import (
    KongEntityBase,
    PaginatedResponse,
)
from kong_api_controller.integrations.kong.models.plugin import KongPluginEntity
from kong_api_controller.integrations.kong.models.upstream import Target, Upstream

__all__ = [
    "KongAPI",
    "KongEntityBase",
    "KongPluginEntity",
    "PaginatedResponse",
    "Target",
    "Upstream",
]
