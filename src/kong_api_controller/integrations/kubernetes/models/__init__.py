"""Typed Kubernetes resource models."""

from kong_api_controller.integrations.kubernetes.models.base import (
    SERVICE_KIND,
    K8sEntityBase,
    ResourceKind,
)
from kong_api_controller.integrations.kubernetes.models.definitions import (
    PluginDefinition,
    PluginDefinitionSpec,
    RouteDefinition,
    RouteDefinitionSpec,
)
from kong_api_controller.integrations.kubernetes.models.service import (
    ServicePort,
    ServiceResource,
)

__all__ = [
    "SERVICE_KIND",
    "K8sEntityBase",
    "PluginDefinition",
    "PluginDefinitionSpec",
    "ResourceKind",
    "RouteDefinition",
    "RouteDefinitionSpec",
    "ServicePort",
    "ServiceResource",
]
