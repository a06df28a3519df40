"""Kubernetes integration - API client, label selectors and resource models."""

from kong_api_controller.integrations.kubernetes.client import KubernetesClient, ResourceList
from kong_api_controller.integrations.kubernetes.config import KubernetesConfig
from kong_api_controller.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesGoneError,
    KubernetesNotFoundError,
    KubernetesValidationError,
    LabelSelectorError,
)
from kong_api_controller.integrations.kubernetes.selectors import LabelSelector, Requirement

__all__ = [
    "KubernetesAuthError",
    "KubernetesClient",
    "KubernetesConfig",
    "KubernetesConnectionError",
    "KubernetesError",
    "KubernetesGoneError",
    "KubernetesNotFoundError",
    "KubernetesValidationError",
    "LabelSelector",
    "LabelSelectorError",
    "Requirement",
    "ResourceList",
]
