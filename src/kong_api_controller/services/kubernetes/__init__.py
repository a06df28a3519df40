"""Kubernetes service layer - lookups over the resource store client."""

from kong_api_controller.services.kubernetes.base import K8sBaseManager
from kong_api_controller.services.kubernetes.lookup import SelectorLookup

__all__ = [
    "K8sBaseManager",
    "SelectorLookup",
]
