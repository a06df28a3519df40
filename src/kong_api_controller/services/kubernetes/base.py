"""Base manager for Kubernetes service managers.

Provides shared infrastructure for Kubernetes-backed managers: client
access, namespace resolution and structured logging.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from kong_api_controller.integrations.kubernetes.client import KubernetesClient

logger = structlog.get_logger()


class K8sBaseManager:
    """Base class for Kubernetes service managers.

    Subclasses set ``_entity_name`` for structured log context.

    Example:
        >>> class DefinitionLookup(K8sBaseManager):
        ...     _entity_name = "definition"
    """

    _entity_name: str = ""

    def __init__(self, client: KubernetesClient, namespace: str) -> None:
        """Initialize the manager.

        Args:
            client: Kubernetes API client instance.
            namespace: Namespace every call is scoped to.
        """
        self._client = client
        self._namespace = namespace
        self._log = logger.bind(entity=self._entity_name, namespace=namespace)

    @property
    def namespace(self) -> str:
        return self._namespace
