"""Selector lookups against the resource store.

Resolves the single resource a definition points at: a backing service by
label value, a route definition by name, or the plugin definitions that
target a service.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError

from kong_api_controller.core.exceptions import ServiceNotFoundError
from kong_api_controller.integrations.kubernetes.models import (
    SERVICE_KIND,
    PluginDefinition,
    RouteDefinition,
    ServiceResource,
)
from kong_api_controller.integrations.kubernetes.selectors import LabelSelector, Requirement
from kong_api_controller.services.kubernetes.base import K8sBaseManager

if TYPE_CHECKING:
    from kong_api_controller.core.config import ControllerConfig
    from kong_api_controller.integrations.kubernetes.client import KubernetesClient


class SelectorLookup(K8sBaseManager):
    """Resolve services and definitions for the controllers.

    Example:
        >>> lookup = SelectorLookup(client, ControllerConfig())
        >>> service = lookup.find_service("auth")
        >>> service.upstream_address()
        '10.0.0.5:3000'
    """

    _entity_name = "lookup"

    def __init__(self, client: KubernetesClient, config: ControllerConfig) -> None:
        super().__init__(client, config.namespace)
        self._config = config
        self._route_kind = config.resources.route_kind
        self._plugin_kind = config.resources.plugin_kind

    def service_selector(self, value: str, *, require_api_label: bool = True) -> LabelSelector:
        """Build the selector matching services whose selector label equals ``value``.

        Raises:
            LabelSelectorError: If the label key or value is malformed.
        """
        selector = LabelSelector.of(Requirement.equals(self._config.service_selector_label, value))
        if require_api_label:
            selector = selector.add(Requirement.exists(self._config.api_label))
        return selector

    def find_service(self, value: str, *, require_api_label: bool = True) -> ServiceResource:
        """Resolve the backing service whose selector label equals ``value``.

        When several services match, the first one returned wins.

        Args:
            value: Label value to match.
            require_api_label: Also require the service to carry the API label.

        Returns:
            The matching service.

        Raises:
            ServiceNotFoundError: If no service matches.
            LabelSelectorError: If ``value`` is not a valid label value.
        """
        selector = self.service_selector(value, require_api_label=require_api_label)
        result = self._client.list_resources(SERVICE_KIND, self._namespace, selector)
        if not result.items:
            raise ServiceNotFoundError(str(selector), self._namespace)
        if len(result.items) > 1:
            self._log.warning(
                "multiple_services_matched", selector=str(selector), count=len(result.items)
            )
        service = ServiceResource.from_k8s(result.items[0])
        self._log.debug("resolved_service", selector=str(selector), service=service.name)
        return service

    def get_route_definition(self, name: str) -> RouteDefinition:
        """Get a route definition by name.

        Raises:
            KubernetesNotFoundError: If it does not exist.
        """
        return RouteDefinition.from_k8s(
            self._client.get_resource(self._route_kind, self._namespace, name)
        )

    def find_plugin_definitions(self, service_name: str) -> list[PluginDefinition]:
        """List the plugin definitions whose selector names ``service_name``.

        Definitions that cannot be decoded are skipped with a warning.
        """
        result = self._client.list_resources(self._plugin_kind, self._namespace)
        key = self._config.plugin_service_selector_label
        definitions: list[PluginDefinition] = []
        for item in result.items:
            try:
                definition = PluginDefinition.from_k8s(item)
            except (ValidationError, ValueError) as e:
                self._log.warning("skipped_plugin_definition", error=str(e))
                continue
            if definition.spec.selector.get(key) == service_name:
                definitions.append(definition)
        self._log.debug(
            "resolved_plugin_definitions", service=service_name, count=len(definitions)
        )
        return definitions
