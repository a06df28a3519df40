"""Route controller: keeps Kong API objects in line with route definitions.

Sources:
    - Services carrying the API label (ADDED, and before/after updates).
    - Route definitions (ADDED, DELETED, and before/after updates).

Every API object is named after the service that backs it.
"""

from __future__ import annotations

import builtins
from typing import TYPE_CHECKING, Any

from kong_api_controller.controllers.base import BaseController, Event
from kong_api_controller.controllers.events import EventType, ResourceEvent, ResourceUpdateEvent
from kong_api_controller.controllers.watcher import ResourceWatcher
from kong_api_controller.core.exceptions import (
    MissingSelectorError,
    ServiceHasNoPortsError,
)
from kong_api_controller.integrations.kong.exceptions import KongNotFoundError
from kong_api_controller.integrations.kong.models.api import KongAPI
from kong_api_controller.integrations.kubernetes.models import (
    SERVICE_KIND,
    RouteDefinition,
    ServiceResource,
)

if TYPE_CHECKING:
    from kong_api_controller.integrations.kubernetes.client import KubernetesClient


class RouteController(BaseController):
    """Create, update and delete Kong API objects.

    Example:
        >>> controller = RouteController(config.controller, kube_client, kong_client)
        >>> controller.start()
    """

    _name = "route"

    def _build_watchers(self, client: KubernetesClient) -> builtins.list[ResourceWatcher[Any]]:
        self._route_kind = self._config.resources.route_kind
        common: dict[str, Any] = {
            "outbox": self._inbox,
            "stop_event": self._stop,
            "selector": self._api_selector,
            "check_interval": self._config.check_interval,
            "emit_updates": True,
        }
        return [
            ResourceWatcher[ServiceResource](
                client, SERVICE_KIND, self._config.namespace, ServiceResource.from_k8s, **common
            ),
            ResourceWatcher[RouteDefinition](
                client, self._route_kind, self._config.namespace, RouteDefinition.from_k8s, **common
            ),
        ]

    def handle(self, event: Event) -> None:
        """Dispatch an event to its reconciliation."""
        if event.kind == SERVICE_KIND.kind:
            if isinstance(event, ResourceUpdateEvent):
                self.on_service_modified(event.old, event.new)
            elif event.type is EventType.ADDED:
                self.on_service_added(event.obj)
        elif event.kind == self._route_kind.kind:
            if isinstance(event, ResourceUpdateEvent):
                self.on_route_modified(event.old, event.new)
            elif isinstance(event, ResourceEvent) and event.type is EventType.ADDED:
                self.on_route_added(event.obj)
            elif isinstance(event, ResourceEvent) and event.type is EventType.DELETED:
                self.on_route_deleted(event.obj)

    # =========================================================================
    # Service Events
    # =========================================================================

    def on_service_added(self, service: ServiceResource) -> None:
        """Create the API object for a newly seen service.

        The service's API label names its route definition. Nothing happens
        if an API object with the service's name already exists.

        Raises:
            KubernetesNotFoundError: If the named route definition does not exist.
            ServiceHasNoPortsError: If the service has no address or port.
        """
        route_name = service.labels.get(self._config.api_label)
        if not route_name:
            return
        definition = self._lookup.get_route_definition(route_name)

        if self._apis.find(service.name) is not None:
            self._log.debug("api_exists", api=service.name)
            return
        self._apis.create(self._desired_api(service, definition))
        self._log.info("created_api", api=service.name, route=definition.name)

    def on_service_modified(self, old: ServiceResource, new: ServiceResource) -> None:
        """Point the API object at the service's new address, if it moved.

        Only ``upstream_url`` is changed; the API object must already exist.

        Raises:
            ServiceHasNoPortsError: If the new snapshot has no address or port.
            KongNotFoundError: If no API object exists for the service.
        """
        new_address = new.upstream_address()
        if new_address is None:
            raise ServiceHasNoPortsError(new.name)
        if old.upstream_address() == new_address:
            return

        api = self._apis.get(new.name)
        self._apis.set_upstream_url(api.id or api.name, new_address)
        self._log.info(
            "updated_upstream",
            api=new.name,
            old=old.upstream_address(),
            new=new_address,
        )

    # =========================================================================
    # Route Definition Events
    # =========================================================================

    def on_route_added(self, definition: RouteDefinition) -> None:
        """Create the API object for the service a definition selects.

        Raises:
            ServiceNotFoundError: If no service matches the selector.
            ServiceHasNoPortsError: If the service has no address or port.
        """
        value = definition.spec.selector.get(self._config.service_selector_label)
        if value is None:
            self._log.debug("route_without_selector", route=definition.name)
            return
        service = self._lookup.find_service(value)

        if self._apis.find(service.name) is not None:
            self._log.debug("api_exists", api=service.name)
            return
        self._apis.create(self._desired_api(service, definition))
        self._log.info("created_api", api=service.name, route=definition.name)

    def on_route_modified(self, old: RouteDefinition, new: RouteDefinition) -> None:
        """Rebuild the API object from the modified definition.

        The same backing service means a full replace of the existing API
        object. A different one means the old service's API object is removed
        (if present) and a new one is created for the new service.

        Raises:
            MissingSelectorError: If either snapshot lacks the selector key.
            ServiceNotFoundError: If no service matches the new selector.
            KongNotFoundError: If the API object to replace does not exist.
        """
        key = self._config.service_selector_label
        old_value = old.spec.selector.get(key)
        new_value = new.spec.selector.get(key)
        if old_value is None or new_value is None:
            raise MissingSelectorError("GatewayApi", new.name, key)

        service = self._lookup.find_service(new_value)
        desired = self._desired_api(service, new)

        if old_value == new_value:
            existing = self._apis.get(service.name)
            self._apis.replace(existing.id or existing.name, desired)
            self._log.info("replaced_api", api=service.name, route=new.name)
            return

        self._delete_api(old_value)
        self._apis.create(desired)
        self._log.info("moved_api", old_api=old_value, api=service.name, route=new.name)

    def on_route_deleted(self, definition: RouteDefinition) -> None:
        """Remove the API object a deleted definition selected.

        An API object that is already gone counts as success.
        """
        value = definition.spec.selector.get(self._config.service_selector_label)
        if value is None:
            return
        self._delete_api(value)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _delete_api(self, name: str) -> None:
        api = self._apis.find(name)
        if api is None:
            self._log.info("api_already_absent", api=name)
            return
        try:
            self._apis.delete(api.id or name)
        except KongNotFoundError:
            self._log.info("api_already_absent", api=name)
            return
        self._log.info("deleted_api", api=name)

    @staticmethod
    def _desired_api(service: ServiceResource, definition: RouteDefinition) -> KongAPI:
        """Build the API object a definition describes for a service.

        Only the first declared port of the service is used.
        """
        upstream = service.upstream_address()
        if upstream is None:
            raise ServiceHasNoPortsError(service.name)
        fields = definition.spec.model_dump(exclude={"selector"})
        return KongAPI(name=service.name, upstream_url=upstream, **fields)
