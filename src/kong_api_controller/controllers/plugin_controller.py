"""Plugin controller: keeps plugins attached to Kong API objects.

Sources:
    - Services carrying the API label (ADDED and MODIFIED).
    - Plugin definitions (ADDED, MODIFIED and DELETED).

Plugins are keyed by name: an API object carries at most one plugin of a
given name. Unlike route deletion, every path here requires the API object
to exist and reports an error when it does not.
"""

from __future__ import annotations

import builtins
from typing import TYPE_CHECKING, Any

from kong_api_controller.controllers.base import BaseController, Event
from kong_api_controller.controllers.events import EventType, ResourceEvent
from kong_api_controller.controllers.watcher import ResourceWatcher
from kong_api_controller.core.exceptions import MissingSelectorError
from kong_api_controller.integrations.kong.models.plugin import KongPluginEntity
from kong_api_controller.integrations.kubernetes.models import (
    SERVICE_KIND,
    PluginDefinition,
    ServiceResource,
)
from kong_api_controller.services.kong.plugin_manager import APIPluginManager

if TYPE_CHECKING:
    import threading

    from kong_api_controller.core.config import ControllerConfig
    from kong_api_controller.integrations.kong.client import KongAdminClient
    from kong_api_controller.integrations.kubernetes.client import KubernetesClient


class PluginController(BaseController):
    """Attach, update and detach plugins on Kong API objects."""

    _name = "plugin"

    def __init__(
        self,
        config: ControllerConfig,
        kube_client: KubernetesClient,
        kong_client: KongAdminClient,
        stop_event: threading.Event | None = None,
    ) -> None:
        super().__init__(config, kube_client, kong_client, stop_event)
        self._plugins = APIPluginManager(kong_client)

    def _build_watchers(self, client: KubernetesClient) -> builtins.list[ResourceWatcher[Any]]:
        self._plugin_kind = self._config.resources.plugin_kind
        common: dict[str, Any] = {
            "outbox": self._inbox,
            "stop_event": self._stop,
            "check_interval": self._config.check_interval,
        }
        return [
            ResourceWatcher[ServiceResource](
                client,
                SERVICE_KIND,
                self._config.namespace,
                ServiceResource.from_k8s,
                selector=self._api_selector,
                **common,
            ),
            ResourceWatcher[PluginDefinition](
                client,
                self._plugin_kind,
                self._config.namespace,
                PluginDefinition.from_k8s,
                **common,
            ),
        ]

    def handle(self, event: Event) -> None:
        """Dispatch an event to its reconciliation."""
        if not isinstance(event, ResourceEvent):
            return
        if event.kind == SERVICE_KIND.kind:
            if event.type in (EventType.ADDED, EventType.MODIFIED):
                self.on_service_changed(event.obj)
        elif event.kind == self._plugin_kind.kind:
            if event.type is EventType.ADDED:
                self.on_plugin_added(event.obj)
            elif event.type is EventType.MODIFIED:
                self.on_plugin_modified(event.obj)
            elif event.type is EventType.DELETED:
                self.on_plugin_deleted(event.obj)

    def on_service_changed(self, service: ServiceResource) -> None:
        """Attach every plugin defined for a service that is not attached yet.

        Raises:
            KongNotFoundError: If plugins are defined but the service has no
                API object yet.
        """
        definitions = self._lookup.find_plugin_definitions(service.name)
        if not definitions:
            return
        api = self._apis.get(service.name)
        for definition in definitions:
            self._attach(api.name, definition)

    def on_plugin_added(self, definition: PluginDefinition) -> None:
        """Attach a plugin unless one of the same name is already attached.

        Raises:
            MissingSelectorError: If the definition names no service.
            KongNotFoundError: If the named service has no API object.
        """
        api_name = self._resolve_api(definition)
        self._attach(api_name, definition)

    def on_plugin_modified(self, definition: PluginDefinition) -> None:
        """Update an attached plugin; never attaches a missing one."""
        api_name = self._resolve_api(definition)
        plugin = self._desired_plugin(definition)
        if not self._plugins.has_plugin(api_name, plugin.name):
            self._log.debug("plugin_not_attached", api=api_name, plugin=plugin.name)
            return
        self._plugins.update_by_name(api_name, plugin)
        self._log.info("updated_plugin", api=api_name, plugin=plugin.name)

    def on_plugin_deleted(self, definition: PluginDefinition) -> None:
        """Detach a plugin if it is attached."""
        api_name = self._resolve_api(definition)
        if not self._plugins.has_plugin(api_name, definition.spec.name):
            self._log.debug("plugin_not_attached", api=api_name, plugin=definition.spec.name)
            return
        self._plugins.remove_by_name(api_name, definition.spec.name)
        self._log.info("detached_plugin", api=api_name, plugin=definition.spec.name)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _resolve_api(self, definition: PluginDefinition) -> str:
        """Return the name of the API object for the service the definition names.

        The service itself is not read: its API object outlives it, and a
        plugin must still be detachable after the service is gone.
        """
        key = self._config.plugin_service_selector_label
        service_name = definition.spec.selector.get(key)
        if service_name is None:
            raise MissingSelectorError("ApiPlugin", definition.name, key)
        return self._apis.get(service_name).name

    def _attach(self, api_name: str, definition: PluginDefinition) -> None:
        plugin = self._desired_plugin(definition)
        if self._plugins.has_plugin(api_name, plugin.name):
            self._log.debug("plugin_attached", api=api_name, plugin=plugin.name)
            return
        self._plugins.add(api_name, plugin)
        self._log.info("attached_plugin", api=api_name, plugin=plugin.name)

    @staticmethod
    def _desired_plugin(definition: PluginDefinition) -> KongPluginEntity:
        return KongPluginEntity(name=definition.spec.name, config=definition.spec.config)
