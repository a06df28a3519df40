"""Plugin manager for plugins attached to Kong API objects.

Kong addresses API-scoped plugins by ID only, so every name-based operation
here first lists the API's plugins to resolve the ID.
"""

from __future__ import annotations

import builtins
from typing import Any

from kong_api_controller.integrations.kong.exceptions import KongNotFoundError
from kong_api_controller.integrations.kong.models.base import PaginatedResponse
from kong_api_controller.integrations.kong.models.plugin import KongPluginEntity
from kong_api_controller.services.kong.base import BaseEntityManager


class APIPluginManager(BaseEntityManager[KongPluginEntity]):
    """Manager for Kong Plugin entities scoped to API objects.

    Note: Named APIPluginManager to avoid confusion with the PluginController,
    which decides *when* plugins are attached.

    Example:
        >>> manager = APIPluginManager(client)
        >>> if not manager.has_plugin("myapp-auth", "key-auth"):
        ...     manager.add("myapp-auth", KongPluginEntity(name="key-auth"))
    """

    _endpoint = "plugins"
    _entity_name = "plugin"
    _model_class = KongPluginEntity

    @staticmethod
    def _api_plugins_endpoint(api_name: str) -> str:
        return f"apis/{api_name}/plugins"

    def list_for_api(self, api_name: str) -> builtins.list[KongPluginEntity]:
        """List every plugin attached to an API object.

        Args:
            api_name: API name or ID.

        Returns:
            List of plugin entities, following pagination to the end.

        Raises:
            KongNotFoundError: If the API does not exist.
        """
        self._log.debug("listing_api_plugins", api=api_name)
        plugins: builtins.list[KongPluginEntity] = []
        params: dict[str, Any] = {}
        while True:
            page = PaginatedResponse.model_validate(
                self._client.get(self._api_plugins_endpoint(api_name), params=params)
            )
            plugins.extend(self._model_class.model_validate(p) for p in page.data)
            if not page.offset:
                break
            params = {"offset": page.offset}
        self._log.debug("listed_api_plugins", api=api_name, count=len(plugins))
        return plugins

    def find_by_name(self, api_name: str, plugin_name: str) -> KongPluginEntity | None:
        """Find the plugin of a given name attached to an API.

        Args:
            api_name: API name or ID.
            plugin_name: Plugin name (e.g., 'key-auth').

        Returns:
            The first attached plugin with that name, or None.
        """
        for plugin in self.list_for_api(api_name):
            if plugin.name == plugin_name:
                return plugin
        return None

    def has_plugin(self, api_name: str, plugin_name: str) -> bool:
        """Check whether an API already has a plugin of the given name."""
        return self.find_by_name(api_name, plugin_name) is not None

    def add(self, api_name: str, plugin: KongPluginEntity) -> KongPluginEntity:
        """Attach a plugin to an API object.

        Args:
            api_name: API name or ID.
            plugin: Plugin to attach (name and config).

        Returns:
            The created plugin entity.
        """
        payload = plugin.to_create_payload()
        self._log.info("adding_plugin", api=api_name, name=plugin.name)
        response = self._client.post(self._api_plugins_endpoint(api_name), json=payload)
        created = self._model_class.model_validate(response)
        self._log.info("added_plugin", api=api_name, id=created.id, name=created.name)
        return created

    def update_by_name(self, api_name: str, plugin: KongPluginEntity) -> KongPluginEntity:
        """Update the configuration of an attached plugin, keyed by name.

        Args:
            api_name: API name or ID.
            plugin: Desired plugin state; ``plugin.name`` selects the target.

        Returns:
            The updated plugin entity.

        Raises:
            KongNotFoundError: If the API or the named plugin does not exist.
        """
        existing = self._require(api_name, plugin.name)
        payload = plugin.to_update_payload()
        self._log.info("updating_plugin", api=api_name, id=existing.id, name=plugin.name)
        response = self._client.patch(
            f"{self._api_plugins_endpoint(api_name)}/{existing.id}", json=payload
        )
        updated = self._model_class.model_validate(response)
        self._log.info("updated_plugin", api=api_name, id=updated.id, name=updated.name)
        return updated

    def remove_by_name(self, api_name: str, plugin_name: str) -> None:
        """Detach a plugin from an API object, keyed by name.

        Args:
            api_name: API name or ID.
            plugin_name: Plugin name.

        Raises:
            KongNotFoundError: If the API or the named plugin does not exist.
        """
        existing = self._require(api_name, plugin_name)
        self._log.info("removing_plugin", api=api_name, id=existing.id, name=plugin_name)
        self._client.delete(f"{self._api_plugins_endpoint(api_name)}/{existing.id}")
        self._log.info("removed_plugin", api=api_name, name=plugin_name)

    def _require(self, api_name: str, plugin_name: str) -> KongPluginEntity:
        plugin = self.find_by_name(api_name, plugin_name)
        if plugin is None or not plugin.id:
            raise KongNotFoundError(
                resource_type="plugin",
                resource_id=f"{api_name}/{plugin_name}",
            )
        return plugin
