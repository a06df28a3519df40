"""Unit tests for PluginController against an in-memory gateway."""

from __future__ import annotations

from typing import Any

import pytest

from kong_api_controller.controllers.events import EventType, ResourceEvent, ResourceUpdateEvent
from kong_api_controller.controllers.plugin_controller import PluginController
from kong_api_controller.core.config import ControllerConfig
from kong_api_controller.core.exceptions import MissingSelectorError
from kong_api_controller.integrations.kong.exceptions import KongNotFoundError
from kong_api_controller.integrations.kubernetes.models import PluginDefinition, ServiceResource

PLUGIN_LABEL = "kong.plugin.service"


def plugin_event(event_type: EventType, raw: dict[str, Any]) -> ResourceEvent[PluginDefinition]:
    return ResourceEvent(event_type, "ApiPlugin", PluginDefinition.from_k8s(raw))


def service_event(event_type: EventType, raw: dict[str, Any]) -> ResourceEvent[ServiceResource]:
    return ResourceEvent(event_type, "Service", ServiceResource.from_k8s(raw))


@pytest.fixture
def controller(
    controller_config: ControllerConfig, kube: Any, kong_admin: Any
) -> PluginController:
    """Create a PluginController wired to the in-memory fakes (not started)."""
    return PluginController(controller_config, kube, kong_admin)


@pytest.fixture
def auth_service(kube: Any) -> dict[str, Any]:
    """The myapp-auth service, labelled for the gateway."""
    return kube.add_service("myapp-auth", **{"kong.api": "auth-route"})


@pytest.fixture
def auth_api(kong_admin: Any) -> dict[str, Any]:
    """An existing API object for myapp-auth."""
    return kong_admin.post("apis", json={"name": "myapp-auth", "upstream_url": "10.0.0.5:3000"})


@pytest.fixture
def key_auth(kube: Any) -> dict[str, Any]:
    """A key-auth plugin definition for myapp-auth."""
    return kube.add_plugin(
        "auth-key", "key-auth", {PLUGIN_LABEL: "myapp-auth"}, {"hide_credentials": True}
    )


def attached(kong_admin: Any, api: str) -> list[tuple[str, dict[str, Any]]]:
    return [(p["name"], p["config"]) for p in kong_admin.plugins.get(api, [])]


@pytest.mark.unit
class TestWatchers:
    """Tests for watcher wiring."""

    def test_watch_sources(self, controller: PluginController) -> None:
        """Services are filtered on the API label; plugin definitions are not filtered."""
        services, plugins = controller.watchers

        assert services.kind.kind == "Service"
        assert str(services._selector) == "kong.api"
        assert plugins.kind.kind == "ApiPlugin"
        assert plugins._selector is None
        assert not services._emit_updates
        assert not plugins._emit_updates


@pytest.mark.unit
class TestPluginDefinitionAdded:
    """Tests for plugin definition ADDED events."""

    def test_attaches_plugin(
        self,
        controller: PluginController,
        kong_admin: Any,
        auth_service: dict[str, Any],
        auth_api: dict[str, Any],
        key_auth: dict[str, Any],
    ) -> None:
        """The plugin is attached with its configuration."""
        controller.handle(plugin_event(EventType.ADDED, key_auth))

        assert attached(kong_admin, "myapp-auth") == [("key-auth", {"hide_credentials": True})]

    def test_readding_is_noop(
        self,
        controller: PluginController,
        kong_admin: Any,
        auth_service: dict[str, Any],
        auth_api: dict[str, Any],
        key_auth: dict[str, Any],
    ) -> None:
        """A second identical ADDED event attaches nothing more."""
        controller.handle(plugin_event(EventType.ADDED, key_auth))
        before = len(kong_admin.mutations())

        controller.handle(plugin_event(EventType.ADDED, key_auth))

        assert len(kong_admin.plugins["myapp-auth"]) == 1
        assert len(kong_admin.mutations()) == before

    def test_missing_api_is_error(
        self,
        controller: PluginController,
        auth_service: dict[str, Any],
        key_auth: dict[str, Any],
    ) -> None:
        """Plugins cannot be attached before the API object exists."""
        with pytest.raises(KongNotFoundError):
            controller.handle(plugin_event(EventType.ADDED, key_auth))

    def test_resolves_api_by_selector_value(
        self,
        controller: PluginController,
        kong_admin: Any,
        auth_api: dict[str, Any],
        key_auth: dict[str, Any],
    ) -> None:
        """Only the API object is consulted, not the service."""
        controller.handle(plugin_event(EventType.ADDED, key_auth))

        assert attached(kong_admin, "myapp-auth") == [("key-auth", {"hide_credentials": True})]

    def test_missing_selector_is_error(self, controller: PluginController, kube: Any) -> None:
        """A definition naming no service cannot be resolved."""
        raw = kube.add_plugin("loose", "cors", {})

        with pytest.raises(MissingSelectorError):
            controller.handle(plugin_event(EventType.ADDED, raw))


@pytest.mark.unit
class TestPluginDefinitionModified:
    """Tests for plugin definition MODIFIED events."""

    def test_updates_attached_plugin(
        self,
        controller: PluginController,
        kube: Any,
        kong_admin: Any,
        auth_service: dict[str, Any],
        auth_api: dict[str, Any],
        key_auth: dict[str, Any],
    ) -> None:
        """The attached plugin's configuration is updated in place."""
        controller.handle(plugin_event(EventType.ADDED, key_auth))
        plugin_id = kong_admin.plugins["myapp-auth"][0]["id"]
        changed = kube.add_plugin(
            "auth-key", "key-auth", {PLUGIN_LABEL: "myapp-auth"}, {"hide_credentials": False}
        )

        controller.handle(plugin_event(EventType.MODIFIED, changed))

        method, endpoint, _ = kong_admin.mutations()[-1]
        assert (method, endpoint) == ("PATCH", f"apis/myapp-auth/plugins/{plugin_id}")
        assert attached(kong_admin, "myapp-auth") == [("key-auth", {"hide_credentials": False})]

    def test_never_attaches_missing_plugin(
        self,
        controller: PluginController,
        kong_admin: Any,
        auth_service: dict[str, Any],
        auth_api: dict[str, Any],
        key_auth: dict[str, Any],
    ) -> None:
        """Modification of a plugin that is not attached does nothing."""
        controller.handle(plugin_event(EventType.MODIFIED, key_auth))

        assert kong_admin.plugins["myapp-auth"] == []


@pytest.mark.unit
class TestPluginDefinitionDeleted:
    """Tests for plugin definition DELETED events."""

    def test_detaches_plugin(
        self,
        controller: PluginController,
        kong_admin: Any,
        auth_service: dict[str, Any],
        auth_api: dict[str, Any],
        key_auth: dict[str, Any],
    ) -> None:
        """The attached plugin is removed."""
        controller.handle(plugin_event(EventType.ADDED, key_auth))

        controller.handle(plugin_event(EventType.DELETED, key_auth))

        assert kong_admin.plugins["myapp-auth"] == []

    def test_not_attached_is_noop(
        self,
        controller: PluginController,
        kong_admin: Any,
        auth_service: dict[str, Any],
        auth_api: dict[str, Any],
        key_auth: dict[str, Any],
    ) -> None:
        """Deleting a definition whose plugin is absent changes nothing."""
        before = len(kong_admin.mutations())

        controller.handle(plugin_event(EventType.DELETED, key_auth))

        assert len(kong_admin.mutations()) == before

    def test_detaches_after_service_removed(
        self,
        controller: PluginController,
        kube: Any,
        kong_admin: Any,
        auth_service: dict[str, Any],
        auth_api: dict[str, Any],
        key_auth: dict[str, Any],
    ) -> None:
        """The plugin is still detached once its service has left the store."""
        controller.handle(plugin_event(EventType.ADDED, key_auth))
        kube.remove("Service", "myapp-auth")

        controller.handle(plugin_event(EventType.DELETED, key_auth))

        assert kong_admin.plugins["myapp-auth"] == []

    def test_missing_api_is_error(
        self,
        controller: PluginController,
        auth_service: dict[str, Any],
        key_auth: dict[str, Any],
    ) -> None:
        """Unlike route deletion, a missing API object is reported."""
        with pytest.raises(KongNotFoundError):
            controller.handle(plugin_event(EventType.DELETED, key_auth))


@pytest.mark.unit
class TestServiceEvents:
    """Tests for service ADDED/MODIFIED events."""

    def test_attaches_every_defined_plugin(
        self,
        controller: PluginController,
        kube: Any,
        kong_admin: Any,
        auth_service: dict[str, Any],
        auth_api: dict[str, Any],
        key_auth: dict[str, Any],
    ) -> None:
        """All definitions naming the service are attached, others ignored."""
        kube.add_plugin("auth-cors", "cors", {PLUGIN_LABEL: "myapp-auth"})
        kube.add_plugin("other-cors", "cors", {PLUGIN_LABEL: "other"})

        controller.handle(service_event(EventType.ADDED, auth_service))

        assert [name for name, _ in attached(kong_admin, "myapp-auth")] == ["key-auth", "cors"]

    def test_modified_attaches_missing_only(
        self,
        controller: PluginController,
        kong_admin: Any,
        auth_service: dict[str, Any],
        auth_api: dict[str, Any],
        key_auth: dict[str, Any],
    ) -> None:
        """Plugins already attached are left alone."""
        controller.handle(service_event(EventType.ADDED, auth_service))

        controller.handle(service_event(EventType.MODIFIED, auth_service))

        assert len(kong_admin.plugins["myapp-auth"]) == 1

    def test_no_definitions_needs_no_api(
        self, controller: PluginController, kong_admin: Any, auth_service: dict[str, Any]
    ) -> None:
        """A service without plugin definitions touches nothing."""
        controller.handle(service_event(EventType.ADDED, auth_service))

        assert kong_admin.calls == []

    def test_definitions_without_api_is_error(
        self, controller: PluginController, auth_service: dict[str, Any], key_auth: dict[str, Any]
    ) -> None:
        """Plugins defined before the API object exists are reported."""
        with pytest.raises(KongNotFoundError):
            controller.handle(service_event(EventType.ADDED, auth_service))

    def test_deleted_service_and_update_events_ignored(
        self, controller: PluginController, kong_admin: Any, auth_service: dict[str, Any]
    ) -> None:
        """Only ADDED and MODIFIED service events are handled."""
        snapshot = ServiceResource.from_k8s(auth_service)

        controller.handle(service_event(EventType.DELETED, auth_service))
        controller.handle(ResourceUpdateEvent("Service", snapshot, snapshot))

        assert kong_admin.calls == []
