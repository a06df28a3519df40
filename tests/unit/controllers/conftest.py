"""Fixtures for controller tests: an in-memory Kong admin API and resource store."""

from __future__ import annotations

import threading
import time
from collections.abc import Iterator
from typing import Any

import pytest

from kong_api_controller.core.config import ControllerConfig
from kong_api_controller.integrations.kong.exceptions import KongNotFoundError
from kong_api_controller.integrations.kubernetes.client import ResourceList
from kong_api_controller.integrations.kubernetes.exceptions import KubernetesNotFoundError
from kong_api_controller.integrations.kubernetes.models.base import ResourceKind
from kong_api_controller.integrations.kubernetes.selectors import LabelSelector


class FakeKongAdmin:
    """Stateful stand-in for KongAdminClient over the ``apis`` endpoints."""

    def __init__(self) -> None:
        self.apis: dict[str, dict[str, Any]] = {}
        self.plugins: dict[str, list[dict[str, Any]]] = {}
        self.calls: list[tuple[str, str, dict[str, Any] | None]] = []
        self._ids = 0

    def _next_id(self, prefix: str) -> str:
        self._ids += 1
        return f"{prefix}-{self._ids}"

    def _api_name(self, key: str, endpoint: str) -> str:
        if key in self.apis:
            return key
        for name, api in self.apis.items():
            if api["id"] == key:
                return name
        raise KongNotFoundError(endpoint=f"/{endpoint}")

    def _plugin(self, api_name: str, plugin_id: str, endpoint: str) -> dict[str, Any]:
        for plugin in self.plugins.get(api_name, []):
            if plugin["id"] == plugin_id:
                return plugin
        raise KongNotFoundError(endpoint=f"/{endpoint}")

    def get(self, endpoint: str, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("GET", endpoint, None))
        parts = endpoint.split("/")
        if parts == ["apis"]:
            return {"data": list(self.apis.values())}
        name = self._api_name(parts[1], endpoint)
        if len(parts) == 2:
            return dict(self.apis[name])
        return {"data": [dict(p) for p in self.plugins.get(name, [])]}

    def post(
        self, endpoint: str, json: dict[str, Any] | None = None, **kwargs: Any
    ) -> dict[str, Any]:
        self.calls.append(("POST", endpoint, json))
        body = dict(json or {})
        parts = endpoint.split("/")
        if parts == ["apis"]:
            body["id"] = self._next_id("api")
            self.apis[body["name"]] = body
            self.plugins.setdefault(body["name"], [])
            return dict(body)
        name = self._api_name(parts[1], endpoint)
        body["id"] = self._next_id("plugin")
        body["api_id"] = self.apis[name]["id"]
        self.plugins[name].append(body)
        return dict(body)

    def put(
        self, endpoint: str, json: dict[str, Any] | None = None, **kwargs: Any
    ) -> dict[str, Any]:
        self.calls.append(("PUT", endpoint, json))
        name = self._api_name(endpoint.split("/")[1], endpoint)
        api_id = self.apis[name]["id"]
        body = {**(json or {}), "id": api_id}
        del self.apis[name]
        self.apis[body["name"]] = body
        self.plugins[body["name"]] = self.plugins.pop(name, [])
        return dict(body)

    def patch(
        self, endpoint: str, json: dict[str, Any] | None = None, **kwargs: Any
    ) -> dict[str, Any]:
        self.calls.append(("PATCH", endpoint, json))
        parts = endpoint.split("/")
        name = self._api_name(parts[1], endpoint)
        target = self.apis[name] if len(parts) == 2 else self._plugin(name, parts[3], endpoint)
        target.update(json or {})
        return dict(target)

    def delete(self, endpoint: str, **kwargs: Any) -> None:
        self.calls.append(("DELETE", endpoint, None))
        parts = endpoint.split("/")
        name = self._api_name(parts[1], endpoint)
        if len(parts) == 2:
            del self.apis[name]
            self.plugins.pop(name, None)
            return
        plugin = self._plugin(name, parts[3], endpoint)
        self.plugins[name].remove(plugin)

    def mutations(self) -> list[tuple[str, str, dict[str, Any] | None]]:
        """Every call that changed state."""
        return [call for call in self.calls if call[0] != "GET"]


class FakeKubeClient:
    """In-memory resource store with the KubernetesClient list/get/watch surface."""

    def __init__(self, namespace: str = "gateway") -> None:
        self.namespace = namespace
        self.objects: dict[str, dict[str, dict[str, Any]]] = {}
        self.pending: dict[str, list[dict[str, Any]]] = {}
        self._lock = threading.Lock()
        self._version = 0

    def _bump(self) -> str:
        self._version += 1
        return str(self._version)

    def put(self, kind: str, obj: dict[str, Any]) -> dict[str, Any]:
        """Store an object as the current state of its kind."""
        obj["metadata"]["resourceVersion"] = self._bump()
        self.objects.setdefault(kind, {})[obj["metadata"]["name"]] = obj
        return obj

    def remove(self, kind: str, name: str) -> None:
        self.objects.get(kind, {}).pop(name, None)

    def add_service(
        self, name: str, ip: str = "10.0.0.5", ports: tuple[int, ...] = (3000,), **labels: str
    ) -> dict[str, Any]:
        return self.put(
            "Service",
            {
                "metadata": {"name": name, "namespace": self.namespace, "labels": labels},
                "spec": {"clusterIP": ip, "ports": [{"port": p} for p in ports]},
            },
        )

    def add_route(self, name: str, selector: dict[str, str], **spec: Any) -> dict[str, Any]:
        return self.put(
            "GatewayApi",
            {
                "metadata": {"name": name, "namespace": self.namespace},
                "spec": {**spec, "selector": selector},
            },
        )

    def add_plugin(
        self, name: str, plugin: str, selector: dict[str, str], config: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        return self.put(
            "ApiPlugin",
            {
                "metadata": {"name": name, "namespace": self.namespace},
                "spec": {"name": plugin, "config": config or {}, "selector": selector},
            },
        )

    def push(self, kind: str, event_type: str, obj: dict[str, Any]) -> None:
        """Queue a live watch event for the given kind."""
        with self._lock:
            self.pending.setdefault(kind, []).append({"type": event_type, "object": obj})

    def list_resources(
        self, kind: ResourceKind, namespace: str, selector: LabelSelector | None = None
    ) -> ResourceList:
        items = [
            obj
            for obj in self.objects.get(kind.kind, {}).values()
            if selector is None or selector.matches(obj["metadata"].get("labels"))
        ]
        return ResourceList(items=items, resource_version=str(self._version))

    def get_resource(self, kind: ResourceKind, namespace: str, name: str) -> dict[str, Any]:
        try:
            return self.objects[kind.kind][name]
        except KeyError:
            raise KubernetesNotFoundError(
                resource_type=kind.kind, resource_name=name, namespace=namespace
            ) from None

    def watch_resources(
        self,
        kind: ResourceKind,
        namespace: str,
        selector: LabelSelector | None = None,
        *,
        resource_version: str | None = None,
        timeout_seconds: int | None = None,
    ) -> Iterator[dict[str, Any]]:
        with self._lock:
            events = self.pending.pop(kind.kind, [])
        if not events:
            time.sleep(0.01)
        yield from events


@pytest.fixture
def controller_config() -> ControllerConfig:
    """Controller settings using the default label keys."""
    return ControllerConfig(namespace="gateway", check_interval=1)


@pytest.fixture
def kong_admin() -> FakeKongAdmin:
    """Create an empty in-memory Kong admin API."""
    return FakeKongAdmin()


@pytest.fixture
def kube() -> FakeKubeClient:
    """Create an empty in-memory resource store."""
    return FakeKubeClient()
