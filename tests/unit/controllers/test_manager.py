"""Unit tests for ControllerManager."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Generator
from typing import Any

import pytest

from kong_api_controller.controllers.manager import ControllerManager
from kong_api_controller.controllers.plugin_controller import PluginController
from kong_api_controller.controllers.route_controller import RouteController
from kong_api_controller.core.config import ControllerConfig


def wait_for(condition: Callable[[], bool], timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.02)
    return condition()


@pytest.fixture
def manager(
    controller_config: ControllerConfig, kube: Any, kong_admin: Any
) -> Generator[ControllerManager]:
    """Create a manager and make sure its threads are stopped afterwards."""
    mgr = ControllerManager(controller_config, kong_admin, kube)
    yield mgr
    mgr.stop(timeout=5)


@pytest.mark.unit
class TestControllerManager:
    """Tests for ControllerManager."""

    def test_builds_both_controllers_on_one_stop_event(self, manager: ControllerManager) -> None:
        """Both controllers share the manager's stop signal."""
        route, plugin = manager.controllers

        assert isinstance(route, RouteController)
        assert isinstance(plugin, PluginController)
        assert route.stop_event is plugin.stop_event
        assert not manager.stopped

    def test_reconciles_existing_state_and_stops(
        self, manager: ControllerManager, kube: Any, kong_admin: Any
    ) -> None:
        """Listed resources are reconciled and every thread exits on stop."""
        kube.add_service(
            "myapp-auth", **{"kong.api": "auth-route", "kong.api.service": "myapp-auth"}
        )
        kube.add_route("auth-route", {"kong.api.service": "myapp-auth"}, uris=["/auth"])

        manager.start()

        assert wait_for(lambda: "myapp-auth" in kong_admin.apis)
        assert manager.stop(timeout=5) is True
        assert manager.stopped
        assert [c[0] for c in kong_admin.mutations()] == ["POST"]

    def test_live_delete_is_reconciled(
        self, manager: ControllerManager, kube: Any, kong_admin: Any
    ) -> None:
        """A route definition deleted while running removes the API object."""
        kube.add_service(
            "myapp-auth", **{"kong.api": "auth-route", "kong.api.service": "myapp-auth"}
        )
        route = kube.add_route("auth-route", {"kong.api.service": "myapp-auth"}, uris=["/auth"])
        manager.start()
        assert wait_for(lambda: "myapp-auth" in kong_admin.apis)

        kube.remove("GatewayApi", "auth-route")
        kube.push("GatewayApi", "DELETED", route)

        assert wait_for(lambda: "myapp-auth" not in kong_admin.apis)

    def test_wait_returns_after_request_stop(self, manager: ControllerManager) -> None:
        """wait blocks until a stop is requested, e.g. from a signal handler."""
        manager.start()
        waiter = threading.Thread(target=manager.wait, kwargs={"poll_interval": 0.05})
        waiter.start()

        manager.request_stop()
        waiter.join(timeout=2)

        assert not waiter.is_alive()
        assert manager.stop(timeout=5) is True

    def test_start_is_idempotent(self, manager: ControllerManager) -> None:
        """A second start launches no more threads."""
        manager.start()
        threads = list(manager._threads)

        manager.start()

        assert manager._threads == threads
        # Two watchers per controller plus one loop thread each
        assert len(threads) == 6
