"""Reconciliation controllers and the list-and-watch relay that feeds them."""

from kong_api_controller.controllers.base import BaseController
from kong_api_controller.controllers.events import EventType, ResourceEvent, ResourceUpdateEvent
from kong_api_controller.controllers.manager import ControllerManager
from kong_api_controller.controllers.plugin_controller import PluginController
from kong_api_controller.controllers.route_controller import RouteController
from kong_api_controller.controllers.watcher import ResourceWatcher
from kong_api_controller.core.exceptions import (
    MissingSelectorError,
    ReconcileError,
    ServiceHasNoPortsError,
    ServiceNotFoundError,
)

__all__ = [
    "BaseController",
    "ControllerManager",
    "EventType",
    "MissingSelectorError",
    "PluginController",
    "ReconcileError",
    "ResourceEvent",
    "ResourceUpdateEvent",
    "ResourceWatcher",
    "RouteController",
    "ServiceHasNoPortsError",
    "ServiceNotFoundError",
]
