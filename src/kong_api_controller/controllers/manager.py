"""Supervisor for the route and plugin controllers.

Owns the shared stop event and every thread the controllers start, so
shutdown can be confirmed complete before the process exits.
"""

from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING

import structlog

from kong_api_controller.controllers.plugin_controller import PluginController
from kong_api_controller.controllers.route_controller import RouteController

if TYPE_CHECKING:
    from kong_api_controller.controllers.base import BaseController
    from kong_api_controller.core.config import ControllerConfig
    from kong_api_controller.integrations.kong.client import KongAdminClient
    from kong_api_controller.integrations.kubernetes.client import KubernetesClient

logger = structlog.get_logger()


class ControllerManager:
    """Build, start and stop both controllers.

    Example:
        >>> manager = ControllerManager(config.controller, kong_client, kube_client)
        >>> manager.start()
        >>> try:
        ...     manager.wait()
        ... finally:
        ...     manager.stop()

    Raises:
        LabelSelectorError: If a configured label key is malformed.
    """

    def __init__(
        self,
        config: ControllerConfig,
        kong_client: KongAdminClient,
        kube_client: KubernetesClient,
    ) -> None:
        self._config = config
        self._stop = threading.Event()
        self._threads: list[threading.Thread] = []
        self._controllers: list[BaseController] = [
            RouteController(config, kube_client, kong_client, self._stop),
            PluginController(config, kube_client, kong_client, self._stop),
        ]
        self._log = logger.bind(namespace=config.namespace)

    @property
    def controllers(self) -> list[BaseController]:
        return list(self._controllers)

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def start(self) -> None:
        """Start every watcher and controller loop thread."""
        if self._threads:
            return
        for controller in self._controllers:
            self._threads.extend(controller.start())
        self._log.info("manager_started", threads=len(self._threads))

    def request_stop(self) -> None:
        """Set the stop event without waiting (safe from a signal handler)."""
        self._stop.set()

    def stop(self, timeout: float | None = None) -> bool:
        """Broadcast the stop signal and join every thread.

        Args:
            timeout: Overall seconds to wait; defaults to twice the check
                interval.

        Returns:
            True if every thread exited in time.
        """
        self._stop.set()
        if timeout is None:
            timeout = self._config.check_interval * 2
        deadline = time.monotonic() + timeout
        for thread in self._threads:
            thread.join(max(deadline - time.monotonic(), 0))
        alive = [t.name for t in self._threads if t.is_alive()]
        if alive:
            self._log.warning("manager_stop_incomplete", alive=alive)
            return False
        self._log.info("manager_stopped")
        return True

    def wait(self, poll_interval: float | None = None) -> None:
        """Block until the stop event is set."""
        interval = poll_interval or self._config.check_interval
        while not self._stop.wait(interval):
            pass
