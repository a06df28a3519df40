"""Base controller: one serialized reconciliation loop fed by watchers.

Every watcher of a controller writes into the same bounded inbox, and a
single loop thread takes events out one at a time. Only one reconciliation
body runs at once per controller.
"""

from __future__ import annotations

import builtins
import queue
import threading
import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import structlog

from kong_api_controller.controllers.events import ResourceEvent, ResourceUpdateEvent
from kong_api_controller.integrations.kubernetes.selectors import LabelSelector, Requirement
from kong_api_controller.services.kong.api_manager import APIManager
from kong_api_controller.services.kubernetes.lookup import SelectorLookup

if TYPE_CHECKING:
    from kong_api_controller.controllers.watcher import ResourceWatcher
    from kong_api_controller.core.config import ControllerConfig
    from kong_api_controller.integrations.kong.client import KongAdminClient
    from kong_api_controller.integrations.kubernetes.client import KubernetesClient

logger = structlog.get_logger()

Event = ResourceEvent[Any] | ResourceUpdateEvent[Any]


class BaseController(ABC):
    """Abstract base class for reconciliation controllers.

    Subclasses declare their watchers in ``_build_watchers`` and reconcile a
    single event in ``handle``. Reconciliation errors are logged and never
    retried; the next event for the same resource is the only retry.

    Args:
        config: Controller settings (namespace, label keys, interval).
        kube_client: Resource store client.
        kong_client: Gateway admin client.
        stop_event: Shared cancellation signal; a private one is created
            when omitted.

    Raises:
        LabelSelectorError: If a configured label key is malformed.
    """

    _name: str = ""

    def __init__(
        self,
        config: ControllerConfig,
        kube_client: KubernetesClient,
        kong_client: KongAdminClient,
        stop_event: threading.Event | None = None,
    ) -> None:
        self._config = config
        self._stop = stop_event or threading.Event()
        self._inbox: queue.Queue[Event] = queue.Queue(maxsize=1)
        self._lookup = SelectorLookup(kube_client, config)
        self._apis = APIManager(kong_client)
        self._thread: threading.Thread | None = None
        self._log = logger.bind(controller=self._name, namespace=config.namespace)
        # Services are only considered when they carry the API label
        self._api_selector = LabelSelector.of(Requirement.exists(config.api_label))
        self._watchers = self._build_watchers(kube_client)

    @abstractmethod
    def _build_watchers(self, client: KubernetesClient) -> builtins.list[ResourceWatcher[Any]]:
        """Create the watchers feeding this controller's inbox."""

    @abstractmethod
    def handle(self, event: Event) -> None:
        """Reconcile a single event.

        Raises:
            Exception: Any failure; ``process`` logs it.
        """

    @property
    def name(self) -> str:
        return self._name

    @property
    def watchers(self) -> builtins.list[ResourceWatcher[Any]]:
        return list(self._watchers)

    @property
    def stop_event(self) -> threading.Event:
        return self._stop

    @property
    def inbox(self) -> queue.Queue[Event]:
        return self._inbox

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> builtins.list[threading.Thread]:
        """Start every watcher thread and the reconciliation loop thread.

        Returns:
            All threads started for this controller.
        """
        threads = [watcher.start() for watcher in self._watchers]
        self._thread = threading.Thread(
            target=self.run, name=f"{self._name}-controller", daemon=True
        )
        self._thread.start()
        threads.append(self._thread)
        self._log.info("controller_started", watchers=len(self._watchers))
        return threads

    def stop(self) -> None:
        """Signal the watchers and the loop to stop."""
        self._stop.set()

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the loop and every watcher to finish.

        ``timeout`` bounds the whole wait, not each thread.

        Returns:
            True if every thread has exited.
        """
        threads = [w.thread for w in self._watchers] + [self._thread]
        started = [t for t in threads if t is not None]
        deadline = None if timeout is None else time.monotonic() + timeout
        for thread in started:
            thread.join(None if deadline is None else max(deadline - time.monotonic(), 0))
        return not any(t.is_alive() for t in started)

    def run(self) -> None:
        """Consume the inbox until the stop event is set."""
        interval = self._config.check_interval
        while not self._stop.is_set():
            try:
                event = self._inbox.get(timeout=interval)
            except queue.Empty:
                continue
            self.process(event)
        self._log.info("controller_stopped")

    def process(self, event: Event) -> bool:
        """Reconcile one event, logging instead of raising on failure.

        Returns:
            True if the reconciliation succeeded.
        """
        log = self._log.bind(kind=event.kind, type=str(event.type), name=event.name)
        log.debug("reconcile_started")
        try:
            self.handle(event)
        except Exception as e:
            log.error("reconcile_failed", error=str(e), error_type=type(e).__name__)
            return False
        log.debug("reconcile_finished")
        return True
