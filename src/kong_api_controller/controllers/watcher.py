"""Generic list-and-watch relay.

A ``ResourceWatcher`` lists every matching resource, emits each one as an
ADDED event, then follows the live watch stream. Events are handed to the
consuming controller through a shared bounded queue; a full queue blocks the
watcher, which in turn stops reading from the API server.
"""

from __future__ import annotations

import queue
import threading
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from kong_api_controller.controllers.events import EventType, ResourceEvent, ResourceUpdateEvent
from kong_api_controller.integrations.kubernetes.exceptions import (
    KubernetesError,
    KubernetesGoneError,
)
from kong_api_controller.integrations.kubernetes.models.base import K8sEntityBase

if TYPE_CHECKING:
    from kong_api_controller.integrations.kubernetes.client import KubernetesClient
    from kong_api_controller.integrations.kubernetes.models.base import ResourceKind
    from kong_api_controller.integrations.kubernetes.selectors import LabelSelector

logger = structlog.get_logger()

type Decoder[T] = Callable[[Mapping[str, Any]], T]


class ResourceWatcher[T: K8sEntityBase]:
    """Relay one resource collection into a controller's inbox.

    Args:
        client: Kubernetes client used to list and watch.
        kind: Resource kind to follow.
        namespace: Namespace to follow.
        decoder: Builds a typed snapshot from a serialized object.
        outbox: Controller inbox; a ``queue.Queue(maxsize=1)`` gives
            unbuffered hand-off.
        stop_event: Shared cancellation signal.
        selector: Optional label selector.
        check_interval: Seconds between cancellation checks. Also used as the
            server-side timeout of each watch subscription.
        emit_updates: Also emit a ``ResourceUpdateEvent`` with the previous
            snapshot for every modification.
    """

    def __init__(
        self,
        client: KubernetesClient,
        kind: ResourceKind,
        namespace: str,
        decoder: Decoder[T],
        outbox: queue.Queue[Any],
        stop_event: threading.Event,
        *,
        selector: LabelSelector | None = None,
        check_interval: float = 5,
        emit_updates: bool = False,
    ) -> None:
        self._client = client
        self._kind = kind
        self._namespace = namespace
        self._decoder = decoder
        self._outbox = outbox
        self._stop = stop_event
        self._selector = selector
        self._interval = check_interval
        self._emit_updates = emit_updates

        self._cache: dict[str, T] = {}
        self._resource_version: str | None = None
        self._synced = False
        self._thread: threading.Thread | None = None
        self._log = logger.bind(
            watcher=kind.kind,
            namespace=namespace,
            selector=str(selector) if selector else "",
        )

    @property
    def kind(self) -> ResourceKind:
        return self._kind

    @property
    def thread(self) -> threading.Thread | None:
        return self._thread

    def start(self) -> threading.Thread:
        """Run the relay on its own daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            return self._thread
        self._thread = threading.Thread(
            target=self.run, name=f"watch-{self._kind.plural}", daemon=True
        )
        self._thread.start()
        return self._thread

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the relay thread; returns True once it has exited."""
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def run(self) -> None:
        """List, then watch, until the stop event is set."""
        self._log.info("watch_started")
        while not self._stop.is_set():
            try:
                if not self._synced:
                    self._list()
                if self._stop.is_set():
                    break
                self._watch()
            except KubernetesGoneError:
                self._log.info("watch_expired_relisting")
                self._synced = False
                self._resource_version = None
            except KubernetesError as e:
                self._log.error("watch_failed", error=str(e))
                self._stop.wait(self._interval)
        self._log.info("watch_stopped")

    # =========================================================================
    # List and Watch
    # =========================================================================

    def _list(self) -> None:
        result = self._client.list_resources(self._kind, self._namespace, self._selector)
        previous = self._cache
        self._cache = {}
        for item in result.items:
            obj = self._decode(item)
            if obj is None:
                continue
            self._cache[obj.name] = obj
            old = previous.get(obj.name)
            if old is not None and old != obj:
                # Changed while the watch was down
                delivered = self._emit_modified(old, obj)
            else:
                delivered = self._emit(ResourceEvent(EventType.ADDED, self._kind.kind, obj))
            if not delivered:
                return
        # Anything that vanished while we were not watching is reported as deleted
        for name, obj in previous.items():
            if name not in self._cache:
                if not self._emit(ResourceEvent(EventType.DELETED, self._kind.kind, obj)):
                    return
        self._resource_version = result.resource_version
        self._synced = True
        self._log.debug("listed", count=len(self._cache), resource_version=self._resource_version)

    def _watch(self) -> None:
        stream = self._client.watch_resources(
            self._kind,
            self._namespace,
            self._selector,
            resource_version=self._resource_version,
            timeout_seconds=max(int(self._interval), 1),
        )
        try:
            for raw_event in stream:
                self._handle(raw_event)
                if self._stop.is_set():
                    return
        finally:
            close = getattr(stream, "close", None)
            if close is not None:
                close()

    def _handle(self, raw_event: Mapping[str, Any]) -> None:
        raw_obj = raw_event.get("object")
        if version := _metadata(raw_obj).get("resourceVersion"):
            self._resource_version = version

        try:
            event_type = EventType(raw_event.get("type"))
        except ValueError:
            self._log.debug("event_ignored", type=raw_event.get("type"))
            return

        obj = self._decode(raw_obj)
        if obj is None:
            return

        if event_type is EventType.DELETED:
            self._cache.pop(obj.name, None)
            self._emit(ResourceEvent(event_type, self._kind.kind, obj))
            return

        old = self._cache.get(obj.name)
        self._cache[obj.name] = obj
        if event_type is EventType.ADDED:
            self._emit(ResourceEvent(event_type, self._kind.kind, obj))
            return
        self._emit_modified(old, obj)

    def _emit_modified(self, old: T | None, new: T) -> bool:
        """Emit MODIFIED, followed by the old/new pair when updates are enabled."""
        if not self._emit(ResourceEvent(EventType.MODIFIED, self._kind.kind, new)):
            return False
        if not self._emit_updates:
            return True
        if old is None:
            self._log.debug("update_without_previous", name=new.name)
            return True
        return self._emit(ResourceUpdateEvent(self._kind.kind, old, new))

    # =========================================================================
    # Helpers
    # =========================================================================

    def _decode(self, raw_obj: Any) -> T | None:
        """Decode a serialized object, dropping it if it has the wrong shape."""
        if not isinstance(raw_obj, Mapping):
            self._log.warning("event_dropped", reason="not an object")
            return None
        try:
            return self._decoder(raw_obj)
        except (ValidationError, ValueError, TypeError) as e:
            name = _metadata(raw_obj).get("name")
            self._log.warning("event_dropped", name=name, error=str(e))
            return None

    def _emit(self, event: ResourceEvent[T] | ResourceUpdateEvent[T]) -> bool:
        """Hand an event to the controller; False if stopped first."""
        while not self._stop.is_set():
            try:
                self._outbox.put(event, timeout=self._interval)
            except queue.Full:
                continue
            self._log.debug("event_emitted", type=str(event.type), name=event.name)
            return True
        return False


def _metadata(raw_obj: Any) -> Mapping[str, Any]:
    metadata = raw_obj.get("metadata") if isinstance(raw_obj, Mapping) else None
    return metadata if isinstance(metadata, Mapping) else {}
