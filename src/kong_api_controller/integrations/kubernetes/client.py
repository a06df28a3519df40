"""Kubernetes API client wrapper.

Wraps the official kubernetes Python client behind the three operations the
controllers need (list, watch and get) for both core services and the
gateway definition custom resources. Every object crosses this boundary as
a plain JSON-style dictionary; typed decoding happens in the watcher and the
lookup helpers.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from urllib3.exceptions import HTTPError as TransportError

from kong_api_controller.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesGoneError,
    KubernetesNotFoundError,
    KubernetesValidationError,
)

if TYPE_CHECKING:
    from kubernetes.client import ApiClient, CoreV1Api, CustomObjectsApi, VersionApi

    from kong_api_controller.integrations.kubernetes.config import KubernetesConfig
    from kong_api_controller.integrations.kubernetes.models.base import ResourceKind
    from kong_api_controller.integrations.kubernetes.selectors import LabelSelector

logger = structlog.get_logger()


@dataclass
class ResourceList:
    """Result of a list call: the items plus the collection's resource version."""

    items: list[dict[str, Any]] = field(default_factory=list)
    resource_version: str | None = None


class KubernetesClient:
    """Read-only view of services and gateway definitions in one cluster.

    Credentials come from a kubeconfig when one loads, otherwise from the pod's
    service account. SDK API objects are built on first use. List and get
    calls retry on transport failures; watches do not, since the watcher
    already relists after any break. SDK exceptions never escape: they are
    mapped onto the ``KubernetesError`` hierarchy.

    Example:
        ```python
        from kong_api_controller.integrations.kubernetes import KubernetesClient
        from kong_api_controller.integrations.kubernetes.config import KubernetesConfig
        from kong_api_controller.integrations.kubernetes.models import SERVICE_KIND

        with KubernetesClient(KubernetesConfig()) as client:
            services = client.list_resources(SERVICE_KIND, "default")
            print(f"{len(services.items)} services")
        ```
    """

    def __init__(self, config: KubernetesConfig) -> None:
        """Load credentials immediately.

        Raises:
            KubernetesConnectionError: Neither a kubeconfig nor a service account was usable.
        """
        self._config = config
        self._retries = config.retry_attempts
        self._current_context: str | None = None

        self._api_client: ApiClient | None = None
        self._core_v1: CoreV1Api | None = None
        self._custom_objects: CustomObjectsApi | None = None
        self._version_api: VersionApi | None = None

        self._load_config()

        logger.info("Kubernetes client ready", context=self._current_context)

    def _load_config(self) -> None:
        from kubernetes import config
        from kubernetes.config import ConfigException

        try:
            config.load_kube_config(
                config_file=self._config.kubeconfig,
                context=self._config.context,
            )
            self._current_context = self._config.context or "default"
            logger.debug(
                "loaded_kubeconfig",
                context=self._config.context,
                kubeconfig=self._config.kubeconfig,
            )
        except ConfigException:
            try:
                config.load_incluster_config()
                self._current_context = "in-cluster"
                logger.debug("loaded_incluster_config")
            except ConfigException as e:
                raise KubernetesConnectionError(
                    message="Cannot load Kubernetes configuration: "
                    "no kubeconfig found and not running in a pod.",
                    original_error=e,
                ) from e

    @property
    def api_client(self) -> ApiClient:
        """Shared ApiClient; also used to serialize SDK models."""
        if self._api_client is None:
            from kubernetes.client import ApiClient

            self._api_client = ApiClient()
        return self._api_client

    @property
    def core_v1(self) -> CoreV1Api:
        """Core group, for services."""
        if self._core_v1 is None:
            from kubernetes.client import CoreV1Api

            self._core_v1 = CoreV1Api(self.api_client)
        return self._core_v1

    @property
    def custom_objects(self) -> CustomObjectsApi:
        """Custom objects, for the gateway definitions."""
        if self._custom_objects is None:
            from kubernetes.client import CustomObjectsApi

            self._custom_objects = CustomObjectsApi(self.api_client)
        return self._custom_objects

    @property
    def version_api(self) -> VersionApi:
        if self._version_api is None:
            from kubernetes.client import VersionApi

            self._version_api = VersionApi(self.api_client)
        return self._version_api

    def _list_call(self, kind: ResourceKind) -> tuple[Callable[..., Any], dict[str, Any]]:
        """Return the list function and fixed arguments for a kind."""
        if kind.is_core:
            if kind.plural != "services":
                raise KubernetesError(message=f"unsupported core resource '{kind.plural}'")
            return self.core_v1.list_namespaced_service, {}
        return self.custom_objects.list_namespaced_custom_object, {
            "group": kind.group,
            "version": kind.version,
            "plural": kind.plural,
        }

    def _to_dict(self, obj: Any) -> dict[str, Any]:
        """Serialize an SDK model into its JSON form (camelCase keys)."""
        if isinstance(obj, dict):
            return obj
        result: dict[str, Any] = self.api_client.sanitize_for_serialization(obj)
        return result

    def list_resources(
        self,
        kind: ResourceKind,
        namespace: str,
        selector: LabelSelector | None = None,
    ) -> ResourceList:
        """List resources of a kind in a namespace.

        Args:
            kind: Resource kind to list.
            namespace: Namespace to list in.
            selector: Optional label selector.

        Returns:
            The items, in the order the API server returned them, and the
            list's resource version.

        Raises:
            KubernetesError: On API failure.
        """
        func, kwargs = self._list_call(kind)
        label_selector = str(selector) if selector else None

        @self.make_retry_decorator()
        def _list() -> Any:
            return self._call(
                func,
                kind=kind,
                namespace=namespace,
                **kwargs,
                label_selector=label_selector,
            )

        result = self._to_dict(_list())
        metadata = result.get("metadata") or {}
        items = [self._to_dict(item) for item in result.get("items") or []]
        logger.debug(
            "listed_resources",
            kind=str(kind),
            namespace=namespace,
            selector=label_selector,
            count=len(items),
        )
        return ResourceList(items=items, resource_version=metadata.get("resourceVersion"))

    def watch_resources(
        self,
        kind: ResourceKind,
        namespace: str,
        selector: LabelSelector | None = None,
        *,
        resource_version: str | None = None,
        timeout_seconds: int | None = None,
    ) -> Iterator[dict[str, Any]]:
        """Subscribe to changes of a kind in a namespace.

        The subscription ends when the server-side ``timeout_seconds``
        elapses; callers re-subscribe from the last seen resource version.

        Args:
            kind: Resource kind to watch.
            namespace: Namespace to watch.
            selector: Optional label selector.
            resource_version: Resource version to start from.
            timeout_seconds: Server-side subscription timeout.

        Yields:
            Dictionaries with ``type`` (ADDED, MODIFIED, DELETED) and the
            serialized ``object``.

        Raises:
            KubernetesGoneError: If ``resource_version`` is too old.
            KubernetesError: On other API failures.
        """
        from kubernetes import watch
        from kubernetes.client import ApiException

        func, kwargs = self._list_call(kind)
        if selector:
            kwargs["label_selector"] = str(selector)
        if resource_version:
            kwargs["resource_version"] = resource_version
        if timeout_seconds:
            kwargs["timeout_seconds"] = timeout_seconds

        w = watch.Watch()
        try:
            for event in w.stream(func, namespace=namespace, **kwargs):
                event_type = event.get("type")
                raw = event.get("raw_object") or self._to_dict(event.get("object"))
                if event_type == "ERROR":
                    code = raw.get("code") if isinstance(raw, dict) else None
                    if code == 410:
                        raise KubernetesGoneError(resource_type=kind.kind, namespace=namespace)
                    raise KubernetesError(
                        message=str(raw.get("message", "watch error"))
                        if isinstance(raw, dict)
                        else "watch error",
                        status_code=code,
                        resource_type=kind.kind,
                        namespace=namespace,
                    )
                yield {"type": event_type, "object": raw}
        except ApiException as e:
            raise self.translate_api_exception(e, kind.kind, namespace=namespace) from e
        except TransportError as e:
            raise KubernetesConnectionError(
                message=f"Watch on {kind} failed: {e}", original_error=e
            ) from e
        finally:
            w.stop()

    def get_resource(self, kind: ResourceKind, namespace: str, name: str) -> dict[str, Any]:
        """Get a single resource by name.

        Args:
            kind: Resource kind.
            namespace: Namespace of the resource.
            name: Resource name.

        Returns:
            The serialized resource.

        Raises:
            KubernetesNotFoundError: If the resource does not exist.
            KubernetesError: On other API failures.
        """
        if kind.is_core:
            if kind.plural != "services":
                raise KubernetesError(message=f"unsupported core resource '{kind.plural}'")
            func: Callable[..., Any] = self.core_v1.read_namespaced_service
            kwargs: dict[str, Any] = {}
        else:
            func = self.custom_objects.get_namespaced_custom_object
            kwargs = {"group": kind.group, "version": kind.version, "plural": kind.plural}

        @self.make_retry_decorator()
        def _get() -> Any:
            return self._call(
                func, kind=kind, namespace=namespace, name=name, resource_name=name, **kwargs
            )

        return self._to_dict(_get())

    def _call(
        self,
        func: Callable[..., Any],
        *,
        kind: ResourceKind,
        namespace: str,
        resource_name: str | None = None,
        **kwargs: Any,
    ) -> Any:
        """Invoke an SDK function, translating its failures."""
        from kubernetes.client import ApiException

        call_kwargs = {k: v for k, v in kwargs.items() if v is not None}
        try:
            return func(namespace=namespace, **call_kwargs)
        except ApiException as e:
            raise self.translate_api_exception(e, kind.kind, resource_name, namespace) from e
        except TransportError as e:
            raise KubernetesConnectionError(
                message=f"Request for {kind} failed: {e}", original_error=e
            ) from e

    @staticmethod
    def translate_api_exception(
        e: Exception,
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> KubernetesError:
        """Map an SDK exception onto the matching ``KubernetesError`` subclass.

        Anything that is not an ``ApiException`` becomes a plain
        ``KubernetesError`` carrying its text.
        """
        from kubernetes.client import ApiException

        if not isinstance(e, ApiException):
            return KubernetesError(
                message=str(e),
                resource_type=resource_type,
                resource_name=resource_name,
                namespace=namespace,
            )

        status = e.status

        if status in (401, 403):
            return KubernetesAuthError(
                message=e.reason or "Access denied",
                status_code=status,
                reason=e.reason,
            )

        if status == 404:
            return KubernetesNotFoundError(
                resource_type=resource_type,
                resource_name=resource_name,
                namespace=namespace,
            )

        if status == 410:
            return KubernetesGoneError(resource_type=resource_type, namespace=namespace)

        if status in (400, 422):
            return KubernetesValidationError(
                message=e.reason or "Request rejected",
                status_code=status,
            )

        return KubernetesError(
            message=e.reason or f"API server returned HTTP {status}",
            status_code=status,
            resource_type=resource_type,
            resource_name=resource_name,
            namespace=namespace,
        )

    def make_retry_decorator(self) -> Any:
        """Backoff for list and get: connection errors only, ``retry_attempts`` tries."""
        return retry(
            retry=retry_if_exception_type(KubernetesConnectionError),
            stop=stop_after_attempt(max(self._retries, 1)),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            reraise=True,
        )

    def check_connection(self) -> bool:
        """Ask the server for its version; ``False`` on any failure."""
        from kubernetes.client import ApiException

        try:
            self.version_api.get_code()
        except (ApiException, TransportError, OSError):
            return False
        return True

    def get_current_context(self) -> str:
        """Name of the kubeconfig context in use, or ``in-cluster``."""
        return self._current_context or "unknown"

    def close(self) -> None:
        if self._api_client is not None:
            self._api_client.close()
        self._api_client = None
        self._core_v1 = None
        self._custom_objects = None
        self._version_api = None
        logger.debug("Kubernetes client closed, API objects dropped")

    def __enter__(self) -> KubernetesClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
