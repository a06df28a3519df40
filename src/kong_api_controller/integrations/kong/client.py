"""Kong Admin API HTTP client."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

import httpx
import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from kong_api_controller.integrations.kong.exceptions import (
    KongAPIError,
    KongAuthError,
    KongConflictError,
    KongConnectionError,
    KongNotFoundError,
    KongValidationError,
)

if TYPE_CHECKING:
    from kong_api_controller.integrations.kong.config import (
        KongAuthConfig,
        KongConnectionConfig,
    )

logger = structlog.get_logger()


class KongAdminClient:
    """Synchronous client for Kong's Admin API.

    The route and plugin controllers share one instance; requests carry no
    state between them. Connection failures and timeouts are retried with
    exponential backoff. An HTTP error status is never retried and surfaces
    as a ``KongAPIError`` subclass chosen by status code.

    Example:
        ```python
        from kong_api_controller.integrations.kong import KongAdminClient
        from kong_api_controller.integrations.kong.config import KongConnectionConfig

        connection = KongConnectionConfig(base_url="http://kong:8001")

        with KongAdminClient(connection) as client:
            api = client.get("apis/myapp-auth")
        ```
    """

    def __init__(
        self,
        connection_config: KongConnectionConfig,
        auth_config: KongAuthConfig | None = None,
    ) -> None:
        """Build the underlying httpx client.

        Args:
            connection_config: Admin URL, timeout, TLS verification and retry count.
            auth_config: Optional admin token or client certificate settings.
        """
        self.connection_config = connection_config
        self.auth_config = auth_config
        self._retries = connection_config.retries
        self._client = httpx.Client(**self._client_options())

        logger.info(
            "Kong admin client ready",
            base_url=connection_config.base_url,
            auth=auth_config.type if auth_config else "none",
        )

    def _client_options(self) -> dict[str, Any]:
        conn = self.connection_config
        options: dict[str, Any] = {
            "base_url": conn.base_url,
            "timeout": httpx.Timeout(conn.timeout),
            "verify": conn.verify_ssl,
        }

        auth = self.auth_config
        if auth is None:
            return options

        if auth.type == "api_key" and auth.api_key:
            options["headers"] = {auth.header_name: auth.api_key}
            logger.debug("Using admin token header", header=auth.header_name)
        elif auth.type == "mtls" and auth.cert_path and auth.key_path:
            options["cert"] = (auth.cert_path, auth.key_path)
            if auth.ca_path:
                options["verify"] = auth.ca_path
            logger.debug("Using client certificate", cert=auth.cert_path)

        return options

    def _with_retry(self) -> Any:
        return retry(
            retry=retry_if_exception_type(KongConnectionError),
            stop=stop_after_attempt(max(self._retries, 1)),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            reraise=True,
        )

    @staticmethod
    def _decode(response: httpx.Response) -> dict[str, Any]:
        if not response.content:
            return {}
        try:
            return cast(dict[str, Any], response.json())
        except ValueError:
            return {"raw": response.text}

    def _check(self, response: httpx.Response, endpoint: str) -> dict[str, Any]:
        """Return the decoded body, or raise the error class matching the status.

        Raises:
            KongAuthError: 401 or 403.
            KongValidationError: 400, with Kong's per-field messages attached.
            KongNotFoundError: 404.
            KongConflictError: 409.
            KongAPIError: any other non-2xx status.
        """
        body = self._decode(response)
        if response.is_success:
            return body

        status = response.status_code
        message = body.get("message")

        if status in (401, 403):
            raise KongAuthError(
                message=message or "Authentication failed",
                status_code=status,
                response_body=body,
                endpoint=endpoint,
            )
        if status == 400:
            raise KongValidationError(
                message=message or "Validation failed",
                validation_errors=body.get("fields", {}),
                response_body=body,
                endpoint=endpoint,
            )
        if status == 404:
            raise KongNotFoundError(
                message=message or "Resource not found",
                response_body=body,
                endpoint=endpoint,
            )
        if status == 409:
            raise KongConflictError(
                message=message or "Resource already exists",
                response_body=body,
                endpoint=endpoint,
            )

        raise KongAPIError(
            message=message or f"Kong returned HTTP {status}",
            status_code=status,
            response_body=body,
            endpoint=endpoint,
        )

    def _send(self, method: str, endpoint: str, **kwargs: Any) -> dict[str, Any]:
        """Issue one request with no retry applied.

        Transport failures become ``KongConnectionError`` so that the retry
        policy in ``_call`` can pick them out.
        """
        path = "/" + endpoint.lstrip("/")
        log = logger.bind(method=method, path=path)

        try:
            log.debug("Sending admin request")
            response = self._client.request(method, path, **kwargs)
        except httpx.ConnectError as e:
            log.warning("Kong unreachable", error=str(e))
            raise KongConnectionError(
                message=f"Cannot reach Kong admin API: {e}",
                endpoint=path,
                original_error=e,
            ) from e
        except httpx.TimeoutException as e:
            log.warning("Kong admin request timed out", error=str(e))
            raise KongConnectionError(
                message=f"Timed out talking to Kong admin API: {e}",
                endpoint=path,
                original_error=e,
            ) from e

        log.debug("Admin response received", status=response.status_code)
        return self._check(response, path)

    def _call(self, method: str, endpoint: str, **kwargs: Any) -> dict[str, Any]:
        return cast(dict[str, Any], self._with_retry()(self._send)(method, endpoint, **kwargs))

    def get(self, endpoint: str, **kwargs: Any) -> dict[str, Any]:
        """Fetch ``endpoint``, e.g. ``"apis"`` or ``"apis/my-api/plugins"``.

        Extra keyword arguments such as ``params`` go straight to httpx.
        """
        return self._call("GET", endpoint, **kwargs)

    def post(
        self,
        endpoint: str,
        json: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Create an entity under ``endpoint`` and return what Kong stored."""
        return self._call("POST", endpoint, json=json, **kwargs)

    def put(
        self,
        endpoint: str,
        json: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Replace the entity at ``endpoint`` wholesale."""
        return self._call("PUT", endpoint, json=json, **kwargs)

    def patch(
        self,
        endpoint: str,
        json: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Update only the fields given in ``json``."""
        return self._call("PATCH", endpoint, json=json, **kwargs)

    def delete(self, endpoint: str, **kwargs: Any) -> None:
        self._call("DELETE", endpoint, **kwargs)

    def close(self) -> None:
        self._client.close()
        logger.debug("Kong admin client closed")

    def __enter__(self) -> KongAdminClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def get_status(self) -> dict[str, Any]:
        """Return the node's ``/status`` document (connections, datastore reachability)."""
        return self.get("status")

    def check_connection(self) -> bool:
        """Probe ``/status``; any Kong error counts as unreachable."""
        try:
            self.get_status()
        except KongAPIError:
            return False
        return True
