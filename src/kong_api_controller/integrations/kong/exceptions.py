"""Errors raised by the Kong admin client and the entity managers."""

from __future__ import annotations

from typing import Any


class KongAPIError(Exception):
    """Root of every Kong failure the controllers can see.

    ``status_code`` is ``None`` when no HTTP response was received.
    ``response_body`` holds Kong's decoded error document, or ``{"raw": text}``
    when the body was not JSON.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: dict[str, Any] | None = None,
        endpoint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_body = response_body
        self.endpoint = endpoint

    def __str__(self) -> str:
        text = self.message
        if self.status_code:
            text += f" (status: {self.status_code})"
        if self.endpoint:
            text += f" [endpoint: {self.endpoint}]"
        return text


class KongConnectionError(KongAPIError):
    """Kong could not be reached or did not answer in time.

    The only Kong error the client retries.
    """

    def __init__(
        self,
        message: str = "Kong admin API unreachable",
        endpoint: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, endpoint=endpoint)
        self.original_error = original_error


class KongAuthError(KongAPIError):
    """401 or 403 from the admin API."""

    def __init__(
        self,
        message: str = "Kong admin API refused the credentials",
        status_code: int | None = 401,
        response_body: dict[str, Any] | None = None,
        endpoint: str | None = None,
    ) -> None:
        super().__init__(message, status_code, response_body, endpoint)


class KongNotFoundError(KongAPIError):
    """The addressed API or plugin does not exist.

    Also raised by the managers for lookups that find nothing without a 404,
    such as a plugin name missing from an API's plugin list. Delete paths in
    the controllers treat it as "already gone".
    """

    def __init__(
        self,
        message: str = "Kong entity not found",
        resource_type: str | None = None,
        resource_id: str | None = None,
        response_body: dict[str, Any] | None = None,
        endpoint: str | None = None,
    ) -> None:
        if resource_type and resource_id:
            message = f"{resource_type} '{resource_id}' not found"
        super().__init__(message, 404, response_body, endpoint)
        self.resource_type = resource_type
        self.resource_id = resource_id


class KongValidationError(KongAPIError):
    """400: Kong rejected the payload. ``validation_errors`` maps field to reason."""

    def __init__(
        self,
        message: str = "Kong rejected the request body",
        validation_errors: dict[str, Any] | None = None,
        response_body: dict[str, Any] | None = None,
        endpoint: str | None = None,
    ) -> None:
        super().__init__(message, 400, response_body, endpoint)
        self.validation_errors = validation_errors or {}


class KongConflictError(KongAPIError):
    """409: a unique field such as the API name is already taken."""

    def __init__(
        self,
        message: str = "Kong entity already exists",
        response_body: dict[str, Any] | None = None,
        endpoint: str | None = None,
    ) -> None:
        super().__init__(message, 409, response_body, endpoint)
