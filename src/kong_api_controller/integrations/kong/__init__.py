"""Kong Gateway integration - Admin API HTTP client and entity models."""

from kong_api_controller.integrations.kong.client import KongAdminClient
from kong_api_controller.integrations.kong.config import (
    KongAuthConfig,
    KongConfig,
    KongConnectionConfig,
)
from kong_api_controller.integrations.kong.exceptions import (
    KongAPIError,
    KongAuthError,
    KongConflictError,
    KongConnectionError,
    KongNotFoundError,
    KongValidationError,
)

__all__ = [
    "KongAPIError",
    "KongAdminClient",
    "KongAuthConfig",
    "KongAuthError",
    "KongConfig",
    "KongConflictError",
    "KongConnectionConfig",
    "KongConnectionError",
    "KongNotFoundError",
    "KongValidationError",
]
