"""Pydantic model for Kong plugins attached to API objects."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import Field

from kong_api_controller.integrations.kong.models.base import KongEntityBase


class KongPluginEntity(KongEntityBase):
    """Kong Plugin entity model.

    A plugin is attached to exactly one API object; the controller keeps at
    most one plugin of a given ``name`` per API.

    Note: Named KongPluginEntity to avoid confusion with PluginDefinition,
    the Kubernetes resource that describes it.

    Attributes:
        name: Plugin name (e.g., 'rate-limiting', 'key-auth').
        api_id: ID of the owning API object (assigned by Kong).
        config: Plugin-specific configuration.
        enabled: Whether plugin is active.
    """

    _entity_name: ClassVar[str] = "plugin"

    name: str = Field(description="Plugin name (e.g., 'rate-limiting', 'key-auth')")
    api_id: str | None = Field(default=None, description="Owning API object ID")
    config: dict[str, Any] = Field(default_factory=dict, description="Plugin configuration")
    enabled: bool = Field(default=True, description="Whether plugin is active")

    def to_create_payload(self) -> dict[str, Any]:
        """Convert to create payload; the owning API comes from the URL."""
        payload = super().to_create_payload()
        payload.pop("api_id", None)
        return payload
