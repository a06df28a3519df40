"""Pydantic models for Kong Upstreams and Targets.

Upstreams are virtual hostnames that load balance across targets. Kong keeps
target history, so a target is enabled or disabled by appending a new entry
with a positive or zero weight rather than by editing the old one.
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import Field

from kong_api_controller.integrations.kong.models.base import KongEntityBase

ENABLED_TARGET_WEIGHT = 10
DISABLED_TARGET_WEIGHT = 0


class Upstream(KongEntityBase):
    """Kong Upstream entity model.

    Attributes:
        name: Upstream name (virtual hostname).
    """

    _entity_name: ClassVar[str] = "upstream"

    name: str = Field(description="Upstream name (virtual hostname)")


class Target(KongEntityBase):
    """Kong Target entity model.

    Attributes:
        target: Target address (host:port).
        weight: Load balancing weight; 0 disables the target.
        upstream_id: ID of the owning upstream.
    """

    _entity_name: ClassVar[str] = "target"

    target: str = Field(description="Target address (host:port)")
    weight: int = Field(default=ENABLED_TARGET_WEIGHT, ge=0, le=1000)
    upstream_id: str | None = Field(default=None, description="Owning upstream ID")

    @property
    def is_enabled(self) -> bool:
        """Whether the load balancer currently routes to this target."""
        return self.weight > 0
