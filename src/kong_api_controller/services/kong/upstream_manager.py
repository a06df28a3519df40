"""Upstream manager for Kong Upstreams and their Targets.

This module provides the UpstreamManager class for managing Kong Upstream
entities and the targets behind them.
"""

from __future__ import annotations

import builtins

from kong_api_controller.integrations.kong.models.base import PaginatedResponse
from kong_api_controller.integrations.kong.models.upstream import (
    DISABLED_TARGET_WEIGHT,
    ENABLED_TARGET_WEIGHT,
    Target,
    Upstream,
)
from kong_api_controller.services.kong.base import BaseEntityManager


class UpstreamManager(BaseEntityManager[Upstream]):
    """Manager for Kong Upstream entities.

    Example:
        >>> manager = UpstreamManager(client)
        >>> manager.create(Upstream(name="myapp.v1.service"))
        >>> manager.add_target("myapp.v1.service", Target(target="10.0.0.5:3000"))
    """

    _endpoint = "upstreams"
    _entity_name = "upstream"
    _model_class = Upstream

    def list_targets(self, upstream_id_or_name: str) -> builtins.list[Target]:
        """List the target history of an upstream.

        Args:
            upstream_id_or_name: Upstream ID or name.

        Returns:
            List of target entries.

        Raises:
            KongNotFoundError: If the upstream does not exist.
        """
        self._log.debug("listing_targets", upstream=upstream_id_or_name)
        response = self._client.get(f"{self._endpoint}/{upstream_id_or_name}/targets")
        page = PaginatedResponse.model_validate(response)
        targets = [Target.model_validate(t) for t in page.data]
        self._log.debug("listed_targets", upstream=upstream_id_or_name, count=len(targets))
        return targets

    def add_target(self, upstream_id_or_name: str, target: Target) -> Target:
        """Append a target entry to an upstream.

        Args:
            upstream_id_or_name: Upstream ID or name.
            target: Target address and weight.

        Returns:
            The created target entry.

        Raises:
            KongNotFoundError: If the upstream does not exist.
        """
        payload = target.to_create_payload()
        payload.pop("upstream_id", None)
        self._log.info("adding_target", upstream=upstream_id_or_name, **payload)
        response = self._client.post(
            f"{self._endpoint}/{upstream_id_or_name}/targets", json=payload
        )
        created = Target.model_validate(response)
        self._log.info("added_target", upstream=upstream_id_or_name, id=created.id)
        return created

    def enable_target(self, upstream_id_or_name: str, address: str) -> Target:
        """Route traffic to a target again by adding a weighted entry."""
        return self.add_target(
            upstream_id_or_name, Target(target=address, weight=ENABLED_TARGET_WEIGHT)
        )

    def disable_target(self, upstream_id_or_name: str, address: str) -> Target:
        """Stop routing traffic to a target by adding a zero-weight entry."""
        return self.add_target(
            upstream_id_or_name, Target(target=address, weight=DISABLED_TARGET_WEIGHT)
        )
