"""API manager for Kong API objects.

This module provides the APIManager class for managing Kong API entities
through the Admin API.
"""

from __future__ import annotations

from kong_api_controller.integrations.kong.exceptions import KongNotFoundError
from kong_api_controller.integrations.kong.models.api import KongAPI
from kong_api_controller.services.kong.base import BaseEntityManager


class APIManager(BaseEntityManager[KongAPI]):
    """Manager for Kong API entities.

    Example:
        >>> manager = APIManager(client)
        >>> api = manager.find("myapp-auth")
        >>> if api is None:
        ...     manager.create(KongAPI(name="myapp-auth", upstream_url="10.0.0.5:3000"))
    """

    _endpoint = "apis"
    _entity_name = "api"
    _model_class = KongAPI

    def find(self, name: str) -> KongAPI | None:
        """Get an API object by name, or None when Kong has no such API.

        Args:
            name: API name or ID.

        Returns:
            The API object, or None if it does not exist.
        """
        try:
            return self.get(name)
        except KongNotFoundError:
            return None

    def set_upstream_url(self, id_or_name: str, upstream_url: str) -> KongAPI:
        """Point an existing API object at a new upstream address.

        Only the ``upstream_url`` field is sent, so every other routing
        field stays as it is in Kong.

        Args:
            id_or_name: API ID or name.
            upstream_url: New upstream address.

        Returns:
            The updated API object.

        Raises:
            KongNotFoundError: If the API does not exist.
        """
        self._log.info("setting_upstream_url", id_or_name=id_or_name, upstream_url=upstream_url)
        return self.update(id_or_name, {"upstream_url": upstream_url})
