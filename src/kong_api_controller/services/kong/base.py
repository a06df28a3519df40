"""Shared CRUD plumbing for top-level Kong admin collections.

Each concrete manager names its collection (``apis``, ``upstreams``) and the
pydantic model its JSON decodes into; everything below works off those two
class attributes.
"""

from __future__ import annotations

from abc import ABC
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from kong_api_controller.integrations.kong.client import KongAdminClient

from kong_api_controller.integrations.kong.exceptions import KongNotFoundError
from kong_api_controller.integrations.kong.models.base import (
    KongEntityBase,
    PaginatedResponse,
)

logger = structlog.get_logger()


class BaseEntityManager[T: KongEntityBase](ABC):
    """Typed access to one Kong admin collection.

    Subclasses set ``_endpoint`` to the collection path, ``_entity_name`` to
    the noun used in logs and not-found errors, and ``_model_class`` to the
    model ``T``:

        >>> class APIManager(BaseEntityManager[KongAPI]):
        ...     _endpoint = "apis"
        ...     _entity_name = "api"
        ...     _model_class = KongAPI
    """

    _endpoint: str = ""
    _entity_name: str = ""
    _model_class: type[T]

    def __init__(self, client: KongAdminClient) -> None:
        self._client = client
        self._log = logger.bind(entity=self._entity_name)

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def _path(self, id_or_name: str) -> str:
        return f"{self._endpoint}/{id_or_name}"

    def _parse(self, body: dict[str, Any]) -> T:
        return self._model_class.model_validate(body)

    def list(
        self,
        *,
        limit: int | None = None,
        offset: str | None = None,
        **filters: Any,
    ) -> tuple[list[T], str | None]:
        """Fetch one page of the collection.

        ``limit`` becomes Kong's ``size`` parameter and ``offset`` is the
        token returned by the previous page. Returns the entities together
        with the token for the next page, ``None`` on the last one.
        """
        params: dict[str, Any] = dict(filters)
        if limit:
            params["size"] = limit
        if offset:
            params["offset"] = offset

        self._log.debug("listing_entities", **params)
        page = PaginatedResponse.model_validate(self._client.get(self._endpoint, params=params))
        entities = [self._parse(item) for item in page.data]
        self._log.debug("listed_entities", count=len(entities), has_more=page.has_more)
        return entities, page.offset

    def get(self, id_or_name: str) -> T:
        """Fetch one entity by UUID or name.

        A 404 is re-raised as a ``KongNotFoundError`` that names the entity.
        """
        self._log.debug("getting_entity", id_or_name=id_or_name)
        try:
            body = self._client.get(self._path(id_or_name))
        except KongNotFoundError as e:
            raise KongNotFoundError(
                resource_type=self._entity_name,
                resource_id=id_or_name,
                response_body=e.response_body,
                endpoint=e.endpoint,
            ) from e
        return self._parse(body)

    def create(self, entity: T) -> T:
        """POST ``entity`` and return it as stored, ids and timestamps filled in."""
        payload = entity.to_create_payload()
        self._log.info("creating_entity", **payload)
        created = self._parse(self._client.post(self._endpoint, json=payload))
        self._log.info("created_entity", id=created.id)
        return created

    def update(self, id_or_name: str, entity: T | dict[str, Any]) -> T:
        """PATCH the given fields; a plain dict is sent as-is."""
        payload = entity if isinstance(entity, dict) else entity.to_update_payload()
        self._log.info("updating_entity", id_or_name=id_or_name, **payload)
        updated = self._parse(self._client.patch(self._path(id_or_name), json=payload))
        self._log.info("updated_entity", id=updated.id)
        return updated

    def replace(self, id_or_name: str, entity: T) -> T:
        """PUT the full entity, overwriting whatever Kong holds."""
        payload = entity.to_create_payload()
        self._log.info("replacing_entity", id_or_name=id_or_name, **payload)
        replaced = self._parse(self._client.put(self._path(id_or_name), json=payload))
        self._log.info("replaced_entity", id=replaced.id)
        return replaced

    def delete(self, id_or_name: str) -> None:
        self._log.info("deleting_entity", id_or_name=id_or_name)
        self._client.delete(self._path(id_or_name))

    def exists(self, id_or_name: str) -> bool:
        try:
            self.get(id_or_name)
        except KongNotFoundError:
            return False
        return True
