"""Base models for Kong entities.

All Kong entities share the server-assigned ``id`` and ``created_at`` fields
and the same payload conventions: server-assigned fields and unset values are
never sent back to the Admin API.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

SERVER_ASSIGNED_FIELDS = frozenset({"id", "created_at"})


class KongEntityBase(BaseModel):
    """Fields Kong assigns to every stored entity: a UUID ``id`` and a
    millisecond ``created_at`` timestamp. Both are left out of request bodies.
    """

    # Responses from older or newer Kong nodes may carry fields we do not model
    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    id: str | None = None
    created_at: int | None = None

    _entity_name: ClassVar[str] = "entity"

    def to_create_payload(self) -> dict[str, Any]:
        """Body for POST or PUT: everything set, minus the server-assigned fields."""
        return {
            k: v
            for k, v in self.model_dump(exclude=set(SERVER_ASSIGNED_FIELDS)).items()
            if v is not None
        }

    def to_update_payload(self) -> dict[str, Any]:
        # Unset fields are already dropped, so PATCH sends the same body.
        return self.to_create_payload()


class PaginatedResponse(BaseModel):
    """One page of a Kong collection listing.

    ``offset`` (or ``next``, a ready-made URL) is present while more pages
    remain. ``total`` is only reported by older Kong releases.
    """

    model_config = ConfigDict(extra="ignore")

    data: list[dict[str, Any]] = Field(default_factory=list)
    total: int | None = None
    next: str | None = None
    offset: str | None = None

    @property
    def has_more(self) -> bool:
        return self.offset is not None or self.next is not None
