"""Typed lifecycle events passed from watchers to controllers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class EventType(StrEnum):
    """Lifecycle event types, named as the watch API names them."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"


@dataclass(frozen=True)
class ResourceEvent[T]:
    """A single lifecycle event for one resource snapshot."""

    type: EventType
    kind: str
    obj: T

    @property
    def name(self) -> str:
        return getattr(self.obj, "name", "")


@dataclass(frozen=True)
class ResourceUpdateEvent[T]:
    """A modification carrying the previous and current snapshots."""

    kind: str
    old: T
    new: T

    @property
    def type(self) -> EventType:
        return EventType.MODIFIED

    @property
    def name(self) -> str:
        return getattr(self.new, "name", "")
