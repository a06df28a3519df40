"""Base models for Kubernetes resources consumed by the controllers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field


class ResourceKind(BaseModel):
    """Identifies a resource collection in the cluster.

    Core resources (``group == ""``) are served by the core API; anything
    with a group is treated as a custom resource.

    Attributes:
        kind: Resource kind (e.g., "Service", "GatewayApi").
        plural: Plural collection name used in API paths.
        group: API group, empty for the core group.
        version: API version.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: str
    plural: str
    group: str = ""
    version: str = "v1"

    @property
    def is_core(self) -> bool:
        """Whether this kind belongs to the core API group."""
        return not self.group

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version

    def __str__(self) -> str:
        return f"{self.plural}.{self.group}" if self.group else self.plural


SERVICE_KIND = ResourceKind(kind="Service", plural="services")


class K8sEntityBase(BaseModel):
    """Base class for typed Kubernetes resource snapshots.

    Snapshots are immutable: the watcher keeps the previous one around to
    report before/after pairs.
    """

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )

    name: str = Field(description="Resource name")
    namespace: str | None = Field(default=None, description="Resource namespace")
    uid: str | None = Field(default=None, description="Kubernetes UID")
    resource_version: str | None = Field(default=None, description="Resource version")
    labels: dict[str, str] = Field(default_factory=dict, description="Resource labels")

    _entity_name: ClassVar[str] = "entity"

    @staticmethod
    def _metadata_fields(obj: Mapping[str, Any]) -> dict[str, Any]:
        """Extract the common metadata fields from a serialized resource.

        Raises:
            ValueError: If the object has no metadata block.
        """
        metadata = obj.get("metadata")
        if not isinstance(metadata, Mapping):
            raise ValueError("resource has no metadata")
        return {
            "name": metadata.get("name"),
            "namespace": metadata.get("namespace"),
            "uid": metadata.get("uid"),
            "resource_version": metadata.get("resourceVersion"),
            "labels": metadata.get("labels") or {},
        }
