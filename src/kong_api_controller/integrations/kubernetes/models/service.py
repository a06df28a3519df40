"""Typed model for Kubernetes Service resources."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from kong_api_controller.integrations.kubernetes.models.base import K8sEntityBase


class ServicePort(BaseModel):
    """A single declared service port."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str | None = None
    port: int


class ServiceResource(K8sEntityBase):
    """A backend service as seen in the cluster.

    Attributes:
        cluster_ip: Cluster-internal address.
        ports: Declared ports, in declaration order.
    """

    _entity_name: ClassVar[str] = "Service"

    cluster_ip: str | None = Field(default=None, description="Cluster-internal address")
    ports: tuple[ServicePort, ...] = Field(default=(), description="Declared ports")

    @classmethod
    def from_k8s(cls, obj: Mapping[str, Any]) -> ServiceResource:
        """Build a snapshot from a serialized ``v1.Service``.

        Raises:
            pydantic.ValidationError: If required fields are missing.
            ValueError: If the object is not shaped like a resource.
        """
        spec = obj.get("spec") or {}
        return cls.model_validate(
            {
                **cls._metadata_fields(obj),
                "cluster_ip": spec.get("clusterIP"),
                "ports": spec.get("ports") or [],
            }
        )

    def upstream_address(self) -> str | None:
        """Return ``<cluster address>:<first port>``, or None without ports.

        Only the first declared port is used, whatever the service exposes.
        """
        if not self.ports or not self.cluster_ip:
            return None
        return f"{self.cluster_ip}:{self.ports[0].port}"
