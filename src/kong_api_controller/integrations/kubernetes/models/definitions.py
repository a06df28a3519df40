"""Typed models for the gateway definition custom resources.

``RouteDefinition`` (kind ``GatewayApi``) describes how a service is exposed
through the gateway; ``PluginDefinition`` (kind ``ApiPlugin``) describes a
plugin attached to a service's API object. Spec field names are kept exactly
as they appear in existing manifests.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from kong_api_controller.integrations.kubernetes.models.base import K8sEntityBase


class RouteDefinitionSpec(BaseModel):
    """Routing fields of a RouteDefinition."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    hosts: list[str] | None = None
    uris: list[str] | None = None
    strip_uri: bool | None = None
    methods: list[str] | None = None
    preserve_host: bool | None = None
    retries: int | None = None
    upstream_connect_timeout: int | None = None
    upstream_send_timeout: int | None = None
    upstream_read_timeout: int | None = None
    https_only: bool | None = None
    http_if_terminated: bool | None = None
    selector: dict[str, str] = Field(default_factory=dict)


class RouteDefinition(K8sEntityBase):
    """A desired gateway route for one backing service."""

    _entity_name: ClassVar[str] = "GatewayApi"

    spec: RouteDefinitionSpec = Field(default_factory=RouteDefinitionSpec)

    @classmethod
    def from_k8s(cls, obj: Mapping[str, Any]) -> RouteDefinition:
        """Build a snapshot from a serialized custom resource."""
        return cls.model_validate({**cls._metadata_fields(obj), "spec": obj.get("spec") or {}})


class PluginDefinitionSpec(BaseModel):
    """Plugin fields of a PluginDefinition.

    ``config`` is passed to the gateway as-is; it is not validated here.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str
    config: dict[str, Any] = Field(default_factory=dict)
    selector: dict[str, str] = Field(default_factory=dict)


class PluginDefinition(K8sEntityBase):
    """A desired gateway plugin for one backing service."""

    _entity_name: ClassVar[str] = "ApiPlugin"

    spec: PluginDefinitionSpec

    @classmethod
    def from_k8s(cls, obj: Mapping[str, Any]) -> PluginDefinition:
        """Build a snapshot from a serialized custom resource."""
        return cls.model_validate({**cls._metadata_fields(obj), "spec": obj.get("spec")})
