"""Pydantic model for Kong API objects.

An API object maps incoming requests (by host, URI prefix or method) to a
single ``upstream_url``. The controller names every API object after the
Kubernetes service that backs it, so the name doubles as the lookup key.
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import Field

from kong_api_controller.integrations.kong.models.base import KongEntityBase


class KongAPI(KongEntityBase):
    """Kong API entity model.

    Attributes:
        name: API name, always the backing service's name.
        hosts: Host headers to match.
        uris: URI prefixes to match.
        methods: HTTP methods to match.
        upstream_url: Address requests are proxied to.
        strip_uri: Strip the matched URI prefix before proxying.
        preserve_host: Forward the client's Host header upstream.
        retries: Number of retries on proxy failure.
        upstream_connect_timeout: Connect timeout in milliseconds.
        upstream_send_timeout: Send timeout in milliseconds.
        upstream_read_timeout: Read timeout in milliseconds.
        https_only: Only accept HTTPS requests.
        http_if_terminated: Trust X-Forwarded-Proto when https_only is set.
    """

    _entity_name: ClassVar[str] = "api"

    name: str = Field(description="API name (equal to the backing service name)")
    hosts: list[str] | None = Field(default=None, description="Hosts to match")
    uris: list[str] | None = Field(default=None, description="URI prefixes to match")
    methods: list[str] | None = Field(default=None, description="HTTP methods to match")
    upstream_url: str = Field(description="Upstream address")
    strip_uri: bool | None = None
    preserve_host: bool | None = None
    retries: int | None = None
    upstream_connect_timeout: int | None = None
    upstream_send_timeout: int | None = None
    upstream_read_timeout: int | None = None
    https_only: bool | None = None
    http_if_terminated: bool | None = None
