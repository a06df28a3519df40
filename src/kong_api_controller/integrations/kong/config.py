"""Settings for reaching the Kong admin API."""

from __future__ import annotations

import os
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class KongConnectionConfig(BaseModel):
    """Where the admin API lives and how patiently to talk to it.

    ``retries`` counts total attempts for a request that fails to connect;
    ``0`` and ``1`` both mean a single attempt.
    """

    model_config = ConfigDict(extra="forbid")

    base_url: str = "http://kong:8001"
    timeout: int = Field(default=30, gt=0)
    verify_ssl: bool = True
    retries: int = Field(default=3, ge=0)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url needs an http:// or https:// scheme")
        return v.rstrip("/")


class KongAuthConfig(BaseModel):
    """Credentials for a protected admin API: a token header or a client certificate."""

    model_config = ConfigDict(extra="forbid")

    type: Literal["none", "api_key", "mtls"] = "none"
    api_key: str | None = None
    header_name: str = "Kong-Admin-Token"
    cert_path: str | None = None
    key_path: str | None = None
    ca_path: str | None = None


class KongConfig(BaseModel):
    """The ``kong`` section of the controller configuration."""

    model_config = ConfigDict(extra="forbid")

    connection: KongConnectionConfig = KongConnectionConfig()
    auth: KongAuthConfig = KongAuthConfig()

    @classmethod
    def from_env(cls, base_config: dict[str, Any] | None = None) -> KongConfig:
        """Validate ``base_config`` after applying ``KAC_KONG_*`` overrides.

        ``KAC_KONG_BASE_URL`` replaces the admin URL. ``KAC_KONG_API_KEY`` sets
        the token and, unless a type was already chosen, switches auth to
        ``api_key``. ``KAC_KONG_AUTH_TYPE`` is applied last and always wins.
        """
        data = dict(base_config or {})
        connection = data["connection"] = dict(data.get("connection") or {})
        auth = data["auth"] = dict(data.get("auth") or {})

        if base_url := os.environ.get("KAC_KONG_BASE_URL"):
            connection["base_url"] = base_url

        if api_key := os.environ.get("KAC_KONG_API_KEY"):
            auth["api_key"] = api_key
            if auth.get("type", "none") == "none":
                auth["type"] = "api_key"

        if auth_type := os.environ.get("KAC_KONG_AUTH_TYPE"):
            auth["type"] = auth_type

        return cls.model_validate(data)
