"""Reconciliation exceptions.

These describe why a single reconciliation could not complete. The
controller loop logs them and moves on to the next event.
"""

from __future__ import annotations


class ReconcileError(Exception):
    """Base exception for reconciliation failures.

    Attributes:
        message: Human-readable error message.
        resource_type: Kind of the resource being reconciled.
        resource_name: Name of the resource being reconciled.
    """

    def __init__(
        self,
        message: str,
        resource_type: str | None = None,
        resource_name: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.resource_type = resource_type
        self.resource_name = resource_name

    def __str__(self) -> str:
        if self.resource_type and self.resource_name:
            return f"{self.message} [{self.resource_type}/{self.resource_name}]"
        return self.message


class ServiceNotFoundError(ReconcileError):
    """A selector resolved to no backing service."""

    def __init__(self, selector: str, namespace: str | None = None) -> None:
        message = f"no service matches selector '{selector}'"
        if namespace:
            message += f" in namespace '{namespace}'"
        super().__init__(message=message, resource_type="Service")
        self.selector = selector
        self.namespace = namespace


class ServiceHasNoPortsError(ReconcileError):
    """A backing service has no cluster address or no declared port."""

    def __init__(self, service_name: str) -> None:
        super().__init__(
            message="service has no cluster address or declared port",
            resource_type="Service",
            resource_name=service_name,
        )


class MissingSelectorError(ReconcileError):
    """A definition lacks the configured selector key."""

    def __init__(self, resource_type: str, resource_name: str, key: str) -> None:
        super().__init__(
            message=f"selector key '{key}' is missing",
            resource_type=resource_type,
            resource_name=resource_name,
        )
        self.key = key
