"""Errors raised by the Kubernetes client wrapper."""

from __future__ import annotations


class KubernetesError(Exception):
    """Root of every cluster-side failure.

    ``resource_type``, ``resource_name`` and ``namespace`` locate the object
    involved when one is known; they show up in ``str()`` as
    ``[Kind/name in namespace]``.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.resource_type = resource_type
        self.resource_name = resource_name
        self.namespace = namespace

    def __str__(self) -> str:
        text = self.message
        if self.status_code:
            text += f" (status: {self.status_code})"
        if self.resource_type and self.resource_name:
            where = f"{self.resource_type}/{self.resource_name}"
            if self.namespace:
                where += f" in {self.namespace}"
            text += f" [{where}]"
        return text


class KubernetesConnectionError(KubernetesError):
    """No usable kubeconfig, or the API server stopped answering."""

    def __init__(
        self,
        message: str = "Kubernetes API server unreachable",
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.original_error = original_error


class KubernetesAuthError(KubernetesError):
    """401 or 403; usually a missing RBAC rule for services or the custom resources."""

    def __init__(
        self,
        message: str = "Kubernetes API denied the request",
        status_code: int | None = 401,
        reason: str | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.reason = reason


class KubernetesNotFoundError(KubernetesError):
    def __init__(
        self,
        message: str = "Kubernetes object not found",
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> None:
        if resource_type and resource_name:
            message = f"{resource_type} '{resource_name}' not found"
            if namespace:
                message += f" in namespace '{namespace}'"
        super().__init__(message, 404, resource_type, resource_name, namespace)


class KubernetesValidationError(KubernetesError):
    """400 or 422 from the API server."""

    def __init__(
        self,
        message: str = "Kubernetes API rejected the request",
        status_code: int | None = 422,
    ) -> None:
        super().__init__(message, status_code=status_code)


class KubernetesGoneError(KubernetesError):
    """410: the watch's resourceVersion has been compacted away.

    Watchers recover by relisting.
    """

    def __init__(
        self,
        message: str = "Watch resource version expired",
        resource_type: str | None = None,
        namespace: str | None = None,
    ) -> None:
        super().__init__(message, 410, resource_type, namespace=namespace)


class LabelSelectorError(KubernetesError, ValueError):
    """A selector requirement with an invalid key, value or operator.

    Raised while building selectors from configured label names, so it
    surfaces at startup or when a bad definition is processed.
    """

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key
