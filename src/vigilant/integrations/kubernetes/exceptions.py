"""Errors raised by the Kubernetes integration."""

from __future__ import annotations


class KubernetesError(Exception):
    """Base exception for cluster reads.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code from the API server, if any.
        resource_type: Kind involved (e.g. "Pod", "Deployment").
        resource_name: Name of the object involved.
        namespace: Namespace of the object involved.
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
        parts = [self.message]
        if self.status_code:
            parts.append(f"(status: {self.status_code})")
        if self.resource_type:
            target = self.resource_type
            if self.resource_name:
                target += f"/{self.resource_name}"
            if self.namespace:
                target += f" in {self.namespace}"
            parts.append(f"[{target}]")
        return " ".join(parts)


class KubernetesConnectionError(KubernetesError):
    """The API server could not be reached or no kubeconfig was usable."""

    def __init__(
        self,
        message: str = "Failed to connect to Kubernetes cluster",
        original_error: Exception | None = None,
    ) -> None:
        """Initialize KubernetesConnectionError.

        Args:
            message: Human-readable error message.
            original_error: The underlying exception.
        """
        super().__init__(message=message)
        self.original_error = original_error


class KubernetesAuthError(KubernetesError):
    """Credentials were rejected or RBAC denied the request (401/403)."""

    def __init__(
        self,
        message: str = "Kubernetes authentication/authorization failed",
        status_code: int | None = 401,
        reason: str | None = None,
        resource_type: str | None = None,
    ) -> None:
        super().__init__(message=message, status_code=status_code, resource_type=resource_type)
        self.reason = reason


class KubernetesNotFoundError(KubernetesError):
    """The requested object does not exist (404)."""

    def __init__(
        self,
        message: str = "Kubernetes resource not found",
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> None:
        if resource_type and resource_name:
            message = f"{resource_type} '{resource_name}' not found"
            if namespace:
                message += f" in namespace '{namespace}'"
        super().__init__(
            message=message,
            status_code=404,
            resource_type=resource_type,
            resource_name=resource_name,
            namespace=namespace,
        )


class KubernetesValidationError(KubernetesError):
    """The API server rejected the request parameters (400/422).

    For a read-only dashboard this usually means a malformed label or
    field selector, or a log request for a container that does not exist.
    """

    def __init__(
        self,
        message: str = "Invalid request",
        status_code: int | None = 422,
        resource_type: str | None = None,
    ) -> None:
        super().__init__(message=message, status_code=status_code, resource_type=resource_type)
