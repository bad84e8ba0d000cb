"""Base manager for Kubernetes service managers.

Provides the client reference, entity-bound logging, namespace
resolution, and API error translation shared by every manager.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import structlog

if TYPE_CHECKING:
    from vigilant.integrations.kubernetes.client import KubernetesClient

logger = structlog.get_logger()


class K8sBaseManager:
    """Base class for Kubernetes service managers.

    Subclasses set ``_entity_name`` for structured log context.

    Example:
        >>> class PodAdapter(K8sBaseManager):
        ...     _entity_name = "pods"
    """

    _entity_name: str = ""

    def __init__(self, client: KubernetesClient) -> None:
        """Initialize the manager.

        Args:
            client: Kubernetes API client instance.
        """
        self._client = client
        self._log = logger.bind(entity=self._entity_name)

    @property
    def client(self) -> KubernetesClient:
        return self._client

    def _resolve_namespace(self, namespace: str | None) -> str | None:
        """Resolve namespace, falling back to the configured scope.

        Args:
            namespace: Explicit namespace or None.

        Returns:
            The namespace, or None when the dashboard watches all namespaces.
        """
        return namespace or self._client.namespace

    def _handle_api_error(
        self,
        e: Exception,
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> NoReturn:
        """Translate a Kubernetes API exception and re-raise.

        Raises:
            KubernetesError: Always raises an appropriate subclass.
        """
        translated = self._client.translate_api_exception(
            e,
            resource_type=resource_type,
            resource_name=resource_name,
            namespace=namespace,
        )
        if translated is e:
            raise translated
        raise translated from e
