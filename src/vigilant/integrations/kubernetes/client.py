"""Kubernetes API client wrapper.

Wraps the official kubernetes Python client with kubeconfig/in-cluster
loading, lazy API group initialization, retry logic for transient
failures, and consistent error translation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from vigilant.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
    KubernetesValidationError,
)

if TYPE_CHECKING:
    from kubernetes.client import ApiClient, AppsV1Api, CoreV1Api, VersionApi

    from vigilant.integrations.kubernetes.config import KubernetesConfig

logger = structlog.get_logger()

IN_CLUSTER_CONTEXT = "in-cluster"


class KubernetesClient:
    """Kubernetes API client shared by every view.

    Example:
        ```python
        from vigilant.integrations.kubernetes.client import KubernetesClient
        from vigilant.integrations.kubernetes.config import load_config

        with KubernetesClient(load_config()) as client:
            pods = client.core_v1.list_pod_for_all_namespaces()
            print(f"{len(pods.items)} pods")
        ```
    """

    def __init__(self, config: KubernetesConfig) -> None:
        """Initialize the client and load cluster credentials.

        Args:
            config: Resolved dashboard configuration.

        Raises:
            KubernetesConnectionError: If neither a kubeconfig nor an
                in-cluster service account can be loaded.
        """
        self._config = config
        self._retries = max(config.defaults.retry_attempts, 1)
        self._current_context: str | None = None
        self._cluster_name: str | None = None

        self._api_client: ApiClient | None = None
        self._core_v1: CoreV1Api | None = None
        self._apps_v1: AppsV1Api | None = None
        self._version_api: VersionApi | None = None

        self._load_config()

        logger.info(
            "kubernetes_client_initialized",
            context=self._current_context,
            cluster=self._cluster_name,
            namespace=config.namespace or "all",
        )

    def _load_config(self) -> None:
        """Load configuration from kubeconfig, falling back to in-cluster."""
        from kubernetes import config
        from kubernetes.config import ConfigException

        kubeconfig = self._config.kubeconfig
        context = self._config.context

        try:
            config.load_kube_config(config_file=kubeconfig, context=context)
            self._resolve_context_names(kubeconfig, context)
            logger.debug("loaded_kubeconfig", context=self._current_context, kubeconfig=kubeconfig)
        except ConfigException:
            try:
                config.load_incluster_config()
                self._current_context = IN_CLUSTER_CONTEXT
                self._cluster_name = IN_CLUSTER_CONTEXT
                logger.debug("loaded_incluster_config")
            except ConfigException as e:
                raise KubernetesConnectionError(
                    message="Cannot load Kubernetes configuration. "
                    "Ensure kubeconfig exists or running inside a cluster.",
                    original_error=e,
                ) from e

        self._invalidate_api_cache()

    def _resolve_context_names(self, kubeconfig: str | None, context: str | None) -> None:
        """Record the active context and the cluster it points at."""
        from kubernetes import config
        from kubernetes.config import ConfigException

        try:
            contexts, active = config.list_kube_config_contexts(config_file=kubeconfig)
        except ConfigException:
            self._current_context = context
            return

        selected = active
        if context:
            selected = next((c for c in contexts if c.get("name") == context), active)
        if selected:
            self._current_context = selected.get("name")
            self._cluster_name = (selected.get("context") or {}).get("cluster")

    def _invalidate_api_cache(self) -> None:
        """Clear cached API group instances."""
        self._api_client = None
        self._core_v1 = None
        self._apps_v1 = None
        self._version_api = None

    # =========================================================================
    # Lazy API Group Accessors
    # =========================================================================

    @property
    def api_client(self) -> ApiClient:
        """Shared ApiClient, also used to serialize model objects."""
        if self._api_client is None:
            from kubernetes.client import ApiClient

            self._api_client = ApiClient()
        return self._api_client

    @property
    def core_v1(self) -> CoreV1Api:
        """CoreV1Api instance (pods, nodes, events, logs)."""
        if self._core_v1 is None:
            from kubernetes.client import CoreV1Api

            self._core_v1 = CoreV1Api(self.api_client)
        return self._core_v1

    @property
    def apps_v1(self) -> AppsV1Api:
        """AppsV1Api instance (deployments)."""
        if self._apps_v1 is None:
            from kubernetes.client import AppsV1Api

            self._apps_v1 = AppsV1Api(self.api_client)
        return self._apps_v1

    @property
    def version_api(self) -> VersionApi:
        """VersionApi instance for cluster version info."""
        if self._version_api is None:
            from kubernetes.client import VersionApi

            self._version_api = VersionApi(self.api_client)
        return self._version_api

    # =========================================================================
    # Context Information
    # =========================================================================

    def get_current_context(self) -> str:
        """Get the active kubeconfig context name."""
        return self._current_context or "unknown"

    def get_cluster_name(self) -> str:
        """Get the cluster name the active context points at.

        Falls back to the context name when the kubeconfig entry has no
        cluster reference.
        """
        return self._cluster_name or self.get_current_context()

    # =========================================================================
    # Error Translation
    # =========================================================================

    @staticmethod
    def translate_api_exception(
        e: Exception,
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> KubernetesError:
        """Translate a kubernetes ApiException to a KubernetesError.

        Args:
            e: The original exception.
            resource_type: Kind being read.
            resource_name: Name of the object.
            namespace: Namespace of the object.

        Returns:
            An appropriate KubernetesError subclass.
        """
        from kubernetes.client import ApiException
        from urllib3.exceptions import HTTPError

        if isinstance(e, KubernetesError):
            return e

        if isinstance(e, HTTPError | ConnectionError | TimeoutError):
            return KubernetesConnectionError(
                message=f"Cluster unreachable: {e}",
                original_error=e,
            )

        if not isinstance(e, ApiException):
            return KubernetesError(
                message=str(e),
                resource_type=resource_type,
                resource_name=resource_name,
                namespace=namespace,
            )

        status = e.status

        if status in (401, 403):
            return KubernetesAuthError(
                message=e.reason or "Authentication/authorization failed",
                status_code=status,
                reason=e.reason,
                resource_type=resource_type,
            )

        if status == 404:
            return KubernetesNotFoundError(
                resource_type=resource_type,
                resource_name=resource_name,
                namespace=namespace,
            )

        if status in (400, 422):
            return KubernetesValidationError(
                message=e.reason or "Validation failed",
                status_code=status,
                resource_type=resource_type,
            )

        return KubernetesError(
            message=e.reason or f"Kubernetes API error: {status}",
            status_code=status,
            resource_type=resource_type,
            resource_name=resource_name,
            namespace=namespace,
        )

    # =========================================================================
    # Retry Decorator
    # =========================================================================

    def make_retry_decorator(self) -> Any:
        """Create a retry decorator for transient connection errors.

        Returns:
            A tenacity retry decorator configured with exponential backoff.
        """
        return retry(
            retry=retry_if_exception_type(KubernetesConnectionError),
            stop=stop_after_attempt(self._retries),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            reraise=True,
        )

    # =========================================================================
    # Cluster Version
    # =========================================================================

    def get_cluster_version(self) -> str:
        """Get the Kubernetes server git version (e.g. "v1.29.2").

        Raises:
            KubernetesConnectionError: If the cluster is unreachable.
        """
        try:
            version_info = self.version_api.get_code()
        except Exception as e:
            raise KubernetesConnectionError(
                message="Failed to get cluster version",
                original_error=e,
            ) from e
        return version_info.git_version or f"v{version_info.major}.{version_info.minor}"

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def namespace(self) -> str | None:
        """Namespace to list and watch, or None for all namespaces."""
        return self._config.namespace

    @property
    def timeout(self) -> int:
        """Request timeout in seconds."""
        return self._config.defaults.timeout

    @property
    def watch_timeout(self) -> int:
        """Server-side watch timeout in seconds."""
        return self._config.defaults.watch_timeout_seconds

    @property
    def config(self) -> KubernetesConfig:
        """The configuration this client was built from."""
        return self._config

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Close the underlying connection pool."""
        if self._api_client is not None:
            self._api_client.close()
        self._invalidate_api_cache()
        logger.debug("kubernetes_client_closed")

    def __enter__(self) -> KubernetesClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
