"""Kubernetes integration - API client and configuration models."""

from vigilant.integrations.kubernetes.client import KubernetesClient
from vigilant.integrations.kubernetes.config import (
    KubernetesConfig,
    KubernetesDefaultsConfig,
    load_config,
)
from vigilant.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
    KubernetesValidationError,
)

__all__ = [
    "KubernetesAuthError",
    "KubernetesClient",
    "KubernetesConfig",
    "KubernetesConnectionError",
    "KubernetesDefaultsConfig",
    "KubernetesError",
    "KubernetesNotFoundError",
    "KubernetesValidationError",
    "load_config",
]
