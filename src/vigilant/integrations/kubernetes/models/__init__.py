"""Kubernetes resource display models."""

from vigilant.integrations.kubernetes.models.base import (
    TrackedResource,
    format_age,
    resource_key,
)
from vigilant.integrations.kubernetes.models.cluster import EventSummary, HeaderInfo
from vigilant.integrations.kubernetes.models.workloads import (
    ContainerStatus,
    DeploymentSummary,
    PodSummary,
)

__all__ = [
    "ContainerStatus",
    "DeploymentSummary",
    "EventSummary",
    "HeaderInfo",
    "PodSummary",
    "TrackedResource",
    "format_age",
    "resource_key",
]
