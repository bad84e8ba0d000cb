"""Live object details for the describe screen."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import yaml

from vigilant.integrations.kubernetes.models.base import TrackedResource
from vigilant.integrations.kubernetes.models.cluster import EventSummary
from vigilant.integrations.kubernetes.models.workloads import DeploymentSummary, PodSummary
from vigilant.services.kubernetes.base import K8sBaseManager

EVENTS_LIMIT = 20

# Fields that make the YAML unreadable without adding anything for an operator
_NOISY_METADATA = ("managedFields",)


@dataclass
class DescribeResult:
    """Everything the describe screen shows for one object."""

    kind: str
    summary: TrackedResource
    manifest: str
    events: list[EventSummary] = field(default_factory=list)


class DescribeManager(K8sBaseManager):
    """Fetches a single pod or deployment plus the events that mention it."""

    _entity_name = "describe"

    def describe_pod(self, name: str, namespace: str) -> DescribeResult:
        """Read a pod and its events.

        Raises:
            KubernetesNotFoundError: If the pod no longer exists.
        """
        try:
            pod = self._client.core_v1.read_namespaced_pod(name=name, namespace=namespace)
        except Exception as e:
            self._handle_api_error(e, "Pod", name, namespace)
        return DescribeResult(
            kind="Pod",
            summary=PodSummary.from_k8s_object(pod),
            manifest=self.to_yaml(pod),
            events=self.list_events("Pod", name, namespace),
        )

    def describe_deployment(self, name: str, namespace: str) -> DescribeResult:
        """Read a deployment and its events.

        Raises:
            KubernetesNotFoundError: If the deployment no longer exists.
        """
        try:
            deployment = self._client.apps_v1.read_namespaced_deployment(
                name=name, namespace=namespace
            )
        except Exception as e:
            self._handle_api_error(e, "Deployment", name, namespace)
        return DescribeResult(
            kind="Deployment",
            summary=DeploymentSummary.from_k8s_object(deployment),
            manifest=self.to_yaml(deployment),
            events=self.list_events("Deployment", name, namespace),
        )

    def describe(self, resource: TrackedResource) -> DescribeResult:
        """Dispatch on the resource model's kind."""
        if isinstance(resource, PodSummary):
            return self.describe_pod(resource.name, resource.namespace)
        if isinstance(resource, DeploymentSummary):
            return self.describe_deployment(resource.name, resource.namespace)
        raise ValueError(f"Cannot describe {resource.kind} resources")

    def list_events(self, kind: str, name: str, namespace: str) -> list[EventSummary]:
        """Newest-first events whose involved object is ``kind/name``.

        Event lookup failures are logged and produce an empty list; the
        object itself is still worth showing.
        """
        selector = f"involvedObject.kind={kind},involvedObject.name={name}"
        try:
            result = self._client.core_v1.list_namespaced_event(
                namespace=namespace, field_selector=selector
            )
        except Exception as e:
            self._log.warning("events_lookup_failed", kind=kind, name=name, error=str(e))
            return []

        events = [EventSummary.from_k8s_object(item) for item in result.items or []]
        events.sort(
            key=lambda evt: evt.last_timestamp.timestamp() if evt.last_timestamp else 0.0,
            reverse=True,
        )
        return events[:EVENTS_LIMIT]

    def to_yaml(self, obj: Any) -> str:
        """Serialize an SDK object to YAML using API field names."""
        data = self._client.api_client.sanitize_for_serialization(obj)
        if isinstance(data, dict):
            metadata = data.get("metadata") or {}
            for key in _NOISY_METADATA:
                metadata.pop(key, None)
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
