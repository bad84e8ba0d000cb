"""List/watch adapters for the resource types the dashboard tracks.

An adapter is everything a ResourceSynchronizer needs to know about one
kind: how to list it, how to open a watch from a resource version, how
to recognise its objects, and how to project them into display models.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from vigilant.integrations.kubernetes.models.base import TrackedResource, _safe_get, resource_key
from vigilant.integrations.kubernetes.models.workloads import DeploymentSummary, PodSummary
from vigilant.services.kubernetes.base import K8sBaseManager

if TYPE_CHECKING:
    from kubernetes.watch import Watch

    from vigilant.integrations.kubernetes.client import KubernetesClient

V = TypeVar("V", bound=TrackedResource)


class EventType(StrEnum):
    """Watch event types that mutate the collection."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"


@dataclass(frozen=True)
class WatchEvent:
    """One change delivered by a watch stream."""

    type: str
    object: Any


@dataclass(frozen=True)
class ListResult:
    """Full listing of a kind plus the version to resume watching from."""

    items: list[Any] = field(default_factory=list)
    resource_version: str | None = None


class WatchStream:
    """Iterable of WatchEvents backed by ``kubernetes.watch.Watch``.

    The stream is opened lazily on first iteration. ``timeout_seconds`` is
    always passed, which makes the client library end the stream when the
    server closes it instead of silently re-listing.

    ``Watch.stream`` clears the watch's own stop flag when it starts, so the
    stop request is also kept here and checked around every event. A stream
    stopped while blocked on the HTTP read ends at the next event or at the
    server-side timeout.
    """

    def __init__(self, watch: Watch, func: Callable[..., Any], **kwargs: Any) -> None:
        self._watch = watch
        self._func = func
        self._kwargs = kwargs
        self._stopped = False

    @property
    def stopped(self) -> bool:
        return self._stopped

    def __iter__(self) -> Iterator[WatchEvent]:
        if self._stopped:
            return
        for raw in self._watch.stream(self._func, **self._kwargs):
            if self._stopped:
                self._watch.stop()
                return
            yield WatchEvent(type=raw.get("type", ""), object=raw.get("object"))

    def stop(self) -> None:
        """Ask the underlying watch to end after the current event."""
        self._stopped = True
        self._watch.stop()


class ResourceAdapter(K8sBaseManager, ABC, Generic[V]):
    """List/watch/project operations for one resource kind.

    Subclasses provide the API calls and the projection; namespace scoping
    comes from the client configuration (None watches every namespace).
    """

    resource_name: ClassVar[str] = ""
    kind: ClassVar[str] = ""

    def __init__(self, client: KubernetesClient) -> None:
        super().__init__(client)
        self._namespace = client.namespace

    @property
    def namespace(self) -> str | None:
        return self._namespace

    @property
    @abstractmethod
    def object_type(self) -> type:
        """SDK model class watch events must carry."""

    @abstractmethod
    def _list_func(self) -> Callable[..., Any]:
        """API method matching the namespace scope."""

    @abstractmethod
    def project(self, obj: Any) -> V:
        """Convert an SDK object into its display model."""

    def key_of(self, obj: Any) -> str:
        """Composite ``namespace/name`` key of an SDK object."""
        return resource_key(
            _safe_get(obj, "metadata", "namespace", default=""),
            _safe_get(obj, "metadata", "name", default=""),
        )

    def _scope_kwargs(self) -> dict[str, Any]:
        return {"namespace": self._namespace} if self._namespace else {}

    def list(self) -> ListResult:
        """List every object of this kind in scope.

        Raises:
            KubernetesError: If the API call fails.
        """
        self._log.debug("listing", namespace=self._namespace or "all")
        try:
            result = self._list_func()(
                **self._scope_kwargs(), _request_timeout=self._client.timeout
            )
        except Exception as e:
            self._handle_api_error(e, self.kind, namespace=self._namespace)

        items = list(result.items or [])
        resource_version = _safe_get(result, "metadata", "resource_version")
        self._log.debug("listed", count=len(items), resource_version=resource_version)
        return ListResult(items=items, resource_version=resource_version)

    def watch(self, resource_version: str | None) -> WatchStream:
        """Prepare a watch stream starting after ``resource_version``."""
        from kubernetes import watch

        kwargs = self._scope_kwargs()
        kwargs["timeout_seconds"] = self._client.watch_timeout
        if resource_version:
            kwargs["resource_version"] = resource_version
        self._log.debug("opening_watch", resource_version=resource_version)
        return WatchStream(watch.Watch(), self._list_func(), **kwargs)


class PodAdapter(ResourceAdapter[PodSummary]):
    """Pods, projected to PodSummary."""

    _entity_name = "pods"
    resource_name = "pods"
    kind = "Pod"

    @property
    def object_type(self) -> type:
        from kubernetes.client import V1Pod

        return V1Pod

    def _list_func(self) -> Callable[..., Any]:
        core_v1 = self._client.core_v1
        if self._namespace:
            return core_v1.list_namespaced_pod
        return core_v1.list_pod_for_all_namespaces

    def project(self, obj: Any) -> PodSummary:
        return PodSummary.from_k8s_object(obj)


class DeploymentAdapter(ResourceAdapter[DeploymentSummary]):
    """Deployments, projected to DeploymentSummary."""

    _entity_name = "deployments"
    resource_name = "deployments"
    kind = "Deployment"

    @property
    def object_type(self) -> type:
        from kubernetes.client import V1Deployment

        return V1Deployment

    def _list_func(self) -> Callable[..., Any]:
        apps_v1 = self._client.apps_v1
        if self._namespace:
            return apps_v1.list_namespaced_deployment
        return apps_v1.list_deployment_for_all_namespaces

    def project(self, obj: Any) -> DeploymentSummary:
        return DeploymentSummary.from_k8s_object(obj)
