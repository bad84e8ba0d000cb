"""Pod and deployment display models."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from vigilant.integrations.kubernetes.models.base import (
    TrackedResource,
    _metadata_fields,
    _safe_get,
)

DEFAULT_STRATEGY = "RollingUpdate"
NO_IMAGE = "N/A"


class ContainerStatus(BaseModel):
    """Container status within a pod."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str = Field(description="Container name")
    image: str | None = Field(default=None, description="Container image")
    ready: bool = Field(default=False, description="Whether container is ready")
    restart_count: int = Field(default=0, description="Number of restarts")
    state: str = Field(default="unknown", description="Current state")

    @classmethod
    def from_k8s_object(cls, obj: Any) -> ContainerStatus:
        """Create from a kubernetes V1ContainerStatus object."""
        state = "unknown"
        if obj_state := getattr(obj, "state", None):
            if getattr(obj_state, "running", None):
                state = "running"
            elif getattr(obj_state, "waiting", None):
                state = str(_safe_get(obj_state, "waiting", "reason", default="Waiting"))
            elif getattr(obj_state, "terminated", None):
                state = str(_safe_get(obj_state, "terminated", "reason", default="Terminated"))

        return cls(
            name=getattr(obj, "name", "") or "",
            image=getattr(obj, "image", None),
            ready=getattr(obj, "ready", False) or False,
            restart_count=getattr(obj, "restart_count", 0) or 0,
            state=state,
        )


def _pod_status(obj: Any, containers: list[ContainerStatus]) -> str:
    """Derive the STATUS column the way kubectl does.

    The phase is overridden by a non-running container reason such as
    CrashLoopBackOff, and by Terminating once a deletion is pending.
    """
    if _safe_get(obj, "metadata", "deletion_timestamp") is not None:
        return "Terminating"
    for container in containers:
        if container.state not in ("running", "unknown", "Completed"):
            return container.state
    return _safe_get(obj, "status", "reason") or _safe_get(obj, "status", "phase", default="Unknown")


class PodSummary(TrackedResource):
    """Pod display model."""

    kind: ClassVar[str] = "Pod"

    restarts: int = Field(default=0, description="Total container restarts")
    pod_ip: str | None = Field(default=None, description="Pod IP address")
    node_name: str | None = Field(default=None, description="Node the pod is scheduled on")
    containers: tuple[ContainerStatus, ...] = Field(default=(), description="Container statuses")

    @property
    def container_names(self) -> list[str]:
        """Names of the pod's containers, in status order."""
        return [c.name for c in self.containers if c.name]

    @classmethod
    def from_k8s_object(cls, obj: Any) -> PodSummary:
        """Create from a kubernetes V1Pod object."""
        statuses = _safe_get(obj, "status", "container_statuses") or []
        containers = [ContainerStatus.from_k8s_object(cs) for cs in statuses]
        spec_containers = _safe_get(obj, "spec", "containers") or []
        if not containers:
            containers = [
                ContainerStatus(name=c.name, image=getattr(c, "image", None))
                for c in spec_containers
            ]
        ready_count = sum(1 for c in containers if c.ready)

        return cls(
            **_metadata_fields(obj),
            status=_pod_status(obj, containers),
            ready=f"{ready_count}/{len(spec_containers)}",
            restarts=sum(c.restart_count for c in containers),
            pod_ip=_safe_get(obj, "status", "pod_ip"),
            node_name=_safe_get(obj, "spec", "node_name"),
            containers=tuple(containers),
        )


def deployment_status(replicas: int, ready: int, available: int) -> str:
    """Summarize deployment rollout state in one word."""
    if replicas == 0:
        return "Scaled to 0"
    if ready == replicas:
        return "Ready"
    if available > 0:
        return "Available"
    return "Not Ready"


class DeploymentSummary(TrackedResource):
    """Deployment display model."""

    kind: ClassVar[str] = "Deployment"

    replicas: int = Field(default=0, description="Current replicas")
    up_to_date: int = Field(default=0, description="Replicas on the latest template")
    available: int = Field(default=0, description="Available replicas")
    strategy: str = Field(default=DEFAULT_STRATEGY, description="Rollout strategy")
    image: str = Field(default=NO_IMAGE, description="First container image")

    @classmethod
    def from_k8s_object(cls, obj: Any) -> DeploymentSummary:
        """Create from a kubernetes V1Deployment object."""
        replicas = _safe_get(obj, "status", "replicas", default=0)
        ready = _safe_get(obj, "status", "ready_replicas", default=0)
        available = _safe_get(obj, "status", "available_replicas", default=0)

        strategy = DEFAULT_STRATEGY
        if _safe_get(obj, "spec", "strategy", "type") == "Recreate":
            strategy = "Recreate"

        containers = _safe_get(obj, "spec", "template", "spec", "containers") or []
        image = (getattr(containers[0], "image", None) if containers else None) or NO_IMAGE

        return cls(
            **_metadata_fields(obj),
            status=deployment_status(replicas, ready, available),
            ready=f"{ready}/{replicas}",
            replicas=replicas,
            up_to_date=_safe_get(obj, "status", "updated_replicas", default=0),
            available=available,
            strategy=strategy,
            image=image,
        )
