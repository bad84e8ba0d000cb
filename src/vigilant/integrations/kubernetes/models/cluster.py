"""Cluster-level display models: header summary and object events."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from vigilant.integrations.kubernetes.models.base import _get_timestamp, _safe_get, format_age

UNKNOWN = "Unknown"


class HeaderInfo(BaseModel):
    """Cluster facts shown in the dashboard header."""

    model_config = ConfigDict(frozen=True)

    cluster_name: str = UNKNOWN
    kubernetes_version: str = UNKNOWN
    control_plane_nodes: int = 0
    worker_nodes: int = 0


class EventSummary(BaseModel):
    """Event related to a described object."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    type: str = Field(default="Normal", description="Event type (Normal/Warning)")
    reason: str = Field(default="", description="Event reason")
    message: str = Field(default="", description="Event message")
    source_component: str | None = Field(default=None, description="Reporting component")
    count: int = Field(default=1, description="Occurrence count")
    last_timestamp: datetime | None = Field(default=None, description="Last occurrence")

    @property
    def age(self) -> str:
        return format_age(self.last_timestamp)

    @classmethod
    def from_k8s_object(cls, obj: Any) -> EventSummary:
        """Create from a kubernetes CoreV1Event object."""
        last = (
            getattr(obj, "last_timestamp", None)
            or getattr(obj, "event_time", None)
            or _safe_get(obj, "metadata", "creation_timestamp")
        )
        return cls(
            type=getattr(obj, "type", None) or "Normal",
            reason=getattr(obj, "reason", None) or "",
            message=(getattr(obj, "message", None) or "").strip(),
            source_component=_safe_get(obj, "source", "component"),
            count=getattr(obj, "count", None) or 1,
            last_timestamp=_get_timestamp(last),
        )
