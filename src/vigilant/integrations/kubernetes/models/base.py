"""Base model for tracked Kubernetes resources."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

KEY_SEPARATOR = "/"


def resource_key(namespace: str | None, name: str) -> str:
    """Build the composite ``namespace/name`` key used for ordering."""
    return f"{namespace or ''}{KEY_SEPARATOR}{name}"


def format_age(created: datetime | None, now: datetime | None = None) -> str:
    """Format the time elapsed since ``created`` the way kubectl does.

    Returns ``<1m`` under a minute, then whole minutes, hours or days.
    """
    if created is None:
        return "Unknown"
    if created.tzinfo is None:
        created = created.replace(tzinfo=UTC)
    delta = (now or datetime.now(UTC)) - created
    seconds = int(delta.total_seconds())
    if seconds < 60:
        return "<1m"
    if seconds < 3600:
        return f"{seconds // 60}m"
    if seconds < 86400:
        return f"{seconds // 3600}h"
    return f"{delta.days}d"


class TrackedResource(BaseModel):
    """Display-ready projection of one cluster object at a point in time.

    Instances are frozen. An update to the underlying object produces a
    new instance that replaces the old one wholesale.
    """

    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    name: str = Field(description="Resource name")
    namespace: str = Field(default="", description="Resource namespace")
    uid: str | None = Field(default=None, description="Kubernetes UID")
    status: str = Field(default="Unknown", description="Display status")
    ready: str = Field(default="0/0", description="Readiness fraction")
    creation_timestamp: datetime | None = Field(default=None, description="Creation time")
    labels: dict[str, str] = Field(default_factory=dict, description="Resource labels")

    kind: ClassVar[str] = "Resource"

    @property
    def key(self) -> str:
        """Composite ``namespace/name`` key."""
        return resource_key(self.namespace, self.name)

    @property
    def age(self) -> str:
        """Human-readable age string."""
        return format_age(self.creation_timestamp)


def _safe_get(obj: Any, *attrs: str, default: Any = None) -> Any:
    """Safely traverse nested attributes on kubernetes SDK objects."""
    current = obj
    for attr in attrs:
        if current is None:
            return default
        current = getattr(current, attr, None)
    return current if current is not None else default


def _get_timestamp(obj: Any) -> datetime | None:
    """Coerce an SDK timestamp (datetime or ISO string) to datetime."""
    if obj is None:
        return None
    if isinstance(obj, datetime):
        return obj
    try:
        return datetime.fromisoformat(str(obj).replace("Z", "+00:00"))
    except ValueError:
        return None


def _get_labels(obj: Any) -> dict[str, str]:
    labels = _safe_get(obj, "metadata", "labels")
    return dict(labels) if labels else {}


def _metadata_fields(obj: Any) -> dict[str, Any]:
    """Identity fields shared by every tracked kind."""
    return {
        "name": _safe_get(obj, "metadata", "name", default=""),
        "namespace": _safe_get(obj, "metadata", "namespace", default=""),
        "uid": _safe_get(obj, "metadata", "uid"),
        "creation_timestamp": _get_timestamp(_safe_get(obj, "metadata", "creation_timestamp")),
        "labels": _get_labels(obj),
    }
