"""Kubernetes services: synchronization engine and read-only managers."""

from vigilant.services.kubernetes.adapters import (
    DeploymentAdapter,
    EventType,
    ListResult,
    PodAdapter,
    ResourceAdapter,
    WatchEvent,
    WatchStream,
)
from vigilant.services.kubernetes.cluster_info import ClusterInfoManager
from vigilant.services.kubernetes.describe_manager import DescribeManager, DescribeResult
from vigilant.services.kubernetes.notifier import ChangeChannel, ChangeNotifier
from vigilant.services.kubernetes.streaming_manager import StreamingManager
from vigilant.services.kubernetes.synchronizer import ResourceSynchronizer, SyncState

__all__ = [
    "ChangeChannel",
    "ChangeNotifier",
    "ClusterInfoManager",
    "DeploymentAdapter",
    "DescribeManager",
    "DescribeResult",
    "EventType",
    "ListResult",
    "PodAdapter",
    "ResourceAdapter",
    "ResourceSynchronizer",
    "StreamingManager",
    "SyncState",
    "WatchEvent",
    "WatchStream",
]
