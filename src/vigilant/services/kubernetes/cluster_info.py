"""Cluster facts for the dashboard header."""

from __future__ import annotations

from typing import Any

from vigilant.integrations.kubernetes.exceptions import KubernetesConnectionError, KubernetesError
from vigilant.integrations.kubernetes.models.cluster import UNKNOWN, HeaderInfo
from vigilant.services.kubernetes.base import K8sBaseManager

CONTROL_PLANE_LABEL = "node-role.kubernetes.io/control-plane"
LEGACY_MASTER_LABEL = "node-role.kubernetes.io/master"
WORKER_SELECTOR = f"!{CONTROL_PLANE_LABEL},!{LEGACY_MASTER_LABEL}"


class ClusterInfoManager(K8sBaseManager):
    """Builds the HeaderInfo shown above every view.

    Each fact is fetched independently; one that fails is shown as
    unknown/zero rather than hiding the rest.
    """

    _entity_name = "cluster_info"

    def get_header_info(self) -> HeaderInfo:
        """Collect cluster name, server version and node counts."""
        info = HeaderInfo(
            cluster_name=self._client.get_cluster_name(),
            kubernetes_version=self._server_version(),
            control_plane_nodes=self._control_plane_count(),
            worker_nodes=self._count_nodes(WORKER_SELECTOR),
        )
        self._log.debug("header_info_loaded", **info.model_dump())
        return info

    def _server_version(self) -> str:
        fetch = self._client.make_retry_decorator()(self._client.get_cluster_version)
        try:
            return fetch()
        except KubernetesConnectionError as e:
            self._log.warning("server_version_unavailable", error=str(e))
            return UNKNOWN

    def _control_plane_count(self) -> int:
        count = self._count_nodes(CONTROL_PLANE_LABEL)
        if count == 0:
            count = self._count_nodes(LEGACY_MASTER_LABEL)
        return count

    def _count_nodes(self, label_selector: str) -> int:
        try:
            return len(self._list_nodes(label_selector).items or [])
        except KubernetesError as e:
            self._log.warning("node_count_unavailable", selector=label_selector, error=str(e))
            return 0

    def _list_nodes(self, label_selector: str) -> Any:
        try:
            return self._client.core_v1.list_node(
                label_selector=label_selector, _request_timeout=self._client.timeout
            )
        except Exception as e:
            self._handle_api_error(e, "Node")
