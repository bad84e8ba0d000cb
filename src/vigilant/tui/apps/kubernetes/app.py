"""Main Textual application for the cluster dashboard.

This module provides the VigilantApp, which owns the view registry and
the cached cluster header facts, and opens on the resource list.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from textual import work
from textual.app import App
from textual.binding import Binding

from vigilant.integrations.kubernetes.models.cluster import HeaderInfo
from vigilant.tui.apps.kubernetes.controllers import ControllerRegistry, default_registry
from vigilant.tui.apps.kubernetes.screens import DEFAULT_POLL_INTERVAL, ResourceListScreen
from vigilant.tui.apps.kubernetes.widgets import HeaderBar

if TYPE_CHECKING:
    from vigilant.integrations.kubernetes.client import KubernetesClient

logger = structlog.get_logger()

HELP_TEXT = (
    "j/k: navigate | g/G: top/bottom | d: describe | l: logs | "
    "r: refresh | ':': switch resource | esc: back | q: quit"
)


class VigilantApp(App[None]):
    """Terminal dashboard with live pod and deployment lists.

    Args:
        client: Kubernetes API client instance.
        registry: View registry; defaults to pods and deployments.
        initial_resource: Resource type shown first.
        poll_interval: Seconds between change polls on the list screen.
    """

    TITLE = "vigilant"
    CSS_PATH = "styles.tcss"

    BINDINGS = [
        Binding("q", "quit", "Quit", show=True),
        Binding("question_mark", "help", "Help", show=True),
    ]

    def __init__(
        self,
        client: KubernetesClient,
        registry: ControllerRegistry | None = None,
        initial_resource: str = "pods",
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        super().__init__()
        self._client = client
        self._controller_registry = registry or default_registry(client)
        self._initial_resource = initial_resource
        self._poll_interval = poll_interval
        self.header_info = HeaderInfo(cluster_name=client.get_cluster_name())

    @property
    def registry(self) -> ControllerRegistry:
        return self._controller_registry

    def on_mount(self) -> None:
        """Open the resource list and fetch header facts in the background."""
        self.push_screen(
            ResourceListScreen(
                self._controller_registry,
                self._client,
                initial_resource=self._initial_resource,
                poll_interval=self._poll_interval,
            )
        )
        self._load_header_info()

    def on_unmount(self) -> None:
        self._controller_registry.clear()

    @work(thread=True, exclusive=True, group="header")
    def _load_header_info(self) -> None:
        from vigilant.services.kubernetes.cluster_info import ClusterInfoManager

        info = ClusterInfoManager(self._client).get_header_info()
        self.call_from_thread(self.apply_header_info, info)

    def apply_header_info(self, info: HeaderInfo) -> None:
        """Cache ``info`` and push it to every open header bar."""
        self.header_info = info
        for screen in self.screen_stack:
            for header in screen.query(HeaderBar):
                header.set_info(info)
        logger.debug("header_info_applied", cluster=info.cluster_name)

    async def action_quit(self) -> None:
        """Quit the application."""
        self.exit()

    def action_help(self) -> None:
        """Show keyboard shortcut help."""
        self.notify(HELP_TEXT)
