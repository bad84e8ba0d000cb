"""Pod log screen.

Opens with a static tail of the selected container's log. Follow mode
streams new lines on a worker thread; leaving the screen or pausing
cancels the worker.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from rich.text import Text
from textual import work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.widgets import Footer, Label, RichLog

from vigilant.tui.apps.kubernetes.screens import current_header_info
from vigilant.tui.apps.kubernetes.widgets import HeaderBar
from vigilant.tui.base import BaseScreen

if TYPE_CHECKING:
    from textual.worker import Worker

    from vigilant.integrations.kubernetes.client import KubernetesClient
    from vigilant.integrations.kubernetes.models.workloads import PodSummary
    from vigilant.services.kubernetes.streaming_manager import StreamingManager

logger = structlog.get_logger()

TAIL_LINES_FOLLOW = 200
TAIL_LINES_STATIC = 500

FOLLOWING_LABEL = "[bold green]FOLLOWING[/bold green]"
PAUSED_LABEL = "[bold yellow]PAUSED[/bold yellow]"


class LogViewerScreen(BaseScreen[None]):
    """Logs of one pod container.

    Args:
        resource: Pod to read logs from.
        client: Kubernetes API client.
        initial_container: Container to start with (defaults to the first).
    """

    BINDINGS = [
        Binding("escape", "back", "Back"),
        Binding("r", "reload", "Reload"),
        Binding("c", "next_container", "Container"),
        Binding("f", "toggle_follow", "Follow"),
        Binding("space", "toggle_follow", "Pause/Resume", show=False),
        Binding("t", "toggle_timestamps", "Timestamps"),
        Binding("ctrl+l", "clear_logs", "Clear", show=False),
        Binding("g", "scroll_top", "Top", show=False),
        Binding("G", "scroll_bottom", "Bottom", show=False),
        Binding("pageup", "page_up", "Page Up", show=False),
        Binding("pagedown", "page_down", "Page Down", show=False),
    ]

    def __init__(
        self,
        resource: PodSummary,
        client: KubernetesClient,
        initial_container: str | None = None,
    ) -> None:
        super().__init__()
        self._resource = resource
        self._client = client
        self._container = initial_container
        self._following = False
        self._show_timestamps = False
        self.__streaming_mgr: StreamingManager | None = None
        self._log_worker: Worker[None] | None = None

    @property
    def _streaming_mgr(self) -> StreamingManager:
        """Lazy-loaded streaming manager instance."""
        if self.__streaming_mgr is None:
            from vigilant.services.kubernetes.streaming_manager import StreamingManager

            self.__streaming_mgr = StreamingManager(self._client)
        return self.__streaming_mgr

    @property
    def container(self) -> str | None:
        return self._container

    @property
    def following(self) -> bool:
        return self._following

    # =========================================================================
    # Layout
    # =========================================================================

    def compose(self) -> ComposeResult:
        yield HeaderBar(
            current_header_info(self), f"Logs for pod {self._resource.name}", id="header-bar"
        )
        yield Container(
            Label(self._build_header(), id="log-header"),
            Horizontal(
                Label(self._build_container_label(), id="log-container-label"),
                Label(PAUSED_LABEL, id="log-status"),
                id="log-toolbar",
            ),
            RichLog(highlight=True, markup=False, auto_scroll=True, id="log-output"),
            id="log-container",
        )
        yield Footer()

    def on_mount(self) -> None:
        if not self._container and self._resource.container_names:
            self._container = self._resource.container_names[0]
            self._update_container_label()
        self._start_log_stream()

    def on_unmount(self) -> None:
        self._cancel_log_worker()

    # =========================================================================
    # Text Builders
    # =========================================================================

    def _build_header(self) -> str:
        return (
            f"[bold]Pod Logs[/bold] / [bold cyan]{self._resource.name}[/bold cyan]"
            f"  [dim]ns:[/dim] {self._resource.namespace}"
        )

    def _build_container_label(self) -> str:
        return f"Container: [bold]{self._container or 'N/A'}[/bold]"

    def _update_container_label(self) -> None:
        self.query_one("#log-container-label", Label).update(self._build_container_label())

    # =========================================================================
    # Log Loading
    # =========================================================================

    def _start_log_stream(self) -> None:
        """Cancel any running worker and start loading for the current mode."""
        self._cancel_log_worker()
        if self._following:
            self._log_worker = self._stream_follow_logs()
        else:
            self._log_worker = self._load_static_logs()

    def _write_line(self, line: str) -> None:
        self.query_one("#log-output", RichLog).write(Text(line))

    @work(thread=True, exclusive=True, group="logs")
    def _load_static_logs(self) -> None:
        """Fetch the tail of the log once."""
        try:
            result = self._streaming_mgr.stream_logs(
                self._resource.name,
                self._resource.namespace,
                container=self._container,
                tail_lines=TAIL_LINES_STATIC,
                timestamps=self._show_timestamps,
            )
        except Exception as e:
            logger.warning("log_load_error", pod=self._resource.name, error=str(e))
            self.app.call_from_thread(self._write_line, f"Error loading logs: {e}")
            return

        lines = result.splitlines() if isinstance(result, str) else list(result)
        if not lines:
            self.app.call_from_thread(self._write_line, "(no log output)")
        for line in lines:
            self.app.call_from_thread(self._write_line, line)

    @work(thread=True, exclusive=True, group="logs")
    def _stream_follow_logs(self) -> None:
        """Stream new lines until cancelled or the container stops."""
        from textual.worker import get_current_worker

        worker = get_current_worker()
        try:
            lines = self._streaming_mgr.stream_logs(
                self._resource.name,
                self._resource.namespace,
                container=self._container,
                follow=True,
                tail_lines=TAIL_LINES_FOLLOW,
                timestamps=self._show_timestamps,
            )
            for line in lines:
                if worker.is_cancelled:
                    break
                self.app.call_from_thread(self._write_line, line)
        except Exception as e:
            logger.warning("log_stream_error", pod=self._resource.name, error=str(e))
            if not worker.is_cancelled:
                self.app.call_from_thread(self._write_line, f"Error streaming logs: {e}")

    def _cancel_log_worker(self) -> None:
        if self._log_worker is not None and self._log_worker.is_running:
            self._log_worker.cancel()
        self._log_worker = None

    # =========================================================================
    # Keyboard Actions
    # =========================================================================

    def action_back(self) -> None:
        self._cancel_log_worker()
        self.go_back()

    def action_reload(self) -> None:
        self.query_one("#log-output", RichLog).clear()
        self._start_log_stream()

    def action_next_container(self) -> None:
        """Cycle to the pod's next container."""
        names = self._resource.container_names
        if len(names) < 2:
            self.notify_user("Pod has a single container", severity="warning")
            return
        index = names.index(self._container) if self._container in names else -1
        self._container = names[(index + 1) % len(names)]
        self._update_container_label()
        self.action_reload()

    def action_toggle_follow(self) -> None:
        self._following = not self._following
        status = self.query_one("#log-status", Label)
        status.update(FOLLOWING_LABEL if self._following else PAUSED_LABEL)
        if self._following:
            self.action_reload()
        else:
            self._cancel_log_worker()

    def action_toggle_timestamps(self) -> None:
        self._show_timestamps = not self._show_timestamps
        self.notify_user(f"Timestamps {'on' if self._show_timestamps else 'off'}")
        self.action_reload()

    def action_clear_logs(self) -> None:
        self.query_one("#log-output", RichLog).clear()

    def action_scroll_top(self) -> None:
        self.query_one("#log-output", RichLog).scroll_home()

    def action_scroll_bottom(self) -> None:
        self.query_one("#log-output", RichLog).scroll_end()

    def action_page_up(self) -> None:
        self.query_one("#log-output", RichLog).scroll_page_up()

    def action_page_down(self) -> None:
        self.query_one("#log-output", RichLog).scroll_page_down()
