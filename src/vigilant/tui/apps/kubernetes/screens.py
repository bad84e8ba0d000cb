"""Resource list and describe screens.

The list screen draws whichever ViewController is active and redraws it
when that controller's change channel fires. Polling happens on a Textual
interval timer, so watch threads never call into the UI directly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from rich.markup import escape
from rich.syntax import Syntax
from rich.text import Text
from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, ScrollableContainer
from textual.widgets import DataTable, Footer, Label, Static

from vigilant.integrations.kubernetes.models.cluster import EventSummary, HeaderInfo
from vigilant.integrations.kubernetes.models.workloads import DeploymentSummary, PodSummary
from vigilant.tui.apps.kubernetes.widgets import CommandBar, HeaderBar
from vigilant.tui.base import BaseScreen
from vigilant.tui.theme import status_style

if TYPE_CHECKING:
    from vigilant.integrations.kubernetes.client import KubernetesClient
    from vigilant.integrations.kubernetes.models.base import TrackedResource
    from vigilant.services.kubernetes.describe_manager import DescribeManager, DescribeResult
    from vigilant.tui.apps.kubernetes.controllers import ControllerRegistry, ViewController

logger = structlog.get_logger()

DEFAULT_POLL_INTERVAL = 0.2
AGE_REFRESH_SECONDS = 30.0

EVENT_COLUMNS: list[tuple[str, int]] = [
    ("Type", 9),
    ("Reason", 18),
    ("Age", 6),
    ("From", 18),
    ("Message", 60),
]


def current_header_info(screen: BaseScreen[Any]) -> HeaderInfo:
    """Header facts cached on the app, or placeholders until they load."""
    info = getattr(screen.app, "header_info", None)
    return info if isinstance(info, HeaderInfo) else HeaderInfo()


class ResourceListScreen(BaseScreen[None]):
    """Live list of the active resource type.

    Args:
        registry: Source of per-type view controllers.
        client: Kubernetes client for describe and log screens.
        initial_resource: Resource type shown first.
        poll_interval: Seconds between change-channel polls.
    """

    BINDINGS = [
        Binding("j", "cursor_down", "Down", show=False),
        Binding("down", "cursor_down", "Down", show=False),
        Binding("k", "cursor_up", "Up", show=False),
        Binding("up", "cursor_up", "Up", show=False),
        Binding("g", "cursor_top", "Top", show=False),
        Binding("G", "cursor_bottom", "Bottom", show=False),
        Binding("d", "describe", "Describe"),
        Binding("enter", "describe", "Describe", show=False),
        Binding("l", "logs", "Logs"),
        Binding("r", "refresh", "Refresh"),
        Binding("colon", "command", "Command"),
    ]

    def __init__(
        self,
        registry: ControllerRegistry,
        client: KubernetesClient,
        initial_resource: str = "pods",
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        super().__init__()
        self._registry = registry
        self._client = client
        self._initial_resource = initial_resource
        self._poll_interval = poll_interval
        self._controller: ViewController[Any] | None = None

    @property
    def controller(self) -> ViewController[Any] | None:
        """Controller currently on screen."""
        return self._controller

    def compose(self) -> ComposeResult:
        yield HeaderBar(current_header_info(self), id="header-bar")
        yield Container(Static("", id="resource-view"), id="resource-list-container")
        yield CommandBar(self._registry.available_names(), id="command-bar")
        yield Footer()

    def on_mount(self) -> None:
        if not self.switch_view(self._initial_resource):
            self.switch_view("pods")
        self.set_interval(self._poll_interval, self._poll_changes)
        self.set_interval(AGE_REFRESH_SECONDS, self.redraw)

    def on_resize(self) -> None:
        self.redraw()

    # =========================================================================
    # View Switching and Drawing
    # =========================================================================

    def switch_view(self, name: str) -> bool:
        """Show the controller registered as ``name``.

        Returns:
            False if no such resource type is registered.
        """
        controller = self._registry.get(name)
        if controller is None:
            logger.info("unknown_resource_type", name=name)
            self.notify_user(f"Unknown resource type: {name}", severity="warning")
            return False
        self._controller = controller
        self.query_one("#header-bar", HeaderBar).set_action(controller.action_text)
        self.redraw()
        return True

    def _poll_changes(self) -> None:
        if self._controller is not None and self._controller.changes.poll():
            self.redraw()

    def redraw(self) -> None:
        """Render the active controller into the list area."""
        if self._controller is None:
            return
        view = self.query_one("#resource-view", Static)
        width = view.size.width or self.size.width or 80
        height = view.size.height or self.size.height or 24
        view.update(self._controller.render(width, height))

    # =========================================================================
    # Keyboard Actions
    # =========================================================================

    def action_cursor_down(self) -> None:
        if self._controller is not None:
            self._controller.select_next()
            self.redraw()

    def action_cursor_up(self) -> None:
        if self._controller is not None:
            self._controller.select_prev()
            self.redraw()

    def action_cursor_top(self) -> None:
        if self._controller is not None:
            self._controller.select_first()
            self.redraw()

    def action_cursor_bottom(self) -> None:
        if self._controller is not None:
            self._controller.select_last()
            self.redraw()

    def action_refresh(self) -> None:
        if self._controller is not None:
            self._controller.refresh()
            self.notify_user(f"Refreshing {self._controller.name}")

    def action_describe(self) -> None:
        resource = self._controller.get_selected() if self._controller else None
        if resource is None:
            self.notify_user("Nothing selected", severity="warning")
            return
        self.app.push_screen(DescribeScreen(resource, self._client))

    def action_logs(self) -> None:
        from vigilant.tui.apps.kubernetes.log_viewer import LogViewerScreen

        resource = self._controller.get_selected() if self._controller else None
        if not isinstance(resource, PodSummary):
            self.notify_user("Logs are only available for pods", severity="warning")
            return
        self.app.push_screen(LogViewerScreen(resource, self._client))

    def action_command(self) -> None:
        self.query_one("#command-bar", CommandBar).activate()

    @on(CommandBar.Submitted)
    def handle_command_submitted(self, event: CommandBar.Submitted) -> None:
        self.set_focus(None)
        if event.value:
            self.switch_view(event.value)

    @on(CommandBar.Cancelled)
    def handle_command_cancelled(self, event: CommandBar.Cancelled) -> None:
        self.set_focus(None)


class DescribeScreen(BaseScreen[None]):
    """Full live state of one pod or deployment plus its recent events."""

    BINDINGS = [
        Binding("escape", "back", "Back"),
        Binding("r", "refresh", "Refresh"),
        Binding("y", "toggle_yaml", "YAML"),
        Binding("j", "scroll_down", "Down", show=False),
        Binding("k", "scroll_up", "Up", show=False),
        Binding("pagedown", "page_down", "Page Down", show=False),
        Binding("pageup", "page_up", "Page Up", show=False),
        Binding("g", "scroll_top", "Top", show=False),
        Binding("G", "scroll_bottom", "Bottom", show=False),
    ]

    def __init__(self, resource: TrackedResource, client: KubernetesClient) -> None:
        super().__init__()
        self._resource = resource
        self._client = client
        self._yaml_visible = True
        self.__describe_mgr: DescribeManager | None = None

    @property
    def _describe_mgr(self) -> DescribeManager:
        """Lazy-loaded describe manager instance."""
        if self.__describe_mgr is None:
            from vigilant.services.kubernetes.describe_manager import DescribeManager

            self.__describe_mgr = DescribeManager(self._client)
        return self.__describe_mgr

    @property
    def resource(self) -> TrackedResource:
        return self._resource

    # =========================================================================
    # Layout
    # =========================================================================

    def compose(self) -> ComposeResult:
        action = f"Describing {self._resource.kind.lower()} {self._resource.name}"
        yield HeaderBar(current_header_info(self), action, id="header-bar")
        yield Container(
            Label(self._build_header_text(), id="detail-header"),
            Horizontal(
                Container(
                    Label("[bold]Summary[/bold]", classes="panel-title"),
                    Static(self._build_summary_text(), id="detail-summary"),
                    classes="detail-panel",
                ),
                Container(
                    Label("[bold]Labels[/bold]", classes="panel-title"),
                    Static(self._build_labels_text(), id="detail-labels"),
                    classes="detail-panel",
                ),
                id="detail-top-row",
            ),
            Container(
                Label("[bold]YAML[/bold]  [dim](y to toggle)[/dim]", classes="panel-title"),
                ScrollableContainer(
                    Static("[dim]Loading...[/dim]", id="detail-yaml-content"),
                    id="detail-yaml-scroll",
                ),
                id="yaml-panel",
                classes="detail-panel",
            ),
            Container(
                Label("[bold]Events[/bold]  [dim](r to refresh)[/dim]", classes="panel-title"),
                DataTable(id="detail-events-table"),
                id="detail-events-panel",
                classes="detail-panel",
            ),
            id="detail-container",
        )
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#detail-events-table", DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        for label, width in EVENT_COLUMNS:
            table.add_column(label, width=width)
        self._load_details()

    # =========================================================================
    # Text Builders
    # =========================================================================

    def _build_header_text(self) -> str:
        r = self._resource
        color = status_style(r.status).color
        status = f"[{color.name}]{r.status}[/]" if color else r.status
        return (
            f"[bold]{r.kind}[/bold] / [bold cyan]{r.name}[/bold cyan]"
            f"  [dim]ns:[/dim] {r.namespace}  {status}"
        )

    def _build_summary_text(self) -> str:
        r = self._resource
        lines = [
            f"[dim]Status:[/dim]   {r.status}",
            f"[dim]Ready:[/dim]    {r.ready}",
            f"[dim]Age:[/dim]      {r.age}",
        ]
        if r.uid:
            lines.append(f"[dim]UID:[/dim]      {r.uid}")
        if isinstance(r, PodSummary):
            lines.extend(
                [
                    f"[dim]Restarts:[/dim] {r.restarts}",
                    f"[dim]IP:[/dim]       {r.pod_ip or '-'}",
                    f"[dim]Node:[/dim]     {r.node_name or '-'}",
                ]
            )
            for container in r.containers:
                mark = "[green]✓[/green]" if container.ready else "[red]✗[/red]"
                lines.append(f"  {mark} {container.name} [dim]{container.state}[/dim]")
        elif isinstance(r, DeploymentSummary):
            lines.extend(
                [
                    f"[dim]Up-to-date:[/dim] {r.up_to_date}",
                    f"[dim]Available:[/dim]  {r.available}",
                    f"[dim]Strategy:[/dim]   {r.strategy}",
                    f"[dim]Image:[/dim]      {r.image}",
                ]
            )
        return "\n".join(lines)

    def _build_labels_text(self) -> str:
        if not self._resource.labels:
            return "[dim]None[/dim]"
        return "\n".join(escape(f"{k}={v}") for k, v in sorted(self._resource.labels.items()))

    # =========================================================================
    # Loading
    # =========================================================================

    @work(thread=True, exclusive=True)
    def _load_details(self) -> None:
        """Fetch the live object and events off the UI thread."""
        try:
            result = self._describe_mgr.describe(self._resource)
        except Exception as e:
            logger.warning(
                "describe_failed",
                kind=self._resource.kind,
                name=self._resource.name,
                error=str(e),
            )
            self.app.call_from_thread(
                self.notify_user, f"Failed to describe {self._resource.name}: {e}", "error"
            )
            return
        self.app.call_from_thread(self._show_details, result)

    def _show_details(self, result: DescribeResult) -> None:
        self._resource = result.summary
        self.query_one("#detail-header", Label).update(self._build_header_text())
        self.query_one("#detail-summary", Static).update(self._build_summary_text())
        self.query_one("#detail-labels", Static).update(self._build_labels_text())
        self.query_one("#detail-yaml-content", Static).update(
            Syntax(result.manifest, "yaml", theme="monokai", word_wrap=True)
        )
        self._show_events(result.events)

    def _show_events(self, events: list[EventSummary]) -> None:
        table = self.query_one("#detail-events-table", DataTable)
        table.clear()
        for evt in events:
            color = "yellow" if evt.type == "Warning" else "green"
            table.add_row(
                f"[{color}]{evt.type}[/{color}]",
                Text(evt.reason),
                evt.age,
                Text(evt.source_component or ""),
                Text(evt.message),
            )
        logger.debug("describe_events_loaded", count=len(events), name=self._resource.name)

    # =========================================================================
    # Keyboard Actions
    # =========================================================================

    def action_back(self) -> None:
        self.go_back()

    def action_refresh(self) -> None:
        self._load_details()
        self.notify_user("Refreshing")

    def action_toggle_yaml(self) -> None:
        self._yaml_visible = not self._yaml_visible
        self.query_one("#yaml-panel").display = self._yaml_visible

    def _scroller(self) -> ScrollableContainer:
        return self.query_one("#detail-yaml-scroll", ScrollableContainer)

    def action_scroll_down(self) -> None:
        self._scroller().scroll_down()

    def action_scroll_up(self) -> None:
        self._scroller().scroll_up()

    def action_page_down(self) -> None:
        self._scroller().scroll_page_down()

    def action_page_up(self) -> None:
        self._scroller().scroll_page_up()

    def action_scroll_top(self) -> None:
        self._scroller().scroll_home()

    def action_scroll_bottom(self) -> None:
        self._scroller().scroll_end()
