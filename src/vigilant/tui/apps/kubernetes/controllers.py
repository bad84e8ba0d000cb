"""View controllers: one live resource list per resource type.

A ViewController owns a ResourceSynchronizer and the navigation state of
the list drawn from it. Rendering is synchronous and never touches the
cluster; it only copies the synchronizer's snapshot when that snapshot is
marked dirty. The ControllerRegistry builds controllers on first use and
keeps them, so switching between views does not restart their watches.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import structlog
from rich.console import Group, RenderableType
from rich.table import Table
from rich.text import Text

from vigilant.integrations.kubernetes.models.base import TrackedResource
from vigilant.integrations.kubernetes.models.workloads import DeploymentSummary, PodSummary
from vigilant.services.kubernetes.adapters import DeploymentAdapter, PodAdapter
from vigilant.services.kubernetes.synchronizer import ResourceSynchronizer
from vigilant.tui.theme import Styles, status_style

if TYPE_CHECKING:
    from vigilant.integrations.kubernetes.client import KubernetesClient
    from vigilant.services.kubernetes.notifier import ChangeChannel

logger = structlog.get_logger()

V = TypeVar("V", bound=TrackedResource)

Dispatch = Callable[[Callable[[], Any]], None]
RowBuilder = Callable[[Any], Sequence[str | Text]]

# Header, table rule and status bar
CHROME_LINES = 3


def spawn_thread(func: Callable[[], Any]) -> None:
    """Run ``func`` on a daemon thread so the UI loop never waits on it."""
    threading.Thread(target=func, name="vigilant-dispatch", daemon=True).start()


@dataclass(frozen=True)
class Column:
    """Table column: header label and whether it may be squeezed."""

    label: str
    no_wrap: bool = True
    ratio: int | None = None


class ViewController(Generic[V]):
    """Navigable, renderable list backed by a live synchronizer.

    Args:
        synchronizer: Source of the ordered snapshot.
        columns: Table columns.
        row_builder: Turns one resource into the cells of a row.
        noun: Plural noun for the status bar and empty state ("pods").
        hints: Key hints appended to the status bar.
        action_text: Header text while this view is shown.
        dispatch: Runs blocking work off the caller's thread. Tests pass
            a synchronous callable.
    """

    def __init__(
        self,
        synchronizer: ResourceSynchronizer[V],
        *,
        columns: Sequence[Column],
        row_builder: RowBuilder,
        noun: str,
        hints: Sequence[str] = (),
        action_text: str = "",
        dispatch: Dispatch | None = None,
    ) -> None:
        self._sync = synchronizer
        self._columns = list(columns)
        self._row_builder = row_builder
        self._noun = noun
        self._hints = list(hints)
        self._action_text = action_text or f"Viewing {noun}"
        self._dispatch = dispatch or spawn_thread
        self._log = logger.bind(view=synchronizer.resource_name)

        self._items: list[V] = []
        self._selected = 0
        self._offset = 0
        self._started = False
        self._resync_lock = threading.Lock()

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def name(self) -> str:
        return self._sync.resource_name

    @property
    def synchronizer(self) -> ResourceSynchronizer[V]:
        return self._sync

    @property
    def action_text(self) -> str:
        return self._action_text

    @property
    def changes(self) -> ChangeChannel:
        """Channel that fires whenever the snapshot changes."""
        return self._sync.notifier.channel()

    @property
    def selected_index(self) -> int:
        return self._selected

    @property
    def items(self) -> list[V]:
        """Copy of the rows as of the last render."""
        return list(self._items)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> None:
        """Bootstrap and start watching in the background. Idempotent."""
        if self._started:
            return
        self._started = True
        self._log.debug("view_starting")
        self._dispatch(self._bootstrap_and_watch)

    def _bootstrap_and_watch(self) -> None:
        with self._resync_lock:
            self._sync.bootstrap()
        self._sync.start()

    def refresh(self) -> None:
        """Re-list in the background; returns immediately."""
        self._log.debug("view_refresh")
        self._dispatch(self._serialized_resync)

    def _serialized_resync(self) -> None:
        # One listing at a time per view
        with self._resync_lock:
            self._sync.resync()

    def stop(self) -> None:
        self._sync.stop()

    # =========================================================================
    # Navigation
    # =========================================================================

    def select_next(self) -> None:
        if self._selected < len(self._items) - 1:
            self._selected += 1

    def select_prev(self) -> None:
        if self._selected > 0:
            self._selected -= 1

    def select_first(self) -> None:
        self._selected = 0

    def select_last(self) -> None:
        self._selected = max(len(self._items) - 1, 0)

    def get_selected(self) -> V | None:
        """Resource under the cursor, or None when the list is empty."""
        if not self._items:
            return None
        return self._items[self._selected]

    # =========================================================================
    # Rendering
    # =========================================================================

    def sync(self) -> bool:
        """Pull a new snapshot if the synchronizer has changed.

        The cursor keeps its index and is clamped to the last row when the
        list shrinks below it.

        Returns:
            True if the rows were replaced.
        """
        if not self._sync.consume_dirty():
            return False
        self._items = self._sync.values()
        if self._selected >= len(self._items):
            self._selected = max(len(self._items) - 1, 0)
        return True

    def render(self, width: int, height: int) -> RenderableType:
        """Build the list for a ``width`` x ``height`` area.

        Only the rows that fit are drawn, scrolled so the cursor is visible.
        """
        self.sync()
        if not self._items:
            body: RenderableType = Text(f"No {self._noun} found", style=Styles.EMPTY)
        else:
            body = self._render_table(width, max(height - CHROME_LINES, 1))
        return Group(body, self._render_status(width))

    def _visible_window(self, rows: int) -> tuple[int, int]:
        if self._selected < self._offset:
            self._offset = self._selected
        elif self._selected >= self._offset + rows:
            self._offset = self._selected - rows + 1
        self._offset = min(self._offset, max(len(self._items) - rows, 0))
        return self._offset, min(self._offset + rows, len(self._items))

    def _render_table(self, width: int, rows: int) -> Table:
        table = Table(
            width=width,
            expand=True,
            box=None,
            header_style=Styles.TABLE_HEADER,
            pad_edge=False,
        )
        for column in self._columns:
            table.add_column(column.label, no_wrap=column.no_wrap, ratio=column.ratio)

        start, end = self._visible_window(rows)
        for index in range(start, end):
            if index == self._selected:
                style = Styles.SELECTED
            elif index % 2:
                style = Styles.ROW_ALT
            else:
                style = Styles.ROW
            table.add_row(*self._row_builder(self._items[index]), style=style)
        return table

    def _render_status(self, width: int) -> Text:
        parts = [f"Total: {len(self._items)} {self._noun}", *self._hints]
        return Text(" | ".join(parts), style=Styles.STATUS_BAR, no_wrap=True, overflow="ellipsis")


# =============================================================================
# Resource Views
# =============================================================================

POD_COLUMNS = (
    Column("NAME", ratio=3),
    Column("NAMESPACE", ratio=2),
    Column("STATUS", ratio=2),
    Column("READY"),
    Column("RESTARTS"),
    Column("AGE"),
    Column("IP"),
    Column("NODE", ratio=2),
)

DEPLOYMENT_COLUMNS = (
    Column("NAME", ratio=3),
    Column("NAMESPACE", ratio=2),
    Column("STATUS", ratio=2),
    Column("READY"),
    Column("UP-TO-DATE"),
    Column("AVAILABLE"),
    Column("AGE"),
    Column("STRATEGY"),
    Column("IMAGE", ratio=3),
)


def pod_row(pod: PodSummary) -> list[str | Text]:
    return [
        pod.name,
        pod.namespace,
        Text(pod.status, style=status_style(pod.status)),
        pod.ready,
        str(pod.restarts),
        pod.age,
        pod.pod_ip or "",
        pod.node_name or "",
    ]


def deployment_row(deployment: DeploymentSummary) -> list[str | Text]:
    return [
        deployment.name,
        deployment.namespace,
        Text(deployment.status, style=status_style(deployment.status)),
        deployment.ready,
        str(deployment.up_to_date),
        str(deployment.available),
        deployment.age,
        deployment.strategy,
        deployment.image,
    ]


def pod_controller(
    client: KubernetesClient, dispatch: Dispatch | None = None
) -> ViewController[PodSummary]:
    """Live pod list with describe and log hints."""
    return ViewController(
        ResourceSynchronizer(PodAdapter(client)),
        columns=POD_COLUMNS,
        row_builder=pod_row,
        noun="pods",
        hints=("Press 'd' to describe", "Press 'l' to view logs"),
        action_text="Viewing pods",
        dispatch=dispatch,
    )


def deployment_controller(
    client: KubernetesClient, dispatch: Dispatch | None = None
) -> ViewController[DeploymentSummary]:
    """Live deployment list."""
    return ViewController(
        ResourceSynchronizer(DeploymentAdapter(client)),
        columns=DEPLOYMENT_COLUMNS,
        row_builder=deployment_row,
        noun="deployments",
        hints=("Press 'd' to describe",),
        action_text="Listing deployments",
        dispatch=dispatch,
    )


# =============================================================================
# Registry
# =============================================================================

ControllerFactory = Callable[["KubernetesClient"], ViewController[Any]]


class ControllerRegistry:
    """Creates each resource view once and hands out the same instance.

    A controller is constructed and started on its first ``get``; later
    lookups return it with its watch still running.

    Args:
        client: Client passed to every factory.
    """

    def __init__(self, client: KubernetesClient) -> None:
        self._client = client
        self._factories: dict[str, ControllerFactory] = {}
        self._controllers: dict[str, ViewController[Any]] = {}

    def register(self, name: str, factory: ControllerFactory) -> None:
        """Associate a resource type name with a controller factory."""
        self._factories[name.lower()] = factory

    def available_names(self) -> list[str]:
        """Registered names in registration order."""
        return list(self._factories)

    def is_cached(self, name: str) -> bool:
        return name.lower() in self._controllers

    def get(self, name: str) -> ViewController[Any] | None:
        """Return the controller for ``name``, creating it on first access.

        Returns:
            The controller, or None for an unregistered name.
        """
        key = name.strip().lower()
        if key in self._controllers:
            return self._controllers[key]
        factory = self._factories.get(key)
        if factory is None:
            logger.debug("unknown_resource_view", name=name)
            return None
        controller = factory(self._client)
        self._controllers[key] = controller
        controller.start()
        logger.info("resource_view_created", name=key)
        return controller

    def stop_all(self) -> None:
        """Stop every cached controller's watch."""
        for controller in self._controllers.values():
            controller.stop()

    def clear(self) -> None:
        """Stop and forget every cached controller."""
        self.stop_all()
        self._controllers.clear()


def default_registry(client: KubernetesClient, dispatch: Dispatch | None = None) -> ControllerRegistry:
    """Registry with the pod and deployment views."""
    registry = ControllerRegistry(client)
    registry.register("pods", lambda c: pod_controller(c, dispatch))
    registry.register("deployments", lambda c: deployment_controller(c, dispatch))
    return registry
