"""Unit tests for view controllers and the controller registry."""

from __future__ import annotations

import io
import threading
import time
from collections.abc import Callable, Iterator
from typing import Any
from unittest.mock import MagicMock

import pytest
from rich.console import Console, RenderableType

from vigilant.integrations.kubernetes.models.base import TrackedResource
from vigilant.integrations.kubernetes.models.workloads import DeploymentSummary, PodSummary
from vigilant.services.kubernetes.adapters import ListResult, WatchEvent
from vigilant.services.kubernetes.synchronizer import ResourceSynchronizer
from vigilant.tui.apps.kubernetes.controllers import (
    DEPLOYMENT_COLUMNS,
    POD_COLUMNS,
    ControllerRegistry,
    ViewController,
    default_registry,
    deployment_row,
    pod_controller,
    pod_row,
)

# ============================================================================
# Fixtures
# ============================================================================


class EmptyStream:
    """Watch stream that ends immediately."""

    def __iter__(self) -> Iterator[Any]:
        return iter(())

    def stop(self) -> None:
        pass


class SummaryAdapter:
    """Adapter whose listing is already-projected summaries."""

    resource_name = "pods"
    object_type = PodSummary

    def __init__(self, items: list[PodSummary]) -> None:
        self.items = items
        self.list_calls = 0
        self.watch_calls: list[str | None] = []

    def list(self) -> ListResult:
        self.list_calls += 1
        return ListResult(items=list(self.items), resource_version="1")

    def watch(self, resource_version: str | None) -> EmptyStream:
        self.watch_calls.append(resource_version)
        return EmptyStream()

    def key_of(self, obj: PodSummary) -> str:
        return obj.key

    def project(self, obj: PodSummary) -> PodSummary:
        return obj


def inline(func: Callable[[], Any]) -> None:
    """Dispatch that runs work on the calling thread."""
    func()


def pods(*keys: str) -> list[PodSummary]:
    result = []
    for key in keys:
        namespace, name = key.split("/")
        result.append(PodSummary(name=name, namespace=namespace, status="Running", ready="1/1"))
    return result


def make_controller(
    items: list[PodSummary], dispatch: Callable[[Callable[[], Any]], None] = inline
) -> tuple[ViewController[PodSummary], ResourceSynchronizer[PodSummary], SummaryAdapter]:
    adapter = SummaryAdapter(items)
    sync: ResourceSynchronizer[PodSummary] = ResourceSynchronizer(adapter)  # type: ignore[arg-type]
    controller = ViewController(
        sync,
        columns=POD_COLUMNS,
        row_builder=pod_row,
        noun="pods",
        hints=("Press 'd' to describe",),
        dispatch=dispatch,
    )
    return controller, sync, adapter


def render_text(renderable: RenderableType, width: int = 140) -> str:
    console = Console(width=width, file=io.StringIO(), record=True, color_system=None)
    console.print(renderable)
    return console.export_text()


# ============================================================================
# Navigation Tests
# ============================================================================


@pytest.mark.unit
@pytest.mark.tui
class TestNavigation:
    """Tests for cursor movement."""

    def test_next_and_prev(self) -> None:
        """The cursor moves down to the second pod and back."""
        controller, sync, _ = make_controller(pods("ns1/pod-a", "ns1/pod-b"))
        sync.bootstrap()
        controller.sync()

        controller.select_next()
        assert controller.selected_index == 1
        selected = controller.get_selected()
        assert selected is not None
        assert selected.name == "pod-b"

        controller.select_prev()
        assert controller.selected_index == 0

    def test_bounds(self) -> None:
        """The cursor stops at both ends."""
        controller, sync, _ = make_controller(pods("ns1/a", "ns1/b"))
        sync.bootstrap()
        controller.sync()

        controller.select_prev()
        assert controller.selected_index == 0

        controller.select_next()
        controller.select_next()
        controller.select_next()
        assert controller.selected_index == 1

    def test_first_and_last(self) -> None:
        """Jumping to the ends."""
        controller, sync, _ = make_controller(pods("a/1", "a/2", "a/3"))
        sync.bootstrap()
        controller.sync()

        controller.select_last()
        assert controller.selected_index == 2
        controller.select_first()
        assert controller.selected_index == 0

    def test_empty_selection(self) -> None:
        """Nothing is selected in an empty list."""
        controller, _, _ = make_controller([])

        controller.select_next()
        controller.select_last()

        assert controller.get_selected() is None
        assert controller.selected_index == 0

    def test_cursor_clamped_when_list_shrinks(self) -> None:
        """A cursor past the end moves to the new last row."""
        controller, sync, adapter = make_controller(pods("a/1", "a/2", "a/3"))
        sync.bootstrap()
        controller.sync()
        controller.select_last()

        adapter.items = pods("a/1")
        sync.resync()
        controller.sync()

        assert controller.selected_index == 0
        selected = controller.get_selected()
        assert selected is not None
        assert selected.name == "1"


# ============================================================================
# Rendering Tests
# ============================================================================


@pytest.mark.unit
@pytest.mark.tui
class TestRender:
    """Tests for render and snapshot pulls."""

    def test_sync_only_when_dirty(self) -> None:
        """Snapshots are copied only after a change."""
        controller, sync, _ = make_controller(pods("a/1"))
        sync.bootstrap()

        assert controller.sync() is True
        assert controller.sync() is False
        assert [p.name for p in controller.items] == ["1"]

    def test_table_and_status(self) -> None:
        """Rows, headers and the status bar are drawn."""
        controller, sync, _ = make_controller(pods("ns1/pod-a", "ns2/pod-b"))
        sync.bootstrap()

        text = render_text(controller.render(140, 20))

        for column in POD_COLUMNS:
            assert column.label in text
        assert "pod-a" in text
        assert "pod-b" in text
        assert "Total: 2 pods" in text
        assert "Press 'd' to describe" in text

    def test_empty_state_after_delete(self) -> None:
        """Deleting the only pod leaves the empty-state message."""
        items = pods("ns1/pod-a")
        controller, sync, _ = make_controller(items)
        sync.bootstrap()
        assert "pod-a" in render_text(controller.render(140, 20))

        assert sync._apply(WatchEvent("DELETED", items[0])) is True
        sync._mark_changed()

        text = render_text(controller.render(140, 20))
        assert "No pods found" in text
        assert "Total: 0 pods" in text

    def test_only_visible_rows_drawn(self) -> None:
        """Long lists are windowed around the cursor."""
        items = pods(*[f"ns/pod-{i:02d}" for i in range(40)])
        controller, sync, _ = make_controller(items)
        sync.bootstrap()
        controller.sync()
        controller.select_last()

        text = render_text(controller.render(140, 10))

        assert "pod-39" in text
        assert "pod-00" not in text

    def test_deployment_row(self) -> None:
        """Deployment rows fill every deployment column."""
        row = deployment_row(
            DeploymentSummary(name="api", namespace="shop", replicas=2, image="api:1")
        )

        assert len(row) == len(DEPLOYMENT_COLUMNS)
        assert row[0] == "api"
        assert row[-1] == "api:1"


# ============================================================================
# Lifecycle Tests
# ============================================================================


@pytest.mark.unit
@pytest.mark.tui
class TestLifecycle:
    """Tests for start, refresh and stop."""

    def test_start_bootstraps_and_watches(self) -> None:
        """Starting lists once and starts the synchronizer."""
        controller, sync, adapter = make_controller(pods("a/1"))

        controller.start()
        controller.start()

        assert adapter.list_calls == 1
        assert sync.is_started is True
        sync.stop()
        assert sync.join(5.0)

    def test_start_is_dispatched(self) -> None:
        """Start hands blocking work to the dispatcher."""
        dispatched: list[Callable[[], Any]] = []
        controller, _, adapter = make_controller(pods("a/1"), dispatch=dispatched.append)

        controller.start()

        assert len(dispatched) == 1
        assert adapter.list_calls == 0

    def test_refresh_dispatches_resync(self) -> None:
        """Refresh returns immediately and re-lists in the background."""
        dispatched: list[Callable[[], Any]] = []
        controller, sync, adapter = make_controller(pods("a/1"), dispatch=dispatched.append)

        controller.refresh()
        assert adapter.list_calls == 0

        dispatched[0]()
        assert adapter.list_calls == 1
        assert len(sync) == 1

    def test_stop_before_dispatched_start_runs(self) -> None:
        """A view stopped before its start job runs never opens a watch."""
        dispatched: list[Callable[[], Any]] = []
        controller, sync, adapter = make_controller(pods("a/1"), dispatch=dispatched.append)

        controller.start()
        controller.stop()
        for job in dispatched:
            job()

        assert sync.join(0.5) is True
        assert adapter.watch_calls == []
        assert sync.is_started is False

    def test_overlapping_refreshes_are_serialized(self) -> None:
        """Two refreshes in flight never list at the same time."""
        dispatched: list[Callable[[], Any]] = []
        controller, _, adapter = make_controller(pods("a/1"), dispatch=dispatched.append)
        active = 0
        peak = 0
        guard = threading.Lock()
        original_list = adapter.list

        def slow_list() -> ListResult:
            nonlocal active, peak
            with guard:
                active += 1
                peak = max(peak, active)
            time.sleep(0.05)
            with guard:
                active -= 1
            return original_list()

        adapter.list = slow_list  # type: ignore[method-assign]
        controller.refresh()
        controller.refresh()

        threads = [threading.Thread(target=job) for job in dispatched]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(5.0)

        assert peak == 1
        assert adapter.list_calls == 2

    def test_changes_channel(self) -> None:
        """The change channel fires after a listing."""
        controller, sync, _ = make_controller(pods("a/1"))

        sync.bootstrap()

        assert controller.changes.poll() is True

    def test_pod_controller_factory(self) -> None:
        """The pod view carries its hints and header text."""
        client = MagicMock()
        client.namespace = None

        controller = pod_controller(client, dispatch=lambda f: None)

        assert controller.name == "pods"
        assert controller.action_text == "Viewing pods"


# ============================================================================
# Registry Tests
# ============================================================================


def fake_factory(created: list[MagicMock]) -> Callable[[Any], Any]:
    def factory(client: Any) -> MagicMock:
        controller = MagicMock(spec=ViewController)
        created.append(controller)
        return controller

    return factory


@pytest.mark.unit
@pytest.mark.tui
class TestControllerRegistry:
    """Tests for ControllerRegistry."""

    def test_get_creates_and_starts_once(self) -> None:
        """A controller is built and started on first access only."""
        created: list[MagicMock] = []
        registry = ControllerRegistry(MagicMock())
        registry.register("pods", fake_factory(created))

        first = registry.get("pods")
        second = registry.get("pods")

        assert first is second
        assert len(created) == 1
        created[0].start.assert_called_once()
        assert registry.is_cached("pods")

    def test_lookup_is_case_insensitive(self) -> None:
        """Names are matched regardless of case and whitespace."""
        created: list[MagicMock] = []
        registry = ControllerRegistry(MagicMock())
        registry.register("Pods", fake_factory(created))

        assert registry.get("  PODS ") is registry.get("pods")

    def test_unknown_name(self) -> None:
        """Unregistered names return None and cache nothing."""
        registry = ControllerRegistry(MagicMock())

        assert registry.get("services") is None
        assert registry.is_cached("services") is False

    def test_available_names_in_order(self) -> None:
        """Names are listed in registration order."""
        registry = ControllerRegistry(MagicMock())
        registry.register("pods", fake_factory([]))
        registry.register("deployments", fake_factory([]))

        assert registry.available_names() == ["pods", "deployments"]

    def test_clear_stops_and_forgets(self) -> None:
        """Clearing stops every cached controller."""
        created: list[MagicMock] = []
        registry = ControllerRegistry(MagicMock())
        registry.register("pods", fake_factory(created))
        registry.get("pods")

        registry.clear()

        created[0].stop.assert_called_once()
        assert registry.is_cached("pods") is False

    def test_default_registry(self) -> None:
        """The default registry offers pods and deployments."""
        client = MagicMock()
        client.namespace = None

        registry = default_registry(client, dispatch=lambda f: None)

        assert registry.available_names() == ["pods", "deployments"]
        controller = registry.get("deployments")
        assert controller is not None
        assert controller.name == "deployments"
        assert controller.action_text == "Listing deployments"


@pytest.mark.unit
@pytest.mark.tui
def test_tracked_resource_kinds() -> None:
    """Summaries report their kind for headers and describe dispatch."""
    assert PodSummary.kind == "Pod"
    assert DeploymentSummary.kind == "Deployment"
    assert TrackedResource.kind == "Resource"
