"""Tests for the dashboard app and its screens, driven through Textual's pilot."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from textual.widgets import DataTable

from vigilant.integrations.kubernetes.models.cluster import EventSummary, HeaderInfo
from vigilant.integrations.kubernetes.models.workloads import (
    ContainerStatus,
    DeploymentSummary,
    PodSummary,
)
from vigilant.services.kubernetes.adapters import ListResult
from vigilant.services.kubernetes.describe_manager import DescribeResult
from vigilant.services.kubernetes.synchronizer import ResourceSynchronizer
from vigilant.tui.apps.kubernetes.app import VigilantApp
from vigilant.tui.apps.kubernetes.controllers import (
    DEPLOYMENT_COLUMNS,
    POD_COLUMNS,
    ControllerRegistry,
    ViewController,
    deployment_row,
    pod_row,
)
from vigilant.tui.apps.kubernetes.log_viewer import LogViewerScreen
from vigilant.tui.apps.kubernetes.screens import DescribeScreen, ResourceListScreen
from vigilant.tui.apps.kubernetes.widgets import HeaderBar

SIZE = (140, 30)

# ============================================================================
# Fixtures
# ============================================================================


class EmptyStream:
    def __iter__(self) -> Iterator[Any]:
        return iter(())

    def stop(self) -> None:
        pass


class StaticAdapter:
    """Adapter serving a fixed list of summaries."""

    def __init__(self, resource_name: str, items: list[Any]) -> None:
        self.resource_name = resource_name
        self.items = items

    def list(self) -> ListResult:
        return ListResult(items=list(self.items), resource_version="1")

    def watch(self, resource_version: str | None) -> EmptyStream:
        return EmptyStream()

    def key_of(self, obj: Any) -> str:
        return obj.key

    def project(self, obj: Any) -> Any:
        return obj


def inline(func: Callable[[], Any]) -> None:
    func()


POD_A = PodSummary(
    name="web-a",
    namespace="shop",
    status="Running",
    ready="2/2",
    containers=(ContainerStatus(name="app"), ContainerStatus(name="proxy")),
)
POD_B = PodSummary(
    name="web-b",
    namespace="shop",
    status="Pending",
    ready="0/1",
    containers=(ContainerStatus(name="app"),),
)
DEPLOYMENT = DeploymentSummary(name="frontend", namespace="shop", status="Ready", ready="1/1")


def make_registry(client: Any) -> ControllerRegistry:
    registry = ControllerRegistry(client)
    registry.register(
        "pods",
        lambda c: ViewController(
            ResourceSynchronizer(StaticAdapter("pods", [POD_A, POD_B])),  # type: ignore[arg-type]
            columns=POD_COLUMNS,
            row_builder=pod_row,
            noun="pods",
            action_text="Viewing pods",
            dispatch=inline,
        ),
    )
    registry.register(
        "deployments",
        lambda c: ViewController(
            ResourceSynchronizer(StaticAdapter("deployments", [DEPLOYMENT])),  # type: ignore[arg-type]
            columns=DEPLOYMENT_COLUMNS,
            row_builder=deployment_row,
            noun="deployments",
            action_text="Listing deployments",
            dispatch=inline,
        ),
    )
    return registry


@pytest.fixture
def mock_client() -> MagicMock:
    client = MagicMock()
    client.namespace = None
    client.get_cluster_name.return_value = "kind-dev"
    return client


@pytest.fixture
def header_info() -> Iterator[HeaderInfo]:
    info = HeaderInfo(
        cluster_name="kind-dev",
        kubernetes_version="v1.30.0",
        control_plane_nodes=1,
        worker_nodes=2,
    )
    with patch(
        "vigilant.services.kubernetes.cluster_info.ClusterInfoManager.get_header_info",
        return_value=info,
    ):
        yield info


@pytest.fixture
def dashboard(mock_client: MagicMock, header_info: HeaderInfo) -> VigilantApp:
    return VigilantApp(mock_client, registry=make_registry(mock_client))


# ============================================================================
# App Tests
# ============================================================================


@pytest.mark.unit
@pytest.mark.tui
class TestVigilantApp:
    """Tests for VigilantApp startup and header facts."""

    def test_bindings(self, dashboard: VigilantApp) -> None:
        keys = [b.key for b in VigilantApp.BINDINGS]  # type: ignore[union-attr]

        assert "q" in keys
        assert "question_mark" in keys
        assert dashboard.header_info.cluster_name == "kind-dev"

    @pytest.mark.asyncio
    async def test_opens_on_pod_list(self, dashboard: VigilantApp) -> None:
        """The app opens on the pod list with header facts applied."""
        async with dashboard.run_test(size=SIZE) as pilot:
            await dashboard.workers.wait_for_complete()
            await pilot.pause()

            screen = dashboard.screen
            assert isinstance(screen, ResourceListScreen)
            assert screen.controller is not None
            assert screen.controller.name == "pods"

            header = screen.query_one(HeaderBar)
            assert header.info.kubernetes_version == "v1.30.0"
            assert header.action_text == "Viewing pods"

    @pytest.mark.asyncio
    async def test_unknown_initial_resource_falls_back(
        self, mock_client: MagicMock, header_info: HeaderInfo
    ) -> None:
        """An unregistered start view falls back to pods."""
        app = VigilantApp(
            mock_client, registry=make_registry(mock_client), initial_resource="services"
        )
        async with app.run_test(size=SIZE) as pilot:
            await pilot.pause()

            screen = app.screen
            assert isinstance(screen, ResourceListScreen)
            assert screen.controller is not None
            assert screen.controller.name == "pods"

    @pytest.mark.asyncio
    async def test_exit_stops_views(self, mock_client: MagicMock, header_info: HeaderInfo) -> None:
        """Quitting clears the registry."""
        registry = make_registry(mock_client)
        app = VigilantApp(mock_client, registry=registry)
        async with app.run_test(size=SIZE) as pilot:
            await pilot.pause()
            assert registry.is_cached("pods")
            await pilot.press("q")

        assert registry.is_cached("pods") is False


# ============================================================================
# Resource List Tests
# ============================================================================


@pytest.mark.unit
@pytest.mark.tui
class TestResourceListScreen:
    """Tests for list navigation and view switching."""

    def test_bindings(self) -> None:
        keys = {b.key for b in ResourceListScreen.BINDINGS}  # type: ignore[union-attr]

        assert {"j", "k", "g", "G", "d", "l", "r", "colon"} <= keys

    @pytest.mark.asyncio
    async def test_cursor_movement(self, dashboard: VigilantApp) -> None:
        """j and k move the selection."""
        async with dashboard.run_test(size=SIZE) as pilot:
            await pilot.pause()
            screen = dashboard.screen
            assert isinstance(screen, ResourceListScreen)
            controller = screen.controller
            assert controller is not None
            assert controller.selected_index == 0

            await pilot.press("j")
            assert controller.selected_index == 1
            selected = controller.get_selected()
            assert selected is not None
            assert selected.name == "web-b"

            await pilot.press("k")
            assert controller.selected_index == 0

    @pytest.mark.asyncio
    async def test_command_bar_switches_view(self, dashboard: VigilantApp) -> None:
        """Typing a resource name in the command bar switches views."""
        async with dashboard.run_test(size=SIZE) as pilot:
            await pilot.pause()
            screen = dashboard.screen
            assert isinstance(screen, ResourceListScreen)

            await pilot.press("colon")
            await pilot.press("d", "e", "p")
            await pilot.press("tab")
            await pilot.press("enter")
            await pilot.pause()

            assert screen.controller is not None
            assert screen.controller.name == "deployments"
            assert screen.query_one(HeaderBar).action_text == "Listing deployments"

    @pytest.mark.asyncio
    async def test_unknown_command_keeps_view(self, dashboard: VigilantApp) -> None:
        """An unknown resource name leaves the current view in place."""
        async with dashboard.run_test(size=SIZE) as pilot:
            await pilot.pause()
            screen = dashboard.screen
            assert isinstance(screen, ResourceListScreen)

            assert screen.switch_view("services") is False
            assert screen.controller is not None
            assert screen.controller.name == "pods"

    @pytest.mark.asyncio
    async def test_logs_only_for_pods(self, dashboard: VigilantApp) -> None:
        """The log key does nothing on the deployment view."""
        async with dashboard.run_test(size=SIZE) as pilot:
            await pilot.pause()
            screen = dashboard.screen
            assert isinstance(screen, ResourceListScreen)
            screen.switch_view("deployments")

            await pilot.press("l")
            await pilot.pause()

            assert dashboard.screen is screen


# ============================================================================
# Describe Tests
# ============================================================================


@pytest.mark.unit
@pytest.mark.tui
class TestDescribeScreen:
    """Tests for the describe screen."""

    @pytest.mark.asyncio
    async def test_describe_and_back(self, dashboard: VigilantApp) -> None:
        """d opens the selected pod's details and escape returns."""
        live = POD_A.model_copy(update={"status": "CrashLoopBackOff"})
        result = DescribeResult(
            kind="Pod",
            summary=live,
            manifest="kind: Pod\nmetadata:\n  name: web-a\n",
            events=[EventSummary(type="Warning", reason="BackOff", message="restarting")],
        )
        with patch(
            "vigilant.services.kubernetes.describe_manager.DescribeManager.describe",
            return_value=result,
        ) as describe:
            async with dashboard.run_test(size=SIZE) as pilot:
                await pilot.pause()
                list_screen = dashboard.screen

                await pilot.press("d")
                await dashboard.workers.wait_for_complete()
                await pilot.pause()

                screen = dashboard.screen
                assert isinstance(screen, DescribeScreen)
                describe.assert_called_once_with(POD_A)
                assert screen.resource.status == "CrashLoopBackOff"
                assert screen.query_one("#detail-events-table", DataTable).row_count == 1

                await pilot.press("y")
                assert screen.query_one("#yaml-panel").display is False

                await pilot.press("escape")
                await pilot.pause()
                assert dashboard.screen is list_screen

    @pytest.mark.asyncio
    async def test_describe_failure_stays_open(self, dashboard: VigilantApp) -> None:
        """A failed fetch keeps the cached summary on screen."""
        with patch(
            "vigilant.services.kubernetes.describe_manager.DescribeManager.describe",
            side_effect=RuntimeError("gone"),
        ):
            async with dashboard.run_test(size=SIZE) as pilot:
                await pilot.pause()
                await pilot.press("d")
                await dashboard.workers.wait_for_complete()
                await pilot.pause()

                screen = dashboard.screen
                assert isinstance(screen, DescribeScreen)
                assert screen.resource == POD_A


# ============================================================================
# Log Viewer Tests
# ============================================================================


@pytest.mark.unit
@pytest.mark.tui
class TestLogViewerScreen:
    """Tests for the log screen."""

    def test_bindings(self) -> None:
        keys = {b.key for b in LogViewerScreen.BINDINGS}  # type: ignore[union-attr]

        assert {"escape", "r", "c", "f", "t"} <= keys

    @pytest.mark.asyncio
    async def test_opens_first_container_and_cycles(self, dashboard: VigilantApp) -> None:
        """Logs start on the first container and c moves to the next."""
        with patch(
            "vigilant.services.kubernetes.streaming_manager.StreamingManager.stream_logs",
            return_value="line one\nline two",
        ) as stream_logs:
            async with dashboard.run_test(size=SIZE) as pilot:
                await pilot.pause()

                await pilot.press("l")
                await dashboard.workers.wait_for_complete()
                await pilot.pause()

                screen = dashboard.screen
                assert isinstance(screen, LogViewerScreen)
                assert screen.container == "app"
                assert screen.following is False
                assert stream_logs.call_args.kwargs["container"] == "app"

                await pilot.press("c")
                await dashboard.workers.wait_for_complete()
                await pilot.pause()

                assert screen.container == "proxy"
                assert stream_logs.call_args.kwargs["container"] == "proxy"

                await pilot.press("escape")
                await pilot.pause()
                assert isinstance(dashboard.screen, ResourceListScreen)

    @pytest.mark.asyncio
    async def test_follow_mode(self, dashboard: VigilantApp) -> None:
        """f switches to a followed stream."""
        with patch(
            "vigilant.services.kubernetes.streaming_manager.StreamingManager.stream_logs",
            side_effect=lambda *args, **kwargs: iter(["a", "b"]) if kwargs.get("follow") else "",
        ) as stream_logs:
            async with dashboard.run_test(size=SIZE) as pilot:
                await pilot.pause()
                await pilot.press("l")
                await dashboard.workers.wait_for_complete()

                await pilot.press("f")
                await dashboard.workers.wait_for_complete()
                await pilot.pause()

                screen = dashboard.screen
                assert isinstance(screen, LogViewerScreen)
                assert screen.following is True
                assert stream_logs.call_args.kwargs["follow"] is True
