"""Header bar and command bar widgets."""

from __future__ import annotations

from collections.abc import Sequence

from textual.app import ComposeResult
from textual.binding import Binding
from textual.message import Message
from textual.widgets import Input, Static

from vigilant.integrations.kubernetes.models.cluster import HeaderInfo
from vigilant.tui.base import BaseWidget


def match_suggestions(names: Sequence[str], text: str) -> list[str]:
    """Names starting with ``text``, case-insensitively.

    Empty input suggests every name.
    """
    prefix = text.strip().lower()
    if not prefix:
        return list(names)
    return [name for name in names if name.lower().startswith(prefix)]


def format_header(info: HeaderInfo, action_text: str) -> str:
    """Single-line header markup."""
    return " | ".join(
        [
            f"[bold]☸ {info.cluster_name}[/bold]",
            action_text,
            f"[italic]K8s: {info.kubernetes_version}[/italic]",
            f"CP {info.control_plane_nodes}",
            f"W {info.worker_nodes}",
        ]
    )


class HeaderBar(Static):
    """Cluster summary and the current view, docked at the top."""

    DEFAULT_CSS = """
    HeaderBar {
        dock: top;
        height: 1;
        background: #00ff88;
        color: #000000;
        padding: 0 1;
    }
    """

    def __init__(
        self, info: HeaderInfo | None = None, action_text: str = "", *, id: str | None = None
    ) -> None:
        self._info = info or HeaderInfo()
        self._action_text = action_text
        super().__init__(format_header(self._info, action_text), id=id)

    @property
    def info(self) -> HeaderInfo:
        return self._info

    @property
    def action_text(self) -> str:
        return self._action_text

    def set_info(self, info: HeaderInfo) -> None:
        self._info = info
        self.update(format_header(info, self._action_text))

    def set_action(self, action_text: str) -> None:
        self._action_text = action_text
        self.update(format_header(self._info, action_text))


class CommandBar(BaseWidget):
    """Resource-type switcher opened with ':'.

    Typing filters the available names by prefix. Up/down move through the
    suggestions (wrapping), tab copies the highlighted one into the input,
    enter submits and escape cancels.
    """

    DEFAULT_CSS = """
    CommandBar {
        height: auto;
        display: none;
        border-top: solid #00ff88;
    }

    CommandBar.-active {
        display: block;
    }

    CommandBar Input {
        border: none;
        height: 1;
        padding: 0 1;
    }

    CommandBar #command-suggestions {
        height: auto;
        padding: 0 1;
        color: #cccccc;
    }
    """

    BINDINGS = [
        Binding("tab", "complete", "Complete", show=False, priority=True),
        Binding("up", "prev_suggestion", show=False),
        Binding("down", "next_suggestion", show=False),
        Binding("escape", "cancel", "Cancel", show=False),
    ]

    class Submitted(Message):
        """The user chose a resource type name."""

        def __init__(self, value: str) -> None:
            self.value = value
            super().__init__()

    class Cancelled(Message):
        """The command bar was closed without a choice."""

    def __init__(self, names: Sequence[str], *, id: str | None = None) -> None:
        super().__init__(id=id)
        self._names = list(names)
        self._suggestions: list[str] = []
        self._selected = 0

    def compose(self) -> ComposeResult:
        yield Input(placeholder="resource type (pods, deployments)", id="command-input")
        yield Static("", id="command-suggestions")

    # =========================================================================
    # State
    # =========================================================================

    @property
    def is_active(self) -> bool:
        return self.has_class("-active")

    @property
    def suggestions(self) -> list[str]:
        return list(self._suggestions)

    @property
    def selected_suggestion(self) -> str | None:
        if not self._suggestions:
            return None
        return self._suggestions[self._selected]

    @property
    def value(self) -> str:
        return self.query_one("#command-input", Input).value

    def activate(self) -> None:
        """Show the bar with an empty input and every name suggested."""
        input_widget = self.query_one("#command-input", Input)
        input_widget.value = ""
        self._update_suggestions("")
        self.add_class("-active")
        input_widget.focus()

    def deactivate(self) -> None:
        self.remove_class("-active")
        self._suggestions = []
        self._selected = 0

    def _update_suggestions(self, text: str) -> None:
        self._suggestions = match_suggestions(self._names, text)
        self._selected = 0
        self._render_suggestions()

    def _render_suggestions(self) -> None:
        lines = []
        for index, name in enumerate(self._suggestions):
            if index == self._selected:
                lines.append(f"[reverse] {name} [/reverse] [dim](Tab to complete)[/dim]")
            else:
                lines.append(f" {name}")
        self.query_one("#command-suggestions", Static).update("\n".join(lines))

    # =========================================================================
    # Events and Actions
    # =========================================================================

    def on_input_changed(self, event: Input.Changed) -> None:
        event.stop()
        self._update_suggestions(event.value)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        value = event.value.strip()
        self.deactivate()
        self.post_message(self.Submitted(value))

    def action_complete(self) -> None:
        if not self.is_active or not self._suggestions:
            return
        input_widget = self.query_one("#command-input", Input)
        input_widget.value = self._suggestions[self._selected]
        input_widget.cursor_position = len(input_widget.value)

    def action_next_suggestion(self) -> None:
        if self._suggestions:
            self._selected = (self._selected + 1) % len(self._suggestions)
            self._render_suggestions()

    def action_prev_suggestion(self) -> None:
        if self._suggestions:
            self._selected = (self._selected - 1) % len(self._suggestions)
            self._render_suggestions()

    def action_cancel(self) -> None:
        self.deactivate()
        self.post_message(self.Cancelled())
