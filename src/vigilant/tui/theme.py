"""Colors and Rich styles shared by the dashboard views.

Usage:
    from vigilant.tui.theme import Colors, Styles, status_style

    table.add_row(Text(pod.status, style=status_style(pod.status)))
"""

from __future__ import annotations

from rich.style import Style


class Colors:
    """Palette used in Rich styles and Textual CSS."""

    PRIMARY = "#00ff88"
    SECONDARY = "#ff0088"
    ACCENT = "#ffaa00"
    WARNING = "#ff4400"
    ERROR = "#ff0044"
    SUCCESS = "#00ff44"

    BG_PRIMARY = "#0a0a0a"
    BG_SECONDARY = "#1a1a1a"

    TEXT = "#ffffff"
    TEXT_SECONDARY = "#cccccc"
    TEXT_MUTED = "#888888"
    TEXT_INVERSE = "#000000"


class Styles:
    """Rich styles for table rendering."""

    TABLE_HEADER = Style(color=Colors.PRIMARY, bgcolor=Colors.BG_SECONDARY, bold=True)
    ROW = Style(color=Colors.TEXT)
    ROW_ALT = Style(color=Colors.TEXT, bgcolor=Colors.BG_SECONDARY)
    SELECTED = Style(color=Colors.TEXT_INVERSE, bgcolor=Colors.PRIMARY, bold=True)
    STATUS_BAR = Style(color=Colors.TEXT_MUTED)
    EMPTY = Style(color=Colors.TEXT_MUTED, italic=True)

    RUNNING = Style(color=Colors.SUCCESS, bold=True)
    PENDING = Style(color=Colors.WARNING, bold=True)
    FAILED = Style(color=Colors.ERROR, bold=True)
    SUCCEEDED = Style(color=Colors.ACCENT, bold=True)

    @staticmethod
    def muted(text: str) -> str:
        """Style text as muted (dim) markup."""
        return f"[dim]{text}[/dim]"

    @staticmethod
    def bold(text: str) -> str:
        return f"[bold]{text}[/bold]"


_STATUS_STYLES: dict[str, Style] = {
    "Running": Styles.RUNNING,
    "Ready": Styles.RUNNING,
    "Available": Styles.SUCCEEDED,
    "Succeeded": Styles.SUCCEEDED,
    "Completed": Styles.SUCCEEDED,
    "Scaled to 0": Styles.SUCCEEDED,
    "Pending": Styles.PENDING,
    "ContainerCreating": Styles.PENDING,
    "Terminating": Styles.PENDING,
    "Not Ready": Styles.PENDING,
}


def status_style(status: str) -> Style:
    """Style for a STATUS cell; unrecognised reasons render as failures."""
    if status in _STATUS_STYLES:
        return _STATUS_STYLES[status]
    if status == "Unknown":
        return Styles.STATUS_BAR
    return Styles.FAILED
