"""Base classes for dashboard screens and widgets.

Usage:
    from vigilant.tui.base import BaseScreen, BaseWidget

    class MyScreen(BaseScreen[None]):
        def compose(self) -> ComposeResult:
            yield Label("My Screen")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from textual.app import ComposeResult
from textual.screen import Screen
from textual.widget import Widget

if TYPE_CHECKING:
    from textual.notifications import SeverityLevel

T = TypeVar("T")


class BaseWidget(Widget):
    """Base class for custom widgets with a notification helper."""

    def notify_user(
        self,
        message: str,
        severity: SeverityLevel = "information",
    ) -> None:
        """Show a notification to the user.

        Args:
            message: Notification text.
            severity: One of "information", "warning", "error".
        """
        self.app.notify(message, severity=severity)


class BaseScreen(Screen[T]):
    """Base class for dashboard screens.

    Subclasses define BINDINGS and compose(); navigation back to the
    previous screen and user notifications go through the helpers here.

    Type Parameters:
        T: The type returned when the screen is dismissed.
    """

    def go_back(self) -> None:
        """Pop this screen if there is one beneath it."""
        if len(self.app.screen_stack) > 1:
            self.app.pop_screen()

    def notify_user(
        self,
        message: str,
        severity: SeverityLevel = "information",
    ) -> None:
        """Show a notification to the user.

        Args:
            message: Notification text.
            severity: One of "information", "warning", "error".
        """
        self.app.notify(message, severity=severity)

    def compose(self) -> ComposeResult:
        """Compose the screen layout. Must be implemented by subclasses."""
        raise NotImplementedError("Subclasses must implement compose()")
