"""Terminal user interface for vigilant.

Usage:
    from vigilant.tui import BaseScreen, BaseWidget, Colors, Styles
    from vigilant.tui.apps.kubernetes import VigilantApp
"""

from vigilant.tui.base import BaseScreen, BaseWidget
from vigilant.tui.theme import Colors, Styles

__all__ = [
    "BaseScreen",
    "BaseWidget",
    "Colors",
    "Styles",
]
