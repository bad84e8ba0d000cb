"""Live cluster dashboard.

Usage:
    from vigilant.tui.apps.kubernetes import VigilantApp

    app = VigilantApp(client=client)
    app.run()
"""

from vigilant.tui.apps.kubernetes.app import VigilantApp

__all__ = ["VigilantApp"]
