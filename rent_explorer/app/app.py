"""Dash app factory."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import dash

    from ..dashboard import DashboardController


def create_app(controller: DashboardController) -> "dash.Dash":
    """Create and configure the Dash application.

    Parameters
    ----------
    controller : DashboardController
        Owner of all dashboard state.  Callbacks dispatch events into it
        and render from ``controller.state``; data may still be loading.

    Returns
    -------
    dash.Dash
    """
    import dash

    from . import callbacks
    from .layout import build_layout

    assets_dir = os.path.join(os.path.dirname(os.path.dirname(__file__)), "assets")

    app = dash.Dash(
        __name__,
        assets_folder=assets_dir,
        title="Rent Explorer",
        suppress_callback_exceptions=True,
    )
    # Serve a fresh layout per page load so late-arriving data shows up.
    app.layout = lambda: build_layout(controller.state)
    callbacks.register(app, controller)

    return app
