"""Terminal UI for sitegen, built on textual."""

from __future__ import annotations

from sitegen.config import ClientConfig


def run_app(config: ClientConfig) -> None:
    """Launch the TUI application."""
    from sitegen.tui.app import SitegenApp

    app = SitegenApp(config)
    app.run()
