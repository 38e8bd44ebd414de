"""Main TUI application."""

from __future__ import annotations

from textual.app import App
from textual.binding import Binding

from sitegen.config import ClientConfig
from sitegen.session import Session, SessionController
from sitegen.tui.messages import SessionChanged
from sitegen.tui.screens.chat import ChatScreen


class SitegenApp(App):
    """sitegen Terminal User Interface.

    The app owns the session controller; screens read from it and the
    controller reports every committed Session back as a SessionChanged
    message, from whichever thread ran the round.
    """

    CSS_PATH = "styles.tcss"
    TITLE = "sitegen"

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, config: ClientConfig, controller: SessionController | None = None) -> None:
        super().__init__()
        self.config = config
        self.controller = controller or SessionController.from_config(config)
        self.controller.on_change = self._post_session

    def _post_session(self, session: Session) -> None:
        # post_message is thread-safe; rounds run on worker threads
        self.post_message(SessionChanged(session))

    def on_mount(self) -> None:
        self.push_screen(ChatScreen())

    def on_session_changed(self, message: SessionChanged) -> None:
        # Only the newest Session is drawn; older queued ones are superseded
        if message.session is not self.controller.session:
            return
        for screen in self.screen_stack:
            if isinstance(screen, ChatScreen):
                screen.show_session(message.session)
