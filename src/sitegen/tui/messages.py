"""Custom Textual Messages for worker thread → UI communication."""

from __future__ import annotations

from textual.message import Message

from sitegen.session import Session


class SessionChanged(Message):
    """The controller committed a new Session."""

    def __init__(self, session: Session) -> None:
        super().__init__()
        self.session = session


class WebsitesLoaded(Message):
    """Gallery listing fetched in a worker thread."""

    def __init__(self, websites: list[dict]) -> None:
        super().__init__()
        self.websites = websites


class RoundError(Message):
    """Worker thread hit an error the session could not absorb."""

    def __init__(self, error: str) -> None:
        super().__init__()
        self.error = error
