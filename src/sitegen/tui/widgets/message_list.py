"""Chat message display widgets."""

from __future__ import annotations

from rich.markup import escape
from textual.containers import Vertical, VerticalScroll
from textual.widgets import LoadingIndicator, Markdown, Static

_ROLE_CLASSES = {"human", "ai", "system"}


class Chatbox(Vertical):
    """Single chat message with bordered container and markdown content."""

    DEFAULT_CSS = """
    Chatbox {
        height: auto;
    }
    """

    def __init__(self, role: str, content: str) -> None:
        css_role = role if role in _ROLE_CLASSES else "system"
        super().__init__(classes=f"chatbox-{css_role}")
        self.role = role
        self.border_title = role
        self.message_text = content

    def compose(self):
        yield Markdown(self.message_text, classes="chatbox-md")


class StatusLine(Static):
    """One-line system notice (workflow step, success, failure)."""

    def __init__(self, text: str, status: str = "pending") -> None:
        super().__init__(escape(text), classes=f"status-line status-{status}")
        self.message_text = text
        self.status = status

    def mark(self, status: str) -> None:
        self.remove_class(f"status-{self.status}")
        self.status = status
        self.add_class(f"status-{status}")


class MessageList(VerticalScroll):
    """Scrollable list of chat messages."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._loading_visible = False

    def clear_messages(self) -> None:
        self.remove_children()
        self._loading_visible = False

    def _mount_before_spinner(self, widget) -> None:
        """Mount a widget, inserting before the loading spinner if present."""
        spinners = self.query(".ml-loading")
        if spinners:
            self.mount(widget, before=spinners.first())
        else:
            self.mount(widget)

    def append_message(self, role: str, content: str) -> Chatbox:
        should_scroll = self._is_near_bottom()
        widget = Chatbox(role, content)
        self._mount_before_spinner(widget)
        self._maybe_scroll(should_scroll)
        return widget

    def append_status(self, text: str, status: str = "pending") -> StatusLine:
        """Append a step notice. Earlier pending notices are marked done."""
        self.settle_pending()
        should_scroll = self._is_near_bottom()
        widget = StatusLine(text, status)
        self._mount_before_spinner(widget)
        self._maybe_scroll(should_scroll)
        return widget

    def settle_pending(self, status: str = "success") -> None:
        for line in self.query(StatusLine):
            if line.status == "pending":
                line.mark(status)

    def _is_near_bottom(self, threshold: int = 2) -> bool:
        if self.max_scroll_y == 0:
            return True
        return (self.max_scroll_y - self.scroll_y) <= threshold

    def _maybe_scroll(self, should_scroll: bool) -> None:
        if should_scroll:
            # Defer until after layout so scroll target reflects new content
            self.call_after_refresh(self.scroll_end, animate=False)

    def show_loading(self) -> None:
        """Show a loading spinner at the bottom of the message list."""
        if self._loading_visible:
            return
        should_scroll = self._is_near_bottom()
        self._loading_visible = True
        self.mount(LoadingIndicator(classes="ml-loading"))
        self._maybe_scroll(should_scroll)

    def hide_loading(self) -> None:
        self._loading_visible = False
        for w in self.query(".ml-loading"):
            w.remove()
