"""Chat screen: conversation with the generator plus a live status sidebar."""

from __future__ import annotations

from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import Screen
from textual.widgets import Footer, Header, Input

from sitegen.client import website_url
from sitegen.conversation import STEP_MESSAGES, format_questions
from sitegen.session import Session, Status
from sitegen.tui.messages import RoundError
from sitegen.tui.widgets.message_list import MessageList
from sitegen.tui.widgets.progress_panel import ProgressPanel

WELCOME = (
    "Hello! I'm your website building assistant. Describe the website you "
    "want to create, and I'll build it for you."
)
FRESH_START = "Fresh start! What kind of website should we build now?"

_PLACEHOLDERS = {
    Status.GENERATING: "Generating...",
    Status.AWAITING_INPUT: "Answer the questions above...",
}
_DEFAULT_PLACEHOLDER = "Describe the website you want..."


class ChatScreen(Screen):
    """Sends user input to the session controller and mirrors its state."""

    BINDINGS = [
        Binding("ctrl+n", "new_chat", "New chat"),
        Binding("ctrl+g", "open_gallery", "Gallery"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._last: Session | None = None
        self._last_step = ""

    def compose(self):
        yield Header()
        with Horizontal(id="chat-layout"):
            with Vertical(id="chat-main"):
                yield MessageList(id="message-list")
                yield Input(placeholder=_DEFAULT_PLACEHOLDER, id="chat-input")
            yield ProgressPanel(self.app.config.base_url, id="progress-panel")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#message-list", MessageList).append_message("ai", WELCOME)
        self.query_one("#chat-input", Input).focus()

    # ── Input ────────────────────────────────────────────────

    def on_input_submitted(self, event: Input.Submitted) -> None:
        text = event.value.strip()
        if not text:
            return
        session = self.app.controller.session
        if session.is_generating:
            self.notify("Generation in progress, please wait.", severity="warning")
            return
        event.input.clear()
        self.query_one("#message-list", MessageList).append_message("human", text)
        # the outcome of this round is announced even if it repeats the last status
        self._last = None
        answering = session.needs_input
        self.run_worker(lambda: self._run_round(text, answering), thread=True)

    def _run_round(self, text: str, answering: bool) -> None:
        """Runs in worker thread. State changes reach the UI via SessionChanged."""
        try:
            if answering:
                self.app.controller.generate("", text)
            else:
                self.app.controller.generate(text)
        except Exception as e:
            self.post_message(RoundError(str(e) or type(e).__name__))

    def on_round_error(self, message: RoundError) -> None:
        msg_list = self.query_one("#message-list", MessageList)
        msg_list.hide_loading()
        msg_list.append_status(f"Unexpected error: {message.error}", "error")
        self.query_one("#chat-input", Input).disabled = False

    # ── Session mirroring ────────────────────────────────────

    def show_session(self, session: Session) -> None:
        """Render a committed Session. Terminal states are announced once."""
        prev = self._last
        self._last = session

        self.query_one("#progress-panel", ProgressPanel).update_session(session)
        input_widget = self.query_one("#chat-input", Input)
        input_widget.placeholder = _PLACEHOLDERS.get(session.status, _DEFAULT_PLACEHOLDER)
        input_widget.disabled = session.is_generating
        msg_list = self.query_one("#message-list", MessageList)

        if session.is_generating:
            if prev is None or not prev.is_generating:
                self._last_step = ""
            msg_list.show_loading()
            step = session.current_step
            if step and step != self._last_step:
                self._last_step = step
                label = STEP_MESSAGES.get(step)
                if label:
                    msg_list.append_status(label)
            return

        msg_list.hide_loading()
        input_widget.focus()
        if prev is not None and prev.status == session.status:
            return

        if session.status == Status.AWAITING_INPUT:
            msg_list.settle_pending()
            msg_list.append_message("ai", format_questions(session.pending_questions))
        elif session.status == Status.COMPLETED:
            msg_list.settle_pending()
            msg_list.append_status("Website generated successfully!", "success")
            result = session.result
            names = ", ".join(result.pages)
            text = f"Your website is ready! I've created {len(result.pages)} pages including {names}."
            if result.folder_path:
                text += f"\n\nPreview: {website_url(self.app.config.base_url, result.folder_path)}"
            msg_list.append_message("ai", text)
        elif session.status == Status.FAILED:
            msg_list.settle_pending("error")
            msg_list.append_status("Generation failed", "error")
            msg_list.append_message(
                "ai",
                f"I encountered an error: {session.last_error}. "
                "Please try again or refine your description.",
            )

    # ── Actions ──────────────────────────────────────────────

    def action_new_chat(self) -> None:
        self.app.controller.reset()
        self._last = None
        self._last_step = ""
        msg_list = self.query_one("#message-list", MessageList)
        msg_list.clear_messages()
        msg_list.append_message("ai", FRESH_START)

    def action_open_gallery(self) -> None:
        from sitegen.tui.screens.gallery import GalleryScreen
        self.app.push_screen(GalleryScreen())
