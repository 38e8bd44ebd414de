"""Session status sidebar for the chat screen."""

from __future__ import annotations

from rich.markup import escape
from textual.containers import Vertical
from textual.widgets import ProgressBar, Static

from sitegen.client import website_url
from sitegen.session import Session, Status

_STATUS_LABELS = {
    Status.IDLE: "Ready",
    Status.GENERATING: "Generating",
    Status.AWAITING_INPUT: "Waiting for your answers",
    Status.COMPLETED: "Complete",
    Status.FAILED: "Failed",
}


class ProgressPanel(Vertical):
    """Shows status, step, progress, thread and plan of the current session."""

    def __init__(self, base_url: str, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.base_url = base_url

    def compose(self):
        yield Static("[bold]New project[/bold]", id="panel-title", classes="info-title")
        yield Static("", id="panel-status", classes="info-field")
        yield Static("", id="panel-step", classes="info-field")
        yield ProgressBar(total=100, show_eta=False, id="panel-progress")
        yield Static("", id="panel-thread", classes="info-field")
        yield Static("", id="panel-url", classes="info-field")
        yield Static("", id="panel-plan", classes="info-plan")

    def on_mount(self) -> None:
        self.update_session(Session())

    def update_session(self, session: Session) -> None:
        status = _STATUS_LABELS[session.status]
        if session.status == Status.FAILED and session.last_error:
            status += f": {session.last_error}"
        self.query_one("#panel-status", Static).update(f"Status: {escape(status)}")

        step = session.current_step
        self.query_one("#panel-step", Static).update(f"Step: {escape(step)}" if step else "")
        self.query_one("#panel-progress", ProgressBar).update(progress=session.progress)

        thread = session.thread_id
        self.query_one("#panel-thread", Static).update(f"Thread: {escape(thread)}" if thread else "")

        title = "New project"
        url = ""
        if session.result and session.result.folder_path:
            url = website_url(self.base_url, session.result.folder_path)
            title = url.rsplit("/", 2)[-2]
        self.query_one("#panel-title", Static).update(f"[bold]{escape(title)}[/bold]")
        self.query_one("#panel-url", Static).update(f"Preview: {escape(url)}" if url else "")

        plan = session.business_plan or (session.result.business_plan if session.result else None)
        self.query_one("#panel-plan", Static).update(
            f"[bold]Business plan[/bold]\n{escape(plan)}" if plan else ""
        )
