"""Gallery of previously generated websites."""

from __future__ import annotations

from textual.binding import Binding
from textual.screen import Screen
from textual.widgets import DataTable, Footer, Header, Static

from sitegen.client import list_websites, site_name, website_url
from sitegen.tui.messages import WebsitesLoaded


def get_selected_row_key(table: DataTable) -> str | None:
    """Return the string key of the selected row, or None if nothing is selected."""
    if table.row_count == 0:
        return None
    row_idx = table.cursor_row
    if row_idx is None:
        return None
    return table.ordered_rows[row_idx].key.value


class GalleryScreen(Screen):
    """Lists sites from the backend; Enter shows the preview URL."""

    BINDINGS = [
        Binding("escape", "go_back", "Back"),
        Binding("r", "refresh", "Refresh"),
        Binding("enter", "show_url", "Preview URL", show=False),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._urls: dict[str, str] = {}

    def compose(self):
        yield Header()
        yield Static("[dim]Loading websites...[/dim]", id="gallery-empty", classes="empty-state")
        yield DataTable(id="gallery-table", cursor_type="row")
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#gallery-table", DataTable)
        table.add_column("Name", key="name")
        table.add_column("Created", key="created")
        table.add_column("Pages", key="pages")
        table.add_column("URL", key="url")
        table.display = False
        self.action_refresh()

    def action_refresh(self) -> None:
        base_url = self.app.config.base_url
        self.run_worker(
            lambda: self.post_message(WebsitesLoaded(list_websites(base_url))),
            thread=True,
        )

    def on_websites_loaded(self, message: WebsitesLoaded) -> None:
        base_url = self.app.config.base_url
        table = self.query_one("#gallery-table", DataTable)
        table.clear()
        self._urls = {}
        for site in message.websites:
            folder = site.get("folder_path") or site.get("name") or ""
            if not folder:
                continue
            name = site.get("name") or site_name(folder)
            url = website_url(base_url, folder)
            if name in self._urls:
                continue
            self._urls[name] = url
            pages = site.get("pages") or []
            table.add_row(
                name,
                site.get("created_at", ""),
                str(len(pages)) if pages else "",
                url,
                key=name,
            )

        empty = self.query_one("#gallery-empty", Static)
        empty.update("[dim]No websites generated yet.[/dim]")
        empty.display = not self._urls
        table.display = bool(self._urls)
        if self._urls:
            table.focus()

    def action_show_url(self) -> None:
        key = get_selected_row_key(self.query_one("#gallery-table", DataTable))
        if key is not None:
            self.notify(self._urls[key], title=key)

    def action_go_back(self) -> None:
        self.app.pop_screen()
