"""sysguard - Main Textual application."""

from collections.abc import Callable

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.css.query import NoMatches
from textual.timer import Timer
from textual.widgets import Button, ContentSwitcher, DataTable, Footer, Input, Static

from sysguard.config import Settings
from sysguard.controller import ProcessViewController
from sysguard.logging_setup import get_logger, setup_logging
from sysguard.models import DisplayModel, SortDirection, SortKey, View

log = get_logger(__name__)

NAV_ITEMS: list[tuple[View, str]] = [
    (View.HOME, "Home"),
    (View.PROCESSES, "Processes"),
    (View.SETTINGS, "Settings"),
]

COLUMNS: list[tuple[SortKey, str, int | None]] = [
    (SortKey.PID, "PID", 8),
    (SortKey.NAME, "Name", None),
    (SortKey.CPU, "CPU%", 8),
    (SortKey.MEMORY, "RES", 9),
]


def format_bytes(size: int) -> str:
    """Format bytes as human-readable string."""
    for unit in ["B", "K", "M", "G", "T"]:
        if size < 1024:
            return f"{size:5.1f}{unit}" if unit != "B" else f"{size:5d}{unit}"
        size = size / 1024
    return f"{size:.1f}P"


def describe(model: DisplayModel) -> str:
    """One-line summary of the page, filter and sort shown in ``model``."""
    arrow = "▼" if model.sort_direction is SortDirection.DESCENDING else "▲"
    page = model.current_page + 1 if model.total_pages else 0
    text = (
        f"Page {page} of {model.total_pages}  |  "
        f"{model.total_filtered} processes  |  "
        f"sort: {model.sort_key.value} {arrow}"
    )
    if model.query:
        text += f"  |  filter: {model.query!r}"
    return text


class TextualTimer:
    """One-shot refresh timer running on the app's event loop."""

    def __init__(self, app: App) -> None:
        self._app = app
        self._handle: Timer | None = None

    def start(self, interval: float, callback: Callable[[], None]) -> None:
        self._handle = self._app.set_timer(interval, callback, name="sysguard-refresh")

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.stop()
            self._handle = None


class NavBar(Vertical):
    """Sidebar with one button per screen."""

    DEFAULT_CSS = """
    NavBar {
        width: 20;
        background: $surface;
        padding: 1 0;
    }

    NavBar Button {
        width: 100%;
        margin-bottom: 1;
    }
    """

    def compose(self) -> ComposeResult:
        """Compose the navigation buttons."""
        for view, label in NAV_ITEMS:
            yield Button(label, id=f"nav-{view.value}")

    def highlight(self, active: View) -> None:
        """Mark the button for ``active`` as selected."""
        for view, _ in NAV_ITEMS:
            button = self.query_one(f"#nav-{view.value}", Button)
            button.variant = "primary" if view is active else "default"


class ProcessTable(Container):
    """Container for the process data table."""

    DEFAULT_CSS = """
    ProcessTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize ProcessTable."""
        super().__init__(*args, **kwargs)
        self._current_pids: list[int] = []

    @property
    def current_pids(self) -> list[int]:
        """Pids of the rows being shown, top to bottom."""
        return list(self._current_pids)

    def compose(self) -> ComposeResult:
        """Compose the process table."""
        yield DataTable(id="process-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#process-table", DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        for key, label, width in COLUMNS:
            table.add_column(label, key=key.value, width=width)

    def show(self, model: DisplayModel) -> None:
        """Replace the rows with the records of ``model``."""
        table = self.query_one("#process-table", DataTable)
        table.clear()
        for proc in model.visible_records:
            table.add_row(
                str(proc.pid),
                proc.name[:40],
                f"{proc.cpu_percent:5.1f}",
                format_bytes(proc.memory_bytes),
                key=str(proc.pid),
            )
        self._current_pids = [proc.pid for proc in model.visible_records]


class SysguardApp(App):
    """Main sysguard application."""

    TITLE = "sysguard"
    SUB_TITLE = "Process Viewer"

    CSS = """
    Screen {
        layout: vertical;
    }

    #body {
        height: 1fr;
    }

    #filter {
        dock: top;
    }

    #status {
        height: 1;
        padding: 0 1;
        background: $boost;
    }

    .screen-text {
        padding: 1 2;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("ctrl+r", "refresh", "Refresh"),
        ("pagedown", "next_page", "Next page"),
        ("pageup", "prev_page", "Prev page"),
        ("f2", "sort('pid')", "PID"),
        ("f3", "sort('name')", "Name"),
        ("f4", "sort('cpu')", "CPU"),
        ("f6", "sort('memory')", "Mem"),
        ("slash", "search", "Search"),
    ]

    def __init__(self, settings: Settings | None = None, **controller_kwargs) -> None:
        """
        Initialize the SysguardApp.

        Args:
            settings: Pipeline and logging settings. Read from the
                environment when omitted.
            **controller_kwargs: Passed to ProcessViewController
                (collector, executor, own_pid).
        """
        super().__init__()
        self.settings = settings if settings is not None else Settings.from_env()
        self.controller = ProcessViewController(
            self.settings,
            TextualTimer(self),
            publish=self._show_model,
            **controller_kwargs,
        )

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        with Horizontal(id="body"):
            yield NavBar(id="nav")
            with ContentSwitcher(initial="processes", id="screens"):
                yield Static(
                    "sysguard\n\nLive process table. Open Processes to watch it.",
                    id="home",
                    classes="screen-text",
                )
                with Vertical(id="processes"):
                    yield Input(placeholder="Filter by name or PID", id="filter")
                    yield ProcessTable()
                    yield Static(describe(self.controller.model), id="status")
                yield Static(self._settings_text(), id="settings", classes="screen-text")
        yield Footer()

    def on_mount(self) -> None:
        """Start refreshing when the app is mounted."""
        self.query_one(NavBar).highlight(self.controller.context.view)
        self.controller.start()
        # Scan results arrive from worker threads through a queue.
        self.set_interval(0.1, self.controller.drain)

    def on_unmount(self) -> None:
        """Stop the refresh timer and any pending scans."""
        self.controller.close()

    def _settings_text(self) -> str:
        return (
            f"Page size: {self.settings.page_size}\n"
            f"Refresh interval: {self.settings.refresh_interval:g}s\n"
            f"Log level: {self.settings.log_level}\n"
            f"Log file: {self.settings.log_file or '-'}"
        )

    def _show_model(self, model: DisplayModel) -> None:
        """Render a model published by the controller."""
        try:
            self.query_one(ProcessTable).show(model)
            self.query_one("#status", Static).update(describe(model))
        except NoMatches:
            log.debug("app.render_skipped", ticket=model.ticket)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Switch screens from the sidebar."""
        if event.button.id is None or not event.button.id.startswith("nav-"):
            return
        view = View(event.button.id.removeprefix("nav-"))
        self.controller.navigate(view)
        self.query_one("#screens", ContentSwitcher).current = view.value
        self.query_one(NavBar).highlight(view)

    def on_input_changed(self, event: Input.Changed) -> None:
        """Filter the table as the user types."""
        if event.input.id == "filter":
            self.controller.set_query(event.value)

    def on_data_table_header_selected(self, event: DataTable.HeaderSelected) -> None:
        """Sort by the clicked column."""
        self.controller.select_sort(SortKey(event.column_key.value))

    def action_sort(self, key: str) -> None:
        """Handle sort action - sort by ``key`` or flip its direction."""
        self.controller.select_sort(SortKey(key))
        model = self.controller.model
        self.notify(f"Sort: {model.sort_key.value.upper()} {model.sort_direction.value}")

    def action_refresh(self) -> None:
        """Scan the process table now."""
        self.controller.request_refresh()

    def action_next_page(self) -> None:
        self.controller.next_page()

    def action_prev_page(self) -> None:
        self.controller.prev_page()

    def action_search(self) -> None:
        """Focus the filter input."""
        try:
            self.query_one("#filter", Input).focus()
        except NoMatches:
            pass

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self.controller.close()
        self.exit()


def main() -> None:
    """Entry point for sysguard application."""
    settings = Settings.from_env()
    setup_logging(settings.log_level, settings.log_file)
    app = SysguardApp(settings)
    app.run()


if __name__ == "__main__":
    main()
