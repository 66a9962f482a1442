"""Main diff screen: key bindings, state dispatch and frame painting."""

from __future__ import annotations

from collections.abc import Sequence

from rich.text import Text
from textual import events
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.screen import Screen
from textual.widgets import Footer

from hunkview.config.models import AppSettings
from hunkview.diff.models import FileDiff
from hunkview.errors import LayoutError
from hunkview.runtime_logging import get_runtime_logger
from hunkview.view.cache import DiffCaches
from hunkview.view.composer import Column, Frame, Region, compose_frame
from hunkview.view.state import (
    GoToBottom,
    GoToTop,
    NextFile,
    PreviousFile,
    Quit,
    Resize,
    ScrollDown,
    ScrollLeft,
    ScrollRight,
    ScrollUp,
    ToggleFooter,
    ToggleViewMode,
    ViewEvent,
    ViewState,
    ViewStateMachine,
    initial_state,
)
from hunkview.widgets.diff_column import DiffColumn
from hunkview.widgets.file_list import FileListPanel


class DiffScreen(Screen):
    BINDINGS = [
        Binding("q", "quit_viewer", "Quit"),
        Binding("j,down", "next_file", "Next file"),
        Binding("k,up", "previous_file", "Prev file"),
        Binding("d,pagedown", "page_down", "Page down"),
        Binding("u,pageup", "page_up", "Page up"),
        Binding("ctrl+e", "line_down", "Line down", show=False),
        Binding("ctrl+y", "line_up", "Line up", show=False),
        Binding("g,home", "top", "Top"),
        Binding("G,end", "bottom", "Bottom"),
        Binding("h,left", "scroll_columns(-4)", "Left", show=False),
        Binding("l,right", "scroll_columns(4)", "Right", show=False),
        Binding("H", "scroll_columns(-20)", "Far left", show=False),
        Binding("L", "scroll_columns(20)", "Far right", show=False),
        Binding("s", "toggle_view", "Toggle view"),
        Binding("question_mark", "toggle_footer", "Hide help"),
    ]

    DEFAULT_CSS = """
    DiffScreen {
        layout: vertical;
    }

    #body {
        height: 1fr;
        layout: horizontal;
    }
    """

    def __init__(
        self,
        *,
        files: Sequence[FileDiff],
        caches: DiffCaches,
        settings: AppSettings,
        side_by_side: bool = False,
    ) -> None:
        self.files = files
        self.caches = caches
        self.settings = settings
        self.side_by_side = side_by_side
        self.machine: ViewStateMachine | None = None
        self.frame: Frame | None = None
        self.layout_error: str | None = None
        self.logger = get_runtime_logger()
        super().__init__()

    def compose(self) -> ComposeResult:
        with Horizontal(id="body"):
            yield FileListPanel(id="files")
            yield DiffColumn(id="old")
            yield DiffColumn(id="new")
        yield Footer()

    def on_mount(self) -> None:
        size = self.app.size
        wants_split = self.side_by_side or self.settings.view.mode == "side-by-side"
        state = initial_state(
            len(self.files),
            width=size.width,
            height=size.height,
            mode="side-by-side" if wants_split else "unified",
            footer_visible=self.settings.view.show_footer,
        )
        self.machine = ViewStateMachine(state, self.caches)
        self.logger.info(
            "screen.mounted",
            files=len(self.files),
            width=size.width,
            height=size.height,
            mode=state.mode,
        )
        self.refresh_frame()

    @property
    def state(self) -> ViewState | None:
        return self.machine.state if self.machine is not None else None

    def on_resize(self, event: events.Resize) -> None:
        self.dispatch_event(Resize(event.size.width, event.size.height))

    def dispatch_event(self, event: ViewEvent) -> None:
        if self.machine is None:
            return
        state = self.machine.dispatch(event)
        if state.quit:
            self.logger.info(
                "screen.quit",
                highlighted_files=len(self.caches.highlights),
                aligned_files=len(self.caches.alignments),
            )
            self.app.exit()
            return
        self.refresh_frame()

    def refresh_frame(self) -> None:
        if self.machine is None:
            return
        try:
            frame = compose_frame(
                self.machine.state,
                self.files,
                self.caches,
                file_list_width=self.settings.view.file_list_width,
            )
        except LayoutError as exc:
            self.logger.warning("screen.layout_degraded", error=str(exc))
            self.layout_error = str(exc)
            self._paint_too_small(str(exc))
            return
        self.layout_error = None
        self.frame = frame
        self.paint(frame)
        for message in self.caches.drain_failures():
            self.notify(message, severity="warning")

    def paint(self, frame: Frame) -> None:
        self.query_one("#files", FileListPanel).paint(frame.file_list, frame.file_items, frame.selected)
        columns: list[Column | None] = [*frame.columns, None, None]
        self.query_one("#old", DiffColumn).paint(columns[0], frame.position)
        self.query_one("#new", DiffColumn).paint(columns[1], frame.position)
        self.query_one(Footer).display = frame.footer is not None

    def _paint_too_small(self, message: str) -> None:
        size = self.app.size
        region = Region(0, 0, max(1, size.width), max(1, size.height))
        self.query_one("#files", FileListPanel).paint(None, [], 0)
        self.query_one("#new", DiffColumn).paint(None)
        self.query_one("#old", DiffColumn).paint(Column("hunkview", region, [Text(message)]))
        self.query_one(Footer).display = False

    def action_quit_viewer(self) -> None:
        self.dispatch_event(Quit())

    def action_next_file(self) -> None:
        self.dispatch_event(NextFile())

    def action_previous_file(self) -> None:
        self.dispatch_event(PreviousFile())

    def action_page_down(self) -> None:
        self.dispatch_event(ScrollDown(self.settings.view.page_size))

    def action_page_up(self) -> None:
        self.dispatch_event(ScrollUp(self.settings.view.page_size))

    def action_line_down(self) -> None:
        self.dispatch_event(ScrollDown(1))

    def action_line_up(self) -> None:
        self.dispatch_event(ScrollUp(1))

    def action_top(self) -> None:
        self.dispatch_event(GoToTop())

    def action_bottom(self) -> None:
        self.dispatch_event(GoToBottom())

    def action_scroll_columns(self, columns: int) -> None:
        if columns < 0:
            self.dispatch_event(ScrollLeft(-columns))
        else:
            self.dispatch_event(ScrollRight(columns))

    def action_toggle_view(self) -> None:
        self.dispatch_event(ToggleViewMode())

    def action_toggle_footer(self) -> None:
        self.dispatch_event(ToggleFooter())
