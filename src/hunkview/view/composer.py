"""Project view state and cached diff data into a frame of styled lines.

Composition is read-only: it slices the rows visible at the current scroll
offset and styles them. Painting the result is left to the terminal layer.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from rich.style import Style
from rich.text import Text

from hunkview.diff.align import AlignedRow, HunkMarker, UnifiedRow, unified_rows
from hunkview.diff.models import DiffLine, FileDiff
from hunkview.errors import LayoutError
from hunkview.highlight.overlay import FileHighlight, Side, StyledLine
from hunkview.view.cache import DiffCaches
from hunkview.view.state import (
    FOOTER_HEIGHT,
    PANEL_BORDER,
    ViewMode,
    ViewState,
    content_height,
    footer_shown,
)

MIN_WIDTH = 20
MIN_HEIGHT = 3
MIN_DIFF_WIDTH = 40

ADDED_BG = "rgb(0,100,0)"
REMOVED_BG = "rgb(139,0,0)"
ADDED_EMPHASIS_BG = "rgb(0,150,0)"
REMOVED_EMPHASIS_BG = "rgb(190,30,30)"
GAP_STYLE = Style(bgcolor="rgb(40,40,40)")
MARKER_STYLE = Style(color="white", bgcolor="blue", bold=True)
GUTTER_STYLE = Style(color="grey50")
NOTICE_STYLE = Style(color="grey62", italic=True)

STATUS_COLORS: dict[str, str] = {
    "added": "green",
    "modified": "yellow",
    "deleted": "red",
    "renamed": "cyan",
}

_OVERLAY_BG = {"added": ADDED_BG, "removed": REMOVED_BG}
_EMPHASIS_BG = {"added": ADDED_EMPHASIS_BG, "removed": REMOVED_EMPHASIS_BG}


@dataclass(frozen=True, slots=True)
class Region:
    x: int
    y: int
    width: int
    height: int

    @property
    def inner_width(self) -> int:
        return max(0, self.width - PANEL_BORDER)

    @property
    def inner_height(self) -> int:
        return max(0, self.height - PANEL_BORDER)


@dataclass(slots=True)
class Column:
    title: str
    region: Region
    lines: list[Text] = field(default_factory=list)


@dataclass(slots=True)
class Frame:
    mode: ViewMode
    file_list: Region | None
    diff: Region
    footer: Region | None
    file_items: list[Text]
    selected: int
    columns: list[Column]
    total_rows: int = 0
    scroll_offset: int = 0

    @property
    def position(self) -> str:
        if not self.columns or self.total_rows == 0:
            return ""
        visible = len(self.columns[0].lines)
        first = self.scroll_offset + 1
        last = self.scroll_offset + visible
        return f"{first}-{last}/{self.total_rows}"


def layout_regions(
    width: int,
    height: int,
    *,
    footer_visible: bool,
    file_list_width: int,
) -> tuple[Region | None, Region, Region | None]:
    """Split the terminal into file list, diff panel and footer.

    Narrow terminals drop the file list, short ones drop the footer; only a
    terminal too small for a bordered panel at all raises.
    """
    if width < MIN_WIDTH or height < MIN_HEIGHT:
        raise LayoutError(f"Terminal too small ({width}x{height}); need at least {MIN_WIDTH}x{MIN_HEIGHT}")

    rows = content_height(height, footer_visible)
    footer: Region | None = None
    if footer_shown(height, footer_visible):
        footer = Region(0, rows, width, FOOTER_HEIGHT)

    if width >= file_list_width + MIN_DIFF_WIDTH:
        file_list = Region(0, 0, file_list_width, rows)
        diff = Region(file_list_width, 0, width - file_list_width, rows)
        return file_list, diff, footer
    return None, Region(0, 0, width, rows), footer


def compose_frame(
    state: ViewState,
    files: Sequence[FileDiff],
    caches: DiffCaches,
    *,
    file_list_width: int = 30,
) -> Frame:
    file_region, diff_region, footer_region = layout_regions(
        state.width,
        state.height,
        footer_visible=state.footer_visible,
        file_list_width=file_list_width,
    )
    items = [_file_item(file, idx == state.selected, file_region) for idx, file in enumerate(files)]
    frame = Frame(
        mode=state.mode,
        file_list=file_region,
        diff=diff_region,
        footer=footer_region,
        file_items=items,
        selected=state.selected,
        columns=[],
    )

    if not files:
        frame.columns = [_notice_column("hunkview", diff_region, "No changes.")]
        return frame

    file = files[state.selected]
    if file.binary:
        frame.columns = [_notice_column(file.display_name, diff_region, "Binary file differs.")]
        return frame
    if not file.hunks:
        frame.columns = [_notice_column(file.display_name, diff_region, "No textual changes.")]
        return frame

    highlight = caches.highlights.get(state.selected)
    offset = state.scroll_offset
    visible = diff_region.inner_height
    frame.scroll_offset = offset

    if state.mode == "side-by-side":
        rows = caches.alignments.get(state.selected)
        frame.total_rows = len(rows)
        left_width = diff_region.width // 2
        left = Region(diff_region.x, 0, left_width, diff_region.height)
        right = Region(diff_region.x + left_width, 0, diff_region.width - left_width, diff_region.height)
        old_column = Column(f"Old: {file.old_path or file.display_name}", left)
        new_column = Column(f"New: {file.new_path or file.display_name}", right)
        for row in rows[offset : offset + visible]:
            if isinstance(row, HunkMarker):
                old_column.lines.append(_marker_line(row, left.inner_width))
                new_column.lines.append(_marker_line(row, right.inner_width))
                continue
            old_column.lines.append(_cell(row, "old", highlight, state.h_offset, left.inner_width, caches.tab_width))
            new_column.lines.append(_cell(row, "new", highlight, state.h_offset, right.inner_width, caches.tab_width))
        frame.columns = [old_column, new_column]
        return frame

    unified: list[UnifiedRow] = unified_rows(file)
    frame.total_rows = len(unified)
    column = Column(file.display_name, diff_region)
    for row in unified[offset : offset + visible]:
        if isinstance(row, HunkMarker):
            column.lines.append(_marker_line(row, diff_region.inner_width))
        else:
            column.lines.append(
                _unified_line(row, highlight, state.h_offset, diff_region.inner_width, caches.tab_width)
            )
    frame.columns = [column]
    return frame


def _file_item(file: FileDiff, selected: bool, region: Region | None) -> Text:
    item = Text()
    item.append(f"{file.status_letter} ", style=Style(color=STATUS_COLORS[file.status], bold=True))
    item.append(file.display_name)
    if region is not None:
        item.truncate(region.inner_width, overflow="ellipsis")
    if selected:
        item.stylize(Style(bgcolor="grey30", bold=True))
    return item


def _notice_column(title: str, region: Region, message: str) -> Column:
    return Column(title, region, [Text(message, style=NOTICE_STYLE)])


def _marker_line(marker: HunkMarker, width: int) -> Text:
    line = Text(marker.hunk.header, style=MARKER_STYLE)
    return _fit(line, width, MARKER_STYLE)


def _unified_line(
    line: DiffLine,
    highlight: FileHighlight,
    h_offset: int,
    width: int,
    tab_width: int,
) -> Text:
    old = f"{line.old_number:>4}" if line.old_number is not None else "    "
    new = f"{line.new_number:>4}" if line.new_number is not None else "    "
    text = Text()
    text.append(f"{old}:{new} ", style=GUTTER_STYLE)
    background = _OVERLAY_BG.get(line.kind)
    prefix_style = Style(color="white", bgcolor=background)
    text.append(f"{line.prefix} ", style=prefix_style)
    _append_segments(text, highlight.segments(line), h_offset, tab_width)
    return _fit(text, width, Style(bgcolor=background) if background else None)


def _cell(
    row: AlignedRow,
    side: Side,
    highlight: FileHighlight,
    h_offset: int,
    width: int,
    tab_width: int,
) -> Text:
    line = row.old if side == "old" else row.new
    if line is None:
        return Text(" " * width, style=GAP_STYLE)
    number = line.old_number if side == "old" else line.new_number
    text = Text()
    text.append(f"{number:>4} " if number is not None else "     ", style=GUTTER_STYLE)
    _append_segments(text, highlight.segments(line, side), h_offset, tab_width)
    background = _OVERLAY_BG.get(line.kind)
    return _fit(text, width, Style(bgcolor=background) if background else None)


def _append_segments(text: Text, segments: StyledLine, h_offset: int, tab_width: int) -> None:
    column = 0
    for segment in segments:
        expanded, column_after = _expand_tabs(segment.text, column, tab_width)
        skip = max(0, h_offset - column)
        column = column_after
        if skip >= len(expanded):
            continue
        style = segment.style
        if segment.overlay != "none":
            table = _EMPHASIS_BG if segment.emphasis else _OVERLAY_BG
            style = style + Style(bgcolor=table[segment.overlay])
        text.append(expanded[skip:], style=style)


def _expand_tabs(value: str, column: int, tab_width: int) -> tuple[str, int]:
    if "\t" not in value:
        return value, column + len(value)
    parts: list[str] = []
    for char in value:
        if char == "\t":
            spaces = tab_width - (column % tab_width)
            parts.append(" " * spaces)
            column += spaces
        else:
            parts.append(char)
            column += 1
    return "".join(parts), column


def _fit(text: Text, width: int, pad_style: Style | None) -> Text:
    if width <= 0:
        return Text()
    if text.cell_len < width and pad_style is not None:
        text.append(" " * (width - text.cell_len), style=pad_style)
    text.truncate(width, overflow="crop")
    text.no_wrap = True
    return text
