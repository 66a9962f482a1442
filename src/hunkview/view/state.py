"""Navigation and view state machine.

``transition`` is total: every (state, event) pair yields a state, and any
out-of-range result is clamped instead of rejected. Scroll offsets are kept
per file and per view mode so reselecting a file restores where it was left.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import Literal, Protocol, Union

from hunkview.runtime_logging import get_runtime_logger

ViewMode = Literal["unified", "side-by-side"]

SIDE_BY_SIDE_MIN_WIDTH = 120
FOOTER_HEIGHT = 1
PANEL_BORDER = 2
MIN_PANEL_HEIGHT = 3


class ContentMetrics(Protocol):
    def row_count(self, index: int, mode: str) -> int: ...

    def column_count(self, index: int) -> int: ...


@dataclass(frozen=True, slots=True)
class NextFile:
    pass


@dataclass(frozen=True, slots=True)
class PreviousFile:
    pass


@dataclass(frozen=True, slots=True)
class ScrollDown:
    lines: int = 1


@dataclass(frozen=True, slots=True)
class ScrollUp:
    lines: int = 1


@dataclass(frozen=True, slots=True)
class ScrollLeft:
    columns: int = 1


@dataclass(frozen=True, slots=True)
class ScrollRight:
    columns: int = 1


@dataclass(frozen=True, slots=True)
class GoToTop:
    pass


@dataclass(frozen=True, slots=True)
class GoToBottom:
    pass


@dataclass(frozen=True, slots=True)
class ToggleViewMode:
    pass


@dataclass(frozen=True, slots=True)
class ToggleFooter:
    pass


@dataclass(frozen=True, slots=True)
class Resize:
    width: int
    height: int


@dataclass(frozen=True, slots=True)
class Quit:
    pass


ViewEvent = Union[
    NextFile,
    PreviousFile,
    ScrollDown,
    ScrollUp,
    ScrollLeft,
    ScrollRight,
    GoToTop,
    GoToBottom,
    ToggleViewMode,
    ToggleFooter,
    Resize,
    Quit,
]


def footer_shown(height: int, footer_visible: bool) -> bool:
    """Whether the footer gets a row; it yields to the panel on short terminals."""
    return footer_visible and height - FOOTER_HEIGHT >= MIN_PANEL_HEIGHT


def content_height(height: int, footer_visible: bool) -> int:
    return height - FOOTER_HEIGHT if footer_shown(height, footer_visible) else height


def viewport_height(height: int, footer_visible: bool) -> int:
    """Rows available for diff content inside the bordered panel."""
    return max(0, content_height(height, footer_visible) - PANEL_BORDER)


@dataclass(frozen=True, slots=True)
class ViewState:
    file_count: int
    selected: int = 0
    mode: ViewMode = "unified"
    footer_visible: bool = True
    width: int = 80
    height: int = 24
    offsets: Mapping[tuple[int, ViewMode], int] = field(default_factory=dict)
    h_offset: int = 0
    quit: bool = False

    @property
    def viewport_height(self) -> int:
        return viewport_height(self.height, self.footer_visible)

    @property
    def scroll_offset(self) -> int:
        return self.offset_for(self.selected, self.mode)

    def offset_for(self, index: int, mode: ViewMode) -> int:
        return self.offsets.get((index, mode), 0)


def initial_state(
    file_count: int,
    *,
    width: int,
    height: int,
    mode: ViewMode = "unified",
    footer_visible: bool = True,
) -> ViewState:
    if width < SIDE_BY_SIDE_MIN_WIDTH:
        mode = "unified"
    return ViewState(
        file_count=file_count,
        mode=mode,
        footer_visible=footer_visible,
        width=width,
        height=height,
    )


def max_scroll(state: ViewState, metrics: ContentMetrics, index: int, mode: ViewMode) -> int:
    return max(0, metrics.row_count(index, mode) - state.viewport_height)


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def _with_offset(
    state: ViewState,
    metrics: ContentMetrics,
    index: int,
    mode: ViewMode,
    value: int,
) -> ViewState:
    clamped = _clamp(value, 0, max_scroll(state, metrics, index, mode))
    if state.offset_for(index, mode) == clamped and (index, mode) in state.offsets:
        return state
    offsets = dict(state.offsets)
    offsets[(index, mode)] = clamped
    return replace(state, offsets=offsets)


def _scroll_to(state: ViewState, metrics: ContentMetrics, value: int) -> ViewState:
    if state.file_count == 0:
        return state
    return _with_offset(state, metrics, state.selected, state.mode, value)


def _reclamp_all(state: ViewState, metrics: ContentMetrics) -> ViewState:
    offsets = {
        key: _clamp(value, 0, max_scroll(state, metrics, key[0], key[1]))
        for key, value in state.offsets.items()
    }
    h_limit = max(0, metrics.column_count(state.selected) - 1) if state.file_count else 0
    return replace(state, offsets=offsets, h_offset=_clamp(state.h_offset, 0, h_limit))


def _select(state: ViewState, metrics: ContentMetrics, delta: int) -> ViewState:
    if state.file_count == 0:
        return state
    target = _clamp(state.selected + delta, 0, state.file_count - 1)
    if target == state.selected:
        return state
    moved = replace(state, selected=target, h_offset=0)
    return _with_offset(moved, metrics, target, moved.mode, moved.offset_for(target, moved.mode))


def _on_next(state: ViewState, event: NextFile, metrics: ContentMetrics) -> ViewState:
    return _select(state, metrics, 1)


def _on_previous(state: ViewState, event: PreviousFile, metrics: ContentMetrics) -> ViewState:
    return _select(state, metrics, -1)


def _on_scroll_down(state: ViewState, event: ScrollDown, metrics: ContentMetrics) -> ViewState:
    return _scroll_to(state, metrics, state.scroll_offset + max(0, event.lines))


def _on_scroll_up(state: ViewState, event: ScrollUp, metrics: ContentMetrics) -> ViewState:
    return _scroll_to(state, metrics, state.scroll_offset - max(0, event.lines))


def _on_scroll_left(state: ViewState, event: ScrollLeft, metrics: ContentMetrics) -> ViewState:
    return replace(state, h_offset=max(0, state.h_offset - max(0, event.columns)))


def _on_scroll_right(state: ViewState, event: ScrollRight, metrics: ContentMetrics) -> ViewState:
    if state.file_count == 0:
        return state
    limit = max(0, metrics.column_count(state.selected) - 1)
    return replace(state, h_offset=_clamp(state.h_offset + max(0, event.columns), 0, limit))


def _on_top(state: ViewState, event: GoToTop, metrics: ContentMetrics) -> ViewState:
    return _scroll_to(state, metrics, 0)


def _on_bottom(state: ViewState, event: GoToBottom, metrics: ContentMetrics) -> ViewState:
    if state.file_count == 0:
        return state
    return _scroll_to(state, metrics, max_scroll(state, metrics, state.selected, state.mode))


def _on_toggle_mode(state: ViewState, event: ToggleViewMode, metrics: ContentMetrics) -> ViewState:
    if state.width < SIDE_BY_SIDE_MIN_WIDTH:
        return state
    mode: ViewMode = "unified" if state.mode == "side-by-side" else "side-by-side"
    toggled = replace(state, mode=mode)
    if state.file_count == 0:
        return toggled
    return _with_offset(toggled, metrics, state.selected, mode, toggled.scroll_offset)


def _on_toggle_footer(state: ViewState, event: ToggleFooter, metrics: ContentMetrics) -> ViewState:
    toggled = replace(state, footer_visible=not state.footer_visible)
    return _scroll_to(toggled, metrics, toggled.scroll_offset)


def _on_resize(state: ViewState, event: Resize, metrics: ContentMetrics) -> ViewState:
    resized = replace(state, width=max(0, event.width), height=max(0, event.height))
    if resized.mode == "side-by-side" and resized.width < SIDE_BY_SIDE_MIN_WIDTH:
        resized = replace(resized, mode="unified")
    return _reclamp_all(resized, metrics)


def _on_quit(state: ViewState, event: Quit, metrics: ContentMetrics) -> ViewState:
    return replace(state, quit=True)


_HANDLERS: dict[type, Callable[[ViewState, object, ContentMetrics], ViewState]] = {
    NextFile: _on_next,
    PreviousFile: _on_previous,
    ScrollDown: _on_scroll_down,
    ScrollUp: _on_scroll_up,
    ScrollLeft: _on_scroll_left,
    ScrollRight: _on_scroll_right,
    GoToTop: _on_top,
    GoToBottom: _on_bottom,
    ToggleViewMode: _on_toggle_mode,
    ToggleFooter: _on_toggle_footer,
    Resize: _on_resize,
    Quit: _on_quit,
}  # type: ignore[dict-item]


def transition(state: ViewState, event: ViewEvent, metrics: ContentMetrics) -> ViewState:
    handler = _HANDLERS.get(type(event))
    if handler is None:
        return state
    return handler(state, event, metrics)


class ViewStateMachine:
    def __init__(self, state: ViewState, metrics: ContentMetrics) -> None:
        self.state = state
        self.metrics = metrics

    def dispatch(self, event: ViewEvent) -> ViewState:
        previous = self.state
        self.state = transition(previous, event, self.metrics)
        if self.state is not previous:
            get_runtime_logger().debug(
                "view.transition",
                event_type=type(event).__name__,
                selected=self.state.selected,
                mode=self.state.mode,
                offset=self.state.scroll_offset,
                h_offset=self.state.h_offset,
            )
        return self.state
