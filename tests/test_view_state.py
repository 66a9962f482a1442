from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from hunkview.runtime_logging import configure_runtime_logging
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
    ViewState,
    ViewStateMachine,
    footer_shown,
    initial_state,
    max_scroll,
    transition,
    viewport_height,
)


class FakeMetrics:
    def __init__(self, rows: list[int], split_rows: list[int] | None = None, widths: list[int] | None = None) -> None:
        self.rows = rows
        self.split_rows = split_rows if split_rows is not None else rows
        self.widths = widths if widths is not None else [80] * len(rows)

    def row_count(self, index: int, mode: str) -> int:
        table = self.split_rows if mode == "side-by-side" else self.rows
        return table[index] if 0 <= index < len(table) else 0

    def column_count(self, index: int) -> int:
        return self.widths[index] if 0 <= index < len(self.widths) else 0


def _run(state: ViewState, metrics: FakeMetrics, *events) -> ViewState:  # noqa: ANN002
    for event in events:
        state = transition(state, event, metrics)
    return state


class ScrollTests(unittest.TestCase):
    def setUp(self) -> None:
        self.metrics = FakeMetrics([100, 5, 40])
        self.state = initial_state(3, width=100, height=24)

    def test_viewport_excludes_border_and_footer(self) -> None:
        self.assertEqual(self.state.viewport_height, 21)
        self.assertEqual(_run(self.state, self.metrics, ToggleFooter()).viewport_height, 22)

    def test_footer_yields_on_short_terminal(self) -> None:
        self.assertFalse(footer_shown(3, True))
        self.assertTrue(footer_shown(4, True))
        self.assertEqual(viewport_height(3, True), 1)
        self.assertEqual(viewport_height(4, True), 1)

        state = initial_state(1, width=100, height=3)
        self.assertEqual(state.viewport_height, 1)
        self.assertEqual(max_scroll(state, FakeMetrics([10]), 0, "unified"), 9)

    def test_scroll_down_clamps_at_last_page(self) -> None:
        state = _run(self.state, self.metrics, *[ScrollDown(10)] * 20)
        self.assertEqual(state.scroll_offset, 100 - 21)

    def test_scroll_up_clamps_at_zero(self) -> None:
        state = _run(self.state, self.metrics, ScrollDown(10), ScrollUp(25))
        self.assertEqual(state.scroll_offset, 0)

    def test_top_and_bottom(self) -> None:
        bottom = _run(self.state, self.metrics, GoToBottom())
        self.assertEqual(bottom.scroll_offset, 79)
        self.assertEqual(_run(bottom, self.metrics, GoToTop()).scroll_offset, 0)

    def test_short_file_never_scrolls(self) -> None:
        state = _run(self.state, self.metrics, NextFile(), ScrollDown(10), GoToBottom())
        self.assertEqual(state.selected, 1)
        self.assertEqual(state.scroll_offset, 0)

    def test_hiding_footer_reclamps_offset(self) -> None:
        state = _run(self.state, self.metrics, GoToBottom(), ToggleFooter())
        self.assertFalse(state.footer_visible)
        self.assertEqual(state.scroll_offset, 100 - 22)

    def test_resize_reclamps_every_offset(self) -> None:
        state = _run(self.state, self.metrics, GoToBottom(), NextFile(), NextFile(), GoToBottom())
        self.assertEqual(state.offset_for(2, "unified"), 40 - 21)

        grown = _run(state, self.metrics, Resize(100, 50))
        self.assertEqual(grown.offset_for(0, "unified"), 100 - 47)
        self.assertEqual(grown.offset_for(2, "unified"), 0)

    def test_horizontal_scroll_is_clamped_and_reset_on_file_change(self) -> None:
        metrics = FakeMetrics([10, 10], widths=[30, 30])
        state = initial_state(2, width=100, height=24)

        state = _run(state, metrics, ScrollRight(100))
        self.assertEqual(state.h_offset, 29)
        self.assertEqual(_run(state, metrics, ScrollLeft(50)).h_offset, 0)
        self.assertEqual(_run(state, metrics, NextFile()).h_offset, 0)


class SelectionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.metrics = FakeMetrics([100, 5, 40])
        self.state = initial_state(3, width=100, height=24)

    def test_selection_clamps_at_both_ends(self) -> None:
        self.assertEqual(_run(self.state, self.metrics, PreviousFile()).selected, 0)
        self.assertEqual(_run(self.state, self.metrics, *[NextFile()] * 5).selected, 2)

    def test_offset_is_restored_when_reselecting(self) -> None:
        state = _run(self.state, self.metrics, ScrollDown(30), NextFile(), PreviousFile())
        self.assertEqual(state.selected, 0)
        self.assertEqual(state.scroll_offset, 30)

    def test_zero_files_accepts_every_event(self) -> None:
        metrics = FakeMetrics([])
        state = initial_state(0, width=130, height=24)
        events = [
            NextFile(),
            PreviousFile(),
            ScrollDown(5),
            ScrollUp(5),
            ScrollLeft(4),
            ScrollRight(4),
            GoToTop(),
            GoToBottom(),
            ToggleViewMode(),
            ToggleFooter(),
            Resize(90, 10),
        ]
        state = _run(state, metrics, *events)

        self.assertEqual(state.selected, 0)
        self.assertEqual(state.scroll_offset, 0)
        self.assertEqual(state.h_offset, 0)
        self.assertTrue(_run(state, metrics, Quit()).quit)


class ModeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.metrics = FakeMetrics([60, 10], split_rows=[50, 10])

    def test_narrow_terminal_starts_unified(self) -> None:
        state = initial_state(2, width=100, height=24, mode="side-by-side")
        self.assertEqual(state.mode, "unified")

    def test_toggle_is_ignored_below_threshold(self) -> None:
        state = initial_state(2, width=119, height=24)
        self.assertEqual(_run(state, self.metrics, ToggleViewMode()).mode, "unified")

    def test_toggle_at_threshold(self) -> None:
        state = initial_state(2, width=120, height=24)
        toggled = _run(state, self.metrics, ToggleViewMode())
        self.assertEqual(toggled.mode, "side-by-side")
        self.assertEqual(_run(toggled, self.metrics, ToggleViewMode()).mode, "unified")

    def test_shrinking_forces_unified(self) -> None:
        state = initial_state(2, width=140, height=24, mode="side-by-side")
        self.assertEqual(state.mode, "side-by-side")

        narrowed = _run(state, self.metrics, Resize(100, 24))
        self.assertEqual(narrowed.mode, "unified")
        self.assertEqual(_run(narrowed, self.metrics, Resize(140, 24)).mode, "unified")

    def test_offsets_are_kept_per_mode(self) -> None:
        state = initial_state(2, width=140, height=24)
        state = _run(state, self.metrics, ScrollDown(20), ToggleViewMode())
        self.assertEqual(state.scroll_offset, 0)

        state = _run(state, self.metrics, ScrollDown(40))
        self.assertEqual(state.scroll_offset, 50 - 21)

        state = _run(state, self.metrics, ToggleViewMode())
        self.assertEqual(state.scroll_offset, 20)


class MachineTests(unittest.TestCase):
    def tearDown(self) -> None:
        configure_runtime_logging(level="off")

    def test_dispatch_updates_state(self) -> None:
        machine = ViewStateMachine(initial_state(2, width=100, height=24), FakeMetrics([50, 50]))

        machine.dispatch(ScrollDown(3))
        machine.dispatch(NextFile())

        self.assertEqual(machine.state.selected, 1)
        self.assertEqual(machine.state.offset_for(0, "unified"), 3)

    def test_dispatch_logs_transition(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "runtime.jsonl"
            configure_runtime_logging(level="debug", log_file=path)
            machine = ViewStateMachine(initial_state(1, width=100, height=24), FakeMetrics([50]))

            machine.dispatch(ScrollDown(1))

            payloads = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]

        (record,) = [item for item in payloads if item["event"] == "view.transition"]
        self.assertEqual(record["event_type"], "ScrollDown")
        self.assertEqual(record["offset"], 1)
        self.assertEqual(machine.state.scroll_offset, 1)

    def test_unknown_event_is_ignored(self) -> None:
        state = initial_state(1, width=100, height=24)
        self.assertIs(transition(state, object(), FakeMetrics([10])), state)  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
