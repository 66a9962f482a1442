"""Merge syntax highlighting with diff line classification.

The highlighter runs once over each full side of a file so multi-line
constructs (docstrings, block comments) color correctly; each diff line then
picks its highlighted line by number and is tagged with the added/removed
overlay. Paired removed/added lines additionally mark the characters that
changed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from rich.style import Style

from hunkview.diff.align import change_pairs
from hunkview.diff.intraline import MIN_SIMILARITY, Range, changed_ranges
from hunkview.diff.models import DiffLine, FileDiff
from hunkview.errors import CollaboratorError
from hunkview.highlight.highlighter import Highlighter, Span, SpanLine, plain_lines
from hunkview.runtime_logging import get_runtime_logger

Overlay = Literal["none", "added", "removed"]
Side = Literal["old", "new"]

_OVERLAYS: dict[str, Overlay] = {
    "context": "none",
    "added": "added",
    "removed": "removed",
}


@dataclass(frozen=True, slots=True)
class StyledSegment:
    text: str
    style: Style
    overlay: Overlay = "none"
    emphasis: bool = False


StyledLine = tuple[StyledSegment, ...]


@dataclass(slots=True)
class FileHighlight:
    language: str | None
    old: dict[int, StyledLine] = field(default_factory=dict)
    new: dict[int, StyledLine] = field(default_factory=dict)
    degraded: bool = False

    def segments(self, line: DiffLine, side: Side | None = None) -> StyledLine:
        if side is None:
            side = "new" if line.kind == "added" else "old"
        number = line.old_number if side == "old" else line.new_number
        table = self.old if side == "old" else self.new
        found = table.get(number) if number is not None else None
        if found is None:
            return _plain(line)
        return found


def build_overlay(
    file: FileDiff,
    *,
    old_text: str | None,
    new_text: str | None,
    language: str | None,
    highlighter: Highlighter,
    intraline: bool = True,
    min_similarity: float = MIN_SIMILARITY,
) -> FileHighlight:
    logger = get_runtime_logger()
    old_source = _side_source(file, "old", old_text)
    new_source = _side_source(file, "new", new_text)

    degraded = False
    try:
        old_lines = highlighter.highlight(old_source, language) if old_source else []
        new_lines = highlighter.highlight(new_source, language) if new_source else []
    except CollaboratorError as exc:
        logger.warning("highlight.fallback", path=file.path, language=language, error=str(exc))
        old_lines = plain_lines(old_source)
        new_lines = plain_lines(new_source)
        degraded = True

    result = FileHighlight(language=language, degraded=degraded)
    for hunk in file.hunks:
        emphasis: dict[tuple[Side, int], list[Range]] = {}
        if intraline:
            for removed, added in change_pairs(hunk):
                old_ranges, new_ranges = changed_ranges(removed.text, added.text, min_similarity)
                if old_ranges and removed.old_number is not None:
                    emphasis[("old", removed.old_number)] = old_ranges
                if new_ranges and added.new_number is not None:
                    emphasis[("new", added.new_number)] = new_ranges

        for line in hunk.lines:
            overlay = _OVERLAYS[line.kind]
            if line.kind != "added" and line.old_number is not None:
                result.old[line.old_number] = _tag(
                    old_lines, line, line.old_number, overlay, emphasis.get(("old", line.old_number))
                )
            if line.kind != "removed" and line.new_number is not None:
                result.new[line.new_number] = _tag(
                    new_lines, line, line.new_number, overlay, emphasis.get(("new", line.new_number))
                )

    logger.debug(
        "highlight.built",
        path=file.path,
        language=language,
        degraded=degraded,
        old_lines=len(result.old),
        new_lines=len(result.new),
    )
    return result


def _side_source(file: FileDiff, side: Side, text: str | None) -> str:
    if side == "old" and file.status == "added":
        return ""
    if side == "new" and file.status == "deleted":
        return ""
    if text is not None:
        return text
    return _sparse_text(file, side)


def _sparse_text(file: FileDiff, side: Side) -> str:
    """Rebuild a side from hunk lines alone, blank-padding untouched lines."""
    known: dict[int, str] = {}
    for line in file.lines():
        number = line.old_number if side == "old" else line.new_number
        if number is not None:
            known[number] = line.text
    if not known:
        return ""
    return "\n".join(known.get(number, "") for number in range(1, max(known) + 1)) + "\n"


def _tag(
    lines: list[SpanLine],
    line: DiffLine,
    number: int,
    overlay: Overlay,
    ranges: list[Range] | None,
) -> StyledLine:
    spans: SpanLine | None = lines[number - 1] if 1 <= number <= len(lines) else None
    if spans is None or "".join(text for text, _ in spans) != line.text:
        spans = [(line.text, Style())] if line.text else []
    if not ranges:
        return tuple(StyledSegment(text, style, overlay) for text, style in spans)
    return tuple(_split_emphasis(spans, ranges, overlay))


def _split_emphasis(spans: list[Span], ranges: list[Range], overlay: Overlay) -> list[StyledSegment]:
    segments: list[StyledSegment] = []
    position = 0
    for text, style in spans:
        start = position
        end = position + len(text)
        cut = start
        for range_start, range_end in ranges:
            if range_end <= start or range_start >= end:
                continue
            low = max(range_start, cut)
            high = min(range_end, end)
            if low > cut:
                segments.append(StyledSegment(text[cut - start : low - start], style, overlay))
            if high > low:
                segments.append(StyledSegment(text[low - start : high - start], style, overlay, True))
            cut = max(cut, high)
        if cut < end:
            segments.append(StyledSegment(text[cut - start :], style, overlay))
        position = end
    return segments


def _plain(line: DiffLine) -> StyledLine:
    if not line.text:
        return ()
    return (StyledSegment(line.text, Style(), _OVERLAYS[line.kind]),)
