"""Row projections of a file diff for the unified and side-by-side views."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from hunkview.diff.models import DiffLine, FileDiff, Hunk


@dataclass(frozen=True, slots=True)
class AlignedRow:
    """One side-by-side row; ``None`` on either side is a gap."""

    old: DiffLine | None
    new: DiffLine | None

    @property
    def is_change_pair(self) -> bool:
        return (
            self.old is not None
            and self.new is not None
            and self.old.kind == "removed"
            and self.new.kind == "added"
        )


@dataclass(frozen=True, slots=True)
class HunkMarker:
    hunk: Hunk


SideBySideRow = Union[HunkMarker, AlignedRow]
UnifiedRow = Union[HunkMarker, DiffLine]


def align_hunk(hunk: Hunk) -> list[AlignedRow]:
    """Pair old and new lines positionally within each changed block.

    Context lines pair with themselves. A run of removed lines followed by a
    run of added lines pairs index by index; the surplus of the longer run is
    paired with gaps. Lines are never reordered or dropped.
    """
    rows: list[AlignedRow] = []
    lines = hunk.lines
    index = 0
    while index < len(lines):
        line = lines[index]
        if line.kind == "context":
            rows.append(AlignedRow(line, line))
            index += 1
            continue

        removed: list[DiffLine] = []
        while index < len(lines) and lines[index].kind == "removed":
            removed.append(lines[index])
            index += 1
        added: list[DiffLine] = []
        while index < len(lines) and lines[index].kind == "added":
            added.append(lines[index])
            index += 1

        for offset in range(max(len(removed), len(added))):
            old = removed[offset] if offset < len(removed) else None
            new = added[offset] if offset < len(added) else None
            rows.append(AlignedRow(old, new))
    return rows


def side_by_side_rows(file: FileDiff) -> list[SideBySideRow]:
    rows: list[SideBySideRow] = []
    for hunk in file.hunks:
        rows.append(HunkMarker(hunk))
        rows.extend(align_hunk(hunk))
    return rows


def unified_rows(file: FileDiff) -> list[UnifiedRow]:
    rows: list[UnifiedRow] = []
    for hunk in file.hunks:
        rows.append(HunkMarker(hunk))
        rows.extend(hunk.lines)
    return rows


def unified_row_count(file: FileDiff) -> int:
    return sum(1 + len(hunk.lines) for hunk in file.hunks)


def change_pairs(hunk: Hunk) -> list[tuple[DiffLine, DiffLine]]:
    """Removed/added lines that share a side-by-side row."""
    return [(row.old, row.new) for row in align_hunk(hunk) if row.is_change_pair]  # type: ignore[misc]
