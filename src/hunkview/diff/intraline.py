"""Character ranges that changed between a removed line and its paired added line."""

from __future__ import annotations

import difflib

Range = tuple[int, int]

MIN_SIMILARITY = 0.5


def changed_ranges(
    old_text: str,
    new_text: str,
    min_similarity: float = MIN_SIMILARITY,
) -> tuple[list[Range], list[Range]]:
    """Return ``(old_ranges, new_ranges)`` of half-open character spans.

    Adjacent spans are merged. Pairs whose similarity ratio falls below
    ``min_similarity`` get no ranges, so a rewritten line keeps its plain
    change background instead of being emphasized end to end. Pass ``0.0``
    to emphasize every paired line.
    """
    matcher = difflib.SequenceMatcher(None, old_text, new_text, autojunk=False)
    if matcher.ratio() < min_similarity:
        return [], []

    old_ranges: list[Range] = []
    new_ranges: list[Range] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            continue
        if i2 > i1:
            _push(old_ranges, (i1, i2))
        if j2 > j1:
            _push(new_ranges, (j1, j2))
    return old_ranges, new_ranges


def _push(ranges: list[Range], span: Range) -> None:
    if ranges and ranges[-1][1] == span[0]:
        ranges[-1] = (ranges[-1][0], span[1])
    else:
        ranges.append(span)
