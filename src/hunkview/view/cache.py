"""Per-file lazily computed render data."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Generic, TypeVar

from hunkview.diff.align import SideBySideRow, side_by_side_rows, unified_row_count
from hunkview.diff.intraline import MIN_SIMILARITY
from hunkview.diff.models import FileDiff
from hunkview.errors import CollaboratorError
from hunkview.highlight.highlighter import Highlighter
from hunkview.highlight.languages import resolve_language
from hunkview.highlight.overlay import FileHighlight, build_overlay
from hunkview.runtime_logging import get_runtime_logger
from hunkview.vcs.source import DiffSource

T = TypeVar("T")


class LazyFileCache(Generic[T]):
    """Map from file index to a value computed on first read."""

    def __init__(self, factory: Callable[[int], T]) -> None:
        self._factory = factory
        self._values: dict[int, T] = {}

    def get(self, index: int) -> T:
        if index not in self._values:
            self._values[index] = self._factory(index)
        return self._values[index]

    def __contains__(self, index: object) -> bool:
        return index in self._values

    def __len__(self) -> int:
        return len(self._values)


class DiffCaches:
    def __init__(
        self,
        files: Sequence[FileDiff],
        highlighter: Highlighter,
        source: DiffSource | None = None,
        *,
        intraline: bool = True,
        min_similarity: float = MIN_SIMILARITY,
        tab_width: int = 4,
    ) -> None:
        self.files = files
        self.highlighter = highlighter
        self.source = source
        self.intraline = intraline
        self.min_similarity = min_similarity
        self.tab_width = tab_width
        self.highlights: LazyFileCache[FileHighlight] = LazyFileCache(self._build_highlight)
        self.alignments: LazyFileCache[list[SideBySideRow]] = LazyFileCache(self._build_alignment)
        self._widths: LazyFileCache[int] = LazyFileCache(self._measure_width)
        self._failures: list[str] = []

    def drain_failures(self) -> list[str]:
        failures, self._failures = self._failures, []
        return failures

    def _build_highlight(self, index: int) -> FileHighlight:
        file = self.files[index]
        logger = get_runtime_logger()
        old_text: str | None = None
        new_text: str | None = None
        if self.source is not None and not file.binary:
            try:
                old_text = self.source.file_text(file, "old")
                new_text = self.source.file_text(file, "new")
            except CollaboratorError as exc:
                logger.exception("cache.contents_failed", exc, path=file.path)
                self._failures.append(f"{file.display_name}: {exc}")

        highlight = build_overlay(
            file,
            old_text=old_text,
            new_text=new_text,
            language=resolve_language(file.path),
            highlighter=self.highlighter,
            intraline=self.intraline,
            min_similarity=self.min_similarity,
        )
        if highlight.degraded:
            self._failures.append(f"{file.display_name}: syntax highlighting unavailable")
        return highlight

    def _build_alignment(self, index: int) -> list[SideBySideRow]:
        rows = side_by_side_rows(self.files[index])
        get_runtime_logger().debug("cache.aligned", index=index, rows=len(rows))
        return rows

    def _measure_width(self, index: int) -> int:
        widths = [len(line.text.expandtabs(self.tab_width)) for line in self.files[index].lines()]
        return max(widths, default=0)

    def row_count(self, index: int, mode: str) -> int:
        if not 0 <= index < len(self.files):
            return 0
        if mode == "side-by-side":
            return len(self.alignments.get(index))
        return unified_row_count(self.files[index])

    def column_count(self, index: int) -> int:
        if not 0 <= index < len(self.files):
            return 0
        return self._widths.get(index)
