"""Immutable diff model produced by the parser."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

LineKind = Literal["context", "added", "removed"]
FileStatus = Literal["added", "modified", "deleted", "renamed"]

STATUS_LETTERS: dict[str, str] = {
    "added": "A",
    "modified": "M",
    "deleted": "D",
    "renamed": "R",
}


@dataclass(frozen=True, slots=True)
class DiffLine:
    kind: LineKind
    text: str
    old_number: int | None = None
    new_number: int | None = None

    @property
    def prefix(self) -> str:
        if self.kind == "added":
            return "+"
        if self.kind == "removed":
            return "-"
        return " "


@dataclass(frozen=True, slots=True)
class Hunk:
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: tuple[DiffLine, ...] = ()
    section: str = ""

    @property
    def header(self) -> str:
        header = f"@@ -{self.old_start},{self.old_count} +{self.new_start},{self.new_count} @@"
        if self.section:
            return f"{header} {self.section}"
        return header

    def old_side(self) -> list[DiffLine]:
        return [line for line in self.lines if line.kind != "added"]

    def new_side(self) -> list[DiffLine]:
        return [line for line in self.lines if line.kind != "removed"]


@dataclass(frozen=True, slots=True)
class FileDiff:
    old_path: str | None
    new_path: str | None
    hunks: tuple[Hunk, ...] = ()
    binary: bool = False
    status: FileStatus = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", infer_status(self.old_path, self.new_path))

    @property
    def path(self) -> str:
        """Path used for language detection and content lookup."""
        return self.new_path or self.old_path or ""

    @property
    def display_name(self) -> str:
        if self.status == "renamed":
            return f"{self.old_path} → {self.new_path}"
        return self.path

    @property
    def status_letter(self) -> str:
        return STATUS_LETTERS[self.status]

    @property
    def added_count(self) -> int:
        return sum(1 for hunk in self.hunks for line in hunk.lines if line.kind == "added")

    @property
    def removed_count(self) -> int:
        return sum(1 for hunk in self.hunks for line in hunk.lines if line.kind == "removed")

    def lines(self) -> list[DiffLine]:
        return [line for hunk in self.hunks for line in hunk.lines]


def infer_status(old_path: str | None, new_path: str | None) -> FileStatus:
    if old_path is None:
        return "added"
    if new_path is None:
        return "deleted"
    if old_path != new_path:
        return "renamed"
    return "modified"
