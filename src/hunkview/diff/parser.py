"""Unified diff text parser.

Turns the output of ``git diff`` (or plain ``diff -u``) into an ordered list of
:class:`FileDiff` records. The parser is a single forward scan; hunk line
counts decide whether a ``---`` line is a removed line or the next file header.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from hunkview.diff.models import DiffLine, FileDiff, Hunk
from hunkview.errors import ParseError

_HUNK_RE = re.compile(r"^@@ -(?P<old>\S+) \+(?P<new>\S+) @@(?: ?(?P<section>.*))?$")
_DEV_NULL = "/dev/null"


@dataclass(slots=True)
class _HunkBuilder:
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    section: str
    lines: list[DiffLine] = field(default_factory=list)
    old_next: int = 0
    new_next: int = 0
    old_remaining: int = 0
    new_remaining: int = 0

    def __post_init__(self) -> None:
        self.old_next = self.old_start
        self.new_next = self.new_start
        self.old_remaining = self.old_count
        self.new_remaining = self.new_count

    def expects_more(self) -> bool:
        return self.old_remaining > 0 or self.new_remaining > 0

    def add(self, kind: str, text: str) -> None:
        if kind == "context":
            line = DiffLine("context", text, self.old_next, self.new_next)
            self.old_next += 1
            self.new_next += 1
            self.old_remaining -= 1
            self.new_remaining -= 1
        elif kind == "removed":
            line = DiffLine("removed", text, old_number=self.old_next)
            self.old_next += 1
            self.old_remaining -= 1
        else:
            line = DiffLine("added", text, new_number=self.new_next)
            self.new_next += 1
            self.new_remaining -= 1
        self.lines.append(line)

    def build(self) -> Hunk:
        return Hunk(
            old_start=self.old_start,
            old_count=self.old_count,
            new_start=self.new_start,
            new_count=self.new_count,
            lines=tuple(self.lines),
            section=self.section,
        )


@dataclass(slots=True)
class _FileBuilder:
    old_path: str | None
    new_path: str | None
    hunks: list[Hunk] = field(default_factory=list)
    binary: bool = False
    header_seen: bool = False

    def build(self) -> FileDiff:
        return FileDiff(
            old_path=self.old_path,
            new_path=self.new_path,
            hunks=tuple(self.hunks),
            binary=self.binary,
        )


class DiffParser:
    def __init__(self, text: str) -> None:
        lines = text.split("\n")
        if lines and lines[-1] == "":
            lines.pop()
        self._lines = [line[:-1] if line.endswith("\r") else line for line in lines]
        self._files: list[FileDiff] = []
        self._file: _FileBuilder | None = None
        self._hunk: _HunkBuilder | None = None

    def parse(self) -> list[FileDiff]:
        index = 0
        while index < len(self._lines):
            line = self._lines[index]
            number = index + 1
            index += 1

            if self._hunk is not None and self._hunk.expects_more():
                if self._consume_content(line, index):
                    continue
                self._close_hunk()

            if line.startswith("diff --git "):
                self._flush_file()
                old_path, new_path = _split_git_header(line[len("diff --git ") :])
                self._file = _FileBuilder(old_path=old_path, new_path=new_path)
            elif line.startswith("--- ") and self._peek(index).startswith("+++ "):
                self._open_header_pair(line, self._peek(index))
                index += 1
            elif line.startswith("@@ "):
                self._open_hunk(number, line)
            elif self._file is not None:
                self._apply_metadata(line)

        self._flush_file()
        return self._files

    def _peek(self, index: int) -> str:
        if index < len(self._lines):
            return self._lines[index]
        return ""

    def _consume_content(self, line: str, next_index: int) -> bool:
        hunk = self._hunk
        assert hunk is not None
        marker = line[:1]
        if marker == "\\":
            return True
        if marker in (" ", ""):
            hunk.add("context", line[1:])
            return True
        if marker == "+":
            hunk.add("added", line[1:])
            return True
        if marker == "-":
            # A truncated hunk can be followed directly by the next file header.
            if (
                hunk.old_remaining <= 0
                and line.startswith("--- ")
                and self._peek(next_index).startswith("+++ ")
            ):
                return False
            hunk.add("removed", line[1:])
            return True
        return False

    def _open_header_pair(self, old_line: str, new_line: str) -> None:
        self._close_hunk()
        if self._file is None or self._file.header_seen or self._file.hunks:
            self._flush_file()
            self._file = _FileBuilder(old_path=None, new_path=None)
        self._file.old_path = _header_path(old_line[4:], "a/")
        self._file.new_path = _header_path(new_line[4:], "b/")
        self._file.header_seen = True

    def _open_hunk(self, number: int, line: str) -> None:
        if self._file is None:
            raise ParseError(number, line, "hunk header before any file header")
        match = _HUNK_RE.match(line)
        if match is None:
            raise ParseError(number, line, "malformed hunk header")
        old_start, old_count = _parse_range(number, line, match.group("old"))
        new_start, new_count = _parse_range(number, line, match.group("new"))
        self._close_hunk()
        self._hunk = _HunkBuilder(
            old_start=old_start,
            old_count=old_count,
            new_start=new_start,
            new_count=new_count,
            section=(match.group("section") or "").strip(),
        )

    def _apply_metadata(self, line: str) -> None:
        current = self._file
        assert current is not None
        if line.startswith("new file mode"):
            current.old_path = None
        elif line.startswith("deleted file mode"):
            current.new_path = None
        elif line.startswith(("rename from ", "copy from ")):
            current.old_path = _unquote(line.split(" ", 2)[2])
        elif line.startswith(("rename to ", "copy to ")):
            current.new_path = _unquote(line.split(" ", 2)[2])
        elif line.startswith("Binary files ") or line.startswith("GIT binary patch"):
            current.binary = True

    def _close_hunk(self) -> None:
        if self._hunk is None:
            return
        if self._file is not None:
            self._file.hunks.append(self._hunk.build())
        self._hunk = None

    def _flush_file(self) -> None:
        self._close_hunk()
        if self._file is not None:
            self._files.append(self._file.build())
        self._file = None


def parse_diff(text: str) -> list[FileDiff]:
    """Parse unified diff text into file diffs, in order of appearance."""
    return DiffParser(text).parse()


def _parse_range(number: int, line: str, value: str) -> tuple[int, int]:
    start_text, _, count_text = value.partition(",")
    try:
        start = int(start_text)
        count = int(count_text) if count_text else 1
    except ValueError as exc:
        raise ParseError(number, line, f"non-numeric hunk range {value!r}") from exc
    if start < 0 or count < 0:
        raise ParseError(number, line, f"negative hunk range {value!r}")
    return start, count


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


def _header_path(value: str, prefix: str) -> str | None:
    path = _unquote(value.split("\t", 1)[0])
    if path == _DEV_NULL:
        return None
    if path.startswith(prefix):
        return path[len(prefix) :]
    return path


def _split_git_header(rest: str) -> tuple[str | None, str | None]:
    rest = rest.strip()
    if rest.startswith('"'):
        closing = rest.find('"', 1)
        if closing > 0:
            old = rest[1:closing]
            new = _unquote(rest[closing + 1 :])
            return _strip_prefix(old, "a/"), _strip_prefix(new, "b/")

    # Paths may contain spaces; prefer the split that yields identical halves.
    candidates = [idx for idx, char in enumerate(rest) if char == " "]
    for idx in candidates:
        old, new = rest[:idx], rest[idx + 1 :]
        if _strip_prefix(old, "a/") == _strip_prefix(new, "b/"):
            return _strip_prefix(old, "a/"), _strip_prefix(new, "b/")
    for idx in candidates:
        old, new = rest[:idx], rest[idx + 1 :]
        if new.startswith("b/"):
            return _strip_prefix(old, "a/"), _strip_prefix(new, "b/")
    if candidates:
        idx = candidates[0]
        return rest[:idx], rest[idx + 1 :]
    return rest, rest


def _strip_prefix(path: str, prefix: str) -> str:
    if path.startswith(prefix):
        return path[len(prefix) :]
    return path
