"""Error types shared across the diff pipeline and the terminal shell."""

from __future__ import annotations

from dataclasses import dataclass


class HunkviewError(Exception):
    pass


@dataclass
class ParseError(HunkviewError):
    line_number: int
    line: str
    message: str

    def __str__(self) -> str:
        return f"line {self.line_number}: {self.message}: {self.line!r}"


class CollaboratorError(HunkviewError):
    """An external tool (git, the highlighter) failed."""


class LayoutError(HunkviewError):
    """The terminal is too small to draw any panel."""
