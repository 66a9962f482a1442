"""Syntax highlighting behind a narrow ``highlight(text, language)`` interface."""

from __future__ import annotations

from typing import Any, Protocol

from pygments.lexers import get_lexer_by_name
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound
from rich.style import Style
from rich.syntax import PygmentsSyntaxTheme

from hunkview.errors import CollaboratorError

Span = tuple[str, Style]
SpanLine = list[Span]


class Highlighter(Protocol):
    def highlight(self, text: str, language: str | None) -> list[SpanLine]:
        """Return one span list per line of ``text``."""


def expected_lines(text: str) -> list[str]:
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return lines


def plain_lines(text: str) -> list[SpanLine]:
    return [[(line, Style())] if line else [] for line in expected_lines(text)]


class PlainHighlighter:
    def highlight(self, text: str, language: str | None) -> list[SpanLine]:  # noqa: ARG002
        return plain_lines(text)


class PygmentsHighlighter:
    """Tokenizes with Pygments and colors tokens through Rich's theme bridge."""

    def __init__(self, style_name: str = "monokai") -> None:
        try:
            self.theme = PygmentsSyntaxTheme(get_style_by_name(style_name))
        except ClassNotFound as exc:
            raise CollaboratorError(f"Unknown highlight style {style_name!r}: {exc}") from exc
        self._styles: dict[Any, Style] = {}

    def highlight(self, text: str, language: str | None) -> list[SpanLine]:
        if language is None or not text:
            return plain_lines(text)
        try:
            lexer = get_lexer_by_name(language, stripnl=False, stripall=False, ensurenl=True)
        except ClassNotFound as exc:
            raise CollaboratorError(f"No lexer for language {language!r}") from exc

        expected = expected_lines(text)
        lines: list[SpanLine] = [[]]
        try:
            for token_type, value in lexer.get_tokens(text):
                style = self._style_for(token_type)
                parts = value.split("\n")
                for idx, part in enumerate(parts):
                    if idx:
                        lines.append([])
                    if part:
                        lines[-1].append((part, style))
        except Exception as exc:
            raise CollaboratorError(f"Highlighting failed for {language!r}: {exc}") from exc

        if len(lines) > len(expected):
            del lines[len(expected) :]
        while len(lines) < len(expected):
            lines.append([])
        return lines

    def _style_for(self, token_type: Any) -> Style:
        cached = self._styles.get(token_type)
        if cached is None:
            themed = self.theme.get_style_for_token(token_type)
            # Drop the theme background so diff overlays stay readable.
            cached = Style(
                color=themed.color,
                bold=themed.bold,
                italic=themed.italic,
                underline=themed.underline,
            )
            self._styles[token_type] = cached
        return cached
