"""Map file paths to Pygments lexer aliases."""

from __future__ import annotations

from pathlib import PurePosixPath

from pygments.lexers import get_lexer_for_filename
from pygments.util import ClassNotFound

# Extensions Pygments resolves ambiguously or not at all.
_OVERRIDES: dict[str, str] = {
    ".h": "c",
    ".hpp": "cpp",
    ".jsx": "jsx",
    ".tsx": "tsx",
    ".mjs": "javascript",
    ".cjs": "javascript",
}


def resolve_language(path: str) -> str | None:
    if not path:
        return None
    suffix = PurePosixPath(path).suffix.lower()
    if suffix in _OVERRIDES:
        return _OVERRIDES[suffix]
    try:
        lexer = get_lexer_for_filename(PurePosixPath(path).name)
    except ClassNotFound:
        return None
    aliases = getattr(lexer, "aliases", None) or []
    return aliases[0] if aliases else None
