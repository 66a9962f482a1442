"""Where diff text and full file contents come from."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Literal, Protocol

from hunkview.diff.models import FileDiff
from hunkview.errors import CollaboratorError
from hunkview.vcs.git import GitClient, RevisionPair

Side = Literal["old", "new"]


class DiffSource(Protocol):
    def diff_text(self) -> str: ...

    def file_text(self, file: FileDiff, side: Side) -> str | None: ...


class GitSource:
    """Diff and contents for a revision range in a git work tree."""

    def __init__(self, repo: Path, args: list[str] | tuple[str, ...] = ()) -> None:
        self.args = list(args)
        self.client = GitClient(GitClient(repo).toplevel())
        self.revisions = RevisionPair.from_args(self.args, self.client)

    def diff_text(self) -> str:
        return self.client.diff(self.args)

    def file_text(self, file: FileDiff, side: Side) -> str | None:
        if side == "old":
            if file.old_path is None:
                return None
            return self.client.file_text(self.revisions.old, file.old_path)
        if file.new_path is None:
            return None
        return self.client.file_text(self.revisions.new, file.new_path)


class PatchSource:
    """Diff text read from a patch file or stdin; no file contents."""

    def __init__(self, path: str) -> None:
        self.path = path

    def diff_text(self) -> str:
        if self.path == "-":
            return sys.stdin.read()
        try:
            return Path(self.path).expanduser().read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise CollaboratorError(f"Could not read diff file {self.path}: {exc}") from exc

    def file_text(self, file: FileDiff, side: Side) -> str | None:  # noqa: ARG002
        return None
