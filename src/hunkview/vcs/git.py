"""Thin synchronous wrapper around the ``git`` executable."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from hunkview.errors import CollaboratorError
from hunkview.runtime_logging import get_runtime_logger

INDEX = ":index"
WORKTREE = ":worktree"

_CACHED_FLAGS = {"--cached", "--staged"}


@dataclass(frozen=True, slots=True)
class RevisionPair:
    """Where the old and new side of each file live.

    Each side is a revision expression, :data:`INDEX` or :data:`WORKTREE`.
    """

    old: str
    new: str

    @classmethod
    def from_args(cls, args: list[str] | tuple[str, ...], client: "GitClient | None" = None) -> "RevisionPair":
        cached = any(arg in _CACHED_FLAGS for arg in args)
        revisions = [arg for arg in args if not arg.startswith("-")]
        if "--" in args:
            revisions = [arg for arg in args[: list(args).index("--")] if not arg.startswith("-")]

        if len(revisions) >= 2:
            return cls(old=revisions[0], new=revisions[1])
        if len(revisions) == 1:
            revision = revisions[0]
            if "..." in revision:
                left, right = revision.split("...", 1)
                left, right = left or "HEAD", right or "HEAD"
                base = client.merge_base(left, right) if client is not None else left
                return cls(old=base, new=right)
            if ".." in revision:
                left, right = revision.split("..", 1)
                return cls(old=left or "HEAD", new=right or "HEAD")
            if cached:
                return cls(old=revision, new=INDEX)
            return cls(old=revision, new=WORKTREE)
        if cached:
            return cls(old="HEAD", new=INDEX)
        return cls(old=INDEX, new=WORKTREE)


class GitClient:
    def __init__(self, repo: Path, executable: str = "git") -> None:
        self.repo = repo
        self.executable = executable

    def run(self, *args: str) -> str:
        command = [self.executable, "-C", str(self.repo), *args]
        get_runtime_logger().debug("git.run", args=list(args))
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as exc:
            raise CollaboratorError(f"Could not run {self.executable}: {exc}") from exc
        if result.returncode != 0:
            message = result.stderr.strip() or f"exit status {result.returncode}"
            raise CollaboratorError(f"git {' '.join(args)} failed: {message}")
        return result.stdout

    def diff(self, args: list[str] | tuple[str, ...]) -> str:
        return self.run(
            "diff",
            "--no-color",
            "--no-ext-diff",
            "--src-prefix=a/",
            "--dst-prefix=b/",
            *args,
        )

    def merge_base(self, left: str, right: str) -> str:
        return self.run("merge-base", left, right).strip()

    def show(self, revision: str, path: str) -> str | None:
        spec = f":{path}" if revision == INDEX else f"{revision}:{path}"
        try:
            return self.run("show", spec)
        except CollaboratorError:
            return None

    def read_worktree(self, path: str) -> str | None:
        target = self.repo / path
        try:
            return target.read_text(encoding="utf-8", errors="replace")
        except OSError:
            return None

    def file_text(self, location: str, path: str) -> str | None:
        if location == WORKTREE:
            return self.read_worktree(path)
        return self.show(location, path)

    def toplevel(self) -> Path:
        return Path(self.run("rev-parse", "--show-toplevel").strip())
