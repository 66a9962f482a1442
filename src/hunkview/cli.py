"""CLI entrypoint for hunkview."""

from __future__ import annotations

import json
import os
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from hunkview.app import HunkviewApp
from hunkview.diff.models import FileDiff
from hunkview.diff.parser import parse_diff
from hunkview.errors import HunkviewError
from hunkview.paths import settings_path
from hunkview.runtime_logging import configure_runtime_logging, get_runtime_logger
from hunkview.vcs.source import DiffSource, GitSource, PatchSource
from hunkview.version import __version__


class DefaultCommandGroup(click.Group):
    """Group that hands unrecognised leading arguments to a default command."""

    default_command = "show"

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        if args and args[0] not in self.commands and args[0] not in ctx.help_option_names:
            args = [self.default_command, *args]
        return super().parse_args(ctx, args)


def _source_options(func: Callable[..., Any]) -> Callable[..., Any]:
    func = click.option(
        "--diff-file",
        help="Read the diff from a patch file instead of git ('-' for stdin)",
    )(func)
    func = click.option(
        "--repo",
        default=".",
        show_default=True,
        type=click.Path(file_okay=False, path_type=Path),
        help="Repository to diff",
    )(func)
    func = click.argument("revisions", nargs=-1, type=click.UNPROCESSED)(func)
    return func


@click.group(
    cls=DefaultCommandGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.pass_context
def main(ctx: click.Context) -> None:
    """hunkview: browse a diff in the terminal, unified or side by side."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(show)


@main.command(context_settings={"ignore_unknown_options": True})
@_source_options
@click.option("-s", "--side-by-side", is_flag=True, help="Start in side-by-side view when wide enough")
@click.option("--log-level", help="off, error, warning, info or debug")
@click.option("--log-file", type=click.Path(dir_okay=False, path_type=Path))
def show(
    revisions: tuple[str, ...],
    repo: Path,
    diff_file: str | None,
    side_by_side: bool,
    log_level: str | None,
    log_file: Path | None,
) -> None:
    """Open the interactive viewer. REVISIONS are passed to git diff."""
    configure_runtime_logging(level=log_level, log_file=log_file)
    source = _make_source(repo, diff_file, revisions)
    files = _load_files(source)
    if not files:
        click.echo("No changes.")
        return

    if diff_file == "-" and not sys.stdin.isatty():
        _attach_terminal()
    app = HunkviewApp(files=files, source=source, side_by_side=side_by_side)
    app.run()


@main.command(context_settings={"ignore_unknown_options": True})
@_source_options
def files(revisions: tuple[str, ...], repo: Path, diff_file: str | None) -> None:
    """List changed files with added/removed line counts."""
    source = _make_source(repo, diff_file, revisions)
    for file in _load_files(source):
        counts = "binary" if file.binary else f"+{file.added_count} -{file.removed_count}"
        click.echo(f"{file.status_letter} {counts} {file.display_name}")


@main.command("settings-path")
def settings_path_command() -> None:
    """Print settings file path."""
    click.echo(str(settings_path()))


@main.command()
def about() -> None:
    """Show version and project summary."""
    payload = {
        "name": "hunkview",
        "version": __version__,
        "description": "Terminal diff viewer with syntax highlighting and side-by-side view",
    }
    click.echo(json.dumps(payload, indent=2))


def _make_source(repo: Path, diff_file: str | None, revisions: tuple[str, ...]) -> DiffSource:
    if diff_file is not None:
        if revisions:
            raise click.UsageError("REVISIONS cannot be combined with --diff-file")
        return PatchSource(diff_file)
    try:
        return GitSource(repo.expanduser().resolve(), list(revisions))
    except HunkviewError as exc:
        get_runtime_logger().exception("cli.source_failed", exc, repo=str(repo))
        raise click.ClickException(str(exc)) from exc


def _attach_terminal() -> None:
    """Point fd 0 at the controlling terminal once a piped diff has been read."""
    try:
        fd = os.open("/dev/tty", os.O_RDONLY)
    except OSError as exc:
        get_runtime_logger().exception("cli.tty_unavailable", exc)
        raise click.UsageError("--diff-file - needs a terminal for key input") from exc
    try:
        os.dup2(fd, 0)
    finally:
        os.close(fd)


def _load_files(source: DiffSource) -> list[FileDiff]:
    logger = get_runtime_logger()
    try:
        text = source.diff_text()
        files = parse_diff(text)
    except HunkviewError as exc:
        logger.exception("cli.load_failed", exc)
        raise click.ClickException(str(exc)) from exc
    logger.info("diff.loaded", files=len(files), chars=len(text))
    return files


if __name__ == "__main__":
    main()
