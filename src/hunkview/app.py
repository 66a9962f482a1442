"""hunkview Textual application shell."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from textual.app import App

from hunkview.config.models import AppSettings
from hunkview.config.store import SettingsStore
from hunkview.diff.models import FileDiff
from hunkview.errors import CollaboratorError
from hunkview.highlight.highlighter import Highlighter, PlainHighlighter, PygmentsHighlighter
from hunkview.runtime_logging import configure_runtime_logging, get_runtime_logger
from hunkview.screens.diff import DiffScreen
from hunkview.vcs.source import DiffSource
from hunkview.view.cache import DiffCaches


class HunkviewApp(App[None]):
    TITLE = "hunkview"
    SUB_TITLE = "terminal diff viewer"

    CSS = """
    Screen {
        layout: vertical;
    }
    """

    def __init__(
        self,
        *,
        files: Sequence[FileDiff],
        source: DiffSource | None = None,
        settings: AppSettings | None = None,
        side_by_side: bool = False,
        highlighter: Highlighter | None = None,
        log_level: str | None = None,
        log_file: str | Path | None = None,
    ) -> None:
        if log_level or log_file:
            self.logger = configure_runtime_logging(level=log_level, log_file=log_file)
        else:
            self.logger = get_runtime_logger()

        self.settings = settings if settings is not None else SettingsStore().load()
        self.files = list(files)
        self.side_by_side = side_by_side
        self.highlighter = highlighter if highlighter is not None else self._default_highlighter()
        self.caches = DiffCaches(
            self.files,
            self.highlighter,
            source,
            intraline=self.settings.highlight.intraline,
            min_similarity=self.settings.highlight.min_similarity,
            tab_width=self.settings.view.tab_width,
        )

        self.logger.info(
            "app.initialized",
            files=len(self.files),
            side_by_side=side_by_side,
            highlighter=type(self.highlighter).__name__,
        )
        super().__init__()

    def _default_highlighter(self) -> Highlighter:
        try:
            return PygmentsHighlighter(self.settings.highlight.style)
        except CollaboratorError as exc:
            self.logger.warning("app.highlighter_fallback", error=str(exc))
            return PlainHighlighter()

    def on_mount(self) -> None:
        theme = self.settings.appearance.theme
        if theme in self.available_themes:
            self.theme = theme
        else:
            self.logger.warning("app.unknown_theme", theme=theme)
        self.logger.info("app.mounted", theme=self.theme)
        self.push_screen(
            DiffScreen(
                files=self.files,
                caches=self.caches,
                settings=self.settings,
                side_by_side=self.side_by_side,
            )
        )
