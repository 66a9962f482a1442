"""Changed-file list panel."""

from __future__ import annotations

from rich.text import Text
from textual.widgets import Static

from hunkview.view.composer import Region


class FileListPanel(Static):
    DEFAULT_CSS = """
    FileListPanel {
        height: 1fr;
        border: round $surface-lighten-2;
        border-title-color: $text-muted;
        overflow: hidden;
    }
    """

    def __init__(self, **kwargs) -> None:  # noqa: ANN003
        super().__init__("", **kwargs)
        self.border_title = "Files"
        self.items: list[Text] = []

    def paint(self, region: Region | None, items: list[Text], selected: int) -> None:
        if region is None:
            self.display = False
            return
        self.display = True
        self.styles.width = region.width
        self.items = items
        self.border_subtitle = f"{selected + 1}/{len(items)}" if items else ""
        visible = region.inner_height
        start = 0
        if visible and selected >= visible:
            start = selected - visible + 1
        body = Text("\n").join(items[start : start + visible])
        body.no_wrap = True
        body.overflow = "crop"
        self.update(body)
