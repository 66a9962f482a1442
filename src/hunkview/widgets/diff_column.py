"""One bordered diff column; unified view uses one, side-by-side two."""

from __future__ import annotations

from rich.text import Text
from textual.widgets import Static

from hunkview.view.composer import Column


class DiffColumn(Static):
    DEFAULT_CSS = """
    DiffColumn {
        height: 1fr;
        border: round $accent;
        overflow: hidden;
    }
    """

    def __init__(self, **kwargs) -> None:  # noqa: ANN003
        super().__init__("", **kwargs)
        self.lines: list[Text] = []

    @property
    def plain_lines(self) -> list[str]:
        return [line.plain.rstrip() for line in self.lines]

    def paint(self, column: Column | None, subtitle: str = "") -> None:
        if column is None:
            self.display = False
            self.lines = []
            return
        self.display = True
        self.styles.width = column.region.width
        self.border_title = column.title
        self.border_subtitle = subtitle
        self.lines = column.lines
        body = Text("\n").join(column.lines)
        body.no_wrap = True
        body.overflow = "crop"
        self.update(body)
