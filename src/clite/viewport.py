from __future__ import annotations

from dataclasses import dataclass

from .constants import STATUS_LINES
from .document import Document, col_to_render_col
from .models import Cursor


@dataclass(slots=True)
class Viewport:
    rowoff: int = 0
    coloff: int = 0
    screenrows: int = 1
    screencols: int = 1

    def resize(self, rows: int, cols: int) -> None:
        self.screenrows = max(1, rows - STATUS_LINES)
        self.screencols = max(1, cols)

    def scroll(self, cursor: Cursor, doc: Document) -> None:
        cursor.rx = 0
        if cursor.cy < doc.numrows:
            cursor.rx = col_to_render_col(doc.rows[cursor.cy], cursor.cx, doc.tab_stop)

        if cursor.cy < self.rowoff:
            self.rowoff = cursor.cy
        if cursor.cy >= self.rowoff + self.screenrows:
            self.rowoff = cursor.cy - self.screenrows + 1
        if cursor.rx < self.coloff:
            self.coloff = cursor.rx
        if cursor.rx >= self.coloff + self.screencols:
            self.coloff = cursor.rx - self.screencols + 1
