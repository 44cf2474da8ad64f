from __future__ import annotations

import logging

from .constants import CLITE_TAB_STOP
from .models import LanguageProfile, Row
from .syntax import select_syntax_highlight, update_syntax

log = logging.getLogger(__name__)


def col_to_render_col(row: Row, col: int, tab_stop: int = CLITE_TAB_STOP) -> int:
    rx = 0
    for ch in row.chars[:col]:
        if ch == "\t":
            rx += (tab_stop - 1) - (rx % tab_stop)
        rx += 1
    return rx


def render_col_to_col(row: Row, rx: int, tab_stop: int = CLITE_TAB_STOP) -> int:
    """Map a render column back to the file column whose rendered span covers it.

    A render column inside a tab's run of spaces maps to the tab itself.
    """
    cur_rx = 0
    for cx, ch in enumerate(row.chars):
        if ch == "\t":
            cur_rx += (tab_stop - 1) - (cur_rx % tab_stop)
        cur_rx += 1
        if cur_rx > rx:
            return cx
    return row.size


class Document:
    """The rows of one file plus its dirty counter and language profile."""

    def __init__(self, filename: str | None = None, tab_stop: int = CLITE_TAB_STOP) -> None:
        self.rows: list[Row] = []
        self.dirty = 0
        self.filename = filename
        self.tab_stop = tab_stop
        self.syntax: LanguageProfile | None = None

    @property
    def numrows(self) -> int:
        return len(self.rows)

    def select_syntax(self, filename: str | None) -> None:
        self.syntax = select_syntax_highlight(filename)
        for row in self.rows:
            update_syntax(row, self.syntax)

    def update_row(self, row: Row) -> None:
        out: list[str] = []
        idx = 0
        for ch in row.chars:
            if ch == "\t":
                out.append(" ")
                idx += 1
                while idx % self.tab_stop != 0:
                    out.append(" ")
                    idx += 1
            else:
                out.append(ch)
                idx += 1
        row.render = "".join(out)
        update_syntax(row, self.syntax)

    def insert_row(self, at: int, s: str) -> None:
        if at < 0 or at > self.numrows:
            return
        row = Row(chars=s)
        self.rows.insert(at, row)
        self.update_row(row)
        self.dirty += 1

    def delete_row(self, at: int) -> None:
        if at < 0 or at >= self.numrows:
            return
        del self.rows[at]
        self.dirty += 1

    def insert_char(self, at: int, col: int, c: str) -> None:
        row = self.rows[at]
        if col < 0 or col > row.size:
            col = row.size
        row.chars = row.chars[:col] + c + row.chars[col:]
        self.update_row(row)
        self.dirty += 1

    def delete_char(self, at: int, col: int) -> None:
        row = self.rows[at]
        if col < 0 or col >= row.size:
            return
        row.chars = row.chars[:col] + row.chars[col + 1 :]
        self.update_row(row)
        self.dirty += 1

    def append_text(self, at: int, s: str) -> None:
        row = self.rows[at]
        row.chars += s
        self.update_row(row)
        self.dirty += 1

    def split_at(self, at: int, col: int) -> None:
        if at == self.numrows:
            self.insert_row(at, "")
            return
        row = self.rows[at]
        col = max(0, min(col, row.size))
        if col == 0:
            self.insert_row(at, "")
            return
        self.insert_row(at + 1, row.chars[col:])
        row.chars = row.chars[:col]
        self.update_row(row)

    def join_with_previous(self, at: int) -> int:
        """Append row ``at`` onto the row above it and return the join column."""
        if at <= 0 or at >= self.numrows:
            return 0
        join_col = self.rows[at - 1].size
        self.append_text(at - 1, self.rows[at].chars)
        self.delete_row(at)
        return join_col

    def load(self, lines: list[str]) -> None:
        for line in lines:
            self.insert_row(self.numrows, line)
        self.dirty = 0
        log.debug("loaded %d rows from %s", self.numrows, self.filename)

    def rows_to_string(self) -> str:
        return "".join(f"{row.chars}\n" for row in self.rows)

    def to_bytes(self) -> bytes:
        # Rows hold one code point per file byte.
        return bytes((ord(ch) & 0xFF) for ch in self.rows_to_string())
