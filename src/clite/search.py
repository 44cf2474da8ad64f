from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING

from .constants import (
    ARROW_DOWN,
    ARROW_LEFT,
    ARROW_RIGHT,
    ARROW_UP,
    BACKSPACE,
    CLITE_QUERY_LEN,
    CTRL_H,
    DEL_KEY,
    ENTER,
    ESC,
    HL_MATCH,
)
from .document import render_col_to_col

if TYPE_CHECKING:
    from .editor import Editor

log = logging.getLogger(__name__)


class PromptState(enum.Enum):
    ACTIVE = "active"
    ACCEPTED = "accepted"
    CANCELLED = "cancelled"


class Prompt:
    """A one-line input shown in the message bar."""

    def __init__(self, template: str) -> None:
        self.template = template
        self.query = ""

    @property
    def message(self) -> str:
        return self.template % self.query

    def advance(self, key: int) -> PromptState:
        if key in (DEL_KEY, CTRL_H, BACKSPACE):
            self.query = self.query[:-1]
        elif key == ESC:
            return PromptState.CANCELLED
        elif key == ENTER:
            if self.query:
                return PromptState.ACCEPTED
        elif 32 <= key <= 126 and len(self.query) < CLITE_QUERY_LEN:
            self.query += chr(key)
        return PromptState.ACTIVE


class SearchSession(Prompt):
    """Incremental search: every keystroke moves to the next matching row."""

    def __init__(self, editor: Editor) -> None:
        super().__init__("Search: %s (Use ESC/Arrows/Enter)")
        self.doc = editor.doc
        self.cursor = editor.cursor
        self.viewport = editor.viewport
        self.last_match = -1
        self.direction = 1
        self.saved_hl_line = -1
        self.saved_hl: list[int] | None = None
        self.saved_cx = self.cursor.cx
        self.saved_cy = self.cursor.cy
        self.saved_rowoff = self.viewport.rowoff
        self.saved_coloff = self.viewport.coloff

    def restore_hl(self) -> None:
        if self.saved_hl is not None and 0 <= self.saved_hl_line < self.doc.numrows:
            self.doc.rows[self.saved_hl_line].hl = self.saved_hl
        self.saved_hl = None
        self.saved_hl_line = -1

    def restore_position(self) -> None:
        self.cursor.cx = self.saved_cx
        self.cursor.cy = self.saved_cy
        self.viewport.rowoff = self.saved_rowoff
        self.viewport.coloff = self.saved_coloff

    def advance(self, key: int) -> PromptState:
        state = super().advance(key)
        self.restore_hl()
        if state is not PromptState.ACTIVE:
            self.direction = 1
            if state is PromptState.CANCELLED or self.last_match == -1:
                self.restore_position()
            return state

        if key in (ARROW_RIGHT, ARROW_DOWN, ARROW_LEFT, ARROW_UP):
            self.direction = 1 if key in (ARROW_RIGHT, ARROW_DOWN) else -1
            if self.last_match == -1:
                self.direction = 1
                current = self._origin() - 1
            else:
                current = self.last_match
        else:
            # Rescan from the current match so a longer query can stay on it.
            anchor = self.last_match if self.last_match != -1 else self._origin()
            self.last_match = -1
            self.direction = 1
            current = anchor - 1

        if self.query and self.doc.numrows:
            self.search(current)
        return state

    def _origin(self) -> int:
        return max(0, min(self.saved_cy, self.doc.numrows - 1))

    def search(self, current: int) -> None:
        numrows = self.doc.numrows
        for _ in range(numrows):
            current += self.direction
            if current == -1:
                current = numrows - 1
            elif current == numrows:
                current = 0
            row = self.doc.rows[current]
            idx = row.render.find(self.query)
            if idx == -1:
                continue

            self.last_match = current
            self.cursor.cy = current
            self.cursor.cx = render_col_to_col(row, idx, self.doc.tab_stop)
            # Past the end forces scroll() to put the match on the top row.
            self.viewport.rowoff = numrows
            self.saved_hl_line = current
            self.saved_hl = row.hl.copy()
            end = min(idx + len(self.query), row.rsize)
            row.hl[idx:end] = [HL_MATCH] * (end - idx)
            return
        log.debug("no match for %r", self.query)
