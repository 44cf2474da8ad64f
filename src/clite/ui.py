from __future__ import annotations

import time
from typing import TYPE_CHECKING

from .constants import (
    ANSI_CLEAR_LINE,
    ANSI_CURSOR_HOME,
    ANSI_DEFAULT_FG,
    ANSI_HIDE_CURSOR,
    ANSI_INVERT_OFF,
    ANSI_INVERT_ON,
    ANSI_SHOW_CURSOR,
    CLITE_VERSION,
    HL_NORMAL,
    STATUS_LINES,
)
from .syntax import syntax_to_color

if TYPE_CHECKING:
    from .editor import Editor


def refresh_screen(editor: Editor) -> None:
    editor.viewport.scroll(editor.cursor, editor.doc)
    editor.write(compose(editor))


def compose(editor: Editor) -> bytes:
    ab: list[str] = [ANSI_HIDE_CURSOR, ANSI_CURSOR_HOME]
    draw_rows(editor, ab)
    draw_status_bar(editor, ab)
    draw_message_bar(editor, ab)
    vp = editor.viewport
    ab.append(f"\x1b[{editor.cursor.cy - vp.rowoff + 1};{editor.cursor.rx - vp.coloff + 1}H")
    ab.append(ANSI_SHOW_CURSOR)
    return "".join(ab).encode("latin-1", errors="replace")


def draw_rows(editor: Editor, ab: list[str]) -> None:
    doc = editor.doc
    vp = editor.viewport
    # A third of the way down the whole terminal, bars included.
    banner_row = (vp.screenrows + STATUS_LINES) // 3
    for y in range(vp.screenrows):
        filerow = vp.rowoff + y
        if filerow >= doc.numrows:
            if doc.numrows == 0 and y == banner_row:
                draw_welcome(editor, ab)
            else:
                ab.append("~")
            ab.append(ANSI_CLEAR_LINE)
            ab.append("\r\n")
            continue

        row = doc.rows[filerow]
        c = row.render[vp.coloff : vp.coloff + vp.screencols]
        hl = row.hl[vp.coloff : vp.coloff + vp.screencols]
        current_color = -1
        for ch, h in zip(c, hl):
            if ord(ch) < 32 or ord(ch) == 127:
                sym = chr(ord("@") + ord(ch)) if ord(ch) <= 26 else "?"
                ab.append(ANSI_INVERT_ON)
                ab.append(sym)
                ab.append(ANSI_INVERT_OFF)
                if current_color != -1:
                    ab.append(f"\x1b[{current_color}m")
            elif h == HL_NORMAL:
                if current_color != -1:
                    ab.append(ANSI_DEFAULT_FG)
                    current_color = -1
                ab.append(ch)
            else:
                color = syntax_to_color(h)
                if color != current_color:
                    ab.append(f"\x1b[{color}m")
                    current_color = color
                ab.append(ch)
        ab.append(ANSI_DEFAULT_FG)
        ab.append(ANSI_CLEAR_LINE)
        ab.append("\r\n")


def draw_welcome(editor: Editor, ab: list[str]) -> None:
    cols = editor.viewport.screencols
    welcome = f"clite editor -- version {CLITE_VERSION}"[:cols]
    margin = (cols - len(welcome)) // 2
    # The filler tilde stays in column 0 when there is room for it.
    ab.append(("~".ljust(margin) if margin else "") + welcome)


def draw_status_bar(editor: Editor, ab: list[str]) -> None:
    doc = editor.doc
    cols = editor.viewport.screencols
    filename = doc.filename if doc.filename else "[No Name]"
    modified = " (modified)" if doc.dirty else ""
    status = f"{filename:.20} - {doc.numrows} lines{modified}"[:cols]
    filetype = doc.syntax.name if doc.syntax is not None else "no ft"
    rstatus = f"{filetype} | {editor.cursor.cy + 1}/{doc.numrows}"
    gap = cols - len(status)
    if gap >= len(rstatus):
        status += rstatus.rjust(gap)
    else:
        status += " " * gap
    ab.extend((ANSI_INVERT_ON, status, ANSI_INVERT_OFF, "\r\n"))


def draw_message_bar(editor: Editor, ab: list[str]) -> None:
    ab.append(ANSI_CLEAR_LINE)
    if editor.statusmsg and time.time() - editor.statusmsg_time < editor.message_timeout:
        ab.append(editor.statusmsg[: editor.viewport.screencols])
