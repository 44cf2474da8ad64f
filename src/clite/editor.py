from __future__ import annotations

import contextlib
import logging
import os
import signal
import sys
import time
from typing import Any, Callable, Final

from . import terminal
from .config import DEFAULT_CONFIG, load_config
from .constants import (
    ANSI_CLEAR_SCREEN,
    ANSI_CURSOR_HOME,
    ARROW_DOWN,
    ARROW_LEFT,
    ARROW_RIGHT,
    ARROW_UP,
    BACKSPACE,
    CTRL_F,
    CTRL_H,
    CTRL_J,
    CTRL_L,
    CTRL_Q,
    CTRL_S,
    DEL_KEY,
    END_KEY,
    ENTER,
    ESC,
    HOME_KEY,
    PAGE_DOWN,
    PAGE_UP,
)
from .document import Document
from .fileio import load_lines, write_all
from .keys import read_key
from .log import KEY_LOGGER, setup_logging
from .models import Cursor
from .search import Prompt, PromptState, SearchSession
from .terminal import RawMode, get_window_size, write_fd
from .ui import refresh_screen
from .viewport import Viewport

log = logging.getLogger(__name__)
key_log = logging.getLogger(KEY_LOGGER)

STDIN_FD: Final[int] = 0
STDOUT_FD: Final[int] = 1


class Editor:
    def __init__(
        self,
        config: dict[str, Any] | None = None,
        read_byte: Callable[[], int | None] | None = None,
        write: Callable[[bytes], None] | None = None,
    ) -> None:
        settings = (config or DEFAULT_CONFIG)["editor"]
        self.doc = Document(tab_stop=settings["tab_stop"])
        self.cursor = Cursor()
        self.viewport = Viewport()
        self.quit_max = settings["quit_times"]
        self.quit_times = self.quit_max
        self.message_timeout = settings["message_timeout"]
        self.statusmsg = ""
        self.statusmsg_time = 0.0
        self.read_byte = read_byte or (lambda: terminal.read_byte(STDIN_FD))
        self.write = write or (lambda data: write_fd(STDOUT_FD, data))

    def update_window_size(self) -> None:
        try:
            rows, cols = get_window_size(STDIN_FD, STDOUT_FD)
        except OSError as exc:
            raise OSError(exc.errno, "Unable to query screen size") from exc
        self.viewport.resize(rows, cols)
        log.debug("window size %dx%d", cols, rows)

    def handle_sigwinch(self, _signum: int, _frame) -> None:
        self.update_window_size()
        self.refresh_screen()

    def set_status_message(self, fmt: str, *args: object) -> None:
        self.statusmsg = fmt % args if args else fmt
        self.statusmsg_time = time.time()

    def open_file(self, filename: str) -> None:
        self.doc.filename = filename
        self.doc.select_syntax(filename)
        try:
            lines = load_lines(filename)
        except FileNotFoundError:
            log.info("%s does not exist, starting a new file", filename)
            return
        except OSError as exc:
            raise OSError(exc.errno, f"Opening file failed: {filename}: {exc.strerror}") from exc
        self.doc.load(lines)

    def save(self) -> None:
        if not self.doc.filename:
            filename = self.prompt(Prompt("Save as: %s (ESC to cancel)"))
            if filename is None:
                self.set_status_message("Save aborted")
                return
            self.doc.filename = filename
            self.doc.select_syntax(filename)

        data = self.doc.to_bytes()
        try:
            written = write_all(self.doc.filename, data)
        except OSError as exc:
            log.warning("saving %s failed: %s", self.doc.filename, exc)
            self.set_status_message("Can't save! I/O error: %s", exc.strerror or exc)
            return
        self.doc.dirty = 0
        self.set_status_message("%d bytes written to disk", written)
        log.info("wrote %d bytes to %s", written, self.doc.filename)

    def refresh_screen(self) -> None:
        refresh_screen(self)

    def prompt(self, prompt: Prompt) -> str | None:
        """Run ``prompt`` in the message bar until it is accepted or cancelled."""
        while True:
            self.set_status_message(prompt.message)
            self.refresh_screen()
            key = read_key(self.read_byte)
            key_log.debug("prompt key %d", key)
            state = prompt.advance(key)
            if state is PromptState.ACTIVE:
                continue
            self.set_status_message("")
            if state is PromptState.ACCEPTED:
                return prompt.query
            return None

    def find(self) -> None:
        session = SearchSession(self)
        query = self.prompt(session)
        if query is None:
            self.set_status_message("Search cancelled")
        elif session.last_match == -1:
            self.set_status_message("No match found for: %s", query)

    def move_cursor(self, key: int) -> None:
        doc = self.doc
        cur = self.cursor
        row = doc.rows[cur.cy] if cur.cy < doc.numrows else None

        if key == ARROW_LEFT:
            if cur.cx != 0:
                cur.cx -= 1
            elif cur.cy > 0:
                cur.cy -= 1
                cur.cx = doc.rows[cur.cy].size
        elif key == ARROW_RIGHT:
            if row is not None and cur.cx < row.size:
                cur.cx += 1
            elif row is not None and cur.cx == row.size:
                cur.cy += 1
                cur.cx = 0
        elif key == ARROW_UP:
            if cur.cy != 0:
                cur.cy -= 1
        elif key == ARROW_DOWN:
            if cur.cy < doc.numrows:
                cur.cy += 1

        rowlen = doc.rows[cur.cy].size if cur.cy < doc.numrows else 0
        if cur.cx > rowlen:
            cur.cx = rowlen

    def page(self, key: int) -> None:
        vp = self.viewport
        if key == PAGE_UP:
            self.cursor.cy = vp.rowoff
        else:
            self.cursor.cy = min(vp.rowoff + vp.screenrows - 1, self.doc.numrows)
        for _ in range(vp.screenrows):
            self.move_cursor(ARROW_UP if key == PAGE_UP else ARROW_DOWN)

    def insert_char(self, c: str) -> None:
        if self.cursor.cy == self.doc.numrows:
            self.doc.insert_row(self.doc.numrows, "")
        self.doc.insert_char(self.cursor.cy, self.cursor.cx, c)
        self.cursor.cx += 1

    def insert_newline(self) -> None:
        self.doc.split_at(self.cursor.cy, self.cursor.cx)
        self.cursor.cy += 1
        self.cursor.cx = 0

    def del_char(self) -> None:
        cur = self.cursor
        if cur.cy == self.doc.numrows:
            return
        if cur.cx == 0 and cur.cy == 0:
            return
        if cur.cx > 0:
            self.doc.delete_char(cur.cy, cur.cx - 1)
            cur.cx -= 1
        else:
            cur.cx = self.doc.join_with_previous(cur.cy)
            cur.cy -= 1

    def del_forward(self) -> None:
        cur = self.cursor
        if cur.cy >= self.doc.numrows:
            return
        if cur.cx >= self.doc.rows[cur.cy].size and cur.cy + 1 >= self.doc.numrows:
            return
        self.move_cursor(ARROW_RIGHT)
        self.del_char()

    def confirm_quit(self) -> None:
        if self.doc.dirty and self.quit_times > 1:
            self.quit_times -= 1
            self.set_status_message(
                "WARNING!!! File has unsaved changes. Press Ctrl-Q %d more times to quit.",
                self.quit_times,
            )
            return
        self.write((ANSI_CLEAR_SCREEN + ANSI_CURSOR_HOME).encode())
        raise SystemExit(0)

    def process_key(self, c: int) -> None:
        if c == CTRL_Q:
            self.confirm_quit()
            return

        if c in (ENTER, CTRL_J):
            self.insert_newline()
        elif c == CTRL_S:
            self.save()
        elif c == CTRL_F:
            self.find()
        elif c in (BACKSPACE, CTRL_H):
            self.del_char()
        elif c == DEL_KEY:
            self.del_forward()
        elif c == HOME_KEY:
            self.cursor.cx = 0
        elif c == END_KEY:
            if self.cursor.cy < self.doc.numrows:
                self.cursor.cx = self.doc.rows[self.cursor.cy].size
        elif c in (PAGE_UP, PAGE_DOWN):
            self.page(c)
        elif c in (ARROW_UP, ARROW_DOWN, ARROW_LEFT, ARROW_RIGHT):
            self.move_cursor(c)
        elif c in (CTRL_L, ESC):
            pass
        elif c < 256:
            self.insert_char(chr(c))

        self.quit_times = self.quit_max

    def process_keypress(self) -> None:
        c = read_key(self.read_byte, block=False)
        if c is None:
            return
        key_log.debug("key %d", c)
        self.process_key(c)


def run(argv: list[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) > 1:
        print("Usage: clite [filename]", file=sys.stderr)
        return 1
    if not os.isatty(STDIN_FD) or not os.isatty(STDOUT_FD):
        print("clite: stdin/stdout must be a tty", file=sys.stderr)
        return 1

    config = load_config()
    setup_logging(config)
    editor = Editor(config)
    try:
        with RawMode(STDIN_FD):
            editor.update_window_size()
            if args:
                editor.open_file(args[0])
            signal.signal(signal.SIGWINCH, editor.handle_sigwinch)
            editor.set_status_message("HELP: Ctrl-S = save | Ctrl-Q = quit | Ctrl-F = find")
            while True:
                editor.refresh_screen()
                editor.process_keypress()
    except SystemExit as exc:
        if isinstance(exc.code, int):
            return exc.code
        return 0
    except OSError as exc:
        log.exception("fatal I/O error")
        with contextlib.suppress(OSError):
            editor.write((ANSI_CLEAR_SCREEN + ANSI_CURSOR_HOME).encode())
        print(f"clite: {exc.strerror or exc}", file=sys.stderr)
        return 1
