from __future__ import annotations

import errno
import fcntl
import logging
import os
import re
import struct
import termios
from contextlib import AbstractContextManager

log = logging.getLogger(__name__)

CURSOR_REPORT = re.compile(rb"\x1b\[(\d+);(\d+)R")
REPORT_MAX = 32


def read_byte(fd: int) -> int | None:
    """Read one byte, or return None when the VTIME timeout expires."""
    try:
        chunk = os.read(fd, 1)
    except (InterruptedError, BlockingIOError):
        return None
    except OSError as exc:
        raise OSError(exc.errno, "read failed") from exc
    return chunk[0] if chunk else None


def write_fd(fd: int, data: bytes) -> None:
    view = memoryview(data)
    while view:
        n = os.write(fd, view)
        if n <= 0:
            raise OSError(errno.EIO, "short write")
        view = view[n:]


def _send(fd: int, seq: bytes) -> None:
    if os.write(fd, seq) != len(seq):
        raise OSError(errno.EIO, f"terminal query {seq!r} not written")


def get_cursor_position(ifd: int, ofd: int) -> tuple[int, int]:
    """Ask the terminal where the cursor is (device status report)."""
    _send(ofd, b"\x1b[6n")
    reply = bytearray()
    while len(reply) < REPORT_MAX:
        byte = read_byte(ifd)
        if byte is None:
            break
        reply.append(byte)
        if byte == ord("R"):
            break

    found = CURSOR_REPORT.match(reply)
    if found is None:
        raise OSError(errno.EIO, f"bad cursor report {bytes(reply)!r}")
    row, col = found.groups()
    return int(row), int(col)


def _ioctl_size(fd: int) -> tuple[int, int] | None:
    try:
        packed = fcntl.ioctl(fd, termios.TIOCGWINSZ, bytes(8))
    except OSError as exc:
        log.debug("TIOCGWINSZ failed: %s", exc)
        return None
    rows, cols = struct.unpack("HHHH", packed)[:2]
    return (rows, cols) if cols else None


def get_window_size(ifd: int, ofd: int) -> tuple[int, int]:
    """Return ``(rows, cols)`` of the terminal.

    When the ioctl gives nothing usable the cursor is pushed to the bottom
    right corner and its position read back, then put where it was.
    """
    size = _ioctl_size(ofd)
    if size is not None:
        return size

    log.debug("probing window size with the cursor")
    home = get_cursor_position(ifd, ofd)
    _send(ofd, b"\x1b[999C\x1b[999B")
    size = get_cursor_position(ifd, ofd)
    _send(ofd, b"\x1b[%d;%dH" % home)
    return size


class RawMode(AbstractContextManager["RawMode"]):
    """Puts a tty into raw mode for the lifetime of a ``with`` block.

    Reads return after at most a tenth of a second, with or without data.
    """

    def __init__(self, fd: int) -> None:
        self.fd = fd
        self._saved: list | None = None

    def __enter__(self) -> "RawMode":
        if not os.isatty(self.fd):
            raise OSError(errno.ENOTTY, "stdin is not a tty")
        try:
            self._saved = termios.tcgetattr(self.fd)
            termios.tcsetattr(self.fd, termios.TCSAFLUSH, raw_attributes(self._saved))
        except termios.error as exc:
            self._saved = None
            raise OSError(errno.EIO, f"Unable to set raw mode: {exc}") from exc
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.restore()

    def restore(self) -> None:
        saved, self._saved = self._saved, None
        if saved is not None:
            termios.tcsetattr(self.fd, termios.TCSAFLUSH, saved)


def raw_attributes(attrs: list) -> list:
    """Derive raw-mode attributes from the tty's current ``tcgetattr`` list."""
    iflag, oflag, cflag, lflag, ispeed, ospeed, cc = attrs
    iflag &= ~(termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON)
    oflag &= ~termios.OPOST
    cflag |= termios.CS8
    lflag &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)
    cc = list(cc)
    cc[termios.VMIN] = 0
    cc[termios.VTIME] = 1
    return [iflag, oflag, cflag, lflag, ispeed, ospeed, cc]
