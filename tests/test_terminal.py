from __future__ import annotations

import os
import struct
import termios
import unittest
from unittest import mock

from clite.terminal import (
    RawMode,
    get_cursor_position,
    get_window_size,
    raw_attributes,
    read_byte,
    write_fd,
)


class PipeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.rfd, self.wfd = os.pipe()
        self.addCleanup(self._close)

    def _close(self) -> None:
        for fd in (self.rfd, self.wfd):
            try:
                os.close(fd)
            except OSError:
                pass

    def test_read_byte_returns_next_byte(self) -> None:
        os.write(self.wfd, b"ab")
        self.assertEqual(read_byte(self.rfd), ord("a"))
        self.assertEqual(read_byte(self.rfd), ord("b"))

    def test_read_byte_on_end_of_input_is_timeout(self) -> None:
        os.close(self.wfd)
        self.assertIsNone(read_byte(self.rfd))

    def test_write_fd_writes_everything(self) -> None:
        write_fd(self.wfd, b"x" * 1000)
        self.assertEqual(os.read(self.rfd, 2000), b"x" * 1000)

    def test_cursor_report_is_parsed(self) -> None:
        reply_r, reply_w = os.pipe()
        self.addCleanup(os.close, reply_r)
        os.write(reply_w, b"\x1b[12;34R")
        os.close(reply_w)
        self.assertEqual(get_cursor_position(reply_r, self.wfd), (12, 34))
        self.assertEqual(os.read(self.rfd, 16), b"\x1b[6n")

    def test_bad_cursor_report_raises(self) -> None:
        reply_r, reply_w = os.pipe()
        self.addCleanup(os.close, reply_r)
        os.write(reply_w, b"garbage")
        os.close(reply_w)
        with self.assertRaises(OSError):
            get_cursor_position(reply_r, self.wfd)

    def _size_from_cursor_reports(self, ioctl: mock.Mock) -> tuple[int, int]:
        reply_r, reply_w = os.pipe()
        self.addCleanup(os.close, reply_r)
        os.write(reply_w, b"\x1b[5;7R\x1b[24;80R")
        os.close(reply_w)
        with mock.patch("clite.terminal.fcntl.ioctl", ioctl):
            return get_window_size(reply_r, self.wfd)

    def test_window_size_falls_back_to_cursor_reports(self) -> None:
        size = self._size_from_cursor_reports(mock.Mock(side_effect=OSError(25, "not a tty")))
        self.assertEqual(size, (24, 80))
        self.assertEqual(
            os.read(self.rfd, 64),
            b"\x1b[6n\x1b[999C\x1b[999B\x1b[6n\x1b[5;7H",
        )

    def test_window_size_uses_cursor_when_ioctl_has_no_columns(self) -> None:
        size = self._size_from_cursor_reports(mock.Mock(return_value=struct.pack("HHHH", 24, 0, 0, 0)))
        self.assertEqual(size, (24, 80))
        self.assertTrue(os.read(self.rfd, 64).endswith(b"\x1b[5;7H"))

    def test_window_size_from_ioctl(self) -> None:
        ioctl = mock.Mock(return_value=struct.pack("HHHH", 30, 100, 0, 0))
        with mock.patch("clite.terminal.fcntl.ioctl", ioctl):
            self.assertEqual(get_window_size(self.rfd, self.wfd), (30, 100))

    def test_raw_mode_needs_a_tty(self) -> None:
        with self.assertRaises(OSError):
            with RawMode(self.rfd):
                pass


class RawAttributeTests(unittest.TestCase):
    def test_raw_attributes(self) -> None:
        cc = [b"\x00"] * 32
        attrs = [
            termios.ICRNL | termios.IXON,
            termios.OPOST,
            0,
            termios.ECHO | termios.ICANON,
            38400,
            38400,
            cc,
        ]
        iflag, oflag, cflag, lflag, ispeed, _, new_cc = raw_attributes(attrs)
        self.assertEqual(iflag & (termios.ICRNL | termios.IXON), 0)
        self.assertEqual(oflag & termios.OPOST, 0)
        self.assertEqual(cflag & termios.CS8, termios.CS8)
        self.assertEqual(lflag & (termios.ECHO | termios.ICANON), 0)
        self.assertEqual(ispeed, 38400)
        self.assertEqual((new_cc[termios.VMIN], new_cc[termios.VTIME]), (0, 1))
        self.assertEqual(cc[termios.VMIN], b"\x00")


if __name__ == "__main__":
    unittest.main()
