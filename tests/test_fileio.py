from __future__ import annotations

import os
import tempfile
import unittest

from clite.fileio import load_lines, write_all


class FileIOTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.path = os.path.join(self.tmp.name, "f.txt")

    def test_line_endings_are_stripped(self) -> None:
        with open(self.path, "wb") as f:
            f.write(b"one\r\ntwo\n\nthree")
        self.assertEqual(load_lines(self.path), ["one", "two", "", "three"])

    def test_high_bytes_map_to_single_code_points(self) -> None:
        with open(self.path, "wb") as f:
            f.write(b"caf\xe9\n")
        self.assertEqual(load_lines(self.path), ["caf\xe9"])

    def test_empty_file_has_no_rows(self) -> None:
        open(self.path, "wb").close()
        self.assertEqual(load_lines(self.path), [])

    def test_write_all_replaces_contents(self) -> None:
        with open(self.path, "wb") as f:
            f.write(b"0123456789")
        self.assertEqual(write_all(self.path, b"abc\n"), 4)
        with open(self.path, "rb") as f:
            self.assertEqual(f.read(), b"abc\n")

    def test_write_all_creates_file(self) -> None:
        self.assertEqual(write_all(self.path, b""), 0)
        self.assertTrue(os.path.exists(self.path))
        self.assertEqual(os.path.getsize(self.path), 0)


if __name__ == "__main__":
    unittest.main()
