from __future__ import annotations

import errno
import os


def load_lines(path: str) -> list[str]:
    """Read ``path`` as rows, one code point per byte, line endings stripped."""
    lines: list[str] = []
    with open(path, "rb") as f:
        for line in f:
            while line and line[-1] in (0x0A, 0x0D):
                line = line[:-1]
            lines.append(line.decode("latin-1"))
    return lines


def write_all(path: str, data: bytes) -> int:
    fd = os.open(path, os.O_RDWR | os.O_CREAT, 0o644)
    try:
        os.ftruncate(fd, len(data))
        view = memoryview(data)
        written = 0
        while written < len(data):
            n = os.write(fd, view[written:])
            if n <= 0:
                raise OSError(errno.EIO, "short write")
            written += n
    finally:
        os.close(fd)
    return written
