"""Character stream over a memory-mapped file of at most one page."""

from __future__ import annotations

import enum
import io
import mmap
import os

PAGE_SIZE = 4096


class OpenMode(enum.Flag):
    """How a stream is opened: for reading, writing, and/or at the end."""

    IN = enum.auto()
    OUT = enum.auto()
    ATE = enum.auto()


DEFAULT_MODE = OpenMode.IN | OpenMode.OUT


class MmapFileStream:
    """Reads and writes single characters through a shared memory map.

    Files are limited to ``PAGE_SIZE`` bytes. A missing file is created.
    """

    def __init__(self, fname: str | os.PathLike | None = None, mode: OpenMode = DEFAULT_MODE):
        self._fd: int | None = None
        self._map: mmap.mmap | None = None
        self._size = 0
        self._index = 0
        self._readable = False
        self._writable = False
        if fname is not None:
            self.open(fname, mode)

    def open(self, fname: str | os.PathLike, mode: OpenMode = DEFAULT_MODE) -> None:
        """Open and map ``fname``; does nothing if a file is already open."""
        if self.is_open():
            return
        if not mode & (OpenMode.IN | OpenMode.OUT):
            raise ValueError("mode must include OpenMode.IN or OpenMode.OUT")

        writable = bool(mode & OpenMode.OUT)
        flags = (os.O_RDWR if writable else os.O_RDONLY) | os.O_CREAT
        fd = os.open(fname, flags, 0o664)
        size = 0
        grown = False
        try:
            size = os.fstat(fd).st_size
            if writable:
                if size > PAGE_SIZE:
                    raise ValueError(f"file larger than {PAGE_SIZE} bytes: {size}")
                os.ftruncate(fd, PAGE_SIZE)
                grown = True
                mapping = mmap.mmap(fd, PAGE_SIZE, access=mmap.ACCESS_WRITE)
            elif size:
                mapping = mmap.mmap(fd, size, access=mmap.ACCESS_READ)
            else:
                mapping = None
        except BaseException:
            if grown:
                os.ftruncate(fd, size)
            os.close(fd)
            raise

        self._fd = fd
        self._map = mapping
        self._size = size
        self._index = size if mode & OpenMode.ATE else 0
        self._readable = bool(mode & OpenMode.IN)
        self._writable = writable

    def close(self) -> None:
        """Save changes, trim the file to its size and release it."""
        if not self.is_open():
            return
        try:
            if self._map is not None:
                if self._writable:
                    self._map.flush()
                self._map.close()
            if self._writable:
                os.ftruncate(self._fd, self._size)
        finally:
            os.close(self._fd)
            self._fd = None
            self._map = None
            self._readable = False
            self._writable = False

    def is_open(self) -> bool:
        """Whether a file is currently open."""
        return self._fd is not None

    def size(self) -> int:
        """Current size of the file in bytes; grows as ``put`` extends it."""
        return self._size

    def get(self) -> str:
        """Return the next character and advance, or ``""`` at end of file."""
        self._check_open()
        if not self._readable:
            raise io.UnsupportedOperation("stream not opened for reading")
        if self._index >= self._size:
            return ""
        char = chr(self._map[self._index])
        self._index += 1
        return char

    def put(self, c: str) -> MmapFileStream:
        """Write ``c`` at the cursor and advance, extending the file if needed."""
        self._check_open()
        if not self._writable:
            raise io.UnsupportedOperation("stream not opened for writing")
        data = c.encode("latin-1")
        if len(data) != 1:
            raise ValueError("put expects a single character")
        if self._index >= PAGE_SIZE:
            raise ValueError(f"file cannot grow beyond {PAGE_SIZE} bytes")
        self._map[self._index] = data[0]
        self._index += 1
        self._size = max(self._size, self._index)
        return self

    def _check_open(self) -> None:
        if not self.is_open():
            raise ValueError("I/O operation on closed stream")

    def __enter__(self) -> MmapFileStream:
        return self

    def __exit__(self, *args) -> None:
        self.close()