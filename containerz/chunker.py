"""Read and write files in fixed-size chunks."""

from __future__ import annotations

import os
import tempfile
from typing import BinaryIO


class Reader:
    """Reads a file one chunk at a time."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._file: BinaryIO = open(path, "rb")
        try:
            self._size = os.fstat(self._file.fileno()).st_size
        except OSError:
            self._file.close()
            raise
        self._chunk_index = 0
        self._done = False

    def read(self, chunk_size: int) -> bytes:
        """Return the next chunk of the file.

        The last chunk may be shorter than ``chunk_size``; it may also be
        empty when the file size is a multiple of ``chunk_size``. Once that
        final chunk has been returned, further calls raise ``EOFError``.
        """
        if self._done:
            raise EOFError("end of file")
        if chunk_size <= 0:
            raise ValueError(f"chunk size must be positive, got {chunk_size}")

        self._file.seek(self._chunk_index * chunk_size)
        data = self._file.read(chunk_size)
        if len(data) < chunk_size:
            self._done = True
            return data

        self._chunk_index += 1
        return data

    def size(self) -> int:
        """Return the size of the file in bytes."""
        return self._size

    def is_eof(self) -> bool:
        """Tell whether the whole file has been read."""
        return self._done

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> Reader:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class Writer:
    """Writes chunks one after another into a new temporary file."""

    def __init__(self, location: str | os.PathLike[str], chunk_size: int) -> None:
        fd, path = tempfile.mkstemp(dir=location)
        self._file: BinaryIO = os.fdopen(fd, "w+b")
        self.path = path
        self.chunk_size = chunk_size
        self._chunk_index = 0
        self._bytes_written = 0

    def write(self, data: bytes) -> int:
        """Append ``data`` to the file and return the number of bytes written.

        The file's read position is left where it was, so the content can be
        read back through :meth:`file` from the start.
        """
        position = self._file.tell()
        self._file.seek(self._bytes_written)
        written = self._file.write(data)
        self._file.flush()
        self._file.seek(position)

        self._chunk_index += 1
        self._bytes_written += written
        return written

    def size(self) -> int:
        """Return the number of bytes written so far."""
        return self._bytes_written

    def file(self) -> BinaryIO:
        """Return the file that backs this writer."""
        return self._file

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> Writer:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()