"""Lazily gzip-compressing reader over a byte source."""

from __future__ import annotations

import io
import zlib
from typing import Any

_CHUNK_SIZE = 64 * 1024


class GzipCompressingReader:
    """Readable stream producing the gzip-compressed contents of a source.

    The source is read and compressed on demand. Closing the reader does not
    close the source.
    """

    def __init__(self, source: Any) -> None:
        if isinstance(source, str):
            source = io.BytesIO(source.encode("utf-8"))
        elif isinstance(source, (bytes, bytearray, memoryview)):
            source = io.BytesIO(bytes(source))
        elif not hasattr(source, "read"):
            raise TypeError(f"cannot read from {type(source).__name__}")
        self._source = source
        self._compressor = zlib.compressobj(wbits=16 + zlib.MAX_WBITS)
        self._buffer = bytearray()
        self._finished = False
        self._closed = False

    @property
    def closed(self) -> bool:
        """Whether the reader has been closed."""
        return self._closed

    def readable(self) -> bool:
        """Return True; the reader supports reading."""
        return True

    def read(self, size: int | None = -1) -> bytes:
        """Return up to ``size`` compressed bytes, or all remaining if negative."""
        if self._closed:
            raise ValueError("read from closed reader")
        if size is None or size < 0:
            while not self._finished:
                self._fill()
            data = bytes(self._buffer)
            self._buffer.clear()
            return data
        while len(self._buffer) < size and not self._finished:
            self._fill()
        data = bytes(self._buffer[:size])
        del self._buffer[:size]
        return data

    def close(self) -> None:
        """Close the reader and drop any pending output."""
        self._closed = True
        self._buffer.clear()

    def __enter__(self) -> "GzipCompressingReader":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _fill(self) -> None:
        chunk = self._source.read(_CHUNK_SIZE)
        if isinstance(chunk, str):
            chunk = chunk.encode("utf-8")
        if chunk:
            self._buffer += self._compressor.compress(chunk)
        else:
            self._buffer += self._compressor.flush()
            self._finished = True


def compress_with_gzip(data: Any) -> GzipCompressingReader:
    """Return a reader yielding ``data`` (bytes, text or a readable) gzip-compressed."""
    return GzipCompressingReader(data)