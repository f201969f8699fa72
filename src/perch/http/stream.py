"""Readable body stream.

Wraps a binary file object. ``read_all()`` always returns the whole body:
seekable sources are rewound, one-shot sources (``wsgi.input``) are
buffered on first read so the body parser can read again later.

Streams are shared between messages by reference. Reading from one
message's body moves the position seen by every other message holding
the same stream.
"""

from __future__ import annotations

import io
from collections.abc import Mapping
from typing import Any, BinaryIO


class Stream:
    """A body stream over a binary file object."""

    __slots__ = ("_file", "_size", "_metadata")

    def __init__(
        self,
        file: BinaryIO | None = None,
        *,
        size: int | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> None:
        if file is None:
            file = io.BytesIO()
            size = 0
        self._file = file
        self._size = size
        self._metadata = {
            "uri": "memory://",
            "mode": "rb",
            "seekable": _seekable(file),
            **(metadata or {}),
        }

    @classmethod
    def from_bytes(cls, data: bytes | str, **metadata: Any) -> Stream:
        """Create an in-memory stream holding *data*."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        return cls(io.BytesIO(data), size=len(data), metadata=metadata)

    @property
    def size(self) -> int | None:
        """Body size in bytes, or ``None`` when unknown."""
        if self._size is None and isinstance(self._file, io.BytesIO):
            return len(self._file.getbuffer())
        return self._size

    def read_all(self) -> bytes:
        """Read the entire body from the start, at most ``size`` bytes when known."""
        limit = -1 if self._size is None else self._size
        if not _seekable(self._file):
            data = self._file.read(limit)
            # One-shot source: keep what was read so the next call sees it too
            self._file = io.BytesIO(data)
            self._size = len(data)
            self._metadata["seekable"] = True
            return data
        self._file.seek(0)
        return self._file.read(limit)

    def get_metadata(self, key: str | None = None) -> Any:
        """Return all metadata, or the value for *key* (``None`` if missing)."""
        if key is None:
            return dict(self._metadata)
        return self._metadata.get(key)

    def __repr__(self) -> str:
        return f"Stream({self._metadata['uri']!r}, size={self.size!r})"


def _seekable(file: Any) -> bool:
    try:
        return bool(file.seekable())
    except (AttributeError, OSError, ValueError):
        return False
