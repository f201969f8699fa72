"""Uploaded files — values, descriptor grouping, and tree validation.

An uploaded-file tree mirrors the form field names: ``avatar`` maps to an
``UploadedFile``, ``colors[blue]`` to ``{"colors": {"blue": UploadedFile}}``.

Raw descriptors arrive in one of two shapes. A single upload::

    {"name": "foo.txt", "type": "text/plain", "size": 3,
     "tmp_name": "/tmp/php1", "error": 0}

or several uploads under one field, as parallel mappings::

    {"name": {"blue": "navy.txt", "red": "cherry.html"},
     "type": {"blue": "text/plain", "red": "text/html"}, ...}

``group_uploaded_files()`` turns both into a tree.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Any, TypeAlias

from perch.errors import InvalidUploadedFilesStructure

UploadedFiles: TypeAlias = Mapping[str, "UploadedFile | UploadedFiles"]

_DESCRIPTOR_KEYS = ("name", "type", "size", "tmp_name", "error")


class UploadError(IntEnum):
    """Upload status codes carried by a descriptor's ``error`` field."""

    OK = 0
    INI_SIZE = 1
    FORM_SIZE = 2
    PARTIAL = 3
    NO_FILE = 4
    NO_TMP_DIR = 6
    CANT_WRITE = 7
    EXTENSION = 8


@dataclass(frozen=True, slots=True)
class UploadedFile:
    """A file received with the request.

    Immutable metadata; content stays at ``tmp_path`` until read.
    ``key`` is the form field path, e.g. ``colors[blue]``.
    """

    key: str
    filename: str
    content_type: str
    size: int | None
    tmp_path: str
    error: int = UploadError.OK

    @classmethod
    def from_descriptor(cls, descriptor: Mapping[str, Any], key: str) -> UploadedFile:
        """Build from a ``{name, type, size, tmp_name, error}`` descriptor."""
        size = descriptor.get("size")
        return cls(
            key=key,
            filename=descriptor.get("name") or "",
            content_type=descriptor.get("type") or "",
            size=int(size) if size not in (None, "") else None,
            tmp_path=descriptor.get("tmp_name") or "",
            error=int(descriptor.get("error", UploadError.OK)),
        )

    @property
    def ok(self) -> bool:
        """True if the upload completed."""
        return self.error == UploadError.OK

    def read(self) -> bytes:
        """Return the file content as bytes."""
        return Path(self.tmp_path).read_bytes()

    def save(self, path: Path) -> None:
        """Write the file content to disk.

        Args:
            path: Destination file path. Parent directories must exist.
        """
        path.write_bytes(self.read())

    def __repr__(self) -> str:
        return f"UploadedFile({self.key!r}, {self.filename!r}, {self.content_type!r})"


def _group(descriptor: Mapping[str, Any], key: str) -> UploadedFile | dict[str, Any]:
    names = descriptor.get("name")
    if not isinstance(names, Mapping):
        return UploadedFile.from_descriptor(descriptor, key)
    return {sub: _group(_slice(descriptor, sub, key), f"{key}[{sub}]") for sub in names}


def _slice(descriptor: Mapping[str, Any], sub: str, key: str) -> dict[str, Any]:
    """Pick entry *sub* out of each parallel field of *descriptor*."""
    part: dict[str, Any] = {}
    for field in _DESCRIPTOR_KEYS:
        if field not in descriptor:
            continue
        values = descriptor[field]
        if not isinstance(values, Mapping) or sub not in values:
            msg = f"Upload descriptor '{key}' has no {field!r} entry for '{sub}'"
            raise InvalidUploadedFilesStructure(msg)
        part[field] = values[sub]
    return part


def group_uploaded_files(files: Mapping[str, Mapping[str, Any]]) -> dict[str, Any]:
    """Turn raw upload descriptors into an uploaded-file tree.

    Raises:
        InvalidUploadedFilesStructure: Parallel fields do not share the same keys.
    """
    return {field: _group(descriptor, field) for field, descriptor in files.items()}


def assert_uploaded_files(files: Mapping[str, Any], prefix: str = "") -> None:
    """Raise ``InvalidUploadedFilesStructure`` unless every leaf is an ``UploadedFile``."""
    for name, item in files.items():
        key = f"{prefix}[{name}]" if prefix else str(name)
        if isinstance(item, Mapping):
            assert_uploaded_files(item, key)
        elif not isinstance(item, UploadedFile):
            msg = f"'{key}' is not an UploadedFile object, but a {type(item).__name__}"
            raise InvalidUploadedFilesStructure(msg)
