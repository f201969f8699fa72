"""Shared type aliases and protocols used across perch modules."""

from collections.abc import Mapping
from typing import Any, Protocol, TypeAlias, runtime_checkable

# Header value as accepted by with_header(): one string or several
HeaderValue: TypeAlias = str | list[str] | tuple[str, ...]

# Raw environment parameters (CGI / WSGI environ style)
ServerParams: TypeAlias = Mapping[str, Any]


@runtime_checkable
class BodyStream(Protocol):
    """What a message needs from its body.

    Structural, so tests and callers can hand in any object with these
    members. ``perch.http.stream.Stream`` is the stock implementation.
    """

    @property
    def size(self) -> int | None: ...

    def read_all(self) -> bytes: ...

    def get_metadata(self, key: str | None = None) -> Any: ...
