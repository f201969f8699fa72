"""Immutable HTTP message base.

Protocol version, headers, and body shared by requests and responses.

Every ``.with_*()`` call returns a new message; the receiver is never
modified. Unchanged parts (the body stream, the header collection) are
shared between the old and the new message, not copied.

Derivable fields start out ``UNSET`` and are computed on first read by a
``_determine_*()`` hook, then cached on the instance as ``Derived``.
A ``.with_*()`` call stores an ``Explicit`` value instead, which always
wins over derivation.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any, Self, TypeVar

from perch._internal.state import UNSET, Derived, Explicit, FieldState
from perch._internal.types import BodyStream, HeaderValue
from perch.config import MessageConfig
from perch.errors import InvalidProtocolVersion
from perch.http.headers import Headers
from perch.http.stream import Stream

T = TypeVar("T")

_VERSION_RE = re.compile(r"[1-9]\.\d", re.ASCII)


def normalize_protocol_version(version: object) -> str:
    """Return *version* as a ``major.minor`` string.

    Numbers are formatted with one fractional digit (``2`` → ``"2.0"``),
    as is a bare major version string (``"2"`` → ``"2.0"``).

    Raises:
        InvalidProtocolVersion: The result is not a ``major.minor`` version.
    """
    if isinstance(version, bool) or not isinstance(version, (str, int, float)):
        msg = f"HTTP protocol version should be a string or number, not a {type(version).__name__}"
        raise InvalidProtocolVersion(msg)
    if isinstance(version, str):
        text = f"{version}.0" if version.isascii() and version.isdigit() else version
    else:
        text = f"{version:.1f}"
    if _VERSION_RE.fullmatch(text) is None:
        raise InvalidProtocolVersion(f"Invalid HTTP protocol version '{version}'")
    return text


@dataclass(frozen=True, slots=True, eq=False, kw_only=True)
class Message:
    """An immutable HTTP message: protocol version, headers, and body.

    A fresh ``Message()`` captures nothing from the environment: no
    headers, an empty body, and the configured default protocol version.
    """

    config: MessageConfig = field(default_factory=MessageConfig)

    _protocol_version: FieldState = UNSET
    _headers: FieldState = UNSET
    _body: BodyStream = field(default_factory=Stream)

    # -- Derivation --

    def _derive(self, name: str, determine: Callable[[], T]) -> T:
        """Return the value of state field *name*, deriving it if ``UNSET``."""
        state = getattr(self, name)
        if state is UNSET:
            state = Derived(determine())
            # Cached here and carried into later copies; setters reset the
            # derived values that depend on the field they change
            object.__setattr__(self, name, state)
        return state.value

    def _determine_protocol_version(self) -> str:
        return self.config.default_protocol_version

    def _determine_headers(self) -> dict[str, HeaderValue]:
        return {}

    def _content_changed(self) -> dict[str, Any]:
        """Extra fields to reset when headers or body change."""
        return {}

    # -- Protocol version --

    @property
    def protocol_version(self) -> str:
        """HTTP version as ``major.minor``, e.g. ``"1.1"``."""
        return self._derive("_protocol_version", self._determine_protocol_version)

    def with_protocol_version(self, version: str | float) -> Self:
        """Return a new message with a different protocol version."""
        return replace(self, _protocol_version=Explicit(normalize_protocol_version(version)))

    # -- Headers --

    @property
    def headers(self) -> Headers:
        """The header collection, built on first access."""
        return self._derive("_headers", lambda: Headers(self._determine_headers()))

    def has_header(self, name: str) -> bool:
        """True if the header exists, ignoring case."""
        return self.headers.has(name)

    def get_header(self, name: str) -> list[str]:
        """All values of a header, or ``[]``."""
        return self.headers.get(name)

    def get_header_line(self, name: str) -> str:
        """All values of a header joined with ``,``, or ``""``."""
        return self.headers.get_line(name)

    def with_header(self, name: str, value: HeaderValue) -> Self:
        """Return a new message where *value* replaces the header's values."""
        return self._with_headers(self.headers.with_header(name, value))

    def with_added_header(self, name: str, value: HeaderValue) -> Self:
        """Return a new message with *value* appended to the header."""
        return self._with_headers(self.headers.with_added_header(name, value))

    def without_header(self, name: str) -> Self:
        """Return a new message without the header.

        Returns ``self`` when the header is absent.
        """
        headers = self.headers
        reduced = headers.without_header(name)
        if reduced is headers:
            return self
        return self._with_headers(reduced)

    def _with_headers(self, headers: Headers) -> Self:
        return replace(self, _headers=Explicit(headers), **self._content_changed())

    # -- Body --

    @property
    def body(self) -> BodyStream:
        """The body stream. Shared with every message derived from this one."""
        return self._body

    def with_body(self, body: BodyStream) -> Self:
        """Return a new message with a different body stream."""
        return replace(self, _body=body, **self._content_changed())
