"""Immutable, case-insensitive HTTP headers.

Implements ``Mapping[str, list[str]]`` plus a copy-on-write ``with_*()``
API. Lookups ignore case; output uses the Header-Case name fixed when the
header was first set (``foo-zoo`` → ``Foo-Zoo``).
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from typing import Any

from perch._internal.types import HeaderValue
from perch.errors import InvalidArgument, InvalidHeaderName, InvalidHeaderValue

_NAME_RE = re.compile(r"[A-Za-z][A-Za-z0-9]*(-[A-Za-z0-9]+)*")


def header_case(name: str) -> str:
    """``content-TYPE`` → ``Content-Type``."""
    return "-".join(part.capitalize() for part in name.split("-"))


def is_valid_name(name: object) -> bool:
    """True if *name* is a string usable as a header name."""
    return isinstance(name, str) and _NAME_RE.fullmatch(name) is not None


def _assert_name(name: object) -> str:
    if not isinstance(name, str):
        msg = f"Header name must be a string, not a {type(name).__name__}"
        raise InvalidHeaderName(msg)
    if _NAME_RE.fullmatch(name) is None:
        raise InvalidHeaderName(f"Invalid header name {name!r}")
    return name


def _normalize_value(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if (
        isinstance(value, (list, tuple))
        and value
        and all(isinstance(v, str) for v in value)
    ):
        return tuple(value)
    msg = "Header value should be a string or a non-empty list of strings"
    raise InvalidHeaderValue(msg)


def _key(name: object) -> str:
    if not isinstance(name, str):
        msg = f"Header name must be a string, not a {type(name).__name__}"
        raise InvalidArgument(msg)
    return name.lower()


class Headers(Mapping[str, list[str]]):
    """Immutable, case-insensitive HTTP headers.

    ``__getitem__`` and ``get`` return every value for a header;
    ``get_line`` joins them with a comma. Iteration yields display names
    in insertion order.

    Every ``with_*()`` call returns a new ``Headers``; the receiver is
    never modified.
    """

    __slots__ = ("_store",)

    _store: dict[str, tuple[str, tuple[str, ...]]]

    def __init__(self, headers: Mapping[str, HeaderValue] | None = None) -> None:
        # lowercase name -> (display name, values)
        store: dict[str, tuple[str, tuple[str, ...]]] = {}
        for name, value in (headers or {}).items():
            _assert_name(name)
            values = _normalize_value(value)
            key = name.lower()
            if key in store:
                display, existing = store[key]
                store[key] = (display, existing + values)
            else:
                store[key] = (header_case(name), values)
        object.__setattr__(self, "_store", store)

    @classmethod
    def _from_store(cls, store: dict[str, tuple[str, tuple[str, ...]]]) -> Headers:
        headers = cls.__new__(cls)
        object.__setattr__(headers, "_store", store)
        return headers

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    # -- Mapping --

    def __getitem__(self, key: str) -> list[str]:
        if not isinstance(key, str) or key.lower() not in self._store:
            raise KeyError(key)
        return list(self._store[key.lower()][1])

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return key.lower() in self._store

    def __iter__(self) -> Iterator[str]:
        for display, _ in self._store.values():
            yield display

    def __len__(self) -> int:
        return len(self._store)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Headers):
            return self.get_all() == other.get_all()
        return super().__eq__(other)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {v!r}" for k, v in self.get_all().items())
        return f"Headers({{{items}}})"

    # -- Reading --

    def get_all(self) -> dict[str, list[str]]:
        """Every header as display name -> values, in insertion order."""
        return {display: list(values) for display, values in self._store.values()}

    def has(self, name: str) -> bool:
        """True if a header matches *name*, ignoring case."""
        return _key(name) in self._store

    def get(self, name: str) -> list[str]:  # type: ignore[override]
        """Return all values for *name*, or ``[]`` if missing."""
        entry = self._store.get(_key(name))
        return list(entry[1]) if entry else []

    def get_line(self, name: str) -> str:
        """Return the values for *name* joined with ``,``; ``""`` if missing."""
        return ",".join(self.get(name))

    # -- Copy-on-write --

    def with_header(self, name: str, value: HeaderValue) -> Headers:
        """Return new headers where *value* replaces every value of *name*.

        An existing header keeps its position and its display name.
        """
        _assert_name(name)
        values = _normalize_value(value)
        key = name.lower()
        store = dict(self._store)
        display = store[key][0] if key in store else header_case(name)
        store[key] = (display, values)
        return self._from_store(store)

    def with_added_header(self, name: str, value: HeaderValue) -> Headers:
        """Return new headers with *value* appended to *name*'s values."""
        _assert_name(name)
        values = _normalize_value(value)
        key = name.lower()
        store = dict(self._store)
        if key in store:
            display, existing = store[key]
            store[key] = (display, existing + values)
        else:
            store[key] = (header_case(name), values)
        return self._from_store(store)

    def without_header(self, name: str) -> Headers:
        """Return new headers without *name*.

        Returns ``self`` when the header is absent, so callers can detect
        "nothing changed" with an identity check.
        """
        key = _key(name)
        if key not in self._store:
            return self
        store = dict(self._store)
        del store[key]
        return self._from_store(store)
