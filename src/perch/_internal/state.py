"""Field states for lazily derived message attributes.

A derivable field is always in exactly one of:

- ``UNSET`` — nothing known yet; the next read derives it.
- ``Derived(value)`` — computed from server params and cached.
- ``Explicit(value)`` — set by a ``with_*()`` call; wins over derivation.
- ``Injected(value)`` — parsed body only; set by the environ loader.

``with_server_params()`` moves every field back to ``UNSET``.
"""

from dataclasses import dataclass
from typing import Any, Final, Generic, TypeAlias, TypeVar

T = TypeVar("T")


class _Unset:
    __slots__ = ()

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Final = _Unset()


@dataclass(frozen=True, slots=True)
class Derived(Generic[T]):
    """A value computed from server params."""

    value: T


@dataclass(frozen=True, slots=True)
class Explicit(Generic[T]):
    """A value set directly by the caller."""

    value: T


@dataclass(frozen=True, slots=True, eq=False)
class Injected(Generic[T]):
    """Pre-parsed POST data, held by reference."""

    value: T


FieldState: TypeAlias = _Unset | Derived[Any] | Explicit[Any]
BodyState: TypeAlias = _Unset | Derived[Any] | Explicit[Any] | Injected[Any]

