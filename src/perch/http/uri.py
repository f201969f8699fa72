"""Immutable URI value.

Just enough of a URI for messages: component access, construction from a
components mapping or a string, and value equality.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any
from urllib.parse import urlsplit

DEFAULT_PORTS: dict[str, int] = {"http": 80, "https": 443}


@dataclass(frozen=True, slots=True)
class Uri:
    """A URI split into components. ``Uri()`` is the empty URI."""

    scheme: str = ""
    user: str = ""
    password: str = ""
    host: str = ""
    port: int | None = None
    path: str = ""
    query: str = ""
    fragment: str = ""

    @classmethod
    def from_components(cls, components: Mapping[str, Any]) -> Uri:
        """Build a URI from a mapping such as ``{"scheme": "http", "host": ...}``.

        Unknown keys are ignored; ``port`` is converted to ``int``.
        """
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in components.items() if k in known and v is not None}
        if "port" in values:
            values["port"] = int(values["port"])
        return cls(**values)

    @classmethod
    def parse(cls, text: str) -> Uri:
        """Parse a URI string."""
        parts = urlsplit(text)
        return cls(
            scheme=parts.scheme,
            user=parts.username or "",
            password=parts.password or "",
            host=parts.hostname or "",
            port=parts.port,
            path=parts.path,
            query=parts.query,
            fragment=parts.fragment,
        )

    @property
    def is_default_port(self) -> bool:
        """True when no port is set or it is the scheme's default."""
        return self.port is None or DEFAULT_PORTS.get(self.scheme) == self.port

    @property
    def host_header(self) -> str:
        """Host, plus ``:port`` when the port is not the scheme default."""
        if not self.host or self.is_default_port:
            return self.host
        return f"{self.host}:{self.port}"

    @property
    def authority(self) -> str:
        """``user:password@host:port``, omitting absent parts."""
        if not self.host:
            return ""
        userinfo = self.user
        if userinfo and self.password:
            userinfo = f"{userinfo}:{self.password}"
        prefix = f"{userinfo}@" if userinfo else ""
        return prefix + self.host_header

    def __str__(self) -> str:
        result = f"{self.scheme}:" if self.scheme else ""
        authority = self.authority
        if authority:
            result += f"//{authority}"
        path = self.path
        if authority and path and not path.startswith("/"):
            path = f"/{path}"
        result += path
        if self.query:
            result += f"?{self.query}"
        if self.fragment:
            result += f"#{self.fragment}"
        return result
