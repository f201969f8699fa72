"""Response status: code plus reason phrase.

The default reason phrase depends on the protocol version the status was
created for: HTTP/1.0 still calls 302 "Moved Temporarily".
"""

from dataclasses import dataclass
from http import HTTPStatus

# Phrases that differ from http.HTTPStatus under HTTP/1.0 (RFC 1945)
_HTTP10_PHRASES: dict[int, str] = {
    302: "Moved Temporarily",
}


def default_reason_phrase(code: int, protocol_version: str = "1.1") -> str:
    """Return the registered reason phrase for *code*, or ``""``."""
    if protocol_version == "1.0" and code in _HTTP10_PHRASES:
        return _HTTP10_PHRASES[code]
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return ""


@dataclass(frozen=True, slots=True)
class ResponseStatus:
    """A status code and reason phrase. Immutable.

    An empty ``phrase`` means "use the default for ``code``".
    """

    code: int = 200
    phrase: str = ""
    protocol_version: str = "1.0"

    @property
    def reason_phrase(self) -> str:
        return self.phrase or default_reason_phrase(self.code, self.protocol_version)

    def __str__(self) -> str:
        return f"{self.code} {self.reason_phrase}".rstrip()
