"""HTTP response with chainable .with_*() transformation API.

Each transformation returns a new Response. The status defaults to
``200`` with the registered reason phrase for the response's protocol
version.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Self

from perch.errors import InvalidReasonPhrase, InvalidStatusCode
from perch.http.message import Message
from perch.http.status import ResponseStatus


def _assert_status_code(code: object) -> int:
    if isinstance(code, bool) or not isinstance(code, int):
        raise InvalidStatusCode(f"Response code must be an integer, not a {type(code).__name__}")
    if not 100 <= code <= 999:
        raise InvalidStatusCode("Response code must be in range 100...999")
    return code


def _assert_reason_phrase(phrase: object) -> str:
    if phrase is None:
        return ""
    if not isinstance(phrase, str):
        msg = f"Response message must be a string, not a {type(phrase).__name__}"
        raise InvalidReasonPhrase(msg)
    return phrase


@dataclass(frozen=True, slots=True, eq=False, kw_only=True)
class Response(Message):
    """An HTTP response built through immutable transformations.

    Construct, then chain ``.with_*()`` calls::

        response = (
            Response()
            .with_status(201)
            .with_header("Location", "/tasks/7")
        )
    """

    _status: ResponseStatus | None = None

    @property
    def status(self) -> ResponseStatus:
        """The status value; a default ``200`` status until one is set."""
        if self._status is None:
            return ResponseStatus(protocol_version=self.protocol_version)
        return self._status

    @property
    def status_code(self) -> int:
        return self.status.code

    @property
    def reason_phrase(self) -> str:
        return self.status.reason_phrase

    def with_status(self, code: int, reason_phrase: str | None = "") -> Self:
        """Return a new Response with a different status.

        Returns ``self`` when *code* is the current code and *reason_phrase*
        is empty or the current phrase. An empty *reason_phrase* selects the
        registered phrase for *code*.

        Raises:
            InvalidStatusCode: *code* is not an integer in 100...999.
            InvalidReasonPhrase: *reason_phrase* is not a string.
        """
        code = _assert_status_code(code)
        phrase = _assert_reason_phrase(reason_phrase)

        current = self.status
        if code == current.code and (not phrase or phrase == current.reason_phrase):
            return self

        status = ResponseStatus(code, phrase, self.protocol_version)
        return replace(self, _status=status)
