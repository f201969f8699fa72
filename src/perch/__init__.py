"""Perch — immutable HTTP message values.

Requests and responses as frozen values: every ``.with_*()`` call returns a
new message. Server requests derive their headers, method, URI, and
request target lazily from a WSGI environ, and decode their body by
Content-Type on demand.

Basic usage::

    from perch import ServerRequest

    request = ServerRequest.from_environ(environ)
    request.method                     # "POST"
    request.get_header_line("accept")  # "text/html,application/json"
    request.parsed_body                # {"title": "Buy milk"}

    moved = request.with_uri("https://example.com/tasks")

Responses::

    from perch import Response

    response = Response().with_status(404).with_header("Content-Type", "text/plain")
"""

__version__ = "0.1.0"
__all__ = [
    "BodyParseError",
    "Headers",
    "InvalidArgument",
    "Message",
    "MessageConfig",
    "MissingContentType",
    "ParseResult",
    "PerchError",
    "Request",
    "Response",
    "ServerRequest",
    "Stream",
    "UnsupportedMediaType",
    "UploadedFile",
    "Uri",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name == "Headers":
        from perch.http.headers import Headers

        return Headers

    if name == "Message":
        from perch.http.message import Message

        return Message

    if name in ("Request", "ServerRequest"):
        from perch.http import request as _req

        return getattr(_req, name)

    if name == "Response":
        from perch.http.response import Response

        return Response

    if name == "ParseResult":
        from perch.http.body import ParseResult

        return ParseResult

    if name == "Stream":
        from perch.http.stream import Stream

        return Stream

    if name == "Uri":
        from perch.http.uri import Uri

        return Uri

    if name == "UploadedFile":
        from perch.http.uploads import UploadedFile

        return UploadedFile

    if name == "MessageConfig":
        from perch.config import MessageConfig

        return MessageConfig

    if name in (
        "BodyParseError",
        "InvalidArgument",
        "MissingContentType",
        "PerchError",
        "UnsupportedMediaType",
    ):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
