"""Perch exception hierarchy.

Shared across headers, messages, and the body parser so every module
raises and catches the same types.

Two families:

- ``InvalidArgument`` — a caller passed a value the message cannot hold.
  Raised immediately by the ``with_*()`` call that received it.
- ``BodyParseError`` — the body cannot or will not be decoded.
  Raised lazily, when ``parsed_body`` is read.

Malformed JSON or XML is *not* an error: ``ParseResult.warning`` carries
the reason instead.
"""


class PerchError(Exception):
    """Base for all perch-specific errors."""


class InvalidArgument(PerchError, ValueError):
    """Raised when a message field is given an unusable value."""


class InvalidHeaderName(InvalidArgument):
    """Header name is not a string or not a valid token."""


class InvalidHeaderValue(InvalidArgument):
    """Header value is neither a string nor a non-empty sequence of strings."""


class InvalidStatusCode(InvalidArgument):
    """Status code is not an integer in 100...999."""


class InvalidReasonPhrase(InvalidArgument):
    """Reason phrase is not a string."""


class InvalidProtocolVersion(InvalidArgument):
    """Protocol version does not normalize to ``major.minor``."""


class InvalidMethod(InvalidArgument):
    """Method is not a string of letters and dashes."""


class InvalidRequestTarget(InvalidArgument):
    """Request target is not a string."""


class InvalidUploadedFilesStructure(InvalidArgument):
    """A leaf of the uploaded-files tree is not an ``UploadedFile``."""


class InvalidParsedBody(InvalidArgument):
    """Parsed body is a scalar instead of a structure or ``None``."""


class BodyParseError(PerchError, RuntimeError):
    """Raised when the request body cannot be decoded."""


class UnsupportedMediaType(BodyParseError):
    """The Content-Type names a media type the parser does not handle.

    ``multipart/form-data`` always lands here: decoding it is left to a
    dedicated multipart parser.
    """

    def __init__(self, media_type: str) -> None:
        self.media_type = media_type
        super().__init__(f"Parsing {media_type} isn't supported")


class MissingContentType(BodyParseError):
    """A non-empty body arrived without a Content-Type header."""

    def __init__(self) -> None:
        super().__init__("Unable to parse body: 'Content-Type' header is missing")


class PayloadTooLarge(BodyParseError):
    """The body exceeds ``MessageConfig.max_content_length``."""

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"Body of {size} bytes exceeds the {limit} byte limit")
