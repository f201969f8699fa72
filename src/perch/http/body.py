"""Body parsing — dispatch on the Content-Type media type.

Supports:
- ``application/x-www-form-urlencoded`` → flat ``dict[str, str]`` (stdlib)
- ``application/json`` and ``*/*+json`` → decoded JSON (stdlib)
- ``text/xml`` and ``application/xml`` → ``xml.etree.ElementTree.Element``

``multipart/form-data`` and every other media type raise
``UnsupportedMediaType``. A non-empty body without a Content-Type raises
``MissingContentType``.

A malformed body does not raise, and neither does one whose bytes do not
decode in its charset. The ``ParseResult`` comes back with ``value=None``
and a ``warning``, and the warning is logged on ``perch.body``. Callers
check ``result.warning`` (or ``value is None``).

Content-Type parameters are split off with ``python-multipart``'s
``parse_options_header``.
"""

import codecs
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qsl
from xml.etree import ElementTree

from python_multipart.multipart import parse_options_header

from perch._internal.types import BodyStream
from perch.config import MessageConfig
from perch.errors import MissingContentType, PayloadTooLarge, UnsupportedMediaType

logger = logging.getLogger("perch.body")

URLENCODED = "application/x-www-form-urlencoded"
MULTIPART = "multipart/form-data"
XML_TYPES = frozenset({"text/xml", "application/xml"})


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Outcome of parsing a body.

    ``value`` is the decoded body, or ``None`` when there was nothing to
    decode or decoding failed. ``warning`` is set only in the latter case.
    """

    value: Any = None
    media_type: str = ""
    warning: str | None = None

    @property
    def ok(self) -> bool:
        """False when the body was malformed."""
        return self.warning is None


def split_content_type(content_type: str | None) -> tuple[str, dict[str, str]]:
    """``'Text/XML; charset=UTF-8'`` → ``('text/xml', {'charset': 'UTF-8'})``."""
    media_type, options = parse_options_header(content_type)
    params = {
        key.decode("latin-1").lower(): value.decode("latin-1")
        for key, value in options.items()
    }
    return media_type.decode("latin-1").strip().lower(), params


def media_type_of(content_type: str | None) -> str:
    """Lowercase media type of a Content-Type value, without parameters."""
    return split_content_type(content_type)[0]


def is_json(media_type: str) -> bool:
    """True for ``application/json`` and any ``+json`` suffix type."""
    return media_type == "application/json" or media_type.endswith("+json")


def parse_urlencoded(text: str) -> dict[str, str]:
    """Decode form-encoded text. Later duplicates overwrite earlier ones."""
    return dict(parse_qsl(text, keep_blank_values=True))


def _decoder_for(
    media_type: str, config: MessageConfig
) -> tuple[str, Callable[[Any], Any]] | None:
    if media_type == URLENCODED:
        return "urlencoded", parse_urlencoded
    if is_json(media_type):
        return "json", json.loads
    if media_type in XML_TYPES and config.parse_xml:
        return "xml", ElementTree.fromstring
    return None


def _codec(charset: str, fallback: str) -> str:
    try:
        return codecs.lookup(charset).name
    except LookupError:
        logger.debug("Unknown charset %r, decoding as %s", charset, fallback)
        return fallback


def parse_body(
    body: BodyStream,
    content_type: str | None,
    config: MessageConfig | None = None,
) -> ParseResult:
    """Decode *body* according to *content_type*.

    Args:
        body: The body stream. Read once, from the start.
        content_type: The Content-Type header line, or ``None``/``""``.
        config: Limits and charset fallback. Defaults to ``MessageConfig()``.

    Returns:
        A ``ParseResult``. ``value`` is ``None`` for an empty body.

    Raises:
        MissingContentType: The body is non-empty but has no Content-Type.
        UnsupportedMediaType: The media type has no decoder.
        PayloadTooLarge: The body exceeds ``config.max_content_length``.
    """
    config = config or MessageConfig()
    media_type, params = split_content_type(content_type)

    if not media_type:
        if body.size:
            raise MissingContentType
        return ParseResult()

    if media_type == MULTIPART:
        raise UnsupportedMediaType(media_type)

    decoder = _decoder_for(media_type, config)
    if decoder is None:
        raise UnsupportedMediaType(media_type)
    kind, decode = decoder

    size = body.size
    if size is not None and size > config.max_content_length:
        raise PayloadTooLarge(size, config.max_content_length)

    raw = body.read_all()
    if len(raw) > config.max_content_length:
        raise PayloadTooLarge(len(raw), config.max_content_length)

    logger.debug("Parsing %d byte %s body as %s", len(raw), media_type, kind)
    charset = params.get("charset")
    if kind == "urlencoded":
        charset = charset or config.charset
    elif not raw.strip():
        return ParseResult(None, media_type)

    try:
        # Without a charset parameter JSON and XML detect their own encoding
        payload = raw.decode(_codec(charset, config.charset)) if charset else raw
        value = decode(payload)
    except (ValueError, ElementTree.ParseError) as exc:
        warning = f"Failed to parse {kind} body: {exc}"
        logger.warning(warning)
        return ParseResult(None, media_type, warning)
    return ParseResult(value, media_type)
