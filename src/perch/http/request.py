"""Immutable HTTP requests.

``Request`` holds the request line: method, request target, and URI.
``ServerRequest`` is a request received by a server. It derives its
protocol version, headers, method, request target, and URI from the
server params (CGI / WSGI ``environ`` keys) the first time each is read,
and adds cookies, query params, uploaded files, the parsed body, and
attributes.

Any field set with ``.with_*()`` overrides derivation until
``with_server_params()``, which drops every derived *and* explicit value so
the next read derives again from the new params::

    request = ServerRequest().with_method("POST")
    request.with_server_params({"REQUEST_METHOD": "get"}).method  # "GET"
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Self

from perch._internal.state import UNSET, BodyState, Derived, Explicit, FieldState, Injected
from perch._internal.types import HeaderValue, ServerParams
from perch.config import MessageConfig
from perch.errors import (
    InvalidMethod,
    InvalidParsedBody,
    InvalidProtocolVersion,
    InvalidRequestTarget,
)
from perch.http.body import ParseResult, is_json, media_type_of, parse_body, parse_urlencoded
from perch.http.cookies import parse_cookies
from perch.http.headers import header_case, is_valid_name
from perch.http.message import Message, normalize_protocol_version
from perch.http.stream import Stream
from perch.http.uploads import UploadedFiles, assert_uploaded_files, group_uploaded_files
from perch.http.uri import Uri

logger = logging.getLogger("perch.request")

_METHOD_RE = re.compile(r"[A-Za-z-]+")

# CGI keys that carry a header without the HTTP_ prefix
_CGI_HEADERS = {"CONTENT_TYPE": "Content-Type", "CONTENT_LENGTH": "Content-Length"}


def _assert_method(method: object) -> str:
    if not isinstance(method, str):
        raise InvalidMethod(f"Method should be a string, not a {type(method).__name__}")
    if _METHOD_RE.fullmatch(method) is None:
        msg = f"Invalid method '{method}': Method may only contain letters and dashes"
        raise InvalidMethod(msg)
    return method.upper()


@dataclass(frozen=True, slots=True, eq=False, kw_only=True)
class Request(Message):
    """An immutable HTTP request.

    With nothing set, the method is ``""``, the URI is empty, and the
    request target is built from the URI (``"/"`` when it has no path).
    """

    _method: FieldState = UNSET
    _request_target: FieldState = UNSET
    _uri: FieldState = UNSET

    def _determine_method(self) -> str:
        return ""

    def _determine_request_target(self) -> str:
        uri = self.uri
        if not uri.path:
            return "/"
        return f"{uri.path}?{uri.query}" if uri.query else uri.path

    def _determine_uri(self) -> Uri:
        return Uri()

    def _target_changed(self) -> dict[str, Any]:
        """Reset a derived request target, which is computed from method and URI."""
        if isinstance(self._request_target, Derived):
            return {"_request_target": UNSET}
        return {}

    # -- Method --

    @property
    def method(self) -> str:
        """Upper-cased request method, or ``""`` when unknown."""
        return self._derive("_method", self._determine_method)

    def with_method(self, method: str) -> Self:
        """Return a new request with a different method (stored upper-cased).

        Raises:
            InvalidMethod: *method* is not a string of letters and dashes.
        """
        method = _assert_method(method)
        return replace(self, _method=Explicit(method), **self._target_changed())

    # -- Request target --

    @property
    def request_target(self) -> str:
        """The request-target of the request line, e.g. ``/foo?bar=1``."""
        return self._derive("_request_target", self._determine_request_target)

    def with_request_target(self, request_target: str) -> Self:
        """Return a new request with a different request target.

        Raises:
            InvalidRequestTarget: *request_target* is not a string.
        """
        if not isinstance(request_target, str):
            msg = f"Request target should be a string, not a {type(request_target).__name__}"
            raise InvalidRequestTarget(msg)
        return replace(self, _request_target=Explicit(request_target))

    # -- URI --

    @property
    def uri(self) -> Uri:
        return self._derive("_uri", self._determine_uri)

    def with_uri(self, uri: Uri | str, preserve_host: bool = False) -> Self:
        """Return a new request with a different URI.

        Unless *preserve_host* is true, a missing or empty ``Host`` header
        is filled from the URI's host (with the port, when not the
        scheme's default). An existing ``Host`` is left alone.
        """
        if isinstance(uri, str):
            uri = Uri.parse(uri)
        request = replace(self, _uri=Explicit(uri), **self._target_changed())
        if preserve_host or request.get_header_line("Host") or not uri.host:
            return request
        return request.with_header("Host", uri.host_header)


@dataclass(frozen=True, slots=True, eq=False, kw_only=True)
class ServerRequest(Request):
    """An immutable request as received by a server.

    Build one from a WSGI environ with ``ServerRequest.from_environ()``, or
    start from ``ServerRequest()`` and chain ``.with_*()`` calls.

    The parsed body is decoded from the body on first read and cached
    until the headers or the body change. See ``perch.http.body`` for the
    supported media types.
    """

    _server_params: ServerParams = field(default_factory=dict)
    _cookie_params: Mapping[str, str] = field(default_factory=dict)
    _query_params: Mapping[str, Any] = field(default_factory=dict)
    _uploaded_files: UploadedFiles = field(default_factory=dict)
    _parsed_body: BodyState = UNSET
    _attributes: Mapping[str, Any] = field(default_factory=dict)

    # -- Loading --

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, Any],
        *,
        post: Any = None,
        files: Mapping[str, Mapping[str, Any]] | None = None,
        config: MessageConfig | None = None,
    ) -> Self:
        """Create a ServerRequest from a WSGI environ.

        Args:
            environ: The WSGI environ. Every non-``wsgi.*`` key becomes a
                server param; ``wsgi.input`` becomes the body.
            post: Pre-parsed POST data. Held by reference; later changes to
                the object show through ``parsed_body``. Ignored for JSON
                bodies, which are always parsed.
            files: Raw upload descriptors keyed by field name; grouped into
                an uploaded-file tree.
            config: Message configuration.
        """
        params = {
            key: value
            for key, value in environ.items()
            if isinstance(key, str) and not key.startswith("wsgi.")
        }
        logger.debug("Loading request from environ with %d server params", len(params))
        return cls(
            config=config or MessageConfig(),
            _body=_environ_body(environ),
            _server_params=params,
            _cookie_params=parse_cookies(str(params.get("HTTP_COOKIE", ""))),
            _query_params=parse_urlencoded(str(params.get("QUERY_STRING", ""))),
            _uploaded_files=group_uploaded_files(files) if files else {},
            _parsed_body=Injected(post) if post is not None else UNSET,
        )

    # -- Derivation from server params --

    def _determine_protocol_version(self) -> str:
        protocol = str(self._server_params.get("SERVER_PROTOCOL", ""))
        _, _, version = protocol.partition("/")
        try:
            return normalize_protocol_version(version)
        except InvalidProtocolVersion:
            return self.config.default_protocol_version

    def _determine_headers(self) -> dict[str, HeaderValue]:
        params = self._server_params
        headers: dict[str, HeaderValue] = {}
        for key, value in params.items():
            if value is None:
                continue
            if key in _CGI_HEADERS:
                if value == "":
                    continue
                name = _CGI_HEADERS[key]
            elif key.startswith("HTTP_"):
                if key[5:] in _CGI_HEADERS and key[5:] in params:
                    continue
                name = header_case(key[5:].replace("_", "-"))
            else:
                continue
            if not is_valid_name(name):
                logger.debug("Skipping server param %s: not a valid header name", key)
                continue
            headers[name] = str(value)
        logger.debug("Derived %d headers from server params", len(headers))
        return headers

    def _determine_method(self) -> str:
        return str(self._server_params.get("REQUEST_METHOD", "")).upper()

    def _determine_request_target(self) -> str:
        if "REQUEST_URI" in self._server_params:
            return str(self._server_params["REQUEST_URI"])
        return "*" if self.method == "OPTIONS" else "/"

    def _determine_uri(self) -> Uri:
        params = self._server_params
        if "SERVER_PROTOCOL" not in params:
            return Uri()

        https = str(params.get("HTTPS", "")).lower()
        secure = "HTTPS" in params and https not in ("", "off")

        host, port = _split_host(str(params.get("HTTP_HOST") or params.get("SERVER_NAME") or ""))
        server_port = str(params.get("SERVER_PORT", ""))
        if server_port.isdigit():
            port = int(server_port)

        return Uri(
            scheme="https" if secure else "http",
            user=str(params.get("PHP_AUTH_USER", "")),
            password=str(params.get("PHP_AUTH_PWD", "")),
            host=host,
            port=port,
            path=str(params.get("PATH_INFO") or params.get("SCRIPT_NAME") or ""),
            query=str(params.get("QUERY_STRING", "")),
        )

    def _content_changed(self) -> dict[str, Any]:
        if isinstance(self._parsed_body, Explicit):
            return {}
        return {"_parsed_body": UNSET}

    # -- Server params --

    @property
    def server_params(self) -> Mapping[str, Any]:
        """Read-only view of the server params; empty by default."""
        return MappingProxyType(self._server_params)

    def with_server_params(self, params: ServerParams) -> Self:
        """Return a new request with different server params.

        Resets protocol version, headers, method, request target, URI, and
        parsed body, explicit or derived, so they derive again from *params*.
        """
        return replace(
            self,
            _server_params=dict(params),
            _protocol_version=UNSET,
            _headers=UNSET,
            _method=UNSET,
            _request_target=UNSET,
            _uri=UNSET,
            _parsed_body=UNSET,
        )

    # -- Cookies and query --

    @property
    def cookie_params(self) -> Mapping[str, str]:
        return MappingProxyType(self._cookie_params)

    def with_cookie_params(self, cookies: Mapping[str, str]) -> Self:
        """Return a new request with different cookies."""
        return replace(self, _cookie_params=dict(cookies))

    @property
    def query_params(self) -> Mapping[str, Any]:
        return MappingProxyType(self._query_params)

    def with_query_params(self, query: Mapping[str, Any]) -> Self:
        """Return a new request with different query params.

        The URI is not touched; the two are independent.
        """
        return replace(self, _query_params=dict(query))

    # -- Uploaded files --

    @property
    def uploaded_files(self) -> UploadedFiles:
        """The uploaded-file tree; empty by default."""
        return MappingProxyType(self._uploaded_files)

    def with_uploaded_files(self, files: UploadedFiles) -> Self:
        """Return a new request with a different uploaded-file tree.

        Raises:
            InvalidUploadedFilesStructure: A leaf is not an ``UploadedFile``.
        """
        assert_uploaded_files(files)
        return replace(self, _uploaded_files=dict(files))

    # -- Parsed body --

    def parse_body(self) -> ParseResult:
        """Parse the body, or return the cached result.

        An explicit parsed body (``with_parsed_body``) is returned as is.
        Injected POST data is returned as is unless the body is JSON.

        Raises:
            MissingContentType: Non-empty body without Content-Type.
            UnsupportedMediaType: No decoder for the media type.
            PayloadTooLarge: Body exceeds ``config.max_content_length``.
        """
        state = self._parsed_body
        if isinstance(state, Derived):
            return state.value

        content_type = self.get_header_line("Content-Type")
        media_type = media_type_of(content_type)
        if isinstance(state, Explicit):
            return ParseResult(state.value, media_type)
        if isinstance(state, Injected) and not is_json(media_type):
            return ParseResult(state.value, media_type)

        result = parse_body(self.body, content_type, self.config)
        object.__setattr__(self, "_parsed_body", Derived(result))
        return result

    @property
    def parsed_body(self) -> Any:
        """The decoded body, or ``None`` when empty or malformed.

        Use ``parse_body()`` to tell the two apart.
        """
        return self.parse_body().value

    def with_parsed_body(self, data: Any) -> Self:
        """Return a new request with an explicit parsed body.

        *data* survives header and body changes; ``with_server_params()``
        clears it.

        Raises:
            InvalidParsedBody: *data* is a scalar.
        """
        if isinstance(data, (str, bytes, bytearray, int, float)):
            kind = type(data).__name__
            msg = f"Parsed body should be a mapping, list, object, or None, not a {kind}"
            raise InvalidParsedBody(msg)
        return replace(self, _parsed_body=Explicit(data))

    # -- Attributes --

    @property
    def attributes(self) -> Mapping[str, Any]:
        """Application attributes attached to the request."""
        return MappingProxyType(self._attributes)

    def get_attribute(self, name: str, default: Any = None) -> Any:
        return self._attributes.get(name, default)

    def with_attribute(self, name: str, value: Any) -> Self:
        """Return a new request with attribute *name* set to *value*."""
        return replace(self, _attributes={**self._attributes, name: value})

    def without_attribute(self, name: str) -> Self:
        """Return a new request without attribute *name* (``self`` if absent)."""
        if name not in self._attributes:
            return self
        attributes = dict(self._attributes)
        del attributes[name]
        return replace(self, _attributes=attributes)


def _split_host(host: str) -> tuple[str, int | None]:
    """``example.com:8080`` → ``("example.com", 8080)``; IPv6 literals keep brackets."""
    if host.startswith("["):
        end = host.find("]")
        if end != -1:
            name, rest = host[: end + 1], host[end + 1 :]
            port = rest[1:] if rest.startswith(":") else ""
            return name, int(port) if port.isdigit() else None
    name, _, port = host.partition(":")
    return name, int(port) if port.isdigit() else None


def _environ_body(environ: Mapping[str, Any]) -> Stream:
    file = environ.get("wsgi.input")
    if file is None:
        return Stream()
    length = str(environ.get("CONTENT_LENGTH") or "")
    # Never read past CONTENT_LENGTH; a missing length means no body
    size = int(length) if length.isdigit() else 0
    return Stream(file, size=size, metadata={"uri": "wsgi.input"})
