"""Tests for perch.http.request.Request — method, request target, URI."""

import pytest

from perch.errors import InvalidMethod, InvalidRequestTarget
from perch.http.request import Request
from perch.http.uri import Uri


class TestMethod:
    def test_default(self) -> None:
        assert Request().method == ""

    def test_with_method_upper_cases(self) -> None:
        r = Request()
        r2 = r.with_method("GeT")
        assert r2 is not r
        assert r2.method == "GET"

    def test_dashes_allowed(self) -> None:
        assert Request().with_method("version-control").method == "VERSION-CONTROL"

    def test_invalid_method(self) -> None:
        with pytest.raises(
            InvalidMethod,
            match="Invalid method 'foo bar': Method may only contain letters and dashes",
        ):
            Request().with_method("foo bar")

    def test_non_str_method(self) -> None:
        with pytest.raises(InvalidMethod, match="Method should be a string, not a dict"):
            Request().with_method({"foo": 1})  # type: ignore[arg-type]


class TestRequestTarget:
    def test_default(self) -> None:
        assert Request().request_target == "/"

    def test_from_uri(self) -> None:
        r = Request().with_uri(Uri(path="/tasks", query="page=2"))
        assert r.request_target == "/tasks?page=2"

    def test_with_request_target(self) -> None:
        r = Request()
        r2 = r.with_request_target("/foo?bar=99")
        assert r2 is not r
        assert r2.request_target == "/foo?bar=99"

    def test_follows_uri_set_after_read(self) -> None:
        r = Request()
        assert r.request_target == "/"
        r2 = r.with_uri("http://example.com/tasks?page=2")
        assert r2.request_target == "/tasks?page=2"
        assert r.request_target == "/"

    def test_explicit_target_kept_after_uri_change(self) -> None:
        r = Request().with_request_target("/fixed").with_uri("http://example.com/other")
        assert r.request_target == "/fixed"

    def test_non_str_target(self) -> None:
        with pytest.raises(InvalidRequestTarget, match="should be a string, not a list"):
            Request().with_request_target(["/"])  # type: ignore[arg-type]


class TestUri:
    def test_default(self) -> None:
        assert Request().uri == Uri()

    def test_with_uri_sets_host(self) -> None:
        uri = Uri(scheme="http", host="www.example.com", path="/")
        r = Request().with_uri(uri)
        assert r.uri is uri
        assert r.get_header("Host") == ["www.example.com"]

    def test_with_uri_adds_non_default_port(self) -> None:
        r = Request().with_uri("http://example.com:8080/x")
        assert r.get_header_line("host") == "example.com:8080"

    def test_with_uri_omits_default_port(self) -> None:
        r = Request().with_uri("https://example.com:443/x")
        assert r.get_header_line("host") == "example.com"

    def test_preserve_host(self) -> None:
        r = Request().with_uri(Uri(host="www.example.com"), preserve_host=True)
        assert r.uri.host == "www.example.com"
        assert r.get_header("Host") == []

    def test_existing_host_kept(self) -> None:
        r = Request().with_header("Host", "old.example.com").with_uri("http://new.example.com/")
        assert r.get_header("Host") == ["old.example.com"]
        assert r.uri.host == "new.example.com"

    def test_empty_host_header_replaced(self) -> None:
        r = Request().with_header("Host", "").with_uri("http://new.example.com/")
        assert r.get_header("Host") == ["new.example.com"]

    def test_uri_without_host_leaves_headers(self) -> None:
        r = Request()
        r2 = r.with_uri(Uri(path="/only-path"))
        assert r2.headers.get_all() == {}
