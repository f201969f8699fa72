"""Tests for perch.http.headers — immutable, case-insensitive Headers."""

import pytest

from perch.errors import InvalidArgument, InvalidHeaderName, InvalidHeaderValue
from perch.http.headers import Headers, header_case, is_valid_name


class TestHeaders:
    def test_empty_by_default(self) -> None:
        h = Headers()
        assert h.get_all() == {}
        assert len(h) == 0

    def test_getitem(self) -> None:
        h = Headers({"Content-Type": "text/html"})
        assert h["Content-Type"] == ["text/html"]

    def test_case_insensitive(self) -> None:
        h = Headers({"Content-Type": "text/html"})
        assert h["content-type"] == ["text/html"]
        assert h["CONTENT-TYPE"] == ["text/html"]

    def test_missing_key_raises(self) -> None:
        h = Headers({"Accept": "*/*"})
        with pytest.raises(KeyError):
            h["X-Missing"]

    def test_contains(self) -> None:
        h = Headers({"Accept": "*/*"})
        assert "accept" in h
        assert "Accept" in h
        assert "x-missing" not in h

    def test_contains_rejects_non_str(self) -> None:
        h = Headers({"Accept": "*/*"})
        assert 42 not in h  # type: ignore[operator]

    def test_iter_yields_display_names_in_order(self) -> None:
        h = Headers({"accept": "*/*", "content-TYPE": "text/html"})
        assert list(h) == ["Accept", "Content-Type"]

    def test_constructor_merges_case_variants(self) -> None:
        h = Headers({"X-Tag": "a", "x-tag": ["b", "c"]})
        assert h.get_all() == {"X-Tag": ["a", "b", "c"]}

    def test_repr(self) -> None:
        assert repr(Headers({"Accept": "*/*"})) == "Headers({'Accept': ['*/*']})"

    def test_equality(self) -> None:
        assert Headers({"accept": "*/*"}) == Headers({"ACCEPT": "*/*"})
        assert Headers({"Accept": "*/*"}) != Headers({"Accept": "text/html"})

    def test_immutable(self) -> None:
        h = Headers()
        with pytest.raises(AttributeError):
            h._store = {}  # type: ignore[misc]


class TestReading:
    def test_has(self) -> None:
        h = Headers().with_header("Foo", "red")
        assert h.has("FoO")
        assert not h.has("NotExists")

    def test_has_rejects_non_str(self) -> None:
        with pytest.raises(InvalidArgument):
            Headers().has(42)  # type: ignore[arg-type]

    def test_get(self) -> None:
        h = Headers().with_header("Foo", ["red", "blue"])
        assert h.get("FoO") == ["red", "blue"]

    def test_get_missing_is_empty_list(self) -> None:
        assert Headers().get("NotExists") == []

    def test_get_returns_copy(self) -> None:
        h = Headers({"Foo": "red"})
        h.get("Foo").append("blue")
        assert h.get("Foo") == ["red"]

    def test_get_line(self) -> None:
        h = Headers().with_header("Foo", ["red", "blue"])
        assert h.get_line("FoO") == "red,blue"

    def test_get_line_missing_is_empty_string(self) -> None:
        assert Headers().get_line("NotExists") == ""


class TestWithHeader:
    def test_returns_new_instance(self) -> None:
        h = Headers()
        h2 = h.with_header("foo-zoo", "red & blue")
        assert h2 is not h
        assert h.get_all() == {}

    def test_name_is_header_cased(self) -> None:
        h = Headers().with_header("foo-zoo", "red & blue")
        assert h.get_all() == {"Foo-Zoo": ["red & blue"]}

    def test_list_value(self) -> None:
        h = Headers().with_header("foo-zoo", ["red", "blue"])
        assert h.get_all() == {"Foo-Zoo": ["red", "blue"]}

    def test_add_another(self) -> None:
        h = Headers().with_header("foo-zoo", "red & blue").with_header("QUX", "white")
        assert h.get_all() == {"Foo-Zoo": ["red & blue"], "Qux": ["white"]}

    def test_overwrite_keeps_first_display_name(self) -> None:
        h = Headers().with_header("foo-zoo", "red & blue")
        h2 = h.with_header("FOO-ZOO", "silver & gold").with_header("foo-Zoo", "copper")
        assert h2.get_all() == {"Foo-Zoo": ["copper"]}

    def test_overwrite_keeps_position(self) -> None:
        h = Headers({"A": "1", "B": "2"}).with_header("a", "3")
        assert list(h) == ["A", "B"]

    @pytest.mark.parametrize("name", ["foo bar", "-foo", "foo-", "1foo", "foo_bar", ""])
    def test_invalid_name(self, name: str) -> None:
        with pytest.raises(InvalidHeaderName):
            Headers().with_header(name, "x")

    def test_non_str_name(self) -> None:
        with pytest.raises(InvalidHeaderName, match="must be a string"):
            Headers().with_header(42, "x")  # type: ignore[arg-type]

    @pytest.mark.parametrize("value", [42, None, [], ["a", 1], {"a": "b"}])
    def test_invalid_value(self, value: object) -> None:
        with pytest.raises(InvalidHeaderValue):
            Headers().with_header("Foo", value)  # type: ignore[arg-type]

    def test_invalid_name_in_constructor(self) -> None:
        with pytest.raises(InvalidHeaderName):
            Headers({"bad name": "x"})


class TestWithAddedHeader:
    def test_appends(self) -> None:
        h = Headers().with_header("Q", "a").with_added_header("Q", "b")
        assert h.get("Q") == ["a", "b"]

    def test_appends_list(self) -> None:
        h = Headers().with_header("Q", "a").with_added_header("q", ["b", "c"])
        assert h.get("Q") == ["a", "b", "c"]

    def test_creates_when_absent(self) -> None:
        h = Headers().with_added_header("x-new", "1")
        assert h.get_all() == {"X-New": ["1"]}

    def test_does_not_touch_receiver(self) -> None:
        h = Headers().with_header("Q", "a")
        h.with_added_header("Q", "b")
        assert h.get("Q") == ["a"]


class TestWithoutHeader:
    def test_removes(self) -> None:
        h = Headers({"Foo": "1", "Bar": "2"}).without_header("FOO")
        assert h.get_all() == {"Bar": ["2"]}

    def test_absent_returns_same_instance(self) -> None:
        h = Headers({"Foo": "1"})
        assert h.without_header("Missing") is h

    def test_present_returns_new_instance(self) -> None:
        h = Headers({"Foo": "1"})
        h2 = h.without_header("foo")
        assert h2 is not h
        assert h.has("Foo")


class TestHelpers:
    def test_header_case(self) -> None:
        assert header_case("content-TYPE") == "Content-Type"
        assert header_case("X_FOO") == "X_foo"

    def test_is_valid_name(self) -> None:
        assert is_valid_name("X-Foo-2")
        assert not is_valid_name("X--Foo")
        assert not is_valid_name(None)
