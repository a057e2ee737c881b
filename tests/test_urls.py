from __future__ import annotations

import datetime
import enum

import httpx
import pytest

from httpfluent import (
    InvalidArgumentError,
    UrlBuilder,
    convert_to_string,
    set_single_query_param,
)


class Color(enum.Enum):
    RED = "crimson-red"


class Level(enum.Enum):
    LOW = 1


# ---------------------------------------------------------------------------
# convert_to_string
# ---------------------------------------------------------------------------


class TestConvertToString:
    def test_none_is_empty(self) -> None:
        assert convert_to_string(None) == ""

    def test_enum_uses_string_value(self) -> None:
        assert convert_to_string(Color.RED) == "crimson-red"

    def test_enum_without_string_value_uses_name(self) -> None:
        assert convert_to_string(Level.LOW) == "LOW"

    def test_booleans_are_lowercase(self) -> None:
        assert convert_to_string(True) == "true"
        assert convert_to_string(False) == "false"

    def test_bytes_are_base64(self) -> None:
        assert convert_to_string(b"\x00\x01") == "AAE="

    def test_lists_are_comma_joined(self) -> None:
        assert convert_to_string([1, "a", True, Color.RED]) == "1,a,true,crimson-red"

    def test_dates_are_iso_8601(self) -> None:
        assert convert_to_string(datetime.date(2024, 1, 2)) == "2024-01-02"
        assert (
            convert_to_string(datetime.datetime(2024, 1, 2, 3, 4, 5))
            == "2024-01-02T03:04:05"
        )

    def test_other_values_use_str(self) -> None:
        assert convert_to_string(42) == "42"
        assert convert_to_string(1.5) == "1.5"


# ---------------------------------------------------------------------------
# UrlBuilder
# ---------------------------------------------------------------------------


class TestUrlBuilder:
    def test_replace_token(self) -> None:
        url = UrlBuilder.create("libraries/{libraryId}/items").replace_token(
            "{libraryId}", 42
        )
        assert url.to_string() == "libraries/42/items"

    def test_replace_token_escapes_value(self) -> None:
        url = UrlBuilder.create("files/{name}").replace_token("{name}", "a b/c")
        assert url.to_string() == "files/a%20b%2Fc"

    def test_replace_token_replaces_every_occurrence(self) -> None:
        url = UrlBuilder.create("{id}/children/{id}").replace_token("{id}", 7)
        assert url.to_string() == "7/children/7"

    def test_set_query_param_escapes_value(self) -> None:
        url = UrlBuilder.create("items").set_query_param("path", "/foo")
        assert url.to_string() == "items?path=%2Ffoo"

    def test_set_query_param_accumulates(self) -> None:
        url = (
            UrlBuilder.create("https://api.example.com/items")
            .set_query_param("tag", "a")
            .set_query_param("tag", "b")
        )
        assert url.to_string() == "https://api.example.com/items?tag=a&tag=b"
        assert url.url.params.get_list("tag") == ["a", "b"]

    def test_set_query_param_ignores_none(self) -> None:
        url = UrlBuilder.create("items").set_query_param("q", None)
        assert url.to_string() == "items"

    def test_set_query_param_keeps_none_on_request(self) -> None:
        url = UrlBuilder.create("items").set_query_param("q", None, ignore_if_null=False)
        assert url.to_string() == "items?q="

    def test_set_query_param_without_escaping(self) -> None:
        url = UrlBuilder.create("items").set_query_param("filter", "a/b", escape_value=False)
        assert url.to_string() == "items?filter=a/b"

    def test_set_query_param_converts_values(self) -> None:
        url = (
            UrlBuilder.create("items")
            .set_query_param("active", True)
            .set_query_param("ids", [1, 2])
        )
        assert url.to_string() == "items?active=true&ids=1%2C2"

    def test_create_keeps_existing_query(self) -> None:
        url = UrlBuilder.create("http://example.com/p?x=1&y=2")
        assert url.query_params == [("x", "1"), ("y", "2")]
        url.set_query_param("z", 3)
        assert url.to_string() == "http://example.com/p?x=1&y=2&z=3"

    def test_create_splits_components(self) -> None:
        url = UrlBuilder.create("https://user@example.com:8443/v1/items#top")
        assert url.scheme == "https"
        assert url.userinfo == "user"
        assert url.host == "example.com"
        assert url.port == 8443
        assert url.path == "/v1/items"
        assert url.fragment == "top"

    def test_components_are_assembled(self) -> None:
        url = UrlBuilder(scheme="https", host="example.com", port=8443, path="v1/items")
        assert url.to_string() == "https://example.com:8443/v1/items"

    def test_with_methods(self) -> None:
        url = (
            UrlBuilder()
            .with_scheme("HTTPS")
            .with_host("example.com")
            .with_port("8080")
            .with_path("/a")
            .with_fragment("#frag")
        )
        assert url.to_string() == "https://example.com:8080/a#frag"

    def test_idna_host(self) -> None:
        url = UrlBuilder(scheme="https", host="bücher.example", path="/")
        assert url.to_string() == "https://xn--bcher-kva.example/"

    def test_ipv6_host(self) -> None:
        url = UrlBuilder.create("http://[::1]:8000/status")
        assert url.host == "::1"
        assert url.to_string() == "http://[::1]:8000/status"

    def test_url_property(self) -> None:
        url = UrlBuilder.create("https://example.com/items").set_query_param("a", 1).url
        assert isinstance(url, httpx.URL)
        assert url.host == "example.com"
        assert url.params["a"] == "1"

    def test_str_and_repr(self) -> None:
        url = UrlBuilder.create("items")
        assert str(url) == "items"
        assert repr(url) == "UrlBuilder('items')"

    def test_to_request(self) -> None:
        request = UrlBuilder.create("https://example.com/items").to_request().build()
        assert request.method == "GET"
        assert request.url == "https://example.com/items"

    def test_blank_token_is_rejected(self) -> None:
        with pytest.raises(InvalidArgumentError) as exc_info:
            UrlBuilder.create("items").replace_token(" ", 1)
        assert exc_info.value.argument == "token"

    def test_blank_key_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            UrlBuilder.create("items").set_query_param("", 1)

    def test_invalid_port_is_rejected(self) -> None:
        with pytest.raises(InvalidArgumentError):
            UrlBuilder().with_port("http")


# ---------------------------------------------------------------------------
# set_single_query_param
# ---------------------------------------------------------------------------


class TestSetSingleQueryParam:
    def test_adds_missing_param(self) -> None:
        url = set_single_query_param("http://localhost", "a", "b")
        assert url.params.multi_items() == [("a", "b")]

    def test_appends_after_other_params(self) -> None:
        url = set_single_query_param("http://localhost?c=d", "a", "b")
        assert url.query == b"c=d&a=b"

    def test_replaces_existing_value(self) -> None:
        url = set_single_query_param("http://localhost?a=b", "a", "c")
        assert url.params.multi_items() == [("a", "c")]

    def test_second_call_replaces_first(self) -> None:
        url = set_single_query_param("http://localhost", "a", "b")
        url = set_single_query_param(url, "a", "c")
        assert url.params.get_list("a") == ["c"]

    def test_collapses_repeated_values(self) -> None:
        url = set_single_query_param("http://localhost?a=b&a=c", "a", "d")
        assert url.params.multi_items() == [("a", "d")]

    def test_keeps_first_position(self) -> None:
        url = set_single_query_param("http://localhost?a=1&b=2&a=3", "a", "x")
        assert url.query == b"a=x&b=2"

    def test_is_idempotent(self) -> None:
        once = set_single_query_param("http://localhost?c=d", "a", "b")
        twice = set_single_query_param(once, "a", "b")
        assert once == twice

    def test_converts_value(self) -> None:
        url = set_single_query_param(httpx.URL("http://localhost"), "flag", True)
        assert url.params["flag"] == "true"

    def test_blank_name_is_rejected(self) -> None:
        with pytest.raises(InvalidArgumentError):
            set_single_query_param("http://localhost", "  ", "b")
