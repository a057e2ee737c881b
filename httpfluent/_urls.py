from __future__ import annotations

import base64
import datetime
import enum
import typing

import httpx

from ._urlparse import (
    FRAG_SAFE,
    PATH_SAFE,
    encode_host,
    escape_data_string,
    parse_port,
    quote,
    split_url,
)
from ._utils import require, require_text

if typing.TYPE_CHECKING:
    from ._requests import HttpRequestMessageBuilder

__all__ = ["UrlBuilder", "convert_to_string", "set_single_query_param"]


def convert_to_string(value: typing.Any) -> str:
    """Render ``value`` the way it should appear inside a URL.

    * enum members render their value when it is a string, otherwise their name
    * booleans render as ``true`` / ``false``
    * bytes render as base64
    * lists and tuples render each element, joined with commas
    * dates and times render as ISO 8601
    """
    if value is None:
        return ""
    if isinstance(value, enum.Enum):
        return value.value if isinstance(value.value, str) else value.name
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, (list, tuple)):
        return ",".join(convert_to_string(item) for item in value)
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    return str(value)


def set_single_query_param(
    url: httpx.URL | str, name: str, value: typing.Any
) -> httpx.URL:
    """Return ``url`` with every ``name`` parameter collapsed to ``value``.

    Other parameters are kept as they are. ``name`` keeps the position of its
    first occurrence, or is appended when it was not present.
    """
    require(url, "url")
    require_text(name, "name")
    return httpx.URL(url).copy_set_param(name, convert_to_string(value))


class UrlBuilder:
    """Mutable URL whose query string is rebuilt on every materialization.

    Query parameters accumulate: setting the same key twice keeps both
    values, in order. Use :func:`set_single_query_param` on a materialized
    URL to replace values instead.

    >>> url = (
    ...     UrlBuilder.create("libraries/{libraryId}/items")
    ...     .replace_token("{libraryId}", 42)
    ...     .set_query_param("path", "/foo")
    ...     .url
    ... )
    >>> str(url)
    'libraries/42/items?path=%2Ffoo'
    """

    def __init__(
        self,
        *,
        scheme: str = "",
        host: str = "",
        port: int | None = None,
        path: str = "",
        fragment: str = "",
        query_params: typing.Iterable[tuple[str, str]] | None = None,
        userinfo: str = "",
    ) -> None:
        self.scheme = scheme
        self.host = host
        self.port = port
        self.path = path
        self.fragment = fragment
        self.userinfo = userinfo
        self.query_params: list[tuple[str, str]] = list(query_params or [])

    @classmethod
    def create(cls, url: str | httpx.URL = "") -> UrlBuilder:
        parts = split_url(str(url))
        query_params: list[tuple[str, str]] = []
        if parts.query:
            for pair in parts.query.split("&"):
                if pair:
                    key, _, value = pair.partition("=")
                    query_params.append((key, value))
        return cls(
            scheme=parts.scheme,
            host=parts.host,
            port=parts.port,
            path=parts.path,
            fragment=parts.fragment or "",
            query_params=query_params,
            userinfo=parts.userinfo,
        )

    # ------------------------------------------------------------------
    # Fluent mutators
    # ------------------------------------------------------------------

    def replace_token(self, token: str, value: typing.Any) -> UrlBuilder:
        require_text(token, "token")
        self.path = self.path.replace(token, escape_data_string(convert_to_string(value)))
        return self

    def set_query_param(
        self,
        key: str,
        value: typing.Any,
        ignore_if_null: bool = True,
        escape_value: bool = True,
    ) -> UrlBuilder:
        require_text(key, "key")
        if ignore_if_null and value is None:
            return self

        string_value = convert_to_string(value)
        if escape_value:
            string_value = escape_data_string(string_value)

        self.query_params.append((key, string_value))
        return self

    def with_scheme(self, scheme: str) -> UrlBuilder:
        self.scheme = require_text(scheme, "scheme").lower()
        return self

    def with_host(self, host: str) -> UrlBuilder:
        self.host = require_text(host, "host")
        return self

    def with_port(self, port: int | str | None) -> UrlBuilder:
        self.port = parse_port(port)
        return self

    def with_path(self, path: str) -> UrlBuilder:
        self.path = require(path, "path")
        return self

    def with_fragment(self, fragment: str) -> UrlBuilder:
        self.fragment = require(fragment, "fragment").lstrip("#")
        return self

    # ------------------------------------------------------------------
    # Materialization
    # ------------------------------------------------------------------

    def to_query_string(self) -> str:
        if not self.query_params:
            return ""
        return "?" + "&".join(f"{key}={value}" for key, value in self.query_params)

    def to_string(self) -> str:
        authority = ""
        if self.host:
            authority = "".join([
                f"{self.userinfo}@" if self.userinfo else "",
                encode_host(self.host),
                f":{self.port}" if self.port is not None else "",
            ])

        path = quote(self.path, safe=PATH_SAFE)
        if authority and path and not path.startswith("/"):
            path = "/" + path

        return "".join([
            f"{self.scheme}:" if self.scheme and authority else "",
            f"//{authority}" if authority else "",
            path,
            self.to_query_string(),
            f"#{quote(self.fragment, safe=FRAG_SAFE)}" if self.fragment else "",
        ])

    @property
    def url(self) -> httpx.URL:
        return httpx.URL(self.to_string())

    uri = url

    def to_request(self) -> HttpRequestMessageBuilder:
        from ._requests import HttpRequestMessageBuilder

        return HttpRequestMessageBuilder.create(self.url)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.to_string()!r})"
