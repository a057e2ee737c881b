from __future__ import annotations

import json
import typing

import httpx

from ._content import FormUrlEncodedContent, HttpContent, StringContent
from ._headers import (
    APPLICATION_JSON,
    APPLICATION_OCTET_STREAM,
    TEXT_PLAIN,
    TEXT_XML,
    MediaType,
)
from ._multipart import MultipartFormContentBuilder
from ._urls import UrlBuilder
from ._utils import require, require_text

__all__ = ["HttpMethodBuilder", "HttpRequestMessageBuilder", "RequestMessage"]


class RequestMessage:
    """The request being assembled by an :class:`HttpRequestMessageBuilder`.

    Unlike :class:`httpx.Request`, the body stays a typed
    :class:`~httpfluent.HttpContent` until :meth:`build` renders it.
    """

    def __init__(
        self,
        method: str = "GET",
        url: httpx.URL | str | None = None,
        headers: httpx.Headers | typing.Mapping[str, str] | None = None,
        content: HttpContent | None = None,
    ) -> None:
        self.method = method
        self.url = httpx.URL(url) if url is not None else httpx.URL()
        self.headers = httpx.Headers(headers)
        self.content = content

    def add_header(self, name: str, value: str) -> None:
        # httpx.Headers.__setitem__ replaces, so rebuild from the raw list to append.
        self.headers = httpx.Headers([*self.headers.raw, (name.encode(), value.encode())])

    def build(self, client: httpx.Client | httpx.AsyncClient | None = None) -> httpx.Request:
        """Render the request for a transport.

        When ``client`` is given the request goes through
        ``client.build_request`` so its ``base_url``, default headers and
        cookies apply.
        """
        headers = httpx.Headers(self.headers.raw)
        body = None
        if self.content is not None:
            for key, value in self.content.headers.raw:
                headers[key.decode()] = value.decode()
            body = self.content.read()

        if client is not None:
            return client.build_request(self.method, self.url, headers=headers, content=body)
        return httpx.Request(self.method, self.url, headers=headers, content=body)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.method!r}, {str(self.url)!r})>"


class HttpRequestMessageBuilder:
    """Fluent builder over a single :class:`RequestMessage`.

    Every ``with_*`` method mutates the wrapped request in place and returns
    the same builder.

    >>> request = (
    ...     HttpRequestMessageBuilder.create("https://api.example.com/items")
    ...     .with_http_method().post()
    ...     .with_accept_application_json()
    ...     .with_authorization_bearer("token")
    ...     .with_content_json({"name": "item"})
    ...     .build()
    ... )
    """

    def __init__(self, request: RequestMessage) -> None:
        self.request = require(request, "request")

    @classmethod
    def create(
        cls, target: RequestMessage | UrlBuilder | httpx.URL | str | None = None
    ) -> HttpRequestMessageBuilder:
        if isinstance(target, RequestMessage):
            return cls(target)
        if isinstance(target, UrlBuilder):
            target = target.url
        return cls(RequestMessage(url=target))

    # ------------------------------------------------------------------
    # Method
    # ------------------------------------------------------------------

    @typing.overload
    def with_http_method(self) -> HttpMethodBuilder: ...

    @typing.overload
    def with_http_method(self, method: str) -> HttpRequestMessageBuilder: ...

    def with_http_method(
        self, method: str | None = None
    ) -> HttpRequestMessageBuilder | HttpMethodBuilder:
        if method is None:
            return HttpMethodBuilder(self)
        self.request.method = require_text(str(method), "method").upper()
        return self

    # ------------------------------------------------------------------
    # Headers
    # ------------------------------------------------------------------

    def with_header(self, name: str, value: str) -> HttpRequestMessageBuilder:
        require_text(name, "name")
        self.request.add_header(name, "" if value is None else str(value))
        return self

    def with_accept_header(self, value: MediaType | str) -> HttpRequestMessageBuilder:
        require(value, "value")
        if isinstance(value, str):
            value = MediaType.parse(value)
        self.request.add_header("Accept", str(value))
        return self

    def with_accept_application_octet(self) -> HttpRequestMessageBuilder:
        return self.with_accept_header(APPLICATION_OCTET_STREAM)

    def with_accept_application_json(self) -> HttpRequestMessageBuilder:
        return self.with_accept_header(APPLICATION_JSON)

    def with_accept_text_xml(self) -> HttpRequestMessageBuilder:
        return self.with_accept_header(TEXT_XML)

    def with_accept_text_plain(self) -> HttpRequestMessageBuilder:
        return self.with_accept_header(TEXT_PLAIN)

    def with_authorization(
        self, scheme: str, parameter: str | None = None
    ) -> HttpRequestMessageBuilder:
        require_text(scheme, "scheme")
        value = f"{scheme} {parameter}" if parameter else scheme
        self.request.headers["Authorization"] = value
        return self

    def with_authorization_bearer(self, token: str) -> HttpRequestMessageBuilder:
        return self.with_authorization("Bearer", token)

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    def with_content(self, content: HttpContent) -> HttpRequestMessageBuilder:
        self.request.content = require(content, "content")
        return self

    def with_content_json(self, body: typing.Any) -> HttpRequestMessageBuilder:
        return self.with_content(StringContent(json.dumps(body), "utf-8", "application/json"))

    def with_form_url_encoded_content(
        self,
        fields: typing.Mapping[str, str] | typing.Iterable[tuple[str, str]],
    ) -> HttpRequestMessageBuilder:
        return self.with_content(FormUrlEncodedContent(require(fields, "fields")))

    def with_multipart_form_content(self) -> MultipartFormContentBuilder:
        content_builder = MultipartFormContentBuilder(self)
        self.with_content(content_builder.content)
        return content_builder

    # ------------------------------------------------------------------
    # Materialization
    # ------------------------------------------------------------------

    def build(self, client: httpx.Client | httpx.AsyncClient | None = None) -> httpx.Request:
        return self.request.build(client)

    def send(self, client: httpx.Client, **kwargs: typing.Any) -> httpx.Response:
        require(client, "client")
        return client.send(self.build(client), **kwargs)

    async def asend(self, client: httpx.AsyncClient, **kwargs: typing.Any) -> httpx.Response:
        require(client, "client")
        return await client.send(self.build(client), **kwargs)


class HttpMethodBuilder:
    """Verb selection for an :class:`HttpRequestMessageBuilder`.

    Each method sets the verb and hands back the parent builder.
    """

    def __init__(self, builder: HttpRequestMessageBuilder) -> None:
        self.builder = require(builder, "builder")

    def get(self) -> HttpRequestMessageBuilder:
        return self.builder.with_http_method("GET")

    def post(self) -> HttpRequestMessageBuilder:
        return self.builder.with_http_method("POST")

    def put(self) -> HttpRequestMessageBuilder:
        return self.builder.with_http_method("PUT")

    def patch(self) -> HttpRequestMessageBuilder:
        return self.builder.with_http_method("PATCH")

    def delete(self) -> HttpRequestMessageBuilder:
        return self.builder.with_http_method("DELETE")

    def head(self) -> HttpRequestMessageBuilder:
        return self.builder.with_http_method("HEAD")

    def options(self) -> HttpRequestMessageBuilder:
        return self.builder.with_http_method("OPTIONS")

    def trace(self) -> HttpRequestMessageBuilder:
        return self.builder.with_http_method("TRACE")
