"""
Delegating handlers: request interceptors chained in front of a transport.

A handler is both an :class:`httpx.BaseTransport` and an
:class:`httpx.AsyncBaseTransport`, so a chain can be passed as the
``transport`` of either :class:`httpx.Client` or :class:`httpx.AsyncClient`.
Each handler may modify the outgoing request and then forwards it to its
inner handler; the response comes back up the chain untouched.

Handlers are shared by every request made through a client. They only hold
configuration; everything that belongs to a single call lives on the
request.
"""

from __future__ import annotations

import logging
import typing
from dataclasses import dataclass

import httpx

from ._exceptions import HttpClientConfigurationError, TokenError
from ._tokens import ErrorDetail, Token, TokenProvider
from ._urls import set_single_query_param
from ._utils import require, require_text

__all__ = [
    "ApiVersionQueryOptions",
    "ApiVersionQueryParamHandler",
    "AuthorizationHandler",
    "DelegatingHandler",
    "HeaderHandler",
    "TokenProviderHandler",
    "build_handler_chain",
]

logger = logging.getLogger("httpfluent.handlers")

DEFAULT_API_VERSION_QUERY_PARAM = "api-version"

InnerHandler = typing.Union[httpx.BaseTransport, httpx.AsyncBaseTransport]


class DelegatingHandler(httpx.BaseTransport, httpx.AsyncBaseTransport):
    """Base class for handlers that forward to an inner handler.

    Subclasses with purely synchronous logic override :meth:`prepare_request`;
    subclasses that must await something override both
    :meth:`handle_request` and :meth:`handle_async_request`.
    """

    def __init__(self, inner_handler: InnerHandler | None = None) -> None:
        self._inner_handler: InnerHandler | None = None
        if inner_handler is not None:
            self.inner_handler = inner_handler

    @property
    def inner_handler(self) -> InnerHandler | None:
        return self._inner_handler

    @inner_handler.setter
    def inner_handler(self, handler: InnerHandler) -> None:
        require(handler, "handler")
        if handler is self:
            raise HttpClientConfigurationError("A handler cannot delegate to itself.")
        if self._inner_handler is not None and self._inner_handler is not handler:
            raise HttpClientConfigurationError(
                f"{type(self).__name__} is already linked to "
                f"{type(self._inner_handler).__name__}; a handler chain cannot be changed "
                "once it is built."
            )
        self._inner_handler = handler

    def _require_inner(self) -> InnerHandler:
        if self._inner_handler is None:
            raise HttpClientConfigurationError(
                f"{type(self).__name__} has no inner handler."
            )
        return self._inner_handler

    def prepare_request(self, request: httpx.Request) -> None:
        """Modify ``request`` before it is forwarded. No-op by default."""

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        self.prepare_request(request)
        return self.send(request)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.prepare_request(request)
        return await self.asend(request)

    def send(self, request: httpx.Request) -> httpx.Response:
        inner = self._require_inner()
        return inner.handle_request(request)  # type: ignore[union-attr]

    async def asend(self, request: httpx.Request) -> httpx.Response:
        inner = self._require_inner()
        return await inner.handle_async_request(request)  # type: ignore[union-attr]

    def close(self) -> None:
        if self._inner_handler is not None:
            self._inner_handler.close()  # type: ignore[union-attr]

    async def aclose(self) -> None:
        if self._inner_handler is not None:
            await self._inner_handler.aclose()  # type: ignore[union-attr]

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"


def build_handler_chain(
    handlers: typing.Sequence[DelegatingHandler],
    transport: InnerHandler,
) -> InnerHandler:
    """Link ``handlers`` in order and return the outermost one.

    The first handler sees the request first; ``transport`` is the innermost
    node. With no handlers the transport itself is returned.
    """
    require(transport, "transport")
    if not handlers:
        return transport
    inners: list[InnerHandler] = [*handlers[1:], transport]
    for handler, inner in zip(handlers, inners):
        handler.inner_handler = inner
    logger.debug(
        "Built handler chain: %s",
        " -> ".join(type(node).__name__ for node in [*handlers, transport]),
    )
    return handlers[0]


# ---------------------------------------------------------------------------
# TokenProviderHandler
# ---------------------------------------------------------------------------


class TokenProviderHandler(DelegatingHandler):
    """Sets ``Authorization: Bearer <token>`` from a :class:`TokenProvider`.

    A failing provider never fails the call: the error is logged and the
    request continues with whatever ``Authorization`` header it already had.
    """

    def __init__(
        self,
        token_provider: TokenProvider,
        logger: logging.Logger | None = None,
        inner_handler: InnerHandler | None = None,
    ) -> None:
        super().__init__(inner_handler)
        self.token_provider = require(token_provider, "token_provider")
        self.logger = logger or logging.getLogger("httpfluent.handlers")

    def _apply(self, request: httpx.Request, token: Token) -> None:
        request.headers["Authorization"] = f"Bearer {token.access_token}"

    def _report(self, error: ErrorDetail) -> None:
        self.logger.error(
            "Failed to retrieve token.\nCode: %s\nTarget: %s\nMessage: %s\nDetails: %s",
            error.code,
            error.target,
            error.message,
            "; ".join(f"{detail.code}: {detail.message}" for detail in error.details),
        )

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        try:
            token = self.token_provider.get_token()
        except TokenError as exc:
            self._report(exc.error)
        else:
            self._apply(request, token)
        return self.send(request)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        try:
            token = await self.token_provider.aget_token()
        except TokenError as exc:
            self._report(exc.error)
        else:
            self._apply(request, token)
        return await self.asend(request)


# ---------------------------------------------------------------------------
# ApiVersionQueryParamHandler
# ---------------------------------------------------------------------------


@dataclass
class ApiVersionQueryOptions:
    value: str | None = None
    query_param_name: str = DEFAULT_API_VERSION_QUERY_PARAM


class ApiVersionQueryParamHandler(DelegatingHandler):
    """Pins the API version query parameter to a single configured value.

    Any existing values for the parameter are replaced, so running the
    handler repeatedly on the same request leaves exactly one value.
    """

    def __init__(
        self,
        options: ApiVersionQueryOptions,
        inner_handler: InnerHandler | None = None,
    ) -> None:
        super().__init__(inner_handler)
        self.options = require(options, "options")

    def prepare_request(self, request: httpx.Request) -> None:
        value = self.options.value
        if value is None or not value.strip():
            return
        name = self.options.query_param_name or DEFAULT_API_VERSION_QUERY_PARAM
        request.url = set_single_query_param(request.url, name, value)


# ---------------------------------------------------------------------------
# Static header handlers
# ---------------------------------------------------------------------------


class HeaderHandler(DelegatingHandler):
    """Adds a fixed header to requests that do not already carry it."""

    def __init__(
        self,
        name: str,
        value: str | None,
        inner_handler: InnerHandler | None = None,
    ) -> None:
        super().__init__(inner_handler)
        self.name = require_text(name, "name")
        self.value = "" if value is None else value

    def prepare_request(self, request: httpx.Request) -> None:
        if self.name not in request.headers:
            request.headers[self.name] = self.value


class AuthorizationHandler(HeaderHandler):
    def __init__(
        self,
        scheme: str,
        parameter: str | None = None,
        inner_handler: InnerHandler | None = None,
    ) -> None:
        require_text(scheme, "scheme")
        value = f"{scheme} {parameter}" if parameter else scheme
        super().__init__("Authorization", value, inner_handler)
        self.scheme = scheme
        self.parameter = parameter
