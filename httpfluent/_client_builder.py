from __future__ import annotations

import logging
import typing

import httpx

from ._exceptions import HttpClientConfigurationError
from ._handlers import (
    ApiVersionQueryOptions,
    ApiVersionQueryParamHandler,
    AuthorizationHandler,
    DelegatingHandler,
    HeaderHandler,
    TokenProviderHandler,
    build_handler_chain,
)
from ._tokens import TokenProvider, TokenProviderFactory
from ._utils import require, require_text

__all__ = ["HttpClientBuilder"]

logger = logging.getLogger("httpfluent.client")

HandlerFactory = typing.Callable[[TokenProviderFactory], DelegatingHandler]
TokenProviderSource = typing.Union[
    str,
    TokenProvider,
    typing.Callable[[TokenProviderFactory], TokenProvider],
]


class HttpClientBuilder:
    """Registers delegating handlers and builds ``httpx`` clients around them.

    Handlers run in registration order: the first one registered sees the
    request first. Every :meth:`build` / :meth:`build_async` call creates a
    fresh set of handlers, so the resulting chain is fixed for the lifetime
    of that client. Configuration errors, such as an unknown token provider
    name, surface from the build call.

    >>> factory = TokenProviderFactory().register("graph", provider)
    >>> client = (
    ...     HttpClientBuilder(factory)
    ...     .add_token_provider("graph")
    ...     .add_api_version("2021-01-01")
    ...     .add_header("X-Client-Name", "my-app")
    ...     .build(base_url="https://api.example.com")
    ... )
    """

    def __init__(
        self,
        token_providers: TokenProviderFactory | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.token_providers = (
            token_providers if token_providers is not None else TokenProviderFactory()
        )
        self.logger = logger
        self._handler_factories: list[HandlerFactory] = []

    def add_handler(
        self, handler: DelegatingHandler | HandlerFactory
    ) -> HttpClientBuilder:
        """Register a handler instance or a factory receiving the token providers.

        An instance can only be linked into one chain; pass a factory to build
        more than one client.
        """
        require(handler, "handler")
        if isinstance(handler, DelegatingHandler):
            instance = handler
            self._handler_factories.append(lambda _: instance)
        else:
            self._handler_factories.append(handler)
        return self

    def add_token_provider(self, source: TokenProviderSource) -> HttpClientBuilder:
        """Inject bearer tokens from a provider.

        ``source`` is a registered provider name, a provider instance, or a
        callable resolving the provider from :attr:`token_providers`.
        """
        require(source, "source")
        if isinstance(source, str):
            require_text(source, "source")

        def factory(providers: TokenProviderFactory) -> DelegatingHandler:
            if isinstance(source, str):
                provider = providers.get_token_provider(source)
            elif isinstance(source, TokenProvider):
                provider = source
            else:
                provider = source(providers)
            if provider is None:
                raise HttpClientConfigurationError("The token provider lookup returned None.")
            return TokenProviderHandler(provider, logger=self.logger)

        return self.add_handler(factory)

    def add_api_version(
        self, value: str | None, query_param_name: str = "api-version"
    ) -> HttpClientBuilder:
        options = ApiVersionQueryOptions(value=value, query_param_name=query_param_name)
        return self.add_handler(lambda _: ApiVersionQueryParamHandler(options))

    def add_bearer_token(self, token: str | None) -> HttpClientBuilder:
        return self.add_authorization_header("Bearer", token)

    def add_authorization_header(
        self, scheme: str, parameter: str | None = None
    ) -> HttpClientBuilder:
        require_text(scheme, "scheme")
        return self.add_handler(lambda _: AuthorizationHandler(scheme, parameter))

    def add_header(self, name: str, value: str | None) -> HttpClientBuilder:
        require_text(name, "name")
        return self.add_handler(lambda _: HeaderHandler(name, value))

    def create_handlers(self) -> list[DelegatingHandler]:
        handlers = [factory(self.token_providers) for factory in self._handler_factories]
        for handler in handlers:
            if not isinstance(handler, DelegatingHandler):
                raise HttpClientConfigurationError(
                    f"Handler factories must return a DelegatingHandler, got {handler!r}."
                )
        return handlers

    def build_transport(
        self, transport: httpx.BaseTransport | None = None
    ) -> httpx.BaseTransport:
        chain = build_handler_chain(self.create_handlers(), transport or httpx.HTTPTransport())
        return typing.cast(httpx.BaseTransport, chain)

    def build_async_transport(
        self, transport: httpx.AsyncBaseTransport | None = None
    ) -> httpx.AsyncBaseTransport:
        chain = build_handler_chain(
            self.create_handlers(), transport or httpx.AsyncHTTPTransport()
        )
        return typing.cast(httpx.AsyncBaseTransport, chain)

    def build(
        self, transport: httpx.BaseTransport | None = None, **kwargs: typing.Any
    ) -> httpx.Client:
        """Create an :class:`httpx.Client`; extra keyword arguments go to it."""
        client = httpx.Client(transport=self.build_transport(transport), **kwargs)
        logger.debug("Built client with %d handler(s)", len(self._handler_factories))
        return client

    def build_async(
        self, transport: httpx.AsyncBaseTransport | None = None, **kwargs: typing.Any
    ) -> httpx.AsyncClient:
        client = httpx.AsyncClient(transport=self.build_async_transport(transport), **kwargs)
        logger.debug("Built async client with %d handler(s)", len(self._handler_factories))
        return client

    def __len__(self) -> int:
        return len(self._handler_factories)
