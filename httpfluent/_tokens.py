from __future__ import annotations

import asyncio
import json as _json
import logging
import threading
import time
import typing

import httpx

from ._exceptions import HttpClientConfigurationError, TokenError
from ._utils import require, require_text

__all__ = [
    "ClientCredentialsTokenProvider",
    "ErrorDetail",
    "StaticTokenProvider",
    "Token",
    "TokenProvider",
    "TokenProviderFactory",
]

logger = logging.getLogger("httpfluent.tokens")


class ErrorDetail(typing.NamedTuple):
    """Structured description of a failure, suitable for logging."""

    code: str
    message: str
    target: str | None = None
    details: tuple[ErrorDetail, ...] = ()


class Token(typing.NamedTuple):
    access_token: str
    expires_at: float | None = None

    def is_expired(self, leeway: float = 0.0) -> bool:
        if self.expires_at is None:
            return False
        return time.time() >= self.expires_at - leeway


class TokenProvider:
    """Source of access tokens for outbound calls.

    Subclasses implement :meth:`get_token` and may override
    :meth:`aget_token` when they can fetch without blocking. Failures are
    raised as :class:`~httpfluent.TokenError`.
    """

    def get_token(self) -> Token:
        raise NotImplementedError(
            "The 'get_token' method must be implemented."
        )  # pragma: no cover

    async def aget_token(self) -> Token:
        return self.get_token()


class StaticTokenProvider(TokenProvider):
    def __init__(self, access_token: str) -> None:
        self._token = Token(require_text(access_token, "access_token"))

    def get_token(self) -> Token:
        return self._token


# ---------------------------------------------------------------------------
# ClientCredentialsTokenProvider: OAuth 2.0 client credentials with caching
# ---------------------------------------------------------------------------


class ClientCredentialsTokenProvider(TokenProvider):
    """OAuth 2.0 client-credentials token provider with a cached token.

    The token is refreshed once it is within ``leeway_seconds`` of expiry.
    Refreshes are serialized: a :class:`threading.Lock` on the sync path and
    an :class:`asyncio.Lock` on the async path.

    Parameters
    ----------
    token_url:
        Token endpoint URL.
    client_id:
        OAuth 2.0 client ID.
    client_secret:
        OAuth 2.0 client secret.
    scope:
        Space-separated scope string.
    extra_params:
        Additional form fields included in the token request.
    leeway_seconds:
        Seconds before actual expiry at which the token is treated as
        expired (default ``60``).
    transport, async_transport:
        Transports used for the token request. Defaults to the ``httpx``
        network transports.

    Examples
    --------
    >>> provider = ClientCredentialsTokenProvider(
    ...     token_url="https://login.microsoftonline.com/<tenant>/oauth2/v2.0/token",
    ...     client_id="...", client_secret="...",
    ...     scope="https://graph.microsoft.com/.default",
    ... )
    >>> client = HttpClientBuilder().add_token_provider(provider).build()
    """

    def __init__(
        self,
        token_url: str,
        client_id: str,
        client_secret: str,
        scope: str = "",
        extra_params: dict[str, str] | None = None,
        leeway_seconds: int = 60,
        transport: httpx.BaseTransport | None = None,
        async_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token_url = require_text(token_url, "token_url")
        self._client_id = require_text(client_id, "client_id")
        self._client_secret = require(client_secret, "client_secret")
        self._scope = scope
        self._extra_params: dict[str, str] = extra_params or {}
        self._leeway = leeway_seconds
        self._transport = transport
        self._async_transport = async_transport
        self._token: Token | None = None
        self._lock = threading.Lock()
        self._async_lock: asyncio.Lock | None = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _cached_token(self) -> Token | None:
        if self._token is None or self._token.is_expired(self._leeway):
            return None
        return self._token

    def _build_token_data(self) -> dict[str, str]:
        data: dict[str, str] = {
            "grant_type": "client_credentials",
            "client_id": self._client_id,
            "client_secret": self._client_secret,
        }
        if self._scope:
            data["scope"] = self._scope
        data.update(self._extra_params)
        return data

    def _parse_token_response(self, response: httpx.Response) -> Token:
        if response.is_error:
            raise TokenError(
                ErrorDetail(
                    code="token_endpoint_error",
                    message=f"Token endpoint returned {response.status_code}.",
                    target=self._token_url,
                )
            )
        try:
            payload = _json.loads(response.content)
        except ValueError as exc:
            raise TokenError(
                ErrorDetail(
                    code="invalid_token_response",
                    message=f"Token response is not valid JSON: {exc}",
                    target=self._token_url,
                )
            ) from exc
        if not isinstance(payload, dict) or "access_token" not in payload:
            raise TokenError(
                ErrorDetail(
                    code="invalid_token_response",
                    message="Token response is missing 'access_token'.",
                    target=self._token_url,
                )
            )
        try:
            expires_in = int(payload.get("expires_in", 3600))
        except (TypeError, ValueError) as exc:
            raise TokenError(
                ErrorDetail(
                    code="invalid_token_response",
                    message=f"Token response has an invalid 'expires_in': {exc}",
                    target=self._token_url,
                )
            ) from exc
        self._token = Token(str(payload["access_token"]), time.time() + expires_in)
        logger.debug("Refreshed token from %s (expires in %ss)", self._token_url, expires_in)
        return self._token

    def _transport_error(self, exc: httpx.HTTPError) -> TokenError:
        return TokenError(
            ErrorDetail(
                code="token_request_failed",
                message=f"{type(exc).__name__}: {exc}",
                target=self._token_url,
            )
        )

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    def get_token(self) -> Token:
        with self._lock:
            token = self._cached_token()
            if token is not None:
                return token
            try:
                with httpx.Client(transport=self._transport) as client:
                    response = client.post(self._token_url, data=self._build_token_data())
            except httpx.HTTPError as exc:
                raise self._transport_error(exc) from exc
            return self._parse_token_response(response)

    # ------------------------------------------------------------------
    # Async
    # ------------------------------------------------------------------

    async def aget_token(self) -> Token:
        if self._async_lock is None:
            self._async_lock = asyncio.Lock()
        async with self._async_lock:
            token = self._cached_token()
            if token is not None:
                return token
            try:
                async with httpx.AsyncClient(transport=self._async_transport) as client:
                    response = await client.post(
                        self._token_url, data=self._build_token_data()
                    )
            except httpx.HTTPError as exc:
                raise self._transport_error(exc) from exc
            return self._parse_token_response(response)


class TokenProviderFactory:
    """Registry of token providers looked up by logical name."""

    def __init__(self, providers: typing.Mapping[str, TokenProvider] | None = None) -> None:
        self._providers: dict[str, TokenProvider] = dict(providers or {})

    def register(self, name: str, provider: TokenProvider) -> TokenProviderFactory:
        require_text(name, "name")
        self._providers[name] = require(provider, "provider")
        return self

    def get_token_provider(self, name: str) -> TokenProvider:
        try:
            return self._providers[name]
        except KeyError:
            raise HttpClientConfigurationError(
                f"No token provider registered with the name {name!r}."
            ) from None

    def __contains__(self, name: object) -> bool:
        return name in self._providers

    def __len__(self) -> int:
        return len(self._providers)
