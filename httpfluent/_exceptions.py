from __future__ import annotations

import typing

if typing.TYPE_CHECKING:
    from ._tokens import ErrorDetail


class HttpFluentError(Exception):
    """Base class for every error raised by httpfluent itself."""


class InvalidArgumentError(HttpFluentError, ValueError):
    """A builder method received a missing or blank required argument."""

    def __init__(self, message: str, *, argument: str | None = None) -> None:
        super().__init__(message)
        self.argument = argument


class HeaderParseError(HttpFluentError, ValueError):
    """A media type or content disposition header value is malformed."""

    def __init__(self, message: str, *, value: str | None = None) -> None:
        super().__init__(message)
        self.value = value


class TokenError(HttpFluentError):
    """A token provider could not produce an access token."""

    def __init__(self, error: ErrorDetail) -> None:
        super().__init__(error.message)
        self.error = error


class HttpClientConfigurationError(HttpFluentError):
    """The handler chain or client configuration is unusable."""
