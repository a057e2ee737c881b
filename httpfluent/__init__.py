# ruff: noqa: I001
from ._exceptions import (
    HeaderParseError,
    HttpClientConfigurationError,
    HttpFluentError,
    InvalidArgumentError,
    TokenError,
)
from ._headers import (
    APPLICATION_JSON,
    APPLICATION_OCTET_STREAM,
    TEXT_PLAIN,
    TEXT_XML,
    ContentDisposition,
    MediaType,
)
from ._content import (
    ByteArrayContent,
    FormUrlEncodedContent,
    HttpContent,
    MultipartFormDataContent,
    MultipartPart,
    StreamContent,
    StringContent,
)
from ._urls import UrlBuilder, convert_to_string, set_single_query_param
from ._multipart import MultipartFormContentBuilder
from ._requests import HttpMethodBuilder, HttpRequestMessageBuilder, RequestMessage
from ._tokens import (
    ClientCredentialsTokenProvider,
    ErrorDetail,
    StaticTokenProvider,
    Token,
    TokenProvider,
    TokenProviderFactory,
)
from ._handlers import (
    ApiVersionQueryOptions,
    ApiVersionQueryParamHandler,
    AuthorizationHandler,
    DelegatingHandler,
    HeaderHandler,
    TokenProviderHandler,
    build_handler_chain,
)
from ._client_builder import HttpClientBuilder
from ._file_response import HttpFileResponse

__title__ = "httpfluent"
__description__ = "Fluent request builders and delegating handlers for httpx."
__version__ = "0.1.0"

try:
    from .cli import main
except ImportError:

    def main() -> None:  # type: ignore[misc]
        import sys

        print(
            'The "httpfluent" command requires the CLI extra. '
            'Install it with: pip install "httpfluent[cli]"',
            file=sys.stderr,
        )
        sys.exit(1)


_EXCLUDED_FROM_ALL = {"cli", "main"}

_members = [
    member
    for member in list(vars().keys())
    if (
        not member.startswith("_")
        or member in ["__description__", "__title__", "__version__"]
    )
    and member not in _EXCLUDED_FROM_ALL
]

__all__ = sorted(_members, key=str.casefold)  # pyright: ignore[reportUnsupportedDunderAll]
