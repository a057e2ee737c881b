from __future__ import annotations

import io
import typing

import httpx

from ._headers import ContentDisposition, MediaType
from ._utils import require

__all__ = ["HttpFileResponse"]

_CREATE_KEY = object()


def _closes_async(handle: typing.Any) -> bool:
    # A response from a sync client only supports close().
    if isinstance(handle, httpx.Response):
        return isinstance(handle.stream, httpx.AsyncByteStream)
    return hasattr(handle, "aclose")


class HttpFileResponse:
    """A response body exposed as a readable stream, for file downloads.

    Build instances with :meth:`create`, :meth:`from_response` or
    :meth:`afrom_response`. The file response owns both the stream and the
    underlying response; :meth:`close` / :meth:`aclose` (or the context
    manager protocols) release them together, once.

    >>> with client.stream("GET", "https://example.com/report.pdf") as response:
    ...     with HttpFileResponse.from_response(response) as file:
    ...         print(file.file_name, file.is_partial)
    ...         data = file.stream.read()
    """

    def __init__(
        self,
        status_code: int,
        headers: httpx.Headers,
        stream: typing.BinaryIO,
        handle: typing.Any,
        *,
        _key: object = None,
    ) -> None:
        if _key is not _CREATE_KEY:
            raise TypeError(
                "HttpFileResponse cannot be instantiated directly; use "
                "HttpFileResponse.create(), from_response() or afrom_response()."
            )
        self.status_code = status_code
        self.headers = headers
        self.stream = stream
        self._handle = handle
        self._closed = False

        self.content_disposition: ContentDisposition | None = None
        disposition = headers.get("Content-Disposition")
        if disposition is not None and disposition.strip():
            self.content_disposition = ContentDisposition.parse(disposition)

        self.content_type: MediaType | None = None
        content_type = headers.get("Content-Type")
        if content_type is not None and content_type.strip():
            self.content_type = MediaType.parse(content_type)

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        status_code: int,
        headers: httpx.Headers | typing.Mapping[str, str] | typing.Sequence[tuple[str, str]] | None,
        stream: typing.BinaryIO | None,
        handle: typing.Any = None,
    ) -> HttpFileResponse:
        """Wrap explicit response parts.

        ``handle`` is released alongside the stream; anything with a
        ``close()`` (and optionally ``aclose()``) method works.
        """
        return cls(
            int(status_code),
            httpx.Headers(headers),
            stream if stream is not None else io.BytesIO(),
            handle,
            _key=_CREATE_KEY,
        )

    @classmethod
    def from_response(cls, response: httpx.Response) -> HttpFileResponse:
        """Read ``response`` into a stream. The response is closed afterwards."""
        require(response, "response")
        content = response.read()
        return cls.create(response.status_code, response.headers, io.BytesIO(content), response)

    @classmethod
    async def afrom_response(cls, response: httpx.Response) -> HttpFileResponse:
        """Async version of :meth:`from_response`."""
        require(response, "response")
        content = await response.aread()
        return cls.create(response.status_code, response.headers, io.BytesIO(content), response)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def is_partial(self) -> bool:
        return self.status_code == httpx.codes.PARTIAL_CONTENT

    @property
    def file_name(self) -> str | None:
        if self.content_disposition is None:
            return None
        return self.content_disposition.filename

    @property
    def is_closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self.stream.close()
        finally:
            if self._handle is not None:
                self._handle.close()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self.stream.close()
        finally:
            if _closes_async(self._handle):
                await self._handle.aclose()
            elif self._handle is not None:
                self._handle.close()

    def __enter__(self) -> HttpFileResponse:
        return self

    def __exit__(self, *args: typing.Any) -> None:
        self.close()

    async def __aenter__(self) -> HttpFileResponse:
        return self

    async def __aexit__(self, *args: typing.Any) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} [{self.status_code}]>"
