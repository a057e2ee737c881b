"""Request bodies.

Each content type knows its own ``Content-Type`` header and how to render
itself to bytes when a request is materialized.
"""

from __future__ import annotations

import codecs
import os
import typing
from urllib.parse import urlencode

import httpx

from ._exceptions import InvalidArgumentError
from ._headers import MediaType
from ._utils import require, require_text

__all__ = [
    "ByteArrayContent",
    "FormUrlEncodedContent",
    "HttpContent",
    "MultipartFormDataContent",
    "MultipartPart",
    "StreamContent",
    "StringContent",
]

CRLF = b"\r\n"


class HttpContent:
    """Base class for request bodies."""

    def __init__(self, media_type: MediaType | str | None = None) -> None:
        self.headers = httpx.Headers()
        if media_type is not None:
            self.content_type = media_type  # type: ignore[assignment]

    @property
    def content_type(self) -> MediaType | None:
        value = self.headers.get("Content-Type")
        return MediaType.parse(value) if value else None

    @content_type.setter
    def content_type(self, value: MediaType | str) -> None:
        if isinstance(value, str):
            value = MediaType.parse(value)
        self.headers["Content-Type"] = str(value)

    def read(self) -> bytes:
        raise NotImplementedError()  # pragma: no cover

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} [{self.headers.get('Content-Type', '')}]>"


class ByteArrayContent(HttpContent):
    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        super().__init__()
        self._data = bytes(require(data, "data"))

    def read(self) -> bytes:
        return self._data


class StreamContent(HttpContent):
    """Body read from a binary file-like object.

    The stream is drained the first time the body is rendered; later renders
    reuse the buffered bytes. The stream is not closed.
    """

    def __init__(self, stream: typing.BinaryIO) -> None:
        super().__init__()
        self._stream = require(stream, "stream")
        self._buffer: bytes | None = None

    def read(self) -> bytes:
        if self._buffer is None:
            self._buffer = bytes(self._stream.read())
        return self._buffer


class StringContent(HttpContent):
    def __init__(
        self,
        text: str,
        encoding: str | None = None,
        media_type: str | None = None,
    ) -> None:
        self._text = require(text, "text")
        try:
            self.encoding = codecs.lookup(encoding or "utf-8").name
        except LookupError:
            raise InvalidArgumentError(
                f"Unknown encoding: {encoding!r}", argument="encoding"
            ) from None
        super().__init__(
            MediaType(
                MediaType.parse(media_type or "text/plain").media_type,
                (("charset", self.encoding),),
            )
        )

    def read(self) -> bytes:
        return self._text.encode(self.encoding)


class FormUrlEncodedContent(HttpContent):
    def __init__(
        self,
        fields: typing.Mapping[str, str] | typing.Iterable[tuple[str, str]],
    ) -> None:
        require(fields, "fields")
        super().__init__("application/x-www-form-urlencoded")
        items = fields.items() if isinstance(fields, typing.Mapping) else fields
        self._fields = [(key, "" if value is None else value) for key, value in items]

    def read(self) -> bytes:
        return urlencode(self._fields).encode("ascii")


class MultipartPart(typing.NamedTuple):
    name: str
    content: HttpContent
    filename: str | None = None


def _format_form_param(name: str, value: str) -> str:
    escaped = value.translate({0x22: "%22", 0x0D: "%0D", 0x0A: "%0A"})
    return f'{name}="{escaped}"'


class MultipartFormDataContent(HttpContent):
    """``multipart/form-data`` body.

    Parts are rendered in the order they were added. The part list is live:
    parts added after the content was attached to a request are still sent.
    """

    def __init__(self, boundary: str | None = None) -> None:
        self.boundary = boundary or os.urandom(16).hex()
        super().__init__(MediaType("multipart/form-data", (("boundary", self.boundary),)))
        self._parts: list[MultipartPart] = []

    def add(self, content: HttpContent, name: str, filename: str | None = None) -> None:
        require(content, "content")
        require_text(name, "name")
        self._parts.append(MultipartPart(name, content, filename))

    @property
    def parts(self) -> tuple[MultipartPart, ...]:
        return tuple(self._parts)

    def __iter__(self) -> typing.Iterator[MultipartPart]:
        return iter(self.parts)

    def __len__(self) -> int:
        return len(self._parts)

    def _render_part_headers(self, part: MultipartPart) -> bytes:
        disposition = "form-data; " + _format_form_param("name", part.name)
        if part.filename is not None:
            disposition += "; " + _format_form_param("filename", part.filename)
        lines = [f"Content-Disposition: {disposition}"]
        lines.extend(
            f"{key.decode()}: {value.decode()}" for key, value in part.content.headers.raw
        )
        return "\r\n".join(lines).encode("utf-8")

    def read(self) -> bytes:
        boundary = self.boundary.encode("ascii")
        chunks: list[bytes] = []
        for part in self._parts:
            chunks.extend([b"--", boundary, CRLF])
            chunks.extend([self._render_part_headers(part), CRLF, CRLF])
            chunks.extend([part.content.read(), CRLF])
        chunks.extend([b"--", boundary, b"--", CRLF])
        return b"".join(chunks)
