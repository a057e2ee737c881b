from __future__ import annotations

import json
import typing

from ._content import ByteArrayContent, MultipartFormDataContent, StreamContent, StringContent
from ._headers import MediaType
from ._utils import require, require_text

if typing.TYPE_CHECKING:
    from ._requests import HttpRequestMessageBuilder


class MultipartFormContentBuilder:
    """Appends named parts to a ``multipart/form-data`` body.

    The body is attached to the parent request as soon as the builder is
    created, so every part added here is part of that request.
    """

    def __init__(self, request_builder: HttpRequestMessageBuilder) -> None:
        self.request_builder = require(request_builder, "request_builder")
        self.content = MultipartFormDataContent()

    def with_file(
        self,
        name: str,
        stream: typing.BinaryIO,
        file_name: str,
        content_type: MediaType | str,
    ) -> MultipartFormContentBuilder:
        require_text(name, "name")
        require(stream, "stream")
        require(content_type, "content_type")
        part = StreamContent(stream)
        part.content_type = content_type  # type: ignore[assignment]
        self.content.add(part, name, file_name)
        return self

    def with_string(
        self,
        name: str,
        content: str,
        encoding: str | None = None,
        media_type: str | None = None,
    ) -> MultipartFormContentBuilder:
        require_text(name, "name")
        self.content.add(StringContent(content, encoding, media_type), name)
        return self

    def with_json_string(
        self,
        name: str,
        content: typing.Any,
        encoding: str = "utf-8",
    ) -> MultipartFormContentBuilder:
        return self.with_string(name, json.dumps(content), encoding, "application/json")

    def with_byte_array(
        self, name: str, content: bytes | bytearray
    ) -> MultipartFormContentBuilder:
        require_text(name, "name")
        self.content.add(ByteArrayContent(content), name)
        return self
