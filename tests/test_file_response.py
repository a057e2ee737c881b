from __future__ import annotations

import io

import httpx
import pytest

from httpfluent import HeaderParseError, HttpFileResponse


class Handle:
    def __init__(self) -> None:
        self.close_calls = 0

    def close(self) -> None:
        self.close_calls += 1


class AsyncHandle(Handle):
    def __init__(self) -> None:
        super().__init__()
        self.aclose_calls = 0

    async def aclose(self) -> None:
        self.aclose_calls += 1


class TestCreate:
    def test_cannot_be_instantiated_directly(self) -> None:
        with pytest.raises(TypeError):
            HttpFileResponse(200, httpx.Headers(), io.BytesIO(), None)

    def test_partial_content(self) -> None:
        assert HttpFileResponse.create(206, {}, io.BytesIO()).is_partial
        assert not HttpFileResponse.create(200, {}, io.BytesIO()).is_partial

    def test_parses_headers(self) -> None:
        file = HttpFileResponse.create(
            200,
            {
                "Content-Disposition": 'attachment; filename="report.pdf"',
                "Content-Type": "application/pdf",
            },
            io.BytesIO(b"%PDF"),
        )
        assert file.file_name == "report.pdf"
        assert file.content_disposition is not None
        assert file.content_disposition.is_attachment
        assert file.content_type is not None
        assert file.content_type.media_type == "application/pdf"

    def test_missing_or_blank_headers(self) -> None:
        file = HttpFileResponse.create(200, {"Content-Disposition": "  "}, io.BytesIO())
        assert file.content_disposition is None
        assert file.content_type is None
        assert file.file_name is None

    def test_invalid_header_raises(self) -> None:
        with pytest.raises(HeaderParseError):
            HttpFileResponse.create(200, {"Content-Type": "not-a-type"}, io.BytesIO())

    def test_missing_stream_is_empty(self) -> None:
        file = HttpFileResponse.create(204, None, None)
        assert file.stream.read() == b""

    def test_repr(self) -> None:
        assert repr(HttpFileResponse.create(206, {}, io.BytesIO())) == "<HttpFileResponse [206]>"


class TestClose:
    def test_close_is_idempotent(self) -> None:
        stream = io.BytesIO(b"data")
        handle = Handle()
        file = HttpFileResponse.create(200, {}, stream, handle)

        file.close()
        file.close()

        assert file.is_closed
        assert stream.closed
        assert handle.close_calls == 1

    def test_context_manager(self) -> None:
        handle = Handle()
        with HttpFileResponse.create(200, {}, io.BytesIO(), handle) as file:
            assert not file.is_closed
        assert file.is_closed
        assert handle.close_calls == 1

    @pytest.mark.anyio
    async def test_aclose_prefers_async_handle(self) -> None:
        handle = AsyncHandle()
        file = HttpFileResponse.create(200, {}, io.BytesIO(), handle)
        await file.aclose()
        await file.aclose()
        file.close()
        assert handle.aclose_calls == 1
        assert handle.close_calls == 0

    @pytest.mark.anyio
    async def test_aclose_falls_back_to_close(self) -> None:
        handle = Handle()
        async with HttpFileResponse.create(200, {}, io.BytesIO(), handle):
            pass
        assert handle.close_calls == 1


class TestFromResponse:
    def test_from_response(self) -> None:
        response = httpx.Response(
            206,
            content=b"partial",
            headers={"Content-Disposition": "attachment; filename=part.bin"},
        )
        with HttpFileResponse.from_response(response) as file:
            assert file.is_partial
            assert file.file_name == "part.bin"
            assert file.stream.read() == b"partial"
        assert response.is_closed

    def test_from_streamed_response(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                content=b"downloaded",
                headers={"Content-Type": "application/octet-stream"},
            )

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            request = client.build_request("GET", "https://example.com/file")
            response = client.send(request, stream=True)
            with HttpFileResponse.from_response(response) as file:
                assert file.stream.read() == b"downloaded"
                assert file.content_type is not None
                assert file.content_type.media_type == "application/octet-stream"
        assert response.is_closed

    @pytest.mark.anyio
    async def test_afrom_response(self) -> None:
        async def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                content=b"async data",
                headers={"Content-Disposition": "attachment; filename=a.txt"},
            )

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            request = client.build_request("GET", "https://example.com/file")
            response = await client.send(request, stream=True)
            async with await HttpFileResponse.afrom_response(response) as file:
                assert file.file_name == "a.txt"
                assert file.stream.read() == b"async data"
        assert response.is_closed

    @pytest.mark.anyio
    async def test_async_exit_with_sync_streamed_response(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"sync body")

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            request = client.build_request("GET", "https://example.com/file")
            response = client.send(request, stream=True)
            async with HttpFileResponse.from_response(response) as file:
                assert file.stream.read() == b"sync body"
        assert file.is_closed
        assert file.stream.closed
        assert response.is_closed

    def test_requires_response(self) -> None:
        with pytest.raises(ValueError):
            HttpFileResponse.from_response(None)  # type: ignore[arg-type]
