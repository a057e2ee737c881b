"""
Example: HttpFileResponse for file downloads

Wraps a streamed response so the body can be read as a file, with the
file name taken from Content-Disposition.
"""

import asyncio
import os
import tempfile

import httpx

import httpfluent


def download() -> None:
    """httpbin echoes query parameters back as response headers."""
    url = httpfluent.UrlBuilder.create("https://httpbin.org/response-headers").set_query_param(
        "Content-Disposition", 'attachment; filename="sample.json"'
    )
    with httpx.Client() as client:
        request = url.to_request().with_header("Range", "bytes=0-99").build(client)
        response = client.send(request, stream=True)
        with httpfluent.HttpFileResponse.from_response(response) as file:
            path = os.path.join(tempfile.gettempdir(), file.file_name or "download.bin")
            with open(path, "wb") as f:
                f.write(file.stream.read())
            print(f"✓ {file.status_code} partial={file.is_partial} → {path}")
        os.unlink(path)


async def adownload() -> None:
    async with httpx.AsyncClient() as client:
        response = await client.send(
            client.build_request("GET", "https://httpbin.org/bytes/256"), stream=True
        )
        async with await httpfluent.HttpFileResponse.afrom_response(response) as file:
            data = file.stream.read()
            print(f"✓ {file.status_code} {file.content_type} {len(data):,} bytes")


if __name__ == "__main__":
    download()
    asyncio.run(adownload())
