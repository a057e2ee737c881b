from __future__ import annotations

import httpx


class RecordingHandler:
    """MockTransport handler that keeps every request it sees."""

    def __init__(self, response: httpx.Response | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self._response = response

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        if self._response is not None:
            return self._response
        return httpx.Response(200, json={"url": str(request.url)})

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]
