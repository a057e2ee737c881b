import httpx
import pytest

from tests.utils import RecordingHandler


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def recorder() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def transport(recorder: RecordingHandler) -> httpx.MockTransport:
    return httpx.MockTransport(recorder)
