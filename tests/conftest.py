import httpx
import pytest

from main import create_app
from relay.core.settings import Settings

UPSTREAM_URL = "https://upstream.test/v1/chat/completions"

UPSTREAM_REPLY = {
    "choices": [
        {
            "message": {
                "index": 0,
                "role": "assistant",
                "content": "hi",
                "finish_reason": "stop",
            }
        }
    ]
}


class RecordingUpstream:
    """MockTransport handler that remembers every request it sees."""

    def __init__(self, handler):
        self.requests = []
        self._handler = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        open_api_key="test-key",
        upstream_url=UPSTREAM_URL,
        upstream_model="gpt-3.5-turbo",
    )


@pytest.fixture
def make_app(settings):
    def _make(handler):
        upstream = RecordingUpstream(handler)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
        return create_app(settings, http_client=http_client), upstream

    return _make
