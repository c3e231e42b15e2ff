"""shared fixtures: an httpx transport that records every request."""
import sys
from pathlib import Path

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from glpkg.registry.client import Client

BASE_URL = "https://gitlab.example.com/api/v4/"


class TransportSpy:
    """MockTransport handler that records requests and their bodies."""

    def __init__(self):
        self.requests = []
        self.bodies = []
        self.status_code = 200
        self.content = b""
        self.headers = {}
        self.error = None

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.bodies.append(request.read())
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, content=self.content, headers=self.headers)


@pytest.fixture
def spy():
    return TransportSpy()


@pytest.fixture
def client(spy):
    http = httpx.Client(transport=httpx.MockTransport(spy))
    client = Client(token="secret-token", base_url=BASE_URL, http_client=http)
    yield client
    http.close()
