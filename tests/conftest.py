"""Pytest configuration and fixtures for heroku-client tests."""

import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
import respx
from pydantic import BaseModel

from heroku_client import Client, join_path


# ============================================================================
# Sample Resource Models
# ============================================================================


class Item(BaseModel):
    """Sample resource addressed by id, falling back to name."""
    id: Optional[str] = None
    name: Optional[str] = None
    size: int = 0
    tags: List[str] = []

    def path(self) -> str:
        return join_path("items", self.id or self.name or "")


class App(BaseModel):
    """Sample resource mirroring a Heroku app."""
    id: Optional[str] = None
    name: Optional[str] = None
    maintenance: bool = False

    def path(self) -> str:
        return join_path("apps", self.id or self.name or "")


# ============================================================================
# Fake Transport
# ============================================================================


class TrackingStream(httpx.SyncByteStream):
    """Response body stream that records whether it was read and closed."""

    def __init__(self, body: bytes):
        self.body = body
        self.consumed = False
        self.closed = False

    def __iter__(self):
        self.consumed = True
        yield self.body

    def close(self) -> None:
        self.closed = True


def make_response(
    status_code: int = 200,
    json_data: Optional[Any] = None,
    body: Optional[bytes] = None,
    headers: Optional[Dict[str, str]] = None,
) -> httpx.Response:
    """Create a streaming httpx.Response whose body stream can be inspected."""
    if json_data is not None:
        body = json.dumps(json_data).encode()
    return httpx.Response(
        status_code,
        headers=headers,
        stream=TrackingStream(body or b""),
    )


class RecordingTransport:
    """Transport that records requests and answers them with a responder."""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]):
        self.responder = responder
        self.requests: List[httpx.Request] = []
        self.responses: List[httpx.Response] = []
        self.stream_flags: List[bool] = []

    def send(self, request: httpx.Request, *, stream: bool = False) -> httpx.Response:
        request.read()
        self.requests.append(request)
        self.stream_flags.append(stream)
        response = self.responder(request)
        response.request = request
        self.responses.append(response)
        return response

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def last_stream(self) -> TrackingStream:
        return self.responses[-1].stream


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def host():
    """Host used by test clients."""
    return "api.example.com"


@pytest.fixture
def token():
    """API token used by test clients."""
    return "test-token"


@pytest.fixture
def make_client(host, token):
    """Build a client around a RecordingTransport answering with ``responder``."""

    def _make(responder: Callable[[httpx.Request], httpx.Response]):
        transport = RecordingTransport(responder)
        return Client(host, token, transport=transport), transport

    return _make


@pytest.fixture
def respx_mock():
    """Route requests made through the default httpx transport."""
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture
def mock_item_data():
    """Mock item data."""
    return {"id": "item-123", "name": "widget", "size": 3, "tags": ["a", "b"]}


@pytest.fixture
def mock_items_list():
    """Mock list of items."""
    return [
        {"id": "item-1", "name": "one", "size": 1},
        {"id": "item-2", "name": "two", "size": 2},
        {"id": "item-3", "name": "three", "size": 3},
    ]
