"""Pytest fixtures for drivepy tests."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pytest

from drivepy.core.upload.services import BytesPayload


ACCESS_TOKEN = 'ya29.test-token'
SESSION_URI = 'https://www.googleapis.com/upload/drive/v3/files?uploadType=resumable&upload_id=xyz'


class FakeResponse:
    """Minimal stand-in for aiohttp.ClientResponse."""

    def __init__(self, status: int, headers: Optional[Dict[str, str]] = None, body: str = ''):
        self.status = status
        self.headers = headers or {}
        self._body = body

    async def text(self) -> str:
        return self._body


@dataclass
class RecordedCall:
    """One request seen by FakeSession, with its body fully read."""
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b''
    params: Any = None
    proxy: Optional[str] = None


class _RequestContext:
    def __init__(self, session: 'FakeSession', method: str, url: str, kwargs: Dict[str, Any]):
        self._session = session
        self._method = method
        self._url = url
        self._kwargs = kwargs

    async def __aenter__(self):
        return await self._session._dispatch(self._method, self._url, self._kwargs)

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False


class FakeSession:
    """
    Scripted aiohttp.ClientSession.

    Each request pops the next item of ``responses``: a FakeResponse is
    returned, an exception instance is raised. Async iterable bodies are
    drained so tests see exactly what would go on the wire.
    """

    def __init__(self, responses: Optional[List[Any]] = None):
        self.responses = list(responses or [])
        self.calls: List[RecordedCall] = []
        self.closed = False

    def request(self, method: str, url: str, **kwargs):
        return _RequestContext(self, method, url, kwargs)

    def put(self, url: str, **kwargs):
        return _RequestContext(self, 'PUT', url, kwargs)

    async def _dispatch(self, method: str, url: str, kwargs: Dict[str, Any]):
        data = kwargs.get('data')
        if data is not None and hasattr(data, '__aiter__'):
            body = b''.join([piece async for piece in data])
        elif isinstance(data, str):
            body = data.encode('utf-8')
        else:
            body = data or b''

        self.calls.append(RecordedCall(
            method=method,
            url=url,
            headers=dict(kwargs.get('headers') or {}),
            body=body,
            params=kwargs.get('params'),
            proxy=kwargs.get('proxy')
        ))

        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    @property
    def puts(self) -> List[RecordedCall]:
        return [c for c in self.calls if c.method == 'PUT']

    async def close(self):
        self.closed = True


class TrackingPayload(BytesPayload):
    """BytesPayload that remembers whether it was opened and released."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.opened = False
        self.closed = False

    async def open(self) -> None:
        self.opened = True

    async def close(self) -> None:
        self.closed = True


def session_created(uri: str = SESSION_URI) -> FakeResponse:
    """Successful session creation response."""
    return FakeResponse(200, {'Location': uri})


def resume_incomplete(last_byte: Optional[int] = None) -> FakeResponse:
    """308 acknowledging bytes 0..last_byte (no Range header when None)."""
    headers = {} if last_byte is None else {'Range': f"bytes=0-{last_byte}"}
    return FakeResponse(308, headers)


def upload_done(file_id: str = 'file-123', name: str = 'data.bin') -> FakeResponse:
    """Final 200 response carrying the stored resource."""
    return FakeResponse(200, {'Content-Type': 'application/json'}, f'{{"id": "{file_id}", "name": "{name}"}}')


@pytest.fixture
def access_token():
    """Returns a dummy bearer token."""
    return ACCESS_TOKEN


@pytest.fixture
def sleeps():
    """Records backoff sleeps (in seconds) instead of sleeping."""
    return []


@pytest.fixture
def fake_sleep(sleeps):
    """Instant sleep coroutine appending to ``sleeps``."""
    async def _sleep(seconds):
        sleeps.append(seconds)
    return _sleep


@pytest.fixture
def payload_5000():
    """5000-byte payload with distinct byte values."""
    return TrackingPayload(bytes(i % 251 for i in range(5000)), content_type='application/pdf', name='report.pdf')
