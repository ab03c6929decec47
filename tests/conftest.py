import json
from io import BytesIO
from typing import Any, Dict, List

import pytest
import requests
from PIL import Image

from core.api_client import ApiClient
from core.session import AdminSession

BASE_URL = "http://backend.test"

ADMIN = {"id": 1, "name": "Admin", "email": "admin@example.com", "role": "admin"}


class FakeResponse:
    """Just enough of requests.Response for the API client."""

    def __init__(self, status_code: int = 200, payload: Any = None, content: bytes = None):
        self.status_code = status_code
        self._payload = payload
        if content is None:
            content = b"" if payload is None else json.dumps(payload).encode()
        self.content = content

    def json(self):
        if self._payload is None:
            # requests raises a ValueError subclass for non-JSON bodies
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeHttp:
    """
    Stands in for requests.Session. Responses are queued per test and every
    call is recorded so tests can inspect method, url and body.
    """

    def __init__(self):
        self.calls: List[Dict[str, Any]] = []
        self.responses: List[Any] = []

    def queue(self, status_code=200, payload=None, content=None):
        self.responses.append(FakeResponse(status_code, payload, content))
        return self

    def fail(self, exc: Exception):
        self.responses.append(exc)
        return self

    def request(self, method, url, headers=None, json=None, files=None, timeout=None):
        self.calls.append({
            "method": method,
            "url": url,
            "headers": headers or {},
            "json": json,
            "files": files,
            "timeout": timeout,
        })
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def last(self):
        return self.calls[-1]


@pytest.fixture()
def http() -> FakeHttp:
    return FakeHttp()


@pytest.fixture()
def session() -> AdminSession:
    return AdminSession(token="test-token", admin=dict(ADMIN), timeout=60)


@pytest.fixture()
def api(session, http) -> ApiClient:
    return ApiClient(session, base_url=BASE_URL, http=http, timeout=5)


@pytest.fixture()
def audit_log():
    """Collects audit callbacks instead of writing to the database."""
    entries = []

    def record(admin_email, resource, action, resource_id=None):
        entries.append((admin_email, resource, action, resource_id))

    record.entries = entries
    return record


def make_image(width=100, height=50, mode="RGB", fmt="PNG", color=(200, 30, 30)) -> bytes:
    if mode == "RGBA" and len(color) == 3:
        color = color + (128,)
    buf = BytesIO()
    Image.new(mode, (width, height), color).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture()
def connection_error():
    return requests.ConnectionError("connection refused")


@pytest.fixture()
def image_bytes():
    """Factory for in-memory test images."""
    return make_image
