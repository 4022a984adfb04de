"""Shared fixtures: an app wired to a scripted upstream instead of the network."""

import json
from typing import Any, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from gobiz_proxy.api.routes import get_upstream_client
from gobiz_proxy.core.config import Settings
from gobiz_proxy.core.upstream import UpstreamClient
from gobiz_proxy.main import create_app

UPSTREAM_BASE = "https://upstream.test"


class UpstreamStub:
    """Records upstream requests and answers them with a scripted response."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._status = 200
        self._json: Any = {"ok": True}
        self._text: Optional[str] = None
        self._headers: Dict[str, str] = {}
        self._error: Optional[Exception] = None

    def reply(self, status: int = 200, json_body: Any = None, text: Optional[str] = None,
              headers: Optional[Dict[str, str]] = None) -> None:
        self._status = status
        self._json = json_body
        self._text = text
        self._headers = headers or {}

    def fail(self, error: Exception) -> None:
        self._error = error

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._error is not None:
            raise self._error
        if self._text is not None:
            return httpx.Response(self._status, text=self._text, headers=self._headers)
        if self._json is None:
            return httpx.Response(self._status, headers=self._headers)
        return httpx.Response(self._status, json=self._json, headers=self._headers)

    @property
    def called(self) -> bool:
        return bool(self.requests)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content)


@pytest.fixture
def settings():
    """Settings pointing at a fake upstream, with rate limiting off."""
    return Settings(UPSTREAM_BASE=UPSTREAM_BASE, ENABLE_RATE_LIMITING=False, LOG_FORMAT="text")


@pytest.fixture
def upstream():
    return UpstreamStub()


@pytest.fixture
def app(settings, upstream):
    application = create_app(settings)

    async def scripted_upstream_client():
        transport = httpx.MockTransport(upstream.handler)
        async with UpstreamClient(settings=settings, transport=transport) as client:
            yield client

    application.dependency_overrides[get_upstream_client] = scripted_upstream_client
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
