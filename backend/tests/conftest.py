"""
Shared fixtures: a controllable clock, a scripted NASA upstream and an app
wired to both.
"""

import time
from typing import Any, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from app.services.nasa import NasaClient
from app.services.rate_limiter import FixedWindowRateLimiter
from app.services.response_cache import ResponseCache


class FakeClock:
    def __init__(self, start: float = 1_750_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class UpstreamStub:
    """Canned NASA responses keyed by URL path; records every request."""

    def __init__(self):
        self.routes: Dict[str, Dict[str, Any]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, path: str, json: Any = None, status: int = 200,
            exc: Optional[type] = None, text: Optional[str] = None) -> None:
        self.routes[path] = {"json": json, "status": status, "exc": exc, "text": text}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"error": {"code": "NOT_FOUND"}})
        if route["exc"] is not None:
            raise route["exc"]("simulated failure", request=request)
        if route["text"] is not None:
            return httpx.Response(route["status"], text=route["text"])
        return httpx.Response(route["status"], json=route["json"])

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls_to(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]


@pytest.fixture
def clock(monkeypatch):
    """Fake wall clock, also installed as time.time for the rate limit storage."""
    fake = FakeClock()
    monkeypatch.setattr(time, "time", fake)
    return fake


@pytest.fixture
def upstream():
    return UpstreamStub()


@pytest.fixture
def nasa_client(upstream, clock):
    return NasaClient(
        api_key="test-key",
        base_url="https://api.nasa.gov",
        transport=upstream.transport,
        cache=ResponseCache(ttl_seconds=900, clock=clock),
    )


@pytest.fixture
def rate_limiter(clock):
    return FixedWindowRateLimiter(max_requests=100, window_seconds=900)


@pytest.fixture
def response_cache(clock):
    return ResponseCache(ttl_seconds=900, max_entries=100, clock=clock)


@pytest.fixture
def app(nasa_client, response_cache, rate_limiter):
    return create_app(
        nasa_client=nasa_client,
        response_cache=response_cache,
        rate_limiter=rate_limiter,
        sweep_interval=0,
    )


@pytest.fixture
def client(app):
    return TestClient(app)
