import pytest
from fastapi.testclient import TestClient

from app.core.config import settings
from app.core.errors import InternalError
from app.main import create_app
from app.services.rate_limiter import FixedWindowRateLimiter
from app.services.response_cache import ResponseCache


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "OK"
    assert body["version"] == "v1.0.1"
    assert body["uptime"] >= 0
    assert set(body["memory"]) == {"rss", "vms"}


def test_root_banner(client):
    body = client.get("/").json()

    assert body["status"] == "Running"
    assert body["endpoints"]["apod"] == "/api/v1/apod"


def test_api_info(client):
    response = client.get("/api/v1")

    assert response.status_code == 200
    assert "cache" in response.json()["endpoints"]


def test_unknown_route(client):
    response = client.get("/api/v1/comets")

    assert response.status_code == 404
    body = response.json()
    assert body["error"] is True
    assert body["message"] == "Route /api/v1/comets not found"
    assert body["path"] == "/api/v1/comets"
    assert body["method"] == "GET"


def test_error_envelope_includes_stack_outside_production(client):
    body = client.get("/api/v1/neo/xyz").json()

    assert "ValidationError" in body["stack"]


def test_error_envelope_hides_stack_in_production(client, monkeypatch):
    monkeypatch.setattr(settings, "NODE_ENV", "production")

    body = client.get("/api/v1/neo/xyz").json()

    assert "stack" not in body


def test_cors_preflight(client):
    response = client.options(
        "/api/v1/apod",
        headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "GET"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"


def test_injected_state_is_used_as_given(nasa_client):
    cache = ResponseCache(ttl_seconds=5)
    limiter = FixedWindowRateLimiter(max_requests=2)

    app = create_app(nasa_client=nasa_client, response_cache=cache, rate_limiter=limiter, sweep_interval=0)

    assert app.state.response_cache is cache
    assert app.state.rate_limiter is limiter
    assert app.state.nasa_client is nasa_client


class TestUnexpectedErrors:
    @pytest.fixture
    def failing_client(self, app):
        async def explode():
            raise RuntimeError("database exploded")

        async def fault():
            raise InternalError("invariant broken in handler")

        app.add_api_route("/api/v1/explode", explode)
        app.add_api_route("/api/v1/fault", fault)
        return TestClient(app, raise_server_exceptions=False)

    def test_unhandled_exception_becomes_500_envelope(self, failing_client):
        response = failing_client.get("/api/v1/explode")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] is True
        assert body["message"] == "database exploded"
        assert "RuntimeError" in body["stack"]

    def test_unhandled_message_hidden_in_production(self, failing_client, monkeypatch):
        monkeypatch.setattr(settings, "NODE_ENV", "production")

        body = failing_client.get("/api/v1/explode").json()

        assert body["message"] == "Internal Server Error"
        assert "stack" not in body

    def test_non_operational_error_hidden_in_production(self, failing_client, monkeypatch):
        monkeypatch.setattr(settings, "NODE_ENV", "production")

        response = failing_client.get("/api/v1/fault")

        assert response.status_code == 500
        assert response.json()["message"] == "Internal Server Error"

    def test_operational_error_message_kept_in_production(self, client, monkeypatch):
        monkeypatch.setattr(settings, "NODE_ENV", "production")

        body = client.get("/api/v1/neo/xyz").json()

        assert body["message"] == "Invalid NEO ID format. Must be numeric."
