"""
Unit tests for the fixed-window rate limiter.
"""

import pytest

from app.services.rate_limiter import FixedWindowRateLimiter, UNKNOWN_CLIENT


class TestFixedWindowRateLimiter:
    @pytest.fixture
    def limiter(self, clock):
        return FixedWindowRateLimiter(max_requests=3, window_seconds=60)

    def test_nth_request_allowed_next_rejected(self, limiter):
        decisions = [limiter.check("10.0.0.1") for _ in range(4)]

        assert [d.allowed for d in decisions] == [True, True, True, False]
        assert [d.remaining for d in decisions] == [2, 1, 0, 0]
        assert all(d.limit == 3 for d in decisions)

    def test_window_resets_after_elapsed(self, limiter, clock):
        for _ in range(4):
            limiter.check("10.0.0.1")
        assert limiter.check("10.0.0.1").allowed is False

        clock.advance(60)
        decision = limiter.check("10.0.0.1")
        assert decision.allowed is True
        assert decision.remaining == 2

    def test_clients_are_isolated(self, limiter):
        for _ in range(4):
            limiter.check("10.0.0.1")
        assert limiter.check("10.0.0.2").allowed is True

    def test_missing_client_shares_unknown_bucket(self, limiter):
        limiter.check(None)
        limiter.check("")
        decision = limiter.check(None)
        assert decision.remaining == 0
        assert limiter.check(UNKNOWN_CLIENT).allowed is False

    def test_retry_after_counts_down(self, limiter, clock):
        for _ in range(4):
            limiter.check("10.0.0.1")
        clock.advance(20.5)
        decision = limiter.check("10.0.0.1")
        assert decision.allowed is False
        assert decision.retry_after == 40

    def test_reset_clears_every_window(self, limiter):
        for _ in range(4):
            limiter.check("10.0.0.1")

        limiter.reset()

        assert limiter.check("10.0.0.1").remaining == 2

    def test_headers(self, limiter, clock):
        decision = limiter.check("10.0.0.1")
        headers = decision.headers()
        assert headers["X-RateLimit-Limit"] == "3"
        assert headers["X-RateLimit-Remaining"] == "2"
        assert headers["X-RateLimit-Reset"].endswith("Z")
        assert decision.reset_at == clock.now + 60
