"""Tests for rate limiting functionality."""

from unittest.mock import Mock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from gobiz_proxy.rl import (
    MemoryBackend,
    RateLimitConfig,
    RateLimitConfigurationError,
    RateLimitMiddleware,
    RateLimiter,
    RatePolicy,
    build_rl_key,
    client_ip,
    create_rate_limiter,
)


def _request(forwarded=None, peer="10.0.0.1"):
    request = Mock()
    request.client = Mock(host=peer)
    request.headers = {"x-forwarded-for": forwarded} if forwarded else {}
    return request


class TestRateLimitKey:
    """Test rate limiting key generation and client resolution."""

    def test_build_rl_key_normalization(self):
        assert build_rl_key(client_id=" 203.0.113.7 ") == "rl:client:203.0.113.7"
        assert build_rl_key(client_id="a|b") == "rl:client:a_b"

    def test_client_ip_without_forwarding(self):
        assert client_ip(_request(), trusted_hops=1) == "10.0.0.1"

    def test_client_ip_one_trusted_hop(self):
        request = _request(forwarded="198.51.100.2, 203.0.113.7")
        assert client_ip(request, trusted_hops=1) == "203.0.113.7"

    def test_client_ip_two_trusted_hops(self):
        request = _request(forwarded="198.51.100.2, 203.0.113.7")
        assert client_ip(request, trusted_hops=2) == "198.51.100.2"

    def test_client_ip_ignores_header_when_untrusted(self):
        request = _request(forwarded="198.51.100.2")
        assert client_ip(request, trusted_hops=0) == "10.0.0.1"

    def test_client_ip_more_hops_than_chain(self):
        request = _request(forwarded="198.51.100.2")
        assert client_ip(request, trusted_hops=5) == "198.51.100.2"


class TestMemoryBackend:
    """Test memory backend functionality."""

    def test_memory_backend_multiple_increments(self):
        backend = MemoryBackend()

        count1, ttl1 = backend.incr_and_get("test_key", 60)
        count2, ttl2 = backend.incr_and_get("test_key", 60)

        assert count1 == 1
        assert count2 == 2
        assert 0 < ttl1 <= 60
        assert abs(ttl1 - ttl2) <= 2

    def test_memory_backend_different_keys(self):
        backend = MemoryBackend()

        assert backend.incr_and_get("key1", 60)[0] == 1
        assert backend.incr_and_get("key2", 60)[0] == 1

    def test_memory_backend_window_separation(self):
        backend = MemoryBackend()

        with patch('time.time') as mock_time:
            mock_time.return_value = 30
            count1, ttl = backend.incr_and_get("test_key", 60)
            assert count1 == 1
            assert ttl == 30

            mock_time.return_value = 90
            count2, _ = backend.incr_and_get("test_key", 60)
            assert count2 == 1


class TestRateLimiter:
    """Test rate limiter functionality."""

    def test_blocks_over_limit(self):
        limiter = RateLimiter(MemoryBackend(), RatePolicy(limit=3, window_seconds=60))

        decisions = [limiter.check_and_consume("k") for _ in range(4)]

        assert [d.allowed for d in decisions] == [True, True, True, False]
        assert [d.remaining for d in decisions] == [2, 1, 0, 0]
        assert 0 < decisions[-1].reset_after <= 60

    def test_decision_headers(self):
        limiter = RateLimiter(MemoryBackend(), RatePolicy(limit=5, window_seconds=60))

        headers = limiter.check_and_consume("k").headers()

        assert headers["RateLimit-Limit"] == "5"
        assert headers["RateLimit-Remaining"] == "4"
        assert int(headers["RateLimit-Reset"]) > 0


class TestRateLimitConfig:

    def test_disabled_returns_none(self):
        assert create_rate_limiter(RateLimitConfig(enabled=False)) is None

    def test_policy_from_config(self):
        limiter = create_rate_limiter(RateLimitConfig(limit=7, window_seconds=30))

        assert limiter.policy.limit == 7
        assert limiter.policy.window_seconds == 30

    def test_unknown_backend(self):
        with pytest.raises(RateLimitConfigurationError):
            create_rate_limiter(RateLimitConfig(backend="redis"))


class TestRateLimitMiddleware:

    @pytest.fixture
    def limited_app(self):
        app = FastAPI()
        limiter = RateLimiter(MemoryBackend(), RatePolicy(limit=2, window_seconds=60))
        app.add_middleware(RateLimitMiddleware, limiter=limiter, trusted_hops=1)

        @app.post("/api/otp/request")
        async def endpoint():
            return {"ok": True}

        return app

    def test_third_request_is_rejected(self, limited_app):
        with TestClient(limited_app) as client:
            first = client.post("/api/otp/request")
            second = client.post("/api/otp/request")
            third = client.post("/api/otp/request")

        assert first.status_code == 200
        assert first.headers["RateLimit-Remaining"] == "1"
        assert second.status_code == 200
        assert third.status_code == 429
        assert third.json()["error"] == "RATE_LIMITED"
        assert int(third.headers["Retry-After"]) > 0

    def test_clients_are_counted_separately(self, limited_app):
        with TestClient(limited_app) as client:
            for _ in range(2):
                client.post("/api/otp/request", headers={"X-Forwarded-For": "198.51.100.1"})
            blocked = client.post("/api/otp/request", headers={"X-Forwarded-For": "198.51.100.1"})
            other = client.post("/api/otp/request", headers={"X-Forwarded-For": "198.51.100.2"})

        assert blocked.status_code == 429
        assert other.status_code == 200
