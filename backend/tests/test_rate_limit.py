"""Tests for the rate limiting pure function and middleware integration."""

from fastapi.testclient import TestClient

from prompt_manager.backends import MemoryBackend
from prompt_manager.main import create_app
from prompt_manager.middleware.request_context import check_rate_limit, evict_stale
from tests.conftest import make_settings


class TestCheckRateLimit:
    """Unit tests for the pure function: no middleware, no HTTP."""

    def test_allows_within_limit(self):
        bucket: dict = {}
        allowed, retry = check_rate_limit(bucket, "client-a", max_per_minute=60, now=0.0)
        assert allowed is True
        assert retry == 0.0

    def test_denies_after_exhaustion(self):
        bucket: dict = {}
        for _ in range(60):
            check_rate_limit(bucket, "client-a", max_per_minute=60, now=0.0)

        allowed, retry = check_rate_limit(bucket, "client-a", max_per_minute=60, now=0.0)
        assert allowed is False
        assert retry > 0

    def test_refills_over_time(self):
        bucket: dict = {}
        for _ in range(60):
            check_rate_limit(bucket, "client-a", max_per_minute=60, now=0.0)

        # 2 seconds later: ~2 tokens back
        allowed, _ = check_rate_limit(bucket, "client-a", max_per_minute=60, now=2.0)
        assert allowed is True

    def test_separate_keys_independent(self):
        bucket: dict = {}
        for _ in range(60):
            check_rate_limit(bucket, "client-a", max_per_minute=60, now=0.0)

        allowed, _ = check_rate_limit(bucket, "client-b", max_per_minute=60, now=0.0)
        assert allowed is True

    def test_zero_limit_always_allows(self):
        bucket: dict = {}
        allowed, _ = check_rate_limit(bucket, "any", max_per_minute=0, now=0.0)
        assert allowed is True
        assert bucket == {}

    def test_evict_stale(self):
        bucket = {"old": (1.0, 0.0), "fresh": (1.0, 200.0)}
        assert evict_stale(bucket, now=250.0, max_age=120.0) == 1
        assert list(bucket) == ["fresh"]


class TestMiddleware:

    def test_limit_returns_429_with_retry_after(self):
        app = create_app(backend=MemoryBackend(), app_settings=make_settings(rate_limit_per_minute=2))
        with TestClient(app) as c:
            assert c.get("/api/items").status_code == 200
            assert c.get("/api/items").status_code == 200
            resp = c.get("/api/items")
        assert resp.status_code == 429
        assert resp.json()["error"] == "RATE_LIMITED"
        assert "retry-after" in resp.headers

    def test_health_is_exempt(self):
        app = create_app(backend=MemoryBackend(), app_settings=make_settings(rate_limit_per_minute=1))
        with TestClient(app) as c:
            statuses = {c.get("/health").status_code for _ in range(5)}
        assert statuses == {200}
