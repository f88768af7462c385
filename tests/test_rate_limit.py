"""
Rate limiter tests with an in-memory Redis.
"""
import pytest
import redis
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from fencemark.core.security import create_access_token
from fencemark.middleware import rate_limit
from fencemark.middleware.rate_limit import RateLimitMiddleware, rate_limit_identifier


class BrokenRedis:
    def get(self, key):
        raise redis.ConnectionError("connection refused")


@pytest.fixture
def frozen_time(monkeypatch):
    now = {"value": 1_000.0}
    monkeypatch.setattr(rate_limit.time, "time", lambda: now["value"])
    return now


@pytest.fixture
def limited_app(monkeypatch, fake_redis):
    monkeypatch.setattr(rate_limit.settings, "RATE_LIMIT_BURST", 2)
    monkeypatch.setattr(rate_limit.settings, "RATE_LIMIT_PER_MINUTE", 60)

    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, redis_client=fake_redis)

    @app.get("/api/ping")
    def ping(request: Request):
        return {"bucket": rate_limit_identifier(request)}

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    return TestClient(app)


def make_limiter(redis_client, burst=3, per_minute=120):
    limiter = RateLimitMiddleware(FastAPI(), redis_client=redis_client)
    limiter.burst = burst
    limiter.rate_limit = per_minute
    return limiter


def test_bucket_allows_burst_then_refuses(fake_redis, frozen_time):
    limiter = make_limiter(fake_redis, burst=3)

    assert [limiter._check_rate_limit("org:acme")[0] for _ in range(3)] == [True, True, True]
    allowed, retry_after = limiter._check_rate_limit("org:acme")
    assert allowed is False
    # 120 per minute refills one token every half second
    assert retry_after == 1


def test_bucket_refills_over_time(fake_redis, frozen_time):
    limiter = make_limiter(fake_redis, burst=1)

    assert limiter._check_rate_limit("org:acme")[0] is True
    assert limiter._check_rate_limit("org:acme")[0] is False

    frozen_time["value"] += 1
    assert limiter._check_rate_limit("org:acme")[0] is True


def test_buckets_are_per_identifier(fake_redis, frozen_time):
    limiter = make_limiter(fake_redis, burst=1)

    assert limiter._check_rate_limit("org:acme")[0] is True
    assert limiter._check_rate_limit("org:acme")[0] is False
    assert limiter._check_rate_limit("org:birchwood")[0] is True


def test_redis_errors_allow_the_request():
    limiter = make_limiter(BrokenRedis())
    assert limiter._check_rate_limit("org:acme") == (True, 0)


def test_anonymous_requests_are_bucketed_by_address(limited_app):
    response = limited_app.get("/api/ping")
    assert response.json() == {"bucket": "ip:testclient"}


def test_tokens_are_bucketed_by_organization(limited_app):
    token = create_access_token({"sub": "user-1", "organization_id": "org-1"})
    response = limited_app.get("/api/ping", headers={"Authorization": f"Bearer {token}"})
    assert response.json() == {"bucket": "org:org-1"}


def test_invalid_token_falls_back_to_address(limited_app):
    response = limited_app.get("/api/ping", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.json() == {"bucket": "ip:testclient"}


def test_middleware_returns_429(limited_app, frozen_time):
    assert limited_app.get("/api/ping").status_code == 200
    assert limited_app.get("/api/ping").status_code == 200

    response = limited_app.get("/api/ping")
    assert response.status_code == 429
    assert response.json()["error"] == "Rate limit exceeded. Please try again later."
    assert response.headers["Retry-After"] == str(response.json()["retry_after"])


def test_health_is_not_limited(limited_app, frozen_time):
    for _ in range(5):
        assert limited_app.get("/health").status_code == 200
