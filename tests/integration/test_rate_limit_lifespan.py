import pytest
from fastapi.testclient import TestClient
from fastapi_limiter import FastAPILimiter

from boutique.app_setup.factory import create_app


@pytest.fixture()
def fake_redis_env(monkeypatch):
    monkeypatch.setenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "0")
    monkeypatch.setenv("USE_FAKE_REDIS_FOR_TESTS", "1")
    monkeypatch.delenv("LOCAL_RATE_LIMIT_FALLBACK", raising=False)
    # Le limiter est un état de classe: remis à None après le test
    monkeypatch.setattr(FastAPILimiter, "redis", None)


def test_lifespan_initialises_limiter_on_fake_redis(fake_redis_env):
    with TestClient(create_app()) as c:
        assert c.app.state.rate_limit_enabled is True
        info = c.get("/health/config").json()["rateLimit"]
        assert info == {"enabled": True, "ready": True, "backend": "redis"}


def test_checkout_session_is_limited_through_redis(fake_redis_env):
    with TestClient(create_app()) as c:
        codes = [c.post("/api/v1/payments/checkout-session", json={}).status_code for _ in range(11)]
    assert codes[:10] == [400] * 10
    assert codes[10] == 429


def test_unreachable_redis_disables_limiting(monkeypatch):
    monkeypatch.setenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "0")
    monkeypatch.delenv("USE_FAKE_REDIS_FOR_TESTS", raising=False)
    monkeypatch.delenv("LOCAL_RATE_LIMIT_FALLBACK", raising=False)
    monkeypatch.setenv("RATE_LIMIT_REDIS_URL", "redis://127.0.0.1:1/0")
    monkeypatch.setattr(FastAPILimiter, "redis", None)
    with TestClient(create_app()) as c:
        assert c.app.state.rate_limit_enabled is False
        assert c.post("/api/v1/payments/checkout-session", json={}).status_code == 400
