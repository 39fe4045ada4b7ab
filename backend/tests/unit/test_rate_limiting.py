"""Tests for login endpoint rate limiting."""

import pytest
from httpx import AsyncClient

from tests.conftest import create_test_access_token
from timereport.core.config import settings
from timereport.core.rate_limiting import _rate_limit_key_func, limiter


@pytest.fixture
def rate_limited():
    """Enable the limiter with empty counters for one test."""
    limiter.reset()
    limiter.enabled = True
    yield
    limiter.reset()


class _FakeRequest:
    def __init__(self, cookies: dict[str, str]) -> None:
        self.cookies = cookies
        self.client = type("Client", (), {"host": "203.0.113.7"})()
        self.headers: dict[str, str] = {}


class TestKeyFunc:
    """Test _rate_limit_key_func()."""

    def test_anonymous_keyed_by_ip(self):
        assert _rate_limit_key_func(_FakeRequest({})) == "unauth:203.0.113.7"

    def test_valid_token_keyed_by_user(self):
        request = _FakeRequest(
            {settings.access_cookie_name: create_test_access_token()}
        )
        assert _rate_limit_key_func(request).startswith("user:")

    def test_invalid_token_falls_back_to_ip(self):
        request = _FakeRequest({settings.access_cookie_name: "garbage"})
        assert _rate_limit_key_func(request) == "unauth:203.0.113.7"


class TestRequestOtpLimit:
    """Requesting codes is capped per client."""

    async def test_returns_429_when_exceeded(
        self, unauthenticated_client: AsyncClient, rate_limited
    ):
        allowed = int(settings.rate_limit_request_otp.split("/")[0])
        for _ in range(allowed):
            response = await unauthenticated_client.post(
                "/api/v1/auth/request-otp", json={"email": "user@example.com"}
            )
            assert response.status_code == 200

        response = await unauthenticated_client.post(
            "/api/v1/auth/request-otp", json={"email": "user@example.com"}
        )

        assert response.status_code == 429
        assert response.json()["error"]["code"] == "RATE_LIMITED"
        assert "Retry-After" in response.headers
