"""Tests for login code email delivery."""

import json
import logging

import httpx
import pytest
from pydantic import SecretStr

from timereport.core import email as email_module
from timereport.core.config import settings
from timereport.core.email import (
    build_login_code_html,
    build_login_code_text,
    send_login_code_email,
)


@pytest.fixture
def resend(monkeypatch: pytest.MonkeyPatch):
    """Route Resend calls to an in-memory transport; collect requests."""
    requests: list[httpx.Request] = []
    status = {"code": 200}

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status["code"], json={"id": "email-1"})

    real_client = httpx.AsyncClient

    def client_factory(**kwargs) -> httpx.AsyncClient:
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(email_module.httpx, "AsyncClient", client_factory)
    monkeypatch.setattr(settings, "resend_api_key", SecretStr("re_test_key"))
    return requests, status


class TestBodies:
    """Test the email bodies."""

    def test_text_contains_code(self):
        assert "482913" in build_login_code_text("482913")

    def test_html_escapes_code(self):
        assert "<b>" not in build_login_code_html("<b>")


class TestSendLoginCodeEmail:
    """Test send_login_code_email()."""

    async def test_posts_to_resend(self, resend):
        requests, _ = resend

        await send_login_code_email(to_email="user@example.com", code="482913")

        [request] = requests
        assert str(request.url) == "https://api.resend.com/emails"
        assert request.headers["Authorization"] == "Bearer re_test_key"
        payload = json.loads(request.content)
        assert payload["to"] == "user@example.com"
        assert payload["from"] == settings.email_from
        assert "482913" in payload["subject"]

    async def test_provider_error_is_logged_not_raised(
        self, resend, caplog: pytest.LogCaptureFixture
    ):
        _, status = resend
        status["code"] = 503

        with caplog.at_level(logging.WARNING):
            await send_login_code_email(to_email="user@example.com", code="482913")

        assert "Failed to send login code email" in caplog.text

    async def test_without_key_logs_code_in_development(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ):
        monkeypatch.setattr(settings, "resend_api_key", SecretStr(""))
        monkeypatch.setattr(settings, "environment", "development")

        with caplog.at_level(logging.WARNING):
            await send_login_code_email(to_email="user@example.com", code="482913")

        assert "482913" in caplog.text

    async def test_without_key_never_logs_code_in_production(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ):
        monkeypatch.setattr(settings, "resend_api_key", SecretStr(""))
        monkeypatch.setattr(settings, "environment", "production")

        with caplog.at_level(logging.WARNING):
            await send_login_code_email(to_email="user@example.com", code="482913")

        assert "482913" not in caplog.text
        assert "RESEND_API_KEY is not set" in caplog.text
