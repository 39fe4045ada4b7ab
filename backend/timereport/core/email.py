"""Login code delivery via the Resend API.

Simple HTTP POST to Resend with a plain-text and an HTML body. Without a
RESEND_API_KEY, non-production environments log the code to the console
instead so local logins work without an email provider.
"""

import logging
from html import escape

import httpx

from timereport.core.config import settings
from timereport.core.otp import OTP_EXPIRY

logger = logging.getLogger(__name__)

_RESEND_API_URL = "https://api.resend.com/emails"
_RESEND_TIMEOUT = 10.0
_EXPIRY_MINUTES = int(OTP_EXPIRY.total_seconds() // 60)


def build_login_code_text(code: str) -> str:
    """Plain-text body of the login code email."""
    return (
        f"Your Time Report login code is: {code}\n\n"
        f"The code is valid for {_EXPIRY_MINUTES} minutes. "
        "If you didn't try to sign in, you can safely ignore this email."
    )


def build_login_code_html(code: str) -> str:
    """HTML body of the login code email."""
    safe_code = escape(code)
    return (
        '<!DOCTYPE html><html lang="en"><head><meta charset="UTF-8" />'
        "<title>Your login code</title></head>"
        '<body style="font-family:sans-serif;background:#f4f4f5;padding:40px 0;">'
        '<div style="max-width:440px;margin:0 auto;background:#fff;'
        'border-radius:12px;padding:32px;">'
        '<h1 style="font-size:20px;margin:0 0 16px;">Time Report</h1>'
        "<p>Use the code below to sign in:</p>"
        '<p style="font-size:32px;font-weight:700;letter-spacing:6px;'
        f'font-family:monospace;text-align:center;">{safe_code}</p>'
        f'<p style="color:#71717a;font-size:13px;">The code is valid for '
        f"{_EXPIRY_MINUTES} minutes.</p>"
        '<p style="color:#71717a;font-size:13px;">If you didn\'t try to sign in, '
        "you can safely ignore this email.</p>"
        "</div></body></html>"
    )


def _log_code_to_console(to_email: str, code: str) -> None:
    """Development fallback: print the login code to the log."""
    banner = "=" * 50
    logger.warning(
        "\n%s\nLOGIN CODE\n%s\nEmail: %s\nCode: %s\nValid for: %d minutes\n%s",
        banner,
        banner,
        to_email,
        code,
        _EXPIRY_MINUTES,
        banner,
    )


async def send_login_code_email(*, to_email: str, code: str) -> None:
    """Send a login code email via Resend.

    Delivery failures are logged and swallowed: requesting a code always
    succeeds from the client's point of view. The raw code is only ever
    logged by the non-production console fallback.

    Args:
        to_email: Recipient email address.
        code: Plain six-digit login code.
    """
    api_key = settings.resend_api_key.get_secret_value()
    if not api_key:
        if settings.is_production:
            logger.error("RESEND_API_KEY is not set; login code email not sent")
        else:
            _log_code_to_console(to_email, code)
        return

    try:
        async with httpx.AsyncClient() as client:
            resp = await client.post(
                _RESEND_API_URL,
                headers={"Authorization": f"Bearer {api_key}"},
                json={
                    "from": settings.email_from,
                    "to": to_email,
                    "subject": f"{code} is your Time Report login code",
                    "text": build_login_code_text(code),
                    "html": build_login_code_html(code),
                },
                timeout=_RESEND_TIMEOUT,
            )
            resp.raise_for_status()
    except httpx.HTTPError:
        logger.warning("Failed to send login code email", exc_info=True)
