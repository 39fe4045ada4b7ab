"""structlog configuration.

Structured logs for request handling and the auth audit trail. A redaction
processor masks any value whose key looks like a credential, so a stray
``code=...`` or ``refresh_token=...`` keyword never reaches the sink.
"""

import logging
from typing import Any

import structlog

_SENSITIVE_KEY_PARTS = ("code", "token", "secret", "authorization", "password")

# Keys that contain a sensitive part but carry no secret
_SAFE_KEYS = frozenset({"status_code", "error_code"})


def _redact_secrets(
    _logger: Any, _method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Mask credential-like values in the event dict."""
    for key in list(event_dict):
        lower_key = key.lower()
        if lower_key in _SAFE_KEYS:
            continue
        if any(part in lower_key for part in _SENSITIVE_KEY_PARTS):
            event_dict[key] = "***"
    return event_dict


def configure_logging(level: str = "INFO", *, json_output: bool = False) -> None:
    """Configure stdlib logging and structlog.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR).
        json_output: Render JSON lines instead of the console format.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", level=log_level)

    renderer: Any = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _redact_secrets,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )
