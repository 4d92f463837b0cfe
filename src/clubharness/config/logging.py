"""Logging configuration using structlog.

Fixture code logs with ``structlog.get_logger(__name__)`` and snake_case
events. Harness logs end up in CI output next to test results, so values
under credential-like keys are masked before rendering.
"""

import logging
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog

from clubharness.config.settings import get_settings

REDACTED = "***"
SECRET_KEYS = frozenset(
    {
        "access_token",
        "refresh_token",
        "password",
        "service_role_key",
        "stripe_secret_key",
        "cookie_value",
    }
)
# Chatty transports used by the Supabase and Stripe clients
NOISY_LOGGERS = ("httpx", "httpcore", "hpack", "stripe")


def redact_secrets(
    _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Mask values logged under credential keys."""
    for key in SECRET_KEYS.intersection(event_dict):
        event_dict[key] = REDACTED
    return event_dict


def configure_logging() -> None:
    """Configure structlog for harness runs.

    ``DEBUG`` switches to the console renderer and lets the HTTP client
    loggers through; otherwise logs are JSON lines at ``LOG_LEVEL``.
    """
    settings = get_settings()
    log_level = getattr(logging, settings.log_level)

    renderer: Any = (
        structlog.dev.ConsoleRenderer()
        if settings.debug
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            redact_secrets,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.set_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(log_level if settings.debug else logging.WARNING)
