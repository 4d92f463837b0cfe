"""Session injection into Playwright browser contexts.

The application's server hooks read the Supabase session from an
``sb-<project ref>-auth-token`` cookie holding ``base64-`` followed by the
base64 encoded session JSON. Installing that cookie before the first
navigation makes the browser act as the signed-in user without going
through the login page.
"""

import base64
from typing import Any
from urllib.parse import urlparse

import structlog
from playwright.async_api import BrowserContext
from supabase_auth.types import Session

from clubharness.config.settings import Settings
from clubharness.core.exceptions import ConfigurationError
from clubharness.data.supabase.client import ServiceClient, get_service_client

log = structlog.get_logger(__name__)

COOKIE_PREFIX = "base64-"
# Browsers cap cookies near 4096 bytes; Supabase SSR chunks above this
MAX_CHUNK_SIZE = 3180


def cookie_name_for_url(supabase_url: str | None) -> str:
    """Auth cookie name for a Supabase URL.

    The project ref is the leading label of the host, so
    ``https://abcd.supabase.co`` gives ``sb-abcd-auth-token`` and a local
    ``http://127.0.0.1:54321`` gives ``sb-127-auth-token``.

    Raises:
        ConfigurationError: If no project ref can be derived.
    """
    host = urlparse(supabase_url).hostname if supabase_url else None
    project_ref = host.split(".")[0] if host else ""
    if not project_ref:
        raise ConfigurationError("Could not extract project ref from SUPABASE_URL")
    return f"sb-{project_ref}-auth-token"


def encode_session(session: Session) -> str:
    """Cookie value for a session."""
    payload = session.model_dump_json().encode()
    return COOKIE_PREFIX + base64.b64encode(payload).decode("ascii")


def session_cookies(
    session: Session,
    *,
    name: str,
    domain: str,
    chunk_size: int = MAX_CHUNK_SIZE,
) -> list[dict[str, Any]]:
    """Cookies carrying ``session``, chunked as ``<name>.0``, ``<name>.1``... when long.

    Args:
        session: Session to encode.
        name: Base cookie name.
        domain: Cookie domain the application is served from.
        chunk_size: Longest value a single cookie may carry.
    """
    value = encode_session(session)
    if len(value) <= chunk_size:
        values = [(name, value)]
    else:
        values = [
            (f"{name}.{index}", value[start : start + chunk_size])
            for index, start in enumerate(range(0, len(value), chunk_size))
        ]
    return [
        {
            "name": cookie_name,
            "value": cookie_value,
            "domain": domain,
            "path": "/",
            "httpOnly": False,
            "secure": False,
            "sameSite": "Lax",
        }
        for cookie_name, cookie_value in values
    ]


async def login_as_user(
    context: BrowserContext,
    email: str,
    password: str | None = None,
    *,
    client: ServiceClient | None = None,
) -> Session:
    """Sign ``email`` in and install the session cookie on ``context``.

    Must run before the page navigates. There is no UI fallback: any
    sign-in or configuration failure raises.

    Args:
        context: Playwright browser context.
        email: Account to act as.
        password: Account password. Defaults to the shared test password.
        client: Service client. Defaults to the shared instance.

    Returns:
        The minted session.

    Raises:
        UpstreamError: If sign-in fails.
        ConfigurationError: If the cookie name cannot be derived.
    """
    client = client or await get_service_client()
    settings: Settings = client.settings
    name = cookie_name_for_url(settings.supabase_url)

    session = await client.sign_in_with_password(email, password)
    cookies = session_cookies(session, name=name, domain=settings.cookie_domain)
    await context.add_cookies(cookies)  # type: ignore[arg-type]

    log.info(
        "session_cookie_installed",
        user_id=session.user.id,
        cookie=name,
        chunks=len(cookies),
    )
    return session
