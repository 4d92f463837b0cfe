"""Browser-side helpers: session injection, authenticated API calls, navigation."""

from clubharness.browser.api import APIHelper
from clubharness.browser.navigation import goto_with_retry
from clubharness.browser.session import (
    cookie_name_for_url,
    encode_session,
    login_as_user,
    session_cookies,
)

__all__ = [
    "APIHelper",
    "cookie_name_for_url",
    "encode_session",
    "goto_with_retry",
    "login_as_user",
    "session_cookies",
]
