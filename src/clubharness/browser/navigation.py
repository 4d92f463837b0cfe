"""Navigation that retries while the application renders its error page."""

from typing import Any

import structlog
from playwright.async_api import Page
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from clubharness.core.exceptions import NavigationError

log = structlog.get_logger(__name__)

ERROR_PAGE_TEXT = "Internal Error"
MAX_ATTEMPTS = 10
RETRY_WAIT_SECONDS = 0.5


async def shows_error_page(page: Page, error_text: str = ERROR_PAGE_TEXT) -> bool:
    try:
        return await page.get_by_text(error_text).is_visible()
    except Exception as e:
        log.debug("error_page_check_failed", error=str(e))
        return False


async def goto_with_retry(
    page: Page,
    url: str,
    *,
    attempts: int = MAX_ATTEMPTS,
    wait: float = RETRY_WAIT_SECONDS,
    error_text: str = ERROR_PAGE_TEXT,
) -> Any:
    """Navigate to ``url``, reloading while the error page is shown.

    Freshly seeded data can race the application's first query, which
    surfaces as the generic error page.

    Returns:
        The Playwright response of the successful navigation.

    Raises:
        NavigationError: If every attempt rendered the error page.
    """
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_fixed(wait),
        retry=retry_if_exception_type(NavigationError),
        reraise=True,
    ):
        with attempt:
            number = attempt.retry_state.attempt_number
            response = await page.goto(url)
            if await shows_error_page(page, error_text):
                log.warning("error_page_rendered", url=url, attempt=number)
                raise NavigationError(url, number)
            return response
    return None
