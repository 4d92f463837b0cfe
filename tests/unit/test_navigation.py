"""Tests for navigation retries on the error page."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from clubharness.browser.navigation import goto_with_retry, shows_error_page
from clubharness.core.exceptions import NavigationError

pytestmark = pytest.mark.unit


def _page(error_visible: list[bool]) -> MagicMock:
    page = MagicMock()
    page.goto = AsyncMock(return_value=MagicMock(status=200))
    page.get_by_text.return_value.is_visible = AsyncMock(side_effect=error_visible)
    return page


async def test_first_attempt_succeeds() -> None:
    page = _page([False])

    response = await goto_with_retry(page, "/dashboard", wait=0)

    assert response.status == 200
    page.goto.assert_awaited_once_with("/dashboard")
    page.get_by_text.assert_called_with("Internal Error")


async def test_retries_until_page_renders() -> None:
    """
    Given: The error page renders twice, then the real page
    When: goto_with_retry() is called
    Then: Navigation happens three times and succeeds
    """
    page = _page([True, True, False])

    await goto_with_retry(page, "/dashboard/members", wait=0)

    assert page.goto.await_count == 3


async def test_gives_up_after_attempts() -> None:
    page = _page([True, True, True])

    with pytest.raises(NavigationError) as exc_info:
        await goto_with_retry(page, "/dashboard/members", attempts=3, wait=0)

    assert exc_info.value.attempts == 3
    assert page.goto.await_count == 3


async def test_visibility_check_failure_counts_as_no_error() -> None:
    page = MagicMock()
    page.get_by_text.return_value.is_visible = AsyncMock(side_effect=RuntimeError("detached"))

    assert await shows_error_page(page) is False
