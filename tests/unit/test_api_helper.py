"""Tests for authenticated application API requests."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import respx

from clubharness.browser.api import APIHelper, cookie_header

pytestmark = pytest.mark.unit

BASE_URL = "http://localhost:5173"


@pytest.fixture
def context() -> MagicMock:
    context = MagicMock()
    context.cookies = AsyncMock(
        return_value=[
            {"name": "sb-127-auth-token", "value": "base64-abc"},
            {"name": "theme", "value": "dark"},
        ]
    )
    return context


def test_cookie_header() -> None:
    assert cookie_header([{"name": "a", "value": "1"}, {"name": "b", "value": "2"}]) == "a=1; b=2"


@respx.mock
async def test_request_carries_context_cookies(context: MagicMock) -> None:
    """
    Given: A browser context holding the session cookie
    When: A POST is sent through APIHelper
    Then: The request carries the context's cookies and a JSON body
    """
    route = respx.post(f"{BASE_URL}/api/workshops").mock(
        return_value=httpx.Response(201, json={"success": True})
    )

    async with APIHelper(context, base_url=BASE_URL) as api:
        response = await api.post("/api/workshops", json={"title": "Intro"})

    assert response.status_code == 201
    request = route.calls.last.request
    assert request.headers["cookie"] == "sb-127-auth-token=base64-abc; theme=dark"
    assert request.headers["content-type"] == "application/json"
    assert request.content == b'{"title":"Intro"}'


@respx.mock
async def test_query_params(context: MagicMock) -> None:
    route = respx.get(f"{BASE_URL}/api/members").mock(return_value=httpx.Response(200, json=[]))

    async with APIHelper(context, base_url=BASE_URL) as api:
        await api.get("/api/members", params={"page": 2, "q": "byrne"})

    assert route.calls.last.request.url.params["page"] == "2"
    assert route.calls.last.request.url.params["q"] == "byrne"


@respx.mock
async def test_cookies_read_per_request(context: MagicMock) -> None:
    respx.delete(f"{BASE_URL}/api/workshops/w-1").mock(return_value=httpx.Response(204))
    respx.put(f"{BASE_URL}/api/workshops/w-1").mock(return_value=httpx.Response(200))

    async with APIHelper(context, base_url=BASE_URL) as api:
        await api.put("/api/workshops/w-1", json={})
        await api.delete("/api/workshops/w-1")

    assert context.cookies.await_count == 2


async def test_requires_context_manager(context: MagicMock) -> None:
    api = APIHelper(context, base_url=BASE_URL)

    with pytest.raises(RuntimeError, match="async context manager"):
        _ = api.client


def test_default_base_url(context: MagicMock) -> None:
    assert APIHelper(context).base_url == "http://localhost:5173"
