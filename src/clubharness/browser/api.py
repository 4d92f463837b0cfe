"""Authenticated requests to the application API.

Requests carry the cookies of a Playwright browser context, so they run as
whichever user ``login_as_user`` installed on it.
"""

from typing import Any

import httpx
import structlog
from playwright.async_api import BrowserContext

from clubharness.config.settings import get_settings

log = structlog.get_logger(__name__)

API_TIMEOUT = 10.0


def cookie_header(cookies: list[Any]) -> str:
    """``Cookie`` header value for Playwright cookies."""
    return "; ".join(f"{cookie['name']}={cookie['value']}" for cookie in cookies)


class APIHelper:
    """Helper for API interactions as a signed-in browser user.

    Example:
        async with APIHelper(context) as api:
            response = await api.post("/api/workshops", json=workshop_api_payload())
            assert response.status_code == 201
    """

    def __init__(self, context: BrowserContext, base_url: str | None = None):
        self.context = context
        self.base_url = base_url or get_settings().app_base_url
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "APIHelper":
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=API_TIMEOUT,
            headers={"Content-Type": "application/json"},
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()

    @property
    def client(self) -> httpx.AsyncClient:
        if not self._client:
            raise RuntimeError("APIHelper must be used as async context manager")
        return self._client

    async def request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send a request with the context's current cookies.

        Cookies are read on every call so a later ``login_as_user`` on the
        same context takes effect.
        """
        cookies = await self.context.cookies()
        response = await self.client.request(
            method,
            url,
            json=json,
            params=params,
            headers={"cookie": cookie_header(cookies), **(headers or {})},
        )
        log.debug("api_request", method=method, url=url, status=response.status_code)
        return response

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def patch(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", url, **kwargs)
