"""pytest fixtures for end-to-end suites.

Registered through the ``pytest11`` entry point, so installing the package
is enough to use them:

    @pytest.mark.e2e
    @pytest.mark.asyncio
    async def test_admin_dashboard(member, login_as, harness_page):
        admin = await member(roles={"admin"})
        await login_as(admin.email)
        await harness_page.goto("/dashboard")

Every fixture created through ``member`` or registered on
``resource_registry`` is cleaned up after the test, most recent first.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any

import pytest
import pytest_asyncio
from playwright.async_api import BrowserContext, Page, async_playwright
from supabase_auth.types import Session

from clubharness.browser.session import login_as_user
from clubharness.config.logging import configure_logging
from clubharness.config.settings import Settings, get_settings
from clubharness.data.supabase.client import ServiceClient, create_service_client
from clubharness.fixtures.builders import DomainBuilders
from clubharness.fixtures.identity import IdentityFactory
from clubharness.fixtures.registry import ResourceRegistry
from clubharness.models.identity import MemberIdentity

MemberFactory = Callable[..., Awaitable[MemberIdentity]]
LoginAs = Callable[..., Awaitable[Session]]


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "unit: Unit tests (fast, no external dependencies)")
    config.addinivalue_line("markers", "integration: Tests against a live Supabase backend")
    config.addinivalue_line("markers", "e2e: Browser tests against the running application")


# =============================================================================
# Configuration
# =============================================================================


@pytest.fixture(scope="session")
def harness_settings() -> Settings:
    """Settings for the run, with logging configured from them."""
    configure_logging()
    return get_settings()


# =============================================================================
# Backend
# =============================================================================


@pytest_asyncio.fixture
async def service_client(harness_settings: Settings) -> AsyncGenerator[ServiceClient, None]:
    """Connected service-role client for one test.

    Skips the test when the backend is not configured.
    """
    if not harness_settings.supabase_url or harness_settings.service_role_key is None:
        pytest.skip("PUBLIC_SUPABASE_URL and SERVICE_ROLE_KEY are not configured")
    client = await create_service_client(harness_settings)
    yield client
    await client.disconnect()


@pytest_asyncio.fixture
async def resource_registry(
    service_client: ServiceClient,
) -> AsyncGenerator[ResourceRegistry, None]:
    """Registry whose cleanups run after the test, most recent first.

    Depends on ``service_client`` so teardown always runs while the client
    is still connected, whatever order a test requests fixtures in.
    """
    async with ResourceRegistry() as registry:
        yield registry


@pytest.fixture
def identity_factory(service_client: ServiceClient) -> IdentityFactory:
    return IdentityFactory(service_client)


@pytest.fixture
def domain_builders(
    service_client: ServiceClient, identity_factory: IdentityFactory
) -> DomainBuilders:
    return DomainBuilders(service_client, identity_factory)


@pytest.fixture
def member(
    identity_factory: IdentityFactory, resource_registry: ResourceRegistry
) -> MemberFactory:
    """Create members that are cleaned up after the test.

    Accepts the keyword arguments of ``IdentityFactory.create_member``.
    """

    async def _create(**kwargs: Any) -> MemberIdentity:
        identity = await identity_factory.create_member(**kwargs)
        return resource_registry.track(f"member:{identity.email}", identity)

    return _create


# =============================================================================
# Browser
# =============================================================================


@pytest_asyncio.fixture
async def harness_context(harness_settings: Settings) -> AsyncGenerator[BrowserContext, None]:
    """Headless Chromium context pointed at the application."""
    async with async_playwright() as playwright:
        browser = await playwright.chromium.launch()
        context = await browser.new_context(base_url=harness_settings.app_base_url)
        yield context
        await context.close()
        await browser.close()


@pytest_asyncio.fixture
async def harness_page(harness_context: BrowserContext) -> Page:
    return await harness_context.new_page()


@pytest.fixture
def login_as(harness_context: BrowserContext, service_client: ServiceClient) -> LoginAs:
    """Install a signed-in session for an email on ``harness_context``."""

    async def _login(email: str, password: str | None = None) -> Session:
        return await login_as_user(harness_context, email, password, client=service_client)

    return _login
