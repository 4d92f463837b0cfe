"""Shared pytest fixtures for club harness tests.

This module provides fixtures for:
- Settings that never read the developer's .env
- Real supabase_auth Session objects
- Mocked service, Supabase and Stripe clients

Usage:
    @pytest.mark.unit
    async def test_something(mock_service_client, session_factory):
        mock_service_client.sign_in_with_password.return_value = session_factory()
"""

import os
from collections.abc import Callable, Generator
from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from supabase_auth.types import Session, User

from clubharness.config.settings import Settings, get_settings
from clubharness.data.supabase.client import ServiceClient

pytest_plugins = ["pytester"]

SUPABASE_URL = "http://127.0.0.1:54321"

# =============================================================================
# Environment Configuration
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment() -> Generator[None, None, None]:
    """Set up test environment variables.

    Backend credentials are left alone: live suites skip unless
    PUBLIC_SUPABASE_URL and SERVICE_ROLE_KEY are really configured.
    """
    original_env = os.environ.copy()

    os.environ.setdefault("LOG_LEVEL", "WARNING")
    os.environ.setdefault("DEBUG", "false")

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Settings for unit tests, independent of the environment."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        supabase_url=SUPABASE_URL,
        service_role_key="test-service-role-key",  # type: ignore[arg-type]
        stripe_secret_key="sk_test_123",  # type: ignore[arg-type]
    )


# =============================================================================
# Sessions
# =============================================================================


@pytest.fixture
def session_factory() -> Callable[..., Session]:
    """Build real Session objects."""

    def _make(
        user_id: str = "user-1",
        email: str = "member@test.com",
        access_token: str = "access-token",
        **user_fields: Any,
    ) -> Session:
        fields: dict[str, Any] = {
            "app_metadata": {"provider": "email"},
            "user_metadata": {},
            "aud": "authenticated",
            "created_at": datetime(2025, 1, 1, tzinfo=UTC),
            **user_fields,
        }
        user = User(id=user_id, email=email, **fields)
        return Session(
            access_token=access_token,
            refresh_token="refresh-token",
            expires_in=3600,
            token_type="bearer",
            user=user,
        )

    return _make


@pytest.fixture
def user_factory() -> Callable[..., User]:
    def _make(user_id: str = "user-1", email: str = "member@test.com") -> User:
        return User(
            id=user_id,
            app_metadata={},
            user_metadata={},
            aud="authenticated",
            email=email,
            created_at=datetime(2025, 1, 1, tzinfo=UTC),
        )

    return _make


# =============================================================================
# Mock Clients
# =============================================================================


@pytest.fixture
def mock_supabase_client() -> MagicMock:
    """Mock async Supabase client.

    Query builders chain back to the same mock; ``execute`` is awaitable.
    """
    mock = MagicMock()

    table_mock = MagicMock()
    table_mock.select = MagicMock(return_value=table_mock)
    table_mock.insert = MagicMock(return_value=table_mock)
    table_mock.update = MagicMock(return_value=table_mock)
    table_mock.delete = MagicMock(return_value=table_mock)
    table_mock.eq = MagicMock(return_value=table_mock)
    table_mock.neq = MagicMock(return_value=table_mock)
    table_mock.execute = AsyncMock(return_value=MagicMock(data=[]))

    mock.table = MagicMock(return_value=table_mock)
    mock.rpc = MagicMock(return_value=MagicMock(execute=AsyncMock(return_value=MagicMock(data=None))))

    mock.auth.admin.create_user = AsyncMock()
    mock.auth.admin.update_user_by_id = AsyncMock()
    mock.auth.admin.get_user_by_id = AsyncMock()
    mock.auth.admin.delete_user = AsyncMock(return_value=None)
    mock.auth.admin.list_users = AsyncMock(return_value=[])
    mock.auth.sign_in_with_password = AsyncMock()
    return mock


@pytest.fixture
def mock_service_client(settings: Settings, user_factory: Callable[..., User]) -> MagicMock:
    """Mock ServiceClient with every backend call awaitable."""
    client = MagicMock(spec=ServiceClient)
    client.settings = settings
    client.rpc = AsyncMock(return_value=None)
    client.insert_one = AsyncMock(side_effect=lambda table, record: {"id": f"{table}-1", **record})
    client.insert_many = AsyncMock(return_value=[])
    client.update_where = AsyncMock(return_value=[])
    client.delete_where = AsyncMock(return_value=1)
    client.select_where = AsyncMock(return_value=[])
    client.create_user = AsyncMock(return_value=user_factory())
    client.update_app_metadata = AsyncMock()
    client.delete_user = AsyncMock(return_value=True)
    client.list_users = AsyncMock(return_value=[])
    client.sign_in_with_password = AsyncMock()
    client.execute = AsyncMock()
    return client


@pytest.fixture
def mock_stripe_client() -> MagicMock:
    """Mock StripeClient exposing the ``v1`` async services used by fixtures."""
    mock = MagicMock()
    v1 = mock.v1
    v1.customers.create_async = AsyncMock(return_value=MagicMock(id="cus_123"))
    v1.customers.update_async = AsyncMock()
    v1.customers.delete_async = AsyncMock()
    v1.payment_methods.create_async = AsyncMock(return_value=MagicMock(id="pm_123"))
    v1.payment_methods.attach_async = AsyncMock()
    v1.prices.list_async = AsyncMock(return_value=MagicMock(data=[MagicMock(id="price_123", product="prod_123")]))
    v1.subscriptions.create_async = AsyncMock(return_value=MagicMock(id="sub_123"))
    v1.coupons.create_async = AsyncMock(return_value=MagicMock(id="coupon_123"))
    v1.coupons.delete_async = AsyncMock()
    v1.promotion_codes.create_async = AsyncMock(return_value=MagicMock(id="promo_123", code="ANNUAL-123456"))
    v1.promotion_codes.update_async = AsyncMock()
    v1.promotion_codes.list_async = AsyncMock(return_value=MagicMock(data=[]))
    return mock
