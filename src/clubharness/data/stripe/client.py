"""Stripe client construction and error translation."""

from collections.abc import Awaitable
from typing import TypeVar

import stripe
import structlog

from clubharness.config.settings import Settings, get_settings
from clubharness.core.exceptions import ConfigurationError, UpstreamError

log = structlog.get_logger(__name__)

SERVICE = "Stripe"

T = TypeVar("T")


def create_stripe_client(settings: Settings | None = None) -> stripe.StripeClient:
    """Create a Stripe client using the async-capable httpx transport.

    Raises:
        ConfigurationError: If STRIPE_SECRET_KEY is missing.
    """
    settings = settings or get_settings()
    key = settings.stripe_secret_key
    if key is None or not key.get_secret_value():
        raise ConfigurationError("Missing STRIPE_SECRET_KEY in environment variables")
    return stripe.StripeClient(key.get_secret_value(), http_client=stripe.HTTPXClient())


async def call_stripe(request: Awaitable[T]) -> T:
    """Await a Stripe request, translating Stripe errors.

    Raises:
        UpstreamError: With Stripe's message on rejection.
    """
    try:
        return await request
    except stripe.StripeError as e:
        raise to_upstream(e) from e


def to_upstream(error: stripe.StripeError) -> UpstreamError:
    return UpstreamError(
        SERVICE, error.user_message or str(error), getattr(error, "http_status", None)
    )


def is_missing(error: stripe.StripeError) -> bool:
    """Whether Stripe rejected a call because the object no longer exists."""
    return isinstance(error, stripe.InvalidRequestError) and error.code == "resource_missing"


async def find_price(client: stripe.StripeClient, lookup_key: str) -> stripe.Price:
    """Resolve a price by lookup key.

    Raises:
        UpstreamError: If no price carries the lookup key.
    """
    prices = await call_stripe(
        client.v1.prices.list_async(params={"lookup_keys": [lookup_key], "limit": 1})
    )
    if not prices.data:
        raise UpstreamError(SERVICE, f"No price found with lookup key: {lookup_key}")
    return prices.data[0]
