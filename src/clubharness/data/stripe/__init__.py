"""Stripe test-mode fixtures."""

from clubharness.data.stripe.client import call_stripe, create_stripe_client, find_price
from clubharness.data.stripe.promotions import (
    create_migration_code,
    create_promotion_code,
    product_for_lookup,
    retire_promotion_code,
    unique_code,
)
from clubharness.data.stripe.subscriptions import (
    TEST_IBAN,
    create_customer,
    create_customer_with_subscription,
    create_pending_subscriptions,
    delete_customer,
)

__all__ = [
    "TEST_IBAN",
    "call_stripe",
    "create_customer",
    "create_customer_with_subscription",
    "create_migration_code",
    "create_promotion_code",
    "create_pending_subscriptions",
    "create_stripe_client",
    "delete_customer",
    "find_price",
    "product_for_lookup",
    "retire_promotion_code",
    "unique_code",
]
