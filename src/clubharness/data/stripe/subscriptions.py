"""Stripe customers with default SEPA payment methods and subscriptions.

Mirrors what the signup flow leaves behind for a paying member: a customer,
a SEPA Direct Debit method set as the invoice default, and one subscription
per membership price.
"""

from typing import Any

import stripe
import structlog

from clubharness.config.settings import Settings, get_settings
from clubharness.data.stripe.client import (
    call_stripe,
    create_stripe_client,
    find_price,
    is_missing,
    to_upstream,
)
from clubharness.models.fixtures import SubscriptionFixture

log = structlog.get_logger(__name__)

# Stripe's documented test IBAN that succeeds immediately
TEST_IBAN = "IE29AIBK93115212345678"


async def delete_customer(client: stripe.StripeClient, customer_id: str) -> bool:
    """Delete a customer, cancelling its subscriptions.

    Returns:
        False if the customer was already gone, True otherwise.
    """
    try:
        await client.v1.customers.delete_async(customer_id)
    except stripe.StripeError as e:
        if is_missing(e):
            log.debug("stripe_customer_already_deleted", customer_id=customer_id)
            return False
        raise to_upstream(e) from e
    log.info("stripe_customer_deleted", customer_id=customer_id)
    return True


async def create_customer(
    client: stripe.StripeClient, email: str, **params: Any
) -> stripe.Customer:
    """Create a customer tagged as test data."""
    metadata = params.pop("metadata", None) or {"source": "test"}
    return await call_stripe(
        client.v1.customers.create_async(
            params={"email": email, "metadata": metadata, **params}
        )
    )


async def create_customer_with_subscription(
    email: str,
    *,
    client: stripe.StripeClient | None = None,
    settings: Settings | None = None,
    lookup_keys: list[str] | None = None,
) -> SubscriptionFixture:
    """Provision a paying customer.

    Args:
        email: Customer email.
        client: Stripe client, created from settings when omitted.
        settings: Settings holding the price lookup keys.
        lookup_keys: Prices to subscribe to. Defaults to the monthly
            membership fee followed by the annual fee.

    Raises:
        UpstreamError: If any Stripe call fails or a price is missing.
    """
    settings = settings or get_settings()
    client = client or create_stripe_client(settings)
    if lookup_keys is None:
        lookup_keys = [settings.membership_fee_lookup_name, settings.annual_fee_lookup]

    customer = await create_customer(client, email)

    payment_method = await call_stripe(
        client.v1.payment_methods.create_async(
            params={
                "type": "sepa_debit",
                "sepa_debit": {"iban": TEST_IBAN},
                "billing_details": {"email": email, "name": "Test User"},
            }
        )
    )
    await call_stripe(
        client.v1.payment_methods.attach_async(
            payment_method.id, params={"customer": customer.id}
        )
    )
    await call_stripe(
        client.v1.customers.update_async(
            customer.id,
            params={"invoice_settings": {"default_payment_method": payment_method.id}},
        )
    )

    subscription_ids: list[str] = []
    for lookup_key in lookup_keys:
        price = await find_price(client, lookup_key)
        subscription = await call_stripe(
            client.v1.subscriptions.create_async(
                params={
                    "customer": customer.id,
                    "items": [{"price": price.id}],
                    "default_payment_method": payment_method.id,
                    "expand": ["latest_invoice.payments"],
                }
            )
        )
        subscription_ids.append(subscription.id)

    log.info(
        "stripe_subscription_created",
        customer_id=customer.id,
        subscriptions=len(subscription_ids),
    )

    async def clean_up() -> None:
        await delete_customer(client, customer.id)

    return SubscriptionFixture(
        customer_id=customer.id,
        payment_method_id=payment_method.id,
        subscription_ids=subscription_ids,
        clean_up=clean_up,
    )


async def create_pending_subscriptions(
    client: stripe.StripeClient,
    customer_id: str,
    settings: Settings | None = None,
) -> tuple[stripe.Subscription, stripe.Subscription]:
    """Create the incomplete monthly and annual subscriptions of an invitee.

    Invitees have not paid yet, so both subscriptions wait for a SEPA
    payment and are anchored like the production signup: monthly on the
    1st, annual on the 7th of January.
    """
    settings = settings or get_settings()
    monthly_price = await find_price(client, settings.membership_fee_lookup_name)
    annual_price = await find_price(client, settings.annual_fee_lookup)
    common: dict[str, Any] = {
        "customer": customer_id,
        "payment_behavior": "default_incomplete",
        "payment_settings": {"payment_method_types": ["sepa_debit"]},
        "expand": ["latest_invoice.payments"],
        "collection_method": "charge_automatically",
    }
    monthly = await call_stripe(
        client.v1.subscriptions.create_async(
            params={
                **common,
                "items": [{"price": monthly_price.id}],
                "billing_cycle_anchor_config": {"day_of_month": 1},
            }
        )
    )
    annual = await call_stripe(
        client.v1.subscriptions.create_async(
            params={
                **common,
                "items": [{"price": annual_price.id}],
                "billing_cycle_anchor_config": {"month": 1, "day_of_month": 7},
            }
        )
    )
    return monthly, annual
