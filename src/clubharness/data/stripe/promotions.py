"""Coupons and promotion codes for signup discount tests."""

import time
from typing import Any, Literal

import stripe
import structlog

from clubharness.config.settings import Settings, get_settings
from clubharness.data.stripe.client import call_stripe, find_price, is_missing, to_upstream
from clubharness.models.fixtures import PromotionCodeFixture

log = structlog.get_logger(__name__)


def unique_code(prefix: str) -> str:
    """Promotion code literal such as ``ANNUAL-123456``."""
    return f"{prefix}-{str(int(time.time() * 1000))[-6:]}"


def _coupon_id(promotion_code: Any) -> str | None:
    promotion = getattr(promotion_code, "promotion", None)
    coupon = getattr(promotion, "coupon", None) if promotion is not None else None
    if coupon is None:
        # Older API versions put the coupon on the promotion code itself
        coupon = getattr(promotion_code, "coupon", None)
    if coupon is None or isinstance(coupon, str):
        return coupon
    return str(coupon.id)


async def product_for_lookup(client: stripe.StripeClient, lookup_key: str) -> str:
    """Product id behind a price lookup key."""
    price = await find_price(client, lookup_key)
    product = price.product
    return product if isinstance(product, str) else product.id


async def deactivate_promotion_code(
    client: stripe.StripeClient, promotion_code_id: str, coupon_id: str | None
) -> None:
    """Deactivate a promotion code and delete its coupon.

    Missing objects are ignored so this can run more than once.
    """
    try:
        await client.v1.promotion_codes.update_async(
            promotion_code_id, params={"active": False}
        )
    except stripe.StripeError as e:
        if not is_missing(e):
            raise to_upstream(e) from e
    if coupon_id:
        try:
            await client.v1.coupons.delete_async(coupon_id)
        except stripe.StripeError as e:
            if not is_missing(e):
                raise to_upstream(e) from e


async def retire_promotion_code(client: stripe.StripeClient, code: str) -> int:
    """Retire leftovers of a fixed promotion code literal.

    A promotion code literal can only be active once, so fixed codes like the
    migration code must be retired before each suite recreates them.

    Returns:
        Number of promotion codes retired.
    """
    existing = await call_stripe(
        client.v1.promotion_codes.list_async(params={"code": code, "limit": 10})
    )
    retired = 0
    for promotion_code in existing.data:
        coupon_id = _coupon_id(promotion_code)
        if promotion_code.active:
            await call_stripe(
                client.v1.promotion_codes.update_async(
                    promotion_code.id, params={"active": False}
                )
            )
            retired += 1
        if coupon_id:
            try:
                await client.v1.coupons.delete_async(coupon_id)
            except stripe.StripeError as e:
                # Coupons shared by several codes may already be gone
                log.debug("stripe_coupon_delete_skipped", coupon_id=coupon_id, error=str(e))
    if retired:
        log.info("stripe_promotion_codes_retired", code=code, count=retired)
    return retired


async def create_promotion_code(
    client: stripe.StripeClient,
    code: str,
    *,
    percent_off: float,
    name: str,
    duration: Literal["once", "forever", "repeating"] = "once",
    products: list[str] | None = None,
    max_redemptions: int = 5,
) -> PromotionCodeFixture:
    """Create a percentage coupon and expose it under ``code``.

    Args:
        client: Stripe client.
        code: Customer-facing code literal.
        percent_off: Discount percentage.
        name: Coupon display name.
        duration: How long the discount applies.
        products: Restrict the coupon to these products.
        max_redemptions: Redemption cap of the promotion code.
    """
    coupon_params: dict[str, Any] = {
        "percent_off": percent_off,
        "duration": duration,
        "name": name,
    }
    if products:
        coupon_params["applies_to"] = {"products": products}
    coupon = await call_stripe(client.v1.coupons.create_async(params=coupon_params))

    promotion_code = await call_stripe(
        client.v1.promotion_codes.create_async(
            params={
                "promotion": {"type": "coupon", "coupon": coupon.id},
                "code": code,
                "max_redemptions": max_redemptions,
            }
        )
    )
    log.info("stripe_promotion_code_created", code=promotion_code.code)

    async def clean_up() -> None:
        await deactivate_promotion_code(client, promotion_code.id, coupon.id)

    return PromotionCodeFixture(
        code=promotion_code.code,
        promotion_code_id=promotion_code.id,
        coupon_id=coupon.id,
        clean_up=clean_up,
    )


async def create_migration_code(
    client: stripe.StripeClient, settings: Settings | None = None
) -> PromotionCodeFixture:
    """Recreate the dashboard migration code as a 100% first payment discount.

    Earlier runs' codes with the same literal are retired first.
    """
    settings = settings or get_settings()
    await retire_promotion_code(client, settings.migration_code)
    return await create_promotion_code(
        client,
        settings.migration_code,
        percent_off=100,
        name="Migration Discount",
    )
