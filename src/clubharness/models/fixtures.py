"""Pydantic models for created fixture objects.

Every model carries a ``clean_up`` coroutine function that removes exactly
what was created. Cleanups tolerate the target already being gone, so they
can be called more than once.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

CleanupFn = Callable[[], Awaitable[None]]


async def _noop() -> None:
    return None


class FixtureRow(BaseModel):
    """A backend row created for a test.

    Attributes:
        table: Table the row was inserted into.
        row: Row as returned by the insert.
        clean_up: Deletes the row (and, for workshops, its registrations).

    Example:
        container = await builders.create_container(name="Rack", created_by=uid)
        ...
        await container.clean_up()
    """

    model_config = ConfigDict(frozen=True)

    table: str = Field(description="Table the row lives in")
    row: dict[str, Any] = Field(description="Inserted row")
    clean_up: CleanupFn = Field(default=_noop, exclude=True, repr=False)

    @property
    def id(self) -> str:
        return str(self.row["id"])

    def __getitem__(self, key: str) -> Any:
        return self.row[key]


class SubscriptionFixture(BaseModel):
    """A Stripe customer with a default SEPA method and subscriptions."""

    customer_id: str
    payment_method_id: str
    subscription_ids: list[str] = Field(default_factory=list)
    clean_up: CleanupFn = Field(default=_noop, exclude=True, repr=False)

    @property
    def subscription_id(self) -> str | None:
        """Most recently created subscription."""
        return self.subscription_ids[-1] if self.subscription_ids else None


class PromotionCodeFixture(BaseModel):
    """A Stripe coupon exposed through a customer-facing promotion code."""

    code: str
    promotion_code_id: str
    coupon_id: str
    clean_up: CleanupFn = Field(default=_noop, exclude=True, repr=False)
