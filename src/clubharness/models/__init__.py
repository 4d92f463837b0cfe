"""Pydantic models for harness fixtures."""

from clubharness.models.fixtures import (
    CleanupFn,
    FixtureRow,
    PromotionCodeFixture,
    SubscriptionFixture,
)
from clubharness.models.identity import (
    InvitedIdentity,
    MemberIdentity,
    NextOfKin,
    PersonalDetails,
    RoleUsers,
    WaitlistedIdentity,
)

__all__ = [
    "CleanupFn",
    "FixtureRow",
    "InvitedIdentity",
    "MemberIdentity",
    "NextOfKin",
    "PersonalDetails",
    "PromotionCodeFixture",
    "RoleUsers",
    "SubscriptionFixture",
    "WaitlistedIdentity",
]
