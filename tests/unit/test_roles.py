"""Tests for the baseline role rule."""

import pytest

from clubharness.core.roles import (
    BASELINE_ROLE,
    Role,
    claim_roles,
    grantable_roles,
    normalize_roles,
)

pytestmark = pytest.mark.unit


class TestGrantableRoles:
    def test_baseline_removed(self) -> None:
        """
        Given: Requested roles including member
        When: grantable_roles is computed
        Then: member is not stored as a grant
        """
        assert grantable_roles({"admin", "member"}) == {Role.ADMIN}

    def test_member_only_needs_no_rows(self) -> None:
        assert grantable_roles({"member"}) == frozenset()

    def test_coach_is_grantable(self) -> None:
        assert grantable_roles(["coach"]) == {Role.COACH}


class TestClaimRoles:
    def test_baseline_always_present(self) -> None:
        assert claim_roles({"workshop_coordinator"}) == ["member", "workshop_coordinator"]

    def test_sorted_and_deduplicated(self) -> None:
        assert claim_roles(["quartermaster", "admin", "member", "admin"]) == [
            "admin",
            "member",
            "quartermaster",
        ]

    def test_stored_plus_baseline_equals_claims(self) -> None:
        requested = {"admin", "president", "member"}

        stored = grantable_roles(requested)

        assert set(claim_roles(requested)) == {str(role) for role in stored} | {str(BASELINE_ROLE)}


def test_unknown_role_rejected() -> None:
    with pytest.raises(ValueError):
        normalize_roles({"superuser"})
