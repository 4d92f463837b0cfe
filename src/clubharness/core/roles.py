"""Role labels and the baseline-role rule.

Every fully onboarded member implicitly holds the ``member`` role. The
backend never stores it as a ``user_roles`` row, so fixture code must strip
it before inserting grants while still mirroring it into token claims.
"""

from collections.abc import Iterable
from enum import StrEnum


class Role(StrEnum):
    """Role labels known to the backend's ``role_type`` enum."""

    ADMIN = "admin"
    PRESIDENT = "president"
    TREASURER = "treasurer"
    COMMITTEE_COORDINATOR = "committee_coordinator"
    SPARRING_COORDINATOR = "sparring_coordinator"
    WORKSHOP_COORDINATOR = "workshop_coordinator"
    BEGINNERS_COORDINATOR = "beginners_coordinator"
    QUARTERMASTER = "quartermaster"
    PR_MANAGER = "pr_manager"
    VOLUNTEER_COORDINATOR = "volunteer_coordinator"
    RESEARCH_COORDINATOR = "research_coordinator"
    COACH = "coach"
    MEMBER = "member"


BASELINE_ROLE = Role.MEMBER


def normalize_roles(roles: Iterable[str]) -> frozenset[Role]:
    """Convert role labels to Role members.

    Raises:
        ValueError: If a label is not a known role.
    """
    return frozenset(Role(role) for role in roles)


def grantable_roles(roles: Iterable[str]) -> frozenset[Role]:
    """Roles that need an explicit ``user_roles`` row.

    This is the requested set minus the implicit baseline role.
    """
    return normalize_roles(roles) - {BASELINE_ROLE}


def claim_roles(roles: Iterable[str]) -> list[str]:
    """Roles to mirror into the auth user's ``app_metadata``.

    Always contains the baseline role, sorted for stable claims.
    """
    return sorted(normalize_roles(roles) | {BASELINE_ROLE})
