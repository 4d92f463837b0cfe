"""Core harness types: exceptions and role policy."""

from clubharness.core.exceptions import (
    CleanupError,
    ConfigurationError,
    HarnessError,
    NavigationError,
    UpstreamError,
)
from clubharness.core.roles import BASELINE_ROLE, Role, claim_roles, grantable_roles

__all__ = [
    "BASELINE_ROLE",
    "CleanupError",
    "ConfigurationError",
    "HarnessError",
    "NavigationError",
    "Role",
    "UpstreamError",
    "claim_roles",
    "grantable_roles",
]
