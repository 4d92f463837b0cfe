"""Fixture factories, builders and teardown bookkeeping."""

from clubharness.fixtures.backend import reset_backend
from clubharness.fixtures.builders import (
    DomainBuilders,
    invalid_workshop_payloads,
    workshop_api_payload,
)
from clubharness.fixtures.identity import IdentityFactory
from clubharness.fixtures.person import PersonalDetailsFactory, unique_email
from clubharness.fixtures.registry import ResourceRegistry, gather_cleanups, run_steps
from clubharness.fixtures.seeding import seed_members, seed_waitlist

__all__ = [
    "DomainBuilders",
    "IdentityFactory",
    "PersonalDetailsFactory",
    "ResourceRegistry",
    "gather_cleanups",
    "invalid_workshop_payloads",
    "reset_backend",
    "run_steps",
    "seed_members",
    "seed_waitlist",
    "unique_email",
    "workshop_api_payload",
]
