"""Bulk seeding for pagination and search fixtures.

Seeders fan out with ``asyncio.gather`` and return the created fixtures so
callers can clean them up together with ``gather_cleanups``.
"""

import asyncio
from datetime import date

import structlog

from clubharness.data.supabase.client import ServiceClient, first_row
from clubharness.fixtures.identity import IdentityFactory
from clubharness.fixtures.person import (
    ADULT_AGE,
    PersonalDetailsFactory,
    fake,
    international_phone,
)
from clubharness.fixtures.registry import run_steps
from clubharness.models.fixtures import FixtureRow
from clubharness.models.identity import MemberIdentity, PersonalDetails

log = structlog.get_logger(__name__)


def is_minor(date_of_birth: date, today: date | None = None) -> bool:
    """Whether someone born on ``date_of_birth`` is under 18 on ``today``."""
    today = today or date.today()
    try:
        adult_from = date_of_birth.replace(year=date_of_birth.year + ADULT_AGE)
    except ValueError:
        # Born on 29 February
        adult_from = date(date_of_birth.year + ADULT_AGE, 3, 1)
    return today < adult_from


async def seed_waitlist_entry(client: ServiceClient, details: PersonalDetails) -> FixtureRow:
    """Insert one waitlist entry, with a guardian when the applicant is a minor.

    Returns:
        The ``insert_waitlist_entry`` result row. Cleanup removes the
        guardian, profile and waitlist entry.

    Raises:
        UpstreamError: If the procedure fails or returns no row.
    """
    data = await client.rpc("insert_waitlist_entry", details.waitlist_params())
    row = first_row(data, "insert_waitlist_entry")
    profile_id = row["profile_id"]
    waitlist_id = row["waitlist_id"]

    if is_minor(details.date_of_birth):
        await client.insert_one(
            "waitlist_guardians",
            {
                "profile_id": profile_id,
                "first_name": fake.first_name(),
                "last_name": fake.last_name(),
                "phone_number": international_phone(),
            },
        )

    async def clean_up() -> None:
        await run_steps(
            [
                ("waitlist_guardians", lambda: client.delete_where("waitlist_guardians", "profile_id", profile_id)),
                ("user_profiles", lambda: client.delete_where("user_profiles", "id", profile_id)),
                ("waitlist", lambda: client.delete_where("waitlist", "id", waitlist_id)),
            ],
            resource=details.email,
        )

    return FixtureRow(table="waitlist", row={"id": waitlist_id, **row}, clean_up=clean_up)


async def seed_waitlist(client: ServiceClient, count: int = 10) -> list[FixtureRow]:
    """Insert ``count`` waitlist entries concurrently.

    Raises:
        UpstreamError: If any insert fails.
    """
    entries = await asyncio.gather(
        *(seed_waitlist_entry(client, PersonalDetailsFactory()) for _ in range(count))
    )
    log.info("waitlist_seeded", count=len(entries))
    return list(entries)


async def seed_members(identities: IdentityFactory, count: int = 10) -> list[MemberIdentity]:
    """Create ``count`` fully onboarded members concurrently."""
    members = await asyncio.gather(
        *(identities.create_member(email_prefix="seed-member") for _ in range(count))
    )
    log.info("members_seeded", count=len(members))
    return list(members)
