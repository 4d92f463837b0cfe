"""Seed fully onboarded members.

Usage:
    python scripts/seed_members.py [count]

Members sign in with TEST_USER_PASSWORD (default ``password``).
"""

import asyncio
import sys

from dotenv import load_dotenv

load_dotenv()

from clubharness.data.supabase.client import close_service_client, get_service_client  # noqa: E402
from clubharness.fixtures.identity import IdentityFactory  # noqa: E402
from clubharness.fixtures.seeding import seed_members  # noqa: E402


async def main(count: int) -> None:
    """Create ``count`` members."""
    client = await get_service_client()
    try:
        members = await seed_members(IdentityFactory(client), count)
        for member in members:
            print(f"  {member.email}")
        print(f"Successfully created {len(members)} member profiles")
    finally:
        await close_service_client()


if __name__ == "__main__":
    asyncio.run(main(int(sys.argv[1]) if len(sys.argv) > 1 else 10))
