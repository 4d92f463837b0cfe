"""Seed the waitlist with synthetic applicants.

Usage:
    python scripts/seed_waitlist.py [count]
"""

import asyncio
import sys

from dotenv import load_dotenv

load_dotenv()

from clubharness.data.supabase.client import close_service_client, get_service_client  # noqa: E402
from clubharness.fixtures.seeding import seed_waitlist  # noqa: E402


async def main(count: int) -> None:
    """Insert ``count`` waitlist entries."""
    client = await get_service_client()
    try:
        entries = await seed_waitlist(client, count)
        print(f"Successfully inserted {len(entries)} waitlist entries")
    finally:
        await close_service_client()


if __name__ == "__main__":
    asyncio.run(main(int(sys.argv[1]) if len(sys.argv) > 1 else 10))
