"""Reset the backend before an end-to-end run.

Deletes every auth user and restores the default ``settings`` rows.
Only point this at a local or disposable Supabase project.

Usage:
    python scripts/reset_backend.py
"""

import asyncio

from dotenv import load_dotenv

load_dotenv()

from clubharness.data.supabase.client import close_service_client, get_service_client  # noqa: E402
from clubharness.fixtures.backend import delete_all_users, reset_settings  # noqa: E402


async def main() -> None:
    client = await get_service_client()
    print(f"Resetting {client.settings.supabase_url}...")
    try:
        deleted = await delete_all_users(client)
        print(f"  Auth users deleted: {deleted}")
        await reset_settings(client)
        print("  Settings restored")
    finally:
        await close_service_client()
    print("[OK] Backend reset!")


if __name__ == "__main__":
    asyncio.run(main())
