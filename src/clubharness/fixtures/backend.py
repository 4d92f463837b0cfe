"""Suite-level backend reset run before an end-to-end session."""

from typing import Any

import structlog

from clubharness.data.supabase.client import ServiceClient

log = structlog.get_logger(__name__)

DEFAULT_SETTINGS: list[dict[str, Any]] = [
    {"key": "waitlist_open", "value": "true", "type": "boolean"},
    {"key": "hema_insurance_form_link", "value": "", "type": "text"},
]


async def delete_all_users(client: ServiceClient) -> int:
    """Delete every auth user.

    Returns:
        Number of users deleted.
    """
    deleted = 0
    for user in await client.list_users():
        if await client.delete_user(user.id):
            deleted += 1
    log.info("auth_users_deleted", count=deleted)
    return deleted


async def reset_settings(client: ServiceClient) -> None:
    """Replace the ``settings`` table with the application defaults."""
    await client.execute(client.client.table("settings").delete().neq("key", ""))
    await client.insert_many("settings", DEFAULT_SETTINGS)
    log.info("settings_reset", keys=[row["key"] for row in DEFAULT_SETTINGS])


async def reset_backend(client: ServiceClient) -> None:
    """Remove all auth users and restore default settings."""
    await delete_all_users(client)
    await reset_settings(client)
