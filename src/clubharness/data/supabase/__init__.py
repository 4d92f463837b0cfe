"""Supabase service-role access."""

from clubharness.data.supabase.client import (
    ServiceClient,
    close_service_client,
    create_service_client,
    get_service_client,
)

__all__ = [
    "ServiceClient",
    "close_service_client",
    "create_service_client",
    "get_service_client",
]
