"""Builders for auxiliary domain rows.

Each builder inserts one row through the service client with defaults the
caller can override, and returns a ``FixtureRow`` whose ``clean_up`` deletes
exactly that row. Builders do not track dependencies between rows: callers
delete children (registrations, items, attendees) before their parents, or
register fixtures with a ``ResourceRegistry`` in creation order.
"""

import time
from datetime import UTC, datetime, timedelta
from typing import Any, Literal
from uuid import uuid4

import structlog

from clubharness.data.supabase.client import ServiceClient
from clubharness.fixtures.identity import IdentityFactory
from clubharness.fixtures.registry import run_steps
from clubharness.models.fixtures import FixtureRow

log = structlog.get_logger(__name__)

WorkshopTemplate = Literal["basic", "advanced", "weekend", "past_date", "invalid_capacity"]
WorkshopStatus = Literal["draft", "published", "finished", "cancelled"]

BATCH_SIZE = 16
COOL_OFF_DAYS = 5


def _utc_stamp(delta: timedelta) -> str:
    return (datetime.now(UTC) + delta).strftime("%Y-%m-%dT%H:%M:%SZ")


def workshop_templates() -> dict[str, dict[str, Any]]:
    """Beginners workshop templates, dated relative to now."""
    return {
        "basic": {
            "workshop_date": _utc_stamp(timedelta(days=30)),
            "location": "Main Training Hall",
            "capacity": 16,
            "notes_md": "Basic longsword techniques for beginners",
        },
        "advanced": {
            "workshop_date": _utc_stamp(timedelta(days=45)),
            "location": "Secondary Training Room",
            "capacity": 12,
            "notes_md": "## Advanced Topics\n- Complex binds\n- Advanced footwork",
        },
        "weekend": {
            "workshop_date": _utc_stamp(timedelta(days=14)),
            "location": "Outdoor Training Area",
            "capacity": 20,
            "notes_md": "Weekend intensive workshop",
        },
        "past_date": {
            "workshop_date": _utc_stamp(timedelta(days=-1)),
            "location": "Test Location",
            "capacity": 10,
            "notes_md": "Past date workshop (should fail)",
        },
        "invalid_capacity": {
            "workshop_date": _utc_stamp(timedelta(days=30)),
            "location": "Test Location",
            "capacity": 0,
            "notes_md": "Invalid capacity workshop",
        },
    }


def workshop_api_payload(template: WorkshopTemplate = "basic", **overrides: Any) -> dict[str, Any]:
    """Request body for the workshop creation endpoint."""
    return {**workshop_templates()[template], **overrides}


def invalid_workshop_payloads() -> dict[str, dict[str, Any]]:
    """Request bodies the workshop endpoint must reject, keyed by defect."""
    future = _utc_stamp(timedelta(days=30))
    past = _utc_stamp(timedelta(days=-1))
    coach = "test-coach-id"
    return {
        "missing_date": {"location": "Test Location", "coach_id": coach, "capacity": 16},
        "missing_location": {"workshop_date": future, "coach_id": coach, "capacity": 16},
        "missing_coach": {"workshop_date": future, "location": "Test Location", "capacity": 16},
        "missing_capacity": {"workshop_date": future, "location": "Test Location", "coach_id": coach},
        "past_date": {"workshop_date": past, "location": "Test Location", "coach_id": coach, "capacity": 16},
        "invalid_date": {
            "workshop_date": "invalid-date",
            "location": "Test Location",
            "coach_id": coach,
            "capacity": 16,
        },
        "zero_capacity": {"workshop_date": future, "location": "Test Location", "coach_id": coach, "capacity": 0},
        "negative_capacity": {
            "workshop_date": future,
            "location": "Test Location",
            "coach_id": coach,
            "capacity": -1,
        },
    }


class DomainBuilders:
    """Factories for workshops, registrations and inventory rows.

    Attributes:
        _client: Service client used for inserts and deletes.
        _identities: Factory used for coaches of beginners workshops.
    """

    def __init__(self, client: ServiceClient, identities: IdentityFactory | None = None) -> None:
        self._client = client
        self._identities = identities or IdentityFactory(client)

    async def _insert(self, table: str, record: dict[str, Any]) -> FixtureRow:
        client = self._client
        row = await client.insert_one(table, record)

        async def clean_up() -> None:
            await client.delete_where(table, "id", row["id"])

        log.debug("fixture_row_created", table=table, id=row["id"])
        return FixtureRow(table=table, row=row, clean_up=clean_up)

    # -------------------------------------------------------------------------
    # Club activities
    # -------------------------------------------------------------------------

    async def create_workshop(self, **overrides: Any) -> FixtureRow:
        """Create a published club activity starting in a week.

        Cleanup deletes registrations against the workshop first.
        """
        starts = datetime.now(UTC) + timedelta(days=7)
        record = {
            "title": f"Test Workshop {int(time.time() * 1000)}-{uuid4().hex[:12]}",
            "description": "Test workshop for E2E testing",
            "location": "Test Location",
            "start_date": starts.isoformat(),
            "end_date": (starts + timedelta(hours=2)).isoformat(),
            "max_capacity": 10,
            "price_member": 2500,
            "price_non_member": 3500,
            "is_public": True,
            "refund_days": 3,
            "status": "published",
            **overrides,
        }
        client = self._client
        row = await client.insert_one("club_activities", record)
        workshop_id = row["id"]

        async def clean_up() -> None:
            await client.delete_where("club_activity_registrations", "club_activity_id", workshop_id)
            await client.delete_where("club_activities", "id", workshop_id)

        log.info("workshop_created", id=workshop_id)
        return FixtureRow(table="club_activities", row=row, clean_up=clean_up)

    async def create_registration(
        self, workshop_id: str, user_id: str, **overrides: Any
    ) -> FixtureRow:
        """Register a user for a club activity as a confirmed, paid attendee."""
        return await self._insert(
            "club_activity_registrations",
            {
                "club_activity_id": workshop_id,
                "member_user_id": user_id,
                "amount_paid": 2500,
                "status": "confirmed",
                "currency": "EUR",
                **overrides,
            },
        )

    async def create_registrations(
        self, workshop_id: str, user_ids: list[str], **overrides: Any
    ) -> list[FixtureRow]:
        """Register several users, one after another."""
        registrations = []
        for user_id in user_ids:
            registrations.append(await self.create_registration(workshop_id, user_id, **overrides))
        return registrations

    # -------------------------------------------------------------------------
    # Inventory
    # -------------------------------------------------------------------------

    async def create_container(
        self,
        name: str,
        created_by: str,
        description: str = "Test container",
        parent_container_id: str | None = None,
    ) -> FixtureRow:
        record: dict[str, Any] = {"name": name, "description": description, "created_by": created_by}
        if parent_container_id is not None:
            record["parent_container_id"] = parent_container_id
        return await self._insert("containers", record)

    async def create_category(
        self,
        name: str,
        description: str = "Test category",
        available_attributes: list[Any] | dict[str, Any] | None = None,
    ) -> FixtureRow:
        return await self._insert(
            "equipment_categories",
            {
                "name": name,
                "description": description,
                "available_attributes": available_attributes if available_attributes is not None else [],
            },
        )

    async def create_item(self, container_id: str, category_id: str, **overrides: Any) -> FixtureRow:
        """Create one inventory item inside a container."""
        return await self._insert(
            "inventory_items",
            {
                "container_id": container_id,
                "category_id": category_id,
                "quantity": 1,
                "attributes": {},
                "out_for_maintenance": False,
                **overrides,
            },
        )

    # -------------------------------------------------------------------------
    # Beginners workshops
    # -------------------------------------------------------------------------

    async def create_beginners_workshop(
        self,
        template: WorkshopTemplate = "basic",
        status: WorkshopStatus = "draft",
        **overrides: Any,
    ) -> FixtureRow:
        """Create a beginners workshop run by a freshly created coach.

        The workshop is inserted as a draft and then moved to ``status``.
        Cleanup deletes attendees, then the workshop, then the coach.
        """
        coach = await self._identities.create_coach()
        client = self._client
        record = {
            **workshop_templates()[template],
            "coach_id": coach.profile_id,
            **overrides,
            "status": "draft",
            "batch_size": BATCH_SIZE,
            "cool_off_days": COOL_OFF_DAYS,
            "stripe_price_key": None,
        }
        row = await client.insert_one("workshops", record)
        workshop_id = row["id"]
        if status != "draft":
            updated = await client.update_where("workshops", {"status": status}, "id", workshop_id)
            if updated:
                row = updated[0]

        async def clean_up() -> None:
            await run_steps(
                [
                    ("workshop_attendees", lambda: client.delete_where("workshop_attendees", "workshop_id", workshop_id)),
                    ("workshops", lambda: client.delete_where("workshops", "id", workshop_id)),
                    ("coach", coach.clean_up),
                ],
                resource=f"workshop:{workshop_id}",
            )

        log.info("beginners_workshop_created", id=workshop_id, template=template, status=status)
        return FixtureRow(table="workshops", row=row, clean_up=clean_up)

    async def add_workshop_attendee(
        self, workshop_id: str, profile_id: str, status: str = "invited"
    ) -> FixtureRow:
        return await self._insert(
            "workshop_attendees",
            {
                "workshop_id": workshop_id,
                "user_profile_id": profile_id,
                "status": status,
                "invited_at": datetime.now(UTC).isoformat(),
                "priority": 0,
            },
        )
