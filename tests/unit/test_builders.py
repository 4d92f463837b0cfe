"""Tests for domain data builders."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, call

import pytest

from clubharness.core.exceptions import UpstreamError
from clubharness.fixtures.builders import (
    DomainBuilders,
    invalid_workshop_payloads,
    workshop_api_payload,
    workshop_templates,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def coach() -> MagicMock:
    coach = MagicMock(profile_id="coach-profile")
    coach.clean_up = AsyncMock()
    return coach


@pytest.fixture
def builders(mock_service_client: MagicMock, coach: MagicMock) -> DomainBuilders:
    identities = MagicMock()
    identities.create_coach = AsyncMock(return_value=coach)
    return DomainBuilders(mock_service_client, identities)


class TestCreateWorkshop:
    async def test_defaults(self, builders: DomainBuilders, mock_service_client: MagicMock) -> None:
        """
        Given: No overrides
        When: create_workshop() is called
        Then: A published public club activity a week out is inserted
        """
        workshop = await builders.create_workshop()

        table, record = mock_service_client.insert_one.await_args.args
        assert table == "club_activities"
        assert record["max_capacity"] == 10
        assert record["price_member"] == 2500
        assert record["price_non_member"] == 3500
        assert record["is_public"] is True
        assert record["refund_days"] == 3
        assert record["status"] == "published"
        assert record["title"].startswith("Test Workshop ")
        starts = datetime.fromisoformat(record["start_date"])
        ends = datetime.fromisoformat(record["end_date"])
        assert (ends - starts).total_seconds() == 2 * 60 * 60
        assert 6 <= (starts - datetime.now(UTC)).days <= 7
        assert workshop.id == "club_activities-1"
        assert workshop.table == "club_activities"

    async def test_unique_titles(self, builders: DomainBuilders, mock_service_client: MagicMock) -> None:
        await builders.create_workshop()
        await builders.create_workshop()

        titles = {c.args[1]["title"] for c in mock_service_client.insert_one.await_args_list}
        assert len(titles) == 2

    async def test_overrides(self, builders: DomainBuilders) -> None:
        workshop = await builders.create_workshop(max_capacity=1, status="draft")

        assert workshop["max_capacity"] == 1
        assert workshop["status"] == "draft"

    async def test_cleanup_cascades_to_registrations(
        self, builders: DomainBuilders, mock_service_client: MagicMock
    ) -> None:
        workshop = await builders.create_workshop()

        await workshop.clean_up()

        assert mock_service_client.delete_where.await_args_list == [
            call("club_activity_registrations", "club_activity_id", workshop.id),
            call("club_activities", "id", workshop.id),
        ]

    async def test_insert_failure_propagates(
        self, builders: DomainBuilders, mock_service_client: MagicMock
    ) -> None:
        mock_service_client.insert_one.side_effect = UpstreamError(
            "Supabase", "Insert into club_activities returned no row"
        )

        with pytest.raises(UpstreamError, match="returned no row"):
            await builders.create_workshop()


class TestRegistrations:
    async def test_registration_defaults(self, builders: DomainBuilders) -> None:
        registration = await builders.create_registration("w-1", "u-1")

        assert registration.table == "club_activity_registrations"
        assert registration["club_activity_id"] == "w-1"
        assert registration["member_user_id"] == "u-1"
        assert registration["amount_paid"] == 2500
        assert registration["status"] == "confirmed"
        assert registration["currency"] == "EUR"

    async def test_registrations_are_sequential(
        self, builders: DomainBuilders, mock_service_client: MagicMock
    ) -> None:
        registrations = await builders.create_registrations("w-1", ["u-1", "u-2", "u-3"], status="pending")

        assert [r["member_user_id"] for r in registrations] == ["u-1", "u-2", "u-3"]
        assert all(r["status"] == "pending" for r in registrations)
        assert mock_service_client.insert_one.await_count == 3

    async def test_cleanup_deletes_exact_row(
        self, builders: DomainBuilders, mock_service_client: MagicMock
    ) -> None:
        registration = await builders.create_registration("w-1", "u-1")

        await registration.clean_up()

        mock_service_client.delete_where.assert_awaited_once_with(
            "club_activity_registrations", "id", registration.id
        )


class TestInventory:
    async def test_container(self, builders: DomainBuilders) -> None:
        container = await builders.create_container("Rack A", "u-1", "Main rack")

        assert container.table == "containers"
        assert container["created_by"] == "u-1"
        assert "parent_container_id" not in container.row

    async def test_nested_container(self, builders: DomainBuilders) -> None:
        child = await builders.create_container("Shelf", "u-1", parent_container_id="c-0")

        assert child["parent_container_id"] == "c-0"

    async def test_category_defaults_attributes(self, builders: DomainBuilders) -> None:
        category = await builders.create_category("Masks")

        assert category.table == "equipment_categories"
        assert category["available_attributes"] == []

    async def test_item(self, builders: DomainBuilders) -> None:
        item = await builders.create_item("c-1", "cat-1", quantity=3, attributes={"size": "L"})

        assert item.table == "inventory_items"
        assert item["quantity"] == 3
        assert item["attributes"] == {"size": "L"}
        assert item["out_for_maintenance"] is False

    async def test_item_then_container_deletion(
        self, builders: DomainBuilders, mock_service_client: MagicMock
    ) -> None:
        """
        Given: A container holding an item
        When: Both are cleaned up child first
        Then: Deletes hit inventory_items before containers
        """
        container = await builders.create_container("Rack A", "u-1")
        item = await builders.create_item(container.id, "cat-1")

        await item.clean_up()
        await container.clean_up()

        assert [c.args[0] for c in mock_service_client.delete_where.await_args_list] == [
            "inventory_items",
            "containers",
        ]


class TestBeginnersWorkshop:
    async def test_draft_with_coach(
        self, builders: DomainBuilders, mock_service_client: MagicMock
    ) -> None:
        workshop = await builders.create_beginners_workshop("advanced")

        table, record = mock_service_client.insert_one.await_args.args
        assert table == "workshops"
        assert record["coach_id"] == "coach-profile"
        assert record["status"] == "draft"
        assert record["batch_size"] == 16
        assert record["cool_off_days"] == 5
        assert record["capacity"] == 12
        assert record["stripe_price_key"] is None
        mock_service_client.update_where.assert_not_awaited()
        assert workshop.table == "workshops"

    async def test_status_update(self, builders: DomainBuilders, mock_service_client: MagicMock) -> None:
        mock_service_client.update_where.return_value = [{"id": "workshops-1", "status": "published"}]

        workshop = await builders.create_beginners_workshop(status="published")

        mock_service_client.update_where.assert_awaited_once_with(
            "workshops", {"status": "published"}, "id", "workshops-1"
        )
        assert workshop["status"] == "published"

    async def test_cleanup_order(
        self, builders: DomainBuilders, mock_service_client: MagicMock, coach: MagicMock
    ) -> None:
        workshop = await builders.create_beginners_workshop()

        await workshop.clean_up()

        assert mock_service_client.delete_where.await_args_list == [
            call("workshop_attendees", "workshop_id", "workshops-1"),
            call("workshops", "id", "workshops-1"),
        ]
        coach.clean_up.assert_awaited_once()

    async def test_attendee(self, builders: DomainBuilders) -> None:
        attendee = await builders.add_workshop_attendee("workshops-1", "profile-1")

        assert attendee.table == "workshop_attendees"
        assert attendee["status"] == "invited"
        assert attendee["priority"] == 0


class TestPayloads:
    def test_templates(self) -> None:
        templates = workshop_templates()

        assert set(templates) == {"basic", "advanced", "weekend", "past_date", "invalid_capacity"}
        assert templates["invalid_capacity"]["capacity"] == 0
        assert templates["past_date"]["workshop_date"] < datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")

    def test_api_payload_overrides(self) -> None:
        payload = workshop_api_payload("weekend", coach_id="coach-1")

        assert payload["location"] == "Outdoor Training Area"
        assert payload["capacity"] == 20
        assert payload["coach_id"] == "coach-1"

    def test_invalid_payloads(self) -> None:
        payloads = invalid_workshop_payloads()

        assert "workshop_date" not in payloads["missing_date"]
        assert "coach_id" not in payloads["missing_coach"]
        assert payloads["invalid_date"]["workshop_date"] == "invalid-date"
        assert payloads["negative_capacity"]["capacity"] == -1
