"""Identity fixture factory.

Creates auth accounts together with the domain rows the application expects
(waitlist entry, user profile, role grants, member profile and optionally a
Stripe subscription), each with a cleanup that removes them again.

Every setup step must succeed before the next runs because of foreign key
dependencies. A failing step raises UpstreamError with the raw backend
message and nothing created so far is rolled back.
"""

import asyncio
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from typing import Any

import stripe
import structlog

from clubharness.config.settings import Settings
from clubharness.core.roles import (
    BASELINE_ROLE,
    Role,
    claim_roles,
    grantable_roles,
    normalize_roles,
)
from clubharness.data.stripe.client import create_stripe_client
from clubharness.data.stripe.subscriptions import (
    create_customer,
    create_customer_with_subscription,
    create_pending_subscriptions,
    delete_customer,
)
from clubharness.data.supabase.client import ServiceClient, first_row
from clubharness.fixtures.person import ADULT_AGE, PersonalDetailsFactory, unique_email
from clubharness.fixtures.registry import gather_cleanups, run_steps
from clubharness.models.fixtures import SubscriptionFixture
from clubharness.models.identity import (
    InvitedIdentity,
    MemberIdentity,
    PersonalDetails,
    RoleUsers,
    WaitlistedIdentity,
)

log = structlog.get_logger(__name__)

INVITATION_TTL = timedelta(hours=24)


class IdentityFactory:
    """Factory for test identities.

    Attributes:
        _client: Service client used for setup and cleanup.
        _settings: Settings (test password, price lookups).
        _stripe: Stripe client, created on first payment fixture.

    Example:
        identities = IdentityFactory(await get_service_client())
        admin = await identities.create_member(roles={"admin"}, email_prefix="admin")
        ...
        await admin.clean_up()
    """

    def __init__(
        self,
        client: ServiceClient,
        *,
        stripe_client: stripe.StripeClient | None = None,
    ) -> None:
        self._client = client
        self._settings: Settings = client.settings
        self._stripe = stripe_client

    @property
    def stripe(self) -> stripe.StripeClient:
        if self._stripe is None:
            self._stripe = create_stripe_client(self._settings)
        return self._stripe

    @property
    def password(self) -> str:
        return self._settings.test_password.get_secret_value()

    def _details(self, email: str | None, email_prefix: str | None) -> PersonalDetails:
        address = email.lower() if email else unique_email(email_prefix)
        details: PersonalDetails = PersonalDetailsFactory(email=address, min_age=ADULT_AGE)
        return details

    async def _insert_waitlist_entry(self, details: PersonalDetails) -> dict[str, Any]:
        data = await self._client.rpc("insert_waitlist_entry", details.waitlist_params())
        return first_row(data, "insert_waitlist_entry")

    # -------------------------------------------------------------------------
    # Members
    # -------------------------------------------------------------------------

    async def create_member(
        self,
        *,
        email: str | None = None,
        roles: Iterable[str] | None = None,
        create_subscription: bool = False,
        email_prefix: str | None = None,
    ) -> MemberIdentity:
        """Create a fully onboarded member.

        Args:
            email: Fixed address. A unique one is generated when omitted.
            roles: Roles to grant. The baseline member role is implicit.
            create_subscription: Provision a paying Stripe customer.
            email_prefix: Readable prefix for generated addresses.

        Returns:
            The member, its session and a cleanup coroutine.

        Raises:
            UpstreamError: If any backend or Stripe step fails.
        """
        role_set = normalize_roles(roles or {BASELINE_ROLE})
        details = self._details(email, email_prefix)
        client = self._client

        entry = await self._insert_waitlist_entry(details)
        profile_id = str(entry["profile_id"])
        waitlist_id = str(entry["waitlist_id"])

        user = await client.create_user(
            details.email,
            self.password,
            {"first_name": details.first_name, "last_name": details.last_name},
        )

        subscription: SubscriptionFixture | None = None
        if create_subscription:
            subscription = await create_customer_with_subscription(
                details.email, client=self.stripe, settings=self._settings
            )

        await client.update_where(
            "user_profiles",
            {
                "supabase_user_id": user.id,
                "waitlist_id": waitlist_id,
                "customer_id": subscription.customer_id if subscription else None,
            },
            "id",
            profile_id,
        )

        await client.insert_many(
            "user_roles",
            [{"user_id": user.id, "role": str(role)} for role in sorted(grantable_roles(role_set))],
        )
        # Authorization middleware reads roles from the token, not the table
        await client.update_app_metadata(user.id, {"roles": claim_roles(role_set)})

        await client.update_where("waitlist", {"status": "completed"}, "email", details.email)

        member_id = await client.rpc(
            "complete_member_registration",
            {
                "v_user_id": user.id,
                "p_next_of_kin_name": details.next_of_kin.name,
                "p_next_of_kin_phone": details.next_of_kin.phone_number,
                "p_insurance_form_submitted": True,
            },
        )

        session = await client.sign_in_with_password(details.email, self.password)

        async def clean_up() -> None:
            steps = [
                ("member_profiles", lambda: client.delete_where("member_profiles", "user_profile_id", profile_id)),
                ("user_roles", lambda: client.delete_where("user_roles", "user_id", user.id)),
                ("user_profiles", lambda: client.delete_where("user_profiles", "id", profile_id)),
                ("waitlist", lambda: client.delete_where("waitlist", "id", waitlist_id)),
                ("auth_user", lambda: client.delete_user(user.id)),
            ]
            if subscription is not None:
                steps.append(("stripe_customer", subscription.clean_up))
            await run_steps(steps, resource=details.email)

        log.info(
            "member_created",
            user_id=user.id,
            roles=claim_roles(role_set),
            subscription=subscription is not None,
        )

        return MemberIdentity(
            **details.model_dump(),
            waitlist_id=waitlist_id,
            profile_id=profile_id,
            user_id=user.id,
            member_id=member_id,
            roles=role_set,
            customer_id=subscription.customer_id if subscription else None,
            session=session,
            clean_up=clean_up,
        )

    async def create_coach(self) -> MemberIdentity:
        """Create a member holding the coach role."""
        return await self.create_member(roles={Role.COACH}, email_prefix="coach")

    async def create_role_users(self) -> RoleUsers:
        """Create an admin, a workshop coordinator and a plain member concurrently."""
        admin, coordinator, member = await asyncio.gather(
            self.create_member(roles={Role.ADMIN}, email_prefix="admin-test"),
            self.create_member(roles={Role.WORKSHOP_COORDINATOR}, email_prefix="coordinator-test"),
            self.create_member(roles={Role.MEMBER}, email_prefix="member-test"),
        )

        async def clean_up() -> None:
            await gather_cleanups(admin.clean_up, coordinator.clean_up, member.clean_up)

        return RoleUsers(admin=admin, coordinator=coordinator, member=member, clean_up=clean_up)

    # -------------------------------------------------------------------------
    # Precursor identities
    # -------------------------------------------------------------------------

    async def setup_waitlisted_user(
        self,
        *,
        add_waitlist: bool = True,
        add_supabase_id: bool = True,
        set_waitlist_not_completed: bool = False,
        email: str | None = None,
    ) -> WaitlistedIdentity:
        """Create an identity that sits on the waitlist.

        Args:
            add_waitlist: Link the waitlist entry onto the profile.
            add_supabase_id: Link the auth account onto the profile.
            set_waitlist_not_completed: Mark the entry cancelled instead of
                completed, which blocks signup completion.
            email: Fixed address. A unique one is generated when omitted.
        """
        details = self._details(email, None)
        client = self._client

        entry = await self._insert_waitlist_entry(details)
        profile_id = str(entry["profile_id"])
        waitlist_id = str(entry["waitlist_id"])

        user = await client.create_user(details.email, self.password)

        await client.update_where(
            "user_profiles",
            {
                "supabase_user_id": user.id if add_supabase_id else None,
                "waitlist_id": waitlist_id if add_waitlist else None,
            },
            "id",
            profile_id,
        )
        await client.update_where(
            "waitlist",
            {"status": "cancelled" if set_waitlist_not_completed else "completed"},
            "email",
            details.email,
        )

        session = await client.sign_in_with_password(details.email, self.password)

        async def delete_profile_then_entry() -> None:
            await client.delete_where("user_profiles", "id", profile_id)
            await client.delete_where("waitlist", "id", waitlist_id)

        async def delete_auth_user() -> None:
            await client.delete_user(user.id)

        async def clean_up() -> None:
            await gather_cleanups(delete_profile_then_entry, delete_auth_user)

        log.info("waitlisted_user_created", user_id=user.id, profile_id=profile_id)

        return WaitlistedIdentity(
            **details.model_dump(),
            waitlist_id=waitlist_id,
            profile_id=profile_id,
            user_id=user.id,
            token=session.access_token,
            clean_up=clean_up,
        )

    async def setup_invited_user(
        self,
        *,
        add_invitation: bool = True,
        add_supabase_id: bool = True,
        invitation_status: str = "pending",
        email: str | None = None,
        create_subscriptions: bool = True,
    ) -> InvitedIdentity:
        """Create an identity that was invited by an admin.

        The invitation procedure also creates the user profile. The Stripe
        customer is linked to that profile and, unless disabled, gets the
        incomplete monthly and annual subscriptions the signup page pays.

        Args:
            add_invitation: Create the invitation (and profile) at all.
            add_supabase_id: Leave the auth account linked on the profile.
            invitation_status: Status to move the invitation to.
            email: Fixed address. A unique one is generated when omitted.
            create_subscriptions: Create the pending Stripe subscriptions.
        """
        details = self._details(email, None)
        client = self._client

        user = await client.create_user(
            details.email,
            self.password,
            {"first_name": details.first_name, "last_name": details.last_name},
        )

        customer = await create_customer(
            self.stripe,
            details.email,
            name=details.full_name,
            metadata={"invited_by": "e2e-test"},
        )

        invitation_id: Any = None
        profile_id: str | None = None
        if add_invitation:
            expires_at = datetime.now(UTC) + INVITATION_TTL
            invitation_id = await client.rpc(
                "create_invitation",
                {
                    "v_user_id": user.id,
                    "p_email": details.email,
                    "p_first_name": details.first_name,
                    "p_last_name": details.last_name,
                    "p_date_of_birth": details.date_of_birth.isoformat(),
                    "p_phone_number": details.phone_number,
                    "p_invitation_type": "admin",
                    "p_waitlist_id": None,
                    "p_expires_at": expires_at.isoformat(),
                    "p_metadata": {},
                },
            )
            profiles = await client.update_where(
                "user_profiles", {"customer_id": customer.id}, "supabase_user_id", user.id
            )
            if profiles:
                profile_id = str(profiles[0]["id"])
            if invitation_status != "pending":
                await client.update_where(
                    "invitations", {"status": invitation_status}, "email", details.email
                )
            if not add_supabase_id and profile_id is not None:
                await client.update_where(
                    "user_profiles", {"supabase_user_id": None}, "id", profile_id
                )

        if create_subscriptions:
            await create_pending_subscriptions(self.stripe, customer.id, self._settings)

        stripe_client = self.stripe

        async def access_token() -> str:
            session = await client.sign_in_with_password(details.email, self.password)
            return session.access_token

        async def clean_up() -> None:
            steps = [
                ("invitations", lambda: client.delete_where("invitations", "email", details.email)),
            ]
            if profile_id is not None:
                steps.append(
                    ("user_profiles", lambda: client.delete_where("user_profiles", "id", profile_id))
                )
            steps += [
                ("auth_user", lambda: client.delete_user(user.id)),
                ("stripe_customer", lambda: delete_customer(stripe_client, customer.id)),
            ]
            await run_steps(steps, resource=details.email)

        log.info("invited_user_created", user_id=user.id, status=invitation_status)

        return InvitedIdentity(
            **details.model_dump(),
            invitation_id=invitation_id,
            user_id=user.id,
            customer_id=customer.id,
            access_token=access_token,
            clean_up=clean_up,
        )

    async def fetch_roles(self, user_id: str) -> set[str]:
        """Roles stored as ``user_roles`` rows for a user."""
        rows = await self._client.select_where("user_roles", "user_id", user_id, "role")
        return {row["role"] for row in rows}
