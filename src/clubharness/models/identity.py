"""Identity models returned by the identity factory."""

from collections.abc import Awaitable, Callable
from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from supabase_auth.types import Session

from clubharness.core.roles import Role
from clubharness.models.fixtures import CleanupFn, _noop


class NextOfKin(BaseModel):
    """Emergency contact required to complete registration."""

    name: str
    phone_number: str


class PersonalDetails(BaseModel):
    """Synthetic personal attributes used to fill signup forms.

    Attributes:
        first_name: Given name.
        last_name: Family name.
        email: Lowercase, unique per test run.
        date_of_birth: Birth date inside the requested age range.
        pronouns: One of he/him, she/her, they/them.
        gender: A value of the backend ``gender`` enum.
        weapon: Preferred weapon label.
        phone_number: International style phone number.
        next_of_kin: Emergency contact.
        medical_conditions: Free text medical note.
    """

    first_name: str
    last_name: str
    email: str
    date_of_birth: date
    pronouns: str
    gender: str
    weapon: str
    phone_number: str
    next_of_kin: NextOfKin
    medical_conditions: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def waitlist_params(self) -> dict[str, Any]:
        """Parameters for the ``insert_waitlist_entry`` procedure."""
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "date_of_birth": self.date_of_birth.isoformat(),
            "phone_number": self.phone_number,
            "pronouns": self.pronouns,
            "gender": self.gender,
            "medical_conditions": self.medical_conditions,
        }


class MemberIdentity(PersonalDetails):
    """A fully onboarded member.

    Example:
        admin = await identities.create_member(roles={"admin"})
        await login_as_user(context, admin.email)
        ...
        await admin.clean_up()
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    waitlist_id: str
    profile_id: str
    user_id: str
    member_id: Any = Field(default=None, description="Result of complete_member_registration")
    roles: frozenset[Role] = Field(default_factory=frozenset)
    customer_id: str | None = None
    session: Session
    clean_up: CleanupFn = Field(default=_noop, exclude=True, repr=False)

    @property
    def access_token(self) -> str:
        return self.session.access_token


class RoleUsers(BaseModel):
    """One identity per permission level, created together."""

    admin: MemberIdentity
    coordinator: MemberIdentity
    member: MemberIdentity
    clean_up: CleanupFn = Field(default=_noop, exclude=True, repr=False)


class WaitlistedIdentity(PersonalDetails):
    """An identity that stopped at the waitlist stage."""

    waitlist_id: str
    profile_id: str
    user_id: str
    token: str | None = None
    clean_up: CleanupFn = Field(default=_noop, exclude=True, repr=False)


class InvitedIdentity(PersonalDetails):
    """An identity holding an invitation and pending Stripe subscriptions.

    ``access_token`` mints a fresh token on demand rather than at creation.
    """

    invitation_id: Any = None
    user_id: str
    customer_id: str
    access_token: Callable[[], Awaitable[str]] = Field(exclude=True, repr=False)
    clean_up: CleanupFn = Field(default=_noop, exclude=True, repr=False)
