"""Synthetic personal details using factory_boy.

Usage:
    details = PersonalDetailsFactory()
    adult = PersonalDetailsFactory(min_age=18)
    known = PersonalDetailsFactory(email="someone@test.com")
"""

import time
from uuid import uuid4

import factory
from faker import Faker

from clubharness.models.identity import NextOfKin, PersonalDetails

fake = Faker("en_IE")

PRONOUNS = ["he/him", "she/her", "they/them"]
GENDERS = ["man (cis)", "woman (cis)", "non-binary"]
WEAPONS = ["longsword", "rapier", "sabre"]
MEDICAL_CONDITIONS = ["None", "Asthma", "Previous knee injury"]

ADULT_AGE = 18


def unique_email(prefix: str | None = None, domain: str = "test.com") -> str:
    """Email address that cannot collide across concurrent test runs.

    With a prefix the address reads ``<prefix>-<epoch ms>-<suffix>@<domain>``;
    otherwise a realistic Faker address carries the random suffix.
    """
    suffix = uuid4().hex[:10]
    if prefix:
        return f"{prefix}-{int(time.time() * 1000)}-{suffix}@{domain}".lower()
    return f"{fake.user_name()}.{suffix}@{fake.free_email_domain()}".lower()


def international_phone() -> str:
    return fake.numerify("+353 8# ### ####")


class NextOfKinFactory(factory.Factory):
    """Factory for NextOfKin model."""

    class Meta:
        model = NextOfKin

    name = factory.LazyFunction(fake.name)
    phone_number = factory.LazyFunction(international_phone)


class PersonalDetailsFactory(factory.Factory):
    """Factory for PersonalDetails model.

    ``min_age``/``max_age`` bound the generated date of birth.
    """

    class Meta:
        model = PersonalDetails

    class Params:
        min_age = 16
        max_age = 65

    first_name = factory.LazyFunction(fake.first_name)
    last_name = factory.LazyFunction(fake.last_name)
    email = factory.LazyFunction(unique_email)
    date_of_birth = factory.LazyAttribute(
        lambda o: fake.date_of_birth(minimum_age=o.min_age, maximum_age=o.max_age)
    )
    pronouns = factory.LazyFunction(lambda: fake.random_element(PRONOUNS))
    gender = factory.LazyFunction(lambda: fake.random_element(GENDERS))
    weapon = factory.LazyFunction(lambda: fake.random_element(WEAPONS))
    phone_number = factory.LazyFunction(international_phone)
    next_of_kin = factory.SubFactory(NextOfKinFactory)
    medical_conditions = factory.LazyFunction(lambda: fake.random_element(MEDICAL_CONDITIONS))
