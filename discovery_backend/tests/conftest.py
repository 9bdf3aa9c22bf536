from __future__ import annotations

from datetime import date, timedelta

import pytest

from discovery_backend.discovery.models import (
    RelationshipType,
    User,
    UserProfile,
    UserRelationship,
    utcnow,
)
from discovery_backend.discovery.store import Stores


def years_ago(years: int) -> date:
    """A birth date that makes someone exactly *years* old today."""
    today = utcnow().date()
    try:
        born = today.replace(year=today.year - years)
    except ValueError:  # Feb 29
        born = today.replace(year=today.year - years, day=28)
    return born


@pytest.fixture
def stores() -> Stores:
    return Stores()


@pytest.fixture
def add_user(stores):
    def _add(user_id: str, lat: float | None = None, lon: float | None = None, **extra) -> User:
        user = User(
            id=user_id,
            username=user_id,
            display_name=extra.pop("display_name", user_id.title()),
            location_latitude=lat,
            location_longitude=lon,
            **extra,
        )
        return stores.users.add(user)

    return _add


@pytest.fixture
def add_profile(stores):
    def _add(user_id: str, *, minutes_ago: int | None = 5, age: int | None = 25, **extra) -> UserProfile:
        profile = UserProfile(
            user_id=user_id,
            last_active_at=utcnow() - timedelta(minutes=minutes_ago) if minutes_ago is not None else None,
            birth_date=years_ago(age) if age is not None else None,
            **extra,
        )
        return stores.profiles.add(profile)

    return _add


@pytest.fixture
def block(stores):
    def _block(requester_id: str, recipient_id: str) -> UserRelationship:
        return stores.relationships.add(
            UserRelationship(
                requester_id=requester_id,
                recipient_id=recipient_id,
                type=RelationshipType.blocked,
            )
        )

    return _block
