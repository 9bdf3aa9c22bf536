from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime | None) -> datetime | None:
    # Naive timestamps from stores are taken to be UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Gender(str, Enum):
    male = "male"
    female = "female"
    other = "other"


class GenderPreference(str, Enum):
    male = "male"
    female = "female"
    both = "both"


class RelationshipType(str, Enum):
    pending = "pending"
    accepted = "accepted"
    following = "following"
    blocked = "blocked"


class User(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    email: str | None = None
    username: str
    display_name: str
    photo_url: str | None = None
    bio: str | None = None
    interests: list[str] = Field(default_factory=list)
    is_verified: bool = False
    is_online: bool = False
    location_latitude: float | None = None
    location_longitude: float | None = None
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, value: datetime) -> datetime:
        return _as_utc(value)


class UserProfile(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    gender: Gender | None = None
    gender_preference: GenderPreference | None = None
    min_age_preference: int | None = None
    max_age_preference: int | None = None
    birth_date: date | None = None
    last_active_at: datetime | None = None
    is_public: bool = True
    country: str | None = None

    @field_validator("last_active_at")
    @classmethod
    def normalize_last_active_at(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)


class UserRelationship(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    requester_id: str
    recipient_id: str
    type: RelationshipType = RelationshipType.pending
    created_at: datetime = Field(default_factory=utcnow)


class ProfileView(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    viewer_id: str
    viewed_id: str
    anonymous: bool = True
    is_notified: bool = False
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, value: datetime) -> datetime:
        return _as_utc(value)


class Candidate(BaseModel):
    """A profile joined with the identity fields needed for ranking output."""

    profile: UserProfile
    user: User

    @property
    def user_id(self) -> str:
        return self.profile.user_id
