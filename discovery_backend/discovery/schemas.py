from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .models import User


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PublicUser(_CamelModel):
    id: str
    username: str
    display_name: str
    photo_url: str | None = Field(default=None, alias="photoURL")
    bio: str | None = None
    interests: list[str] = Field(default_factory=list)
    is_verified: bool = False
    is_online: bool = False
    location_latitude: float | None = None
    location_longitude: float | None = None

    @classmethod
    def public_fields(cls, user: User) -> dict:
        return user.model_dump(include=set(PublicUser.model_fields))


class UserWithDistance(PublicUser):
    distance_km: float


class ProfileViewer(PublicUser):
    viewed_at: datetime


class NearbyUsersResponse(_CamelModel):
    users: list[UserWithDistance]
    total: int


class ProfileViewersResponse(_CamelModel):
    users: list[ProfileViewer]
    total: int
    unique_viewers: int


class HomepageRecommendation(_CamelModel):
    id: str
    display_name: str
    photo_url: str | None = Field(default=None, alias="photoURL")
    age: int | None = Field(default=None, ge=18)


class ViewRecordedResponse(_CamelModel):
    recorded: bool
    id: str | None = None
    viewed_at: datetime | None = None
