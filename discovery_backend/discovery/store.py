"""
In-memory stores for the collaborators the engine reads from.

Each store keeps pydantic records keyed by id and exposes a pandas view
(``frame()``) for the bulk filtering done by proximity and pool queries.
"""
from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass, field

import pandas as pd

from .models import ProfileView, RelationshipType, User, UserProfile, UserRelationship

USER_FRAME_COLUMNS = ["id", "location_latitude", "location_longitude"]
PROFILE_FRAME_COLUMNS = ["user_id", "last_active_at"]
VIEW_FRAME_COLUMNS = ["seq", "id", "viewer_id", "viewed_id", "created_at"]


class UserStore:
    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self._lock = threading.Lock()

    def add(self, user: User) -> User:
        with self._lock:
            self._users[user.id] = user
        return user

    def find_by_id(self, user_id: str) -> User | None:
        return self._users.get(user_id)

    def find_by_ids(self, user_ids: Iterable[str]) -> dict[str, User]:
        """Batch lookup; unknown ids are simply absent from the result."""
        with self._lock:
            return {uid: self._users[uid] for uid in set(user_ids) if uid in self._users}

    def frame(self) -> pd.DataFrame:
        with self._lock:
            rows = [
                {
                    "id": u.id,
                    "location_latitude": u.location_latitude,
                    "location_longitude": u.location_longitude,
                }
                for u in self._users.values()
            ]
        return pd.DataFrame(rows, columns=USER_FRAME_COLUMNS)

    def clear(self) -> None:
        with self._lock:
            self._users.clear()


class ProfileStore:
    def __init__(self) -> None:
        self._profiles: dict[str, UserProfile] = {}
        self._lock = threading.Lock()

    def add(self, profile: UserProfile) -> UserProfile:
        with self._lock:
            self._profiles[profile.user_id] = profile
        return profile

    def find_by_user_id(self, user_id: str) -> UserProfile | None:
        return self._profiles.get(user_id)

    def find_by_user_ids(self, user_ids: Iterable[str]) -> dict[str, UserProfile]:
        with self._lock:
            return {uid: self._profiles[uid] for uid in set(user_ids) if uid in self._profiles}

    def frame(self) -> pd.DataFrame:
        with self._lock:
            rows = [
                {
                    "user_id": p.user_id,
                    "last_active_at": p.last_active_at,
                }
                for p in self._profiles.values()
            ]
        df = pd.DataFrame(rows, columns=PROFILE_FRAME_COLUMNS)
        df["last_active_at"] = pd.to_datetime(df["last_active_at"], utc=True)
        return df

    def clear(self) -> None:
        with self._lock:
            self._profiles.clear()


class RelationshipStore:
    def __init__(self) -> None:
        self._relationships: list[UserRelationship] = []
        self._lock = threading.Lock()

    def add(self, relationship: UserRelationship) -> UserRelationship:
        with self._lock:
            self._relationships.append(relationship)
        return relationship

    def find(
        self,
        *,
        requester_id: str | None = None,
        recipient_id: str | None = None,
        type: RelationshipType | None = None,
    ) -> list[UserRelationship]:
        with self._lock:
            rows = list(self._relationships)
        if requester_id is not None:
            rows = [r for r in rows if r.requester_id == requester_id]
        if recipient_id is not None:
            rows = [r for r in rows if r.recipient_id == recipient_id]
        if type is not None:
            rows = [r for r in rows if r.type == type]
        return rows

    def clear(self) -> None:
        with self._lock:
            self._relationships.clear()


class ProfileViewStore:
    """Append-only view log."""

    def __init__(self) -> None:
        self._views: list[ProfileView] = []
        self._lock = threading.Lock()

    def append(self, view: ProfileView) -> ProfileView:
        with self._lock:
            self._views.append(view)
        return view

    def find_by_ids(self, view_ids: Iterable[str]) -> list[ProfileView]:
        wanted = set(view_ids)
        with self._lock:
            return [v for v in self._views if v.id in wanted]

    def frame(self) -> pd.DataFrame:
        with self._lock:
            rows = [
                {
                    "seq": seq,
                    "id": v.id,
                    "viewer_id": v.viewer_id,
                    "viewed_id": v.viewed_id,
                    "created_at": v.created_at,
                }
                for seq, v in enumerate(self._views)
            ]
        df = pd.DataFrame(rows, columns=VIEW_FRAME_COLUMNS)
        df["created_at"] = pd.to_datetime(df["created_at"], utc=True)
        return df

    def clear(self) -> None:
        with self._lock:
            self._views.clear()


@dataclass
class Stores:
    users: UserStore = field(default_factory=UserStore)
    profiles: ProfileStore = field(default_factory=ProfileStore)
    relationships: RelationshipStore = field(default_factory=RelationshipStore)
    views: ProfileViewStore = field(default_factory=ProfileViewStore)

    def clear(self) -> None:
        self.users.clear()
        self.profiles.clear()
        self.relationships.clear()
        self.views.clear()


_stores: Stores | None = None


def get_stores() -> Stores:
    """Return the process-wide stores, seeding them on first call if configured."""
    global _stores
    if _stores is None:
        _stores = Stores()
        # Imported here: the seed loader depends on this module.
        from ..data_ingestion.ingest import load_seed_from_env

        load_seed_from_env(_stores)
    return _stores
