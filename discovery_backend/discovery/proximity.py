from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

import pandas as pd

from .errors import DiscoveryError, QueryFailedError
from .geo import LatLon, distance_meters, validate_coordinate
from .models import User, utcnow
from .store import ProfileStore, UserStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProximityFilter:
    """Query plan shared by the page query and the count query."""

    origin: LatLon
    radius_m: float
    excluded_ids: frozenset[str] = field(default_factory=frozenset)
    active_after: datetime | None = None

    @classmethod
    def build(
        cls,
        latitude: float,
        longitude: float,
        *,
        radius_in_km: float = 5.0,
        excluded_ids: set[str] | frozenset[str] = frozenset(),
        active_only: bool = False,
        active_within_minutes: int = 30,
        now: datetime | None = None,
    ) -> ProximityFilter:
        origin = validate_coordinate(latitude, longitude)
        active_after = None
        if active_only:
            active_after = (now or utcnow()) - timedelta(minutes=active_within_minutes)
        return cls(
            origin=origin,
            radius_m=radius_in_km * 1000.0,
            excluded_ids=frozenset(excluded_ids),
            active_after=active_after,
        )


@dataclass
class NearbyUser:
    user: User
    distance_m: float


def _matching(users: UserStore, profiles: ProfileStore, plan: ProximityFilter) -> pd.DataFrame:
    """Rows satisfying every clause of *plan*, with a ``distance_m`` column."""
    df = users.frame()

    mask = df["location_latitude"].notna() & df["location_longitude"].notna()
    if plan.excluded_ids:
        mask = mask & ~df["id"].isin(plan.excluded_ids)

    if plan.active_after is not None:
        pf = profiles.frame()
        # Left join keeps one row per user, in user-frame order
        joined = df[["id"]].merge(pf, left_on="id", right_on="user_id", how="left")
        last_active = pd.to_datetime(joined["last_active_at"], utc=True)
        recent = last_active.notna() & (last_active >= pd.Timestamp(plan.active_after))
        mask = mask & recent.to_numpy()

    candidates = df.loc[mask].copy()
    if candidates.empty:
        candidates["distance_m"] = pd.Series(dtype=float)
        return candidates

    candidates["distance_m"] = [
        distance_meters(plan.origin, LatLon(float(lat), float(lon)))
        for lat, lon in zip(candidates["location_latitude"], candidates["location_longitude"])
    ]
    return candidates[candidates["distance_m"] <= plan.radius_m]


def find_nearby(
    users: UserStore,
    profiles: ProfileStore,
    plan: ProximityFilter,
    *,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[NearbyUser], int]:
    """Return one page of users inside the radius, nearest first, plus the total."""
    try:
        matched = _matching(users, profiles, plan)
        total = len(matched)

        page = matched.sort_values(["distance_m", "id"]).iloc[offset : offset + limit]
        by_id = users.find_by_ids(page["id"].tolist())
        results = [
            NearbyUser(user=by_id[uid], distance_m=float(dist))
            for uid, dist in zip(page["id"], page["distance_m"])
            if uid in by_id
        ]
    except DiscoveryError:
        raise
    except Exception as exc:
        logger.exception("Nearby user query failed")
        raise QueryFailedError("Error finding nearby users") from exc

    return results, total
