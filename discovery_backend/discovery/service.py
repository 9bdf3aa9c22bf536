from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import timedelta

from .candidates import fetch_candidate_pool
from .config import DEFAULT_DISCOVERY_CONFIG, DiscoveryConfig
from .errors import (
    DiscoveryError,
    DiscoveryInternalError,
    LocationUnavailableError,
    ProfileNotFoundError,
    UserNotFoundError,
)
from .geo import round_km, to_coordinate, validate_coordinate
from .models import utcnow
from .profile_views import ProfileViewTracker
from .proximity import ProximityFilter, find_nearby
from .ranking import compute_age, rank_candidates
from .relationships import RelationshipGuard
from .schemas import (
    HomepageRecommendation,
    NearbyUsersResponse,
    ProfileViewer,
    ProfileViewersResponse,
    PublicUser,
    UserWithDistance,
    ViewRecordedResponse,
)
from .store import Stores

logger = logging.getLogger(__name__)


@contextmanager
def _boundary(operation: str, user_id: str, message: str) -> Iterator[None]:
    """Pass known discovery errors through; wrap everything else."""
    try:
        yield
    except DiscoveryError:
        raise
    except Exception as exc:
        logger.exception("%s failed for user %s", operation, user_id)
        raise DiscoveryInternalError(message) from exc


class DiscoveryService:
    def __init__(self, stores: Stores, config: DiscoveryConfig = DEFAULT_DISCOVERY_CONFIG) -> None:
        self.stores = stores
        self.config = config
        self.guard = RelationshipGuard(stores.relationships)
        self.views = ProfileViewTracker(stores.views)

    # ── Location-based discovery ────────────────────────────────────────

    def find_nearby_users(
        self,
        user_id: str,
        latitude: float,
        longitude: float,
        *,
        radius_in_km: float | None = None,
        limit: int = 20,
        offset: int = 0,
        active_only: bool = False,
        active_within_minutes: int | None = None,
    ) -> NearbyUsersResponse:
        with _boundary("find_nearby_users", user_id, "Failed to find nearby users."):
            origin = validate_coordinate(latitude, longitude)
            excluded = self.guard.excluded_ids(user_id)
            plan = ProximityFilter.build(
                origin.latitude,
                origin.longitude,
                radius_in_km=radius_in_km if radius_in_km is not None else self.config.default_radius_km,
                excluded_ids=excluded,
                active_only=active_only,
                active_within_minutes=(
                    active_within_minutes
                    if active_within_minutes is not None
                    else self.config.default_active_within_minutes
                ),
            )
            nearby, total = find_nearby(
                self.stores.users, self.stores.profiles, plan, limit=limit, offset=offset,
            )

        users = [
            UserWithDistance(**PublicUser.public_fields(n.user), distance_km=round_km(n.distance_m))
            for n in nearby
        ]
        return NearbyUsersResponse(users=users, total=total)

    def get_recommended_users(
        self, user_id: str, *, limit: int = 20, offset: int = 0
    ) -> NearbyUsersResponse:
        user = self.stores.users.find_by_id(user_id)
        coord = to_coordinate(user) if user else None
        if coord is None:
            logger.warning("No stored location for user %s", user_id)
            raise LocationUnavailableError()

        return self.find_nearby_users(
            user_id,
            coord.latitude,
            coord.longitude,
            radius_in_km=self.config.recommended_radius_km,
            limit=limit,
            offset=offset,
            active_only=True,
            active_within_minutes=self.config.recommended_active_within_minutes,
        )

    # ── Profile views ───────────────────────────────────────────────────

    def record_profile_view(
        self,
        viewer_id: str,
        viewed_id: str,
        anonymous: bool = True,
        *,
        deadline: float | None = None,
    ) -> ViewRecordedResponse:
        """
        Record a visit by *viewer_id*.

        *deadline* is a ``time.monotonic()`` value; once it has passed no row
        is written and the call fails as a timeout.
        """
        with _boundary("record_profile_view", viewer_id, "Failed to record profile view."):
            if self.stores.users.find_by_id(viewed_id) is None:
                raise UserNotFoundError()
            if self.guard.is_blocked(viewer_id, viewed_id):
                return ViewRecordedResponse(recorded=False)
            if deadline is not None and time.monotonic() >= deadline:
                logger.warning("Profile view %s -> %s dropped after deadline", viewer_id, viewed_id)
                raise DiscoveryInternalError("Request timed out.")
            view = self.views.record_view(viewer_id, viewed_id, anonymous)

        if view is None:
            return ViewRecordedResponse(recorded=False)
        return ViewRecordedResponse(recorded=True, id=view.id, viewed_at=view.created_at)

    def get_profile_viewers(
        self,
        user_id: str,
        *,
        limit: int = 20,
        offset: int = 0,
        days_back: int | None = None,
    ) -> ProfileViewersResponse:
        days = days_back if days_back is not None else self.config.viewers_days_back
        since = utcnow() - timedelta(days=days)
        with _boundary("get_profile_viewers", user_id, "Failed to retrieve profile viewers."):
            views, total = self.views.viewer_window(user_id, offset, limit, since=since)
            unique = self.views.distinct_viewer_count(user_id, since=since)
            # One batched lookup for every viewer on the page.
            viewers = self.stores.users.find_by_ids(v.viewer_id for v in views)

        users = [
            ProfileViewer(**PublicUser.public_fields(viewers[v.viewer_id]), viewed_at=v.created_at)
            for v in views
            if v.viewer_id in viewers
        ]
        return ProfileViewersResponse(users=users, total=total, unique_viewers=unique)

    # ── Homepage recommendations ────────────────────────────────────────

    def get_homepage_recommendations(self, user_id: str) -> list[HomepageRecommendation]:
        logger.info("Fetching homepage recommendations for user: %s", user_id)

        with _boundary("get_homepage_recommendations", user_id, "Failed to retrieve recommendations."):
            requester = self.stores.profiles.find_by_user_id(user_id)
            if requester is None or self.stores.users.find_by_id(user_id) is None:
                logger.warning("User profile or user not found for ID: %s", user_id)
                raise ProfileNotFoundError()

            excluded = self.guard.excluded_ids(user_id)
            pool = fetch_candidate_pool(
                self.stores.profiles, self.stores.users, excluded, limit=self.config.fetch_limit,
            )
            logger.debug("Fetched %d initial candidates", len(pool))

            ranked = rank_candidates(
                requester,
                pool,
                limit=self.config.recommendation_limit,
                preferred_ratio=self.config.preferred_ratio,
            )

        recommendations = []
        for candidate in ranked:
            age = compute_age(candidate.profile.birth_date)
            recommendations.append(
                HomepageRecommendation(
                    id=candidate.user_id,
                    display_name=candidate.user.display_name,
                    photo_url=candidate.user.photo_url,
                    age=age if age is not None and age >= 18 else None,
                )
            )

        logger.info(
            "Generated %d recommendations for user: %s", len(recommendations), user_id
        )
        return recommendations
