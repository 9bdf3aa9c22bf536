from __future__ import annotations

import logging
from datetime import datetime, timedelta

import pandas as pd

from .models import ProfileView, utcnow
from .store import ProfileViewStore

logger = logging.getLogger(__name__)


class ProfileViewTracker:
    """Append-only profile view log with "who viewed me" queries."""

    def __init__(self, views: ProfileViewStore) -> None:
        self._views = views

    def record_view(
        self, viewer_id: str, viewed_id: str, anonymous: bool = True
    ) -> ProfileView | None:
        """Record a visit. Every visit is a new row; self-views are ignored."""
        if viewer_id == viewed_id:
            return None
        view = ProfileView(viewer_id=viewer_id, viewed_id=viewed_id, anonymous=anonymous)
        self._views.append(view)
        logger.debug("Recorded profile view %s -> %s", viewer_id, viewed_id)
        return view

    def _views_of(self, user_id: str, since: datetime | None = None) -> pd.DataFrame:
        df = self._views.frame()
        mask = df["viewed_id"] == user_id
        if since is not None:
            mask = mask & (df["created_at"] >= pd.Timestamp(since))
        return df.loc[mask]

    def viewers_of(
        self,
        user_id: str,
        page: int = 1,
        page_size: int = 20,
        since: datetime | None = None,
    ) -> tuple[list[ProfileView], int]:
        """Return one page of views, most recent first, and the total view count."""
        start = (max(page, 1) - 1) * page_size
        return self.viewer_window(user_id, offset=start, limit=page_size, since=since)

    def viewer_window(
        self,
        user_id: str,
        offset: int = 0,
        limit: int = 20,
        since: datetime | None = None,
    ) -> tuple[list[ProfileView], int]:
        """Like :meth:`viewers_of`, but sliced by row offset."""
        matched = self._views_of(user_id, since)
        total = len(matched)

        offset = max(offset, 0)
        limit = max(limit, 0)
        ordered = matched.sort_values(["created_at", "seq"], ascending=[False, False])
        page_ids = ordered["id"].iloc[offset : offset + limit].tolist()

        by_id = {v.id: v for v in self._views.find_by_ids(page_ids)}
        return [by_id[vid] for vid in page_ids if vid in by_id], total

    def distinct_viewer_count(self, user_id: str, since: datetime | None = None) -> int:
        return int(self._views_of(user_id, since)["viewer_id"].nunique())

    def count_recent_views(self, user_id: str, hours: int = 24) -> int:
        return len(self._views_of(user_id, utcnow() - timedelta(hours=hours)))

    def has_viewed_within(self, viewer_id: str, viewed_id: str, hours: int = 24) -> bool:
        recent = self._views_of(viewed_id, utcnow() - timedelta(hours=hours))
        return bool((recent["viewer_id"] == viewer_id).any())

    def count_views_by_viewer_today(self, viewer_id: str) -> int:
        today = utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
        df = self._views.frame()
        return int(((df["viewer_id"] == viewer_id) & (df["created_at"] >= pd.Timestamp(today))).sum())
