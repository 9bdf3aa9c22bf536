from __future__ import annotations

from collections.abc import Iterable

from .models import Candidate
from .store import ProfileStore, UserStore


def fetch_candidate_pool(
    profiles: ProfileStore,
    users: UserStore,
    exclude_ids: Iterable[str],
    limit: int = 100,
) -> list[Candidate]:
    """
    Return up to *limit* recently active candidates, most recent first.

    Profiles that were never active or belong to an excluded id are skipped.
    The recency order is the baseline tie-break for all later ranking.
    """
    df = profiles.frame()
    excluded = set(exclude_ids)

    mask = df["last_active_at"].notna()
    if excluded:
        mask = mask & ~df["user_id"].isin(excluded)

    ordered = df.loc[mask].sort_values(["last_active_at", "user_id"], ascending=[False, True])
    pool_ids = ordered["user_id"].head(limit).tolist()

    profile_by_id = profiles.find_by_user_ids(pool_ids)
    user_by_id = users.find_by_ids(pool_ids)
    return [
        Candidate(profile=profile_by_id[uid], user=user_by_id[uid])
        for uid in pool_ids
        if uid in profile_by_id and uid in user_by_id
    ]
