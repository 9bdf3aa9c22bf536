"""
Preference filter & ranking pipeline for homepage recommendations.

The pipeline never reorders candidates: whatever order the pool arrives in
(most recently active first) is preserved inside each group.

Steps:
- Age filter: drop candidates whose age cannot be computed or falls outside
  the requester's preferred range.
- Gender partition: split into a *preferred* group and a *fill* group.
- Proportional assembly: reserve ``ceil(limit * preferred_ratio)`` slots for
  preferred candidates and backfill the rest from the fill group.
"""
from __future__ import annotations

import logging
import math
from datetime import date, datetime

from .models import Candidate, Gender, GenderPreference, UserProfile, utcnow

logger = logging.getLogger(__name__)

RECOMMENDATION_LIMIT = 20
PREFERRED_RATIO = 0.75

_PREFERRED_GENDERS: dict[GenderPreference, set[Gender]] = {
    GenderPreference.male: {Gender.male},
    GenderPreference.female: {Gender.female},
    GenderPreference.both: {Gender.male, Gender.female},
}


def compute_age(birth_date: date | datetime | None, today: date | None = None) -> int | None:
    """Whole years between *birth_date* and *today*; ``None`` if unknown or in the future."""
    if birth_date is None:
        return None
    if isinstance(birth_date, datetime):
        birth_date = birth_date.date()
    today = today or utcnow().date()

    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age if age >= 0 else None


def filter_by_age(
    candidates: list[Candidate],
    min_age: int | None,
    max_age: int | None,
    today: date | None = None,
) -> list[Candidate]:
    kept: list[Candidate] = []
    for candidate in candidates:
        age = compute_age(candidate.profile.birth_date, today)
        if age is None:
            continue
        if min_age is not None and age < min_age:
            continue
        if max_age is not None and age > max_age:
            continue
        kept.append(candidate)
    return kept


def partition_by_gender(
    candidates: list[Candidate], preference: GenderPreference
) -> tuple[list[Candidate], list[Candidate]]:
    """Split into (preferred, fill). Candidates without a gender are dropped."""
    preferred_genders = _PREFERRED_GENDERS[preference]
    preferred: list[Candidate] = []
    fill: list[Candidate] = []

    for candidate in candidates:
        gender = candidate.profile.gender
        if gender is None:
            continue
        if gender == Gender.other:
            fill.append(candidate)
        elif gender in preferred_genders:
            preferred.append(candidate)
        elif preference != GenderPreference.both:
            fill.append(candidate)

    return preferred, fill


def assemble(
    preferred: list[Candidate],
    fill: list[Candidate],
    limit: int = RECOMMENDATION_LIMIT,
    preferred_ratio: float = PREFERRED_RATIO,
) -> list[Candidate]:
    target_preferred = math.ceil(limit * preferred_ratio)
    selected = preferred[:target_preferred]
    needed = limit - len(selected)
    selected_fill = fill[:needed] if needed > 0 else []

    logger.debug(
        "Assembled %d preferred + %d fill (target preferred %d)",
        len(selected), len(selected_fill), target_preferred,
    )
    return (selected + selected_fill)[:limit]


def rank_candidates(
    requester: UserProfile,
    pool: list[Candidate],
    limit: int = RECOMMENDATION_LIMIT,
    preferred_ratio: float = PREFERRED_RATIO,
    today: date | None = None,
) -> list[Candidate]:
    """Run the age filter, gender partition and proportional assembly."""
    aged = filter_by_age(
        pool, requester.min_age_preference, requester.max_age_preference, today
    )
    logger.debug("Age filter kept %d of %d candidates", len(aged), len(pool))

    preference = requester.gender_preference
    if preference is None:
        return aged[:limit]

    preferred, fill = partition_by_gender(aged, preference)
    logger.debug("Gender partition: preferred=%d fill=%d", len(preferred), len(fill))
    return assemble(preferred, fill, limit, preferred_ratio)
