from __future__ import annotations

from datetime import date, datetime

import pytest

from discovery_backend.discovery.models import (
    Candidate,
    Gender,
    GenderPreference,
    User,
    UserProfile,
)
from discovery_backend.discovery.ranking import (
    assemble,
    compute_age,
    filter_by_age,
    partition_by_gender,
    rank_candidates,
)


TODAY = date(2024, 7, 26)


def _candidate(uid: str, gender: Gender | None = Gender.female, age: int | None = 25) -> Candidate:
    return Candidate(
        profile=UserProfile(
            user_id=uid,
            gender=gender,
            birth_date=date(TODAY.year - age, 1, 1) if age is not None else None,
        ),
        user=User(id=uid, username=uid, display_name=uid.title()),
    )


def _ids(candidates):
    return [c.user_id for c in candidates]


# ── Age ─────────────────────────────────────────────────────────────────


class TestComputeAge:
    today = date(2024, 7, 26)

    def test_none(self):
        assert compute_age(None, self.today) is None

    def test_birthday_passed(self):
        assert compute_age(date(1994, 3, 15), self.today) == 30

    def test_eighteenth_birthday_today(self):
        assert compute_age(date(2006, 7, 26), self.today) == 18

    def test_eighteenth_birthday_tomorrow(self):
        assert compute_age(date(2006, 7, 27), self.today) == 17

    def test_accepts_datetime(self):
        assert compute_age(datetime(1999, 10, 20, 12, 0), self.today) == 24

    def test_future_birth_date(self):
        assert compute_age(date(2030, 1, 1), self.today) is None


def test_age_range_inclusive_bounds():
    pool = [_candidate("a27", age=27), _candidate("a30", age=30), _candidate("a34", age=34),
            _candidate("a35", age=35), _candidate("a40", age=40)]
    assert _ids(filter_by_age(pool, 30, 35, TODAY)) == ["a30", "a34", "a35"]


def test_missing_birth_date_always_dropped():
    pool = [_candidate("nobday", age=None), _candidate("ok", age=22)]
    assert _ids(filter_by_age(pool, None, None, TODAY)) == ["ok"]


def test_open_ended_bounds():
    pool = [_candidate("a20", age=20), _candidate("a60", age=60)]
    assert _ids(filter_by_age(pool, None, 30, TODAY)) == ["a20"]
    assert _ids(filter_by_age(pool, 30, None, TODAY)) == ["a60"]


# ── Gender partition ────────────────────────────────────────────────────


def test_partition_male_preference():
    pool = [_candidate("f1", Gender.female), _candidate("m1", Gender.male),
            _candidate("o1", Gender.other), _candidate("m2", Gender.male), _candidate("n1", None)]
    preferred, fill = partition_by_gender(pool, GenderPreference.male)

    assert _ids(preferred) == ["m1", "m2"]
    assert _ids(fill) == ["f1", "o1"]


def test_partition_both_preference_fills_only_with_other():
    pool = [_candidate("f1", Gender.female), _candidate("o1", Gender.other), _candidate("m1", Gender.male)]
    preferred, fill = partition_by_gender(pool, GenderPreference.both)

    assert _ids(preferred) == ["f1", "m1"]
    assert _ids(fill) == ["o1"]


# ── Assembly ────────────────────────────────────────────────────────────


def test_assemble_caps_preferred_share():
    preferred = [_candidate(f"p{i}", Gender.male) for i in range(30)]
    fill = [_candidate(f"f{i}") for i in range(30)]
    result = assemble(preferred, fill, limit=20, preferred_ratio=0.75)

    assert len(result) == 20
    assert _ids(result[:15]) == [f"p{i}" for i in range(15)]
    assert _ids(result[15:]) == [f"f{i}" for i in range(5)]


def test_assemble_backfills_when_preferred_scarce():
    preferred = [_candidate("p0", Gender.male)]
    fill = [_candidate(f"f{i}") for i in range(30)]
    result = assemble(preferred, fill, limit=20)

    assert len(result) == 20
    assert _ids(result)[0] == "p0"


def test_assemble_with_no_fill_returns_preferred_up_to_target():
    preferred = [_candidate(f"p{i}", Gender.male) for i in range(30)]
    result = assemble(preferred, [], limit=20)
    assert len(result) == 15


def test_assemble_ratio_is_overridable():
    preferred = [_candidate(f"p{i}", Gender.male) for i in range(10)]
    fill = [_candidate(f"f{i}") for i in range(10)]
    result = assemble(preferred, fill, limit=10, preferred_ratio=0.5)
    assert _ids(result) == [f"p{i}" for i in range(5)] + [f"f{i}" for i in range(5)]


def test_assemble_rounds_target_up():
    preferred = [_candidate(f"p{i}", Gender.male) for i in range(10)]
    fill = [_candidate(f"f{i}") for i in range(10)]
    # ceil(5 * 0.75) == 4
    result = assemble(preferred, fill, limit=5)
    assert _ids(result) == ["p0", "p1", "p2", "p3", "f0"]


# ── Full pipeline ───────────────────────────────────────────────────────


def test_male_preference_small_pool_keeps_preferred_first():
    requester = UserProfile(user_id="me", gender_preference=GenderPreference.male)
    pool = [_candidate("male1", Gender.male), _candidate("female", Gender.female),
            _candidate("male2", Gender.male)]

    assert _ids(rank_candidates(requester, pool, today=TODAY)) == ["male1", "male2", "female"]


def test_no_preference_keeps_recency_order():
    requester = UserProfile(user_id="me")
    pool = [_candidate(f"c{i}", gender) for i, gender in
            enumerate([Gender.male, Gender.female, None, Gender.other] * 8)]

    result = rank_candidates(requester, pool, today=TODAY)
    assert _ids(result) == [f"c{i}" for i in range(20)]


def test_no_preference_still_applies_age_filter():
    requester = UserProfile(user_id="me", min_age_preference=30, max_age_preference=35)
    pool = [_candidate("a34", age=34), _candidate("a27", age=27), _candidate("a40", age=40),
            _candidate("nobday", age=None)]

    assert _ids(rank_candidates(requester, pool, today=TODAY)) == ["a34"]


@pytest.mark.parametrize("limit", [1, 4, 20])
def test_never_returns_fewer_than_available(limit):
    requester = UserProfile(user_id="me", gender_preference=GenderPreference.female)
    pool = [_candidate("m1", Gender.male), _candidate("m2", Gender.male), _candidate("o1", Gender.other)]

    assert len(rank_candidates(requester, pool, limit=limit, today=TODAY)) == min(limit, 3)
