"""
User discovery & recommendation engine.

Responsibilities:
- Resolve the exclusion set (self + blocked counterparts) for a requester.
- Find nearby users by geodesic distance, with an active-only variant.
- Track profile views and answer "who viewed me".
- Rank recently active candidates by age range and gender preference.
"""
