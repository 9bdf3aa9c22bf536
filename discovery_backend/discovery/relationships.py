from __future__ import annotations

import logging

from .models import RelationshipType
from .store import RelationshipStore

logger = logging.getLogger(__name__)


class RelationshipGuard:
    """Resolves which users must never be shown to a requester."""

    def __init__(self, relationships: RelationshipStore) -> None:
        self._relationships = relationships

    def blocked_by(self, user_id: str) -> set[str]:
        """Users who blocked *user_id*."""
        rows = self._relationships.find(recipient_id=user_id, type=RelationshipType.blocked)
        return {r.requester_id for r in rows}

    def blocked_users(self, user_id: str) -> set[str]:
        """Users *user_id* has blocked."""
        rows = self._relationships.find(requester_id=user_id, type=RelationshipType.blocked)
        return {r.recipient_id for r in rows}

    def excluded_ids(self, requester_id: str) -> set[str]:
        # Store failures propagate; callers never see a partial set.
        excluded = {requester_id}
        excluded |= self.blocked_by(requester_id)
        excluded |= self.blocked_users(requester_id)
        logger.debug("Exclusion set for %s has %d ids", requester_id, len(excluded))
        return excluded

    def is_blocked(self, user_a: str, user_b: str) -> bool:
        return user_b in self.blocked_users(user_a) or user_b in self.blocked_by(user_a)
