"""Similarity-thresholded user neighborhoods."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import InvalidRequest
from .similarity import PearsonUserSimilarity


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimilarUser:
    userId: int
    similarity: float
    common_rated: int


def check_threshold(threshold: float) -> float:
    value = float(threshold)
    if not -1.0 <= value <= 1.0:
        raise InvalidRequest(f"similarity threshold must be in [-1, 1], got {threshold!r}")
    return value


class ThresholdNeighborhood:
    """All users whose similarity with the target reaches a threshold."""

    def __init__(self, similarity: PearsonUserSimilarity, *, threshold: float = 0.1) -> None:
        self.similarity = similarity
        self.store = similarity.store
        self.threshold = check_threshold(threshold)

    def _candidates(self, user_id: int) -> set[int]:
        # Users without a co-rated item can never have a defined similarity.
        out: set[int] = set()
        for item_id in self.store.ratings_of(user_id):
            out.update(self.store.users_of(item_id))
        out.discard(user_id)
        return out

    def neighbors_of(self, user_id: int, threshold: float | None = None) -> list[SimilarUser]:
        """Neighbors sorted by similarity desc, then userId asc. Never includes `user_id`."""
        t = self.threshold if threshold is None else check_threshold(threshold)
        uid = int(user_id)

        out: list[SimilarUser] = []
        for other in self._candidates(uid):
            sim, common = self.similarity.pair(uid, other)
            if sim is None or sim < t:
                continue
            out.append(SimilarUser(userId=int(other), similarity=float(sim), common_rated=int(common)))

        out.sort(key=lambda s: (-s.similarity, s.userId))
        logger.debug("neighborhood user=%d threshold=%.3f size=%d", uid, t, len(out))
        return out
