from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping

from .neighborhood import SimilarUser, ThresholdNeighborhood
from .store import RatingStore


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecommendedItem:
    itemId: int
    score: float


class UserBasedRecommender:
    """User-user CF over a threshold neighborhood.

    Scoring for a candidate item i (not rated by target u):

        pred(i) = mean(u) + sum_v sim(u, v) * (r_v(i) - mean(v)) / sum_v |sim(u, v)|

    where v ranges over neighbors who rated i and means are taken over each
    user's full rating set. Items with a zero denominator are dropped.
    """

    def __init__(self, store: RatingStore, neighborhood: ThresholdNeighborhood) -> None:
        self.store = store
        self.neighborhood = neighborhood

    def _accumulate(self, neighbors: list[SimilarUser], seen: Mapping[int, float]) -> dict[int, list[float]]:
        """itemId -> [numerator, denominator] in one pass over each neighbor's ratings."""
        sums: dict[int, list[float]] = {}
        for nb in neighbors:
            nb_mean = self.store.mean_rating(nb.userId)
            weight = abs(nb.similarity)
            for item_id, r in self.store.ratings_of(nb.userId).items():
                if item_id in seen:
                    continue
                acc = sums.setdefault(item_id, [0.0, 0.0])
                acc[0] += nb.similarity * (r - nb_mean)
                acc[1] += weight
        return sums

    def recommend(self, user_id: int, n: int) -> list[RecommendedItem]:
        """Up to `n` unseen items ranked by predicted score desc, then itemId asc."""
        uid = int(user_id)
        if int(n) <= 0:
            return []
        if not self.store.has_user(uid):
            logger.info("Cold start: user %d has no ratings", uid)
            return []

        neighbors = self.neighborhood.neighbors_of(uid)
        if not neighbors:
            logger.info("No neighbors for user %d at threshold %.3f", uid, self.neighborhood.threshold)
            return []

        user_mean = self.store.mean_rating(uid)
        sums = self._accumulate(neighbors, self.store.ratings_of(uid))
        scored = [
            RecommendedItem(itemId=int(item_id), score=float(user_mean + num / den))
            for item_id, (num, den) in sums.items()
            if den != 0.0
        ]

        if not scored:
            logger.info("No scorable candidates for user %d (neighbors=%d)", uid, len(neighbors))
            return []

        scored.sort(key=lambda r: (-r.score, r.itemId))
        return scored[: int(n)]
