from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Optional

from .neighborhood import SimilarUser, ThresholdNeighborhood
from .recommender import RecommendedItem, UserBasedRecommender
from .similarity import PearsonUserSimilarity
from .store import RatingStore

if TYPE_CHECKING:
    from .build import UserCFConfig


@dataclass(frozen=True)
class UserCFModel:
    """A built, read-only user-user CF model.

    Produced by `build_model`; the underlying store is frozen so any number of
    threads may query the model at once.
    """

    config: "UserCFConfig"
    store: RatingStore
    similarity_engine: PearsonUserSimilarity
    neighborhood: ThresholdNeighborhood
    recommender: UserBasedRecommender

    def has_user(self, user_id: int) -> bool:
        return self.store.has_user(user_id)

    def similarity(self, user_a: int, user_b: int) -> Optional[float]:
        return self.similarity_engine.similarity(user_a, user_b)

    def neighbors_of(self, user_id: int, threshold: float | None = None) -> list[SimilarUser]:
        return self.neighborhood.neighbors_of(user_id, threshold)

    def similar_users(self, user_id: int, *, top_n: int = 10) -> list[SimilarUser]:
        return self.neighbors_of(user_id)[: max(int(top_n), 0)]

    def recommend(self, user_id: int, top_n: int | None = None) -> list[RecommendedItem]:
        n = self.config.top_n if top_n is None else int(top_n)
        return self.recommender.recommend(user_id, n)

    def recommend_ids(self, user_id: int, top_n: int | None = None) -> list[int]:
        return [r.itemId for r in self.recommend(user_id, top_n)]

    def recommend_many(
        self,
        user_ids: Iterable[int],
        top_n: int | None = None,
        *,
        max_workers: int | None = None,
    ) -> dict[int, list[RecommendedItem]]:
        """Recommend for several users in parallel threads."""
        ids = [int(u) for u in user_ids]
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            results = list(pool.map(lambda u: self.recommend(u, top_n), ids))
        return dict(zip(ids, results))

    def stats(self) -> dict[str, int]:
        return {
            "userCount": self.store.user_count(),
            "itemCount": self.store.item_count(),
            "ratingCount": self.store.rating_count(),
        }
