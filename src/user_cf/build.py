from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

import pandas as pd

from .errors import InvalidRequest
from .model import UserCFModel
from .neighborhood import ThresholdNeighborhood, check_threshold
from .recommender import UserBasedRecommender
from .similarity import DEFAULT_CACHE_SIZE, PearsonUserSimilarity
from .store import RatingStore


logger = logging.getLogger(__name__)

Ratings = Union[pd.DataFrame, Iterable[Tuple[int, int, float]]]


@dataclass(frozen=True)
class UserCFConfig:
    similarity_threshold: float = 0.1
    top_n: int = 5
    min_score: Optional[float] = None
    max_score: Optional[float] = None
    cache_similarities: bool = True
    similarity_cache_size: int = DEFAULT_CACHE_SIZE

    def __post_init__(self) -> None:
        check_threshold(self.similarity_threshold)
        if int(self.top_n) <= 0:
            raise InvalidRequest(f"top_n must be positive, got {self.top_n!r}")
        if self.min_score is not None and self.max_score is not None and self.min_score > self.max_score:
            raise InvalidRequest(f"min_score {self.min_score} exceeds max_score {self.max_score}")
        if int(self.similarity_cache_size) < 0:
            raise InvalidRequest(f"similarity_cache_size must be >= 0, got {self.similarity_cache_size!r}")

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None, **overrides: Any) -> "UserCFConfig":
        """Build from the `user_cf` section of config.yaml; non-None overrides win."""
        raw = raw if isinstance(raw, Mapping) else {}
        min_score = raw.get("min_score")
        max_score = raw.get("max_score")
        values: dict[str, Any] = {
            "similarity_threshold": float(raw.get("similarity_threshold", 0.1)),
            "top_n": int(raw.get("top_n", 5)),
            "min_score": None if min_score is None else float(min_score),
            "max_score": None if max_score is None else float(max_score),
            "cache_similarities": bool(raw.get("cache_similarities", True)),
            "similarity_cache_size": int(raw.get("similarity_cache_size", DEFAULT_CACHE_SIZE)),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def build_model(ratings: Ratings, cfg: UserCFConfig | None = None) -> UserCFModel:
    """Load ratings into a store, freeze it and wire the CF components.

    `ratings` is either a frame with columns userId, itemId, score or an
    iterable of (userId, itemId, score) triples. Later duplicates overwrite
    earlier ones.
    """
    cfg = cfg or UserCFConfig()
    if isinstance(ratings, pd.DataFrame):
        store = RatingStore.from_frame(ratings, min_score=cfg.min_score, max_score=cfg.max_score)
    else:
        store = RatingStore.from_triples(ratings, min_score=cfg.min_score, max_score=cfg.max_score)
    store.freeze()

    similarity = PearsonUserSimilarity(
        store,
        cache=cfg.cache_similarities,
        cache_size=cfg.similarity_cache_size,
    )
    neighborhood = ThresholdNeighborhood(similarity, threshold=cfg.similarity_threshold)
    recommender = UserBasedRecommender(store, neighborhood)

    logger.info(
        "UserCF built: users=%d items=%d ratings=%d threshold=%.3f",
        store.user_count(),
        store.item_count(),
        store.rating_count(),
        cfg.similarity_threshold,
    )
    return UserCFModel(
        config=cfg,
        store=store,
        similarity_engine=similarity,
        neighborhood=neighborhood,
        recommender=recommender,
    )
