"""Review-log recommender: string ids in, string product ids out."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from ..data import ReviewLog, load_review_log
from ..paths import ProjectPaths, get_repo_root
from ..user_cf import UserCFConfig, UserCFModel, build_model
from ..utils import load_yaml, section

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProductRecommendation:
    productId: str
    score: float


@dataclass(frozen=True)
class SimilarReviewer:
    userId: str
    similarity: float
    common_rated: int


class ReviewRecommender:
    """User-user CF recommender built from a gzip review dump.

    Maps reviewer/product keys to dense ints, builds the model once, then
    answers queries by key. Unknown reviewers get empty results.
    """

    def __init__(self, log: ReviewLog, cfg: UserCFConfig | None = None) -> None:
        self.log = log
        self.config = cfg or UserCFConfig()
        self.model: UserCFModel = build_model(log.ratings, self.config)

    @classmethod
    def from_path(cls, reviews_path: Path, cfg: UserCFConfig | None = None) -> "ReviewRecommender":
        return cls(load_review_log(reviews_path), cfg)

    @classmethod
    def from_config(cls, config_path: Path | None = None, **overrides: Any) -> "ReviewRecommender":
        """Build from config.yaml (`dataset.reviews_path` + `user_cf` section)."""
        repo_root = get_repo_root()
        config_path = Path(config_path) if config_path else repo_root / "config.yaml"
        cfg_yaml = load_yaml(config_path)
        dataset_cfg = section(cfg_yaml, "dataset")
        paths = ProjectPaths.from_repo_root(
            repo_root,
            raw_dir=str(dataset_cfg.get("raw_dir", "data/raw")),
            reviews_path=dataset_cfg.get("reviews_path"),
        )
        cfg = UserCFConfig.from_mapping(section(cfg_yaml, "user_cf"), **overrides)
        return cls.from_path(paths.reviews_path, cfg)

    @property
    def total_reviews(self) -> int:
        return self.log.total_reviews

    @property
    def total_products(self) -> int:
        return len(self.log.products)

    @property
    def total_users(self) -> int:
        return len(self.log.users)

    def stats(self) -> dict[str, int]:
        out = dict(self.model.stats())
        out["reviewCount"] = self.total_reviews
        return out

    def _user_id(self, user_key: str) -> Optional[int]:
        return self.log.users.get(str(user_key))

    def recommended_items(self, user_key: str, k: int | None = None) -> list[ProductRecommendation]:
        uid = self._user_id(user_key)
        if uid is None:
            logger.info("Unknown reviewer %r; returning no recommendations", user_key)
            return []
        return [
            ProductRecommendation(productId=self.log.products.key_for(r.itemId), score=r.score)
            for r in self.model.recommend(uid, k)
        ]

    def recommendations_for_user(self, user_key: str, k: int | None = None) -> list[str]:
        return [r.productId for r in self.recommended_items(user_key, k)]

    def similar_users(self, user_key: str, *, top_n: int = 10) -> list[SimilarReviewer]:
        uid = self._user_id(user_key)
        if uid is None:
            return []
        return [
            SimilarReviewer(
                userId=self.log.users.key_for(s.userId),
                similarity=s.similarity,
                common_rated=s.common_rated,
            )
            for s in self.model.similar_users(uid, top_n=top_n)
        ]
