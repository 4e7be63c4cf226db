"""User-user collaborative filtering (similar rating patterns) over product reviews.

Core idea:
- Store one score per (userId, itemId) in a sparse, frozen rating store
- Compare users by Pearson correlation over the items both have rated
- Keep every user whose similarity reaches a threshold as a neighbor
- Predict unseen items from mean-centered, similarity-weighted neighbor ratings
"""
from __future__ import annotations

from .build import UserCFConfig, build_model
from .errors import InvalidRating, InvalidRequest, StoreFrozenError, UserCFError
from .model import UserCFModel
from .neighborhood import SimilarUser, ThresholdNeighborhood
from .recommender import RecommendedItem, UserBasedRecommender
from .similarity import PearsonUserSimilarity, pearson_correlation
from .store import RatingStore

__all__ = [
    "InvalidRating",
    "InvalidRequest",
    "PearsonUserSimilarity",
    "RatingStore",
    "RecommendedItem",
    "SimilarUser",
    "StoreFrozenError",
    "ThresholdNeighborhood",
    "UserBasedRecommender",
    "UserCFConfig",
    "UserCFError",
    "UserCFModel",
    "build_model",
    "pearson_correlation",
]
