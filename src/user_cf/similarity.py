"""Pearson correlation similarity between users over co-rated items."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, NamedTuple, Optional

import numpy as np

from .store import RatingStore


logger = logging.getLogger(__name__)

MIN_COMMON_ITEMS = 2
DEFAULT_CACHE_SIZE = 100_000


def pearson_correlation(x: np.ndarray, y: np.ndarray) -> Optional[float]:
    """Pearson coefficient of two paired vectors, or None when undefined.

    Undefined when fewer than two pairs are given or either side has no variance.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if x.shape != y.shape:
        raise ValueError(f"paired vectors differ in shape: {x.shape} vs {y.shape}")
    if x.size < MIN_COMMON_ITEMS:
        return None

    dx = x - x.mean()
    dy = y - y.mean()
    sx = float(np.sqrt(np.dot(dx, dx)))
    sy = float(np.sqrt(np.dot(dy, dy)))
    if sx == 0.0 or sy == 0.0:
        return None

    r = float(np.dot(dx, dy)) / (sx * sy)
    # Rounding can push |r| marginally past 1.
    return float(min(1.0, max(-1.0, r)))


class PairSimilarity(NamedTuple):
    similarity: Optional[float]
    common_rated: int


class PearsonUserSimilarity:
    """User-user Pearson similarity backed by a `RatingStore`.

    With `cache=True`, (similarity, common_rated) results are kept in an LRU
    cache of at most `cache_size` unordered pairs. Values are computed from the
    frozen store in (min, max) id order, so a concurrent miss or an evicted
    entry always recomputes the same result.
    """

    def __init__(self, store: RatingStore, *, cache: bool = True, cache_size: int = DEFAULT_CACHE_SIZE) -> None:
        self.store = store
        self.cache_size_limit = int(cache_size) if cache else 0
        if self.cache_size_limit < 0:
            raise ValueError(f"cache_size must be >= 0, got {cache_size!r}")
        self._pair_cached = self._make_pair_cache(maxsize=self.cache_size_limit) if self.cache_size_limit else None

    def _make_pair_cache(self, *, maxsize: int) -> Any:
        """Create an LRU cache for ordered (low, high) user pairs."""

        @lru_cache(maxsize=int(maxsize))
        def _pair(low: int, high: int) -> PairSimilarity:
            return self._compute(low, high)

        return _pair

    def co_rated(self, user_a: int, user_b: int) -> list[int]:
        """Item IDs rated by both users, ascending."""
        ra = self.store.ratings_of(user_a)
        rb = self.store.ratings_of(user_b)
        if len(ra) > len(rb):
            ra, rb = rb, ra
        return sorted(i for i in ra if i in rb)

    def _compute(self, user_a: int, user_b: int) -> PairSimilarity:
        common = self.co_rated(user_a, user_b)
        if len(common) < MIN_COMMON_ITEMS:
            return PairSimilarity(None, len(common))
        ra = self.store.ratings_of(user_a)
        rb = self.store.ratings_of(user_b)
        x = np.fromiter((ra[i] for i in common), dtype=np.float64, count=len(common))
        y = np.fromiter((rb[i] for i in common), dtype=np.float64, count=len(common))
        return PairSimilarity(pearson_correlation(x, y), len(common))

    def pair(self, user_a: int, user_b: int) -> PairSimilarity:
        """Similarity and co-rated item count for two users, order-independent."""
        a = int(user_a)
        b = int(user_b)
        low, high = (a, b) if a <= b else (b, a)
        if self._pair_cached is None:
            return self._compute(low, high)
        return self._pair_cached(low, high)

    def similarity(self, user_a: int, user_b: int) -> Optional[float]:
        """Similarity in [-1, 1], or None when undefined (includes unknown users)."""
        return self.pair(user_a, user_b).similarity

    def cache_size(self) -> int:
        return 0 if self._pair_cached is None else int(self._pair_cached.cache_info().currsize)
