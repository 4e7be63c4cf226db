"""Sparse user -> item rating storage with an item -> user inverse index."""

from __future__ import annotations

import logging
import math
from numbers import Integral, Real
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple

import pandas as pd

from .errors import InvalidRating, StoreFrozenError


logger = logging.getLogger(__name__)

RATING_COLUMNS = ("userId", "itemId", "score")

_EMPTY: Mapping[int, float] = MappingProxyType({})


class RatingStore:
    """Holds at most one score per (userId, itemId) pair.

    The store is filled through `add_rating` and then finalized with `freeze()`.
    After freezing it rejects mutation and every returned mapping is a
    read-only view, so a frozen store can be shared between threads.
    """

    def __init__(self, *, min_score: Optional[float] = None, max_score: Optional[float] = None) -> None:
        self.min_score = None if min_score is None else float(min_score)
        self.max_score = None if max_score is None else float(max_score)
        self._by_user: dict[int, dict[int, float]] = {}
        self._by_item: dict[int, dict[int, float]] = {}
        self._user_sums: dict[int, float] = {}
        self._n_ratings = 0
        self._frozen = False
        self._means: dict[int, float] | None = None

    # ----- construction -----

    @classmethod
    def from_triples(
        cls,
        triples: Iterable[Tuple[int, int, float]],
        *,
        min_score: Optional[float] = None,
        max_score: Optional[float] = None,
    ) -> "RatingStore":
        store = cls(min_score=min_score, max_score=max_score)
        for user_id, item_id, score in triples:
            store.add_rating(user_id, item_id, score)
        return store

    @classmethod
    def from_frame(
        cls,
        df: pd.DataFrame,
        *,
        min_score: Optional[float] = None,
        max_score: Optional[float] = None,
    ) -> "RatingStore":
        """Load a frame with columns `userId, itemId, score` in row order."""
        missing = [c for c in RATING_COLUMNS if c not in df.columns]
        if missing:
            raise ValueError(f"ratings frame missing required columns: {missing}")
        rows = df[list(RATING_COLUMNS)].itertuples(index=False, name=None)
        return cls.from_triples(rows, min_score=min_score, max_score=max_score)

    def _check_score(self, score: object) -> float:
        if isinstance(score, bool) or not isinstance(score, Real):
            raise InvalidRating(f"score must be a real number, got {score!r}")
        value = float(score)
        if not math.isfinite(value):
            raise InvalidRating(f"score must be finite, got {value!r}")
        if self.min_score is not None and value < self.min_score:
            raise InvalidRating(f"score {value} below minimum {self.min_score}")
        if self.max_score is not None and value > self.max_score:
            raise InvalidRating(f"score {value} above maximum {self.max_score}")
        return value

    @staticmethod
    def _check_id(value: object, kind: str) -> int:
        if isinstance(value, bool) or not isinstance(value, Real):
            raise InvalidRating(f"{kind} must be an integer, got {value!r}")
        if isinstance(value, Integral):
            return int(value)
        as_float = float(value)
        if not as_float.is_integer():
            raise InvalidRating(f"{kind} must be an integer, got {value!r}")
        return int(as_float)

    def add_rating(self, user_id: int, item_id: int, score: float) -> None:
        """Insert or overwrite the rating of `item_id` by `user_id`."""
        if self._frozen:
            raise StoreFrozenError("rating store is frozen; rebuild the model to change ratings")
        uid = self._check_id(user_id, "userId")
        iid = self._check_id(item_id, "itemId")
        value = self._check_score(score)

        items = self._by_user.setdefault(uid, {})
        previous = items.get(iid)
        if previous is None:
            self._n_ratings += 1
            self._user_sums[uid] = self._user_sums.get(uid, 0.0) + value
        else:
            self._user_sums[uid] += value - previous
        items[iid] = value
        self._by_item.setdefault(iid, {})[uid] = value

    def freeze(self) -> "RatingStore":
        """Finalize the store. Idempotent; returns `self` for chaining."""
        if self._frozen:
            return self
        self._means = {uid: self._user_sums[uid] / len(items) for uid, items in self._by_user.items()}
        self._by_user = {uid: MappingProxyType(items) for uid, items in self._by_user.items()}  # type: ignore[misc]
        self._by_item = {iid: MappingProxyType(users) for iid, users in self._by_item.items()}  # type: ignore[misc]
        self._frozen = True
        logger.info(
            "RatingStore frozen: users=%d items=%d ratings=%d",
            self.user_count(),
            self.item_count(),
            self.rating_count(),
        )
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ----- queries -----

    def ratings_of(self, user_id: int) -> Mapping[int, float]:
        """itemId -> score for `user_id`; empty for unknown users."""
        items = self._by_user.get(int(user_id))
        if items is None:
            return _EMPTY
        return items if self._frozen else MappingProxyType(items)

    def users_of(self, item_id: int) -> Mapping[int, float]:
        """userId -> score for `item_id`; empty for unknown items."""
        users = self._by_item.get(int(item_id))
        if users is None:
            return _EMPTY
        return users if self._frozen else MappingProxyType(users)

    def mean_rating(self, user_id: int) -> Optional[float]:
        uid = int(user_id)
        if self._means is not None:
            return self._means.get(uid)
        items = self._by_user.get(uid)
        if not items:
            return None
        return self._user_sums[uid] / len(items)

    def has_user(self, user_id: int) -> bool:
        return int(user_id) in self._by_user

    def user_ids(self) -> list[int]:
        return sorted(self._by_user)

    def user_count(self) -> int:
        return len(self._by_user)

    def item_count(self) -> int:
        return len(self._by_item)

    def rating_count(self) -> int:
        return self._n_ratings
