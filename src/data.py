from __future__ import annotations

import gzip
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Tuple

import pandas as pd


logger = logging.getLogger(__name__)

PRODUCT_KEY = "product/productId: "
USER_KEY = "review/userId: "
SCORE_KEY = "review/score: "

RATING_COLUMNS = ("userId", "itemId", "score")


class ReviewLogError(ValueError):
    """A review record that cannot be turned into a rating."""


@dataclass
class IdMap:
    """Bidirectional map between opaque string keys and dense int ids (first-seen order)."""

    _to_id: Dict[str, int] = field(default_factory=dict)
    _to_key: List[str] = field(default_factory=list)

    def id_for(self, key: str) -> int:
        """Return the id for `key`, assigning the next id if unseen."""
        idx = self._to_id.get(key)
        if idx is None:
            idx = len(self._to_key)
            self._to_id[key] = idx
            self._to_key.append(key)
        return idx

    def get(self, key: str) -> int | None:
        return self._to_id.get(key)

    def key_for(self, idx: int) -> str:
        return self._to_key[int(idx)]

    def __contains__(self, key: object) -> bool:
        return key in self._to_id

    def __len__(self) -> int:
        return len(self._to_key)


@dataclass(frozen=True)
class ReviewRecord:
    product_key: str
    user_key: str
    score: float


@dataclass(frozen=True)
class ReviewLog:
    ratings: pd.DataFrame
    users: IdMap
    products: IdMap
    total_reviews: int


def parse_review_lines(lines: Iterable[str]) -> Iterator[ReviewRecord]:
    """Yield one record per review in a line-oriented review dump.

    A `product/productId:` line sets the current product, a `review/userId:`
    line opens a review for it and the following `review/score:` line closes
    it. All other lines are ignored.
    """
    product: str | None = None
    user: str | None = None
    for lineno, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        if line.startswith(PRODUCT_KEY):
            product = line[len(PRODUCT_KEY):].strip()
        elif line.startswith(USER_KEY):
            user = line[len(USER_KEY):].strip()
        elif line.startswith(SCORE_KEY):
            if user is None or product is None:
                raise ReviewLogError(f"line {lineno}: score without a preceding product/user")
            text = line[len(SCORE_KEY):].strip()
            try:
                score = float(text)
            except ValueError as exc:
                raise ReviewLogError(f"line {lineno}: unparsable score {text!r}") from exc
            yield ReviewRecord(product_key=product, user_key=user, score=score)
            user = None


def build_review_log(records: Iterable[ReviewRecord]) -> ReviewLog:
    """Map string keys to dense ids and collect ratings in arrival order."""
    users = IdMap()
    products = IdMap()
    rows: List[Tuple[int, int, float]] = []
    for rec in records:
        # Products get their id before users, matching the order they appear in the dump.
        item_id = products.id_for(rec.product_key)
        user_id = users.id_for(rec.user_key)
        rows.append((user_id, item_id, rec.score))

    ratings = pd.DataFrame(rows, columns=list(RATING_COLUMNS)).astype(
        {"userId": "int64", "itemId": "int64", "score": "float64"}
    )
    return ReviewLog(ratings=ratings, users=users, products=products, total_reviews=len(rows))


def load_review_log(path: Path) -> ReviewLog:
    """Parse a gzip-compressed review dump (UTF-8)."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Review log not found: {path}")

    with gzip.open(path, "rt", encoding="utf-8", errors="replace") as f:
        log = build_review_log(parse_review_lines(f))

    logger.info(
        "Loaded review log %s: reviews=%d users=%d products=%d",
        path,
        log.total_reviews,
        len(log.users),
        len(log.products),
    )
    return log


def save_ratings_csv(log: ReviewLog, path: Path) -> Path:
    """Write the staging file as `userId,itemId,score` rows without a header."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    log.ratings.to_csv(path, header=False, index=False)
    return path


def load_ratings_csv(path: Path) -> pd.DataFrame:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Ratings CSV not found: {path}")
    df = pd.read_csv(
        path,
        header=None,
        names=list(RATING_COLUMNS),
        dtype={"userId": "int64", "itemId": "int64", "score": "float64"},
    )
    validate_ratings(df)
    return df


def validate_ratings(ratings: pd.DataFrame) -> None:
    """Check the columns and basic constraints of a ratings frame."""
    missing = [c for c in RATING_COLUMNS if c not in ratings.columns]
    if missing:
        raise ValueError(f"ratings missing columns: {missing}")
    if ratings[["userId", "itemId"]].isna().any().any():
        raise ValueError("ratings contain null userId/itemId values")
    if ((ratings["userId"] < 0) | (ratings["itemId"] < 0)).any():
        raise ValueError("ratings contain negative ids")
