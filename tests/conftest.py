from __future__ import annotations

import gzip
import sys
from pathlib import Path

import pytest

# Ensure `import src...` works when pytest uses importlib import mode.
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

# Users A=1, B=2, C=3 over items i1..i4 = 1..4.
_SCENARIO_RATINGS = [
    (1, 1, 5.0), (1, 2, 3.0), (1, 3, 4.0),
    (2, 1, 5.0), (2, 2, 3.0), (2, 3, 5.0), (2, 4, 2.0),
    (3, 1, 1.0), (3, 2, 1.0), (3, 3, 1.0),
]


def write_review_log(path: Path, reviews: list[tuple[str, str, float]]) -> Path:
    """Write (productId, userId, score) reviews in the gzip dump format."""
    blocks = []
    for product, user, score in reviews:
        blocks.append(
            "\n".join(
                [
                    f"product/productId: {product}",
                    f"review/userId: {user}",
                    "review/profileName: someone",
                    "review/helpfulness: 0/0",
                    f"review/score: {score}",
                    "review/time: 1182729600",
                    "review/summary: ok",
                    "review/text: fine movie",
                ]
            )
        )
    with gzip.open(path, "wt", encoding="utf-8") as f:
        f.write("\n\n".join(blocks) + "\n")
    return path


@pytest.fixture()
def scenario_ratings() -> list[tuple[int, int, float]]:
    return list(_SCENARIO_RATINGS)


@pytest.fixture()
def make_review_log(tmp_path: Path):
    def _make(reviews: list[tuple[str, str, float]], name: str = "movies.txt.gz") -> Path:
        return write_review_log(tmp_path / name, reviews)

    return _make


@pytest.fixture()
def scenario_reviews() -> list[tuple[str, str, float]]:
    return [
        ("i1", "A", 5.0), ("i1", "B", 5.0), ("i1", "C", 1.0),
        ("i2", "A", 3.0), ("i2", "B", 3.0), ("i2", "C", 1.0),
        ("i3", "A", 4.0), ("i3", "B", 5.0), ("i3", "C", 1.0),
        ("i4", "B", 2.0),
    ]


@pytest.fixture()
def review_log_path(tmp_path: Path, scenario_reviews) -> Path:
    return write_review_log(tmp_path / "movies.txt.gz", scenario_reviews)
