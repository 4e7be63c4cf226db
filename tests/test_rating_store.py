from __future__ import annotations

import math

import pandas as pd
import pytest

from src.user_cf import InvalidRating, RatingStore, StoreFrozenError


def test_add_rating_overwrites_existing_pair() -> None:
    store = RatingStore()
    store.add_rating(1, 10, 2.0)
    store.add_rating(1, 10, 4.5)

    assert dict(store.ratings_of(1)) == {10: 4.5}
    assert dict(store.users_of(10)) == {1: 4.5}
    assert store.rating_count() == 1
    assert store.mean_rating(1) == pytest.approx(4.5)


def test_counts_and_inverse_index(scenario_ratings) -> None:
    store = RatingStore.from_triples(scenario_ratings)

    assert store.user_count() == 3
    assert store.item_count() == 4
    assert store.rating_count() == 10
    assert dict(store.users_of(4)) == {2: 2.0}
    assert set(store.users_of(1)) == {1, 2, 3}
    assert store.user_ids() == [1, 2, 3]
    assert store.mean_rating(2) == pytest.approx(3.75)


def test_unknown_user_and_item_are_empty_not_errors() -> None:
    store = RatingStore.from_triples([(1, 1, 3.0)]).freeze()

    assert dict(store.ratings_of(99)) == {}
    assert dict(store.users_of(99)) == {}
    assert store.mean_rating(99) is None
    assert not store.has_user(99)


@pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf, "4", None, True])
def test_invalid_scores_are_rejected_without_side_effects(bad) -> None:
    store = RatingStore()
    store.add_rating(1, 1, 3.0)

    with pytest.raises(InvalidRating):
        store.add_rating(1, 2, bad)

    assert dict(store.ratings_of(1)) == {1: 3.0}
    assert store.item_count() == 1
    assert store.rating_count() == 1


def test_declared_range_is_enforced() -> None:
    store = RatingStore(min_score=1.0, max_score=5.0)
    store.add_rating(1, 1, 1.0)
    store.add_rating(1, 2, 5.0)

    with pytest.raises(InvalidRating):
        store.add_rating(1, 3, 0.5)
    with pytest.raises(InvalidRating):
        store.add_rating(1, 3, 5.5)
    assert store.rating_count() == 2


def test_frozen_store_rejects_mutation_and_returns_read_only_views(scenario_ratings) -> None:
    store = RatingStore.from_triples(scenario_ratings).freeze()

    assert store.frozen
    with pytest.raises(StoreFrozenError):
        store.add_rating(1, 4, 3.0)
    with pytest.raises(TypeError):
        store.ratings_of(1)[4] = 3.0  # type: ignore[index]
    assert store.mean_rating(1) == pytest.approx(4.0)


def test_from_frame_accepts_numpy_scalars_and_keeps_last_duplicate() -> None:
    df = pd.DataFrame(
        {"userId": [1, 1, 2], "itemId": [7, 7, 7], "score": [1.0, 3.0, 2.0]},
    )
    store = RatingStore.from_frame(df)

    assert dict(store.ratings_of(1)) == {7: 3.0}
    assert store.rating_count() == 2

    assert dict(store.users_of(7)) == {1: 3.0, 2: 2.0}


@pytest.mark.parametrize("bad_id", [1.5, float("nan"), "1", None, True])
def test_non_integral_ids_are_rejected(bad_id) -> None:
    store = RatingStore()
    store.add_rating(1, 1, 3.0)

    with pytest.raises(InvalidRating):
        store.add_rating(bad_id, 2, 4.0)
    with pytest.raises(InvalidRating):
        store.add_rating(2, bad_id, 4.0)

    assert store.user_count() == 1
    assert store.item_count() == 1
    assert store.rating_count() == 1


def test_integral_float_ids_are_accepted() -> None:
    # Float id columns (e.g. a frame that went through NaN handling) still load.
    df = pd.DataFrame({"userId": [1.0, 2.0], "itemId": [3.0, 3.0], "score": [4.0, 5.0]})
    store = RatingStore.from_frame(df)

    assert store.user_ids() == [1, 2]
    assert dict(store.users_of(3)) == {1: 4.0, 2: 5.0}


def test_from_frame_requires_columns() -> None:
    with pytest.raises(ValueError):
        RatingStore.from_frame(pd.DataFrame({"userId": [1], "movieId": [2], "rating": [3.0]}))


def test_from_frame_rejects_nan_score() -> None:
    df = pd.DataFrame({"userId": [1], "itemId": [2], "score": [float("nan")]})
    with pytest.raises(InvalidRating):
        RatingStore.from_frame(df)
