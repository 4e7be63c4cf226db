from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from src.user_cf import InvalidRequest, RecommendedItem, UserCFConfig, build_model


def test_scenario_recommends_unique_item_of_strongest_neighbor(scenario_ratings) -> None:
    model = build_model(scenario_ratings, UserCFConfig(similarity_threshold=0.1))

    recs = model.recommend(1, 1)
    assert [r.itemId for r in recs] == [4]
    # mean(A)=4, mean(B)=3.75, single neighbor -> 4 + (2 - 3.75)
    assert recs[0].score == pytest.approx(2.25)
    assert model.recommend_ids(1, 5) == [4]


def test_ranking_by_predicted_score_then_item_id() -> None:
    triples = [
        (1, 1, 5.0), (1, 2, 3.0), (1, 3, 4.0),
        (2, 1, 5.0), (2, 2, 3.0), (2, 3, 5.0), (2, 4, 2.0), (2, 5, 5.0), (2, 6, 4.0), (2, 7, 4.0),
    ]
    model = build_model(triples)

    # mean(A) == mean(B) == 4, so predictions equal B's ratings; 6 and 7 tie
    assert model.recommend_ids(1, 10) == [5, 6, 7, 4]
    assert model.recommend_ids(1, 2) == [5, 6]


def test_weighted_average_over_several_neighbors() -> None:
    triples = [
        (1, 1, 1.0), (1, 2, 2.0), (1, 3, 3.0),
        (2, 1, 1.0), (2, 2, 2.0), (2, 3, 3.0), (2, 9, 4.0),
        (3, 1, 1.0), (3, 2, 3.0), (3, 3, 2.0), (3, 9, 1.0),
    ]
    model = build_model(triples, UserCFConfig(similarity_threshold=0.0))

    s2 = model.similarity(1, 2)
    s3 = model.similarity(1, 3)
    assert s2 == pytest.approx(1.0)
    assert s3 == pytest.approx(0.5)
    expected = 2.0 + (s2 * (4.0 - 2.5) + s3 * (1.0 - 1.75)) / (abs(s2) + abs(s3))
    (rec,) = model.recommend(1, 3)
    assert rec == RecommendedItem(itemId=9, score=pytest.approx(expected))


def test_cold_start_and_non_positive_n_are_empty(scenario_ratings) -> None:
    model = build_model(scenario_ratings)

    assert model.recommend(999, 5) == []
    assert model.recommend(1, 0) == []
    assert model.recommend(1, -3) == []


def test_no_neighbors_means_no_recommendations(scenario_ratings) -> None:
    model = build_model(scenario_ratings)
    # C's ratings have no variance, so C has no neighbors.
    assert model.neighbors_of(3) == []
    assert model.recommend(3, 5) == []


def test_default_top_n_comes_from_config() -> None:
    triples = [(1, 1, 5.0), (1, 2, 1.0)] + [(2, 1, 5.0), (2, 2, 1.0)] + [(2, i, float(i % 5 + 1)) for i in range(3, 12)]
    model = build_model(triples, UserCFConfig(top_n=3))
    assert len(model.recommend(1)) == 3


def test_config_validation() -> None:
    with pytest.raises(InvalidRequest):
        UserCFConfig(similarity_threshold=1.5)
    with pytest.raises(InvalidRequest):
        UserCFConfig(similarity_threshold=-2.0)
    with pytest.raises(InvalidRequest):
        UserCFConfig(top_n=0)
    with pytest.raises(InvalidRequest):
        UserCFConfig(min_score=5.0, max_score=1.0)
    with pytest.raises(InvalidRequest):
        UserCFConfig(similarity_cache_size=-1)


def test_config_from_mapping_with_overrides() -> None:
    cfg = UserCFConfig.from_mapping(
        {"similarity_threshold": 0.3, "top_n": 7, "max_score": 5},
        similarity_threshold=None,
        top_n=2,
    )
    assert cfg.similarity_threshold == pytest.approx(0.3)
    assert cfg.top_n == 2
    assert cfg.max_score == 5.0
    assert cfg.min_score is None
    assert UserCFConfig.from_mapping(None) == UserCFConfig()


def test_stats_and_frame_input(scenario_ratings) -> None:
    df = pd.DataFrame(scenario_ratings, columns=["userId", "itemId", "score"])
    model = build_model(df)

    assert model.stats() == {"userCount": 3, "itemCount": 4, "ratingCount": 10}
    assert model.store.frozen


def _random_model(seed: int = 11):
    rng = np.random.default_rng(seed)
    triples = [
        (int(u), int(i), float(rng.integers(1, 6)))
        for u in range(20)
        for i in rng.choice(25, size=10, replace=False)
    ]
    return build_model(triples, UserCFConfig(similarity_threshold=0.1))


def test_properties_on_random_data() -> None:
    model = _random_model()

    for uid in range(20):
        seen = set(model.store.ratings_of(uid))
        for n in (-1, 0, 1, 3, 10):
            recs = model.recommend(uid, n)
            assert len(recs) <= max(n, 0)
            assert not seen & {r.itemId for r in recs}
            keys = [(-r.score, r.itemId) for r in recs]
            assert keys == sorted(keys)
        assert model.recommend(uid, 10) == model.recommend(uid, 10)

        for other in range(20):
            s1 = model.similarity(uid, other)
            s2 = model.similarity(other, uid)
            if s1 is None:
                assert s2 is None
            else:
                assert s1 == pytest.approx(s2)
                assert -1.0 <= s1 <= 1.0


def test_recommend_many_matches_sequential_calls() -> None:
    model = _random_model(seed=3)
    users = list(range(20)) + [777]

    parallel = model.recommend_many(users, 5, max_workers=4)

    assert parallel == {u: model.recommend(u, 5) for u in users}
    assert parallel[777] == []
