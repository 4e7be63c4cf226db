"""Recommend products to a reviewer from a gzip review dump.

Example:
    python -m src.user_cf.cli --reviews data/raw/movies.txt.gz --user-id A141HP4LYPWMSR
"""
from __future__ import annotations

import argparse
from pathlib import Path

import pandas as pd

from ..service.recommender import ReviewRecommender
from ..utils import setup_logging
from .build import UserCFConfig


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="User-user collaborative filtering over a review log")
    p.add_argument("--user-id", type=str, required=True, help="Reviewer id as it appears in the review log")
    p.add_argument("--reviews", type=Path, default=None, help="gzip review log; default from config.yaml")
    p.add_argument("--config", type=Path, default=None, help="Path to config YAML")
    p.add_argument("--k", type=int, default=None, help="How many recommendations to return")
    p.add_argument("--threshold", type=float, default=None, help="Override similarity threshold in [-1, 1]")
    p.add_argument("--similar", type=int, default=10, help="How many similar users to show")
    return p


def main(argv: list[str] | None = None) -> None:
    setup_logging("INFO")
    args = build_arg_parser().parse_args(argv)

    if args.reviews is not None:
        cfg = UserCFConfig.from_mapping(None, similarity_threshold=args.threshold)
        rec = ReviewRecommender.from_path(args.reviews, cfg)
    else:
        rec = ReviewRecommender.from_config(args.config, similarity_threshold=args.threshold)

    print("\n=== Totals ===")
    print(f"reviews={rec.total_reviews} users={rec.total_users} products={rec.total_products}")

    sims = rec.similar_users(args.user_id, top_n=int(args.similar))
    print("\n=== Similar Users ===")
    if sims:
        print(pd.DataFrame([s.__dict__ for s in sims]).to_string(index=False))
    else:
        print("No similar users found (try lowering --threshold).")

    recs = rec.recommended_items(args.user_id, k=args.k)
    print("\n=== Recommended Products ===")
    if recs:
        print(pd.DataFrame([r.__dict__ for r in recs]).to_string(index=False))
    else:
        print("No recommendations found.")


if __name__ == "__main__":
    main()
