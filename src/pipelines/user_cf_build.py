from __future__ import annotations

import argparse
import logging
from pathlib import Path

from ..data import load_ratings_csv, load_review_log, save_ratings_csv
from ..paths import ProjectPaths, get_repo_root
from ..user_cf import UserCFConfig, build_model
from ..utils import load_yaml, section, setup_logging


logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Parse the review log, stage ratings CSV and build the UserCF model.")
    p.add_argument("--config", type=Path, default=Path("config.yaml"), help="Path to config YAML.")
    p.add_argument("--reviews", type=Path, default=None, help="Override dataset.reviews_path")
    p.add_argument("--out", type=Path, default=None, help="Override dataset.staging_csv")
    p.add_argument("--threshold", type=float, default=None, help="Override user_cf.similarity_threshold")
    p.add_argument("--skip-model", action="store_true", help="Only stage the CSV; do not build the model")
    return p


def main(argv: list[str] | None = None) -> None:
    setup_logging("INFO")
    args = build_arg_parser().parse_args(argv)
    repo_root = get_repo_root()
    config_path = Path(args.config)
    if not config_path.is_absolute():
        config_path = (repo_root / config_path).resolve()

    cfg_yaml = load_yaml(config_path)
    dataset_cfg = section(cfg_yaml, "dataset")
    paths = ProjectPaths.from_repo_root(
        repo_root,
        raw_dir=str(dataset_cfg.get("raw_dir", "data/raw")),
        processed_dir=str(dataset_cfg.get("processed_dir", "data/processed")),
        reviews_path=args.reviews or dataset_cfg.get("reviews_path"),
        staging_csv=args.out or dataset_cfg.get("staging_csv"),
    )
    cfg = UserCFConfig.from_mapping(section(cfg_yaml, "user_cf"), similarity_threshold=args.threshold)

    log = load_review_log(paths.reviews_path)
    out = save_ratings_csv(log, paths.staging_csv)
    logger.info("Staged %d ratings to %s", len(log.ratings), out)

    if args.skip_model:
        return

    # Build from the staged file so the model sees exactly what was written.
    model = build_model(load_ratings_csv(out), cfg)
    stats = model.stats()
    logger.info(
        "UserCF model: reviews=%d users=%d items=%d ratings=%d",
        log.total_reviews,
        stats["userCount"],
        stats["itemCount"],
        stats["ratingCount"],
    )


if __name__ == "__main__":
    main()
