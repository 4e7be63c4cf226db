from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ProjectPaths:
    raw_dir: Path
    processed_dir: Path
    reviews_path: Path
    staging_csv: Path

    @classmethod
    def from_repo_root(
        cls,
        repo_root: Path,
        *,
        raw_dir: Path | str = "data/raw",
        processed_dir: Path | str = "data/processed",
        reviews_path: Path | str | None = None,
        staging_csv: Path | str | None = None,
    ) -> "ProjectPaths":
        def _resolve(p: Path | str) -> Path:
            p_path = Path(p) if isinstance(p, str) else p
            if not p_path.is_absolute():
                p_path = repo_root / p_path
            return p_path.resolve()

        raw_dir_p = _resolve(raw_dir)
        processed_dir_p = _resolve(processed_dir)
        return cls(
            raw_dir=raw_dir_p,
            processed_dir=processed_dir_p,
            reviews_path=_resolve(reviews_path) if reviews_path else raw_dir_p / "movies.txt.gz",
            staging_csv=_resolve(staging_csv) if staging_csv else processed_dir_p / "ratings.csv",
        )


def get_repo_root() -> Path:
    """Return repo root by searching upwards for `config.yaml` or `.git`."""
    start = Path.cwd().resolve()
    if start.is_file():
        start = start.parent

    for candidate in (start, *start.parents):
        if (candidate / "config.yaml").is_file() or (candidate / ".git").exists():
            return candidate

    # Fallback: search upwards from this file (useful if called from elsewhere).
    start = Path(__file__).resolve().parent
    for candidate in (start, *start.parents):
        if (candidate / "config.yaml").is_file() or (candidate / ".git").exists():
            return candidate

    raise FileNotFoundError("Could not locate repo root (expected `config.yaml` or `.git`).")
