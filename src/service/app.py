"""FastAPI service entrypoint for the review-based user-user CF recommender."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException

from ..paths import get_repo_root
from ..utils import setup_logging
from .recommender import ReviewRecommender
from .schemas import (
    RecommendRequest,
    RecommendResponse,
    SimilarUsersRequest,
    SimilarUsersResponse,
    StatsResponse,
)

logger = logging.getLogger(__name__)


def _get_env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or str(raw).strip() == "":
        return default
    p = Path(str(raw))
    return p if p.is_absolute() else (get_repo_root() / p).resolve()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(os.getenv("LOG_LEVEL", "INFO"))

    if getattr(app.state, "recommender", None) is None:
        config_path = _get_env_path("CONFIG_PATH", get_repo_root() / "config.yaml")
        logger.info("Starting service with config=%s", config_path)
        app.state.recommender = ReviewRecommender.from_config(config_path)
    else:
        logger.info("Starting service with a pre-built recommender")
    yield


app = FastAPI(title="Review User-User CF Service", lifespan=lifespan)


def _recommender(app_: FastAPI) -> ReviewRecommender:
    rec = getattr(app_.state, "recommender", None)
    if rec is None:
        raise HTTPException(status_code=503, detail="Recommender not initialized")
    return rec


@app.get("/stats", response_model=StatsResponse)
def stats() -> dict:
    """Review, user, product and rating counts of the loaded model."""
    return _recommender(app).stats()


@app.post("/recommend", response_model=RecommendResponse)
def recommend(req: RecommendRequest) -> dict:
    """Recommend unseen products to a reviewer. Unknown reviewers get an empty list."""
    rec = _recommender(app)
    try:
        recs = rec.recommended_items(req.userId, k=int(req.k))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return {
        "userId": req.userId,
        "k": int(req.k),
        "results": [r.__dict__ for r in recs],
    }


@app.post("/similar_users", response_model=SimilarUsersResponse)
def similar_users(req: SimilarUsersRequest) -> dict:
    """Return reviewers whose Pearson similarity reaches the configured threshold."""
    rec = _recommender(app)
    sims = rec.similar_users(req.userId, top_n=int(req.top_n))
    return {
        "userId": req.userId,
        "top_n": int(req.top_n),
        "results": [s.__dict__ for s in sims],
    }
