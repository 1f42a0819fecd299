"""FastAPI service exposing per-item user neighborhoods."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

import yaml
from fastapi import FastAPI, HTTPException

from ..paths import ProjectPaths, get_repo_root
from ..store.ratings import DataFrameRatingStore
from ..user_knn.finder import NeighborhoodFinder, load_finder_config
from ..utils import setup_logging
from .schemas import HealthResponse, NeighborsRequest, NeighborsResponse

logger = logging.getLogger(__name__)


def _get_env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or str(raw).strip() == "":
        return default
    p = Path(str(raw))
    return p if p.is_absolute() else (get_repo_root() / p).resolve()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(os.getenv("LOG_LEVEL", "INFO"), log_file=os.getenv("LOG_FILE") or None)

    repo_root = get_repo_root()
    config_path = _get_env_path("CONFIG_PATH", repo_root / "config.yaml")
    cfg_yaml = yaml.safe_load(config_path.read_text()) or {}
    dataset_cfg = cfg_yaml.get("dataset", {}) if isinstance(cfg_yaml.get("dataset"), dict) else {}
    paths = ProjectPaths.from_repo_root(
        repo_root,
        raw_dir=str(dataset_cfg.get("raw_dir", "data/raw")),
        config_path=config_path,
    )

    logger.info("Starting service with config=%s raw_dir=%s", paths.config_path, paths.raw_dir)
    store = DataFrameRatingStore.from_csv(paths.raw_dir)
    app.state.store = store
    app.state.finder = NeighborhoodFinder.from_config(store, load_finder_config(paths.config_path))
    yield


app = FastAPI(title="MovieLens User Neighborhood Service", lifespan=lifespan)


def _finder(app_: FastAPI) -> NeighborhoodFinder:
    finder = getattr(app_.state, "finder", None)
    if finder is None:
        raise HTTPException(status_code=503, detail="Neighborhood finder not initialized")
    return finder


@app.get("/health", response_model=HealthResponse)
def health() -> dict:
    finder = _finder(app)
    store = app.state.store
    cache = finder.cache
    return {
        "status": "ok",
        "users": int(store.n_users),
        "items": int(store.n_items),
        "cached_users": (None if cache is None else len(cache)),
    }


@app.post("/neighbors", response_model=NeighborsResponse)
def neighbors(req: NeighborsRequest) -> dict:
    """Return, per item, the most similar users who rated it."""
    finder = _finder(app)
    user_id = int(req.userId)

    if req.ratings is not None:
        ratings = req.ratings
    else:
        if not app.state.store.has_user(user_id):
            raise HTTPException(status_code=404, detail=f"Unknown userId: {user_id}")
        ratings = finder.user_vector(user_id)

    if req.items is not None and not req.items:
        raise HTTPException(status_code=400, detail="items must be non-empty when given")

    try:
        found = finder.find_neighbors(user_id, ratings, None if req.items is None else set(req.items))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    results = []
    for item_id, nbrs in sorted(found.items()):
        results.append(
            {
                "movieId": int(item_id),
                "neighbors": [
                    {"userId": int(n.user_id), "similarity": float(n.similarity), "rating": float(n.ratings[item_id])}
                    for n in sorted(nbrs, reverse=True)
                ],
            }
        )

    return {"userId": user_id, "neighborhood_size": finder.neighborhood_size, "results": results}
