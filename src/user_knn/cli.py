"""Print per-item user neighborhoods for a MovieLens user.

Example:
    python -m src.user_knn.cli --user-id 1 --items 1 50 260 --neighborhood-size 5
"""
from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path

import pandas as pd
import yaml

from ..paths import ProjectPaths, get_repo_root
from ..store.ratings import DataFrameRatingStore
from ..utils import setup_logging
from .finder import NeighborhoodFinder, load_finder_config


logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="User-user neighborhood search (per-item top-N similar users)")
    p.add_argument("--user-id", type=int, required=True, help="MovieLens userId (raw id from ratings.csv)")
    p.add_argument("--items", type=int, nargs="*", default=None, help="Items to build neighborhoods for; default all")
    p.add_argument("--config", type=Path, default=Path("config.yaml"), help="Path to config YAML.")
    p.add_argument("--raw-dir", type=Path, default=None, help="Directory holding ratings.csv")
    p.add_argument("--neighborhood-size", type=int, default=None, help="Override neighborhood size")
    p.add_argument("--similarity", type=str, default=None, help="Override similarity (cosine/pearson)")
    p.add_argument("--normalizer", type=str, default=None, help="Override normalizer (identity/mean)")
    p.add_argument("--no-cache", action="store_true", help="Disable the user rating vector cache")
    p.add_argument("--log-level", type=str, default="INFO")
    p.add_argument("--log-file", type=Path, default=None, help="Also write DEBUG logs to this file")
    return p


def main(argv: list[str] | None = None) -> None:
    args = build_arg_parser().parse_args(argv)
    setup_logging(args.log_level, log_file=args.log_file)

    repo_root = get_repo_root()
    paths = ProjectPaths.from_repo_root(repo_root, config_path=args.config)
    cfg = load_finder_config(paths.config_path)

    overrides = {}
    if args.neighborhood_size is not None:
        overrides["neighborhood_size"] = int(args.neighborhood_size)
    if args.similarity is not None:
        overrides["similarity"] = str(args.similarity)
    if args.normalizer is not None:
        overrides["normalizer"] = str(args.normalizer)
    if args.no_cache:
        overrides["cache_user_vectors"] = False
    cfg = replace(cfg, **overrides)

    raw_dir = args.raw_dir
    if raw_dir is None:
        cfg_yaml = yaml.safe_load(paths.config_path.read_text()) or {}
        dataset_cfg = cfg_yaml.get("dataset", {}) if isinstance(cfg_yaml.get("dataset"), dict) else {}
        raw_dir = Path(str(dataset_cfg.get("raw_dir", "data/raw")))
    raw_dir = ProjectPaths.from_repo_root(repo_root, raw_dir=raw_dir).raw_dir

    store = DataFrameRatingStore.from_csv(raw_dir)
    if not store.has_user(args.user_id):
        raise SystemExit(f"Unknown userId: {args.user_id}")

    finder = NeighborhoodFinder.from_config(store, cfg)
    ratings = finder.user_vector(args.user_id)
    items = None if not args.items else set(args.items)
    neighborhoods = finder.find_neighbors(args.user_id, ratings, items)

    rows = []
    for item_id, neighbors in sorted(neighborhoods.items()):
        for n in sorted(neighbors, reverse=True):
            rows.append(
                {
                    "movieId": item_id,
                    "neighborId": n.user_id,
                    "similarity": n.similarity,
                    "neighborRating": n.ratings[item_id],
                }
            )

    print(f"\n=== Neighborhoods for user {args.user_id} ===")
    if rows:
        print(pd.DataFrame(rows).to_string(index=False))
    else:
        print("No neighbors found.")


if __name__ == "__main__":
    main()
