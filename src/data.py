from __future__ import annotations

from pathlib import Path
from typing import Tuple

import pandas as pd


RATINGS_COLUMNS: Tuple[str, ...] = ("userId", "movieId", "rating", "timestamp")

RATINGS_DTYPES = {"userId": "int64", "movieId": "int64", "rating": "float64", "timestamp": "int64"}


def load_ratings(raw_dir: Path) -> pd.DataFrame:
    """Load MovieLens `ratings.csv` from a directory.

    Notes
    -----
    Dtypes are set explicitly so the rating store sees integer ids and
    integer Unix-second timestamps regardless of how the CSV was written.
    """
    path = Path(raw_dir) / "ratings.csv"
    if not path.exists():
        raise FileNotFoundError(f"ratings.csv not found: {path}")

    ratings = pd.read_csv(path, dtype=RATINGS_DTYPES)
    validate_ratings(ratings)
    return ratings


def validate_ratings(ratings: pd.DataFrame) -> None:
    """Validate that required columns exist and basic constraints hold."""
    missing = [c for c in RATINGS_COLUMNS if c not in ratings.columns]
    if missing:
        raise ValueError(f"ratings missing columns: {missing}")

    if (ratings["timestamp"] < 0).any():
        raise ValueError("ratings contain negative timestamps")

    if ratings["rating"].isna().any():
        raise ValueError("ratings contain missing rating values")

    # One rating per (user, item): the rating vector is a mapping.
    if ratings.duplicated(subset=["userId", "movieId"]).any():
        raise ValueError("ratings contain duplicate (userId, movieId) rows")
