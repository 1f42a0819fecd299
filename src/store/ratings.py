"""Rating data access: the store protocol, its cursors and a pandas-backed store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Protocol, runtime_checkable

import pandas as pd

from ..data import load_ratings, validate_ratings


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rating:
    user_id: int
    item_id: int
    value: float
    timestamp: int


class RatingCursor:
    """Single-pass stream of ratings that must be closed when done.

    Use with `contextlib.closing` or as a context manager directly.
    """

    def __init__(self, ratings: Iterable[Rating]) -> None:
        self._iter: Iterator[Rating] = iter(ratings)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> Iterator[Rating]:
        return self

    def __next__(self) -> Rating:
        if self._closed:
            raise ValueError("cursor is closed")
        return next(self._iter)

    def close(self) -> None:
        self._closed = True

    def __enter__(self) -> "RatingCursor":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


@runtime_checkable
class RatingStore(Protocol):
    """Protocol for rating data sources.

    Any object with these methods satisfies the protocol; cursors returned by
    `item_ratings` and `user_ratings` must expose `close()`.
    """

    def item_ratings(self, item_id: int) -> RatingCursor:
        """Stream every rating of `item_id`."""
        ...

    def user_ratings(self, user_id: int) -> RatingCursor:
        """Stream every rating made by `user_id`."""
        ...

    def item_ids(self) -> set[int]:
        """Return the ids of all items with at least one rating."""
        ...


class DataFrameRatingStore:
    """In-memory rating store indexed by user and by item.

    Built from a MovieLens-style frame with columns userId, movieId, rating,
    timestamp. Ratings can be added after construction; adding a rating for an
    existing (user, item) pair replaces it.
    """

    def __init__(self, ratings: pd.DataFrame, *, validate: bool = True) -> None:
        if validate:
            validate_ratings(ratings)
        self._by_user: dict[int, dict[int, Rating]] = {}
        self._by_item: dict[int, dict[int, Rating]] = {}

        for row in ratings.itertuples(index=False):
            self._index(
                Rating(
                    user_id=int(row.userId),
                    item_id=int(row.movieId),
                    value=float(row.rating),
                    timestamp=int(row.timestamp),
                )
            )

        logger.info(
            "Rating store loaded: users=%d items=%d ratings=%d",
            len(self._by_user),
            len(self._by_item),
            len(ratings),
        )

    @classmethod
    def from_csv(cls, raw_dir: Path) -> "DataFrameRatingStore":
        """Load `ratings.csv` from `raw_dir`."""
        # load_ratings has already validated the frame.
        return cls(load_ratings(raw_dir), validate=False)

    @classmethod
    def from_ratings(cls, ratings: Iterable[Rating]) -> "DataFrameRatingStore":
        rows = [
            {"userId": r.user_id, "movieId": r.item_id, "rating": r.value, "timestamp": r.timestamp}
            for r in ratings
        ]
        df = pd.DataFrame(rows, columns=["userId", "movieId", "rating", "timestamp"])
        return cls(df.astype({"userId": "int64", "movieId": "int64", "rating": "float64", "timestamp": "int64"}))

    def _index(self, rating: Rating) -> None:
        self._by_user.setdefault(rating.user_id, {})[rating.item_id] = rating
        self._by_item.setdefault(rating.item_id, {})[rating.user_id] = rating

    def add_rating(self, rating: Rating) -> None:
        self._index(rating)

    def item_ratings(self, item_id: int) -> RatingCursor:
        return RatingCursor(list(self._by_item.get(int(item_id), {}).values()))

    def user_ratings(self, user_id: int) -> RatingCursor:
        return RatingCursor(list(self._by_user.get(int(user_id), {}).values()))

    def item_ids(self) -> set[int]:
        return set(self._by_item)

    def has_user(self, user_id: int) -> bool:
        return int(user_id) in self._by_user

    @property
    def n_users(self) -> int:
        return len(self._by_user)

    @property
    def n_items(self) -> int:
        return len(self._by_item)
