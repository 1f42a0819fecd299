from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable

import pytest

# Ensure `import src...` works when pytest uses importlib import mode.
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from src.store.ratings import DataFrameRatingStore, Rating, RatingCursor  # noqa: E402


StoreFactory = Callable[[dict[int, dict[int, float]]], DataFrameRatingStore]


def _ratings_from(by_user: dict[int, dict[int, float]]) -> list[Rating]:
    out: list[Rating] = []
    ts = 1_000
    for user_id, items in by_user.items():
        for item_id, value in items.items():
            out.append(Rating(user_id=user_id, item_id=item_id, value=value, timestamp=ts))
            ts += 1
    return out


@pytest.fixture
def make_store() -> StoreFactory:
    """Build an in-memory store from {userId: {movieId: rating}}; timestamps increase in dict order."""

    def _make(by_user: dict[int, dict[int, float]]) -> DataFrameRatingStore:
        return DataFrameRatingStore.from_ratings(_ratings_from(by_user))

    return _make


class CountingStore:
    """Wraps a store and records every cursor it hands out."""

    def __init__(self, inner: DataFrameRatingStore) -> None:
        self.inner = inner
        self.user_reads: list[int] = []
        self.item_reads: list[int] = []
        self.cursors: list[RatingCursor] = []

    def item_ratings(self, item_id: int) -> RatingCursor:
        self.item_reads.append(item_id)
        cursor = self.inner.item_ratings(item_id)
        self.cursors.append(cursor)
        return cursor

    def user_ratings(self, user_id: int) -> RatingCursor:
        self.user_reads.append(user_id)
        cursor = self.inner.user_ratings(user_id)
        self.cursors.append(cursor)
        return cursor

    def item_ids(self) -> set[int]:
        return self.inner.item_ids()

    def add_rating(self, rating: Rating) -> None:
        self.inner.add_rating(rating)


@pytest.fixture
def counting_store(make_store: StoreFactory) -> Callable[[dict[int, dict[int, float]]], CountingStore]:
    def _make(by_user: dict[int, dict[int, float]]) -> CountingStore:
        return CountingStore(make_store(by_user))

    return _make


class _BrokenCursor(RatingCursor):
    """Yields the first rating, then fails like a dropped connection."""

    def __init__(self, ratings) -> None:
        super().__init__(ratings)
        self._served = 0

    def __next__(self) -> Rating:
        if self._served >= 1:
            raise OSError("connection reset")
        self._served += 1
        return super().__next__()


class FailingUserStore(CountingStore):
    """Counting store whose `user_ratings` cursors break for selected users."""

    def __init__(self, inner: DataFrameRatingStore, failing_users: set[int]) -> None:
        super().__init__(inner)
        self.failing_users = failing_users

    def user_ratings(self, user_id: int) -> RatingCursor:
        if user_id not in self.failing_users:
            return super().user_ratings(user_id)
        self.user_reads.append(user_id)
        with self.inner.user_ratings(user_id) as source:
            cursor = _BrokenCursor(list(source))
        self.cursors.append(cursor)
        return cursor


@pytest.fixture
def failing_user_store(make_store: StoreFactory) -> Callable[..., FailingUserStore]:
    def _make(by_user: dict[int, dict[int, float]], failing_users: set[int]) -> FailingUserStore:
        return FailingUserStore(make_store(by_user), failing_users)

    return _make
