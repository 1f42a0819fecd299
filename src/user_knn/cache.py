"""User rating vector cache with count/timestamp staleness checks.

A cached vector is reused while the user's rating count and newest rating
timestamp are unchanged. This fingerprint assumes timestamps never decrease
with insertion order: a rating inserted later with an older timestamp than
the cached maximum (and replacing another rating so the count is unchanged)
goes undetected.

The cache is never cleared unless `max_entries` is set, in which case the
least recently used users are evicted.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from contextlib import closing
from dataclasses import dataclass
from threading import Lock

from ..store.ratings import Rating, RatingStore
from .vectors import RatingVector, user_rating_vector


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    user_id: int
    last_rating_timestamp: int
    rating_count: int
    vector: RatingVector


def _read_user_ratings(store: RatingStore, user_id: int) -> list[Rating]:
    with closing(store.user_ratings(user_id)) as cursor:
        return list(cursor)


def _max_timestamp(ratings: list[Rating]) -> int:
    return max((r.timestamp for r in ratings), default=-1)


class UncachedVectorSource:
    """Builds user rating vectors straight from the store on every call."""

    def __init__(self, store: RatingStore) -> None:
        self._store = store

    def get(self, user_id: int) -> RatingVector:
        return user_rating_vector(_read_user_ratings(self._store, user_id))


class RatingVectorCache:
    """Thread-safe user id -> rating vector cache.

    The store read, staleness check and replacement run under one lock, so
    two callers can never install different vectors for the same user.
    """

    def __init__(self, store: RatingStore, *, max_entries: int | None = None) -> None:
        if max_entries is not None and int(max_entries) <= 0:
            raise ValueError(f"max_entries must be positive, got {max_entries}")
        self._store = store
        self._max_entries = None if max_entries is None else int(max_entries)
        self._entries: OrderedDict[int, CacheEntry] = OrderedDict()
        self._lock = Lock()
        self.hits = 0
        self.misses = 0

    def get(self, user_id: int) -> RatingVector:
        user_id = int(user_id)
        with self._lock:
            ratings = _read_user_ratings(self._store, user_id)
            entry = self._entries.get(user_id)
            timestamp = _max_timestamp(ratings)

            if entry is not None and (
                entry.rating_count != len(ratings) or entry.last_rating_timestamp != timestamp
            ):
                logger.debug(
                    "Stale vector for user=%d (count %d->%d, ts %d->%d)",
                    user_id,
                    entry.rating_count,
                    len(ratings),
                    entry.last_rating_timestamp,
                    timestamp,
                )
                entry = None

            if entry is None:
                self.misses += 1
                entry = CacheEntry(
                    user_id=user_id,
                    last_rating_timestamp=timestamp,
                    rating_count=len(ratings),
                    vector=user_rating_vector(ratings),
                )
                self._entries[user_id] = entry
                self._evict()
            else:
                self.hits += 1

            self._entries.move_to_end(user_id)
            return entry.vector

    def _evict(self) -> None:
        if self._max_entries is None:
            return
        while len(self._entries) > self._max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted cached vector for user=%d", evicted)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, user_id: object) -> bool:
        with self._lock:
            return user_id in self._entries

    @property
    def max_entries(self) -> int | None:
        return self._max_entries
