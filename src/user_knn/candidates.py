from __future__ import annotations

from contextlib import closing
from typing import Iterable

from ..store.ratings import RatingStore


class CandidateUserLocator:
    """Finds the users who rated at least one of a set of items.

    Only the ratings of the queried items are scanned, never the whole store.
    """

    def __init__(self, store: RatingStore) -> None:
        self._store = store

    def find(self, excluded_user: int, query_items: Iterable[int]) -> set[int]:
        users: set[int] = set()
        for item_id in query_items:
            with closing(self._store.item_ratings(item_id)) as cursor:
                for rating in cursor:
                    if rating.user_id != excluded_user:
                        users.add(rating.user_id)
        return users
