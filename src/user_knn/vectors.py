"""Sparse rating vectors keyed by item id."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Iterable, Iterator

import numpy as np

from ..store.ratings import Rating


class RatingVector(Mapping):
    """Immutable item -> rating mapping.

    The constructor copies its input, so a vector never shares storage with
    the mapping it was built from.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[int, float] | Iterable[tuple[int, float]] | None = None) -> None:
        self._data: dict[int, float] = {int(k): float(v) for k, v in dict(data or {}).items()}

    def __getitem__(self, item_id: int) -> float:
        return self._data[item_id]

    def __iter__(self) -> Iterator[int]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"RatingVector({self._data!r})"

    def mutable_copy(self) -> "MutableRatingVector":
        return MutableRatingVector(self._data)

    def immutable(self) -> "RatingVector":
        return self


class MutableRatingVector(dict):
    """Mutable item -> rating mapping, handed to normalizers."""

    def mutable_copy(self) -> "MutableRatingVector":
        return MutableRatingVector(self)

    def immutable(self) -> RatingVector:
        return RatingVector(self)


def user_rating_vector(ratings: Iterable[Rating]) -> RatingVector:
    """Build a user's rating vector; a later rating for the same item wins."""
    return RatingVector({r.item_id: r.value for r in ratings})


def _values(vector: Mapping[int, float], keys: Iterable[int]) -> np.ndarray:
    return np.fromiter((vector[k] for k in keys), dtype=np.float64)


def dot(a: Mapping[int, float], b: Mapping[int, float]) -> float:
    """Dot product over the items both vectors contain."""
    common = a.keys() & b.keys()
    if not common:
        return 0.0
    keys = sorted(common)
    return float(_values(a, keys) @ _values(b, keys))


def norm(vector: Mapping[int, float]) -> float:
    if not vector:
        return 0.0
    return float(np.linalg.norm(_values(vector, vector.keys())))


def mean(vector: Mapping[int, float]) -> float:
    if not vector:
        return 0.0
    return float(_values(vector, vector.keys()).mean())
