"""Per-user rating vector normalizers."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .vectors import MutableRatingVector, mean


@runtime_checkable
class Normalizer(Protocol):
    """Protocol for in-place user vector normalization.

    Implementations must only touch the vector they are given, so the same
    user can be normalized any number of times.
    """

    def normalize(self, user_id: int, vector: MutableRatingVector) -> None:
        ...


class IdentityNormalizer:
    """Leaves ratings unchanged."""

    def normalize(self, user_id: int, vector: MutableRatingVector) -> None:
        return None


class MeanCenteringNormalizer:
    """Subtracts the user's mean rating from every rating in the vector."""

    def normalize(self, user_id: int, vector: MutableRatingVector) -> None:
        if not vector:
            return
        mu = mean(vector)
        for item_id in vector:
            vector[item_id] -= mu


NORMALIZERS = {
    "identity": IdentityNormalizer,
    "mean": MeanCenteringNormalizer,
}


def get_normalizer(name: str) -> Normalizer:
    """Instantiate a normalizer by its config name."""
    key = str(name).strip().lower()
    if key not in NORMALIZERS:
        raise ValueError(f"Unknown normalizer {name!r}; expected one of {sorted(NORMALIZERS)}")
    return NORMALIZERS[key]()
