"""Vector similarity functions used to rank candidate neighbors."""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Protocol, runtime_checkable

import numpy as np

from .vectors import dot, norm


@runtime_checkable
class Similarity(Protocol):
    """Protocol for user-vector similarity functions.

    `sparsity_optimizable` declares that two vectors with no items in common
    always score zero, so the neighborhood search may skip users who share no
    item with the target.
    """

    sparsity_optimizable: bool

    def similarity(self, a: Mapping[int, float], b: Mapping[int, float]) -> float:
        ...


class CosineSimilarity:
    """Cosine of the angle between two sparse vectors.

    `damping` is added to the denominator to shrink similarities computed
    from small vectors towards zero.
    """

    sparsity_optimizable = True

    def __init__(self, damping: float = 0.0) -> None:
        if damping < 0:
            raise ValueError(f"damping must be non-negative, got {damping}")
        self.damping = float(damping)

    def similarity(self, a: Mapping[int, float], b: Mapping[int, float]) -> float:
        denom = norm(a) * norm(b) + self.damping
        if denom == 0.0:
            return 0.0
        return dot(a, b) / denom

    def __repr__(self) -> str:
        return f"CosineSimilarity(damping={self.damping})"


class PearsonCorrelation:
    """Pearson correlation over co-rated items."""

    # Centering is over co-rated items only.
    sparsity_optimizable = False

    def similarity(self, a: Mapping[int, float], b: Mapping[int, float]) -> float:
        keys = sorted(a.keys() & b.keys())
        if len(keys) < 2:
            return 0.0
        xa = np.fromiter((a[k] for k in keys), dtype=np.float64)
        xb = np.fromiter((b[k] for k in keys), dtype=np.float64)
        xa = xa - xa.mean()
        xb = xb - xb.mean()
        denom = math.sqrt(float(xa @ xa) * float(xb @ xb))
        if denom == 0.0:
            return 0.0
        return float(xa @ xb) / denom

    def __repr__(self) -> str:
        return "PearsonCorrelation()"


SIMILARITIES = {
    "cosine": CosineSimilarity,
    "pearson": PearsonCorrelation,
}


def get_similarity(name: str) -> Similarity:
    """Instantiate a similarity function by its config name."""
    key = str(name).strip().lower()
    if key not in SIMILARITIES:
        raise ValueError(f"Unknown similarity {name!r}; expected one of {sorted(SIMILARITIES)}")
    return SIMILARITIES[key]()
