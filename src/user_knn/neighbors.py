"""Neighbor candidates and per-item bounded top-N selection."""

from __future__ import annotations

import heapq
from dataclasses import dataclass, field

from .vectors import RatingVector


@dataclass(frozen=True, order=True)
class Neighbor:
    """A candidate neighbor; instances compare by similarity only."""

    similarity: float
    user_id: int = field(compare=False)
    ratings: RatingVector = field(compare=False, repr=False)


class PerItemTopN:
    """Keeps the `size` most similar neighbors seen for each item.

    Each item owns a min-heap on similarity; once it holds more than `size`
    neighbors the least similar one is dropped. Among equally similar
    neighbors, which one survives depends on offer order. Heaps are created
    on first offer and never removed.
    """

    def __init__(self, size: int) -> None:
        if int(size) <= 0:
            raise ValueError(f"neighborhood size must be positive, got {size}")
        self.size = int(size)
        self._heaps: dict[int, list[Neighbor]] = {}

    def offer(self, item_id: int, neighbor: Neighbor) -> None:
        heap = self._heaps.setdefault(item_id, [])
        heapq.heappush(heap, neighbor)
        if len(heap) > self.size:
            heapq.heappop(heap)

    def snapshot(self, item_id: int) -> list[Neighbor]:
        """Current neighbors for `item_id`, unordered; empty if never offered."""
        return list(self._heaps.get(item_id, ()))

    def items(self) -> list[int]:
        return list(self._heaps)

    def to_dict(self) -> dict[int, list[Neighbor]]:
        return {item_id: list(heap) for item_id, heap in self._heaps.items()}

    def __len__(self) -> int:
        return len(self._heaps)
