"""Neighborhood finder: per-item top-N similar users for a target user."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Collection

import yaml

from ..store.ratings import RatingStore
from .cache import RatingVectorCache, UncachedVectorSource
from .candidates import CandidateUserLocator
from .neighbors import Neighbor, PerItemTopN
from .normalizers import NORMALIZERS, Normalizer, get_normalizer
from .similarity import SIMILARITIES, Similarity, get_similarity
from .vectors import RatingVector


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NeighborhoodFinderConfig:
    neighborhood_size: int = 20
    similarity: str = "cosine"
    normalizer: str = "mean"
    cache_user_vectors: bool = True
    cache_max_entries: int | None = None

    def __post_init__(self) -> None:
        if int(self.neighborhood_size) <= 0:
            raise ValueError(f"neighborhood_size must be positive, got {self.neighborhood_size}")
        if str(self.similarity).lower() not in SIMILARITIES:
            raise ValueError(f"Unknown similarity {self.similarity!r}; expected one of {sorted(SIMILARITIES)}")
        if str(self.normalizer).lower() not in NORMALIZERS:
            raise ValueError(f"Unknown normalizer {self.normalizer!r}; expected one of {sorted(NORMALIZERS)}")
        if not isinstance(self.cache_user_vectors, bool):
            raise ValueError(f"cache_user_vectors must be true or false, got {self.cache_user_vectors!r}")
        if self.cache_max_entries is not None and int(self.cache_max_entries) <= 0:
            raise ValueError(f"cache_max_entries must be positive, got {self.cache_max_entries}")


def load_finder_config(path: Path) -> NeighborhoodFinderConfig:
    """Read the `neighborhood:` section of a YAML config file.

    Missing keys fall back to the `NeighborhoodFinderConfig` defaults.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    obj = yaml.safe_load(path.read_text())
    if not isinstance(obj, dict):
        raise ValueError(f"Expected YAML mapping at {path}, got {type(obj)}")

    section: dict[str, Any] = obj.get("neighborhood", {}) if isinstance(obj.get("neighborhood"), dict) else {}
    defaults = NeighborhoodFinderConfig()
    max_entries = section.get("cache_max_entries", defaults.cache_max_entries)
    return NeighborhoodFinderConfig(
        neighborhood_size=int(section.get("size", defaults.neighborhood_size)),
        similarity=str(section.get("similarity", defaults.similarity)),
        normalizer=str(section.get("normalizer", defaults.normalizer)),
        cache_user_vectors=section.get("cache_user_vectors", defaults.cache_user_vectors),
        cache_max_entries=(None if max_entries is None else int(max_entries)),
    )


class NeighborhoodFinder:
    """Finds, for each item, the users most similar to a target user who rated it.

    Every search scans the store afresh for candidate users; only the raw
    user rating vectors are cached (when `cache_user_vectors` is on). Vectors
    are normalized per comparison and never cached in normalized form.

    Example:
        ```python
        store = DataFrameRatingStore.from_csv(raw_dir)
        finder = NeighborhoodFinder(store, 20, CosineSimilarity(), MeanCenteringNormalizer())
        nbrs = finder.find_neighbors(42, finder.user_vector(42), items={1, 2, 3})
        ```
    """

    def __init__(
        self,
        store: RatingStore,
        neighborhood_size: int,
        similarity: Similarity,
        normalizer: Normalizer,
        *,
        cache_user_vectors: bool = True,
        cache_max_entries: int | None = None,
    ) -> None:
        if store is None:
            raise ValueError("store is required")
        if similarity is None:
            raise ValueError("similarity is required")
        if normalizer is None:
            raise ValueError("normalizer is required")
        if int(neighborhood_size) <= 0:
            raise ValueError(f"neighborhood_size must be positive, got {neighborhood_size}")

        self._store = store
        self.neighborhood_size = int(neighborhood_size)
        self.similarity = similarity
        self.normalizer = normalizer
        self._locator = CandidateUserLocator(store)
        self._vectors: RatingVectorCache | UncachedVectorSource
        if cache_user_vectors:
            self._vectors = RatingVectorCache(store, max_entries=cache_max_entries)
        else:
            self._vectors = UncachedVectorSource(store)

        logger.info(
            "NeighborhoodFinder: size=%d similarity=%r normalizer=%s cache=%s",
            self.neighborhood_size,
            similarity,
            type(normalizer).__name__,
            (f"max_entries={cache_max_entries}" if cache_user_vectors else "off"),
        )

    @classmethod
    def from_config(cls, store: RatingStore, cfg: NeighborhoodFinderConfig) -> "NeighborhoodFinder":
        return cls(
            store,
            cfg.neighborhood_size,
            get_similarity(cfg.similarity),
            get_normalizer(cfg.normalizer),
            cache_user_vectors=cfg.cache_user_vectors,
            cache_max_entries=cfg.cache_max_entries,
        )

    @property
    def cache(self) -> RatingVectorCache | None:
        """The user vector cache, or None when caching is disabled."""
        return self._vectors if isinstance(self._vectors, RatingVectorCache) else None

    def user_vector(self, user_id: int) -> RatingVector:
        """Raw (unnormalized) rating vector for `user_id`, via the cache if enabled."""
        return self._vectors.get(user_id)

    def _query_items(self, ratings: Mapping[int, float], items: Collection[int] | None) -> Collection[int]:
        if items is None:
            # No restriction: every rated item is a query item.
            return self._store.item_ids()
        optimizable = bool(getattr(self.similarity, "sparsity_optimizable", False))
        if optimizable and len(ratings) < len(items):
            logger.debug("Using rating rather than query set (%d < %d items)", len(ratings), len(items))
            return list(ratings.keys())
        return items

    def find_neighbors(
        self,
        user_id: int,
        ratings: Mapping[int, float],
        items: Collection[int] | None = None,
    ) -> dict[int, list[Neighbor]]:
        """Find up to `neighborhood_size` neighbors for each item.

        Args:
            user_id: The target user (never returned as a neighbor).
            ratings: The target user's rating vector; left unmodified.
            items: Items to build neighborhoods for. None means every item
                any candidate rated.

        Returns:
            Mapping of item id to its (unordered) neighbors.
        """
        user_id = int(user_id)
        target = RatingVector(ratings).mutable_copy()
        self.normalizer.normalize(user_id, target)

        item_filter = None if items is None else set(items)
        candidates = self._locator.find(user_id, self._query_items(ratings, item_filter))
        logger.debug("Found %d candidate neighbors for user=%d", len(candidates), user_id)

        top_n = PerItemTopN(self.neighborhood_size)
        for candidate in candidates:
            raw = self._vectors.get(candidate)
            normed = raw.mutable_copy()
            self.normalizer.normalize(candidate, normed)

            neighbor = Neighbor(
                similarity=float(self.similarity.similarity(target, normed)),
                user_id=candidate,
                ratings=raw,
            )
            for item_id in raw:
                if item_filter is not None and item_id not in item_filter:
                    continue
                top_n.offer(item_id, neighbor)

        return top_n.to_dict()
