"""User-user k-nearest-neighbor search over MovieLens-style ratings.

Given a target user's ratings and a set of items, finds for each item the
most similar other users who rated it. The result feeds a rating predictor;
this package does not predict ratings itself.

Core pieces:
- `RatingVectorCache`: user rating vectors, rebuilt when the user's rating
  count or newest timestamp changes
- `CandidateUserLocator`: users who rated any of the queried items
- `PerItemTopN`: bounded min-heap of neighbors per item
- `NeighborhoodFinder`: ties the above together
"""

from .cache import CacheEntry, RatingVectorCache, UncachedVectorSource
from .candidates import CandidateUserLocator
from .finder import NeighborhoodFinder, NeighborhoodFinderConfig, load_finder_config
from .neighbors import Neighbor, PerItemTopN
from .normalizers import IdentityNormalizer, MeanCenteringNormalizer, Normalizer, get_normalizer
from .similarity import CosineSimilarity, PearsonCorrelation, Similarity, get_similarity
from .vectors import MutableRatingVector, RatingVector, user_rating_vector

__all__ = [
    "CacheEntry",
    "RatingVectorCache",
    "UncachedVectorSource",
    "CandidateUserLocator",
    "NeighborhoodFinder",
    "NeighborhoodFinderConfig",
    "load_finder_config",
    "Neighbor",
    "PerItemTopN",
    "Normalizer",
    "IdentityNormalizer",
    "MeanCenteringNormalizer",
    "get_normalizer",
    "Similarity",
    "CosineSimilarity",
    "PearsonCorrelation",
    "get_similarity",
    "RatingVector",
    "MutableRatingVector",
    "user_rating_vector",
]
