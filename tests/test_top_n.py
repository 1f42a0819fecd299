from __future__ import annotations

import pytest

from src.user_knn.neighbors import Neighbor, PerItemTopN
from src.user_knn.vectors import RatingVector


def _nbr(user_id: int, sim: float) -> Neighbor:
    return Neighbor(similarity=sim, user_id=user_id, ratings=RatingVector({1: 3.0}))


def test_keeps_most_similar_per_item() -> None:
    top = PerItemTopN(2)
    for uid, sim in [(1, 0.1), (2, 0.9), (3, 0.5), (4, -0.3), (5, 0.7)]:
        top.offer(1, _nbr(uid, sim))

    assert sorted(n.user_id for n in top.snapshot(1)) == [2, 5]


def test_items_are_independent() -> None:
    top = PerItemTopN(1)
    top.offer(1, _nbr(1, 0.2))
    top.offer(2, _nbr(2, 0.1))
    top.offer(1, _nbr(3, 0.4))

    assert [n.user_id for n in top.snapshot(1)] == [3]
    assert [n.user_id for n in top.snapshot(2)] == [2]
    assert sorted(top.items()) == [1, 2]
    assert set(top.to_dict()) == {1, 2}


def test_unknown_item_snapshot_is_empty() -> None:
    assert PerItemTopN(3).snapshot(42) == []


def test_neighbors_order_by_similarity_only() -> None:
    low = Neighbor(similarity=0.1, user_id=99, ratings=RatingVector())
    high = Neighbor(similarity=0.8, user_id=1, ratings=RatingVector())
    assert low < high
    assert not (Neighbor(similarity=0.5, user_id=1, ratings=RatingVector()) < _nbr(2, 0.5))


def test_snapshot_is_a_copy() -> None:
    top = PerItemTopN(2)
    top.offer(1, _nbr(1, 0.3))
    snap = top.snapshot(1)
    snap.clear()
    assert len(top.snapshot(1)) == 1


@pytest.mark.parametrize("size", [0, -1])
def test_size_must_be_positive(size: int) -> None:
    with pytest.raises(ValueError):
        PerItemTopN(size)
