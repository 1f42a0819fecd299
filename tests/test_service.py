from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from src.service.app import app
from src.user_knn.finder import NeighborhoodFinder
from src.user_knn.normalizers import IdentityNormalizer
from src.user_knn.similarity import CosineSimilarity


@pytest.fixture
def client(make_store):
    """Client with a small in-memory store; the lifespan (CSV loading) is not run."""
    store = make_store({100: {1: 5.0, 2: 3.0}, 1: {1: 5.0, 3: 2.0}, 2: {1: 4.0}})
    app.state.store = store
    app.state.finder = NeighborhoodFinder(store, 1, CosineSimilarity(), IdentityNormalizer())
    yield TestClient(app)
    del app.state.finder
    del app.state.store


def test_neighbors_from_stored_ratings(client) -> None:
    response = client.post("/neighbors", json={"userId": 100, "items": [1, 3]})
    assert response.status_code == 200
    data = response.json()

    assert data["userId"] == 100
    assert data["neighborhood_size"] == 1
    by_item = {r["movieId"]: r["neighbors"] for r in data["results"]}
    assert [n["userId"] for n in by_item[1]] == [2]
    assert by_item[1][0]["rating"] == 4.0
    assert [n["userId"] for n in by_item[3]] == [1]


def test_neighbors_from_supplied_ratings(client) -> None:
    response = client.post("/neighbors", json={"userId": 555, "ratings": {"1": 5.0, "2": 3.0}})
    assert response.status_code == 200
    movie_ids = {r["movieId"] for r in response.json()["results"]}
    # User 100 is just another candidate when the caller rates as user 555.
    assert movie_ids == {1, 2, 3}


def test_unknown_user_without_ratings(client) -> None:
    response = client.post("/neighbors", json={"userId": 555})
    assert response.status_code == 404


def test_empty_item_list_rejected(client) -> None:
    response = client.post("/neighbors", json={"userId": 100, "items": []})
    assert response.status_code == 400


def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["users"] == 3
    assert data["items"] == 3


def test_not_initialized() -> None:
    response = TestClient(app).get("/health")
    assert response.status_code == 503
