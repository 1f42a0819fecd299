"""Pydantic schemas for the neighborhood API."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class NeighborsRequest(BaseModel):
    """Request payload for the `/neighbors` endpoint."""

    userId: int = Field(..., description="Target userId; excluded from every neighborhood.")
    items: Optional[list[int]] = Field(
        None,
        description="Items to build neighborhoods for. Omit to cover every item any candidate rated.",
    )
    ratings: Optional[dict[int, float]] = Field(
        None,
        description="Target user's ratings (movieId -> rating). Omit to use the stored ratings.",
    )


class NeighborItem(BaseModel):
    userId: int
    similarity: float
    rating: float


class ItemNeighborhood(BaseModel):
    movieId: int
    neighbors: list[NeighborItem]


class NeighborsResponse(BaseModel):
    userId: int
    neighborhood_size: int
    results: list[ItemNeighborhood]


class HealthResponse(BaseModel):
    status: str
    users: int
    items: int
    cached_users: Optional[int] = None
