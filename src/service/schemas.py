"""Pydantic schemas for the online recommendation API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RecommendRequest(BaseModel):
    """Request for user-user CF recommendations."""

    userId: str = Field(..., min_length=1, description="Reviewer id as it appears in the review log")
    k: int = Field(5, ge=1, le=50, description="Number of product recommendations to return (1..50)")


class RecommendationItem(BaseModel):
    productId: str
    score: float


class RecommendResponse(BaseModel):
    userId: str
    k: int
    results: list[RecommendationItem]


class SimilarUsersRequest(BaseModel):
    """Request for reviewers with similar rating patterns."""

    userId: str = Field(..., min_length=1, description="Reviewer id as it appears in the review log")
    top_n: int = Field(10, ge=1, le=100, description="Number of similar users to return")


class SimilarUserItem(BaseModel):
    userId: str
    similarity: float
    common_rated: int


class SimilarUsersResponse(BaseModel):
    userId: str
    top_n: int
    results: list[SimilarUserItem]


class StatsResponse(BaseModel):
    userCount: int
    itemCount: int
    ratingCount: int
    reviewCount: int
