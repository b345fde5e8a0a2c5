"""Catalog response models."""

import math
from typing import List, Optional

from pydantic import BaseModel, Field

from .movie import MovieRecord, MovieSummary
from .user import UserRelationship


class Pagination(BaseModel):
    """Pagination metadata for a catalog page."""

    current_page: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=0)
    total_movies: int = Field(..., ge=0)
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, returned: int, total: int) -> "Pagination":
        """Compute pagination metadata.

        Args:
            page: Current 1-based page.
            limit: Page size.
            returned: Number of movies on this page.
            total: Total matching movies.

        Returns:
            Pagination block.
        """
        skip = (page - 1) * limit
        return cls(
            current_page=page,
            total_pages=math.ceil(total / limit) if limit else 0,
            total_movies=total,
            has_next=skip + returned < total,
            has_prev=page > 1,
        )


class CatalogPage(BaseModel):
    """One page of browse results."""

    movies: List[MovieSummary] = Field(default_factory=list)
    pagination: Pagination


class MovieDetail(BaseModel):
    """Full movie plus the caller's relationship to it."""

    movie: MovieRecord
    user_data: Optional[UserRelationship] = None


class MovieLookup(BaseModel):
    """Typed outcome of a single-title lookup."""

    found: bool
    movie: Optional[MovieSummary] = None
    error: Optional[str] = None

    @classmethod
    def not_found(cls) -> "MovieLookup":
        """Build the not-found outcome."""
        return cls(found=False, error="Movie not found")


class MoodRecommendation(BaseModel):
    """Mood search result with the mood that was actually applied."""

    movies: List[MovieSummary] = Field(default_factory=list)
    mood: str
    requested_mood: str
