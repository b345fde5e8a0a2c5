"""Catalog service interfaces."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models import (
    CatalogPage,
    CriteriaSet,
    FilterInput,
    MoodRecommendation,
    MovieDetail,
    MovieLookup,
    MovieSummary,
)


class ICatalogService(ABC):
    """Interface for catalog search and browsing."""

    @abstractmethod
    async def search(self, criteria: CriteriaSet) -> List[MovieSummary]:
        """Execute a compiled query.

        Args:
            criteria: Compiled query.

        Returns:
            Ranked, capped movie summaries.

        Raises:
            StoreError: If the store fails. No partial results are returned.
        """
        pass

    @abstractmethod
    async def lookup_by_title(self, title: str) -> MovieLookup:
        """Resolve one movie by case-insensitive title fragment.

        Returns:
            Found movie or a typed not-found outcome. Never raises for a miss.
        """
        pass

    @abstractmethod
    async def browse(self, filters: FilterInput) -> CatalogPage:
        """Get one page of filtered catalog results."""
        pass

    @abstractmethod
    async def get_movie(self, movie_id: str, user_id: Optional[str] = None) -> MovieDetail:
        """Get a movie with the caller's relationship to it.

        Raises:
            NotFoundError: If the movie does not exist.
        """
        pass

    @abstractmethod
    async def recommend_by_mood(self, mood: str, limit: Optional[int] = None) -> MoodRecommendation:
        """Recommend movies for a mood label. Unknown labels fall back to happy."""
        pass


class ISimilarityResolver(ABC):
    """Interface for similar-movie lookups."""

    @abstractmethod
    async def similar(self, movie_id: str, limit: Optional[int] = None) -> List[MovieSummary]:
        """Find movies similar to the given one.

        Returns:
            Ranked similar movies, or an empty list if the source is unknown.
        """
        pass
