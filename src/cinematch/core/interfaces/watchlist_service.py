"""Watchlist service interface."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models import HistoryItem, UserRelationship, WatchlistItem


class IWatchlistService(ABC):
    """Interface for watchlist and watch-history mutations."""

    @abstractmethod
    async def add(self, user_id: str, movie_id: str) -> UserRelationship:
        """Add a movie to the watchlist.

        Raises:
            NotFoundError: If the user or movie does not exist.
            DuplicateStateError: If the movie is already in the watchlist.
        """
        pass

    @abstractmethod
    async def remove(self, user_id: str, movie_id: str) -> UserRelationship:
        """Remove a movie from the watchlist. Idempotent.

        Raises:
            NotFoundError: If the user does not exist.
        """
        pass

    @abstractmethod
    async def mark_watched(
        self, user_id: str, movie_id: str, rating: Optional[int] = None
    ) -> UserRelationship:
        """Mark a movie watched, optionally rating it.

        Raises:
            NotFoundError: If the user or movie does not exist.
            ValidationError: If the rating is out of range.
        """
        pass

    @abstractmethod
    async def list_watchlist(self, user_id: str) -> List[WatchlistItem]:
        """List the watchlist with movie summaries."""
        pass

    @abstractmethod
    async def list_history(self, user_id: str) -> List[HistoryItem]:
        """List the watch history with movie summaries."""
        pass
