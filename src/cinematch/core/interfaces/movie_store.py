"""Document store interfaces."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models import CriteriaSet, MovieRecord, UserProfile


class IMovieStore(ABC):
    """Read-only access to the movie catalog."""

    @abstractmethod
    async def find(self, criteria: CriteriaSet) -> List[MovieRecord]:
        """Find movies matching criteria, sorted, skipped and limited.

        Args:
            criteria: Compiled query.

        Returns:
            Matching movies in criteria order.

        Raises:
            StoreError: If the store is unavailable.
        """
        pass

    @abstractmethod
    async def count(self, criteria: CriteriaSet) -> int:
        """Count all movies matching criteria, ignoring skip and limit.

        Raises:
            StoreError: If the store is unavailable.
        """
        pass

    @abstractmethod
    async def get(self, movie_id: str) -> Optional[MovieRecord]:
        """Get a movie by id.

        Returns:
            Movie or None if not found.

        Raises:
            StoreError: If the store is unavailable.
        """
        pass


class IUserStore(ABC):
    """Access to user documents."""

    @abstractmethod
    async def get(self, user_id: str) -> Optional[UserProfile]:
        """Load a user document.

        Returns:
            A fresh copy of the user or None if not found.

        Raises:
            StoreError: If the store is unavailable.
        """
        pass

    @abstractmethod
    async def save(self, user: UserProfile) -> None:
        """Replace a user document. Last writer wins.

        Raises:
            StoreError: If the write fails.
        """
        pass
