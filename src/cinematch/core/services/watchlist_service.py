"""Watchlist and watch-history service."""

from typing import List, Optional

from ...config.models import Config
from ...infrastructure.logging import LoggerMixin
from ...utils import NotFoundError, StoreError, UserNotFoundError
from ..interfaces import IMovieStore, IUserStore, IWatchlistService
from ..models import HistoryItem, MovieRecord, UserProfile, UserRelationship, WatchlistItem


class WatchlistService(IWatchlistService, LoggerMixin):
    """Read-modify-write of a user's watchlist and history."""

    def __init__(self, config: Config, movie_store: IMovieStore, user_store: IUserStore):
        """Initialize watchlist service.

        Args:
            config: Application configuration.
            movie_store: Movie document store.
            user_store: User document store.
        """
        self._config = config
        self._movie_store = movie_store
        self._user_store = user_store

    async def add(self, user_id: str, movie_id: str) -> UserRelationship:
        """Add a movie to the watchlist.

        Args:
            user_id: User identity.
            movie_id: Movie to add.

        Returns:
            Relationship after the transition.

        Raises:
            NotFoundError: If the user or movie does not exist.
            DuplicateStateError: If the movie is already in the watchlist.
        """
        user = await self._load_user(user_id)
        await self._require_movie(movie_id)

        user.add_to_watchlist(movie_id)
        await self._save(user)
        self.logger.info(f"User {user_id} added movie {movie_id} to watchlist")
        return user.relationship(movie_id)

    async def remove(self, user_id: str, movie_id: str) -> UserRelationship:
        """Remove a movie from the watchlist. Idempotent.

        Raises:
            NotFoundError: If the user does not exist.
        """
        user = await self._load_user(user_id)
        if user.remove_from_watchlist(movie_id):
            await self._save(user)
            self.logger.info(f"User {user_id} removed movie {movie_id} from watchlist")
        return user.relationship(movie_id)

    async def mark_watched(
        self, user_id: str, movie_id: str, rating: Optional[int] = None
    ) -> UserRelationship:
        """Mark a movie watched, optionally rating it.

        Args:
            user_id: User identity.
            movie_id: Movie watched.
            rating: Optional personal rating (1-5).

        Returns:
            Relationship after the transition.

        Raises:
            NotFoundError: If the user or movie does not exist.
            ValidationError: If the rating is out of range.
        """
        user = await self._load_user(user_id)
        await self._require_movie(movie_id)

        user.mark_watched(movie_id, rating)
        await self._save(user)
        self.logger.info(f"User {user_id} watched movie {movie_id} (rating: {rating})")
        return user.relationship(movie_id)

    async def list_watchlist(self, user_id: str) -> List[WatchlistItem]:
        """List the watchlist with movie summaries."""
        user = await self._load_user(user_id)
        items = []
        for entry in user.watchlist:
            movie = await self._movie_store.get(entry.movie_id)
            if movie is None:
                self.logger.debug(f"Skipping vanished movie {entry.movie_id}")
                continue
            items.append(WatchlistItem(movie=movie.to_summary(), added_at=entry.added_at))
        return items

    async def list_history(self, user_id: str) -> List[HistoryItem]:
        """List the watch history with movie summaries."""
        user = await self._load_user(user_id)
        items = []
        for entry in user.watch_history:
            movie = await self._movie_store.get(entry.movie_id)
            if movie is None:
                self.logger.debug(f"Skipping vanished movie {entry.movie_id}")
                continue
            items.append(
                HistoryItem(
                    movie=movie.to_summary(), watched_at=entry.watched_at, rating=entry.rating
                )
            )
        return items

    async def _load_user(self, user_id: str) -> UserProfile:
        user = await self._user_store.get(user_id)
        if user is None:
            raise UserNotFoundError(f"User {user_id} not found")
        return user

    async def _require_movie(self, movie_id: str) -> MovieRecord:
        movie = await self._movie_store.get(movie_id)
        if movie is None:
            raise NotFoundError(f"Movie {movie_id} not found")
        return movie

    async def _save(self, user: UserProfile) -> None:
        try:
            await self._user_store.save(user)
        except StoreError:
            raise
        except Exception as e:
            error_msg = f"Failed to save user {user.id}: {e}"
            self.logger.error(error_msg)
            raise StoreError(error_msg) from e
