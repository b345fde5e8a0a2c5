"""User data models and watchlist/history transitions.

Each (user, movie) pair is in one of three states::

    absent --add--> in_watchlist --remove--> absent
    absent | in_watchlist --mark_watched--> watched

``mark_watched`` on an already watched movie updates the history entry in
place. A movie appears at most once in each list after every transition.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ...utils.exceptions import DuplicateStateError, ValidationError
from .movie import MovieSummary

MIN_USER_RATING = 1
MAX_USER_RATING = 5


def utc_now() -> datetime:
    """Get the current time in UTC."""
    return datetime.now(timezone.utc)


class WatchState(str, Enum):
    """Membership state of a movie for one user."""

    ABSENT = "absent"
    IN_WATCHLIST = "in_watchlist"
    WATCHED = "watched"


class Preferences(BaseModel):
    """Stored viewing preferences."""

    genres: List[str] = Field(default_factory=list, description="Preferred genres")
    actors: List[str] = Field(default_factory=list, description="Preferred actors")
    directors: List[str] = Field(default_factory=list, description="Preferred directors")
    min_rating: float = Field(default=0, ge=0.0, le=10.0, description="Minimum rating")
    max_year: Optional[int] = Field(None, description="Latest release year")


class WatchlistEntry(BaseModel):
    """Movie saved for later."""

    movie_id: str
    added_at: datetime = Field(default_factory=utc_now)


class WatchHistoryEntry(BaseModel):
    """Movie the user has watched."""

    movie_id: str
    watched_at: datetime = Field(default_factory=utc_now)
    rating: Optional[int] = Field(None, ge=MIN_USER_RATING, le=MAX_USER_RATING)


class UserRelationship(BaseModel):
    """Relationship block returned alongside a movie for an identified user."""

    in_watchlist: bool = False
    watched: bool = False
    user_rating: Optional[int] = None


class WatchlistItem(BaseModel):
    """Watchlist entry populated with its movie."""

    movie: MovieSummary
    added_at: datetime


class HistoryItem(BaseModel):
    """History entry populated with its movie."""

    movie: MovieSummary
    watched_at: datetime
    rating: Optional[int] = None


def validate_user_rating(rating: Optional[int]) -> Optional[int]:
    """Validate an optional personal rating.

    Args:
        rating: Rating to check, or None.

    Returns:
        The rating unchanged.

    Raises:
        ValidationError: If the rating is not an integer in [1, 5].
    """
    if rating is None:
        return None
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError("Rating must be a whole number between 1 and 5")
    if not MIN_USER_RATING <= rating <= MAX_USER_RATING:
        raise ValidationError(
            f"Rating must be between {MIN_USER_RATING} and {MAX_USER_RATING}, got {rating}"
        )
    return rating


class UserProfile(BaseModel):
    """User document owned by the identity boundary, minus credentials."""

    id: str = Field(..., description="User identity")
    username: str = Field(..., description="Display name")
    preferences: Preferences = Field(default_factory=Preferences)
    watchlist: List[WatchlistEntry] = Field(default_factory=list)
    watch_history: List[WatchHistoryEntry] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: object) -> str:
        """Accept numeric ids from stored documents."""
        return str(v)

    def watchlist_entry(self, movie_id: str) -> Optional[WatchlistEntry]:
        """Find the watchlist entry for a movie."""
        return next((e for e in self.watchlist if e.movie_id == movie_id), None)

    def history_entry(self, movie_id: str) -> Optional[WatchHistoryEntry]:
        """Find the history entry for a movie."""
        return next((e for e in self.watch_history if e.movie_id == movie_id), None)

    def state_of(self, movie_id: str) -> WatchState:
        """Get the membership state of a movie."""
        if self.history_entry(movie_id) is not None:
            return WatchState.WATCHED
        if self.watchlist_entry(movie_id) is not None:
            return WatchState.IN_WATCHLIST
        return WatchState.ABSENT

    def relationship(self, movie_id: str) -> UserRelationship:
        """Build the relationship block for a movie."""
        history = self.history_entry(movie_id)
        return UserRelationship(
            in_watchlist=self.watchlist_entry(movie_id) is not None,
            watched=history is not None,
            user_rating=history.rating if history else None,
        )

    def add_to_watchlist(self, movie_id: str, now: Optional[datetime] = None) -> WatchlistEntry:
        """Add a movie to the watchlist.

        Args:
            movie_id: Movie to add.
            now: Timestamp to record. Defaults to current UTC time.

        Returns:
            The new entry.

        Raises:
            DuplicateStateError: If the movie is already in the watchlist.
        """
        if self.watchlist_entry(movie_id) is not None:
            raise DuplicateStateError(f"Movie {movie_id} already in watchlist of user {self.id}")

        entry = WatchlistEntry(movie_id=movie_id, added_at=now or utc_now())
        self.watchlist.append(entry)
        return entry

    def remove_from_watchlist(self, movie_id: str) -> bool:
        """Remove a movie from the watchlist. Absent movies are ignored.

        Returns:
            True if an entry was removed.
        """
        before = len(self.watchlist)
        self.watchlist = [e for e in self.watchlist if e.movie_id != movie_id]
        return len(self.watchlist) != before

    def mark_watched(
        self, movie_id: str, rating: Optional[int] = None, now: Optional[datetime] = None
    ) -> WatchHistoryEntry:
        """Record a movie as watched and drop it from the watchlist.

        A re-watch refreshes the timestamp of the existing entry. The rating is
        only replaced when one is given; a first watch without rating stores None.

        Args:
            movie_id: Movie watched.
            rating: Optional personal rating (1-5).
            now: Timestamp to record. Defaults to current UTC time.

        Returns:
            The created or updated history entry.

        Raises:
            ValidationError: If the rating is out of range.
        """
        rating = validate_user_rating(rating)
        watched_at = now or utc_now()

        entry = self.history_entry(movie_id)
        if entry is not None:
            entry.watched_at = watched_at
            if rating is not None:
                entry.rating = rating
        else:
            entry = WatchHistoryEntry(movie_id=movie_id, watched_at=watched_at, rating=rating)
            self.watch_history.append(entry)

        self.remove_from_watchlist(movie_id)
        return entry
