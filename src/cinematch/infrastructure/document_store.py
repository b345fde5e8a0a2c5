"""In-process document stores backed by memory or JSON files.

These stand in for an external document database. Criteria are evaluated in
memory with the same semantics the catalog relies on: AND across clauses,
case-insensitive substring patterns, OR across text fields and whole-word terms.
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import aiofiles
import aiofiles.os
from pydantic import ValidationError

from ..core.interfaces import IMovieStore, IUserStore
from ..core.models import CriteriaSet, MovieRecord, SortDirection, SortField, UserProfile
from ..utils import StoreError, contains_ignore_case, tokenize_search
from .logging import LoggerMixin


def _lower_set(values: Iterable[str]) -> set:
    return {v.lower() for v in values}


def text_score(record: MovieRecord, text: Optional[str]) -> int:
    """Score a record against a free-text search.

    Terms match whole words only. Each (term, field) hit over title, plot,
    cast, directors and keywords counts once.

    Args:
        record: Movie to score.
        text: Free-text search.

    Returns:
        Number of hits, 0 when nothing matches.
    """
    if not text:
        return 0

    fields = [
        record.title,
        record.plot,
        " ".join(record.cast),
        " ".join(record.all_directors),
        " ".join(record.keywords),
    ]
    words = [set(tokenize_search(field)) for field in fields if field]
    return sum(1 for term in tokenize_search(text) for field in words if term in field)


def matches(record: MovieRecord, criteria: CriteriaSet) -> bool:
    """Check whether a record satisfies every clause of the criteria."""
    if criteria.exclude_ids and record.id in criteria.exclude_ids:
        return False

    genres = _lower_set(genre.value for genre in record.genres)
    if criteria.genres and not genres & _lower_set(criteria.genres):
        return False

    if criteria.year is not None and record.year != criteria.year:
        return False
    if criteria.year_from is not None and record.year < criteria.year_from:
        return False
    if criteria.year_to is not None and record.year > criteria.year_to:
        return False

    if criteria.director_patterns and not any(
        contains_ignore_case(name, pattern)
        for pattern in criteria.director_patterns
        for name in record.all_directors
    ):
        return False

    if criteria.actor_patterns and not any(
        contains_ignore_case(name, pattern)
        for pattern in criteria.actor_patterns
        for name in record.cast
    ):
        return False

    if criteria.title_pattern and not contains_ignore_case(record.title, criteria.title_pattern):
        return False
    if criteria.exact_title and record.title.lower() != criteria.exact_title.lower():
        return False

    if criteria.min_rating is not None and (
        record.rating is None or record.rating < criteria.min_rating
    ):
        return False

    if criteria.text and text_score(record, criteria.text) == 0:
        return False

    if criteria.mood_clause is not None:
        clause = criteria.mood_clause
        keywords = _lower_set(clause.keywords)
        if not (
            genres & _lower_set(clause.genres)
            or _lower_set(record.keywords) & keywords
            or _lower_set(record.mood) & keywords
        ):
            return False

    return True


def _sort_value(record: MovieRecord, field: SortField, text: Optional[str]) -> Any:
    if field == SortField.RELEVANCE:
        return text_score(record, text)
    if field == SortField.TITLE:
        return record.title.lower()
    return getattr(record, field.value)


def sort_records(records: List[MovieRecord], criteria: CriteriaSet) -> List[MovieRecord]:
    """Sort records by the criteria sort keys.

    Missing values sort lowest, so they come last in descending order.
    """
    ordered = list(records)
    for key in reversed(criteria.sort):

        def sort_key(record: MovieRecord, field: SortField = key.field) -> Any:
            value = _sort_value(record, field, criteria.text)
            return (0, 0) if value is None else (1, value)

        ordered.sort(key=sort_key, reverse=key.direction == SortDirection.DESC)
    return ordered


class InMemoryMovieStore(IMovieStore, LoggerMixin):
    """Movie store holding its documents in memory."""

    def __init__(self, movies: Optional[List[MovieRecord]] = None) -> None:
        """Initialize store.

        Args:
            movies: Initial catalog.
        """
        self._movies: Dict[str, MovieRecord] = {}
        for movie in movies or []:
            self._movies[movie.id] = movie

    async def _documents(self) -> List[MovieRecord]:
        return list(self._movies.values())

    async def find(self, criteria: CriteriaSet) -> List[MovieRecord]:
        """Find movies matching criteria, sorted, skipped and limited."""
        hits = [m for m in await self._documents() if matches(m, criteria)]
        ordered = sort_records(hits, criteria)
        return ordered[criteria.skip : criteria.skip + criteria.limit]

    async def count(self, criteria: CriteriaSet) -> int:
        """Count all movies matching criteria."""
        return sum(1 for m in await self._documents() if matches(m, criteria))

    async def get(self, movie_id: str) -> Optional[MovieRecord]:
        """Get a movie by id."""
        await self._documents()
        return self._movies.get(movie_id)


class InMemoryUserStore(IUserStore, LoggerMixin):
    """User store holding its documents in memory."""

    def __init__(self, users: Optional[List[UserProfile]] = None) -> None:
        """Initialize store.

        Args:
            users: Initial user documents.
        """
        self._users: Dict[str, UserProfile] = {}
        for user in users or []:
            self._users[user.id] = user

    async def _ensure_loaded(self) -> None:
        pass

    async def get(self, user_id: str) -> Optional[UserProfile]:
        """Load a copy of a user document."""
        await self._ensure_loaded()
        user = self._users.get(user_id)
        return user.model_copy(deep=True) if user else None

    async def save(self, user: UserProfile) -> None:
        """Replace a user document."""
        await self._ensure_loaded()
        self._users[user.id] = user.model_copy(deep=True)


async def _read_json(path: Path) -> Any:
    async with aiofiles.open(path, "r", encoding="utf-8") as f:
        content = await f.read()
    return json.loads(content)


def _unwrap(data: Any, key: str) -> List[Dict[str, Any]]:
    if isinstance(data, dict):
        data = data.get(key, [])
    if not isinstance(data, list):
        raise StoreError(f"Expected a list of {key}")
    return data


class JsonMovieStore(InMemoryMovieStore):
    """Movie store loading its catalog from a JSON file on first use.

    The file holds a list of movie documents, or ``{"movies": [...]}``.
    """

    def __init__(self, path: Path) -> None:
        """Initialize store.

        Args:
            path: Catalog JSON file.
        """
        super().__init__()
        self._path = Path(path)
        self._loaded = False
        self._lock = asyncio.Lock()

    async def _documents(self) -> List[MovieRecord]:
        if not self._loaded:
            async with self._lock:
                if not self._loaded:
                    await self._load()
        return list(self._movies.values())

    async def _load(self) -> None:
        try:
            documents = _unwrap(await _read_json(self._path), "movies")
            movies = [MovieRecord(**doc) for doc in documents]
        except (OSError, json.JSONDecodeError, ValidationError, TypeError) as e:
            error_msg = f"Failed to load movie catalog from {self._path}: {e}"
            self.logger.error(error_msg)
            raise StoreError(error_msg) from e

        self._movies = {movie.id: movie for movie in movies}
        self._loaded = True
        self.logger.info(f"Loaded {len(self._movies)} movies from {self._path}")


class JsonUserStore(InMemoryUserStore):
    """User store persisted to a JSON file.

    A missing file is an empty store; it is created on first save. Writes go
    to a temporary file which then replaces the original.
    """

    def __init__(self, path: Path) -> None:
        """Initialize store.

        Args:
            path: Users JSON file.
        """
        super().__init__()
        self._path = Path(path)
        self._loaded = False
        self._lock = asyncio.Lock()

    async def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        async with self._lock:
            if self._loaded:
                return
            if self._path.exists():
                try:
                    documents = _unwrap(await _read_json(self._path), "users")
                    users = [UserProfile(**doc) for doc in documents]
                except (OSError, json.JSONDecodeError, ValidationError, TypeError) as e:
                    error_msg = f"Failed to load users from {self._path}: {e}"
                    self.logger.error(error_msg)
                    raise StoreError(error_msg) from e
                self._users = {user.id: user for user in users}
            self._loaded = True

    async def save(self, user: UserProfile) -> None:
        """Write the file with the user document replaced.

        Memory is only updated once the file has been replaced, so a failed
        write leaves the previous document in place.
        """
        await self._ensure_loaded()
        async with self._lock:
            users = dict(self._users)
            users[user.id] = user.model_copy(deep=True)
            payload = {"users": [u.model_dump(mode="json") for u in users.values()]}
            tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                    await f.write(json.dumps(payload, indent=2))
                await aiofiles.os.replace(tmp_path, self._path)
            except OSError as e:
                error_msg = f"Failed to write users to {self._path}: {e}"
                self.logger.error(error_msg)
                raise StoreError(error_msg) from e
            self._users = users
