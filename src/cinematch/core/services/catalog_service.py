"""Catalog search service implementation."""

from typing import List, Optional

from ...config.models import Config
from ...infrastructure.logging import LoggerMixin
from ...utils import NotFoundError, StoreError, ValidationError
from ..interfaces import ICatalogService, IMovieStore, IUserStore
from ..models import (
    CatalogPage,
    CriteriaSet,
    FilterInput,
    MoodRecommendation,
    MovieDetail,
    MovieLookup,
    MovieRecord,
    MovieSummary,
    Pagination,
)
from .criteria_compiler import BROWSE_CAP, MOOD_SEARCH_CAP, TOOL_SEARCH_CAP, compile_criteria
from .mood_mapper import resolve_mood


class CatalogService(ICatalogService, LoggerMixin):
    """Catalog search, browsing, lookups and mood recommendations."""

    def __init__(self, config: Config, movie_store: IMovieStore, user_store: IUserStore):
        """Initialize catalog service.

        Args:
            config: Application configuration.
            movie_store: Movie document store.
            user_store: User document store.
        """
        self._config = config
        self._defaults = config.recommendations
        self._movie_store = movie_store
        self._user_store = user_store

    async def search(self, criteria: CriteriaSet) -> List[MovieSummary]:
        """Execute a compiled query.

        Args:
            criteria: Compiled query.

        Returns:
            Ranked, capped movie summaries.

        Raises:
            StoreError: If the store fails.
        """
        records = await self._find(criteria)
        self.logger.debug(f"Search returned {len(records)} movies")
        return [record.to_summary() for record in records]

    async def lookup_by_title(self, title: str) -> MovieLookup:
        """Resolve one movie by case-insensitive title fragment.

        An exact title match wins over a better-rated partial match.

        Args:
            title: Title or title fragment.

        Returns:
            Found movie or a typed not-found outcome.
        """
        title = (title or "").strip()
        if not title:
            return MovieLookup.not_found()

        criteria = compile_criteria(
            FilterInput(title=title, limit=TOOL_SEARCH_CAP),
            cap=TOOL_SEARCH_CAP,
            default_limit=TOOL_SEARCH_CAP,
        )
        exact = await self._find(
            criteria.model_copy(update={"title_pattern": None, "exact_title": title, "limit": 1})
        )
        candidates = exact or await self._find(criteria.model_copy(update={"limit": 1}))
        if not candidates:
            self.logger.info(f"No movie found for title '{title}'")
            return MovieLookup.not_found()

        return MovieLookup(found=True, movie=candidates[0].to_summary())

    async def browse(self, filters: FilterInput) -> CatalogPage:
        """Get one page of filtered catalog results.

        Args:
            filters: Raw filters including page and limit.

        Returns:
            Movies plus pagination metadata.
        """
        criteria = compile_criteria(
            filters, cap=BROWSE_CAP, default_limit=self._defaults.browse_limit
        )
        movies = await self.search(criteria)
        total = await self._count(criteria)
        page = criteria.skip // criteria.limit + 1

        return CatalogPage(
            movies=movies,
            pagination=Pagination.build(page, criteria.limit, len(movies), total),
        )

    async def get_movie(self, movie_id: str, user_id: Optional[str] = None) -> MovieDetail:
        """Get a movie with the caller's relationship to it.

        Args:
            movie_id: Movie identity.
            user_id: Identified caller, if any.

        Returns:
            Movie detail.

        Raises:
            NotFoundError: If the movie does not exist.
        """
        movie = await self._get(movie_id)
        if movie is None:
            raise NotFoundError(f"Movie {movie_id} not found")

        detail = MovieDetail(movie=movie)
        if user_id:
            user = await self._user_store.get(user_id)
            if user is None:
                self.logger.warning(f"Identified user {user_id} has no stored profile")
            else:
                detail.user_data = user.relationship(movie_id)
        return detail

    async def recommend_by_mood(self, mood: str, limit: Optional[int] = None) -> MoodRecommendation:
        """Recommend movies for a mood label.

        Args:
            mood: Mood label. Unknown labels fall back to happy.
            limit: Requested count, clamped to the mood cap.

        Returns:
            Movies and the mood actually applied.

        Raises:
            ValidationError: If no mood is given.
        """
        if not mood or not mood.strip():
            raise ValidationError("Mood is required")

        resolved = resolve_mood(mood)
        criteria = compile_criteria(
            FilterInput(mood=resolved.value, limit=limit),
            cap=MOOD_SEARCH_CAP,
            default_limit=self._defaults.mood_limit,
        )
        movies = await self.search(criteria)
        self.logger.info(f"Mood '{mood}' resolved to '{resolved.value}': {len(movies)} movies")
        return MoodRecommendation(movies=movies, mood=resolved.value, requested_mood=mood)

    async def _find(self, criteria: CriteriaSet) -> List[MovieRecord]:
        try:
            return await self._movie_store.find(criteria)
        except StoreError:
            raise
        except Exception as e:
            error_msg = f"Catalog query failed: {e}"
            self.logger.error(error_msg)
            raise StoreError(error_msg) from e

    async def _count(self, criteria: CriteriaSet) -> int:
        try:
            return await self._movie_store.count(criteria.without_paging())
        except StoreError:
            raise
        except Exception as e:
            error_msg = f"Catalog count failed: {e}"
            self.logger.error(error_msg)
            raise StoreError(error_msg) from e

    async def _get(self, movie_id: str) -> Optional[MovieRecord]:
        try:
            return await self._movie_store.get(movie_id)
        except StoreError:
            raise
        except Exception as e:
            error_msg = f"Movie lookup failed for {movie_id}: {e}"
            self.logger.error(error_msg)
            raise StoreError(error_msg) from e
