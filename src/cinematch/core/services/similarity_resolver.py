"""Similar-movie resolver."""

from typing import List, Optional

from ...config.models import Config
from ...infrastructure.logging import LoggerMixin
from ...utils import NotFoundError
from ..interfaces import ICatalogService, ISimilarityResolver
from ..models import FilterInput, MovieSummary
from .criteria_compiler import SIMILAR_CAP, compile_criteria

YEAR_WINDOW = 5


class SimilarityResolver(ISimilarityResolver, LoggerMixin):
    """Finds movies sharing a genre with the source, released within five years of it."""

    def __init__(self, config: Config, catalog_service: ICatalogService):
        """Initialize similarity resolver.

        Args:
            config: Application configuration.
            catalog_service: Catalog service used to load the source and run the query.
        """
        self._config = config
        self._catalog_service = catalog_service

    async def similar(self, movie_id: str, limit: Optional[int] = None) -> List[MovieSummary]:
        """Find movies similar to the given one.

        Args:
            movie_id: Source movie identity.
            limit: Requested count, clamped to the similarity cap.

        Returns:
            Movies ranked by rating then popularity. Empty if the source is unknown.
        """
        try:
            source = (await self._catalog_service.get_movie(movie_id)).movie
        except NotFoundError:
            self.logger.info(f"Similar movies requested for unknown movie {movie_id}")
            return []

        if not source.genres:
            return []

        criteria = compile_criteria(
            FilterInput(
                genres=[genre.value for genre in source.genres],
                year_from=source.year - YEAR_WINDOW,
                year_to=source.year + YEAR_WINDOW,
                exclude_ids=[source.id],
                limit=limit,
            ),
            cap=SIMILAR_CAP,
            default_limit=self._config.recommendations.similar_limit,
        )
        return await self._catalog_service.search(criteria)
