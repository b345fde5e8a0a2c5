"""Core interfaces for dependency injection."""

from .catalog_service import ICatalogService, ISimilarityResolver
from .chat_orchestrator import IChatOrchestrator
from .llm_service import ILLMService
from .movie_store import IMovieStore, IUserStore
from .watchlist_service import IWatchlistService

__all__ = [
    "ILLMService",
    "IMovieStore",
    "IUserStore",
    "ICatalogService",
    "ISimilarityResolver",
    "IChatOrchestrator",
    "IWatchlistService",
]
