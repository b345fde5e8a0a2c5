"""Core service implementations."""

from .catalog_service import CatalogService
from .chat_orchestrator import ChatOrchestrator
from .criteria_compiler import compile_criteria
from .llm_services import AnthropicLLMService, OpenAILLMService
from .mood_mapper import Mood, map_mood, resolve_mood
from .similarity_resolver import SimilarityResolver
from .watchlist_service import WatchlistService

__all__ = [
    "CatalogService",
    "ChatOrchestrator",
    "SimilarityResolver",
    "WatchlistService",
    "OpenAILLMService",
    "AnthropicLLMService",
    "Mood",
    "map_mood",
    "resolve_mood",
    "compile_criteria",
]
