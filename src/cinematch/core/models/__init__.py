"""Core data models."""

from .catalog import CatalogPage, MoodRecommendation, MovieDetail, MovieLookup, Pagination
from .chat import (
    ChatRequest,
    ChatResult,
    ConversationTurn,
    LLMReply,
    Role,
    ToolInvocationRequest,
    ToolInvocationResult,
    ToolSchema,
)
from .criteria import CriteriaSet, FilterInput, MoodClause, SortDirection, SortField, SortKey
from .movie import Genre, MovieRecord, MovieSummary
from .user import (
    HistoryItem,
    Preferences,
    UserProfile,
    UserRelationship,
    WatchHistoryEntry,
    WatchlistEntry,
    WatchlistItem,
    WatchState,
)

__all__ = [
    "Genre",
    "MovieRecord",
    "MovieSummary",
    "FilterInput",
    "CriteriaSet",
    "MoodClause",
    "SortKey",
    "SortField",
    "SortDirection",
    "Role",
    "ConversationTurn",
    "ToolInvocationRequest",
    "ToolInvocationResult",
    "ToolSchema",
    "LLMReply",
    "ChatRequest",
    "ChatResult",
    "Preferences",
    "UserProfile",
    "WatchlistEntry",
    "WatchHistoryEntry",
    "WatchlistItem",
    "HistoryItem",
    "UserRelationship",
    "WatchState",
    "CatalogPage",
    "Pagination",
    "MovieDetail",
    "MovieLookup",
    "MoodRecommendation",
]
