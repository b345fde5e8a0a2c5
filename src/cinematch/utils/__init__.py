"""Utility functions and classes."""

from .exceptions import (
    CineMatchError,
    ConfigurationError,
    DuplicateStateError,
    LLMServiceError,
    NotFoundError,
    StoreError,
    UpstreamError,
    UserNotFoundError,
    ValidationError,
    describe_error,
)
from .text_utils import (
    clean_string_list,
    contains_ignore_case,
    format_runtime,
    tokenize_search,
)

__all__ = [
    "CineMatchError",
    "ConfigurationError",
    "ValidationError",
    "NotFoundError",
    "UserNotFoundError",
    "DuplicateStateError",
    "UpstreamError",
    "LLMServiceError",
    "StoreError",
    "describe_error",
    "clean_string_list",
    "contains_ignore_case",
    "tokenize_search",
    "format_runtime",
]
