"""Infrastructure module for cross-cutting concerns."""

from .container import Container
from .document_store import InMemoryMovieStore, InMemoryUserStore, JsonMovieStore, JsonUserStore
from .logging import setup_logging

__all__ = [
    "Container",
    "setup_logging",
    "InMemoryMovieStore",
    "InMemoryUserStore",
    "JsonMovieStore",
    "JsonUserStore",
]
