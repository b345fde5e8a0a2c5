"""Pytest configuration and fixtures."""

import asyncio
from typing import List, Optional, Union

import pytest

from cinematch.config import ConfigManager
from cinematch.core.interfaces import ILLMService
from cinematch.core.models import (
    ConversationTurn,
    LLMReply,
    MovieRecord,
    Preferences,
    ToolSchema,
    UserProfile,
)
from cinematch.core.services import (
    CatalogService,
    ChatOrchestrator,
    SimilarityResolver,
    WatchlistService,
)
from cinematch.infrastructure import Container, InMemoryMovieStore, InMemoryUserStore


class ScriptedLLMService(ILLMService):
    """LLM double replaying scripted replies and recording every call."""

    def __init__(self, replies: List[Union[LLMReply, Exception]], delay: float = 0) -> None:
        self.replies = list(replies)
        self.delay = delay
        self.calls: List[dict] = []

    async def complete(
        self, turns: List[ConversationTurn], tools: Optional[List[ToolSchema]] = None
    ) -> LLMReply:
        self.calls.append({"turns": list(turns), "tools": tools})
        if self.delay:
            await asyncio.sleep(self.delay)
        if not self.replies:
            raise AssertionError("LLM called more often than scripted")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def make_movie(movie_id: str, title: str, year: int, genres: List[str], **kwargs) -> MovieRecord:
    """Build a catalog record with a default plot."""
    kwargs.setdefault("plot", f"Plot of {title}.")
    return MovieRecord(id=movie_id, title=title, year=year, genres=genres, **kwargs)


@pytest.fixture
def temp_config_file(tmp_path):
    """Create a temporary configuration file."""
    config_content = f"""
llm:
  provider: "openai"
  model: "gpt-4o-mini"
  api_key: "test-key"
  timeout: 5

store:
  catalog_path: "{tmp_path / 'movies.json'}"
  users_path: "{tmp_path / 'users.json'}"

chat:
  context_window: 5
"""
    config_file = tmp_path / "config.yaml"
    config_file.write_text(config_content)
    return config_file


@pytest.fixture
def config_manager(temp_config_file):
    """Create a configuration manager with test config."""
    return ConfigManager(temp_config_file, load_env=False)


@pytest.fixture
def config(config_manager):
    """Load test configuration."""
    return config_manager.load_config()


@pytest.fixture
def container(config_manager):
    """Create a test container."""
    return Container(config_manager)


@pytest.fixture
def sample_movies():
    """Small catalog covering genres, moods, people and tie-breaks."""
    return [
        make_movie(
            "m01",
            "Inception",
            2010,
            ["Sci-Fi", "Action", "Thriller"],
            director="Christopher Nolan",
            cast=["Leonardo DiCaprio", "Joseph Gordon-Levitt", "Tom Hardy"],
            plot="A thief plants an idea inside a dream.",
            runtime=148,
            rating=8.8,
            popularity=95,
            keywords=["dreams", "heist"],
        ),
        make_movie(
            "m02",
            "Shutter Island",
            2010,
            ["Mystery", "Thriller"],
            director="Martin Scorsese",
            cast=["Leonardo DiCaprio", "Mark Ruffalo"],
            rating=8.2,
            popularity=80,
            mood=["suspense"],
        ),
        make_movie(
            "m03",
            "Zodiac",
            2007,
            ["Crime", "Mystery", "Thriller"],
            director="David Fincher",
            cast=["Jake Gyllenhaal", "Mark Ruffalo"],
            rating=7.7,
            popularity=60,
        ),
        make_movie(
            "m04",
            "Prisoners",
            2013,
            ["Crime", "Drama", "Mystery"],
            director="Denis Villeneuve",
            cast=["Hugh Jackman", "Jake Gyllenhaal"],
            rating=8.1,
            popularity=65,
        ),
        make_movie(
            "m05",
            "Toy Story",
            1995,
            ["Animation", "Comedy", "Family"],
            director="John Lasseter",
            cast=["Tom Hanks", "Tim Allen"],
            rating=8.3,
            popularity=85,
            keywords=["toys", "funny"],
        ),
        make_movie(
            "m06",
            "The Notebook",
            2004,
            ["Romance", "Drama"],
            director="Nick Cassavetes",
            cast=["Ryan Gosling", "Rachel McAdams"],
            rating=7.8,
            popularity=70,
        ),
        make_movie(
            "m07",
            "Interstellar",
            2014,
            ["Sci-Fi", "Adventure", "Drama"],
            director="Christopher Nolan",
            cast=["Matthew McConaughey", "Anne Hathaway"],
            rating=8.7,
            popularity=90,
        ),
        make_movie(
            "m08",
            "Tenet",
            2020,
            ["Sci-Fi", "Action"],
            director="Christopher Nolan",
            cast=["John David Washington", "Robert Pattinson"],
            rating=7.3,
            popularity=50,
        ),
        make_movie(
            "m09",
            "Edge of Tomorrow",
            2014,
            ["Sci-Fi", "Action"],
            director="Doug Liman",
            cast=["Tom Cruise", "Emily Blunt"],
            rating=7.9,
            popularity=60,
        ),
        make_movie(
            "m10",
            "Memento",
            2000,
            ["Mystery", "Thriller"],
            director="Christopher Nolan",
            cast=["Guy Pearce", "Carrie-Anne Moss"],
            rating=8.4,
            popularity=55,
        ),
        make_movie(
            "m11",
            "Arrival",
            2016,
            ["Sci-Fi", "Drama"],
            director="Denis Villeneuve",
            cast=["Amy Adams", "Jeremy Renner"],
            rating=7.9,
            popularity=60,
        ),
        make_movie(
            "m12",
            "Gravity",
            2013,
            [],
            director="Alfonso Cuaron",
            cast=["Sandra Bullock", "George Clooney"],
            rating=7.7,
            popularity=40,
        ),
    ]


@pytest.fixture
def sample_users():
    """User documents: one with genre preferences, one without."""
    return [
        UserProfile(
            id="u1", username="alice", preferences=Preferences(genres=["Sci-Fi", "Mystery"])
        ),
        UserProfile(id="u2", username="bob"),
    ]


@pytest.fixture
def movie_store(sample_movies):
    """In-memory movie store over the sample catalog."""
    return InMemoryMovieStore(sample_movies)


@pytest.fixture
def user_store(sample_users):
    """In-memory user store over the sample users."""
    return InMemoryUserStore(sample_users)


@pytest.fixture
def catalog_service(config, movie_store, user_store):
    """Catalog service over the in-memory stores."""
    return CatalogService(config, movie_store, user_store)


@pytest.fixture
def similarity_resolver(config, catalog_service):
    """Similarity resolver over the sample catalog."""
    return SimilarityResolver(config, catalog_service)


@pytest.fixture
def watchlist_service(config, movie_store, user_store):
    """Watchlist service over the in-memory stores."""
    return WatchlistService(config, movie_store, user_store)


@pytest.fixture
def make_orchestrator(config, catalog_service, user_store):
    """Build a chat orchestrator around a scripted LLM."""

    def factory(*replies, delay: float = 0):
        llm = ScriptedLLMService(list(replies), delay=delay)
        return ChatOrchestrator(config, llm, catalog_service, user_store), llm

    return factory
