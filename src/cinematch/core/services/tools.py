"""Capabilities the chat LLM may call, with their schemas and argument models."""

import json
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ...utils import ValidationError
from ..models import FilterInput, ToolInvocationRequest, ToolSchema

SEARCH_MOVIES = "search_movies"
GET_MOVIE_INFO = "get_movie_info"

SEARCH_MOVIES_SCHEMA = ToolSchema(
    name=SEARCH_MOVIES,
    description="Search the movie catalog by genre, people, years, rating, mood or keywords",
    parameters={
        "type": "object",
        "properties": {
            "genres": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Movie genres to search for",
            },
            "actors": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Actors to search for",
            },
            "directors": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Directors to search for",
            },
            "year_from": {"type": "integer", "description": "Start year for movie search"},
            "year_to": {"type": "integer", "description": "End year for movie search"},
            "min_rating": {"type": "number", "description": "Minimum rating (0-10)"},
            "query": {
                "type": "string",
                "description": "Free-text keywords matched against title, plot and cast",
            },
            "mood": {
                "type": "string",
                "description": (
                    "Viewer mood: happy, sad, excited, relaxed, nostalgic, mysterious or romantic"
                ),
            },
            "limit": {
                "type": "integer",
                "description": "Number of movies to return (max 10)",
                "default": 5,
            },
        },
    },
)

GET_MOVIE_INFO_SCHEMA = ToolSchema(
    name=GET_MOVIE_INFO,
    description="Get detailed information about a specific movie",
    parameters={
        "type": "object",
        "properties": {
            "title": {"type": "string", "description": "Movie title to search for"},
        },
        "required": ["title"],
    },
)

CHAT_TOOLS: List[ToolSchema] = [SEARCH_MOVIES_SCHEMA, GET_MOVIE_INFO_SCHEMA]


class SearchMoviesArgs(BaseModel):
    """Arguments of ``search_movies``."""

    genres: Optional[List[str]] = None
    actors: Optional[List[str]] = None
    directors: Optional[List[str]] = None
    year_from: Optional[int] = None
    year_to: Optional[int] = None
    min_rating: Optional[float] = Field(None, ge=0.0, le=10.0)
    query: Optional[str] = None
    mood: Optional[str] = None
    limit: Optional[int] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("genres", "actors", "directors", mode="before")
    @classmethod
    def wrap_scalar(cls, v: Any) -> Any:
        """Accept a single name where a list is declared."""
        if isinstance(v, str):
            return [v]
        return v

    def to_filter_input(self) -> FilterInput:
        """Convert to raw filter input for the criteria compiler."""
        return FilterInput(
            genres=self.genres,
            actors=self.actors,
            directors=self.directors,
            year_from=self.year_from,
            year_to=self.year_to,
            min_rating=self.min_rating,
            search=self.query,
            mood=self.mood,
            limit=self.limit,
        )


class GetMovieInfoArgs(BaseModel):
    """Arguments of ``get_movie_info``."""

    title: str = Field(..., min_length=1)

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)


ArgsT = TypeVar("ArgsT", bound=BaseModel)


def parse_tool_arguments(call: ToolInvocationRequest) -> Dict[str, Any]:
    """Decode the raw arguments of a tool call into a mapping.

    Args:
        call: Tool call as received from the provider.

    Returns:
        Argument mapping.

    Raises:
        ValidationError: If the arguments are not a JSON object.
    """
    arguments = call.arguments
    if isinstance(arguments, str):
        if not arguments.strip():
            return {}
        try:
            arguments = json.loads(arguments)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Arguments for {call.name} are not valid JSON: {e}") from e

    if not isinstance(arguments, dict):
        raise ValidationError(f"Arguments for {call.name} must be a JSON object")
    return arguments


def validate_tool_arguments(call: ToolInvocationRequest, model: Type[ArgsT]) -> ArgsT:
    """Validate a tool call against its declared argument model.

    Raises:
        ValidationError: If the arguments do not fit the declared shape.
    """
    arguments = parse_tool_arguments(call)
    try:
        return model(**arguments)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid arguments for {call.name}: {e}") from e
