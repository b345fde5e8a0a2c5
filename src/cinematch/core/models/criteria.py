"""Filter input and compiled criteria models."""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SortDirection(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


class SortField(str, Enum):
    """Sortable catalog fields."""

    RATING = "rating"
    POPULARITY = "popularity"
    YEAR = "year"
    TITLE = "title"
    IMDB_RATING = "imdb_rating"
    RELEVANCE = "relevance"
    ID = "id"


class FilterInput(BaseModel):
    """Raw, loosely-populated filter input from a caller.

    Every field is optional. Scalars are accepted where a list is expected.
    """

    genres: Optional[List[str]] = Field(None, description="Genres (any may match)")
    year: Optional[int] = Field(None, description="Exact release year")
    year_from: Optional[int] = Field(None, description="Earliest release year")
    year_to: Optional[int] = Field(None, description="Latest release year")
    directors: Optional[List[str]] = Field(None, description="Director name fragments")
    actors: Optional[List[str]] = Field(None, description="Cast name fragments")
    min_rating: Optional[float] = Field(None, description="Minimum catalog rating")
    search: Optional[str] = Field(None, description="Free-text search")
    mood: Optional[str] = Field(None, description="Mood label")
    title: Optional[str] = Field(None, description="Title fragment")
    exclude_ids: Optional[List[str]] = Field(None, description="Movie ids to leave out")
    sort_by: Optional[str] = Field(None, description="Sort field")
    sort_order: Optional[str] = Field(None, description="asc or desc")
    limit: Optional[int] = Field(None, description="Requested result count")
    page: Optional[int] = Field(None, description="1-based page number")

    @field_validator("genres", "directors", "actors", "exclude_ids", mode="before")
    @classmethod
    def wrap_scalar(cls, v: Any) -> Any:
        """Wrap a single value into a list."""
        if isinstance(v, (str, int)):
            return [str(v)]
        return v


class SortKey(BaseModel):
    """One component of a compiled sort."""

    field: SortField
    direction: SortDirection

    model_config = ConfigDict(frozen=True)


class MoodClause(BaseModel):
    """Disjunction produced by the mood mapper.

    A movie matches if its genres intersect ``genres``, or any of its keyword
    or mood tags is in ``keywords``.
    """

    genres: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class CriteriaSet(BaseModel):
    """Canonical compiled catalog query with sort and limit."""

    genres: Optional[List[str]] = None
    year: Optional[int] = None
    year_from: Optional[int] = None
    year_to: Optional[int] = None
    director_patterns: Optional[List[str]] = None
    actor_patterns: Optional[List[str]] = None
    title_pattern: Optional[str] = None
    exact_title: Optional[str] = None
    min_rating: Optional[float] = None
    text: Optional[str] = None
    mood_clause: Optional[MoodClause] = None
    exclude_ids: Optional[List[str]] = None
    sort: List[SortKey] = Field(..., min_length=1)
    limit: int = Field(..., ge=1)
    skip: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)

    def without_paging(self) -> "CriteriaSet":
        """Get a copy of this query with skip reset, used for counting."""
        return self.model_copy(update={"skip": 0})
