"""Movie-related data models."""

import re
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ...utils.text_utils import format_runtime


class Genre(str, Enum):
    """Closed genre vocabulary of the catalog."""

    ACTION = "Action"
    ADVENTURE = "Adventure"
    ANIMATION = "Animation"
    COMEDY = "Comedy"
    CRIME = "Crime"
    DOCUMENTARY = "Documentary"
    DRAMA = "Drama"
    FAMILY = "Family"
    FANTASY = "Fantasy"
    HORROR = "Horror"
    MYSTERY = "Mystery"
    ROMANCE = "Romance"
    SCI_FI = "Sci-Fi"
    THRILLER = "Thriller"
    WAR = "War"
    WESTERN = "Western"

    @classmethod
    def parse(cls, value: str) -> Optional["Genre"]:
        """Parse a genre name case-insensitively.

        Args:
            value: Raw genre name, e.g. ``"sci fi"`` or ``"thriller"``.

        Returns:
            Matching genre or None if not in the vocabulary.
        """
        key = re.sub(r"[^a-z]", "", value.lower())
        return _GENRE_ALIASES.get(key)


_GENRE_ALIASES: Dict[str, Genre] = {
    re.sub(r"[^a-z]", "", genre.value.lower()): genre for genre in Genre
}
_GENRE_ALIASES.update(
    {
        "sciencefiction": Genre.SCI_FI,
        "scifi": Genre.SCI_FI,
        "romantic": Genre.ROMANCE,
        "animated": Genre.ANIMATION,
        "documentaries": Genre.DOCUMENTARY,
    }
)


class MovieSummary(BaseModel):
    """Externally safe projection of a movie record."""

    id: str = Field(..., description="Movie identity")
    title: str = Field(..., description="Movie title")
    year: int = Field(..., description="Release year")
    genres: List[str] = Field(default_factory=list, description="Movie genres")
    director: Optional[str] = Field(None, description="Primary director")
    plot: str = Field(..., description="Plot text")
    rating: Optional[float] = Field(None, description="Catalog rating (0-10)")
    imdb_rating: Optional[float] = Field(None, description="External rating (0-10)")
    poster_url: Optional[str] = Field(None, description="Poster image URL")
    runtime: Optional[str] = Field(None, description="Formatted runtime")
    popularity: float = Field(default=0, description="Popularity counter")


class MovieRecord(BaseModel):
    """Full catalog entry.

    ``plot_embedding`` is internal only and excluded from every dump.
    """

    id: str = Field(..., description="Movie identity")
    title: str = Field(..., min_length=1, description="Movie title")
    original_title: Optional[str] = Field(None, description="Original title")
    year: int = Field(..., description="Release year")
    genres: List[Genre] = Field(default_factory=list, description="Movie genres")
    director: Optional[str] = Field(None, description="Primary director")
    directors: List[str] = Field(default_factory=list, description="All directors")
    cast: List[str] = Field(default_factory=list, description="Billed cast, in order")
    plot: str = Field(..., description="Plot text")
    plot_embedding: Optional[List[float]] = Field(
        None, exclude=True, repr=False, description="Plot embedding vector"
    )
    runtime: Optional[int] = Field(None, ge=1, description="Runtime in minutes")
    rating: Optional[float] = Field(None, ge=0.0, le=10.0, description="Catalog rating")
    imdb_rating: Optional[float] = Field(None, ge=0.0, le=10.0, description="External rating")
    poster_url: Optional[str] = Field(None, description="Poster image URL")
    backdrop_url: Optional[str] = Field(None, description="Backdrop image URL")
    trailer_url: Optional[str] = Field(None, description="Trailer URL")
    language: str = Field(default="English", description="Original language")
    country: Optional[str] = Field(None, description="Country of origin")
    awards: List[str] = Field(default_factory=list, description="Awards")
    keywords: List[str] = Field(default_factory=list, description="Keyword tags")
    mood: List[str] = Field(default_factory=list, description="Mood tags")
    tags: List[str] = Field(default_factory=list, description="User-generated tags")
    popularity: float = Field(default=0, description="Popularity counter")
    watch_count: int = Field(default=0, ge=0, description="Times watched")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: object) -> str:
        """Accept numeric ids from catalog dumps."""
        return str(v)

    @field_validator("genres", mode="before")
    @classmethod
    def parse_genres(cls, v: object) -> object:
        """Accept genre names in any casing or spelling the vocabulary knows."""
        if not isinstance(v, list):
            return v
        return [Genre.parse(g) or g if isinstance(g, str) else g for g in v]

    @property
    def all_directors(self) -> List[str]:
        """Get the primary director followed by any additional ones."""
        names = [self.director] if self.director else []
        names.extend(d for d in self.directors if d not in names)
        return names

    @property
    def formatted_runtime(self) -> Optional[str]:
        """Get runtime formatted as hours and minutes."""
        return format_runtime(self.runtime)

    def to_summary(self) -> MovieSummary:
        """Project the record onto its externally safe summary."""
        directors = self.all_directors
        return MovieSummary(
            id=self.id,
            title=self.title,
            year=self.year,
            genres=[genre.value for genre in self.genres],
            director=directors[0] if directors else None,
            plot=self.plot,
            rating=self.rating,
            imdb_rating=self.imdb_rating,
            poster_url=self.poster_url,
            runtime=self.formatted_runtime,
            popularity=self.popularity,
        )
