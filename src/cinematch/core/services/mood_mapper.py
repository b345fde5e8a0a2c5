"""Mood label to catalog criteria mapping."""

import logging
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from ..models import Genre, MoodClause

logger = logging.getLogger(__name__)


class Mood(str, Enum):
    """Supported mood labels."""

    HAPPY = "happy"
    SAD = "sad"
    EXCITED = "excited"
    RELAXED = "relaxed"
    NOSTALGIC = "nostalgic"
    MYSTERIOUS = "mysterious"
    ROMANTIC = "romantic"


DEFAULT_MOOD = Mood.HAPPY


class MoodMapping(BaseModel):
    """Genres and thematic keywords associated with a mood."""

    genres: Tuple[Genre, ...]
    keywords: Tuple[str, ...]

    model_config = ConfigDict(frozen=True)

    def to_clause(self) -> MoodClause:
        """Build the any-of catalog clause for this mapping."""
        return MoodClause(
            genres=[genre.value for genre in self.genres],
            keywords=list(self.keywords),
        )


MOOD_MAPPINGS: Dict[Mood, MoodMapping] = {
    Mood.HAPPY: MoodMapping(
        genres=(Genre.COMEDY, Genre.ADVENTURE, Genre.FAMILY),
        keywords=("uplifting", "funny", "feel-good"),
    ),
    Mood.SAD: MoodMapping(
        genres=(Genre.DRAMA, Genre.ROMANCE),
        keywords=("emotional", "touching", "heartfelt"),
    ),
    Mood.EXCITED: MoodMapping(
        genres=(Genre.ACTION, Genre.ADVENTURE, Genre.SCI_FI),
        keywords=("thrilling", "adventure", "exciting"),
    ),
    Mood.RELAXED: MoodMapping(
        genres=(Genre.COMEDY, Genre.DRAMA, Genre.DOCUMENTARY),
        keywords=("calm", "peaceful", "easy-going"),
    ),
    Mood.NOSTALGIC: MoodMapping(
        genres=(Genre.DRAMA, Genre.ROMANCE, Genre.COMEDY),
        keywords=("retro", "vintage", "classic"),
    ),
    Mood.MYSTERIOUS: MoodMapping(
        genres=(Genre.MYSTERY, Genre.THRILLER, Genre.CRIME),
        keywords=("suspense", "mystery", "intriguing"),
    ),
    Mood.ROMANTIC: MoodMapping(
        genres=(Genre.ROMANCE, Genre.DRAMA, Genre.COMEDY),
        keywords=("romantic", "love", "relationship"),
    ),
}


def resolve_mood(label: Optional[str]) -> Mood:
    """Resolve a free-form label to a supported mood.

    Unknown or empty labels resolve to ``Mood.HAPPY``.

    Args:
        label: Mood label, any case.

    Returns:
        Resolved mood.
    """
    key = (label or "").strip().lower()
    for mood in Mood:
        if mood.value == key:
            return mood

    logger.debug(f"Unknown mood '{label}', falling back to {DEFAULT_MOOD.value}")
    return DEFAULT_MOOD


def map_mood(label: Optional[str]) -> MoodMapping:
    """Get the criteria mapping for a mood label. Never raises."""
    return MOOD_MAPPINGS[resolve_mood(label)]


def supported_moods() -> List[str]:
    """List supported mood labels."""
    return [mood.value for mood in Mood]
