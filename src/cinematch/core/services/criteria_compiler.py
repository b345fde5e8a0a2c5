"""Compilation of raw filter input into canonical catalog criteria.

Everything here is pure: no I/O, no logging side effects beyond debug output.
"""

import logging
import re
from typing import List, Optional

from ...utils.text_utils import clean_string_list
from ..models import CriteriaSet, FilterInput, Genre, SortDirection, SortField, SortKey
from .mood_mapper import map_mood

logger = logging.getLogger(__name__)

# Hard result caps per caller, independent of the requested limit.
TOOL_SEARCH_CAP = 10
MOOD_SEARCH_CAP = 20
BROWSE_CAP = 50
SIMILAR_CAP = 20

TIE_BREAK = SortKey(field=SortField.ID, direction=SortDirection.ASC)
DEFAULT_SORT = (
    SortKey(field=SortField.RATING, direction=SortDirection.DESC),
    SortKey(field=SortField.POPULARITY, direction=SortDirection.DESC),
)

_SORT_ALIASES = {re.sub(r"[^a-z]", "", field.value): field for field in SortField}
_SORT_ALIASES.update({"score": SortField.RELEVANCE, "name": SortField.TITLE})


def clamp_limit(requested: Optional[int], default: int, cap: int) -> int:
    """Clamp a requested result count to the caller's cap.

    Missing or non-positive requests use the default. Never raises.

    Args:
        requested: Limit asked for by the caller.
        default: Limit used when none is requested.
        cap: Hard maximum for this caller.

    Returns:
        Effective limit in [1, cap].
    """
    limit = requested if requested is not None and requested > 0 else default
    return max(1, min(limit, cap))


def canonical_genres(values: Optional[List[str]]) -> List[str]:
    """Canonicalize genre names, keeping unknown names verbatim."""
    genres = []
    for value in clean_string_list(values):
        genre = Genre.parse(value)
        name = genre.value if genre else value
        if name not in genres:
            genres.append(name)
    return genres


def parse_sort_field(value: Optional[str]) -> Optional[SortField]:
    """Parse a caller sort field such as ``"imdbRating"`` or ``"rating"``."""
    if not value:
        return None
    return _SORT_ALIASES.get(re.sub(r"[^a-z]", "", value.lower()))


def parse_sort_direction(value: Optional[str]) -> SortDirection:
    """Parse a sort direction. Anything other than ascending means descending."""
    if value and value.strip().lower() in {"asc", "ascending", "1"}:
        return SortDirection.ASC
    return SortDirection.DESC


def build_sort(
    sort_by: Optional[str], sort_order: Optional[str], has_text: bool
) -> List[SortKey]:
    """Build the sort keys, always ending with the id tie-break.

    Args:
        sort_by: Caller sort field, if any.
        sort_order: Caller sort direction, if any.
        has_text: Whether a free-text clause is present (enables relevance).

    Returns:
        Ordered sort keys.
    """
    field = parse_sort_field(sort_by)
    if sort_by and field is None:
        logger.debug(f"Unknown sort field '{sort_by}', using default sort")
    if field == SortField.RELEVANCE and not has_text:
        field = None

    if field is None:
        keys = list(DEFAULT_SORT)
    else:
        keys = [SortKey(field=field, direction=parse_sort_direction(sort_order))]
        if field not in (SortField.POPULARITY, SortField.ID):
            keys.append(DEFAULT_SORT[1])

    if keys[-1].field != SortField.ID:
        keys.append(TIE_BREAK)
    return keys


def compile_criteria(filters: FilterInput, cap: int, default_limit: int) -> CriteriaSet:
    """Compile raw filter input into a canonical criteria set.

    Empty fields are omitted. A single year wins over a year range. Actor and
    director names become case-insensitive substring patterns. The limit is
    silently clamped to ``cap``.

    Args:
        filters: Raw filter input.
        cap: Hard result cap for this caller.
        default_limit: Limit used when the caller gives none.

    Returns:
        Compiled criteria.
    """
    genres = canonical_genres(filters.genres)
    directors = clean_string_list(filters.directors)
    actors = clean_string_list(filters.actors)
    exclude_ids = clean_string_list(filters.exclude_ids)
    text = (filters.search or "").strip() or None
    title = (filters.title or "").strip() or None
    mood = (filters.mood or "").strip()

    year = filters.year
    year_from = filters.year_from if year is None else None
    year_to = filters.year_to if year is None else None

    min_rating = filters.min_rating
    if min_rating is not None and min_rating <= 0:
        min_rating = None

    limit = clamp_limit(filters.limit, default_limit, cap)
    page = filters.page if filters.page and filters.page > 0 else 1

    return CriteriaSet(
        genres=genres or None,
        year=year,
        year_from=year_from,
        year_to=year_to,
        director_patterns=directors or None,
        actor_patterns=actors or None,
        title_pattern=title,
        min_rating=min_rating,
        text=text,
        mood_clause=map_mood(mood).to_clause() if mood else None,
        exclude_ids=exclude_ids or None,
        sort=build_sort(filters.sort_by, filters.sort_order, has_text=text is not None),
        limit=limit,
        skip=(page - 1) * limit,
    )
