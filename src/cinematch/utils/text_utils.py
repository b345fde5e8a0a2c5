"""Text processing utilities."""

import re
from typing import Iterable, List, Optional


def clean_string_list(values: Optional[Iterable[str]]) -> List[str]:
    """Strip values and drop empty ones, keeping first-seen order.

    Args:
        values: Raw values (may be None).

    Returns:
        Cleaned, de-duplicated list.
    """
    if not values:
        return []

    cleaned: List[str] = []
    seen = set()
    for value in values:
        if value is None:
            continue
        value = str(value).strip()
        if not value or value.lower() in seen:
            continue
        seen.add(value.lower())
        cleaned.append(value)
    return cleaned


def contains_ignore_case(haystack: Optional[str], needle: str) -> bool:
    """Check for a case-insensitive substring match.

    Args:
        haystack: Text to search in.
        needle: Substring to look for.

    Returns:
        True if needle occurs in haystack.
    """
    if not haystack:
        return False
    return needle.lower() in haystack.lower()


def tokenize_search(text: str) -> List[str]:
    """Split a free-text search into lowercase word terms.

    Args:
        text: Search text.

    Returns:
        Unique terms in order of appearance.
    """
    terms = re.findall(r"[\w'-]+", text.lower())
    return clean_string_list(terms)


def format_runtime(minutes: Optional[int]) -> Optional[str]:
    """Format a runtime in minutes as ``"2h 28m"``.

    Args:
        minutes: Runtime in minutes.

    Returns:
        Formatted runtime or None if unknown.
    """
    if not minutes:
        return None
    hours, rest = divmod(minutes, 60)
    return f"{hours}h {rest}m"
