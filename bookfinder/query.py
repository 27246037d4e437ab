"""
Query construction for the catalog search service.
"""

from typing import List

from .models import Filter


def _quoted(term: str) -> str:
    return f'"{term}"'


def build_catalog_query(filters: Filter) -> str:
    """
    Build a catalog query string from a filter set.

    Terms are emitted in priority order: ISBN, title, author, publisher,
    topics (OR-ed together), genre, then free-text filters. The same subject
    may appear from both topics and genre. Language, year, rating and page
    constraints have no query operator and are not included.

    The result is not percent-encoded.

    Args:
        filters: Extracted search filters

    Returns:
        Space-joined query string, empty when no field contributes a term
    """
    parts: List[str] = []

    if filters.isbn:
        parts.append(f"isbn:{filters.isbn}")

    if filters.title:
        parts.append(f"intitle:{_quoted(filters.title)}")

    if filters.author:
        parts.append(f"inauthor:{_quoted(filters.author)}")

    if filters.publisher:
        parts.append(f"inpublisher:{_quoted(filters.publisher)}")

    topics = [topic for topic in filters.topics if isinstance(topic, str) and topic]
    # An empty group would be sent as a bare "()" term
    if topics:
        parts.append("(" + " OR ".join(f"subject:{_quoted(topic)}" for topic in topics) + ")")

    if filters.genre:
        parts.append(f"subject:{_quoted(filters.genre)}")

    for term in filters.filters:
        if term and isinstance(term, str):
            parts.append(_quoted(term))

    return " ".join(parts)
