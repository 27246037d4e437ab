"""
Identity resolution and priority merging for book result lists.
"""

from itertools import chain
from typing import Iterable, List, Sequence

from .models import Book


def identity_key(book: Book) -> str:
    """
    Compute the key used to decide whether two records are the same work.

    The ISBN wins when present; otherwise the lower-cased, trimmed
    "<title>-<author>" pair is used.
    """
    if book.isbn:
        return book.isbn
    return f"{book.title or ''}-{book.author or ''}".lower().strip()


def dedupe(books: Iterable[Book]) -> List[Book]:
    """Drop later duplicates, keeping the first record seen for each key."""
    seen = set()
    unique = []
    for book in books:
        key = identity_key(book)
        if key in seen:
            continue
        seen.add(key)
        unique.append(book)
    return unique


def dedupe_unordered(book_lists: Sequence[Sequence[Book]]) -> List[Book]:
    """
    Deduplicate several result lists with no priority between sources.

    Lists are flattened in the order given, so the first occurrence still wins.
    """
    return dedupe(chain.from_iterable(book_lists))


def merge_results(priority_lists: Sequence[Sequence[Book]], cap: int) -> List[Book]:
    """
    Merge result lists where earlier lists win identity collisions.

    Args:
        priority_lists: Result lists, highest priority first
        cap: Maximum number of books to return

    Returns:
        Deduplicated books, at most ``cap`` of them
    """
    if cap < 0:
        raise ValueError(f"cap must be non-negative, got {cap}")
    return dedupe(chain.from_iterable(priority_lists))[:cap]
