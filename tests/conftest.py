"""
Shared fixtures for the Bookfinder test suite.
"""

import sys
import threading
from pathlib import Path
from typing import Callable, List, Optional

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from bookfinder.models import Book, Filter
from bookfinder.settings import Settings


class FakeCatalog:
    """Catalog stand-in that records calls and answers from a responder."""

    def __init__(self, responder: Optional[Callable[[Filter, int], List[Book]]] = None):
        self.responder = responder or (lambda filters, cap: [])
        self.calls = []
        self._lock = threading.Lock()

    def search(self, filters: Filter, cap: int = 40) -> List[Book]:
        with self._lock:
            self.calls.append((filters, cap))
        return list(self.responder(filters, cap))


class FakeExtractor:
    """Extractor stand-in returning a fixed filter."""

    def __init__(self, result: Optional[Filter] = None, error: Optional[Exception] = None):
        self.result = result or Filter()
        self.error = error
        self.queries = []

    def extract(self, user_query: str) -> Filter:
        self.queries.append(user_query)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def settings():
    """Settings with no credentials and no environment lookups."""
    return Settings(catalog_api_key="test-key", catalog_url="https://catalog.test/volumes")


@pytest.fixture
def make_book():
    """Factory for canonical book records."""
    def _make(title="Dune", author="Frank Herbert", isbn=None, **extra):
        return Book(title=title, author=author, isbn=isbn, **extra)
    return _make


@pytest.fixture
def fake_catalog():
    return FakeCatalog


@pytest.fixture
def fake_extractor():
    return FakeExtractor
