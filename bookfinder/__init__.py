"""
Bookfinder: LLM-assisted book discovery backed by an external catalog.

This package turns free-text or mood-based queries into catalog searches,
merging model-suggested titles with generic results, and keeps a small local
book collection and per-user wishlists.
"""

from .catalog import CatalogClient
from .dedupe import dedupe, dedupe_unordered, identity_key, merge_results
from .exceptions import InvalidInput
from .extractor import FilterExtractor
from .models import Book, Filter
from .pipelines import BookDiscovery, NO_MATCH_RESPONSE
from .query import build_catalog_query
from .settings import Settings, load_settings

__version__ = "1.0.0"
