"""
Global settings and configuration for the Bookfinder application.

Settings are read from the environment once at startup and handed to the
components that need them.
"""

import logging
import os
from typing import Mapping, Optional, Tuple

from pydantic import BaseModel, Field

from .moods import MOOD_GENRES

logger = logging.getLogger(__name__)

DEFAULT_LLM_MODEL = "gpt-4"
GOOGLE_BOOKS_API_URL = "https://www.googleapis.com/books/v1/volumes"
DEFAULT_DATABASE_PATH = "bookfinder.duckdb"

# Hard ceiling imposed by the catalog service
MAX_CATALOG_RESULTS = 40

# Result caps per search kind
TITLE_LOOKUP_RESULTS = 1
GENRE_SEARCH_RESULTS = 10
GENERIC_SEARCH_RESULTS = 40


class Settings(BaseModel):
    """Immutable runtime configuration."""

    openai_api_key: Optional[str] = Field(default=None, description="Key for the language-model service")
    llm_model: str = Field(default=DEFAULT_LLM_MODEL, description="Model used for filter extraction")
    catalog_api_key: Optional[str] = Field(default=None, description="Google Books API key")
    catalog_url: str = Field(default=GOOGLE_BOOKS_API_URL, description="Catalog volumes endpoint")
    request_timeout: float = Field(default=20.0, gt=0, description="Catalog request timeout in seconds")
    max_workers: int = Field(default=10, ge=1, description="Upper bound on concurrent catalog lookups")
    share_base_url: str = Field(default="https://example.com/shared-wishlist")
    database_path: str = Field(default=DEFAULT_DATABASE_PATH, description="DuckDB file for the collection and wishlists")
    mood_genres: Mapping[str, Tuple[str, ...]] = Field(default_factory=lambda: MOOD_GENRES)

    class Config:
        """Pydantic configuration."""
        frozen = True


def load_settings() -> Settings:
    """
    Build settings from environment variables.

    Missing API keys are reported but do not stop the application: the
    extractor and catalog client degrade to empty results without them.

    Returns:
        A frozen Settings instance
    """
    openai_api_key = os.getenv("OPENAI_API_KEY")
    if not openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; filter extraction will return empty filters")

    catalog_api_key = os.getenv("GOOGLE_BOOKS_API_KEY")
    if not catalog_api_key:
        logger.warning("GOOGLE_BOOKS_API_KEY is not set; catalog requests will be unauthenticated")

    return Settings(
        openai_api_key=openai_api_key,
        llm_model=os.getenv("BOOKFINDER_LLM_MODEL", DEFAULT_LLM_MODEL),
        catalog_api_key=catalog_api_key,
        catalog_url=os.getenv("BOOKFINDER_CATALOG_URL", GOOGLE_BOOKS_API_URL),
        request_timeout=float(os.getenv("BOOKFINDER_REQUEST_TIMEOUT", "20")),
        max_workers=int(os.getenv("BOOKFINDER_MAX_WORKERS", "10")),
        share_base_url=os.getenv("BOOKFINDER_SHARE_BASE_URL", "https://example.com/shared-wishlist"),
        database_path=os.getenv("BOOKFINDER_DB_PATH", DEFAULT_DATABASE_PATH),
    )
