"""
Client for the external book catalog (Google Books volumes search).
"""

import logging
from typing import Any, List, Optional

import requests
from pydantic import BaseModel, Field, ValidationError

from .models import Book, Filter
from .query import build_catalog_query
from .settings import MAX_CATALOG_RESULTS, Settings

logger = logging.getLogger(__name__)


class IndustryIdentifier(BaseModel):
    type: Optional[str] = None
    identifier: Optional[str] = None


class ImageLinks(BaseModel):
    thumbnail: Optional[str] = None


class VolumeInfo(BaseModel):
    """The subset of a catalog volume record that Bookfinder reads."""

    title: Optional[str] = None
    authors: Optional[List[str]] = None
    description: Optional[str] = None
    language: Optional[str] = None
    page_count: Optional[int] = Field(default=None, alias="pageCount")
    publisher: Optional[str] = None
    published_date: Optional[str] = Field(default=None, alias="publishedDate")
    categories: Optional[List[str]] = None
    average_rating: Optional[float] = Field(default=None, alias="averageRating")
    ratings_count: Optional[int] = Field(default=None, alias="ratingsCount")
    image_links: Optional[ImageLinks] = Field(default=None, alias="imageLinks")
    preview_link: Optional[str] = Field(default=None, alias="previewLink")
    industry_identifiers: Optional[List[IndustryIdentifier]] = Field(default=None, alias="industryIdentifiers")

    def isbn13(self) -> Optional[str]:
        for identifier in self.industry_identifiers or []:
            if identifier.type == "ISBN_13":
                return identifier.identifier or None
        return None


class Volume(BaseModel):
    volume_info: VolumeInfo = Field(default_factory=VolumeInfo, alias="volumeInfo")


class VolumesResponse(BaseModel):
    """A page of volumes; items are validated one by one in CatalogClient.search."""

    items: Optional[List[Any]] = None


def volume_to_book(volume: VolumeInfo) -> Book:
    """
    Map a catalog volume to the canonical Book shape.

    Absent or empty source values become None rather than placeholders.
    """
    return Book(
        title=volume.title or None,
        author=", ".join(volume.authors) if volume.authors else None,
        description=volume.description or None,
        language=volume.language or None,
        page_count=volume.page_count or None,
        publisher=volume.publisher or None,
        published_date=volume.published_date or None,
        categories=volume.categories or [],
        average_rating=volume.average_rating or None,
        ratings_count=volume.ratings_count or None,
        thumbnail=volume.image_links.thumbnail if volume.image_links and volume.image_links.thumbnail else None,
        preview_link=volume.preview_link or None,
        isbn=volume.isbn13(),
    )


class CatalogClient:
    """Issues volume searches against the catalog service."""

    def __init__(self, settings: Settings):
        """Initialize the client with endpoint, credentials and timeout."""
        self.url = settings.catalog_url
        self.api_key = settings.catalog_api_key
        self.timeout = settings.request_timeout

    def search(self, filters: Filter, cap: int = MAX_CATALOG_RESULTS) -> List[Book]:
        """
        Search the catalog for books matching a filter set.

        Remote failures are logged and reported as an empty result; only
        invalid arguments raise.

        Args:
            filters: Search filters to turn into a catalog query
            cap: Maximum number of results, at most MAX_CATALOG_RESULTS

        Returns:
            Books in catalog relevance order
        """
        if not isinstance(filters, Filter):
            raise TypeError(f"filters must be a Filter, got {type(filters).__name__}")
        if not 1 <= cap <= MAX_CATALOG_RESULTS:
            raise ValueError(f"cap must be between 1 and {MAX_CATALOG_RESULTS}, got {cap}")

        query = build_catalog_query(filters)
        if not query:
            logger.warning("Empty catalog query, skipping request")
            return []

        params = {
            "q": query,
            "key": self.api_key,
            "orderBy": "relevance",
            "maxResults": cap,
        }
        logger.info(f"Catalog search: {query} (maxResults={cap})")

        try:
            response = requests.get(self.url, params=params, timeout=self.timeout)
            response.raise_for_status()
            payload = VolumesResponse.model_validate(response.json())
        except requests.RequestException as e:
            logger.error(f"Error fetching data from catalog: {e}")
            return []
        except (ValueError, ValidationError) as e:
            logger.error(f"Unreadable catalog response for '{query}': {e}")
            return []

        books = []
        for position, item in enumerate(payload.items or []):
            try:
                volume = Volume.model_validate(item)
            except ValidationError as e:
                logger.warning(f"Skipping malformed catalog volume {position} for '{query}': {e}")
                continue
            books.append(volume_to_book(volume.volume_info))
        logger.debug(f"Catalog returned {len(books)} books for '{query}'")
        return books
