"""
Search pipelines combining filter extraction, catalog lookups and merging.

Three entry points are exposed through BookDiscovery:

- direct_search: extract filters, run one catalog search, return it as is.
- recommend: additionally look up every title the model suggested and rank
  those hits ahead of the generic search results.
- by_mood: search every genre mapped to a mood and merge the results.
"""

import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .catalog import CatalogClient
from .dedupe import dedupe_unordered, merge_results
from .exceptions import InvalidInput
from .extractor import FilterExtractor
from .models import Book, Filter
from .settings import GENERIC_SEARCH_RESULTS, GENRE_SEARCH_RESULTS, TITLE_LOOKUP_RESULTS, Settings
from .utils import fan_out

logger = logging.getLogger(__name__)

NO_MATCH_RESPONSE = {"error": "No matching books found. Try refining your search."}

TITLE_BY_AUTHOR = re.compile(r"(.+?)\s+by\s+(.+)", re.IGNORECASE)

Recommendation = Union[List[Book], Dict[str, str]]


def require_text(value: Optional[str], name: str) -> str:
    """Reject a missing or blank required input."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(f"{name.capitalize()} is required")
    return value


def title_lookup_filter(filters: Filter, book_title: str) -> Filter:
    """
    Derive the filter for looking up one suggested title.

    "<title> by <author>" sets both title and author; anything else sets only
    the title. All other extracted fields are kept.
    """
    match = TITLE_BY_AUTHOR.match(book_title)
    if match:
        return filters.model_copy(update={
            "title": match.group(1).strip(),
            "author": match.group(2).strip(),
        })
    return filters.model_copy(update={"title": book_title.strip()})


def extract_filters(extractor: FilterExtractor, user_query: str) -> Filter:
    """Run filter extraction, warning when the model gave nothing usable."""
    filters = extractor.extract(user_query)
    if filters.is_empty():
        logger.warning(f"No filters extracted for \"{user_query}\", catalog searches will be skipped")
    return filters


class DirectSearchPipeline:
    """Extract filters and return the catalog's answer verbatim."""

    def __init__(self, extractor: FilterExtractor, catalog: CatalogClient):
        self.extractor = extractor
        self.catalog = catalog

    def direct_search(self, user_query: str) -> List[Book]:
        require_text(user_query, "query")
        filters = extract_filters(self.extractor, user_query)
        logger.info(f"Extracted filters for direct search: {filters.model_dump(exclude_defaults=True)}")
        return self.catalog.search(filters, GENERIC_SEARCH_RESULTS)


class RecommendationPipeline:
    """Rank catalog hits for model-suggested titles ahead of a generic search."""

    def __init__(self, extractor: FilterExtractor, catalog: CatalogClient, max_workers: Optional[int] = None):
        self.extractor = extractor
        self.catalog = catalog
        self.max_workers = max_workers

    def lookup_titles(self, filters: Filter) -> List[Book]:
        """
        Resolve each suggested title with its own single-result search.

        Lookups run concurrently; hits keep the order of ``filters.book_titles``
        and titles with no hit are skipped.
        """
        lookups = [title_lookup_filter(filters, title) for title in filters.book_titles]
        results = fan_out(
            lambda lookup: self.catalog.search(lookup, TITLE_LOOKUP_RESULTS),
            lookups,
            self.max_workers,
        )
        return [books[0] for books in results if books]

    def recommend(self, user_query: str) -> Recommendation:
        """
        Recommend books for a free-text query.

        Args:
            user_query: The raw user query

        Returns:
            Merged list of unique books, or NO_MATCH_RESPONSE when nothing matched
        """
        require_text(user_query, "query")
        logger.info(f"Processing user query for recommendations: \"{user_query}\"")

        filters = extract_filters(self.extractor, user_query)
        logger.info(f"Extracted filters and book titles: {filters.model_dump(exclude_defaults=True)}")

        prioritized = self.lookup_titles(filters)
        generic = self.catalog.search(filters, GENERIC_SEARCH_RESULTS)
        combined = merge_results([prioritized, generic], GENERIC_SEARCH_RESULTS)

        if not combined:
            logger.info("No matching book found, returning fallback response")
            return dict(NO_MATCH_RESPONSE)
        return combined


class MoodPipeline:
    """Search every genre mapped to a mood and merge the results."""

    def __init__(self, catalog: CatalogClient, mood_genres: Mapping[str, Sequence[str]],
                 max_workers: Optional[int] = None):
        self.catalog = catalog
        self.mood_genres = mood_genres
        self.max_workers = max_workers

    def genres_for(self, mood: Optional[str]) -> Sequence[str]:
        key = mood.strip().lower() if isinstance(mood, str) else ""
        if not key or key not in self.mood_genres:
            raise InvalidInput("Invalid mood provided")
        return self.mood_genres[key]

    def by_mood(self, mood: str) -> List[Book]:
        """
        Recommend books for a mood keyword.

        Args:
            mood: One of the keys of the mood table (case-insensitive)

        Returns:
            Unique books across all genres, earlier genres first

        Raises:
            InvalidInput: If the mood is empty or unknown. Surrounding whitespace
                and letter case are ignored, so " Happy " selects "happy".
        """
        genres = self.genres_for(mood)
        results = fan_out(
            lambda genre: self.catalog.search(Filter(genre=genre), GENRE_SEARCH_RESULTS),
            genres,
            self.max_workers,
        )
        return dedupe_unordered(results)


class BookDiscovery:
    """Entry points for direct search, recommendations and mood search."""

    def __init__(self, settings: Settings, extractor: FilterExtractor, catalog: CatalogClient):
        self.settings = settings
        self.direct = DirectSearchPipeline(extractor, catalog)
        self.recommendations = RecommendationPipeline(extractor, catalog, settings.max_workers)
        self.moods = MoodPipeline(catalog, settings.mood_genres, settings.max_workers)

    @classmethod
    def from_settings(cls, settings: Settings, llm_client: Optional[Any] = None) -> "BookDiscovery":
        return cls(settings, FilterExtractor(settings, client=llm_client), CatalogClient(settings))

    def direct_search(self, user_query: str) -> List[Book]:
        return self.direct.direct_search(user_query)

    def recommend(self, user_query: str) -> Recommendation:
        return self.recommendations.recommend(user_query)

    def by_mood(self, mood: str) -> List[Book]:
        return self.moods.by_mood(mood)

    def available_moods(self) -> List[str]:
        return sorted(self.settings.mood_genres)
