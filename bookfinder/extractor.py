"""
Language-model filter extraction for free-text book queries.
"""

import json
import logging
from typing import Any, Optional

import openai
from pydantic import ValidationError

from .models import Filter
from .settings import Settings

logger = logging.getLogger(__name__)


def build_extraction_prompt(user_query: str) -> str:
    """
    Build the instruction sent to the language model for one query.

    Args:
        user_query: The raw user query

    Returns:
        Prompt asking for a single JSON object in the Filter shape
    """
    return f"""You extract structured search filters and relevant book titles from a user's book search query.
Never invent data: use only information the user actually gave, and only suggest real, widely recognized books.
Do not make up titles, authors or any other metadata.

### User Query:
"{user_query}"

### Steps:
1. Correct spelling mistakes in the query first.
2. Identify and normalize book-related attributes:
    - Topics/genres as a list; include inferred work names when applicable.
    - Publication year as "after YYYY", "before YYYY", "in YYYY", or null.
    - Language exactly as mentioned (e.g. "English", "Russian"), otherwise null.
    - Author exactly as mentioned, otherwise null.
    - Minimum rating as a number, otherwise null.
    - Minimum page count as a number, otherwise null.
    - Publisher exactly as mentioned, otherwise null.
    - ISBN as digits, even if written informally.
3. List real, well-known books that match the query:
    - For broad queries such as "science fiction books with high ratings", suggest at least 5 books.
    - When the query names a title, author or publisher, base the suggestions on it.
    - Suggest at most 10 books, each formatted as "<title> by <author>".
    - Prefer well-known, critically acclaimed or top-rated books in the category.

### JSON Output Format:
{{
  "title": "Extracted book title or null",
  "author": "Extracted author name or null",
  "topics": ["topic1", "topic2", "Well-Known Book Name (if applicable)"],
  "genre": "Extracted genre or null",
  "language": "Extracted language or null",
  "year": "after YYYY" | "before YYYY" | "in YYYY" | null,
  "minRating": 4.0 | null,
  "minPages": 300 | null,
  "publisher": "Extracted publisher or null",
  "isbn": "Extracted ISBN or null",
  "filters": ["qualifiers such as 'top-rated', 'bestseller', 'classic'"],
  "bookTitles": ["Dune by Frank Herbert", "Neuromancer by William Gibson"]
}}

Return ONLY the JSON object without any extra text."""


def parse_filter_response(content: str) -> Filter:
    """
    Parse the model's raw text into a Filter.

    Raises:
        ValueError: If the text is not a JSON object
    """
    content = content.strip()
    # Remove code block markers if present
    if content.startswith("```json"):
        content = content[7:]
    if content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]

    data = json.loads(content.strip())
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return Filter.model_validate(data)


class FilterExtractor:
    """Turns free-text queries into structured filters via the language model."""

    def __init__(self, settings: Settings, client: Optional[Any] = None):
        """
        Initialize the extractor.

        Args:
            settings: Application settings
            client: OpenAI-compatible client; built from settings when omitted
        """
        self.model = settings.llm_model
        if client is None and settings.openai_api_key:
            client = openai.OpenAI(api_key=settings.openai_api_key)
        self.client = client

    def extract(self, user_query: str) -> Filter:
        """
        Extract filters and suggested titles from a user query.

        Never raises for model failures: a failed call or an unparseable
        answer yields the all-empty Filter.

        Args:
            user_query: The raw user query

        Returns:
            Extracted filters, or an empty Filter on failure
        """
        if self.client is None:
            logger.error("No language-model client configured, using empty filters")
            return Filter()

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": build_extraction_prompt(user_query)}],
            )
            content = response.choices[0].message.content or ""
            logger.debug(f"LLM raw response: {content}")
            return parse_filter_response(content)
        except (ValueError, ValidationError) as e:
            logger.error(f"Unparseable filter response for '{user_query}': {e}")
        except Exception as e:
            logger.error(f"Error extracting filters from LLM for '{user_query}': {e}")
        return Filter()
