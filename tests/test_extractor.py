"""
Tests for language-model filter extraction.
"""

import json
import unittest.mock

import pytest

from bookfinder.extractor import FilterExtractor, build_extraction_prompt, parse_filter_response
from bookfinder.models import Filter
from bookfinder.settings import Settings

LLM_FILTERS = {
    "title": None,
    "author": None,
    "topics": ["space opera"],
    "genre": "Science Fiction",
    "language": "English",
    "year": "after 1960",
    "minRating": 4.0,
    "minPages": None,
    "publisher": None,
    "isbn": None,
    "filters": ["top-rated"],
    "bookTitles": ["Dune by Frank Herbert", "Hyperion by Dan Simmons"],
}


def _client(content=None, error=None):
    client = unittest.mock.MagicMock()
    if error is not None:
        client.chat.completions.create.side_effect = error
    else:
        response = unittest.mock.MagicMock()
        response.choices = [
            unittest.mock.MagicMock(message=unittest.mock.MagicMock(content=content))
        ]
        client.chat.completions.create.return_value = response
    return client


class TestFilterModel:
    """Test cases for Filter validation."""

    def test_camel_case_keys(self):
        filters = Filter.model_validate(LLM_FILTERS)
        assert filters.min_rating == 4.0
        assert filters.book_titles == ["Dune by Frank Herbert", "Hyperion by Dan Simmons"]

    def test_null_lists_become_empty(self):
        filters = Filter.model_validate({"topics": None, "filters": None, "bookTitles": None})
        assert filters.topics == []
        assert filters.filters == []
        assert filters.book_titles == []

    def test_non_text_entries_dropped(self):
        filters = Filter.model_validate({"topics": ["magic", 3, "", None, "  "]})
        assert filters.topics == ["magic"]

    def test_numeric_isbn_becomes_text(self):
        assert Filter.model_validate({"isbn": 9780441013593}).isbn == "9780441013593"

    def test_extra_keys_ignored(self):
        assert Filter.model_validate({"mood": "happy", "genre": "Comedy"}).genre == "Comedy"

    def test_is_empty(self):
        assert Filter().is_empty()
        assert not Filter(genre="Noir").is_empty()

    def test_list_valued_text_fields_are_joined(self):
        filters = Filter.model_validate({"genre": ["Fantasy", "Science Fiction"], "author": [3, None]})
        assert filters.genre == "Fantasy, Science Fiction"
        assert filters.author is None

    @pytest.mark.parametrize("payload", [
        {"minPages": "300+", "minRating": "high"},
        {"minPages": -5, "minRating": -1},
        {"minPages": True, "minRating": {"value": 4}},
    ])
    def test_unusable_minimums_are_dropped(self, payload):
        filters = Filter.model_validate({**payload, "genre": "Noir"})
        assert filters.min_pages is None
        assert filters.min_rating is None
        assert filters.genre == "Noir"

    def test_numeric_text_minimums_are_parsed(self):
        filters = Filter.model_validate({"minPages": "300", "minRating": "4.5"})
        assert filters.min_pages == 300
        assert filters.min_rating == 4.5

    def test_odd_list_fields_become_empty(self):
        assert Filter.model_validate({"topics": {"a": 1}, "bookTitles": 7}).book_titles == []


class TestParseFilterResponse:
    """Test cases for parse_filter_response."""

    def test_plain_json(self):
        assert parse_filter_response(json.dumps(LLM_FILTERS)).genre == "Science Fiction"

    def test_code_fenced_json(self):
        content = "```json\n" + json.dumps(LLM_FILTERS) + "\n```"
        assert parse_filter_response(content).topics == ["space opera"]

    @pytest.mark.parametrize("content", ["Sure! Here are some books.", "[1, 2, 3]", '"Dune"'])
    def test_rejects_non_filter_content(self, content):
        with pytest.raises(ValueError):
            parse_filter_response(content)


class TestFilterExtractor:
    """Test cases for FilterExtractor.extract."""

    def test_extracts_filters(self):
        client = _client(json.dumps(LLM_FILTERS))
        extractor = FilterExtractor(Settings(llm_model="gpt-4o-mini"), client=client)

        filters = extractor.extract("space opera books with rating above 4")

        assert filters.topics == ["space opera"]
        assert filters.min_rating == 4.0
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert len(kwargs["messages"]) == 1
        assert kwargs["messages"][0]["role"] == "user"
        assert "space opera books with rating above 4" in kwargs["messages"][0]["content"]

    @pytest.mark.parametrize("payload", [
        {"genre": ["Fantasy", "Science Fiction"], "topics": ["dragons"], "bookTitles": ["Dune by Frank Herbert"]},
        {"minPages": "300+", "bookTitles": ["Dune by Frank Herbert"]},
    ])
    def test_ill_typed_field_keeps_suggested_titles(self, payload):
        extractor = FilterExtractor(Settings(), client=_client(json.dumps(payload)))

        filters = extractor.extract("dragons in space")

        assert filters.book_titles == ["Dune by Frank Herbert"]
        assert not filters.is_empty()

    def test_non_json_answer_returns_empty_filter(self):
        extractor = FilterExtractor(Settings(), client=_client("I'd recommend Dune!"))
        filters = extractor.extract("something good")
        assert filters == Filter()
        assert filters.is_empty()

    def test_transport_failure_returns_empty_filter(self):
        extractor = FilterExtractor(Settings(), client=_client(error=RuntimeError("connection reset")))
        assert extractor.extract("something good") == Filter()

    def test_missing_content_returns_empty_filter(self):
        extractor = FilterExtractor(Settings(), client=_client(None))
        assert extractor.extract("something good") == Filter()

    def test_no_client_returns_empty_filter(self):
        extractor = FilterExtractor(Settings(openai_api_key=None))
        assert extractor.client is None
        assert extractor.extract("something good") == Filter()


class TestExtractionPrompt:
    """Test cases for the instruction template."""

    def test_embeds_query(self):
        assert '"cozy mysteries set in Japan"' in build_extraction_prompt("cozy mysteries set in Japan")

    def test_forbids_invented_books(self):
        prompt = build_extraction_prompt("anything")
        assert "Do not make up titles" in prompt
        assert "at most 10 books" in prompt

    def test_lists_every_filter_key(self):
        prompt = build_extraction_prompt("anything")
        for key in LLM_FILTERS:
            assert f'"{key}"' in prompt
