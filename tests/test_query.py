"""
Tests for catalog query construction.
"""

from bookfinder.models import Filter
from bookfinder.query import build_catalog_query


class TestBuildCatalogQuery:
    """Test cases for build_catalog_query."""

    def test_empty_filter_builds_empty_query(self):
        assert build_catalog_query(Filter()) == ""

    def test_isbn_is_always_first(self):
        filters = Filter(
            isbn="9780141439518",
            title="Pride and Prejudice",
            author="Jane Austen",
            topics=["romance"],
            genre="Classic",
        )
        query = build_catalog_query(filters)
        assert query.startswith("isbn:9780141439518 ")

    def test_full_priority_order(self):
        filters = Filter(
            isbn="9780441013593",
            title="Dune",
            author="Frank Herbert",
            publisher="Ace",
            topics=["desert", "politics"],
            genre="Science Fiction",
            filters=["classic", "bestseller"],
        )
        assert build_catalog_query(filters) == (
            'isbn:9780441013593 intitle:"Dune" inauthor:"Frank Herbert" inpublisher:"Ace" '
            '(subject:"desert" OR subject:"politics") subject:"Science Fiction" "classic" "bestseller"'
        )

    def test_topics_are_or_grouped(self):
        query = build_catalog_query(Filter(topics=["dragons", "magic"]))
        assert '(subject:"dragons" OR subject:"magic")' in query

    def test_single_topic_still_parenthesized(self):
        assert build_catalog_query(Filter(topics=["dragons"])) == '(subject:"dragons")'

    def test_blank_topics_emit_no_group(self):
        filters = Filter.model_construct(topics=["", None, 42], filters=[], book_titles=[])
        assert "()" not in build_catalog_query(filters)
        assert build_catalog_query(filters) == ""

    def test_genre_and_topic_may_repeat_subject(self):
        query = build_catalog_query(Filter(topics=["Fantasy"], genre="Fantasy"))
        assert query == '(subject:"Fantasy") subject:"Fantasy"'

    def test_non_query_fields_are_ignored(self):
        filters = Filter(language="English", year="after 2000", min_rating=4.0, min_pages=300)
        assert build_catalog_query(filters) == ""

    def test_query_is_not_percent_encoded(self):
        query = build_catalog_query(Filter(title="War & Peace"))
        assert query == 'intitle:"War & Peace"'
