"""
Tests for the bookfinder command-line interface.
"""

from unittest.mock import patch

from typer.testing import CliRunner

from bookfinder.cli import app
from bookfinder.models import Book, Filter
from bookfinder.pipelines import BookDiscovery
from bookfinder.settings import Settings

runner = CliRunner()


def _discovery(fake_catalog, fake_extractor, books):
    return BookDiscovery(Settings(), fake_extractor(Filter(genre="Fantasy")), fake_catalog(lambda filters, cap: books))


def test_moods_lists_supported_moods():
    result = runner.invoke(app, ["moods"])
    assert result.exit_code == 0
    assert "happy" in result.output


def test_search_prints_results(fake_catalog, fake_extractor):
    books = [Book(title="Earthsea", author="Ursula K. Le Guin", isbn="9780547773742")]
    with patch("bookfinder.cli._discovery", return_value=_discovery(fake_catalog, fake_extractor, books)):
        result = runner.invoke(app, ["search", "wizard school"])

    assert result.exit_code == 0
    assert "Earthsea" in result.output


def test_recommend_without_matches(fake_catalog, fake_extractor):
    with patch("bookfinder.cli._discovery", return_value=_discovery(fake_catalog, fake_extractor, [])):
        result = runner.invoke(app, ["recommend", "nothing"])

    assert result.exit_code == 0
    assert "No matching books found" in result.output


def test_invalid_mood_exits_with_error(fake_catalog, fake_extractor):
    with patch("bookfinder.cli._discovery", return_value=_discovery(fake_catalog, fake_extractor, [])):
        result = runner.invoke(app, ["mood", "not-a-real-mood"])

    assert result.exit_code == 1
    assert "Invalid mood provided" in result.output


def test_blank_query_exits_with_error(fake_catalog, fake_extractor):
    with patch("bookfinder.cli._discovery", return_value=_discovery(fake_catalog, fake_extractor, [])):
        result = runner.invoke(app, ["search", "   "])

    assert result.exit_code == 1
