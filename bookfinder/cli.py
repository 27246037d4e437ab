"""
Command-line interface for searching the catalog from a terminal.
"""

import logging
import sys
from typing import List

import typer
from rich.console import Console
from rich.table import Table

from .exceptions import InvalidInput
from .models import Book
from .pipelines import BookDiscovery
from .settings import load_settings

app = typer.Typer(
    name="bookfinder",
    help="Discover books from free-text queries or moods",
    add_completion=False
)

console = Console()


def _discovery() -> BookDiscovery:
    return BookDiscovery.from_settings(load_settings())


def _print_books(books: List[Book], title: str) -> None:
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("Title")
    table.add_column("Author")
    table.add_column("Published")
    table.add_column("Rating", justify="right")
    table.add_column("ISBN")

    for i, book in enumerate(books, 1):
        table.add_row(
            str(i),
            book.title or "-",
            book.author or "-",
            book.published_date or "-",
            f"{book.average_rating:.1f}" if book.average_rating is not None else "-",
            book.isbn or "-",
        )
    console.print(table)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging")) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


@app.command()
def search(query: str = typer.Argument(..., help="Free-text search query")) -> None:
    """Run a direct catalog search for a query."""
    try:
        books = _discovery().direct_search(query)
    except InvalidInput as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)
    _print_books(books, f"Results for \"{query}\"")


@app.command()
def recommend(query: str = typer.Argument(..., help="What you feel like reading")) -> None:
    """Recommend books, ranking model-suggested titles first."""
    try:
        result = _discovery().recommend(query)
    except InvalidInput as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(1)

    if isinstance(result, dict):
        console.print(f"[yellow]{result['error']}[/]")
        return
    _print_books(result, f"Recommendations for \"{query}\"")


@app.command()
def mood(mood: str = typer.Argument(..., help="Mood keyword, e.g. happy")) -> None:
    """Recommend books matching a mood."""
    try:
        books = _discovery().by_mood(mood)
    except InvalidInput as e:
        console.print(f"[red]Error:[/] {e}")
        console.print(f"Available moods: {', '.join(sorted(load_settings().mood_genres))}")
        sys.exit(1)
    _print_books(books, f"Books for a {mood} mood")


@app.command()
def moods() -> None:
    """List the supported moods and their genres."""
    settings = load_settings()
    table = Table(title="Moods")
    table.add_column("Mood")
    table.add_column("Genres")
    for name in sorted(settings.mood_genres):
        table.add_row(name, ", ".join(settings.mood_genres[name]))
    console.print(table)


if __name__ == "__main__":
    app()
