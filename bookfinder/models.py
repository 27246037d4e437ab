"""
Pydantic models for the Bookfinder application.
"""

import math
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator


class Filter(BaseModel):
    """Structured search criteria extracted from a free-text query."""

    title: Optional[str] = Field(default=None, description="Book title mentioned in the query")
    author: Optional[str] = Field(default=None, description="Author mentioned in the query")
    topics: List[str] = Field(default_factory=list, description="Candidate subjects, may include work names")
    genre: Optional[str] = Field(default=None, description="Genre mentioned in the query")
    language: Optional[str] = Field(default=None, description="Language mentioned in the query")
    year: Optional[str] = Field(default=None, description='"after YYYY", "before YYYY" or "in YYYY"')
    min_rating: Optional[float] = Field(default=None, ge=0, alias="minRating")
    min_pages: Optional[int] = Field(default=None, ge=0, alias="minPages")
    publisher: Optional[str] = Field(default=None, description="Publisher mentioned in the query")
    isbn: Optional[str] = Field(default=None, description="ISBN mentioned in the query")
    filters: List[str] = Field(default_factory=list, description="Free-text qualifiers such as 'bestseller'")
    book_titles: List[str] = Field(default_factory=list, alias="bookTitles",
                                   description='Suggested titles, optionally "<title> by <author>"')

    class Config:
        """Pydantic configuration."""
        populate_by_name = True
        frozen = True
        extra = "ignore"

    @field_validator("topics", "filters", "book_titles", mode="before")
    @classmethod
    def _keep_text_entries(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            return []
        return [item for item in value if isinstance(item, str) and item.strip()]

    @field_validator("title", "author", "genre", "language", "year", "publisher", "isbn", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Optional[str]:
        # Models sometimes emit ISBNs and years as bare numbers, or several genres as a list
        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return str(int(value)) if math.isfinite(value) else None
        if isinstance(value, (list, tuple)):
            parts = [item.strip() for item in value if isinstance(item, str) and item.strip()]
            return ", ".join(parts) or None
        return None

    @field_validator("min_rating", "min_pages", mode="before")
    @classmethod
    def _coerce_minimum(cls, value: Any, info: ValidationInfo) -> Any:
        # Unusable minimums such as "300+" are dropped instead of failing the whole filter
        if isinstance(value, bool):
            return None
        if isinstance(value, str):
            try:
                value = float(value.strip())
            except ValueError:
                return None
        if not isinstance(value, (int, float)) or not math.isfinite(value) or value < 0:
            return None
        return int(value) if info.field_name == "min_pages" else value

    def is_empty(self) -> bool:
        """Check whether every field is null or empty."""
        return not any(getattr(self, name) for name in type(self).model_fields)


class Book(BaseModel):
    """Canonical book record built from a catalog volume."""

    title: Optional[str] = None
    author: Optional[str] = Field(default=None, description="Comma-joined author names")
    description: Optional[str] = None
    language: Optional[str] = None
    page_count: Optional[int] = Field(default=None, alias="pageCount")
    publisher: Optional[str] = None
    published_date: Optional[str] = Field(default=None, alias="publishedDate")
    categories: List[str] = Field(default_factory=list)
    average_rating: Optional[float] = Field(default=None, alias="averageRating")
    ratings_count: Optional[int] = Field(default=None, alias="ratingsCount")
    thumbnail: Optional[str] = None
    preview_link: Optional[str] = Field(default=None, alias="previewLink")
    isbn: Optional[str] = None

    class Config:
        """Pydantic configuration."""
        populate_by_name = True
        frozen = True
        extra = "ignore"


class LibraryBook(BaseModel):
    """A book stored in the local collection."""

    id: Optional[str] = Field(default=None, alias="_id")
    title: str = Field(min_length=1, description="Please add a title")
    author: str = Field(min_length=1, description="Please add an author")
    description: str = Field(min_length=1, description="Please add a description")
    genre: str = Field(min_length=1, description="Please specify a genre")
    publication_year: Optional[int] = Field(default=None, alias="publicationYear")
    rating: float = Field(default=0, ge=0)
    users_rated: int = Field(default=0, ge=0, alias="usersRated")
    page_count: Optional[int] = Field(default=None, ge=0, alias="pageCount")
    language: str = "English"
    publisher: Optional[str] = None
    cover_image: str = Field(default="", alias="coverImage")
    isbn: Optional[str] = Field(default=None, pattern=r"^\d{13}$", description="ISBN must be a 13-digit number")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True
        extra = "forbid"
        validate_assignment = True


class WishlistItem(BaseModel):
    """A catalog book saved to a user's wishlist."""

    id: str = Field(alias="_id", description="Identity key of the saved book")
    user_id: str = Field(alias="userId")
    book: Book
    category: str = "default"
    order: int = 0
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True
        validate_assignment = True
