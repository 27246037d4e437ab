"""
DuckDB-backed document storage for the local book collection and wishlists.
"""

import json
import logging
import math
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import duckdb
from pydantic import BaseModel, ValidationError

from .dedupe import identity_key
from .exceptions import Conflict, InvalidInput, NotFound
from .models import Book, LibraryBook, WishlistItem

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "title": "title",
    "author": "author",
    "genre": "genre",
    "createdAt": "created_at",
}
SORT_ORDERS = ("asc", "desc")

# Relevance weight of each field in free-text search
TEXT_WEIGHTS = {
    "title": 6,
    "author": 5,
    "genre": 4,
    "publisher": 2,
    "description": 1,
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _encode(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Cannot store value of type {type(value).__name__}")


class DocumentStore:
    """
    Thread-safe store of JSON documents in one DuckDB table.

    Documents are plain dicts; nested pydantic models and datetimes are
    serialized on write, and timestamps come back as ISO 8601 strings.
    Several stores may share one connection as long as their tables differ.
    """

    def __init__(self, table: str = "documents", db_conn: Optional[duckdb.DuckDBPyConnection] = None,
                 db_path: str = ":memory:"):
        if not table.isidentifier():
            raise ValueError(f"Invalid table name: {table}")
        self.table = table
        # DuckDB connections must not be shared across threads; each store works on its own cursor
        self.db_conn = db_conn.cursor() if db_conn is not None else duckdb.connect(db_path)
        self._lock = threading.RLock()
        self._setup_database()

    def _setup_database(self) -> None:
        """Create the document table and its insertion-order sequence if they don't exist."""
        with self._lock:
            self.db_conn.execute(f"CREATE SEQUENCE IF NOT EXISTS {self.table}_seq")
            self.db_conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {self.table} (
                    doc_id  TEXT,
                    seq     BIGINT,
                    body    TEXT
                )
            """)

    @staticmethod
    def new_id() -> str:
        return uuid.uuid4().hex

    def _load(self, doc_id: str) -> Optional[Dict[str, Any]]:
        row = self.db_conn.execute(f"SELECT body FROM {self.table} WHERE doc_id = ?", (doc_id,)).fetchone()
        return json.loads(row[0]) if row else None

    def create(self, doc_id: str, document: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            if self._load(doc_id) is not None:
                raise Conflict(f"Document {doc_id} already exists")
            now = _now()
            body = json.dumps({**document, "created_at": now, "updated_at": now}, default=_encode)
            self.db_conn.execute(f"""
                INSERT INTO {self.table} (doc_id, seq, body)
                VALUES (?, nextval('{self.table}_seq'), ?)
            """, (doc_id, body))
            return json.loads(body)

    def get(self, doc_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            return self._load(doc_id)

    def find(self, predicate: Optional[Callable[[Dict[str, Any]], bool]] = None) -> List[Dict[str, Any]]:
        """Return matching documents in insertion order."""
        with self._lock:
            rows = self.db_conn.execute(f"SELECT body FROM {self.table} ORDER BY seq").fetchall()
        documents = [json.loads(row[0]) for row in rows]
        return [doc for doc in documents if predicate is None or predicate(doc)]

    def update(self, doc_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            current = self._load(doc_id)
            if current is None:
                raise NotFound(f"Document {doc_id} not found")
            body = json.dumps({**current, **fields, "updated_at": _now()}, default=_encode)
            self.db_conn.execute(f"UPDATE {self.table} SET body = ? WHERE doc_id = ?", (body, doc_id))
            return json.loads(body)

    def delete(self, doc_id: str) -> Dict[str, Any]:
        with self._lock:
            current = self._load(doc_id)
            if current is None:
                raise NotFound(f"Document {doc_id} not found")
            self.db_conn.execute(f"DELETE FROM {self.table} WHERE doc_id = ?", (doc_id,))
            return current

def _by_alias(model, fields: Dict[str, Any]) -> Dict[str, Any]:
    """Rename field-name keys to their aliases so they override a by-alias dump."""
    aliased = {}
    for key, value in fields.items():
        field = model.model_fields.get(key)
        aliased[(field.alias or key) if field else key] = value
    return aliased


def _validate(model, data: Dict[str, Any]):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise InvalidInput(str(e)) from e


class BookCollection:
    """CRUD over the locally stored book collection."""

    def __init__(self, store: Optional[DocumentStore] = None):
        self.store = store if store is not None else DocumentStore("books")
        self._write_lock = threading.Lock()

    def _check_isbn_free(self, isbn: Optional[str], exclude_id: Optional[str] = None) -> None:
        if not isbn:
            return
        clashes = self.store.find(lambda doc: doc.get("isbn") == isbn and doc.get("id") != exclude_id)
        if clashes:
            raise Conflict(f"A book with ISBN {isbn} already exists")

    def _insert(self, book: LibraryBook) -> LibraryBook:
        doc_id = self.store.new_id()
        document = book.model_dump(exclude={"created_at", "updated_at"})
        document["id"] = doc_id
        return LibraryBook.model_validate(self.store.create(doc_id, document))

    def add(self, data: Dict[str, Any]) -> LibraryBook:
        book = _validate(LibraryBook, data)
        with self._write_lock:
            self._check_isbn_free(book.isbn)
            created = self._insert(book)
        logger.info(f"Added book {created.id}: {created.title}")
        return created

    def add_many(self, items: List[Dict[str, Any]]) -> List[LibraryBook]:
        """Insert several books; nothing is inserted if any of them is invalid."""
        if not isinstance(items, list):
            raise InvalidInput("Request body must be an array of books")
        books = [_validate(LibraryBook, item) for item in items]

        isbns = [book.isbn for book in books if book.isbn]
        if len(isbns) != len(set(isbns)):
            raise Conflict("Duplicate ISBNs in request")

        with self._write_lock:
            for isbn in isbns:
                self._check_isbn_free(isbn)
            created = [self._insert(book) for book in books]
        logger.info(f"Added {len(created)} books")
        return created

    def get(self, book_id: str) -> LibraryBook:
        document = self.store.get(book_id)
        if document is None:
            raise NotFound("Book not found")
        return LibraryBook.model_validate(document)

    def all(self) -> List[LibraryBook]:
        return [LibraryBook.model_validate(doc) for doc in self.store.find()]

    def list_books(self, search: Optional[str] = None, genre: Optional[str] = None,
                   sort_by: str = "createdAt", order: str = "desc",
                   page: int = 1, limit: int = 10) -> Dict[str, Any]:
        """
        Search, sort and paginate the collection.

        Args:
            search: Case-insensitive substring matched against title or author
            genre: Case-insensitive substring matched against genre
            sort_by: One of title, author, genre, createdAt
            order: asc or desc
            page: 1-based page number
            limit: Page size

        Returns:
            Dictionary with data, totalBooks, totalPages and currentPage
        """
        if sort_by not in SORT_FIELDS:
            raise InvalidInput(f"Invalid sortBy field. Allowed fields are: {', '.join(SORT_FIELDS)}")
        if order not in SORT_ORDERS:
            raise InvalidInput(f"Invalid order value. Allowed values are: {', '.join(SORT_ORDERS)}")
        if page < 1:
            raise InvalidInput("Page must be a positive number.")
        if limit < 1:
            raise InvalidInput("Limit must be a positive number.")

        def matches(doc: Dict[str, Any]) -> bool:
            if search:
                needle = search.lower()
                if needle not in doc["title"].lower() and needle not in doc["author"].lower():
                    return False
            if genre and genre.lower() not in doc["genre"].lower():
                return False
            return True

        documents = self.store.find(matches)
        documents.sort(key=lambda doc: doc[SORT_FIELDS[sort_by]], reverse=order == "desc")

        total = len(documents)
        start = (page - 1) * limit
        return {
            "data": [LibraryBook.model_validate(doc) for doc in documents[start:start + limit]],
            "totalBooks": total,
            "totalPages": math.ceil(total / limit),
            "currentPage": page,
        }

    def search_text(self, text: Optional[str]) -> List[LibraryBook]:
        """
        Rank books by weighted word matches across their text fields.

        Books matching no word are left out; an empty search returns every book.
        """
        if not text or not text.strip():
            return self.all()

        words = text.lower().split()
        scored = []
        for doc in self.store.find():
            score = 0
            for field, weight in TEXT_WEIGHTS.items():
                value = (doc.get(field) or "").lower()
                score += weight * sum(1 for word in words if word in value)
            if score:
                scored.append((score, doc))

        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [LibraryBook.model_validate(doc) for _, doc in scored]

    def update(self, book_id: str, fields: Dict[str, Any]) -> LibraryBook:
        with self._write_lock:
            current = self.get(book_id)
            merged = {**current.model_dump(by_alias=True), **_by_alias(LibraryBook, fields), "_id": book_id}
            book = _validate(LibraryBook, merged)
            self._check_isbn_free(book.isbn, exclude_id=book_id)
            document = book.model_dump(exclude={"created_at", "updated_at"})
            return LibraryBook.model_validate(self.store.update(book_id, document))

    def delete(self, book_id: str) -> LibraryBook:
        try:
            document = self.store.delete(book_id)
        except NotFound:
            raise NotFound("Book not found")
        logger.info(f"Deleted book {book_id}")
        return LibraryBook.model_validate(document)

    def delete_many(self, ids: List[str]) -> int:
        if not ids or not isinstance(ids, list):
            raise InvalidInput("Please provide an array of valid book IDs to delete.")
        deleted = 0
        for book_id in ids:
            try:
                self.store.delete(book_id)
                deleted += 1
            except NotFound:
                continue
        if deleted == 0:
            raise NotFound("No books found for the provided IDs.")
        return deleted

    def bulk_update(self, updates: List[Dict[str, Any]]) -> Dict[str, int]:
        """
        Apply several partial updates.

        Each entry needs an ``_id`` and a ``fields`` mapping. Unknown ids count
        as unmatched.
        """
        if not isinstance(updates, list) or not updates:
            raise InvalidInput("Provide an array of updates.")
        for update in updates:
            if not update.get("_id"):
                raise InvalidInput("Each update must include a book ID.")

        matched = modified = 0
        for update in updates:
            try:
                current = self.get(update["_id"])
            except NotFound:
                continue
            matched += 1
            updated = self.update(update["_id"], update.get("fields") or {})
            if updated.model_dump(exclude={"updated_at"}) != current.model_dump(exclude={"updated_at"}):
                modified += 1
        return {"matched": matched, "modified": modified}


class WishlistService:
    """Per-user wishlists of catalog books, keyed by book identity."""

    UPDATABLE_FIELDS = ("category", "order")

    def __init__(self, share_base_url: str, store: Optional[DocumentStore] = None):
        self.share_base_url = share_base_url.rstrip("/")
        self.store = store if store is not None else DocumentStore("wishlist")

    @staticmethod
    def _doc_id(user_id: str, item_id: str) -> str:
        return f"{user_id}\x1f{item_id}"

    def get(self, user_id: str) -> List[WishlistItem]:
        documents = self.store.find(lambda doc: doc["user_id"] == user_id)
        documents.sort(key=lambda doc: (doc["order"], doc["created_at"]))
        return [WishlistItem.model_validate(doc) for doc in documents]

    def add(self, user_id: str, book: Book, category: str = "default") -> WishlistItem:
        if not book.title or not book.author:
            raise InvalidInput("Invalid book data")
        item_id = identity_key(book)
        document = {
            "id": item_id,
            "user_id": user_id,
            "book": book,
            "category": category or "default",
            "order": 0,
        }
        try:
            created = self.store.create(self._doc_id(user_id, item_id), document)
        except Conflict:
            raise Conflict("Book already in wishlist")
        logger.info(f"User {user_id} added '{book.title}' to wishlist")
        return WishlistItem.model_validate(created)

    def remove(self, user_id: str, item_id: str) -> WishlistItem:
        try:
            document = self.store.delete(self._doc_id(user_id, item_id))
        except NotFound:
            raise NotFound("Wishlist item not found")
        return WishlistItem.model_validate(document)

    def update(self, user_id: str, item_id: str, fields: Dict[str, Any]) -> WishlistItem:
        unknown = set(fields) - set(self.UPDATABLE_FIELDS)
        if unknown:
            raise InvalidInput(f"Cannot update fields: {', '.join(sorted(unknown))}")
        doc_id = self._doc_id(user_id, item_id)
        current = self.store.get(doc_id)
        if current is None:
            raise NotFound("Wishlist item not found")
        item = _validate(WishlistItem, {**current, **fields})
        return WishlistItem.model_validate(self.store.update(doc_id, {
            "category": item.category,
            "order": item.order,
        }))

    def share(self, user_id: str) -> str:
        return f"{self.share_base_url}/{user_id}"
