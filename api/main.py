"""
FastAPI backend for the Bookfinder application.
"""

import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional

import duckdb
from fastapi import Body, Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from bookfinder.exceptions import Conflict, InvalidInput, NotFound
from bookfinder.models import Book, WishlistItem
from bookfinder.pipelines import BookDiscovery
from bookfinder.settings import Settings, load_settings
from bookfinder.store import BookCollection, DocumentStore, WishlistService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="Bookfinder API", description="LLM-assisted book discovery")

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify actual origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class QueryRequest(BaseModel):
    """Request model for free-text searches."""
    query: Optional[str] = None


class WishlistAddRequest(BaseModel):
    """Request model for saving a catalog book."""
    book: Optional[Book] = None
    category: str = "default"


class DeleteBooksRequest(BaseModel):
    """Request model for mass deletion."""
    ids: Optional[List[str]] = None


class HealthResponse(BaseModel):
    """Response model for health check."""
    status: str


@lru_cache()
def get_settings() -> Settings:
    return load_settings()


@lru_cache()
def get_discovery() -> BookDiscovery:
    return BookDiscovery.from_settings(get_settings())


@lru_cache()
def get_database() -> duckdb.DuckDBPyConnection:
    path = get_settings().database_path
    logger.info(f"Opening collection database at {path}")
    return duckdb.connect(path)


@lru_cache()
def get_collection() -> BookCollection:
    return BookCollection(DocumentStore("books", db_conn=get_database()))


@lru_cache()
def get_wishlist() -> WishlistService:
    return WishlistService(get_settings().share_base_url, DocumentStore("wishlist", db_conn=get_database()))


def current_user(x_user_id: Optional[str] = Header(default=None)) -> str:
    """Identity supplied by the authentication layer in front of the API."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Not authorized")
    return x_user_id


def require_admin(user: str = Depends(current_user), x_user_role: Optional[str] = Header(default=None)) -> str:
    if not x_user_role:
        raise HTTPException(status_code=403, detail="Unauthorized: No role assigned")
    if x_user_role != "admin":
        raise HTTPException(status_code=403, detail="Forbidden: Access denied")
    return user


def _books(books: List[Book]) -> List[Dict[str, Any]]:
    return [book.model_dump(by_alias=True, mode="json") for book in books]


def _documents(items: List[Any]) -> List[Dict[str, Any]]:
    return [item.model_dump(by_alias=True, mode="json") for item in items]


@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput) -> JSONResponse:
    return JSONResponse(status_code=400, content={"message": str(exc)})


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
    return JSONResponse(status_code=404, content={"message": str(exc)})


@app.exception_handler(Conflict)
async def conflict_handler(request: Request, exc: Conflict) -> JSONResponse:
    return JSONResponse(status_code=409, content={"message": str(exc)})


def _failure(stage: str, value: Optional[str]) -> JSONResponse:
    logger.exception(f"Error in {stage} for input '{value}'")
    return JSONResponse(status_code=500, content={"message": "Failed to process query"})


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="ok")


@app.get("/")
@app.head("/")
async def root():
    """Root endpoint for platform health checks."""
    return {"message": "Bookfinder API is running", "status": "ok"}


# --- Discovery -------------------------------------------------------------

@app.post("/api/llm/search")
def direct_search(request: QueryRequest, discovery: BookDiscovery = Depends(get_discovery)):
    """
    Natural-language search returning the catalog results for the extracted filters.

    Args:
        request: Body containing the user query

    Returns:
        Dictionary with the list of books under "results"
    """
    try:
        books = discovery.direct_search(request.query)
    except InvalidInput:
        raise
    except Exception:
        return _failure("directSearch", request.query)
    return {"results": _books(books)}


@app.post("/api/llm/recommend")
def recommendation_search(request: QueryRequest, discovery: BookDiscovery = Depends(get_discovery)):
    """
    Recommendations ranking the model's suggested titles ahead of a generic search.

    Args:
        request: Body containing the user query

    Returns:
        Dictionary with the books, or an error object, under "results"
    """
    try:
        result = discovery.recommend(request.query)
    except InvalidInput:
        raise
    except Exception:
        return _failure("recommendationSearch", request.query)
    if isinstance(result, dict):
        return {"results": result}
    return {"results": _books(result)}


@app.get("/api/mood")
def list_moods(discovery: BookDiscovery = Depends(get_discovery)):
    return {"results": discovery.available_moods()}


@app.get("/api/mood/{mood}")
def mood_based_recommendation(mood: str, discovery: BookDiscovery = Depends(get_discovery)):
    """Book recommendations for a mood keyword."""
    try:
        books = discovery.by_mood(mood)
    except InvalidInput:
        raise
    except Exception:
        return _failure("moodBasedRecommendation", mood)
    return {"results": _books(books)}


# --- Local collection ------------------------------------------------------

@app.post("/api/books", status_code=201)
def add_book(data: Dict[str, Any] = Body(...), user: str = Depends(current_user),
             collection: BookCollection = Depends(get_collection)):
    return collection.add(data).model_dump(by_alias=True, mode="json")


@app.post("/api/books/bulk", status_code=201)
def add_books(data: Any = Body(...), user: str = Depends(require_admin),
              collection: BookCollection = Depends(get_collection)):
    books = collection.add_many(data)
    return {"message": "Books added successfully", "data": _documents(books)}


@app.get("/api/books/getAllbooks")
def get_all_books(user: str = Depends(current_user), collection: BookCollection = Depends(get_collection)):
    return _documents(collection.all())


@app.get("/api/books/search")
def search_books(search: Optional[str] = None, user: str = Depends(current_user),
                 collection: BookCollection = Depends(get_collection)):
    return {"success": True, "data": _documents(collection.search_text(search))}


@app.get("/api/books")
def get_books(search: Optional[str] = None, genre: Optional[str] = None,
              sort_by: str = Query(default="createdAt", alias="sortBy"),
              order: str = "desc", page: int = 1, limit: int = 10,
              user: str = Depends(current_user), collection: BookCollection = Depends(get_collection)):
    listing = collection.list_books(search, genre, sort_by, order, page, limit)
    listing["data"] = _documents(listing["data"])
    return {"success": True, **listing}


@app.put("/api/books/bulkUpdate")
def bulk_update_books(updates: Any = Body(...), user: str = Depends(require_admin),
                      collection: BookCollection = Depends(get_collection)):
    result = collection.bulk_update(updates)
    return {"message": "Bulk update completed.", **result}


@app.put("/api/books/{book_id}")
def update_book(book_id: str, fields: Dict[str, Any] = Body(...), user: str = Depends(current_user),
                collection: BookCollection = Depends(get_collection)):
    return collection.update(book_id, fields).model_dump(by_alias=True, mode="json")


@app.delete("/api/books/{book_id}")
def delete_book(book_id: str, user: str = Depends(current_user),
                collection: BookCollection = Depends(get_collection)):
    book = collection.delete(book_id)
    return {"message": "Book deleted successfully", "book": book.model_dump(by_alias=True, mode="json")}


@app.delete("/api/books")
def delete_books(request: DeleteBooksRequest, user: str = Depends(require_admin),
                 collection: BookCollection = Depends(get_collection)):
    deleted = collection.delete_many(request.ids)
    return {"success": True, "message": f"{deleted} book(s) deleted successfully."}


# --- Wishlist --------------------------------------------------------------

@app.get("/api/wishlist")
def get_wishlist_items(user: str = Depends(current_user), wishlist: WishlistService = Depends(get_wishlist)):
    return {"success": True, "data": _documents(wishlist.get(user))}


@app.post("/api/wishlist", status_code=201)
def add_to_wishlist(request: WishlistAddRequest, user: str = Depends(current_user),
                    wishlist: WishlistService = Depends(get_wishlist)):
    if request.book is None:
        raise InvalidInput("Invalid book data")
    item: WishlistItem = wishlist.add(user, request.book, request.category)
    return {"success": True, "data": item.model_dump(by_alias=True, mode="json")}


@app.get("/api/wishlist/share")
def share_wishlist(user: str = Depends(current_user), wishlist: WishlistService = Depends(get_wishlist)):
    return {"success": True, "data": {"shareableLink": wishlist.share(user)}}


@app.delete("/api/wishlist/{item_id:path}")
def remove_from_wishlist(item_id: str, user: str = Depends(current_user),
                         wishlist: WishlistService = Depends(get_wishlist)):
    wishlist.remove(user, item_id)
    return {"success": True, "message": "Wishlist item removed"}


@app.put("/api/wishlist/{item_id:path}")
def update_wishlist_item(item_id: str, fields: Dict[str, Any] = Body(...), user: str = Depends(current_user),
                         wishlist: WishlistService = Depends(get_wishlist)):
    item = wishlist.update(user, item_id, fields)
    return {"success": True, "data": item.model_dump(by_alias=True, mode="json")}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
