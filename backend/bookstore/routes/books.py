"""
Bookstore Backend — Book Route Handlers
=========================================

What:  CRUD endpoints under /books.
How:   Each handler reads the raw JSON body (writes only), runs the schema
       validator, calls the BookStore, and wraps the result in the response
       envelope. Failures are raised as BookstoreError subclasses and
       rendered by the global exception handlers.

Endpoints:
    GET    /books          → 200 {"books": [...]}
    GET    /books/{isbn}   → 200 {"book": {...}}        | 404
    POST   /books          → 201 {"book": {...}}        | 400
    PUT    /books/{isbn}   → 200 {"book": {...}}        | 400 | 404
    DELETE /books/{isbn}   → 200 {"message": "Book deleted"} | 404

Bodies are read with `read_json_body` rather than a Pydantic body model:
FastAPI's own validation would answer 422 with its own wording, while clients
expect the schema validator's 400 messages.
"""

import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.database import get_db_session
from bookstore.exceptions import MalformedBodyError, ValidationError
from bookstore.models.book import Book
from bookstore.schemas.book import (
    BookEnvelope,
    BookListEnvelope,
    BookResponse,
    ErrorResponse,
    MessageResponse,
)
from bookstore.services.book_store import BookStore
from bookstore.services.book_validator import (
    SchemaKind,
    ValidationErrors,
    book_validator,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/books", tags=["Books"])


# ── Dependencies ──────────────────────────────────────────────────────────


async def get_book_store(db: AsyncSession = Depends(get_db_session)) -> BookStore:
    return BookStore(db)


async def read_json_body(request: Request) -> Any:
    """
    Decode the request body as JSON.

    An empty body decodes to {} so the validator reports the missing
    properties; undecodable bytes are a MalformedBodyError (400).
    """
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except ValueError as e:
        raise MalformedBodyError(context={"error": str(e)}) from e


def validated_payload(body: Any, kind: SchemaKind) -> Dict[str, Any]:
    result = book_validator.validate(body, kind)
    if isinstance(result, ValidationErrors):
        logger.info("Rejected %s body: %d violation(s)", kind, len(result.messages))
        raise ValidationError(result.messages, context={"schema": kind})
    return result.payload


def book_response(book: Book) -> BookResponse:
    return BookResponse(**book.to_dict())


# ── Endpoints ─────────────────────────────────────────────────────────────


@router.get(
    "",
    response_model=BookListEnvelope,
    summary="List all books",
)
async def list_books(store: BookStore = Depends(get_book_store)) -> BookListEnvelope:
    books = await store.get_all()
    return BookListEnvelope(books=[book_response(book) for book in books])


@router.get(
    "/{isbn}",
    response_model=BookEnvelope,
    responses={404: {"description": "No book with this ISBN", "model": ErrorResponse}},
    summary="Get a single book by ISBN",
)
async def get_book(isbn: str, store: BookStore = Depends(get_book_store)) -> BookEnvelope:
    book = await store.get_by_isbn(isbn)
    return BookEnvelope(book=book_response(book))


@router.post(
    "",
    status_code=201,
    response_model=BookEnvelope,
    responses={400: {"description": "Body violates the book schema", "model": ErrorResponse}},
    summary="Create a book",
    description="All eight book fields are required. `amazon_url` must be a URI.",
)
async def create_book(
    body: Any = Depends(read_json_body),
    store: BookStore = Depends(get_book_store),
) -> BookEnvelope:
    payload = validated_payload(body, "create")
    book = await store.create(payload)
    return BookEnvelope(book=book_response(book))


@router.put(
    "/{isbn}",
    response_model=BookEnvelope,
    responses={
        400: {"description": "Body violates the book schema", "model": ErrorResponse},
        404: {"description": "No book with this ISBN", "model": ErrorResponse},
    },
    summary="Replace a book",
    description=(
        "Every field except `isbn` is required. The ISBN comes from the path; "
        "a body that contains `isbn` is rejected."
    ),
)
async def update_book(
    isbn: str,
    body: Any = Depends(read_json_body),
    store: BookStore = Depends(get_book_store),
) -> BookEnvelope:
    # Validation first: a bad body on an unknown ISBN is a 400, not a 404
    payload = validated_payload(body, "update")
    book = await store.update(isbn, payload)
    return BookEnvelope(book=book_response(book))


@router.delete(
    "/{isbn}",
    response_model=MessageResponse,
    responses={404: {"description": "No book with this ISBN", "model": ErrorResponse}},
    summary="Delete a book",
)
async def delete_book(isbn: str, store: BookStore = Depends(get_book_store)) -> MessageResponse:
    await store.remove(isbn)
    return MessageResponse(message="Book deleted")
