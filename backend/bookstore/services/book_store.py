"""
Bookstore Backend — Book Store (Persistence)
==============================================

What:  CRUD operations on the `books` table, keyed by ISBN.
Why:   Keeps SQL out of the route handlers and turns "no row" into a domain
       error (NotFoundError) the error mapper understands.
How:   Wraps one AsyncSession (a request-scoped handle from `Database`).
       Every write is a single statement followed by an immediate commit,
       so atomicity is whatever the database gives one statement.

Error Handling Strategy:
    - Missing ISBN                    → NotFoundError (404)
    - Duplicate ISBN on insert        → DuplicateBookError (500)
    - Any other SQLAlchemy failure    → DatabaseError (500), details logged
    - Values the driver cannot bind   → DatabaseError (500)
"""

import logging
from typing import Any, Dict, List

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.exceptions import DatabaseError, DuplicateBookError, NotFoundError
from bookstore.models.book import BOOK_FIELDS, Book

logger = logging.getLogger(__name__)

INTEGER_FIELDS = {"pages", "year"}

# sqlite3 raises OverflowError for ints beyond 64 bits and SQLAlchemy passes
# it through unwrapped, since it is not a DBAPI error
STORE_ERRORS = (SQLAlchemyError, OverflowError)


def _column_values(payload: Dict[str, Any], *, include_isbn: bool) -> Dict[str, Any]:
    """Pick the book columns out of a validated payload; extra keys are dropped."""
    values: Dict[str, Any] = {}
    for field in BOOK_FIELDS:
        if field == "isbn" and not include_isbn:
            continue
        value = payload[field]
        # JSON Schema counts 401.0 as an integer; the column wants an int
        if field in INTEGER_FIELDS:
            value = int(value)
        values[field] = value
    return values


class BookStore:
    """
    Persistence layer for books.

    Responsibilities:
        - create():      insert a new row
        - get_all():     every row, ordered by title
        - get_by_isbn(): single row or NotFoundError
        - update():      replace every non-key column or NotFoundError
        - remove():      delete the row or NotFoundError
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, payload: Dict[str, Any]) -> Book:
        """
        Insert a book built from a validated `create` payload.

        Raises:
            DuplicateBookError: a book with this ISBN already exists
            DatabaseError: the insert failed for another reason
        """
        values = _column_values(payload, include_isbn=True)
        try:
            await self.session.execute(insert(Book).values(**values))
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning("Insert rejected for isbn %s: %s", values["isbn"], e.orig)
            raise DuplicateBookError(
                isbn=values["isbn"],
                context={"original_error": str(e.orig)},
            ) from e
        except STORE_ERRORS as e:
            await self.session.rollback()
            logger.error("Database error creating book %s: %s", values["isbn"], str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the book. Please try again.",
                context={"isbn": values["isbn"], "error_type": type(e).__name__},
            ) from e

        logger.info("Book created: %s", values["isbn"])
        return Book(**values)

    async def get_all(self) -> List[Book]:
        """Every book, ordered by title (isbn breaks ties)."""
        try:
            result = await self.session.execute(
                select(Book).order_by(Book.title, Book.isbn)
            )
            return list(result.scalars().all())
        except STORE_ERRORS as e:
            logger.error("Database error listing books: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve books. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

    async def get_by_isbn(self, isbn: str) -> Book:
        """
        Retrieve a single book.

        Query plan:
            SELECT ... FROM books WHERE isbn = :isbn  (primary key lookup)

        Raises:
            NotFoundError: no book has this ISBN
            DatabaseError: query execution failed
        """
        try:
            result = await self.session.execute(
                select(Book).where(Book.isbn == isbn)
            )
            book = result.scalar_one_or_none()
        except STORE_ERRORS as e:
            logger.error("Database error fetching book %s: %s", isbn, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve the book. Please try again.",
                context={"isbn": isbn},
            ) from e

        if book is None:
            raise NotFoundError(isbn=isbn)
        return book

    async def update(self, isbn: str, payload: Dict[str, Any]) -> Book:
        """
        Replace every non-key column of the book stored under `isbn`.

        The ISBN always comes from the argument; an `isbn` key inside
        `payload` is ignored, so a book can never be re-keyed.

        Raises:
            NotFoundError: no book has this ISBN
            DatabaseError: the update failed
        """
        values = _column_values(payload, include_isbn=False)
        try:
            result = await self.session.execute(
                update(Book).where(Book.isbn == isbn).values(**values)
            )
            if result.rowcount == 0:
                await self.session.rollback()
                raise NotFoundError(isbn=isbn)
            await self.session.commit()
        except STORE_ERRORS as e:
            await self.session.rollback()
            logger.error("Database error updating book %s: %s", isbn, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the book. Please try again.",
                context={"isbn": isbn, "error_type": type(e).__name__},
            ) from e

        logger.info("Book updated: %s", isbn)
        return Book(isbn=isbn, **values)

    async def remove(self, isbn: str) -> None:
        """
        Delete the book stored under `isbn`.

        Raises:
            NotFoundError: no book has this ISBN
            DatabaseError: the delete failed
        """
        try:
            result = await self.session.execute(
                delete(Book).where(Book.isbn == isbn)
            )
            if result.rowcount == 0:
                await self.session.rollback()
                raise NotFoundError(isbn=isbn)
            await self.session.commit()
        except STORE_ERRORS as e:
            await self.session.rollback()
            logger.error("Database error deleting book %s: %s", isbn, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the book. Please try again.",
                context={"isbn": isbn, "error_type": type(e).__name__},
            ) from e

        logger.info("Book deleted: %s", isbn)
