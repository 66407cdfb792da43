"""
Bookstore Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for every error the API can report.
Why:   Each exception carries the HTTP status and the client-facing message,
       so a single terminal handler (registered in main.py) can render the
       `{"error": {"message": ..., "status": ...}}` envelope for all of them.
How:   Raised by the validator glue, the book store and the routes; caught by
       the handlers installed by `register_exception_handlers()`.

Exception Hierarchy:
    BookstoreError (base)          → 500
    ├── ValidationError            → 400 (message is a list of violations)
    ├── MalformedBodyError         → 400
    ├── NotFoundError              → 404
    ├── RouteNotFoundError         → 404
    └── DatabaseError              → 500
        └── DuplicateBookError     → 500

Message wording is part of the public contract: clients match on the exact
strings, including the not-found message which has no closing quote.
"""

from typing import Any, Dict, List, Optional, Union


class BookstoreError(Exception):
    """
    Base exception for all Bookstore application errors.

    Attributes:
        message:     Client-facing description (a string, or a list of
                     strings for validation failures)
        status_code: HTTP status used in the response and the envelope
        context:     Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500

    def __init__(
        self,
        message: Union[str, List[str]] = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(message if isinstance(message, str) else "; ".join(message))


class ValidationError(BookstoreError):
    """
    Raised when a request body does not satisfy the book schema.

    The message is the ordered list of violations produced by the validator,
    e.g. ['instance requires property "isbn"'].
    """

    status_code = 400

    def __init__(
        self,
        messages: List[str],
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=list(messages), context=context)


class MalformedBodyError(BookstoreError):
    """Raised when the request body cannot be decoded as JSON."""

    status_code = 400

    def __init__(
        self,
        message: str = "Request body is not valid JSON",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(BookstoreError):
    """
    Raised when no book matches the requested ISBN.

    HTTP: 404 Not Found

    The store converts SQLAlchemy's "no row" into this exception so routes
    never inspect None results themselves.
    """

    status_code = 404

    def __init__(
        self,
        isbn: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["isbn"] = isbn
        super().__init__(message=f"There is no book with an isbn '{isbn}", context=ctx)
        self.isbn = isbn


class RouteNotFoundError(BookstoreError):
    """Raised by the catch-all route when no endpoint matches the request."""

    status_code = 404

    def __init__(
        self,
        path: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if path:
            ctx["path"] = path
        super().__init__(message="Not Found", context=ctx)


class DatabaseError(BookstoreError):
    """
    Raised when a database operation fails unexpectedly.

    Security Note:
        The message returned to the client is generic. Driver details
        (SQL, constraint names) are kept in `context` and logged only.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DuplicateBookError(DatabaseError):
    """
    Raised when an insert violates the unique ISBN constraint.

    Reported as a 500, the same as any other failed write.
    """

    def __init__(
        self,
        isbn: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["isbn"] = isbn
        super().__init__(message=f"A book with isbn '{isbn}' already exists", context=ctx)
        self.isbn = isbn
