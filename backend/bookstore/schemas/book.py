"""
Bookstore Backend — Pydantic Response Schemas
===============================================

What:  Pydantic models describing what the API returns.
Why:   Automatic serialization and OpenAPI doc generation.
How:   Routes declare these as response models. Request bodies are NOT parsed
       with Pydantic: they go through the JSON Schema validator
       (services/book_validator.py) so that 400 messages keep their published
       wording.

Envelope convention:
    {"book": {...}}   single book
    {"books": [...]}  collection
    {"message": ...}  acknowledgement
    {"error": {"message": ..., "status": ...}}
"""

from typing import List, Union

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class BookResponse(BaseModel):
    """Full representation of a stored book."""

    isbn: str = Field(description="ISBN, the unique book identifier")
    amazon_url: str = Field(description="Link to the book on Amazon")
    author: str
    language: str
    pages: int
    publisher: str
    title: str
    year: int


class BookEnvelope(BaseModel):
    book: BookResponse


class BookListEnvelope(BaseModel):
    books: List[BookResponse]


class MessageResponse(BaseModel):
    message: str = Field(description="Human-readable acknowledgement")


# ══════════════════════════════════════════════════════════════════════════
# Error Response Models — one format for every error
# ══════════════════════════════════════════════════════════════════════════


class ErrorBody(BaseModel):
    """
    Fields:
        message: A description, or the ordered list of schema violations
                 for 400 validation failures
        status:  The HTTP status code, repeated in the body
    """

    message: Union[str, List[str]]
    status: int


class ErrorResponse(BaseModel):
    """
    Example:
        {
            "error": {
                "message": ["instance requires property \\"isbn\\""],
                "status": 400
            }
        }
    """

    error: ErrorBody


class HealthResponse(BaseModel):
    """Health check response showing service and database status."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
