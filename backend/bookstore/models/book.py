"""
Bookstore Backend — Book SQLAlchemy Model
===========================================

What:  ORM model representing the `books` table.
Why:   Maps Python objects to database rows for type-safe database operations.
How:   Inherits from the shared DeclarativeBase; Alembic reads this for migrations.
Who:   Used by BookStore for CRUD operations.

Table Design:
    - isbn primary key: the natural key clients already use in URLs
    - one column per book attribute, all NOT NULL (every field is required)
    - no surrogate id, no timestamps: a PUT replaces the whole row
"""

from typing import Any, Dict

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from bookstore.database import Base

# Column order used for serialization and by the update statement
BOOK_FIELDS = (
    "isbn",
    "amazon_url",
    "author",
    "language",
    "pages",
    "publisher",
    "title",
    "year",
)


class Book(Base):
    """
    A book in the catalogue.

    Query Patterns:
        - Get one book: SELECT ... WHERE isbn = :isbn (primary key lookup)
        - List books:   SELECT ... ORDER BY title
    """

    __tablename__ = "books"

    isbn: Mapped[str] = mapped_column(Text, primary_key=True)
    amazon_url: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(Text, nullable=False)
    language: Mapped[str] = mapped_column(Text, nullable=False)
    pages: Mapped[int] = mapped_column(Integer, nullable=False)
    publisher: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    def to_dict(self) -> Dict[str, Any]:
        return {field: getattr(self, field) for field in BOOK_FIELDS}

    def __repr__(self) -> str:
        return f"<Book(isbn='{self.isbn}', title='{self.title}')>"
