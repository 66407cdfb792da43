"""Create books table

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Creates the `books` table, one row per book keyed by ISBN.
How:   Portable column types only (TEXT, INTEGER), so the same migration runs
       on PostgreSQL and SQLite.

Rollback: downgrade() drops the table entirely (destructive — all data lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the books table. See bookstore/models/book.py for the ORM side."""
    op.create_table(
        "books",
        sa.Column("isbn", sa.Text(), nullable=False),
        sa.Column("amazon_url", sa.Text(), nullable=False),
        sa.Column("author", sa.Text(), nullable=False),
        sa.Column("language", sa.Text(), nullable=False),
        sa.Column("pages", sa.Integer(), nullable=False),
        sa.Column("publisher", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("isbn"),
    )


def downgrade() -> None:
    """Drop the books table."""
    op.drop_table("books")
