"""Initial schema: books, users, tokens

Revision ID: 0001
Revises: None
Create Date: 2026-10-19 09:00:00
"""
from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "0001"
down_revision: str | None = None
branch_labels: str | None = None
depends_on: str | None = None


def _table_exists(name: str) -> bool:
    return sa.inspect(op.get_bind()).has_table(name)


def upgrade() -> None:
    # A database built by init_db() already has these tables
    if not _table_exists("books"):
        op.create_table(
            "books",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("isbn", sa.String(), nullable=False),
            sa.Column("title", sa.String(), nullable=False),
            sa.Column("author", sa.String(), nullable=False),
            sa.Column("genres", sa.JSON(), nullable=False),
            sa.Column("pages", sa.Integer(), nullable=False),
            sa.Column("language", sa.String(), nullable=False),
            sa.Column("publisher", sa.String(), nullable=False),
            sa.Column("year", sa.Integer(), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
            sqlite_autoincrement=True,
        )
        op.create_index("ix_books_isbn", "books", ["isbn"])

    if not _table_exists("users"):
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("email", sa.String(), nullable=False),
            sa.Column("activated", sa.Boolean(), nullable=False, server_default="0"),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.Column("password_hash", sa.LargeBinary(), nullable=False),
            sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        )
        op.create_index("ix_users_email", "users", ["email"], unique=True)

    if not _table_exists("tokens"):
        op.create_table(
            "tokens",
            sa.Column("hash", sa.LargeBinary(), primary_key=True),
            sa.Column(
                "user_id",
                sa.Integer(),
                sa.ForeignKey("users.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column("expiry", sa.DateTime(), nullable=False),
        )
        op.create_index("ix_tokens_user_id", "tokens", ["user_id"])
        op.create_index("ix_tokens_expiry", "tokens", ["expiry"])


def downgrade() -> None:
    # Reverse FK order: tokens -> users, then books.
    op.drop_table("tokens")
    op.drop_table("users")
    op.drop_table("books")
