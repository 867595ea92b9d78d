"""Initial speed-reading schema.

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "documents",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("uri", sa.String(length=1024), nullable=False),
        sa.Column("name", sa.String(length=500), nullable=False),
        sa.Column("file_type", sa.Enum("PDF", "EPUB", "TEXT", name="filetype"), nullable=False),
        sa.Column("page_count", sa.Integer(), nullable=False),
        sa.Column("last_read_page", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_opened_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "reading_progress",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("doc_id", sa.String(length=36), nullable=False),
        sa.Column("current_token_index", sa.Integer(), nullable=False),
        sa.Column("current_page_num", sa.Integer(), nullable=False),
        sa.Column("snippet", sa.Text(), nullable=True),
        sa.Column("total_words_read", sa.Integer(), nullable=False),
        sa.Column("session_start_time", sa.BigInteger(), nullable=True),
        sa.Column("last_update_time", sa.BigInteger(), nullable=True),
        sa.ForeignKeyConstraint(["doc_id"], ["documents.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_reading_progress_doc_id"), "reading_progress", ["doc_id"], unique=True
    )

    op.create_table(
        "extracted_text_cache",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("doc_id", sa.String(length=36), nullable=False),
        sa.Column("total_tokens", sa.Integer(), nullable=False),
        sa.Column("total_pages", sa.Integer(), nullable=False),
        sa.Column("cache_date", sa.BigInteger(), nullable=False),
        sa.Column("file_hash", sa.String(length=128), nullable=False),
        sa.ForeignKeyConstraint(["doc_id"], ["documents.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_extracted_text_cache_doc_id"), "extracted_text_cache", ["doc_id"], unique=True
    )

    op.create_table(
        "token_chunks",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("doc_id", sa.String(length=36), nullable=False),
        sa.Column("chunk_index", sa.Integer(), nullable=False),
        sa.Column("tokens", sa.Text(), nullable=False),
        sa.Column("token_count", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["doc_id"], ["documents.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("doc_id", "chunk_index", name="uq_token_chunks_doc_chunk"),
    )
    op.create_index(op.f("ix_token_chunks_doc_id"), "token_chunks", ["doc_id"], unique=False)

    op.create_table(
        "settings",
        sa.Column("key", sa.String(length=255), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("key"),
    )


def downgrade() -> None:
    op.drop_table("settings")
    op.drop_index(op.f("ix_token_chunks_doc_id"), table_name="token_chunks")
    op.drop_table("token_chunks")
    op.drop_index(op.f("ix_extracted_text_cache_doc_id"), table_name="extracted_text_cache")
    op.drop_table("extracted_text_cache")
    op.drop_index(op.f("ix_reading_progress_doc_id"), table_name="reading_progress")
    op.drop_table("reading_progress")
    op.drop_table("documents")

    sa.Enum(name="filetype").drop(op.get_bind(), checkfirst=True)
