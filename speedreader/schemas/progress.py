"""Pydantic schemas for persisted progress and cache metadata."""

from speedreader.schemas.base import SchemaBase


class ReadingProgress(SchemaBase):
    doc_id: str
    current_token_index: int
    current_page_num: int
    snippet: str | None
    total_words_read: int
    session_start_time: int | None
    last_update_time: int | None


class CacheEntry(SchemaBase):
    doc_id: str
    total_tokens: int
    total_pages: int
    cache_date: int
    file_hash: str
    tokenizer_version: str | None = None
