"""Tests for the chunked token cache."""

import pytest
from sqlalchemy import select, update

from conftest import DOC_ID, make_tokens

from speedreader.exceptions import CacheCorruptionError
from speedreader.models import Document, ExtractedTextCache, TokenChunk
from speedreader.services.cache_store import MS_PER_DAY, TokenCache
from speedreader.services.tokenizer import TOKENIZER_VERSION


@pytest.fixture
def cache(session_factory, settings, document):
    small_chunks = settings.model_copy(update={"token_chunk_size": 7})
    return TokenCache(session_factory, small_chunks, clock=lambda: 1_000_000)


@pytest.fixture
def tokens():
    return make_tokens(50)


def chunk_count(session_factory) -> int:
    with session_factory() as session:
        return len(session.scalars(select(TokenChunk).where(TokenChunk.doc_id == DOC_ID)).all())


class TestSaveAndLoad:
    """Tests for the cache round trip."""

    def test_round_trip(self, cache, tokens):
        cache.save(DOC_ID, tokens, total_pages=5, file_hash="abc")
        cached = cache.load(DOC_ID)

        assert [(t.id, t.text) for t in cached.tokens] == [(t.id, t.text) for t in tokens]
        assert cached.tokens == tokens
        assert cached.total_tokens == 50
        assert cached.total_pages == 5
        assert cached.file_hash == "abc"
        assert cached.cache_date == 1_000_000

    def test_tokens_are_chunked(self, cache, tokens, session_factory):
        cache.save(DOC_ID, tokens, total_pages=5, file_hash="abc")

        assert chunk_count(session_factory) == 8  # ceil(50 / 7)

    @pytest.mark.parametrize("chunk_size", [1, 10, 1000])
    def test_round_trip_independent_of_chunk_size(self, session_factory, settings, document, tokens, chunk_size):
        cache = TokenCache(session_factory, settings.model_copy(update={"token_chunk_size": chunk_size}))
        cache.save(DOC_ID, tokens, total_pages=5, file_hash="abc")

        assert cache.load(DOC_ID).tokens == tokens

    def test_save_replaces_previous_stream(self, cache, tokens, session_factory):
        cache.save(DOC_ID, tokens, total_pages=5, file_hash="old")
        cache.save(DOC_ID, tokens[:10], total_pages=1, file_hash="new")

        cached = cache.load(DOC_ID)
        assert len(cached.tokens) == 10
        assert cached.file_hash == "new"
        assert chunk_count(session_factory) == 2

    def test_load_missing(self, cache):
        assert cache.load(DOC_ID) is None
        assert cache.get_entry(DOC_ID) is None

    def test_get_entry(self, cache, tokens):
        cache.save(DOC_ID, tokens, total_pages=5, file_hash="abc")
        entry = cache.get_entry(DOC_ID)

        assert entry.doc_id == DOC_ID
        assert entry.total_tokens == 50

    def test_metadata_without_chunks(self, cache, tokens, session_factory):
        cache.save(DOC_ID, tokens, total_pages=5, file_hash="abc")
        with session_factory() as session, session.begin():
            session.execute(TokenChunk.__table__.delete())

        assert cache.load(DOC_ID) is None

    def test_delete(self, cache, tokens, session_factory):
        cache.save(DOC_ID, tokens, total_pages=5, file_hash="abc")
        cache.delete(DOC_ID)

        assert cache.get_entry(DOC_ID) is None
        assert chunk_count(session_factory) == 0

    def test_document_deletion_cascades(self, cache, tokens, session_factory):
        cache.save(DOC_ID, tokens, total_pages=5, file_hash="abc")
        with session_factory() as session, session.begin():
            session.delete(session.get(Document, DOC_ID))

        assert cache.get_entry(DOC_ID) is None
        assert chunk_count(session_factory) == 0


class TestCorruption:
    """Tests for payloads that can't be reassembled."""

    def test_unparseable_chunk(self, cache, tokens, session_factory):
        cache.save(DOC_ID, tokens, total_pages=5, file_hash="abc")
        with session_factory() as session, session.begin():
            session.execute(
                update(TokenChunk).where(TokenChunk.chunk_index == 3).values(tokens="{not json")
            )

        with pytest.raises(CacheCorruptionError, match="chunk 3"):
            cache.load(DOC_ID)

    def test_invalid_token_shape(self, cache, tokens, session_factory):
        cache.save(DOC_ID, tokens, total_pages=5, file_hash="abc")
        with session_factory() as session, session.begin():
            session.execute(
                update(TokenChunk)
                .where(TokenChunk.chunk_index == 0)
                .values(tokens='[{"id": 1}]', token_count=7)
            )

        with pytest.raises(CacheCorruptionError):
            cache.load(DOC_ID)

    def test_missing_chunk(self, cache, tokens, session_factory):
        cache.save(DOC_ID, tokens, total_pages=5, file_hash="abc")
        with session_factory() as session, session.begin():
            session.execute(TokenChunk.__table__.delete().where(TokenChunk.chunk_index == 2))
            session.execute(
                update(ExtractedTextCache).values(total_tokens=43)
            )

        with pytest.raises(CacheCorruptionError, match="missing chunk 2"):
            cache.load(DOC_ID)

    def test_count_mismatch(self, cache, tokens, session_factory):
        cache.save(DOC_ID, tokens, total_pages=5, file_hash="abc")
        with session_factory() as session, session.begin():
            session.execute(update(ExtractedTextCache).values(total_tokens=51))

        with pytest.raises(CacheCorruptionError) as exc_info:
            cache.load(DOC_ID)
        assert exc_info.value.doc_id == DOC_ID

    def test_exceeds_memory_bound(self, session_factory, settings, document, tokens):
        cache = TokenCache(session_factory, settings.model_copy(update={"max_cached_tokens": 10}))
        cache.save(DOC_ID, tokens, total_pages=5, file_hash="abc")

        with pytest.raises(CacheCorruptionError, match="exceeds limit"):
            cache.load(DOC_ID)


class TestValidity:
    """Tests for hash and staleness checks."""

    @pytest.fixture
    def entry(self, cache, tokens):
        return cache.save(DOC_ID, tokens, total_pages=5, file_hash="abc")

    def test_valid(self, cache, entry):
        assert cache.is_valid(entry, "abc")

    def test_hash_changed(self, cache, entry):
        assert not cache.is_valid(entry, "different")
        assert cache.invalid_reason(entry, "different") == "file hash changed"

    def test_entry_records_tokenizer_version(self, entry):
        assert entry.tokenizer_version == TOKENIZER_VERSION

    def test_tokenizer_version_changed(self, cache, entry):
        older = entry.model_copy(update={"tokenizer_version": "1.0.0"})

        assert not cache.is_valid(older, "abc")
        assert "tokenizer version 1.0.0" in cache.invalid_reason(older, "abc")

    def test_unversioned_entry_is_invalid(self, cache, entry, session_factory):
        with session_factory() as session, session.begin():
            session.execute(update(ExtractedTextCache).values(tokenizer_version=None))

        assert not cache.is_valid(cache.get_entry(DOC_ID), "abc")

    def test_staleness_window(self, cache, entry):
        thirty_days = 30 * MS_PER_DAY

        assert cache.is_valid(entry, "abc", now_ms=1_000_000 + thirty_days)
        assert not cache.is_valid(entry, "abc", now_ms=1_000_001 + thirty_days)
        assert cache.invalid_reason(entry, "abc", now_ms=10**12) == "older than 30 days"

    def test_staleness_window_ms(self, cache):
        assert cache.staleness_window_ms == 30 * 24 * 60 * 60 * 1000
