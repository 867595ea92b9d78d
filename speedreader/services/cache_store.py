"""Token cache: persists token streams in fixed-size chunks.

The token array is logically one sequence. It is split into chunks purely to
bound the size of each write and read, and reassembled transparently on load.
"""

import logging
from typing import Callable, List, Optional, Sequence

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session, sessionmaker

from speedreader.config import Settings, get_settings
from speedreader.exceptions import CacheCorruptionError
from speedreader.models.cache import ExtractedTextCache, TokenChunk
from speedreader.schemas.progress import CacheEntry
from speedreader.schemas.token import CachedTokens, Token
from speedreader.services.clock import epoch_ms
from speedreader.services.tokenizer.constants import TOKENIZER_VERSION

logger = logging.getLogger(__name__)

_TOKEN_LIST = TypeAdapter(List[Token])

MS_PER_DAY = 24 * 60 * 60 * 1000


class TokenCache:
    """Chunked token-stream cache keyed by document id."""

    def __init__(
        self,
        session_factory: sessionmaker,
        settings: Optional[Settings] = None,
        clock: Callable[[], int] = epoch_ms,
    ):
        self._session_factory = session_factory
        self._settings = settings or get_settings()
        self._clock = clock

    @property
    def staleness_window_ms(self) -> int:
        return self._settings.cache_staleness_days * MS_PER_DAY

    def save(
        self,
        doc_id: str,
        tokens: Sequence[Token],
        total_pages: int,
        file_hash: str,
    ) -> CacheEntry:
        """Replace the cached stream for a document.

        Old chunks are removed and the metadata row upserted in the same
        transaction, so a reader never sees a mix of old and new chunks.
        """
        chunk_size = max(1, self._settings.token_chunk_size)
        now = self._clock()

        with self._session_factory() as session, session.begin():
            session.execute(delete(TokenChunk).where(TokenChunk.doc_id == doc_id))

            for chunk_index, start in enumerate(range(0, len(tokens), chunk_size)):
                chunk = list(tokens[start:start + chunk_size])
                session.add(
                    TokenChunk(
                        doc_id=doc_id,
                        chunk_index=chunk_index,
                        tokens=_TOKEN_LIST.dump_json(chunk).decode("utf-8"),
                        token_count=len(chunk),
                    )
                )

            record = self._get_record(session, doc_id)
            if record is None:
                record = ExtractedTextCache(doc_id=doc_id)
                session.add(record)
            record.total_tokens = len(tokens)
            record.total_pages = total_pages
            record.cache_date = now
            record.file_hash = file_hash
            record.tokenizer_version = TOKENIZER_VERSION
            session.flush()
            entry = CacheEntry.model_validate(record)

        logger.info(
            "Cached %d tokens for document %s (%d pages)", len(tokens), doc_id, total_pages
        )
        return entry

    def get_entry(self, doc_id: str) -> Optional[CacheEntry]:
        """Return cache metadata without loading the token payload."""
        with self._session_factory() as session:
            record = self._get_record(session, doc_id)
            return CacheEntry.model_validate(record) if record else None

    def load(self, doc_id: str) -> Optional[CachedTokens]:
        """
        Load and reassemble a cached token stream.

        Returns:
            The cached stream, or None if nothing is cached.

        Raises:
            CacheCorruptionError: If the payload cannot be reassembled safely.
        """
        with self._session_factory() as session:
            record = self._get_record(session, doc_id)
            if record is None:
                return None
            entry = CacheEntry.model_validate(record)

            if entry.total_tokens > self._settings.max_cached_tokens:
                raise CacheCorruptionError(
                    doc_id,
                    f"{entry.total_tokens} tokens exceeds limit of "
                    f"{self._settings.max_cached_tokens}",
                )

            stored_count = session.scalar(
                select(func.coalesce(func.sum(TokenChunk.token_count), 0)).where(
                    TokenChunk.doc_id == doc_id
                )
            )
            if stored_count == 0:
                logger.warning("No token chunks found for document %s", doc_id)
                return None
            if stored_count != entry.total_tokens:
                raise CacheCorruptionError(
                    doc_id,
                    f"chunks hold {stored_count} tokens, metadata says {entry.total_tokens}",
                )

            tokens: List[Token] = []
            chunks = session.scalars(
                select(TokenChunk)
                .where(TokenChunk.doc_id == doc_id)
                .order_by(TokenChunk.chunk_index)
            )
            for expected_index, chunk in enumerate(chunks):
                if chunk.chunk_index != expected_index:
                    raise CacheCorruptionError(
                        doc_id, f"missing chunk {expected_index}"
                    )
                try:
                    chunk_tokens = _TOKEN_LIST.validate_json(chunk.tokens)
                except ValidationError as exc:
                    raise CacheCorruptionError(
                        doc_id, f"chunk {chunk.chunk_index} failed to parse"
                    ) from exc
                if len(chunk_tokens) != chunk.token_count:
                    raise CacheCorruptionError(
                        doc_id, f"chunk {chunk.chunk_index} token count mismatch"
                    )
                tokens.extend(chunk_tokens)

        return CachedTokens(
            doc_id=doc_id,
            tokens=tokens,
            total_tokens=entry.total_tokens,
            total_pages=entry.total_pages,
            cache_date=entry.cache_date,
            file_hash=entry.file_hash,
        )

    def delete(self, doc_id: str) -> None:
        """Remove the cached stream and its metadata."""
        with self._session_factory() as session, session.begin():
            session.execute(delete(TokenChunk).where(TokenChunk.doc_id == doc_id))
            session.execute(
                delete(ExtractedTextCache).where(ExtractedTextCache.doc_id == doc_id)
            )
        logger.info("Deleted token cache for document %s", doc_id)

    def invalid_reason(
        self,
        entry: CacheEntry,
        file_hash: str,
        now_ms: Optional[int] = None,
    ) -> Optional[str]:
        """Return why a cache entry can't be used, or None if it is valid."""
        if entry.file_hash != file_hash:
            return "file hash changed"

        if entry.tokenizer_version != TOKENIZER_VERSION:
            return (
                f"tokenizer version {entry.tokenizer_version} "
                f"is not {TOKENIZER_VERSION}"
            )

        now = self._clock() if now_ms is None else now_ms
        if now - entry.cache_date > self.staleness_window_ms:
            return f"older than {self._settings.cache_staleness_days} days"

        return None

    def is_valid(
        self,
        entry: CacheEntry,
        file_hash: str,
        now_ms: Optional[int] = None,
    ) -> bool:
        return self.invalid_reason(entry, file_hash, now_ms) is None

    @staticmethod
    def _get_record(session: Session, doc_id: str) -> Optional[ExtractedTextCache]:
        return session.scalar(
            select(ExtractedTextCache).where(ExtractedTextCache.doc_id == doc_id)
        )
