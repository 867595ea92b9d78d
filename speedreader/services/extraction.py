"""
Extraction orchestration: cache lookup, extraction, tokenization.

The orchestrator sits between a reading session and the external text
extractor. On a cache hit it returns the stored token stream; otherwise it
extracts, tokenizes, validates and caches the result.
"""

import asyncio
import hashlib
import logging
import time
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Protocol, Sequence, Union

from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError

from speedreader.config import Settings, get_settings
from speedreader.exceptions import (
    CacheCorruptionError,
    ExtractionError,
    ExtractionValidationError,
    SpeedreaderError,
)
from speedreader.models.enums import FileType, TokenType
from speedreader.schemas.extraction import ExtractedDocument, ExtractedLine, ExtractedPage
from speedreader.schemas.token import Token
from speedreader.services.cache_store import TokenCache
from speedreader.services.tokenizer import TokenStreamBuilder

logger = logging.getLogger(__name__)

HASH_BLOCK_SIZE = 64 * 1024
PAGE_SEPARATOR = "\f"

NO_TEXT_MESSAGE = "No text found in PDF. It may be a scanned document or image-only PDF."
TOO_LITTLE_TEXT_MESSAGE = "Very little readable text found in this PDF."

# (current_page, total_pages)
PageCallback = Callable[[int, int], None]


class DocumentSource(BaseModel):
    """A document to read, identified by id and backed by a local file."""

    doc_id: str
    path: Path
    name: Optional[str] = None
    file_type: FileType = FileType.PDF

    @property
    def display_name(self) -> str:
        return self.name or self.path.name


class PreparedStream(BaseModel):
    """A token stream ready for playback."""

    tokens: List[Token]
    total_pages: int
    from_cache: bool
    file_hash: str


class Extractor(Protocol):
    """
    External text extractor (PDF, EPUB, ...).

    Extractors may call ``on_page(current, total)`` after each page.
    """

    async def extract(
        self, source: DocumentSource, on_page: Optional[PageCallback] = None
    ) -> Union[ExtractedDocument, Mapping]: ...


class PlainTextExtractor:
    """
    Extract pages from a UTF-8 text file.

    Form feeds separate pages and newlines separate lines. Pages are numbered
    from 1.
    """

    async def extract(
        self, source: DocumentSource, on_page: Optional[PageCallback] = None
    ) -> ExtractedDocument:
        try:
            text = await asyncio.to_thread(source.path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ExtractionError(f"Could not read {source.path}: {exc}") from exc
        return self.parse(text, file_name=source.display_name, on_page=on_page)

    @staticmethod
    def parse(
        text: str,
        file_name: Optional[str] = None,
        on_page: Optional[PageCallback] = None,
    ) -> ExtractedDocument:
        page_texts = text.split(PAGE_SEPARATOR)
        pages: Dict[int, ExtractedPage] = {}
        for page_num, page_text in enumerate(page_texts, start=1):
            lines = [
                ExtractedLine(line_index=line_index, text=line)
                for line_index, line in enumerate(page_text.splitlines())
            ]
            pages[page_num] = ExtractedPage(text=page_text, lines=lines)
            if on_page is not None:
                on_page(page_num, len(page_texts))
        return ExtractedDocument(total_pages=len(pages), pages=pages, file_name=file_name)


def compute_file_hash(path: Union[str, Path]) -> str:
    """Return the SHA-256 hex digest of a file, read in blocks."""
    digest = hashlib.sha256()
    with open(path, "rb") as handle:
        for block in iter(lambda: handle.read(HASH_BLOCK_SIZE), b""):
            digest.update(block)
    return digest.hexdigest()


def validate_token_stream(tokens: Sequence[Token], min_word_count: int = 5) -> None:
    """
    Reject streams too sparse to read.

    Raises:
        ExtractionValidationError: If there are no tokens, or fewer than
            ``min_word_count`` word tokens.
    """
    if not tokens:
        raise ExtractionValidationError(NO_TEXT_MESSAGE)

    word_count = sum(1 for token in tokens if token.type == TokenType.WORD)
    if word_count < min_word_count:
        raise ExtractionValidationError(TOO_LITTLE_TEXT_MESSAGE)


class ExtractionOrchestrator:
    """
    Produce a document's token stream, from cache when possible.

    Only one preparation runs per document at a time; concurrent callers for
    the same document await the same task. Cache reads, tokenization and
    cache writes are synchronous, so they run in a worker thread to keep the
    event loop (and the playback ticker) responsive.
    """

    def __init__(
        self,
        extractor: Extractor,
        cache: TokenCache,
        settings: Optional[Settings] = None,
        builder: Optional[TokenStreamBuilder] = None,
    ):
        self._extractor = extractor
        self._cache = cache
        self._settings = settings or get_settings()
        self._builder = builder or TokenStreamBuilder()
        self._in_flight: Dict[str, asyncio.Task] = {}
        self._progress: Dict[str, float] = {}

    def is_extracting(self, doc_id: str) -> bool:
        return doc_id in self._in_flight

    def extraction_progress(self, doc_id: str) -> Optional[float]:
        """Fraction of pages extracted (0.0-1.0) while an extraction is running."""
        return self._progress.get(doc_id)

    async def prepare(
        self,
        source: DocumentSource,
        start_page: Optional[int] = None,
        on_progress: Optional[PageCallback] = None,
    ) -> PreparedStream:
        """
        Return the token stream for ``source``.

        Args:
            source: The document to prepare.
            start_page: Page the reader asked to start from, if any.
            on_progress: Called with ``(current_page, total_pages)`` as the
                extractor reports pages. Callers that join an in-flight
                preparation can poll :meth:`extraction_progress` instead.

        Raises:
            ExtractionError: If text could not be extracted.
            ExtractionValidationError: If the extracted text is too sparse.
        """
        task = self._in_flight.get(source.doc_id)
        if task is None:
            task = asyncio.create_task(self._prepare(source, start_page, on_progress))
            self._in_flight[source.doc_id] = task
            task.add_done_callback(
                lambda done, doc_id=source.doc_id: self._forget(doc_id, done)
            )
        else:
            logger.debug("Joining in-flight extraction for document %s", source.doc_id)
        return await asyncio.shield(task)

    def _forget(self, doc_id: str, task: asyncio.Task) -> None:
        if self._in_flight.get(doc_id) is task:
            del self._in_flight[doc_id]
            self._progress.pop(doc_id, None)

    async def _prepare(
        self,
        source: DocumentSource,
        start_page: Optional[int],
        on_progress: Optional[PageCallback],
    ) -> PreparedStream:
        try:
            file_hash = await asyncio.to_thread(compute_file_hash, source.path)
        except OSError as exc:
            raise ExtractionError(f"Could not read {source.path}: {exc}") from exc

        cached = await asyncio.to_thread(
            self._load_from_cache, source.doc_id, file_hash, start_page
        )
        if cached is not None:
            return cached

        logger.info("Extracting text for document %s (%s)", source.doc_id, source.display_name)
        started = time.perf_counter()
        self._progress[source.doc_id] = 0.0
        document = await self._extract(source, on_progress)
        tokens = await asyncio.to_thread(
            self._build_and_store, source, document, file_hash, started
        )

        return PreparedStream(
            tokens=tokens,
            total_pages=document.total_pages,
            from_cache=False,
            file_hash=file_hash,
        )

    async def _extract(
        self, source: DocumentSource, on_progress: Optional[PageCallback]
    ) -> ExtractedDocument:
        def report(current: int, total: int) -> None:
            self._progress[source.doc_id] = min(1.0, current / total) if total else 1.0
            if on_progress is not None:
                try:
                    on_progress(current, total)
                except Exception:
                    logger.exception("Extraction progress callback failed")

        try:
            result = await self._extractor.extract(source, on_page=report)
        except SpeedreaderError:
            raise
        except Exception as exc:
            logger.exception("Extractor failed for document %s", source.doc_id)
            raise ExtractionError(
                f"Could not extract text from {source.display_name}"
            ) from exc

        if isinstance(result, ExtractedDocument):
            return result
        try:
            return ExtractedDocument.model_validate(result)
        except ValidationError as exc:
            raise ExtractionError(f"Extractor returned malformed data: {exc}") from exc

    def _build_and_store(
        self,
        source: DocumentSource,
        document: ExtractedDocument,
        file_hash: str,
        started: float,
    ) -> List[Token]:
        """Tokenize, validate and cache an extracted document. Runs off the loop."""
        tokens = self._builder.build(document, source.doc_id)

        try:
            validate_token_stream(tokens, self._settings.min_word_count)
        except ExtractionValidationError as exc:
            logger.warning("Document %s failed validation: %s", source.doc_id, exc)
            raise

        logger.info(
            "Extracted %d tokens from %d pages for document %s",
            len(tokens),
            document.total_pages,
            source.doc_id,
            extra={"extra_data": {"duration_ms": (time.perf_counter() - started) * 1000}},
        )
        try:
            self._cache.save(source.doc_id, tokens, document.total_pages, file_hash)
        except SQLAlchemyError:
            logger.exception("Failed to cache tokens for document %s", source.doc_id)
        return tokens

    def _load_from_cache(
        self, doc_id: str, file_hash: str, start_page: Optional[int]
    ) -> Optional[PreparedStream]:
        entry = self._cache.get_entry(doc_id)
        if entry is None:
            logger.info("Cache miss for document %s", doc_id)
            return None

        reason = self._cache.invalid_reason(entry, file_hash)
        if reason is not None:
            logger.info("Discarding cache for document %s: %s", doc_id, reason)
            self._cache.delete(doc_id)
            return None

        try:
            cached = self._cache.load(doc_id)
        except CacheCorruptionError as exc:
            logger.warning("%s; re-extracting", exc)
            self._cache.delete(doc_id)
            return None

        if cached is None or not cached.tokens:
            logger.info("Cache for document %s is empty", doc_id)
            return None

        first_page = cached.tokens[0].page_num
        if start_page is None and first_page > self._settings.max_plausible_first_page:
            logger.warning(
                "Cached stream for document %s starts on page %d; treating as partial",
                doc_id,
                first_page,
            )
            self._cache.delete(doc_id)
            return None

        logger.info("Cache hit for document %s (%d tokens)", doc_id, len(cached.tokens))
        return PreparedStream(
            tokens=cached.tokens,
            total_pages=cached.total_pages,
            from_cache=True,
            file_hash=file_hash,
        )
