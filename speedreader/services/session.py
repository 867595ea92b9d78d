"""Reading session: ties extraction, playback and persistence together."""

import logging
from typing import Callable, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from speedreader.config import Settings, get_settings
from speedreader.exceptions import SpeedreaderError
from speedreader.schemas.engine import EngineSnapshot
from speedreader.schemas.token import Token
from speedreader.services.clock import monotonic_ms
from speedreader.services.engine import PlaybackEngine
from speedreader.services.extraction import DocumentSource, ExtractionOrchestrator, PageCallback
from speedreader.services.progress_store import ProgressStore, ProgressTracker
from speedreader.services.scheduler import AsyncioTicker, Ticker
from speedreader.services.settings_store import TARGET_WPM_KEY, SettingsStore
from speedreader.services.tokenizer import find_first_token_on_page

logger = logging.getLogger(__name__)


class ReadingSession:
    """
    One RSVP reading session for one document.

    ``open()`` prepares the token stream and seeds the playback position;
    ``close()`` stops playback and saves progress. Both are idempotent.
    Failures while opening end up in ``error`` rather than being raised.
    """

    def __init__(
        self,
        source: DocumentSource,
        orchestrator: ExtractionOrchestrator,
        progress_store: ProgressStore,
        settings_store: SettingsStore,
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = monotonic_ms,
        scheduler: Optional[Ticker] = None,
    ):
        self.source = source
        self._orchestrator = orchestrator
        self._progress_store = progress_store
        self._settings_store = settings_store
        self._settings = settings or get_settings()
        self._clock = clock

        if scheduler is None:
            scheduler = AsyncioTicker(self._settings.tick_interval_ms)
        self.engine = PlaybackEngine(self._settings, clock=clock, scheduler=scheduler)
        self.tracker: Optional[ProgressTracker] = None
        self.error: Optional[str] = None
        self.total_pages = 0
        self.from_cache = False
        self._opened = False
        self._closed = False

    @property
    def doc_id(self) -> str:
        return self.source.doc_id

    @property
    def is_open(self) -> bool:
        return self._opened and not self._closed

    def snapshot(self) -> EngineSnapshot:
        return self.engine.snapshot()

    async def open(
        self,
        start_page: Optional[int] = None,
        on_progress: Optional[PageCallback] = None,
    ) -> EngineSnapshot:
        """
        Prepare the document and park the engine at the resume position.

        The position is the first token on ``start_page`` when given,
        otherwise the saved progress, otherwise the first token. If the
        session is closed while the document is being prepared, the result
        is discarded.
        """
        if self._opened:
            return self.engine.snapshot()
        self._opened = True

        try:
            prepared = await self._orchestrator.prepare(
                self.source, start_page, on_progress=on_progress
            )
        except SpeedreaderError as exc:
            logger.warning("Could not open document %s: %s", self.doc_id, exc)
            self.error = str(exc)
            self.engine.error = self.error
            return self.engine.snapshot()

        if self._closed:
            logger.info("Session for document %s closed while opening", self.doc_id)
            return self.engine.snapshot()

        self.total_pages = prepared.total_pages
        self.from_cache = prepared.from_cache
        self._restore_target_wpm()

        start_index = self._resolve_start_index(prepared.tokens, start_page)
        self.engine.load(self.doc_id, prepared.tokens, start_index)

        self.tracker = ProgressTracker(
            self._progress_store,
            self.doc_id,
            self.engine.tokens,
            settings=self._settings,
            clock=self._clock,
            start_index=self.engine.current_token_index,
        )
        self.engine.add_listener(self.tracker)
        self.tracker.on_snapshot(self.engine.snapshot())

        logger.info(
            "Opened document %s at token %d of %d",
            self.doc_id,
            self.engine.current_token_index,
            self.engine.total_tokens,
        )
        return self.engine.snapshot()

    def close(self) -> EngineSnapshot:
        """Stop playback and force a progress save. The token cache is left alone."""
        if self._closed:
            return self.engine.snapshot()
        self._closed = True

        snapshot = self.engine.shutdown()
        if self.tracker is not None:
            self.tracker.on_snapshot(snapshot)
            self.tracker.flush(force=True)
        logger.info("Closed document %s at token %d", self.doc_id, snapshot.current_token_index)
        return snapshot

    def set_wpm(self, wpm: float) -> EngineSnapshot:
        """Set and persist the target speed."""
        snapshot = self.engine.set_target_wpm(wpm)
        try:
            self._settings_store.set_int(TARGET_WPM_KEY, snapshot.target_wpm)
        except SQLAlchemyError:
            logger.exception("Failed to persist target WPM")
        return snapshot

    def _restore_target_wpm(self) -> None:
        try:
            wpm = self._settings_store.get_int(TARGET_WPM_KEY)
        except SQLAlchemyError:
            logger.exception("Failed to read saved target WPM")
            return
        if wpm is not None:
            self.engine.set_target_wpm(wpm)

    def _resolve_start_index(
        self, tokens: Sequence[Token], start_page: Optional[int]
    ) -> int:
        if start_page is not None:
            return find_first_token_on_page(tokens, start_page)

        try:
            progress = self._progress_store.get(self.doc_id)
        except SQLAlchemyError:
            logger.exception("Failed to read progress for document %s", self.doc_id)
            return 0
        if progress is None:
            return 0
        return max(0, min(progress.current_token_index, len(tokens) - 1))
