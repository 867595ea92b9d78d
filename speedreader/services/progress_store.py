"""Reading progress persistence and the debounce-and-flush tracker."""

import logging
from typing import Callable, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session, sessionmaker

from speedreader.config import Settings, get_settings
from speedreader.models.enums import PlaybackState
from speedreader.models.progress import ReadingProgressRecord
from speedreader.schemas.engine import EngineSnapshot
from speedreader.schemas.progress import ReadingProgress
from speedreader.schemas.token import Token
from speedreader.services.clock import epoch_ms, monotonic_ms
from speedreader.services.tokenizer import get_context_snippet

logger = logging.getLogger(__name__)


class ProgressStore:
    """Upserts one reading-progress row per document."""

    def __init__(
        self,
        session_factory: sessionmaker,
        clock: Callable[[], int] = epoch_ms,
    ):
        self._session_factory = session_factory
        self._clock = clock

    def save(
        self,
        doc_id: str,
        current_token_index: int,
        current_page_num: int,
        snippet: str = "",
        words_read: int = 0,
    ) -> ReadingProgress:
        """
        Create or update the progress row for a document.

        Args:
            doc_id: Document id.
            current_token_index: Position to resume from.
            current_page_num: Page of the current token.
            snippet: Short context around the current token.
            words_read: Tokens read since the previous save; negative values
                (seeking backwards) count as zero.

        Returns:
            The stored progress.
        """
        now = self._clock()
        with self._session_factory() as session, session.begin():
            record = self._get_record(session, doc_id)
            if record is None:
                record = ReadingProgressRecord(
                    doc_id=doc_id,
                    total_words_read=0,
                    session_start_time=now,
                )
                session.add(record)

            record.current_token_index = current_token_index
            record.current_page_num = current_page_num
            record.snippet = snippet
            record.total_words_read = (record.total_words_read or 0) + max(0, words_read)
            record.last_update_time = now
            session.flush()
            return ReadingProgress.model_validate(record)

    def get(self, doc_id: str) -> Optional[ReadingProgress]:
        with self._session_factory() as session:
            record = self._get_record(session, doc_id)
            return ReadingProgress.model_validate(record) if record else None

    def delete(self, doc_id: str) -> None:
        with self._session_factory() as session, session.begin():
            session.execute(
                delete(ReadingProgressRecord).where(ReadingProgressRecord.doc_id == doc_id)
            )

    @staticmethod
    def _get_record(session: Session, doc_id: str) -> Optional[ReadingProgressRecord]:
        return session.scalar(
            select(ReadingProgressRecord).where(ReadingProgressRecord.doc_id == doc_id)
        )


class ProgressTracker:
    """
    Batch progress writes while playing and flush immediately on pause.

    The tracker is registered as an engine listener. While playing, a save
    happens once enough tokens have advanced or enough time has passed since
    the last save, whichever comes first. Entering PAUSED, or calling
    ``flush(force=True)``, writes at once and supersedes anything pending.
    """

    def __init__(
        self,
        store: ProgressStore,
        doc_id: str,
        tokens: Sequence[Token],
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = monotonic_ms,
        start_index: int = 0,
    ):
        self._store = store
        self._doc_id = doc_id
        self._tokens = tokens
        self._settings = settings or get_settings()
        self._clock = clock

        self._last_saved_index = start_index
        self._last_saved_at = clock()
        self._latest: Optional[EngineSnapshot] = None
        self._dirty = False

    @property
    def has_pending_changes(self) -> bool:
        return self._dirty

    @property
    def last_saved_index(self) -> int:
        return self._last_saved_index

    def __call__(self, snapshot: EngineSnapshot) -> None:
        self.on_snapshot(snapshot)

    def on_snapshot(self, snapshot: EngineSnapshot) -> None:
        """Record the latest engine state and save if a threshold is reached."""
        previous = self._latest
        self._latest = snapshot
        if snapshot.current_token_index != self._last_saved_index:
            self._dirty = True

        if snapshot.state == PlaybackState.PAUSED:
            if previous is None or previous.state != PlaybackState.PAUSED or self._dirty:
                self.flush(force=True)
            return

        if not snapshot.is_playing or not self._dirty:
            return

        advanced = abs(snapshot.current_token_index - self._last_saved_index)
        elapsed_ms = self._clock() - self._last_saved_at
        if (
            advanced >= self._settings.progress_save_every_words
            or elapsed_ms >= self._settings.progress_save_interval_seconds * 1000
        ):
            self.flush()

    def flush(self, force: bool = False) -> Optional[ReadingProgress]:
        """
        Write the latest position.

        Args:
            force: Write even if nothing changed since the last save.

        Returns:
            The stored progress, or None if nothing was written.
        """
        snapshot = self._latest
        if snapshot is None or not self._tokens:
            return None
        if not force and not self._dirty:
            return None

        index = snapshot.current_token_index
        snippet = get_context_snippet(
            self._tokens, index, self._settings.snippet_context_words
        )
        try:
            progress = self._store.save(
                self._doc_id,
                index,
                snapshot.current_page_num,
                snippet,
                index - self._last_saved_index,
            )
        except Exception:
            logger.exception("Failed to save reading progress for document %s", self._doc_id)
            return None

        logger.debug("Saved progress for document %s at token %d", self._doc_id, index)
        self._last_saved_index = index
        self._last_saved_at = self._clock()
        self._dirty = False
        return progress
