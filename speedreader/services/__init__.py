"""Business logic services for the speed-reading core."""

from speedreader.services.cache_store import TokenCache
from speedreader.services.engine import PlaybackEngine
from speedreader.services.extraction import (
    DocumentSource,
    ExtractionOrchestrator,
    Extractor,
    PageCallback,
    PlainTextExtractor,
    PreparedStream,
    compute_file_hash,
    validate_token_stream,
)
from speedreader.services.progress_store import ProgressStore, ProgressTracker
from speedreader.services.scheduler import AsyncioTicker, Ticker
from speedreader.services.session import ReadingSession
from speedreader.services.settings_store import SettingsStore
from speedreader.services.tokenizer import TokenStreamBuilder, generate_token_stream

__all__ = [
    # Tokenization
    "TokenStreamBuilder",
    "generate_token_stream",
    # Playback
    "PlaybackEngine",
    "Ticker",
    "AsyncioTicker",
    # Persistence
    "TokenCache",
    "ProgressStore",
    "ProgressTracker",
    "SettingsStore",
    # Extraction
    "DocumentSource",
    "Extractor",
    "PageCallback",
    "PlainTextExtractor",
    "PreparedStream",
    "ExtractionOrchestrator",
    "compute_file_hash",
    "validate_token_stream",
    # Integration
    "ReadingSession",
]
