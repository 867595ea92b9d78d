"""Pydantic schemas for the speed-reading core."""

from speedreader.schemas.engine import EngineSnapshot
from speedreader.schemas.extraction import ExtractedDocument, ExtractedLine, ExtractedPage
from speedreader.schemas.progress import CacheEntry, ReadingProgress
from speedreader.schemas.token import CachedTokens, SourceRef, Token

__all__ = [
    # Token schemas
    "SourceRef",
    "Token",
    "CachedTokens",
    # Extraction boundary
    "ExtractedLine",
    "ExtractedPage",
    "ExtractedDocument",
    # Persistence
    "ReadingProgress",
    "CacheEntry",
    # Engine
    "EngineSnapshot",
]
