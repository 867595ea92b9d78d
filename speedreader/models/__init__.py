"""Database models for the speed-reading core."""

from speedreader.models.cache import ExtractedTextCache, TokenChunk
from speedreader.models.document import Document
from speedreader.models.enums import EasingCurve, FileType, PlaybackState, TokenType
from speedreader.models.progress import ReadingProgressRecord
from speedreader.models.setting import Setting

__all__ = [
    "Document",
    "ReadingProgressRecord",
    "ExtractedTextCache",
    "TokenChunk",
    "Setting",
    "FileType",
    "TokenType",
    "PlaybackState",
    "EasingCurve",
]
