"""Exception types for the speed-reading core.

Only failures that end a reading session are raised. Out-of-range seeks are
clamped and engine invariant violations pause playback, so neither has an
exception class here.
"""


class SpeedreaderError(Exception):
    """Base exception for speed-reading errors"""

    pass


class ExtractionError(SpeedreaderError):
    """The extractor could not produce text (corrupt, encrypted or unreadable source)."""

    pass


class ExtractionValidationError(SpeedreaderError):
    """Text was extracted but is too sparse to read (likely a scanned document)."""

    pass


class CacheCorruptionError(SpeedreaderError):
    """A cached token payload could not be reassembled safely."""

    def __init__(self, doc_id: str, reason: str):
        super().__init__(f"Token cache for document {doc_id} is corrupted: {reason}")
        self.doc_id = doc_id
        self.reason = reason
