"""Enums shared by models, schemas and services."""

from enum import Enum


class FileType(str, Enum):
    """Enum for document file types."""

    PDF = "pdf"
    EPUB = "epub"
    TEXT = "txt"


class TokenType(str, Enum):
    """Classification of a token produced by the tokenizer.

    Whitespace tokens only exist during splitting and never reach the
    displayable stream.
    """

    WORD = "word"
    PUNCTUATION = "punctuation"
    NUMBER = "number"
    WHITESPACE = "whitespace"
    BREAK = "break"
    OTHER = "other"


class PlaybackState(str, Enum):
    """States of the playback engine."""

    IDLE = "IDLE"
    RAMPING = "RAMPING"
    PLAYING_CONTINUOUS = "PLAYING_CONTINUOUS"
    PLAYING_TEMPORARY = "PLAYING_TEMPORARY"
    PAUSED = "PAUSED"

    @property
    def is_playing(self) -> bool:
        return self in PLAYING_STATES


PLAYING_STATES = frozenset(
    {
        PlaybackState.RAMPING,
        PlaybackState.PLAYING_CONTINUOUS,
        PlaybackState.PLAYING_TEMPORARY,
    }
)


class EasingCurve(str, Enum):
    """Easing curves available for speed ramping."""

    LINEAR = "linear"
    EASE_OUT_QUAD = "easeOutQuad"
    EASE_IN_OUT_CUBIC = "easeInOutCubic"
    SIGMOID = "sigmoid"
