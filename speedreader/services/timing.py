"""
Display-duration calculations for RSVP reading.

This module provides the TimingCalculator class for computing how long a
token stays on screen at a given reading speed, plus helpers for the
advance decision and time-remaining labels.

Natural pacing adds time on top of the base duration (60000 / wpm):
- one punctuation pause chosen from the token's trailing character
  (sentence end, then clause, then comma, then dash; first match wins)
- a length penalty for long word tokens, applied independently
"""

import math

from speedreader.models.enums import TokenType
from speedreader.schemas.token import Token
from speedreader.services.tokenizer.constants import (
    CLAUSE_PAUSE_RATIO,
    CLAUSE_PUNCTUATION,
    COMMA,
    DASH_PAUSE_MULTIPLIER,
    DASHES,
    LONG_WORD_PENALTY_MS,
    LONG_WORD_THRESHOLD,
    MS_PER_MINUTE,
    SENTENCE_ENDERS,
    TIMING_TOLERANCE_MS,
    VERY_LONG_WORD_PENALTY_MS,
    VERY_LONG_WORD_THRESHOLD,
)

DEFAULT_COMMA_PAUSE_MS = 50
DEFAULT_PERIOD_PAUSE_MS = 200


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class TimingCalculator:
    """
    Calculate per-token display durations.

    Example usage:
        >>> calc = TimingCalculator(comma_pause_ms=50, period_pause_ms=200)
        >>> calc.punctuation_pause_ms("hello.")
        200
        >>> calc.punctuation_pause_ms("so;")
        150
        >>> calc.punctuation_pause_ms("well,")
        50
        >>> calc.punctuation_pause_ms("wait—")
        100
    """

    def __init__(
        self,
        natural_pacing_enabled: bool = True,
        comma_pause_ms: int = DEFAULT_COMMA_PAUSE_MS,
        period_pause_ms: int = DEFAULT_PERIOD_PAUSE_MS,
    ) -> None:
        self.natural_pacing_enabled = natural_pacing_enabled
        self.comma_pause_ms = comma_pause_ms
        self.period_pause_ms = period_pause_ms

    def punctuation_pause_ms(self, text: str) -> int:
        """
        Return the pause earned by the token's trailing character.

        Only one pause applies; the checks run in priority order.
        """
        if not text:
            return 0

        last_char = text[-1]
        if last_char in SENTENCE_ENDERS:
            return self.period_pause_ms
        if last_char in CLAUSE_PUNCTUATION:
            return _round_half_up(self.period_pause_ms * CLAUSE_PAUSE_RATIO)
        if last_char == COMMA:
            return self.comma_pause_ms
        if last_char in DASHES:
            return self.comma_pause_ms * DASH_PAUSE_MULTIPLIER
        return 0

    def length_penalty_ms(self, token: Token) -> int:
        """Return the extra time for long word tokens."""
        if token.type != TokenType.WORD:
            return 0

        length = len(token.text)
        if length >= VERY_LONG_WORD_THRESHOLD:
            return VERY_LONG_WORD_PENALTY_MS
        if length >= LONG_WORD_THRESHOLD:
            return LONG_WORD_PENALTY_MS
        return 0

    def calculate(self, token: Token, wpm: float) -> float:
        """
        Calculate how long ``token`` should be displayed.

        Args:
            token: The token on screen.
            wpm: Current reading speed.

        Returns:
            Display duration in milliseconds.
        """
        duration = base_display_duration(wpm)
        if not self.natural_pacing_enabled:
            return duration
        return duration + self.punctuation_pause_ms(token.text) + self.length_penalty_ms(token)


def base_display_duration(wpm: float) -> float:
    """
    Calculate the base token display duration from WPM.

    Raises:
        ValueError: If wpm is not positive.

    Examples:
        >>> base_display_duration(300)
        200.0
        >>> base_display_duration(600)
        100.0
    """
    if wpm <= 0:
        raise ValueError(f"WPM must be positive, got {wpm}")

    return MS_PER_MINUTE / wpm


def display_duration(
    token: Token,
    wpm: float,
    natural_pacing_enabled: bool = True,
    comma_pause_ms: int = DEFAULT_COMMA_PAUSE_MS,
    period_pause_ms: int = DEFAULT_PERIOD_PAUSE_MS,
) -> float:
    """Calculate a token's display duration in milliseconds."""
    calculator = TimingCalculator(
        natural_pacing_enabled=natural_pacing_enabled,
        comma_pause_ms=comma_pause_ms,
        period_pause_ms=period_pause_ms,
    )
    return calculator.calculate(token, wpm)


def should_advance_token(
    token_elapsed_ms: float,
    display_duration_ms: float,
    tolerance_ms: float = TIMING_TOLERANCE_MS,
) -> bool:
    """Return True once the token has been shown long enough, within tolerance."""
    return token_elapsed_ms >= display_duration_ms - tolerance_ms


def estimate_time_remaining(remaining_tokens: int, wpm: float) -> str:
    """
    Estimate reading time left and format it for display.

    Examples:
        >>> estimate_time_remaining(100, 300)
        '20s'
        >>> estimate_time_remaining(1500, 300)
        '5 min'
        >>> estimate_time_remaining(27_000, 300)
        '1.5 hrs'
    """
    estimated_ms = max(0, remaining_tokens) * base_display_duration(wpm)

    if estimated_ms < 60_000:
        return f"{math.ceil(estimated_ms / 1000)}s"
    if estimated_ms < 3_600_000:
        return f"{math.ceil(estimated_ms / 60_000)} min"

    hours = math.ceil(estimated_ms / 3_600_000 * 10) / 10
    return f"{hours:g} hrs"


def estimate_total_reading_time(total_tokens: int, wpm: float) -> str:
    """Estimate the reading time for a whole document."""
    return estimate_time_remaining(total_tokens, wpm)
