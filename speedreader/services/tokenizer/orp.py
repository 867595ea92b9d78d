"""ORP (Optimal Recognition Point) calculator for RSVP reading."""

import math
from typing import NamedTuple

from .constants import ORP_RATIO
from .text_utils import split_core


class ORPSplit(NamedTuple):
    """A token split around its ORP character for display."""

    orp_index: int
    orp_char: str
    left_part: str
    right_part: str


class ORPCalculator:
    """
    Calculate the Optimal Recognition Point for tokens.

    The ORP is the character position in a word where the eye naturally
    focuses for fastest recognition. It is placed ``ratio`` of the way into
    the token's core (the token without leading/trailing punctuation), then
    shifted right by the length of any leading punctuation.
    """

    def __init__(self, ratio: float = ORP_RATIO) -> None:
        """
        Initialize the ORP calculator.

        Args:
            ratio: Fraction of the core length where the ORP sits.
        """
        self.ratio = ratio

    def calculate(self, text: str) -> int:
        """
        Calculate the ORP index for a token.

        Args:
            text: The token text, punctuation attached.

        Returns:
            The 0-indexed position of the ORP character in ``text``. Always a
            valid index for non-empty text.

        Examples:
            >>> ORPCalculator().calculate("running,")
            2
            >>> ORPCalculator().calculate('"Hello')
            2
        """
        if not text:
            return 0

        leading, core, _ = split_core(text)

        if len(core) <= 1:
            # Single-character core: the ORP is that character. Punctuation-only
            # tokens have no core; clamp to the last character of the leading run.
            return min(len(leading), len(text) - 1)

        return len(leading) + math.floor(len(core) * self.ratio)

    def split_for_display(self, text: str) -> ORPSplit:
        """
        Split a token into three parts for ORP display.

        Args:
            text: The token to split.

        Returns:
            ORPSplit of (orp_index, orp_char, left_part, right_part).

        Example:
            >>> ORPCalculator().split_for_display("running,")
            ORPSplit(orp_index=2, orp_char='n', left_part='ru', right_part='ning,')
        """
        if not text:
            return ORPSplit(0, "", "", "")

        orp_index = self.calculate(text)
        return ORPSplit(
            orp_index=orp_index,
            orp_char=text[orp_index],
            left_part=text[:orp_index],
            right_part=text[orp_index + 1:],
        )


_DEFAULT_CALCULATOR = ORPCalculator()


def calculate_orp_index(text: str) -> int:
    """Calculate the ORP index using the canonical ratio."""
    return _DEFAULT_CALCULATOR.calculate(text)


def split_by_orp(text: str) -> ORPSplit:
    """Split text around its ORP character using the canonical ratio."""
    return _DEFAULT_CALCULATOR.split_for_display(text)
