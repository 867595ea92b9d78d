"""
Shared text processing utilities for the tokenizer package.

These functions classify raw token text and locate the "core" of a token
(the text left after stripping leading and trailing punctuation).
"""

import re
from typing import List, NamedTuple

from speedreader.models.enums import TokenType

from .constants import PUNCTUATION_CHARS

_PUNCT_CLASS = "[" + re.escape("".join(sorted(PUNCTUATION_CHARS))) + "]"

_WHITESPACE_PATTERN = re.compile(r"^\s+$")
_PUNCTUATION_PATTERN = re.compile(rf"^{_PUNCT_CLASS}+$")
_NUMBER_PATTERN = re.compile(rf"^-?\d+(?:[.,]\d+)?{_PUNCT_CLASS}*$")
_LATIN_LETTER_PATTERN = re.compile(r"[a-zA-Z]")
_CORE_PATTERN = re.compile(rf"^({_PUNCT_CLASS}*)(.*?)({_PUNCT_CLASS}*)$", re.DOTALL)
_SPLIT_PATTERN = re.compile(r"(\s+)")


class CoreSplit(NamedTuple):
    """A token split into leading punctuation, core text and trailing punctuation."""

    leading: str
    core: str
    trailing: str


def classify_token(text: str) -> TokenType:
    """
    Classify raw token text.

    Checks run in priority order: whitespace, punctuation, number, word,
    then other.

    Examples:
        >>> classify_token("   ")
        <TokenType.WHITESPACE: 'whitespace'>
        >>> classify_token("—")
        <TokenType.PUNCTUATION: 'punctuation'>
        >>> classify_token("-3.5,")
        <TokenType.NUMBER: 'number'>
        >>> classify_token('"Hello,"')
        <TokenType.WORD: 'word'>
    """
    if _WHITESPACE_PATTERN.match(text):
        return TokenType.WHITESPACE
    if _PUNCTUATION_PATTERN.match(text):
        return TokenType.PUNCTUATION
    if _NUMBER_PATTERN.match(text):
        return TokenType.NUMBER
    if _LATIN_LETTER_PATTERN.search(text):
        return TokenType.WORD
    return TokenType.OTHER


def split_core(text: str) -> CoreSplit:
    """
    Split text into leading punctuation, core and trailing punctuation.

    Leading punctuation is matched greedily, so a punctuation-only token has
    an empty core and everything in ``leading``.

    Examples:
        >>> split_core('"running,"')
        CoreSplit(leading='"', core='running', trailing=',"')
    """
    match = _CORE_PATTERN.match(text)
    if match is None:
        return CoreSplit("", text, "")
    return CoreSplit(*match.groups())


def split_on_whitespace(text: str) -> List[str]:
    """
    Split text on whitespace runs, keeping the runs as separate parts.

    Empty parts are dropped.

    Examples:
        >>> split_on_whitespace("word, next")
        ['word,', ' ', 'next']
    """
    return [part for part in _SPLIT_PATTERN.split(text) if part]
