"""
Tokenizer package for RSVP text processing.

This package turns extracted page text into the token stream, including:
- tokenizer: TokenStreamBuilder and generate_token_stream (primary entry point)
- orp: ORP calculation and display splits
- text_utils: token classification and punctuation stripping
- constants: punctuation sets, ORP ratio and timing values

Primary usage:
    >>> from speedreader.services.tokenizer import generate_token_stream
    >>> tokens = generate_token_stream({1: {"text": "Hello world."}}, "doc-1")
"""

from .constants import ORP_RATIO, PUNCTUATION_CHARS, TOKENIZER_VERSION
from .orp import ORPCalculator, ORPSplit, calculate_orp_index, split_by_orp
from .text_utils import classify_token, split_core, split_on_whitespace
from .tokenizer import (
    COUNTED_TOKEN_TYPES,
    TokenStreamBuilder,
    count_words,
    find_first_token_on_page,
    generate_token_id,
    generate_token_stream,
    get_context_snippet,
    should_apply_orp,
    tokenize_text,
)


def get_tokenizer_version() -> str:
    """Return the current tokenizer version string."""
    return TOKENIZER_VERSION


__all__ = [
    # Main pipeline (primary API)
    "TokenStreamBuilder",
    "generate_token_stream",
    "generate_token_id",
    "tokenize_text",
    "get_tokenizer_version",
    # Stream helpers
    "COUNTED_TOKEN_TYPES",
    "count_words",
    "find_first_token_on_page",
    "get_context_snippet",
    "should_apply_orp",
    # ORP
    "ORPCalculator",
    "ORPSplit",
    "calculate_orp_index",
    "split_by_orp",
    # Classification
    "classify_token",
    "split_core",
    "split_on_whitespace",
    # Constants
    "ORP_RATIO",
    "PUNCTUATION_CHARS",
    "TOKENIZER_VERSION",
]
