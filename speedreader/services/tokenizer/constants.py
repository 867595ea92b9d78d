"""
Tokenizer constants for RSVP text processing.

This module contains the punctuation sets, ORP ratio and timing values used
by the tokenizer and the timing model.
"""

# Tokenizer version - increment when logic changes. Stored with each token
# cache entry; a mismatch invalidates the cached stream.
TOKENIZER_VERSION = "2.0.0"

# -----------------------------------------------------------------------------
# Punctuation
# -----------------------------------------------------------------------------

EM_DASH = "—"  # —
EN_DASH = "–"  # –
ELLIPSIS = "…"  # …

# Characters that make up punctuation-only tokens and that are stripped
# when locating a token's core for ORP placement.
PUNCTUATION_CHARS = frozenset(
    ".,;:!?"
    + EM_DASH
    + EN_DASH
    + "-"
    + "\"'`"
    + "()[]{}"
    + ELLIPSIS
)

# Sentence-ending punctuation (full period pause)
SENTENCE_ENDERS = frozenset(".!?")

# Clause punctuation (75% of the period pause)
CLAUSE_PUNCTUATION = frozenset(";:")

COMMA = ","

# Dashes (twice the comma pause)
DASHES = frozenset({EM_DASH, EN_DASH, "-"})

# -----------------------------------------------------------------------------
# ORP
# -----------------------------------------------------------------------------

# Fraction of the core word length at which the ORP sits
ORP_RATIO = 0.35

# -----------------------------------------------------------------------------
# Timing
# -----------------------------------------------------------------------------

MS_PER_MINUTE = 60_000

# Clause pause as a share of the period pause
CLAUSE_PAUSE_RATIO = 0.75

# Dash pause as a multiple of the comma pause
DASH_PAUSE_MULTIPLIER = 2

# Word-length penalties (characters -> extra milliseconds)
LONG_WORD_THRESHOLD = 8
LONG_WORD_PENALTY_MS = 50
VERY_LONG_WORD_THRESHOLD = 13
VERY_LONG_WORD_PENALTY_MS = 100

# Tokens are advanced this many milliseconds early at most
TIMING_TOLERANCE_MS = 10

# -----------------------------------------------------------------------------
# Speed ramping
# -----------------------------------------------------------------------------

# Playback always starts at this share of the target speed
RAMP_START_RATIO = 0.6

# Press-and-hold preview runs at this share of the target speed
TEMPORARY_SPEED_RATIO = 0.7

DEFAULT_RAMP_DURATION_MS = 2000
MIN_RAMP_DURATION_MS = 500
MAX_RAMP_DURATION_MS = 5000

# Sigmoid easing steepness
SIGMOID_STEEPNESS = 10
