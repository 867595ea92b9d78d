"""Millisecond clocks used by the engine and the stores."""

import time
from typing import Callable

Clock = Callable[[], float]


def monotonic_ms() -> float:
    """Monotonic time in milliseconds, for measuring elapsed playback time."""
    return time.monotonic() * 1000


def epoch_ms() -> int:
    """Wall-clock time in epoch milliseconds, for persisted timestamps."""
    return int(time.time() * 1000)
