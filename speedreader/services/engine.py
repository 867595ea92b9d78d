"""
RSVP playback engine.

One engine instance is created per reading session and owns the playback
position, speed and state. A periodic ticker calls :meth:`PlaybackEngine.tick`,
which always reads the engine's current attributes, so values captured when
the ticker was started can never go stale.

State machine:
    IDLE/PAUSED --start()--> RAMPING --ramp complete--> PLAYING_CONTINUOUS
    any playing state --pause()--> PAUSED --resume()--> RAMPING
    IDLE/PAUSED --start_temporary()--> PLAYING_TEMPORARY --stop_temporary()--> previous

Reaching the last token pauses playback and marks the engine finished.
The host is expected to serialize calls (a single asyncio loop), so no
locking is done here.
"""

import logging
from typing import Callable, List, Optional, Sequence

from speedreader.config import Settings, get_settings
from speedreader.models.enums import EasingCurve, PlaybackState
from speedreader.schemas.engine import EngineSnapshot
from speedreader.schemas.token import Token
from speedreader.services.clock import monotonic_ms
from speedreader.services.easing import is_ramp_complete, ramp_start_wpm, ramped_wpm
from speedreader.services.scheduler import Ticker
from speedreader.services.timing import (
    TimingCalculator,
    estimate_time_remaining,
    should_advance_token,
)
from speedreader.services.tokenizer.constants import (
    MAX_RAMP_DURATION_MS,
    MIN_RAMP_DURATION_MS,
    TEMPORARY_SPEED_RATIO,
)

logger = logging.getLogger(__name__)

Listener = Callable[[EngineSnapshot], None]

DEFAULT_SKIP_COUNT = 10
MAX_COMMA_PAUSE_MS = 500
MAX_PERIOD_PAUSE_MS = 1000
PLAYBACK_ERROR_MESSAGE = "Unable to continue playback"


def _clamp(value, low, high):
    return max(low, min(high, value))


class PlaybackEngine:
    """
    Drive token advancement for one reading session.

    Example usage:
        >>> engine = PlaybackEngine(clock=lambda: 0)
        >>> engine.load("doc", tokens)
        >>> engine.start()
        >>> engine.tick(now=120)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = monotonic_ms,
        scheduler: Optional[Ticker] = None,
    ):
        self._settings = settings or get_settings()
        self._clock = clock
        self._scheduler = scheduler
        self._listeners: List[Listener] = []
        self._shut_down = False

        self.timing = TimingCalculator(
            natural_pacing_enabled=self._settings.natural_pacing_enabled,
            comma_pause_ms=self._settings.comma_pause_ms,
            period_pause_ms=self._settings.period_pause_ms,
        )
        self.target_wpm = int(
            _clamp(self._settings.default_target_wpm, self._settings.min_wpm, self._settings.max_wpm)
        )
        self.ramp_enabled = self._settings.ramp_enabled
        self.ramp_duration_ms = int(
            _clamp(self._settings.ramp_duration_ms, MIN_RAMP_DURATION_MS, MAX_RAMP_DURATION_MS)
        )
        self.easing_curve = self._resolve_curve(self._settings.easing_curve)
        self._reset_position()

    def _reset_position(self) -> None:
        self.state = PlaybackState.IDLE
        self.doc_id: Optional[str] = None
        self.tokens: Sequence[Token] = ()
        self.current_token_index = 0
        self.current_wpm = ramp_start_wpm(self.target_wpm)
        self.finished = False
        self.error: Optional[str] = None

        self._ramp_start_time: Optional[float] = None
        self._ramp_from_wpm = self.current_wpm
        self._token_start_time: Optional[float] = None
        self._state_before_temporary = PlaybackState.IDLE
        self.paused_at: Optional[float] = None
        self.started_reading_at: Optional[float] = None

    # === Derived state ===

    @property
    def is_playing(self) -> bool:
        return self.state.is_playing

    @property
    def is_paused(self) -> bool:
        return self.state == PlaybackState.PAUSED

    @property
    def total_tokens(self) -> int:
        return len(self.tokens)

    @property
    def current_token(self) -> Optional[Token]:
        if 0 <= self.current_token_index < len(self.tokens):
            return self.tokens[self.current_token_index]
        return None

    @property
    def current_page_num(self) -> int:
        token = self.current_token
        return token.page_num if token is not None else 0

    @property
    def progress_percent(self) -> float:
        if not self.tokens:
            return 0.0
        return self.current_token_index / len(self.tokens) * 100

    @property
    def time_remaining_label(self) -> str:
        remaining = len(self.tokens) - self.current_token_index
        return estimate_time_remaining(remaining, self.current_wpm)

    def snapshot(self) -> EngineSnapshot:
        return EngineSnapshot(
            state=self.state,
            is_playing=self.is_playing,
            is_paused=self.is_paused,
            finished=self.finished,
            doc_id=self.doc_id,
            current_token=self.current_token,
            current_token_index=self.current_token_index,
            current_page_num=self.current_page_num,
            total_tokens=self.total_tokens,
            target_wpm=self.target_wpm,
            current_wpm=self.current_wpm,
            progress_percent=self.progress_percent,
            time_remaining_label=self.time_remaining_label,
            error=self.error,
        )

    # === Listeners ===

    def add_listener(self, listener: Listener) -> None:
        if not self._shut_down and listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> EngineSnapshot:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Engine listener %r failed", listener)
        return snapshot

    # === Loading ===

    def load(self, doc_id: str, tokens: Sequence[Token], start_index: int = 0) -> EngineSnapshot:
        """Install a token stream and park the position at ``start_index``."""
        if self._shut_down:
            logger.warning("Ignoring load of document %s after shutdown", doc_id)
            return self.snapshot()
        self._stop_loop()
        self.doc_id = doc_id
        self.tokens = tuple(tokens)
        self.state = PlaybackState.IDLE
        self.finished = False
        self.error = None
        self.current_token_index = _clamp(start_index, 0, max(0, len(self.tokens) - 1))
        self._token_start_time = None
        self._ramp_start_time = None
        return self._notify()

    def reset(self) -> EngineSnapshot:
        """Drop the stream and return to the initial idle state."""
        self._stop_loop()
        self._reset_position()
        return self._notify()

    # === Playback control ===

    def start(self) -> EngineSnapshot:
        if self._shut_down or self.is_playing:
            return self.snapshot()
        if not self.tokens:
            logger.warning("Cannot start playback: no tokens loaded")
            return self.snapshot()

        if self.finished:
            self.current_token_index = 0
            self.finished = False
        now = self._clock()
        if self.started_reading_at is None:
            self.started_reading_at = now
        self._begin_playback(now)
        return self._notify()

    def pause(self) -> EngineSnapshot:
        if not self.is_playing:
            return self.snapshot()
        self.state = PlaybackState.PAUSED
        self.paused_at = self._clock()
        self._sync_loop()
        return self._notify()

    def resume(self) -> EngineSnapshot:
        """Resume from PAUSED; always re-ramps from the reduced start speed."""
        if self.state != PlaybackState.PAUSED:
            return self.snapshot()
        return self.start()

    def play(self) -> EngineSnapshot:
        return self.start()

    def toggle_playback(self) -> EngineSnapshot:
        if self.is_playing:
            return self.pause()
        return self.play()

    def start_temporary(self) -> EngineSnapshot:
        """Press-and-hold preview at a reduced fixed speed."""
        if self._shut_down or self.is_playing or not self.tokens:
            return self.snapshot()

        if self.finished:
            self.current_token_index = 0
            self.finished = False
        self._state_before_temporary = self.state
        self.state = PlaybackState.PLAYING_TEMPORARY
        self.current_wpm = self.target_wpm * TEMPORARY_SPEED_RATIO
        self._token_start_time = self._clock()
        self._sync_loop()
        return self._notify()

    def stop_temporary(self) -> EngineSnapshot:
        if self.state != PlaybackState.PLAYING_TEMPORARY:
            return self.snapshot()
        self.state = self._state_before_temporary
        if self.state == PlaybackState.PAUSED:
            self.paused_at = self._clock()
        self._sync_loop()
        return self._notify()

    def _begin_playback(self, now: float) -> None:
        if self.ramp_enabled:
            self.state = PlaybackState.RAMPING
            self._ramp_start_time = now
            self._ramp_from_wpm = ramp_start_wpm(self.target_wpm)
            self.current_wpm = self._ramp_from_wpm
        else:
            self.state = PlaybackState.PLAYING_CONTINUOUS
            self._ramp_start_time = None
            self.current_wpm = self.target_wpm
        self.paused_at = None
        self.error = None
        self._token_start_time = now
        self._sync_loop()

    # === Navigation ===

    def seek(self, token_index: int) -> EngineSnapshot:
        """Jump to a token; out-of-range indices are clamped."""
        if not self.tokens:
            return self.snapshot()
        self.current_token_index = _clamp(int(token_index), 0, len(self.tokens) - 1)
        self.finished = False
        self._token_start_time = self._clock()
        return self._notify()

    seek_to = seek

    def skip_forward(self, count: int = DEFAULT_SKIP_COUNT) -> EngineSnapshot:
        return self.seek(self.current_token_index + count)

    def skip_backward(self, count: int = DEFAULT_SKIP_COUNT) -> EngineSnapshot:
        return self.seek(self.current_token_index - count)

    # === Speed and pacing ===

    def set_target_wpm(self, wpm: float) -> EngineSnapshot:
        """
        Change the target speed, clamped to the configured WPM range.

        An in-progress ramp keeps its start speed and curve and only heads
        for the new target.
        """
        self.target_wpm = int(round(_clamp(wpm, self._settings.min_wpm, self._settings.max_wpm)))
        if self.state == PlaybackState.PLAYING_CONTINUOUS:
            self.current_wpm = self.target_wpm
        elif self.state == PlaybackState.PLAYING_TEMPORARY:
            self.current_wpm = self.target_wpm * TEMPORARY_SPEED_RATIO
        elif not self.is_playing:
            self.current_wpm = ramp_start_wpm(self.target_wpm) if self.ramp_enabled else self.target_wpm
        return self._notify()

    set_wpm = set_target_wpm

    def set_easing_curve(self, curve) -> EngineSnapshot:
        self.easing_curve = self._resolve_curve(curve)
        return self._notify()

    def set_ramp_duration(self, duration_ms: int) -> EngineSnapshot:
        self.ramp_duration_ms = int(_clamp(duration_ms, MIN_RAMP_DURATION_MS, MAX_RAMP_DURATION_MS))
        return self._notify()

    def set_ramp_enabled(self, enabled: bool) -> EngineSnapshot:
        self.ramp_enabled = bool(enabled)
        return self._notify()

    def toggle_natural_pacing(self) -> EngineSnapshot:
        self.timing.natural_pacing_enabled = not self.timing.natural_pacing_enabled
        return self._notify()

    def set_comma_pause_ms(self, ms: int) -> EngineSnapshot:
        self.timing.comma_pause_ms = int(_clamp(ms, 0, MAX_COMMA_PAUSE_MS))
        return self._notify()

    def set_period_pause_ms(self, ms: int) -> EngineSnapshot:
        self.timing.period_pause_ms = int(_clamp(ms, 0, MAX_PERIOD_PAUSE_MS))
        return self._notify()

    @staticmethod
    def _resolve_curve(curve) -> EasingCurve:
        try:
            return EasingCurve(curve)
        except ValueError:
            logger.warning("Unknown easing curve %r, using linear", curve)
            return EasingCurve.LINEAR

    # === Tick loop ===

    def tick(self, now: Optional[float] = None) -> bool:
        """
        Run one step of the playback loop.

        Advances at most one token. Unexpected errors are logged and pause
        playback instead of propagating into the scheduler.

        Returns:
            True if the position advanced.
        """
        if self._shut_down or not self.is_playing:
            return False
        now = self._clock() if now is None else now
        try:
            return self._step(now)
        except Exception:
            logger.exception("Unexpected error during playback tick")
            self._self_pause(now)
            return False

    def _step(self, now: float) -> bool:
        token = self.current_token
        if token is None:
            logger.warning(
                "No token at index %d of %d, pausing playback",
                self.current_token_index,
                len(self.tokens),
            )
            self._self_pause(now)
            return False

        changed = False
        if self.state == PlaybackState.RAMPING:
            elapsed = now - (self._ramp_start_time if self._ramp_start_time is not None else now)
            self.current_wpm = ramped_wpm(
                self._ramp_from_wpm,
                self.target_wpm,
                elapsed,
                self.ramp_duration_ms,
                self.easing_curve,
            )
            if is_ramp_complete(elapsed, self.ramp_duration_ms):
                self.state = PlaybackState.PLAYING_CONTINUOUS
                self.current_wpm = self.target_wpm
            changed = True

        if self._token_start_time is None:
            self._token_start_time = now
        duration = self.timing.calculate(token, self.current_wpm)
        if not should_advance_token(
            now - self._token_start_time, duration, self._settings.timing_tolerance_ms
        ):
            if changed:
                self._notify()
            return False

        if self.current_token_index >= len(self.tokens) - 1:
            self._finish(now)
            return False

        self.current_token_index += 1
        self._token_start_time = now
        self._notify()
        return True

    def _finish(self, now: float) -> None:
        logger.info("Reached end of document %s", self.doc_id)
        self.state = PlaybackState.PAUSED
        self.finished = True
        self.paused_at = now
        self._sync_loop()
        self._notify()

    def _self_pause(self, now: float) -> None:
        self.state = PlaybackState.PAUSED
        self.paused_at = now
        self.error = PLAYBACK_ERROR_MESSAGE
        self._sync_loop()
        self._notify()

    def _sync_loop(self) -> None:
        if self._scheduler is None:
            return
        if self.is_playing and not self._shut_down:
            if not self._scheduler.running:
                self._scheduler.start(self.tick)
        else:
            self._stop_loop()

    def _stop_loop(self) -> None:
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.stop()

    def shutdown(self) -> EngineSnapshot:
        """
        Stop the tick loop for good.

        Playback is paused first so listeners see a final PAUSED snapshot;
        after this, ticks, loads and starts are ignored and listeners are
        dropped.
        """
        if self.is_playing:
            self.pause()
        self._shut_down = True
        self._stop_loop()
        snapshot = self.snapshot()
        self._listeners.clear()
        return snapshot
