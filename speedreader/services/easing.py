"""Easing curves and speed-ramp interpolation."""

import math
from typing import Union

from speedreader.models.enums import EasingCurve
from speedreader.services.tokenizer.constants import RAMP_START_RATIO, SIGMOID_STEEPNESS

CurveName = Union[EasingCurve, str]


def _resolve_curve(curve: CurveName) -> EasingCurve:
    try:
        return EasingCurve(curve)
    except ValueError:
        return EasingCurve.LINEAR


def apply_easing(progress: float, curve: CurveName) -> float:
    """
    Apply an easing curve to a progress value.

    Progress is clamped to [0, 1]. Unknown curve names fall back to linear.

    Examples:
        >>> apply_easing(0.5, "linear")
        0.5
        >>> apply_easing(0.5, "easeOutQuad")
        0.75
    """
    t = max(0.0, min(1.0, progress))
    resolved = _resolve_curve(curve)

    if resolved == EasingCurve.EASE_OUT_QUAD:
        return 1 - (1 - t) ** 2

    if resolved == EasingCurve.EASE_IN_OUT_CUBIC:
        if t < 0.5:
            return 4 * t ** 3
        return 1 - (-2 * t + 2) ** 3 / 2

    if resolved == EasingCurve.SIGMOID:
        return 1 / (1 + math.exp(-SIGMOID_STEEPNESS * (t - 0.5)))

    return t


def ramp_start_wpm(target_wpm: float) -> float:
    """Playback begins at a fixed share of the target speed."""
    return target_wpm * RAMP_START_RATIO


def is_ramp_complete(elapsed_ms: float, duration_ms: float) -> bool:
    return duration_ms <= 0 or elapsed_ms >= duration_ms


def ramped_wpm(
    start_wpm: float,
    target_wpm: float,
    elapsed_ms: float,
    duration_ms: float,
    curve: CurveName,
) -> float:
    """
    Interpolate the reading speed during a ramp.

    Args:
        start_wpm: Speed at the start of the ramp.
        target_wpm: Speed reached when the ramp completes.
        elapsed_ms: Time since the ramp started.
        duration_ms: Total ramp duration.
        curve: Easing curve name.

    Returns:
        Current WPM; exactly ``target_wpm`` once the ramp is complete.
    """
    if is_ramp_complete(elapsed_ms, duration_ms):
        return target_wpm

    eased = apply_easing(elapsed_ms / duration_ms, curve)
    return start_wpm + (target_wpm - start_wpm) * eased
