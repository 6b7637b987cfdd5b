"""Defensive clamping of collaborator-supplied values.

Negative or non-finite step counts, out-of-range mood intensities and
impossible usage-day counts are caller contract violations. They are
clamped here so a bad record degrades one indicator instead of failing
the whole assessment.
"""
import math
from typing import Any, Iterable, List

from wellwatch.shared.models import DailyStepRecord, MoodRecord
from .scoring import round_half_up

MIN_INTENSITY = 1
MAX_INTENSITY = 5
NEUTRAL_INTENSITY = 3


def _as_finite_float(value: Any):
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def sanitize_steps(value: Any) -> int:
    """Step count as a non-negative int; junk becomes 0."""
    number = _as_finite_float(value)
    if number is None or number < 0:
        return 0
    return int(number)


def sanitize_intensity(value: Any) -> int:
    """Mood intensity clamped to 1-5; junk becomes the neutral 3."""
    number = _as_finite_float(value)
    if number is None:
        return NEUTRAL_INTENSITY
    return min(MAX_INTENSITY, max(MIN_INTENSITY, round_half_up(number)))


def sanitize_usage_days(value: Any, window_days: int = 7) -> int:
    """Distinct app-usage days clamped to 0..window_days."""
    number = _as_finite_float(value)
    if number is None:
        return 0
    return min(window_days, max(0, int(number)))


def step_values(records: Iterable[DailyStepRecord]) -> List[int]:
    return [sanitize_steps(record.steps) for record in records]


def intensity_values(records: Iterable[MoodRecord]) -> List[int]:
    return [sanitize_intensity(record.intensity) for record in records]
