"""Arithmetic shared by the three analyzers."""
import math
from typing import Sequence

from wellwatch.shared.models import RiskLevel
from .config import RiskThresholds

DEFAULT_THRESHOLDS = RiskThresholds()


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (2.5 -> 3), unlike ``round``."""
    return int(math.floor(value + 0.5))


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, 0.0 for an empty sequence."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def rounded_mean(values: Sequence[float]) -> int:
    """Mean rounded to a whole number of steps/points."""
    return round_half_up(mean(values))


def coefficient_of_variation(values: Sequence[float]) -> float:
    """Population standard deviation divided by the mean.

    Returns 0.0 for an empty sequence or a zero mean.
    """
    avg = mean(values)
    if avg == 0:
        return 0.0
    variance = sum((v - avg) ** 2 for v in values) / len(values)
    return math.sqrt(variance) / avg


def clamp_score(score: float) -> int:
    """Round then clamp into 0-100."""
    return min(100, max(0, round_half_up(score)))


def determine_risk_level(
    score: float,
    thresholds: RiskThresholds = DEFAULT_THRESHOLDS,
) -> RiskLevel:
    """Map a 0-100 score to a level: <30 LOW, <60 MEDIUM, else HIGH."""
    if score < thresholds.low:
        return RiskLevel.LOW
    if score < thresholds.medium:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH
