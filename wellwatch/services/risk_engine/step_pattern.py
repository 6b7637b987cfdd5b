"""Step pattern analyzer - fall risk from the last 7 days of steps.

A sharp drop in daily steps, erratic day-to-day activity and overall
low activity are each associated with higher fall risk in older adults.
"""
import logging
from datetime import datetime
from typing import List, Optional, Sequence

from wellwatch.shared.models import (
    DailyStepRecord,
    FallIndicators,
    RiskType,
    SubRiskAssessment,
)
from .config import RiskEngineConfig
from .messages import FallFactor
from .sanitize import step_values
from .scoring import (
    clamp_score,
    coefficient_of_variation,
    determine_risk_level,
    rounded_mean,
)

logger = logging.getLogger(__name__)

STEP_DECLINE_POINTS = 35
IRREGULAR_PATTERN_POINTS = 25
LOW_ACTIVITY_POINTS = 30

# Days compared at each end of the window for decline detection
DECLINE_WINDOW = 3


class StepPatternAnalyzer:
    """Computes fall-risk indicators and score.

    Input is a chronologically ordered list of daily records, ideally 7
    consecutive days. Shorter series are accepted; fewer points means
    fewer detectable conditions.
    """

    def __init__(self, config: Optional[RiskEngineConfig] = None):
        self.config = config or RiskEngineConfig()

    def calculate_fall_risk(
        self,
        weekly_steps: Sequence[DailyStepRecord],
        now: Optional[datetime] = None,
    ) -> SubRiskAssessment:
        """Score fall risk from a weekly step series.

        Args:
            weekly_steps: Daily records, oldest first
            now: Timestamp for ``last_updated`` (defaults to utcnow)

        Returns:
            SubRiskAssessment of type FALL
        """
        steps = step_values(weekly_steps)

        indicators = FallIndicators(
            step_decline=self.detect_step_decline(steps),
            irregular_pattern=self.detect_irregular_pattern(steps),
            low_activity=self.detect_low_activity(steps),
            consistency_score=self.calculate_consistency_score(steps),
        )

        raw_score = 0.0
        factors: List[str] = []

        if indicators.step_decline:
            raw_score += STEP_DECLINE_POINTS
            factors.append(FallFactor.STEP_DECLINE)

        if indicators.irregular_pattern:
            raw_score += IRREGULAR_PATTERN_POINTS
            factors.append(FallFactor.IRREGULAR_PATTERN)

        if indicators.low_activity:
            raw_score += LOW_ACTIVITY_POINTS
            factors.append(FallFactor.LOW_ACTIVITY)

        # Less consistent walking adds a small continuous penalty
        raw_score += max(0.0, 100 - indicators.consistency_score) * self.config.consistency_penalty_weight

        score = clamp_score(raw_score)
        level = determine_risk_level(score, self.config.risk_thresholds)

        logger.debug(
            "FALL_RISK_CALCULATED",
            extra={
                "record_count": len(steps),
                "score": score,
                "risk_level": level.value,
                "factor_count": len(factors),
            }
        )

        return SubRiskAssessment(
            type=RiskType.FALL,
            level=level,
            score=score,
            indicators=indicators,
            factors=factors,
            last_updated=now or datetime.utcnow(),
        )

    def detect_step_decline(self, steps: Sequence[int]) -> bool:
        """True when the last 3 days average under half of the first 3."""
        if len(steps) < 2:
            return False

        first_avg = rounded_mean(steps[:DECLINE_WINDOW])
        last_avg = rounded_mean(steps[-DECLINE_WINDOW:])
        return last_avg < first_avg * self.config.decline_ratio

    def detect_irregular_pattern(self, steps: Sequence[int]) -> bool:
        """True when the coefficient of variation exceeds 0.5."""
        if len(steps) < 3:
            return False
        return coefficient_of_variation(steps) > self.config.irregular_cv_threshold

    def detect_low_activity(self, steps: Sequence[int]) -> bool:
        return rounded_mean(steps) < self.config.activity_thresholds.low

    def calculate_consistency_score(self, steps: Sequence[int]) -> float:
        """0-100 regularity score, ``100 - 100 * CV``; 0 with no activity."""
        if not steps or sum(steps) == 0:
            return 0.0
        cv = coefficient_of_variation(steps)
        return max(0.0, min(100.0, 100 - cv * 100))
