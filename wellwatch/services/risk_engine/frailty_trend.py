"""Frailty trend analyzer - frailty risk from up to 30 days of steps.

Looks at the most recent week against the user's step target and at the
direction of the month-long trend.
"""
import logging
from datetime import datetime
from typing import List, Optional, Sequence

from wellwatch.shared.models import (
    DailyStepRecord,
    FrailtyIndicators,
    MonthlyTrend,
    RiskType,
    SubRiskAssessment,
)
from .config import RiskEngineConfig
from .messages import FrailtyFactor
from .sanitize import step_values
from .scoring import clamp_score, determine_risk_level, round_half_up, rounded_mean

logger = logging.getLogger(__name__)


class FrailtyTrendAnalyzer:
    """Computes frailty-risk indicators and score."""

    def __init__(self, config: Optional[RiskEngineConfig] = None):
        self.config = config or RiskEngineConfig()

    def calculate_frailty_risk(
        self,
        monthly_steps: Sequence[DailyStepRecord],
        step_target: int,
        now: Optional[datetime] = None,
    ) -> SubRiskAssessment:
        """Score frailty risk.

        Args:
            monthly_steps: Up to 30 daily records, oldest first
            step_target: The user's daily step goal
            now: Timestamp for ``last_updated`` (defaults to utcnow)

        Returns:
            SubRiskAssessment of type FRAILTY
        """
        steps = step_values(monthly_steps)
        recent = steps[-self.config.weekly_window_days:]

        indicators = FrailtyIndicators(
            weekly_average=rounded_mean(recent),
            monthly_trend=self.calculate_monthly_trend(steps),
            activity_days=self.count_activity_days(recent),
            goal_achievement_rate=self.calculate_goal_achievement_rate(recent, step_target),
        )

        thresholds = self.config.activity_thresholds
        raw_score = 0
        factors: List[str] = []

        if indicators.weekly_average < thresholds.very_low:
            raw_score += 40
            factors.append(FrailtyFactor.VERY_LOW_ACTIVITY)
        elif indicators.weekly_average < thresholds.low:
            raw_score += 30
            factors.append(FrailtyFactor.LOW_ACTIVITY)
        elif indicators.weekly_average < thresholds.moderate:
            raw_score += 15

        if indicators.monthly_trend == MonthlyTrend.DECLINING:
            raw_score += 25
            factors.append(FrailtyFactor.DECLINING_TREND)
        elif indicators.monthly_trend == MonthlyTrend.IMPROVING:
            raw_score -= 10

        if indicators.activity_days < 3:
            raw_score += 30
            factors.append(FrailtyFactor.FEW_ACTIVE_DAYS)
        elif indicators.activity_days < 5:
            raw_score += 15
            factors.append(FrailtyFactor.SOMEWHAT_FEW_ACTIVE_DAYS)

        if indicators.goal_achievement_rate < 30:
            raw_score += 20
            factors.append(FrailtyFactor.LOW_GOAL_ACHIEVEMENT)
        elif indicators.goal_achievement_rate > 70:
            raw_score -= 10

        # Intermediate sums may go negative; clamp only the final value
        score = clamp_score(raw_score)
        level = determine_risk_level(score, self.config.risk_thresholds)

        logger.debug(
            "FRAILTY_RISK_CALCULATED",
            extra={
                "record_count": len(steps),
                "step_target": step_target,
                "monthly_trend": indicators.monthly_trend.value,
                "score": score,
                "risk_level": level.value,
            }
        )

        return SubRiskAssessment(
            type=RiskType.FRAILTY,
            level=level,
            score=score,
            indicators=indicators,
            factors=factors,
            last_updated=now or datetime.utcnow(),
        )

    def calculate_monthly_trend(self, steps: Sequence[int]) -> MonthlyTrend:
        """Compare the first and second halves of the series.

        Needs at least 14 days; shorter series are reported as STABLE.
        """
        if len(steps) < self.config.trend_min_records:
            return MonthlyTrend.STABLE

        midpoint = len(steps) // 2
        first_avg = rounded_mean(steps[:midpoint])
        second_avg = rounded_mean(steps[midpoint:])
        change = self.config.trend_change_ratio

        if second_avg > first_avg * (1 + change):
            return MonthlyTrend.IMPROVING
        if second_avg < first_avg * (1 - change):
            return MonthlyTrend.DECLINING
        return MonthlyTrend.STABLE

    def count_activity_days(self, steps: Sequence[int]) -> int:
        return sum(1 for s in steps if s >= self.config.activity_thresholds.very_low)

    def calculate_goal_achievement_rate(self, steps: Sequence[int], step_target: int) -> int:
        """Percentage of days meeting the target, 0 when target <= 0."""
        if not steps or step_target is None or step_target <= 0:
            return 0
        achieved = sum(1 for s in steps if s >= step_target)
        return round_half_up(achieved / len(steps) * 100)
