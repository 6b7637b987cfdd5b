"""Mood engagement analyzer - mental-health risk from mood check-ins.

Combines self-reported mood intensity with how often the user opened
the app, used here as a proxy for social connectedness.
"""
import logging
from datetime import datetime
from typing import List, Optional, Sequence

from wellwatch.shared.models import (
    MentalHealthIndicators,
    MoodRecord,
    RiskType,
    SocialActivity,
    SubRiskAssessment,
)
from .config import RiskEngineConfig
from .messages import MentalHealthFactor
from .sanitize import intensity_values, sanitize_usage_days
from .scoring import clamp_score, determine_risk_level, round_half_up, rounded_mean

logger = logging.getLogger(__name__)

# Neutral prior when there are no check-ins, so missing data is not
# mistaken for a persistently negative mood.
DEFAULT_MOOD_SCORE = 50

# Intensity 1-5 maps to 20-100
INTENSITY_SCALE = 20


class MoodEngagementAnalyzer:
    """Computes mental-health-risk indicators and score."""

    def __init__(self, config: Optional[RiskEngineConfig] = None):
        self.config = config or RiskEngineConfig()

    def calculate_mental_health_risk(
        self,
        mood_history: Sequence[MoodRecord],
        app_usage_days: int,
        now: Optional[datetime] = None,
    ) -> SubRiskAssessment:
        """Score mental-health risk.

        Args:
            mood_history: Mood check-ins from the last 7 days
            app_usage_days: Distinct days the app was used in the last 7
            now: Timestamp for ``last_updated`` (defaults to utcnow)

        Returns:
            SubRiskAssessment of type MENTAL_HEALTH
        """
        usage_days = sanitize_usage_days(app_usage_days, self.config.app_usage_window_days)

        indicators = MentalHealthIndicators(
            mood_score=self.calculate_mood_score(mood_history),
            social_activity=self.determine_social_activity(usage_days),
            engagement_level=self.calculate_engagement_level(usage_days),
        )

        raw_score = 0
        factors: List[str] = []

        if indicators.mood_score <= 40:
            raw_score += 40
            factors.append(MentalHealthFactor.PERSISTENT_NEGATIVE_MOOD)
        elif indicators.mood_score < 60:
            raw_score += 25
            factors.append(MentalHealthFactor.MOOD_DECLINE)
        elif indicators.mood_score > 80:
            raw_score -= 10

        if indicators.engagement_level < 20:
            raw_score += 30
            factors.append(MentalHealthFactor.LOW_APP_USAGE)
        elif indicators.engagement_level < 40:
            raw_score += 15
            factors.append(MentalHealthFactor.SOMEWHAT_LOW_APP_USAGE)

        if indicators.social_activity == SocialActivity.LOW:
            raw_score += 20
            factors.append(MentalHealthFactor.FEW_SOCIAL_CONNECTIONS)

        score = clamp_score(raw_score)
        level = determine_risk_level(score, self.config.risk_thresholds)

        logger.debug(
            "MENTAL_HEALTH_RISK_CALCULATED",
            extra={
                "mood_count": len(mood_history),
                "app_usage_days": usage_days,
                "score": score,
                "risk_level": level.value,
            }
        )

        return SubRiskAssessment(
            type=RiskType.MENTAL_HEALTH,
            level=level,
            score=score,
            indicators=indicators,
            factors=factors,
            last_updated=now or datetime.utcnow(),
        )

    def calculate_mood_score(self, mood_history: Sequence[MoodRecord]) -> int:
        if not mood_history:
            return DEFAULT_MOOD_SCORE
        return rounded_mean([i * INTENSITY_SCALE for i in intensity_values(mood_history)])

    def determine_social_activity(self, app_usage_days: int) -> SocialActivity:
        if app_usage_days >= 5:
            return SocialActivity.HIGH
        if app_usage_days >= 3:
            return SocialActivity.MODERATE
        return SocialActivity.LOW

    def calculate_engagement_level(self, app_usage_days: int) -> int:
        return round_half_up(app_usage_days / self.config.app_usage_window_days * 100)
