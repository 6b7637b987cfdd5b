"""Risk aggregator - combines the three domain assessments.

The aggregator is stateless apart from its injected collaborators: each
call builds a fresh OverallRiskAssessment from the data it is handed.
The mood history is the only input it fetches itself, and a failed fetch
aborts the assessment rather than scoring mental health on missing data.
"""
import logging
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from wellwatch.shared.models import (
    DailyStepRecord,
    MoodRecord,
    OverallRiskAssessment,
    RiskLevel,
    SaveResult,
    SubRiskAssessment,
    max_level,
    next_assessment_after,
)
from .config import RiskEngineConfig
from .errors import MoodHistoryUnavailableError
from .frailty_trend import FrailtyTrendAnalyzer
from .messages import Recommendation
from .mood_engagement import MoodEngagementAnalyzer
from .step_pattern import StepPatternAnalyzer

logger = logging.getLogger(__name__)

# Engagement level (percent) below which users are nudged to log moods
LOW_ENGAGEMENT_FOR_RECOMMENDATION = 30


class RiskAggregator:
    """Runs the analyzers and builds the overall assessment.

    Collaborators:
        mood_source: object with ``get_mood_history(user_id, days)``
        assessment_store: object with ``save_assessment(assessment)``
            returning a SaveResult
    """

    def __init__(
        self,
        mood_source=None,
        assessment_store=None,
        config: Optional[RiskEngineConfig] = None,
        step_analyzer: Optional[StepPatternAnalyzer] = None,
        frailty_analyzer: Optional[FrailtyTrendAnalyzer] = None,
        mood_analyzer: Optional[MoodEngagementAnalyzer] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.config = config or RiskEngineConfig()
        self.mood_source = mood_source
        self.assessment_store = assessment_store
        self.step_analyzer = step_analyzer or StepPatternAnalyzer(self.config)
        self.frailty_analyzer = frailty_analyzer or FrailtyTrendAnalyzer(self.config)
        self.mood_analyzer = mood_analyzer or MoodEngagementAnalyzer(self.config)
        self.clock = clock

    def calculate_overall_risk(
        self,
        user_id: str,
        weekly_steps: Sequence[DailyStepRecord],
        monthly_steps: Sequence[DailyStepRecord],
        step_target: int,
        app_usage_days: int,
        mood_history: Optional[Sequence[MoodRecord]] = None,
    ) -> OverallRiskAssessment:
        """Compute a complete assessment for one user.

        Args:
            user_id: User the assessment is for
            weekly_steps: Last 7 days of steps, oldest first
            monthly_steps: Last 30 days of steps, oldest first
            step_target: Daily step goal
            app_usage_days: Distinct app-usage days in the last 7
            mood_history: Pre-fetched mood check-ins; fetched from
                ``mood_source`` when omitted

        Returns:
            OverallRiskAssessment (not persisted)

        Raises:
            MoodHistoryUnavailableError: If the mood history fetch fails
        """
        if mood_history is None:
            mood_history = self._fetch_mood_history(user_id)

        assessment_date = self.clock()

        fall_risk = self.step_analyzer.calculate_fall_risk(weekly_steps, now=assessment_date)
        frailty_risk = self.frailty_analyzer.calculate_frailty_risk(
            monthly_steps, step_target, now=assessment_date
        )
        mental_health_risk = self.mood_analyzer.calculate_mental_health_risk(
            mood_history, app_usage_days, now=assessment_date
        )

        return self.assemble(
            user_id=user_id,
            fall_risk=fall_risk,
            frailty_risk=frailty_risk,
            mental_health_risk=mental_health_risk,
            assessment_date=assessment_date,
        )

    def assemble(
        self,
        user_id: str,
        fall_risk: SubRiskAssessment,
        frailty_risk: SubRiskAssessment,
        mental_health_risk: SubRiskAssessment,
        assessment_date: Optional[datetime] = None,
    ) -> OverallRiskAssessment:
        """Combine already-computed sub-assessments."""
        assessment_date = assessment_date or self.clock()
        overall_level = max_level([fall_risk.level, frailty_risk.level, mental_health_risk.level])

        assessment = OverallRiskAssessment(
            user_id=user_id,
            assessment_date=assessment_date,
            fall_risk=fall_risk,
            frailty_risk=frailty_risk,
            mental_health_risk=mental_health_risk,
            overall_level=overall_level,
            recommendations=self.generate_recommendations(
                fall_risk, frailty_risk, mental_health_risk
            ),
            next_assessment_date=next_assessment_after(
                assessment_date, self.config.assessment_interval_days
            ),
        )

        logger.info(
            "OVERALL_RISK_CALCULATED",
            extra={
                "overall_level": overall_level.value,
                "fall_score": fall_risk.score,
                "frailty_score": frailty_risk.score,
                "mental_health_score": mental_health_risk.score,
                "recommendation_count": len(assessment.recommendations),
            }
        )

        return assessment

    def generate_recommendations(
        self,
        fall_risk: SubRiskAssessment,
        frailty_risk: SubRiskAssessment,
        mental_health_risk: SubRiskAssessment,
    ) -> List[str]:
        """Guidance in fixed fall -> frailty -> mental health order.

        Never empty: falls back to two maintenance recommendations.
        """
        recommendations: List[str] = []

        if fall_risk.level == RiskLevel.HIGH:
            recommendations.append(Recommendation.FALL_HIGH)
            if fall_risk.indicators.irregular_pattern:
                recommendations.append(Recommendation.FALL_IRREGULAR)
        elif fall_risk.level == RiskLevel.MEDIUM:
            recommendations.append(Recommendation.FALL_MEDIUM)

        if frailty_risk.level == RiskLevel.HIGH:
            recommendations.append(Recommendation.FRAILTY_HIGH)
            if frailty_risk.indicators.activity_days < 3:
                recommendations.append(Recommendation.FRAILTY_FEW_ACTIVE_DAYS)
        elif frailty_risk.level == RiskLevel.MEDIUM:
            recommendations.append(Recommendation.FRAILTY_MEDIUM)

        if mental_health_risk.level == RiskLevel.HIGH:
            recommendations.append(Recommendation.MENTAL_HIGH)
            if mental_health_risk.indicators.engagement_level < LOW_ENGAGEMENT_FOR_RECOMMENDATION:
                recommendations.append(Recommendation.MENTAL_LOW_ENGAGEMENT)

        if not recommendations:
            recommendations.append(Recommendation.MAINTAIN_ACTIVITY)
            recommendations.append(Recommendation.CONTINUE_CHECKS)

        return recommendations

    def save_assessment(self, assessment: OverallRiskAssessment) -> SaveResult:
        """Persist through the assessment store.

        A failed save never invalidates the computed assessment; callers
        retry the save on its own.
        """
        if self.assessment_store is None:
            logger.warning("ASSESSMENT_SAVE_SKIPPED", extra={"reason": "no_assessment_store"})
            return SaveResult(success=False, error="no assessment store configured")

        try:
            result = self.assessment_store.save_assessment(assessment)
        except Exception as e:
            logger.error(
                "ASSESSMENT_SAVE_FAILED",
                extra={
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "overall_level": assessment.overall_level.value,
                }
            )
            return SaveResult(success=False, error=str(e))

        return result

    def _fetch_mood_history(self, user_id: str) -> List[MoodRecord]:
        if self.mood_source is None:
            raise MoodHistoryUnavailableError("no mood source configured")

        try:
            return list(self.mood_source.get_mood_history(user_id, self.config.mood_window_days))
        except Exception as e:
            logger.error(
                "MOOD_HISTORY_FETCH_FAILED",
                extra={"error": str(e), "error_type": type(e).__name__}
            )
            raise MoodHistoryUnavailableError("mood history could not be fetched") from e
