"""Risk Engine: wellbeing risk scoring for elderly users.

Converts daily step counts, mood check-ins and app-usage counts into
three independent 0-100 risk scores and one overall assessment.

- StepPatternAnalyzer: fall risk from the last 7 days of steps
- FrailtyTrendAnalyzer: frailty risk from 30 days of steps and a target
- MoodEngagementAnalyzer: mental-health risk from mood and app usage
- RiskAggregator: overall level (max of the three) and recommendations

Endpoints:
- POST /assessments/calculate - Compute from supplied data
- POST /assessments/<user_id>/run - Fetch, compute, save, alert
- GET /assessments/<user_id>/latest - Last stored assessment
- GET /health - Health check
"""

from .aggregator import RiskAggregator
from .config import ActivityThresholds, RiskEngineConfig, RiskServiceConfig, RiskThresholds
from .errors import HealthDataUnavailableError, MoodHistoryUnavailableError, RiskEngineError
from .frailty_trend import FrailtyTrendAnalyzer
from .handler import AssessmentOutcome, RiskAssessmentHandler
from .messages import describe_risk
from .mood_engagement import MoodEngagementAnalyzer
from .scoring import determine_risk_level
from .step_pattern import StepPatternAnalyzer

__all__ = [
    "RiskAggregator",
    "ActivityThresholds",
    "RiskEngineConfig",
    "RiskServiceConfig",
    "RiskThresholds",
    "HealthDataUnavailableError",
    "MoodHistoryUnavailableError",
    "RiskEngineError",
    "FrailtyTrendAnalyzer",
    "AssessmentOutcome",
    "RiskAssessmentHandler",
    "describe_risk",
    "MoodEngagementAnalyzer",
    "determine_risk_level",
    "StepPatternAnalyzer",
]
