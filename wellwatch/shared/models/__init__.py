"""Shared domain models for the WellWatch platform."""
from .risk import (
    RiskLevel,
    RiskType,
    MonthlyTrend,
    SocialActivity,
    DailyStepRecord,
    MoodRecord,
    FallIndicators,
    FrailtyIndicators,
    MentalHealthIndicators,
    SubRiskAssessment,
    OverallRiskAssessment,
    SaveResult,
    max_level,
    next_assessment_after,
)
from .settings import NotificationSettings

__all__ = [
    "RiskLevel",
    "RiskType",
    "MonthlyTrend",
    "SocialActivity",
    "DailyStepRecord",
    "MoodRecord",
    "FallIndicators",
    "FrailtyIndicators",
    "MentalHealthIndicators",
    "SubRiskAssessment",
    "OverallRiskAssessment",
    "SaveResult",
    "max_level",
    "next_assessment_after",
    "NotificationSettings",
]
