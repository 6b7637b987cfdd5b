"""Risk level and wellbeing assessment domain models.

This file defines the core enums and data structures shared by the risk
engine, the alert service and the persistence layer. Assessments are value
objects: created fresh on each computation and never mutated afterwards.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union


class RiskLevel(Enum):
    """Risk classification levels, totally ordered LOW < MEDIUM < HIGH.

    Comparisons go through ``rank`` rather than the string values so that
    "high" < "low" style string-ordering bugs cannot happen.
    """
    LOW = "low"             # Score 0-29: no notification
    MEDIUM = "medium"       # Score 30-59: check-in notification
    HIGH = "high"           # Score 60-100: alert notification

    @property
    def rank(self) -> int:
        return _LEVEL_RANK[self]

    def __lt__(self, other):
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank >= other.rank


_LEVEL_RANK = {
    RiskLevel.LOW: 0,
    RiskLevel.MEDIUM: 1,
    RiskLevel.HIGH: 2,
}


def max_level(levels: Iterable[RiskLevel]) -> RiskLevel:
    """Return the most severe level, LOW for an empty iterable."""
    return max(levels, key=lambda level: level.rank, default=RiskLevel.LOW)


class RiskType(Enum):
    """Assessment domains."""
    FALL = "fall"
    FRAILTY = "frailty"
    MENTAL_HEALTH = "mentalHealth"


class MonthlyTrend(Enum):
    """Direction of the 30-day activity trend."""
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class SocialActivity(Enum):
    """Social activity inferred from app usage days."""
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"


@dataclass(frozen=True)
class DailyStepRecord:
    """Total steps for one calendar day (date is YYYY-MM-DD)."""
    date: str
    steps: int

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "steps": self.steps}


@dataclass(frozen=True)
class MoodRecord:
    """One mood check-in. Only ``intensity`` (1-5) feeds the risk engine."""
    id: str
    user_id: str
    intensity: int
    created_at: datetime
    mood_label: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "intensity": self.intensity,
            "created_at": self.created_at.isoformat(),
            "mood_label": self.mood_label,
        }


@dataclass(frozen=True)
class FallIndicators:
    step_decline: bool
    irregular_pattern: bool
    low_activity: bool
    consistency_score: float    # 0-100, higher is more regular

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step_decline": self.step_decline,
            "irregular_pattern": self.irregular_pattern,
            "low_activity": self.low_activity,
            "consistency_score": self.consistency_score,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FallIndicators":
        return cls(
            step_decline=bool(data["step_decline"]),
            irregular_pattern=bool(data["irregular_pattern"]),
            low_activity=bool(data["low_activity"]),
            consistency_score=float(data["consistency_score"]),
        )


@dataclass(frozen=True)
class FrailtyIndicators:
    weekly_average: int
    monthly_trend: MonthlyTrend
    activity_days: int
    goal_achievement_rate: int  # 0-100 percent

    def to_dict(self) -> Dict[str, Any]:
        return {
            "weekly_average": self.weekly_average,
            "monthly_trend": self.monthly_trend.value,
            "activity_days": self.activity_days,
            "goal_achievement_rate": self.goal_achievement_rate,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FrailtyIndicators":
        return cls(
            weekly_average=int(data["weekly_average"]),
            monthly_trend=MonthlyTrend(data["monthly_trend"]),
            activity_days=int(data["activity_days"]),
            goal_achievement_rate=int(data["goal_achievement_rate"]),
        )


@dataclass(frozen=True)
class MentalHealthIndicators:
    mood_score: int             # 0-100, 50 when no check-ins
    social_activity: SocialActivity
    engagement_level: int       # 0-100 percent of days the app was used

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mood_score": self.mood_score,
            "social_activity": self.social_activity.value,
            "engagement_level": self.engagement_level,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MentalHealthIndicators":
        return cls(
            mood_score=int(data["mood_score"]),
            social_activity=SocialActivity(data["social_activity"]),
            engagement_level=int(data["engagement_level"]),
        )


Indicators = Union[FallIndicators, FrailtyIndicators, MentalHealthIndicators]

_INDICATOR_TYPES = {
    RiskType.FALL: FallIndicators,
    RiskType.FRAILTY: FrailtyIndicators,
    RiskType.MENTAL_HEALTH: MentalHealthIndicators,
}


@dataclass(frozen=True)
class SubRiskAssessment:
    """Risk assessment for a single domain.

    ``factors`` keeps detection order and is empty iff no risk
    condition fired. Stored as a tuple so the assessment stays immutable.
    """
    type: RiskType
    level: RiskLevel
    score: int
    indicators: Indicators
    factors: Sequence[str] = ()
    last_updated: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self):
        if not 0 <= self.score <= 100:
            raise ValueError(f"Score must be 0-100, got {self.score}")
        object.__setattr__(self, "factors", tuple(self.factors))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "level": self.level.value,
            "score": self.score,
            "factors": list(self.factors),
            "last_updated": self.last_updated.isoformat(),
            "indicators": self.indicators.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SubRiskAssessment":
        risk_type = RiskType(data["type"])
        return cls(
            type=risk_type,
            level=RiskLevel(data["level"]),
            score=int(data["score"]),
            indicators=_INDICATOR_TYPES[risk_type].from_dict(data["indicators"]),
            factors=list(data.get("factors", [])),
            last_updated=datetime.fromisoformat(data["last_updated"]),
        )


@dataclass(frozen=True)
class OverallRiskAssessment:
    """Combined fall, frailty and mental-health assessment for one user.

    Persisted by the caller; the engine never stores it.
    """
    user_id: str
    assessment_date: datetime
    fall_risk: SubRiskAssessment
    frailty_risk: SubRiskAssessment
    mental_health_risk: SubRiskAssessment
    overall_level: RiskLevel
    recommendations: Sequence[str]
    next_assessment_date: datetime

    def __post_init__(self):
        object.__setattr__(self, "recommendations", tuple(self.recommendations))

    @property
    def sub_assessments(self) -> List[SubRiskAssessment]:
        return [self.fall_risk, self.frailty_risk, self.mental_health_risk]

    @property
    def requires_alert(self) -> bool:
        """MEDIUM and HIGH assessments trigger notifications."""
        return self.overall_level >= RiskLevel.MEDIUM

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "assessment_date": self.assessment_date.isoformat(),
            "fall_risk": self.fall_risk.to_dict(),
            "frailty_risk": self.frailty_risk.to_dict(),
            "mental_health_risk": self.mental_health_risk.to_dict(),
            "overall_level": self.overall_level.value,
            "recommendations": list(self.recommendations),
            "next_assessment_date": self.next_assessment_date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OverallRiskAssessment":
        return cls(
            user_id=data["user_id"],
            assessment_date=datetime.fromisoformat(data["assessment_date"]),
            fall_risk=SubRiskAssessment.from_dict(data["fall_risk"]),
            frailty_risk=SubRiskAssessment.from_dict(data["frailty_risk"]),
            mental_health_risk=SubRiskAssessment.from_dict(data["mental_health_risk"]),
            overall_level=RiskLevel(data["overall_level"]),
            recommendations=list(data["recommendations"]),
            next_assessment_date=datetime.fromisoformat(data["next_assessment_date"]),
        )


def next_assessment_after(assessment_date: datetime, interval_days: int = 7) -> datetime:
    """Exact offset from the assessment time (not rounded to midnight)."""
    return assessment_date + timedelta(days=interval_days)


@dataclass(frozen=True)
class SaveResult:
    """Outcome of persisting an assessment."""
    success: bool
    id: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"success": self.success}
        if self.id is not None:
            result["id"] = self.id
        if self.error is not None:
            result["error"] = self.error
        return result
