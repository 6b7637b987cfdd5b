"""Risk engine configuration and activity thresholds.

Step thresholds follow the activity guidance used for users aged 65+:
4,000 steps/day is the recommended target and 1,000 steps marks a day
with effectively no activity.
"""
import os
from dataclasses import dataclass, field


@dataclass(frozen=True)
class RiskThresholds:
    """Score boundaries shared by all three analyzers."""
    low: int = 30       # score < 30 -> LOW
    medium: int = 60    # score < 60 -> MEDIUM, else HIGH


@dataclass(frozen=True)
class ActivityThresholds:
    """Daily step-count bands."""
    very_low: int = 1000    # below this a day does not count as active
    low: int = 2000
    moderate: int = 4000
    high: int = 6000


@dataclass(frozen=True)
class RiskEngineConfig:
    """Windows and constants for one assessment run."""
    risk_thresholds: RiskThresholds = field(default_factory=RiskThresholds)
    activity_thresholds: ActivityThresholds = field(default_factory=ActivityThresholds)

    weekly_window_days: int = 7
    monthly_window_days: int = 30
    mood_window_days: int = 7
    app_usage_window_days: int = 7

    # Fall risk
    decline_ratio: float = 0.5          # last-3 mean below this share of first-3 mean
    irregular_cv_threshold: float = 0.5
    consistency_penalty_weight: float = 0.1

    # Frailty risk
    trend_min_records: int = 14
    trend_change_ratio: float = 0.1

    recommended_daily_steps: int = 4000
    assessment_interval_days: int = 7


@dataclass(frozen=True)
class RiskServiceConfig:
    """Deployment settings for the assessment service."""
    alert_stream_name: str = "wellwatch-risk-alerts"
    alerts_enabled: bool = True
    aws_region: str = "ap-northeast-1"
    default_step_target: int = 4000

    @classmethod
    def from_env(cls) -> "RiskServiceConfig":
        """Create config from environment variables.

        Environment variables:
            ALERT_STREAM_NAME: Kinesis stream for risk alerts
            ALERTS_ENABLED: "true"/"false" (default true)
            AWS_REGION: AWS region (default ap-northeast-1)
            DEFAULT_STEP_TARGET: Daily step target when the user has none
        """
        return cls(
            alert_stream_name=os.getenv("ALERT_STREAM_NAME", "wellwatch-risk-alerts"),
            alerts_enabled=os.getenv("ALERTS_ENABLED", "true").lower() == "true",
            aws_region=os.getenv("AWS_REGION", "ap-northeast-1"),
            default_step_target=int(os.getenv("DEFAULT_STEP_TARGET", "4000")),
        )
