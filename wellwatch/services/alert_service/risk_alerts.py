"""Turns risk assessments into user notifications.

LOW assessments never notify. MEDIUM sends a check-in prompt at default
priority, HIGH an alert at high priority. A separate notification goes
out when the overall level rises between assessments.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional
import uuid

from wellwatch.shared.models import (
    NotificationSettings,
    OverallRiskAssessment,
    RiskLevel,
)
from wellwatch.shared.utils import hash_pii
from .alert_publisher import RiskAlertEvent, RiskAlertPublisher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlertConfig:
    title: str
    body: str
    priority: str   # Android notification priority


RISK_ALERT_CONFIGS: Dict[RiskLevel, Optional[AlertConfig]] = {
    RiskLevel.HIGH: AlertConfig(
        title="⚠️ 健康リスクアラート",
        body="健康状態に注意が必要です。詳細を確認してください。",
        priority="high",
    ),
    RiskLevel.MEDIUM: AlertConfig(
        title="📊 健康状態の確認",
        body="健康指標に変化が見られます。アプリで詳細をご確認ください。",
        priority="default",
    ),
    RiskLevel.LOW: None,
}

RISK_LEVEL_TEXT: Dict[RiskLevel, str] = {
    RiskLevel.HIGH: "高",
    RiskLevel.MEDIUM: "中",
    RiskLevel.LOW: "低",
}

# Thresholds for the detailed alert messages (HIGH domains only)
ALERT_WEEKLY_AVERAGE_BELOW = 3000
ALERT_ACTIVITY_DAYS_BELOW = 4
ALERT_MOOD_SCORE_BELOW = 40
ALERT_ENGAGEMENT_BELOW = 20


class RiskAlertService:
    """Decides whether and what to notify, then hands off to the publisher."""

    def __init__(self, publisher: Optional[RiskAlertPublisher] = None):
        self.publisher = publisher or RiskAlertPublisher()

    def check_and_send(
        self,
        user_id: str,
        assessment: OverallRiskAssessment,
        settings: Optional[NotificationSettings] = None,
    ) -> bool:
        """Publish a risk alert for a MEDIUM or HIGH assessment.

        Args:
            user_id: User to notify
            assessment: Freshly computed assessment
            settings: User preferences; defaults (alerts on) when None

        Returns:
            True if an alert was published
        """
        user_id_hash = hash_pii(user_id)
        settings = settings or NotificationSettings(user_id=user_id)

        if not settings.allows_risk_alerts:
            logger.info(
                "RISK_ALERT_DISABLED_BY_USER",
                extra={"user_id_hash": user_id_hash}
            )
            return False

        config = RISK_ALERT_CONFIGS[assessment.overall_level]
        if config is None:
            return False

        event = RiskAlertEvent(
            event_id=f"evt_{uuid.uuid4().hex[:12]}",
            user_id_hash=user_id_hash,
            risk_level=assessment.overall_level.value,
            title=config.title,
            body=config.body,
            priority=config.priority,
            alerts=self.get_specific_risk_alerts(assessment),
            recommendations=list(assessment.recommendations),
            assessment_date=assessment.assessment_date,
        )

        return self.publisher.publish(event)

    def get_specific_risk_alerts(self, assessment: OverallRiskAssessment) -> List[str]:
        """Detailed messages for each domain assessed HIGH."""
        alerts: List[str] = []

        fall = assessment.fall_risk
        if fall.level == RiskLevel.HIGH:
            if fall.indicators.step_decline:
                alerts.append("歩数の急激な減少が検出されました。転倒リスクにご注意ください。")
            if fall.indicators.irregular_pattern:
                alerts.append("活動パターンが不規則です。規則正しい生活を心がけましょう。")

        frailty = assessment.frailty_risk
        if frailty.level == RiskLevel.HIGH:
            if frailty.indicators.weekly_average < ALERT_WEEKLY_AVERAGE_BELOW:
                alerts.append("活動量が低下しています。適度な運動を心がけましょう。")
            if frailty.indicators.activity_days < ALERT_ACTIVITY_DAYS_BELOW:
                alerts.append("活動日数が少なくなっています。毎日少しずつでも体を動かしましょう。")

        mental = assessment.mental_health_risk
        if mental.level == RiskLevel.HIGH:
            if mental.indicators.mood_score < ALERT_MOOD_SCORE_BELOW:
                alerts.append("気分の低下が続いています。必要に応じて専門家にご相談ください。")
            if mental.indicators.engagement_level < ALERT_ENGAGEMENT_BELOW:
                alerts.append("アプリの利用が減っています。健康管理を継続しましょう。")

        return alerts

    def notify_level_change(
        self,
        user_id: str,
        previous_level: RiskLevel,
        current_level: RiskLevel,
    ) -> bool:
        """Notify when the overall level rose. Drops and repeats are silent."""
        if current_level <= previous_level:
            return False

        if current_level == RiskLevel.HIGH:
            title = "⚠️ リスクレベルが上昇しました"
        else:
            title = "📈 健康指標に変化があります"

        body = (
            f"リスクレベルが「{risk_level_text(previous_level)}」から"
            f"「{risk_level_text(current_level)}」に変化しました。"
        )

        event = RiskAlertEvent(
            event_id=f"evt_{uuid.uuid4().hex[:12]}",
            event_type="risk.level.changed",
            user_id_hash=hash_pii(user_id),
            risk_level=current_level.value,
            previous_level=previous_level.value,
            title=title,
            body=body,
            priority="high" if current_level == RiskLevel.HIGH else "default",
        )

        return self.publisher.publish(event)


def risk_level_text(level: RiskLevel) -> str:
    """Japanese label (高/中/低) for a level."""
    return RISK_LEVEL_TEXT[level]
