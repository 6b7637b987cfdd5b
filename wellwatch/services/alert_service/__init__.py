"""Alert Service: risk notifications for users and their families.

Consumes finished OverallRiskAssessments and publishes notification
events to Kinesis. Delivery (push, LINE) is done by the stream consumer.

- MEDIUM/HIGH overall level -> risk alert with detailed messages
- Rising overall level -> level-change notification
- LOW -> nothing
"""

from .alert_publisher import RiskAlertEvent, RiskAlertPublisher
from .risk_alerts import AlertConfig, RiskAlertService, RISK_ALERT_CONFIGS, risk_level_text

__all__ = [
    "RiskAlertEvent",
    "RiskAlertPublisher",
    "AlertConfig",
    "RiskAlertService",
    "RISK_ALERT_CONFIGS",
    "risk_level_text",
]
