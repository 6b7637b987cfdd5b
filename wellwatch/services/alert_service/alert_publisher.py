"""Risk alert event publisher.

Publishes alert events to a Kinesis stream. The notification worker that
consumes the stream owns push delivery and notification history, so the
assessment flow never waits on it.
"""
import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

import boto3

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RiskAlertEvent:
    """Immutable notification request for one user."""
    event_id: str
    event_type: str = "risk.alert.triggered"
    user_id_hash: str = ""
    risk_level: str = "medium"
    previous_level: Optional[str] = None
    title: str = ""
    body: str = ""
    priority: str = "default"
    alerts: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    assessment_date: Optional[datetime] = None
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def to_kinesis_payload(self) -> dict:
        """Convert to the record body written to the stream."""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "timestamp": self.timestamp.isoformat() + "Z",
            "source": "risk-engine",
            "data": {
                "user_id_hash": self.user_id_hash,
                "risk_level": self.risk_level,
                "previous_level": self.previous_level,
                "title": self.title,
                "body": self.body,
                "priority": self.priority,
                "alerts": self.alerts,
                "recommendations": self.recommendations,
                "assessment_date": self.assessment_date.isoformat() if self.assessment_date else None,
            }
        }


class RiskAlertPublisher:
    """Writes RiskAlertEvents to Kinesis.

    Failure Handling:
        - publish() never raises; it returns False
        - failures are logged at CRITICAL with the payload so the alert
          can be sent manually
    """

    def __init__(
        self,
        stream_name: str = "wellwatch-risk-alerts",
        enabled: bool = True,
        region: Optional[str] = None,
    ):
        self.stream_name = stream_name
        self.enabled = enabled
        self.region = region or os.getenv("AWS_REGION", "ap-northeast-1")
        self._kinesis_client = None

        logger.info(
            "RISK_ALERT_PUBLISHER_INITIALIZED",
            extra={
                "stream_name": stream_name,
                "enabled": enabled,
                "region": self.region,
            }
        )

    @property
    def kinesis_client(self):
        """Lazy initialization of Kinesis client."""
        if self._kinesis_client is None and self.enabled:
            try:
                self._kinesis_client = boto3.client("kinesis", region_name=self.region)
            except Exception as e:
                logger.error("KINESIS_CLIENT_INIT_FAILED", extra={"error": str(e)})
        return self._kinesis_client

    def publish(self, event: RiskAlertEvent) -> bool:
        """Publish one event.

        Returns:
            True if the stream accepted the record, False otherwise
        """
        if not self.enabled:
            logger.info(
                "RISK_ALERT_PUBLISH_SKIPPED",
                extra={"event_id": event.event_id, "reason": "publishing_disabled"}
            )
            return False

        payload = event.to_kinesis_payload()

        if self.kinesis_client is None:
            logger.critical(
                "RISK_ALERT_FALLBACK_LOG",
                extra={
                    "event_id": event.event_id,
                    "payload": json.dumps(payload, ensure_ascii=False),
                    "reason": "kinesis_client_unavailable",
                    "action": "MANUAL_PROCESSING_REQUIRED",
                }
            )
            return False

        try:
            response = self.kinesis_client.put_record(
                StreamName=self.stream_name,
                Data=json.dumps(payload, ensure_ascii=False),
                PartitionKey=event.user_id_hash or event.event_id,  # same user -> same shard
            )
        except Exception as e:
            logger.critical(
                "RISK_ALERT_PUBLISH_FAILED",
                extra={
                    "event_id": event.event_id,
                    "user_id_hash": event.user_id_hash,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "action": "MANUAL_REVIEW_REQUIRED",
                    "payload": json.dumps(payload, ensure_ascii=False),
                }
            )
            return False

        logger.info(
            "RISK_ALERT_PUBLISHED",
            extra={
                "event_id": event.event_id,
                "event_type": event.event_type,
                "user_id_hash": event.user_id_hash,
                "risk_level": event.risk_level,
                "shard_id": response.get("ShardId"),
                "sequence_number": response.get("SequenceNumber"),
            }
        )
        return True
