"""Risk assessment handler - orchestrates one scheduled assessment.

Fetches inputs from the health-data collaborator, runs the aggregator,
saves the result and hands it to the alert service.
"""
import logging
import time
from dataclasses import dataclass
from typing import Optional

from wellwatch.shared.models import (
    NotificationSettings,
    OverallRiskAssessment,
    SaveResult,
)
from wellwatch.shared.utils import hash_pii
from wellwatch.services.alert_service import RiskAlertService
from .aggregator import RiskAggregator
from .config import RiskEngineConfig, RiskServiceConfig
from .errors import HealthDataUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssessmentOutcome:
    """Result of a full assessment run."""
    assessment: OverallRiskAssessment
    save_result: SaveResult
    alert_sent: bool = False
    level_change_notified: bool = False

    def to_dict(self) -> dict:
        return {
            "assessment": self.assessment.to_dict(),
            "save_result": self.save_result.to_dict(),
            "alert_sent": self.alert_sent,
            "level_change_notified": self.level_change_notified,
        }


class RiskAssessmentHandler:
    """Runs fetch -> compute -> save -> alert for a single user.

    Collaborators:
        health_data: get_step_history / get_mood_history /
            get_app_usage_day_count / get_notification_settings
        assessment_store: save_assessment / find_latest_for_user
        alert_service: RiskAlertService, or None to skip alerting
    """

    def __init__(
        self,
        health_data,
        assessment_store,
        alert_service: Optional[RiskAlertService] = None,
        config: Optional[RiskEngineConfig] = None,
        service_config: Optional[RiskServiceConfig] = None,
        aggregator: Optional[RiskAggregator] = None,
    ):
        self.health_data = health_data
        self.assessment_store = assessment_store
        self.alert_service = alert_service
        self.config = config or RiskEngineConfig()
        self.service_config = service_config or RiskServiceConfig()
        self.aggregator = aggregator or RiskAggregator(
            mood_source=health_data,
            assessment_store=assessment_store,
            config=self.config,
        )

        logger.info(
            "RISK_ASSESSMENT_HANDLER_INITIALIZED",
            extra={
                "alerts_enabled": alert_service is not None,
                "default_step_target": self.service_config.default_step_target,
            }
        )

    def run_assessment(
        self,
        user_id: str,
        step_target: Optional[int] = None,
    ) -> AssessmentOutcome:
        """Assess one user end to end.

        Args:
            user_id: User to assess
            step_target: Overrides the stored/default daily step goal

        Returns:
            AssessmentOutcome; a failed save is reported in
            ``save_result`` and does not discard the assessment

        Raises:
            HealthDataUnavailableError: Steps, usage or settings fetch failed
            MoodHistoryUnavailableError: Mood history fetch failed

        Logs:
            - ASSESSMENT_STARTED / ASSESSMENT_COMPLETED
        """
        start_time = time.perf_counter()
        user_id_hash = hash_pii(user_id)

        logger.info("ASSESSMENT_STARTED", extra={"user_id_hash": user_id_hash})

        settings, weekly_steps, monthly_steps, app_usage_days = self._fetch_inputs(user_id)
        target = self._resolve_step_target(step_target, settings)
        previous = self._find_previous(user_id, user_id_hash)

        assessment = self.aggregator.calculate_overall_risk(
            user_id=user_id,
            weekly_steps=weekly_steps,
            monthly_steps=monthly_steps,
            step_target=target,
            app_usage_days=app_usage_days,
        )

        save_result = self.aggregator.save_assessment(assessment)
        if not save_result.success:
            logger.error(
                "ASSESSMENT_NOT_PERSISTED",
                extra={"user_id_hash": user_id_hash, "error": save_result.error}
            )

        alert_sent = False
        level_change_notified = False
        if self.alert_service is not None:
            alert_sent = self.alert_service.check_and_send(user_id, assessment, settings)
            if previous is not None and settings.allows_risk_alerts:
                level_change_notified = self.alert_service.notify_level_change(
                    user_id, previous.overall_level, assessment.overall_level
                )

        logger.info(
            "ASSESSMENT_COMPLETED",
            extra={
                "user_id_hash": user_id_hash,
                "overall_level": assessment.overall_level.value,
                "saved": save_result.success,
                "alert_sent": alert_sent,
                "level_change_notified": level_change_notified,
                "latency_ms": (time.perf_counter() - start_time) * 1000,
            }
        )

        return AssessmentOutcome(
            assessment=assessment,
            save_result=save_result,
            alert_sent=alert_sent,
            level_change_notified=level_change_notified,
        )

    def get_latest_assessment(self, user_id: str) -> Optional[OverallRiskAssessment]:
        """Last stored assessment; callers display it when a run fails."""
        return self.assessment_store.find_latest_for_user(user_id)

    def _fetch_inputs(self, user_id: str):
        try:
            settings = self.health_data.get_notification_settings(user_id)
            weekly_steps = self.health_data.get_step_history(user_id, self.config.weekly_window_days)
            monthly_steps = self.health_data.get_step_history(user_id, self.config.monthly_window_days)
            app_usage_days = self.health_data.get_app_usage_day_count(
                user_id, self.config.app_usage_window_days
            )
        except Exception as e:
            logger.error(
                "HEALTH_DATA_FETCH_FAILED",
                extra={"error": str(e), "error_type": type(e).__name__}
            )
            raise HealthDataUnavailableError("health data could not be fetched") from e

        return settings or NotificationSettings(user_id=user_id), weekly_steps, monthly_steps, app_usage_days

    def _resolve_step_target(
        self,
        step_target: Optional[int],
        settings: NotificationSettings,
    ) -> int:
        # 0 is a valid target; only a missing value falls through
        if step_target is not None:
            return step_target
        if settings.step_target is not None:
            return settings.step_target
        return self.service_config.default_step_target

    def _find_previous(self, user_id: str, user_id_hash: str) -> Optional[OverallRiskAssessment]:
        """Previous assessment for level-change detection; None if unavailable."""
        try:
            return self.assessment_store.find_latest_for_user(user_id)
        except Exception as e:
            logger.warning(
                "PREVIOUS_ASSESSMENT_LOOKUP_FAILED",
                extra={"user_id_hash": user_id_hash, "error": str(e)}
            )
            return None
