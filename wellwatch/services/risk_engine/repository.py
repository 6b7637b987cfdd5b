"""Data access for the risk engine.

HealthDataRepository reads the engine's inputs; AssessmentRepository
stores and retrieves finished assessments. Values read from the database
are sanitized before they reach the analyzers.
"""
import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Sequence

import psycopg2

from wellwatch.shared.database import BaseRepository, ConnectionManager, RepositoryError
from wellwatch.shared.models import (
    DailyStepRecord,
    MoodRecord,
    NotificationSettings,
    OverallRiskAssessment,
    SaveResult,
)
from .sanitize import sanitize_intensity, sanitize_steps

logger = logging.getLogger(__name__)


class HealthDataRepository:
    """Reads step, mood, app-usage and settings rows for one user.

    Tables:
        daily_steps (user_id, date, steps)
        mood_entries (id, user_id, intensity, mood_label, created_at)
        app_usage_events (user_id, used_at)
        user_settings (user_id, notifications_enabled, risk_alerts_enabled, step_target)
    """

    def __init__(
        self,
        connection_manager: ConnectionManager,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.connection_manager = connection_manager
        self.clock = clock

    def _query(self, query: str, params: Sequence[Any]) -> List[tuple]:
        with self.connection_manager.get_connection() as conn:
            with conn.cursor() as cur:
                try:
                    cur.execute(query, params)
                except psycopg2.Error as e:
                    raise RepositoryError(str(e)) from e
                return cur.fetchall()

    def _window_start(self, days: int) -> datetime:
        """Midnight at the start of a window of ``days`` including today."""
        today = self.clock().replace(hour=0, minute=0, second=0, microsecond=0)
        return today - timedelta(days=days - 1)

    def get_step_history(self, user_id: str, days: int) -> List[DailyStepRecord]:
        """Daily step totals for the last ``days`` days, oldest first."""
        rows = self._query(
            "SELECT date, steps FROM daily_steps "
            "WHERE user_id = %s AND date >= %s ORDER BY date ASC",
            (user_id, self._window_start(days).date()),
        )
        return [
            DailyStepRecord(date=_format_date(row[0]), steps=sanitize_steps(row[1]))
            for row in rows
        ]

    def get_mood_history(self, user_id: str, days: int) -> List[MoodRecord]:
        """Mood check-ins from the last ``days`` days, oldest first."""
        rows = self._query(
            "SELECT id, user_id, intensity, mood_label, created_at FROM mood_entries "
            "WHERE user_id = %s AND created_at >= %s ORDER BY created_at ASC",
            (user_id, self._window_start(days)),
        )
        return [
            MoodRecord(
                id=str(row[0]),
                user_id=row[1],
                intensity=sanitize_intensity(row[2]),
                mood_label=row[3],
                created_at=row[4],
            )
            for row in rows
        ]

    def get_app_usage_day_count(self, user_id: str, window_days: int) -> int:
        """Distinct calendar days with app activity in the window."""
        rows = self._query(
            "SELECT COUNT(DISTINCT used_at::date) FROM app_usage_events "
            "WHERE user_id = %s AND used_at >= %s",
            (user_id, self._window_start(window_days)),
        )
        count = rows[0][0] if rows else 0
        return min(window_days, max(0, int(count or 0)))

    def get_notification_settings(self, user_id: str) -> NotificationSettings:
        rows = self._query(
            "SELECT notifications_enabled, risk_alerts_enabled, step_target "
            "FROM user_settings WHERE user_id = %s",
            (user_id,),
        )
        if not rows:
            return NotificationSettings(user_id=user_id)

        notifications_enabled, risk_alerts_enabled, step_target = rows[0]
        return NotificationSettings(
            user_id=user_id,
            notifications_enabled=bool(notifications_enabled),
            risk_alerts_enabled=bool(risk_alerts_enabled),
            step_target=int(step_target) if step_target is not None else None,
        )


def _format_date(value: Any) -> str:
    if isinstance(value, (date, datetime)):
        return value.isoformat()[:10]
    return str(value)


@dataclass(frozen=True)
class StoredAssessment:
    """An assessment as persisted, with its row id."""
    id: str
    assessment: OverallRiskAssessment
    created_at: datetime = field(default_factory=datetime.utcnow)


class AssessmentRepository(BaseRepository[StoredAssessment]):
    """Stores assessments as a JSON payload plus indexed summary columns."""

    TABLE_NAME = "risk_assessments"

    def __init__(self, connection_manager: ConnectionManager):
        super().__init__(connection_manager, self.TABLE_NAME)

    def _row_to_entity(self, row: tuple) -> StoredAssessment:
        # (id, user_id, assessment_date, overall_level, payload, next_assessment_date, created_at)
        payload = row[4]
        if isinstance(payload, (str, bytes)):
            payload = json.loads(payload)
        return StoredAssessment(
            id=row[0],
            assessment=OverallRiskAssessment.from_dict(payload),
            created_at=row[6],
        )

    def _entity_to_params(self, entity: StoredAssessment) -> Dict[str, Any]:
        assessment = entity.assessment
        return {
            "id": entity.id,
            "user_id": assessment.user_id,
            "assessment_date": assessment.assessment_date,
            "overall_level": assessment.overall_level.value,
            "payload": json.dumps(assessment.to_dict(), ensure_ascii=False),
            "next_assessment_date": assessment.next_assessment_date,
            "created_at": entity.created_at,
        }

    def save_assessment(self, assessment: OverallRiskAssessment) -> SaveResult:
        """Insert a new assessment row.

        Returns:
            SaveResult with the new id, or success=False on database errors
        """
        stored = StoredAssessment(id=f"asmt_{uuid.uuid4().hex[:12]}", assessment=assessment)

        try:
            self.insert(stored)
        except RepositoryError as e:
            logger.error(
                "ASSESSMENT_INSERT_FAILED",
                extra={"assessment_id": stored.id, "error": str(e)}
            )
            return SaveResult(success=False, error=str(e))

        logger.info(
            "ASSESSMENT_SAVED",
            extra={
                "assessment_id": stored.id,
                "overall_level": assessment.overall_level.value,
            }
        )
        return SaveResult(success=True, id=stored.id)

    def find_latest_for_user(self, user_id: str) -> Optional[OverallRiskAssessment]:
        """Most recent assessment, used as the fallback display state."""
        row = self._fetch_one(
            f"SELECT * FROM {self.table_name} WHERE user_id = %s "
            "ORDER BY assessment_date DESC LIMIT 1",
            (user_id,),
        )
        return self._row_to_entity(row).assessment if row is not None else None
