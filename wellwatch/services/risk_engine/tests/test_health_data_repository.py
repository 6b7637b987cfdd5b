"""Tests for the risk engine's data access layer."""
import json
from contextlib import contextmanager
from datetime import date, datetime
from unittest.mock import MagicMock

import psycopg2
import pytest

from wellwatch.shared.database import RepositoryError
from wellwatch.shared.models import NotificationSettings, RiskLevel
from wellwatch.services.risk_engine.aggregator import RiskAggregator
from wellwatch.services.risk_engine.repository import (
    AssessmentRepository,
    HealthDataRepository,
)

NOW = datetime(2024, 1, 15, 14, 30)


def make_connection_manager(rows=None, row=None):
    cursor = MagicMock()
    cursor.__enter__.return_value = cursor
    cursor.fetchall.return_value = rows or []
    cursor.fetchone.return_value = row

    conn = MagicMock()
    conn.cursor.return_value = cursor

    @contextmanager
    def get_connection():
        yield conn

    manager = MagicMock()
    manager.get_connection.side_effect = get_connection
    return manager, conn, cursor


def sample_assessment():
    return RiskAggregator(clock=lambda: NOW).calculate_overall_risk(
        user_id="user_123",
        weekly_steps=[],
        monthly_steps=[],
        step_target=4000,
        app_usage_days=7,
        mood_history=[],
    )


class TestHealthDataRepository:
    def test_step_history_window_and_sanitizing(self):
        manager, _, cursor = make_connection_manager(rows=[
            (date(2024, 1, 14), 5200),
            (date(2024, 1, 15), -20),
        ])
        repo = HealthDataRepository(manager, clock=lambda: NOW)

        records = repo.get_step_history("user_123", 7)

        query, params = cursor.execute.call_args.args
        assert "FROM daily_steps" in query
        assert params == ("user_123", date(2024, 1, 9))
        assert [r.date for r in records] == ["2024-01-14", "2024-01-15"]
        assert [r.steps for r in records] == [5200, 0]

    def test_mood_history(self):
        created = datetime(2024, 1, 14, 9, 0)
        manager, _, cursor = make_connection_manager(rows=[
            (17, "user_123", 9, "happy", created),
        ])
        repo = HealthDataRepository(manager, clock=lambda: NOW)

        records = repo.get_mood_history("user_123", 7)

        _, params = cursor.execute.call_args.args
        assert params == ("user_123", datetime(2024, 1, 9))
        assert records[0].id == "17"
        assert records[0].intensity == 5
        assert records[0].mood_label == "happy"
        assert records[0].created_at == created

    def test_app_usage_day_count_is_clamped(self):
        manager, _, _ = make_connection_manager(rows=[(9,)])
        repo = HealthDataRepository(manager, clock=lambda: NOW)

        assert repo.get_app_usage_day_count("user_123", 7) == 7

    def test_app_usage_without_events(self):
        manager, _, _ = make_connection_manager(rows=[(None,)])
        repo = HealthDataRepository(manager, clock=lambda: NOW)

        assert repo.get_app_usage_day_count("user_123", 7) == 0

    def test_settings_defaults_when_missing(self):
        manager, _, _ = make_connection_manager(rows=[])
        repo = HealthDataRepository(manager, clock=lambda: NOW)

        assert repo.get_notification_settings("user_123") == NotificationSettings(user_id="user_123")

    def test_settings_row(self):
        manager, _, _ = make_connection_manager(rows=[(True, False, 6000)])
        repo = HealthDataRepository(manager, clock=lambda: NOW)

        settings = repo.get_notification_settings("user_123")

        assert settings.risk_alerts_enabled is False
        assert settings.allows_risk_alerts is False
        assert settings.step_target == 6000

    def test_driver_error_becomes_repository_error(self):
        manager, _, cursor = make_connection_manager()
        cursor.execute.side_effect = psycopg2.OperationalError("connection lost")
        repo = HealthDataRepository(manager, clock=lambda: NOW)

        with pytest.raises(RepositoryError):
            repo.get_step_history("user_123", 30)


class TestAssessmentRepository:
    def test_save_assessment(self):
        manager, conn, cursor = make_connection_manager(row=None)
        repo = AssessmentRepository(manager)
        assessment = sample_assessment()

        result = repo.save_assessment(assessment)

        assert result.success is True
        assert result.id.startswith("asmt_")
        query, params = cursor.execute.call_args.args
        assert query.startswith("INSERT INTO risk_assessments")
        assert params[1] == "user_123"
        assert params[3] == assessment.overall_level.value
        assert json.loads(params[4])["recommendations"] == list(assessment.recommendations)
        conn.commit.assert_called_once()

    def test_save_failure_returns_failed_result(self):
        manager, _, cursor = make_connection_manager()
        cursor.execute.side_effect = psycopg2.OperationalError("timeout")
        repo = AssessmentRepository(manager)

        result = repo.save_assessment(sample_assessment())

        assert result.success is False
        assert "timeout" in result.error

    def test_find_latest_for_user(self):
        assessment = sample_assessment()
        row = (
            "asmt_1", "user_123", assessment.assessment_date, "high",
            assessment.to_dict(), assessment.next_assessment_date, NOW,
        )
        manager, _, _ = make_connection_manager(row=row)
        repo = AssessmentRepository(manager)

        latest = repo.find_latest_for_user("user_123")

        assert latest == assessment
        assert latest.overall_level == RiskLevel.HIGH

    def test_find_latest_from_text_payload(self):
        assessment = sample_assessment()
        row = (
            "asmt_1", "user_123", assessment.assessment_date, "high",
            json.dumps(assessment.to_dict(), ensure_ascii=False),
            assessment.next_assessment_date, NOW,
        )
        manager, _, _ = make_connection_manager(row=row)

        assert AssessmentRepository(manager).find_latest_for_user("user_123") == assessment

    def test_find_latest_none(self):
        manager, _, _ = make_connection_manager(row=None)

        assert AssessmentRepository(manager).find_latest_for_user("user_123") is None
