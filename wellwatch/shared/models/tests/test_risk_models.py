"""Tests for risk domain models."""
from datetime import datetime, timedelta

import pytest

from wellwatch.shared.models import (
    FallIndicators,
    FrailtyIndicators,
    MentalHealthIndicators,
    MonthlyTrend,
    NotificationSettings,
    OverallRiskAssessment,
    RiskLevel,
    RiskType,
    SaveResult,
    SocialActivity,
    SubRiskAssessment,
    max_level,
    next_assessment_after,
)

NOW = datetime(2024, 1, 15, 3, 0)


def make_overall(level=RiskLevel.MEDIUM):
    return OverallRiskAssessment(
        user_id="user_123",
        assessment_date=NOW,
        fall_risk=SubRiskAssessment(
            RiskType.FALL, RiskLevel.LOW, 5, FallIndicators(False, False, False, 95.5),
            last_updated=NOW,
        ),
        frailty_risk=SubRiskAssessment(
            RiskType.FRAILTY, level, 45, FrailtyIndicators(2857, MonthlyTrend.DECLINING, 4, 57),
            factors=["活動日数がやや少ない"], last_updated=NOW,
        ),
        mental_health_risk=SubRiskAssessment(
            RiskType.MENTAL_HEALTH, RiskLevel.LOW, 0,
            MentalHealthIndicators(87, SocialActivity.MODERATE, 43), last_updated=NOW,
        ),
        overall_level=level,
        recommendations=["現在の活動レベルを維持し、徐々に歩数を増やしてみましょう"],
        next_assessment_date=next_assessment_after(NOW),
    )


class TestRiskLevel:
    def test_ordering_uses_severity_not_string_value(self):
        assert RiskLevel.LOW < RiskLevel.MEDIUM < RiskLevel.HIGH
        assert RiskLevel.HIGH > RiskLevel.LOW
        assert RiskLevel.MEDIUM >= RiskLevel.MEDIUM

    def test_max_level(self):
        assert max_level([RiskLevel.LOW, RiskLevel.HIGH, RiskLevel.MEDIUM]) == RiskLevel.HIGH
        assert max_level([]) == RiskLevel.LOW

    def test_wire_values(self):
        assert [level.value for level in RiskLevel] == ["low", "medium", "high"]
        assert RiskType.MENTAL_HEALTH.value == "mentalHealth"


class TestSubRiskAssessment:
    def test_score_out_of_range_rejected(self):
        with pytest.raises(ValueError):
            SubRiskAssessment(
                RiskType.FALL, RiskLevel.HIGH, 101, FallIndicators(True, True, True, 0.0)
            )

    def test_to_dict(self):
        data = make_overall().frailty_risk.to_dict()

        assert data["type"] == "frailty"
        assert data["level"] == "medium"
        assert data["indicators"]["monthly_trend"] == "declining"
        assert data["factors"] == ["活動日数がやや少ない"]

    def test_factors_cannot_be_mutated(self):
        factors = ["活動日数がやや少ない"]
        assessment = SubRiskAssessment(
            RiskType.FRAILTY, RiskLevel.MEDIUM, 45,
            FrailtyIndicators(2857, MonthlyTrend.DECLINING, 4, 57), factors=factors,
        )
        factors.append("added later")

        assert assessment.factors == ("活動日数がやや少ない",)
        with pytest.raises(AttributeError):
            assessment.factors.append("x")

    def test_default_factors_empty(self):
        assessment = SubRiskAssessment(
            RiskType.FALL, RiskLevel.LOW, 0, FallIndicators(False, False, False, 100.0)
        )

        assert assessment.factors == ()


class TestOverallRiskAssessment:
    def test_from_dict_restores_assessment(self):
        assessment = make_overall()

        assert OverallRiskAssessment.from_dict(assessment.to_dict()) == assessment

    def test_recommendations_cannot_be_mutated(self):
        assessment = make_overall()

        assert isinstance(assessment.recommendations, tuple)
        with pytest.raises(AttributeError):
            assessment.recommendations.append("x")
        assert assessment.to_dict()["recommendations"] == list(assessment.recommendations)

    def test_requires_alert(self):
        assert make_overall(RiskLevel.LOW).requires_alert is False
        assert make_overall(RiskLevel.MEDIUM).requires_alert is True
        assert make_overall(RiskLevel.HIGH).requires_alert is True

    def test_sub_assessments_order(self):
        types = [s.type for s in make_overall().sub_assessments]

        assert types == [RiskType.FALL, RiskType.FRAILTY, RiskType.MENTAL_HEALTH]

    def test_next_assessment_is_exact_offset(self):
        assert make_overall().next_assessment_date == NOW + timedelta(days=7)


class TestSmallModels:
    def test_save_result_omits_empty_fields(self):
        assert SaveResult(success=True, id="asmt_1").to_dict() == {"success": True, "id": "asmt_1"}
        assert SaveResult(success=False, error="x").to_dict() == {"success": False, "error": "x"}

    def test_notification_settings_defaults(self):
        settings = NotificationSettings(user_id="user_123")

        assert settings.allows_risk_alerts is True
        assert settings.step_target is None
