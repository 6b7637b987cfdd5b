"""Tests for shared scoring arithmetic, sanitizing and risk text."""
import math

import pytest

from wellwatch.shared.models import RiskLevel
from wellwatch.services.risk_engine.config import RiskThresholds
from wellwatch.services.risk_engine.messages import describe_risk
from wellwatch.services.risk_engine.sanitize import (
    sanitize_intensity,
    sanitize_steps,
    sanitize_usage_days,
)
from wellwatch.services.risk_engine.scoring import (
    clamp_score,
    coefficient_of_variation,
    determine_risk_level,
    round_half_up,
    rounded_mean,
)


class TestDetermineRiskLevel:
    @pytest.mark.parametrize("score,expected", [
        (0, RiskLevel.LOW),
        (29, RiskLevel.LOW),
        (29.9, RiskLevel.LOW),
        (30, RiskLevel.MEDIUM),
        (59, RiskLevel.MEDIUM),
        (60, RiskLevel.HIGH),
        (100, RiskLevel.HIGH),
    ])
    def test_boundaries(self, score, expected):
        assert determine_risk_level(score) == expected

    def test_custom_thresholds(self):
        thresholds = RiskThresholds(low=20, medium=40)

        assert determine_risk_level(25, thresholds) == RiskLevel.MEDIUM
        assert determine_risk_level(40, thresholds) == RiskLevel.HIGH


class TestRounding:
    def test_half_rounds_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(0.5) == 1
        assert round_half_up(2.4999) == 2

    def test_rounded_mean(self):
        assert rounded_mean([]) == 0
        assert rounded_mean([1, 2]) == 2
        assert rounded_mean([5000, 5000, 5001]) == 5000

    def test_clamp_score(self):
        assert clamp_score(-10) == 0
        assert clamp_score(135) == 100
        assert clamp_score(31.5) == 32

    def test_coefficient_of_variation(self):
        assert coefficient_of_variation([]) == 0.0
        assert coefficient_of_variation([0, 0, 0]) == 0.0
        assert coefficient_of_variation([5000, 5000]) == 0.0
        assert coefficient_of_variation([0, 2]) == pytest.approx(1.0)


class TestSanitize:
    @pytest.mark.parametrize("value,expected", [
        (5000, 5000),
        (5000.9, 5000),
        ("1200", 1200),
        (-1, 0),
        (None, 0),
        ("abc", 0),
        (math.nan, 0),
        (math.inf, 0),
    ])
    def test_steps(self, value, expected):
        assert sanitize_steps(value) == expected

    @pytest.mark.parametrize("value,expected", [
        (1, 1),
        (5, 5),
        (0, 1),
        (7, 5),
        (3.6, 4),
        (None, 3),
        ("bad", 3),
    ])
    def test_intensity(self, value, expected):
        assert sanitize_intensity(value) == expected

    def test_usage_days(self):
        assert sanitize_usage_days(4) == 4
        assert sanitize_usage_days(9) == 7
        assert sanitize_usage_days(-2) == 0
        assert sanitize_usage_days(None) == 0
        assert sanitize_usage_days(12, window_days=14) == 12


class TestDescribeRisk:
    def test_overall_text_per_level(self):
        assert describe_risk(RiskLevel.LOW).startswith("現在の健康状態は良好です")
        assert describe_risk(RiskLevel.HIGH).startswith("健康状態が心配です")

    def test_domain_text(self):
        assert describe_risk(RiskLevel.MEDIUM, "fall").startswith("転倒リスクがやや高まっています")
        assert describe_risk(RiskLevel.HIGH, "mentalHealth").startswith("メンタルヘルスのケア")

    def test_unknown_domain_is_empty(self):
        assert describe_risk(RiskLevel.LOW, "sleep") == ""
