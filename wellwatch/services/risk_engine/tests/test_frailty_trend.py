"""Tests for FrailtyTrendAnalyzer."""
from datetime import date, datetime, timedelta

import pytest

from wellwatch.shared.models import DailyStepRecord, MonthlyTrend, RiskLevel, RiskType
from wellwatch.services.risk_engine.frailty_trend import FrailtyTrendAnalyzer
from wellwatch.services.risk_engine.messages import FrailtyFactor

NOW = datetime(2024, 1, 30)


def series(steps):
    start = date(2024, 1, 1)
    return [
        DailyStepRecord(date=(start + timedelta(days=i)).isoformat(), steps=s)
        for i, s in enumerate(steps)
    ]


@pytest.fixture
def analyzer():
    return FrailtyTrendAnalyzer()


class TestFrailtyScoring:
    def test_flat_month_above_target_is_low_risk(self, analyzer):
        result = analyzer.calculate_frailty_risk(series([5500] * 30), 5000, now=NOW)

        assert result.type == RiskType.FRAILTY
        assert result.level == RiskLevel.LOW
        assert result.indicators.monthly_trend == MonthlyTrend.STABLE
        assert result.indicators.goal_achievement_rate == 100
        assert result.indicators.weekly_average == 5500
        assert result.indicators.activity_days == 7
        assert result.score == 0
        assert result.factors == ()

    def test_declining_month(self, analyzer):
        result = analyzer.calculate_frailty_risk(
            series([5000 - i * 100 for i in range(30)]), 5000, now=NOW
        )

        assert result.indicators.monthly_trend == MonthlyTrend.DECLINING
        assert FrailtyFactor.DECLINING_TREND in result.factors
        assert result.level in (RiskLevel.MEDIUM, RiskLevel.HIGH)
        assert result.score == 60

    def test_few_active_days_is_high_risk(self, analyzer):
        result = analyzer.calculate_frailty_risk(
            series([3000 if i % 5 == 0 else 0 for i in range(30)]), 5000, now=NOW
        )

        assert result.indicators.activity_days == 1
        assert result.level == RiskLevel.HIGH
        assert result.factors == (
            FrailtyFactor.VERY_LOW_ACTIVITY,
            FrailtyFactor.FEW_ACTIVE_DAYS,
            FrailtyFactor.LOW_GOAL_ACHIEVEMENT,
        )

    def test_low_weekly_average_band(self, analyzer):
        result = analyzer.calculate_frailty_risk(series([1500] * 7), 4000, now=NOW)

        assert result.factors == (FrailtyFactor.LOW_ACTIVITY, FrailtyFactor.LOW_GOAL_ACHIEVEMENT)
        assert result.score == 50
        assert result.level == RiskLevel.MEDIUM

    def test_moderate_band_adds_points_without_factor(self, analyzer):
        result = analyzer.calculate_frailty_risk(
            series([5000, 5000, 5000, 5000, 0, 0, 0]), 4000, now=NOW
        )

        assert result.indicators.weekly_average == 2857
        assert result.indicators.activity_days == 4
        assert result.factors == (FrailtyFactor.SOMEWHAT_FEW_ACTIVE_DAYS,)
        assert result.score == 30

    def test_improving_trend_lowers_score_and_clamps_at_zero(self, analyzer):
        result = analyzer.calculate_frailty_risk(
            series([3000] * 15 + [5000] * 15), 4000, now=NOW
        )

        assert result.indicators.monthly_trend == MonthlyTrend.IMPROVING
        assert result.score == 0
        assert result.factors == ()


class TestWindows:
    def test_weekly_indicators_use_last_seven_days(self, analyzer):
        result = analyzer.calculate_frailty_risk(
            series([0] * 23 + [6000] * 7), 5000, now=NOW
        )

        assert result.indicators.weekly_average == 6000
        assert result.indicators.activity_days == 7
        assert result.indicators.goal_achievement_rate == 100

    def test_trend_needs_fourteen_days(self, analyzer):
        result = analyzer.calculate_frailty_risk(
            series([5000] * 5 + [1000] * 5), 4000, now=NOW
        )

        assert result.indicators.monthly_trend == MonthlyTrend.STABLE

    def test_trend_halves_split_at_midpoint(self, analyzer):
        # 15 records: first half is 7 days, second half 8 days
        steps = [4000] * 7 + [4000] * 8
        assert analyzer.calculate_monthly_trend(steps) == MonthlyTrend.STABLE
        assert analyzer.calculate_monthly_trend([4000] * 7 + [3500] * 8) == MonthlyTrend.DECLINING

    def test_trend_from_zero_baseline_is_improving(self, analyzer):
        assert analyzer.calculate_monthly_trend([0] * 7 + [2000] * 7) == MonthlyTrend.IMPROVING
        assert analyzer.calculate_monthly_trend([0] * 14) == MonthlyTrend.STABLE


class TestGoalAchievement:
    def test_zero_target_does_not_divide_by_zero(self, analyzer):
        result = analyzer.calculate_frailty_risk(series([5500] * 30), 0, now=NOW)

        assert result.indicators.goal_achievement_rate == 0
        assert FrailtyFactor.LOW_GOAL_ACHIEVEMENT in result.factors

    def test_rate_is_rounded_percentage(self, analyzer):
        assert analyzer.calculate_goal_achievement_rate([5000, 5000, 0, 0, 0, 0, 0], 4000) == 29
        assert analyzer.calculate_goal_achievement_rate([4000], 4000) == 100

    def test_empty_series(self, analyzer):
        result = analyzer.calculate_frailty_risk([], 4000, now=NOW)

        assert result.indicators.weekly_average == 0
        assert result.indicators.goal_achievement_rate == 0
        assert result.indicators.monthly_trend == MonthlyTrend.STABLE
        assert result.score == 90
        assert result.level == RiskLevel.HIGH


class TestPurity:
    def test_same_input_same_output(self, analyzer):
        records = series([5000 - i * 100 for i in range(30)])

        assert analyzer.calculate_frailty_risk(records, 5000, now=NOW) == \
            analyzer.calculate_frailty_risk(records, 5000, now=NOW)
