from datetime import date

import pytest

from constants import GOAL_TYPE_PROFIT, GOAL_TYPE_REVENUE
from schemas.api_contract import Platform, PlatformFilter
from services.goal_tracker import (
    GoalRecord,
    build_goal_summary,
    compute_actual,
    get_goal_record,
    goal_percent,
    progress,
    resolve_display_type,
    resolve_focus_month,
    targets_by_month,
    upsert_goal,
    ytd_end_month,
    ytd_label,
)
from services.platform_data import DailyRecord, PlatformRollup


def _rollup(platform, days):
    return PlatformRollup.from_days(platform, [DailyRecord(date=d, revenue=r, fees=f) for d, r, f in days])


@pytest.fixture
def rollups():
    return [
        _rollup("Shopee", [
            (date(2025, 1, 10), 1000, -100),
            (date(2025, 2, 5), 600, -60),
            (date(2025, 2, 20), 400, -40),
        ]),
        _rollup("TikTok", [
            (date(2025, 2, 1), 500, -50),
            (date(2024, 2, 1), 9999, 0),
        ]),
    ]


class TestGoalPercent:
    def test_regular_ratio(self):
        assert goal_percent(750, 1000) == 75.0

    def test_over_achievement_is_kept_up_to_ceiling(self):
        assert goal_percent(2500, 1000) == 250.0
        assert goal_percent(50_000, 1000) == 999

    def test_zero_or_missing_target_is_zero(self):
        assert goal_percent(500, 0) == 0.0
        assert goal_percent(500, None) == 0.0
        assert goal_percent(500, -10) == 0.0

    def test_remaining_never_negative(self):
        assert progress(1200, 1000).remaining == 0.0
        assert progress(400, 1000).remaining == 600.0


class TestYtdWindow:
    def test_current_year_runs_to_current_month(self):
        today = date(2025, 7, 15)
        assert ytd_end_month(2025, today) == 7
        assert ytd_label(2025, today) == "ถึง ก.ค."

    def test_past_and_future_years_cover_all_months(self):
        today = date(2025, 7, 15)
        assert ytd_end_month(2024, today) == 12
        assert ytd_end_month(2026, today) == 12
        assert ytd_label(2024, today) == "ทั้งปี"


class TestFocusMonth:
    def test_start_inside_goal_year_wins(self):
        assert resolve_focus_month(2025, date(2025, 3, 1), date(2025, 7, 1)) == 3

    def test_current_year_without_start_uses_today(self):
        assert resolve_focus_month(2025, None, date(2025, 7, 1)) == 7
        assert resolve_focus_month(2025, date(2024, 3, 1), date(2025, 7, 1)) == 7

    def test_other_year_defaults_to_january(self):
        assert resolve_focus_month(2023, None, date(2025, 7, 1)) == 1


def test_display_type_prefers_all_platform_profit_goal():
    goals = [
        GoalRecord("Shopee", 2025, 1, GOAL_TYPE_PROFIT, 100),
        GoalRecord("all", 2025, 1, GOAL_TYPE_REVENUE, 1000),
    ]
    assert resolve_display_type(goals, 2025) == GOAL_TYPE_REVENUE

    goals.append(GoalRecord("all", 2025, 4, GOAL_TYPE_PROFIT, 300))
    assert resolve_display_type(goals, 2025) == GOAL_TYPE_PROFIT
    assert resolve_display_type(goals, 2024) == GOAL_TYPE_REVENUE


def test_targets_by_month_leaves_unset_months_empty():
    goals = [
        GoalRecord("all", 2025, 1, GOAL_TYPE_REVENUE, 1000),
        GoalRecord("all", 2025, 3, GOAL_TYPE_REVENUE, 0),
        GoalRecord("Shopee", 2025, 2, GOAL_TYPE_REVENUE, 50),
        GoalRecord("all", 2024, 2, GOAL_TYPE_REVENUE, 70),
    ]

    slots = targets_by_month(goals, 2025, GOAL_TYPE_REVENUE)

    assert slots[0] == 1000
    assert slots[1] is None
    assert slots[2] == 0
    assert slots[3:] == [None] * 9


def test_compute_actual_filters_platform_and_month(rollups):
    everything = compute_actual(PlatformFilter.all(), "2025-02", rollups)
    assert everything.revenue == 1500
    assert everything.fees == -150
    assert everything.settlement == 1350

    shopee = compute_actual(PlatformFilter.of(Platform.SHOPEE), "2025-02", rollups)
    assert shopee.revenue == 1000
    assert shopee.profit == 900

    assert compute_actual(PlatformFilter.all(), "2025-05", rollups).revenue == 0


def test_get_goal_record_and_upsert_replace_by_key():
    goals = [GoalRecord("all", 2025, 1, GOAL_TYPE_REVENUE, 1000)]

    assert get_goal_record(goals, "all", GOAL_TYPE_REVENUE, 2025, 2) is None

    updated = upsert_goal(goals, GoalRecord("all", 2025, 1, GOAL_TYPE_REVENUE, 2000))
    assert len(updated) == 1
    assert get_goal_record(updated, "all", GOAL_TYPE_REVENUE, 2025, 1).target == 2000
    # Original list untouched
    assert goals[0].target == 1000

    updated = upsert_goal(updated, GoalRecord("all", 2025, 1, GOAL_TYPE_PROFIT, 300))
    assert len(updated) == 2


def test_build_goal_summary_revenue_year(rollups):
    goals = [
        GoalRecord("all", 2025, 1, GOAL_TYPE_REVENUE, 2000),
        GoalRecord("all", 2025, 2, GOAL_TYPE_REVENUE, 1000),
        GoalRecord("all", 2024, 1, GOAL_TYPE_REVENUE, 10),
    ]

    summary = build_goal_summary(goals, rollups, PlatformFilter.all(), 2025, today=date(2025, 2, 15))

    assert summary.display_type == GOAL_TYPE_REVENUE
    assert summary.goal_years == (2024, 2025)
    assert summary.has_any_target is True
    assert summary.focus_month == 2
    assert summary.month_label == "กุมภาพันธ์ 2568"
    assert summary.month_progress.actual == 1500
    assert summary.month_progress.percent == 150.0
    assert summary.month_progress.remaining == 0.0
    assert summary.ytd_end_month == 2
    assert summary.ytd_progress.target == 3000
    assert summary.ytd_progress.actual == 2500
    assert summary.monthly_actuals[0].revenue == 1000
    assert summary.monthly_actuals[0].profit == 900


def test_build_goal_summary_without_goals():
    summary = build_goal_summary([], [], PlatformFilter.all(), 2023, today=date(2025, 2, 15))

    assert summary.has_any_target is False
    assert summary.goal_years == (2023,)
    assert summary.focus_month == 1
    assert summary.ytd_end_month == 12
    assert summary.month_progress.percent == 0.0
    assert summary.ytd_progress.target == 0


def test_clamp_with_tiny_target():
    assert goal_percent(1000, 1) == 999


def test_profit_goal_scenario():
    goals = [GoalRecord("all", 2025, 3, GOAL_TYPE_PROFIT, 1000)]
    rollups = [_rollup("Shopee", [(date(2025, 3, 10), 900, -150)])]

    summary = build_goal_summary(goals, rollups, PlatformFilter.all(), 2025, today=date(2025, 3, 20))

    assert summary.display_type == GOAL_TYPE_PROFIT
    assert summary.focus_month == 3
    assert summary.month_progress.actual == 750
    assert summary.month_progress.percent == 75.0
    assert summary.ytd_label == "ถึง มี.ค."
