"""
Goal Tracker - Actual vs target for a focus month and a year-to-date window.

Pure functions over caller-supplied rollups and goal records; nothing here
touches the database. Months are 1-based throughout (1 = January).

Percent policy:
    percent = min(actual / target * 100, 999) if target > 0 else 0

999 is a display clamp. Values between 100 and 999 are over-achievement and
stay distinguishable from exactly 100.

YTD window:
    goal year == current year -> months 1..current month
    any other year            -> months 1..12
Target YTD sums only the months that have a target. Months without one
contribute 0 to the sum; they only matter for has_any_target.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple

from constants import (
    BUDDHIST_YEAR_OFFSET,
    GOAL_PERCENT_CEILING,
    GOAL_TYPE_PROFIT,
    GOAL_TYPE_REVENUE,
    PLATFORM_ALL,
    THAI_MONTHS,
    THAI_MONTHS_SHORT,
)
from schemas.api_contract import PlatformFilter
from services.platform_data import PlatformRollup


@dataclass(frozen=True)
class GoalRecord:
    platform: str
    year: int
    month: int
    type: str
    target: float

    @property
    def key(self) -> Tuple[str, int, int, str]:
        return (self.platform, self.year, self.month, self.type)

    @classmethod
    def from_model(cls, goal) -> 'GoalRecord':
        return cls(
            platform=goal.platform,
            year=int(goal.year),
            month=int(goal.month),
            type=goal.type,
            target=float(goal.target),
        )


@dataclass(frozen=True)
class ActualTotals:
    revenue: float = 0.0
    fees: float = 0.0
    adjustments: float = 0.0

    @property
    def settlement(self) -> float:
        return self.revenue + self.fees + self.adjustments

    @property
    def profit(self) -> float:
        return self.settlement


@dataclass(frozen=True)
class MonthlyActual:
    revenue: float = 0.0
    profit: float = 0.0


@dataclass(frozen=True)
class GoalProgress:
    target: float
    actual: float
    percent: float
    remaining: float


@dataclass(frozen=True)
class GoalSummary:
    year: int
    goal_years: Tuple[int, ...]
    display_type: str
    has_any_target: bool
    targets_by_month: Tuple[Optional[float], ...]
    monthly_actuals: Tuple[MonthlyActual, ...]
    focus_month: int
    month_label: str
    month_progress: GoalProgress
    ytd_end_month: int
    ytd_label: str
    ytd_progress: GoalProgress


# =============================================================================
# LOOKUPS
# =============================================================================

def compute_actual(
    platform_filter: PlatformFilter,
    month_key: str,
    rollups: Sequence[PlatformRollup],
) -> ActualTotals:
    """Sum revenue, fees and adjustments over matching platforms for one YYYY-MM month."""
    revenue = fees = adjustments = 0.0
    for rollup in rollups:
        if not platform_filter.matches(rollup.platform):
            continue
        for day in rollup.per_day:
            if day.month_key != month_key:
                continue
            revenue += day.revenue
            fees += day.fees
            adjustments += day.adjustments
    return ActualTotals(revenue=revenue, fees=fees, adjustments=adjustments)


def get_goal_record(
    goals: Iterable[GoalRecord],
    platform: str,
    goal_type: str,
    year: int,
    month: int,
) -> Optional[GoalRecord]:
    """The goal for (platform, type, year, month), or None when not set."""
    for goal in goals:
        if goal.platform == platform and goal.type == goal_type and goal.year == year and goal.month == month:
            return goal
    return None


def upsert_goal(goals: Iterable[GoalRecord], record: GoalRecord) -> List[GoalRecord]:
    """New list with record replacing any goal that shares its key."""
    kept = [g for g in goals if g.key != record.key]
    kept.append(record)
    return kept


# =============================================================================
# POLICY
# =============================================================================

def goal_percent(actual: float, target: Optional[float]) -> float:
    if not target or target <= 0:
        return 0.0
    return min(actual / target * 100, GOAL_PERCENT_CEILING)


def progress(actual: float, target: Optional[float]) -> GoalProgress:
    target = target or 0.0
    return GoalProgress(
        target=target,
        actual=actual,
        percent=goal_percent(actual, target),
        remaining=max(0.0, target - actual),
    )


def ytd_end_month(goal_year: int, today: date) -> int:
    return today.month if goal_year == today.year else 12


def ytd_label(goal_year: int, today: date) -> str:
    if goal_year == today.year:
        return f"ถึง {THAI_MONTHS_SHORT[today.month - 1]}"
    return "ทั้งปี"


def resolve_display_type(goals: Iterable[GoalRecord], year: int) -> str:
    """Profit when the year has any all-platform profit goal, else revenue."""
    for goal in goals:
        if goal.year == year and goal.platform == PLATFORM_ALL and goal.type == GOAL_TYPE_PROFIT:
            return GOAL_TYPE_PROFIT
    return GOAL_TYPE_REVENUE


def resolve_focus_month(goal_year: int, start: Optional[date], today: date) -> int:
    """Month of start when it falls in the goal year, else the current month (current year) or January."""
    if start is not None and start.year == goal_year:
        return start.month
    return today.month if goal_year == today.year else 1


def goal_years(goals: Iterable[GoalRecord], fallback_year: int) -> Tuple[int, ...]:
    years = sorted({g.year for g in goals})
    return tuple(years) if years else (fallback_year,)


# =============================================================================
# SERIES
# =============================================================================

def targets_by_month(
    goals: Iterable[GoalRecord],
    year: int,
    goal_type: str,
    platform: str = PLATFORM_ALL,
) -> List[Optional[float]]:
    """12 slots of targets for (platform, type, year); None where no goal is set."""
    slots: List[Optional[float]] = [None] * 12
    for goal in goals:
        if goal.year != year or goal.platform != platform or goal.type != goal_type:
            continue
        if 1 <= goal.month <= 12:
            slots[goal.month - 1] = goal.target
    return slots


def monthly_actuals(
    rollups: Sequence[PlatformRollup],
    platform_filter: PlatformFilter,
    year: int,
) -> List[MonthlyActual]:
    """12 slots of revenue and profit for the year across matching platforms."""
    revenue = [0.0] * 12
    profit = [0.0] * 12
    for rollup in rollups:
        if not platform_filter.matches(rollup.platform):
            continue
        for day in rollup.per_day:
            if day.date.year != year:
                continue
            revenue[day.date.month - 1] += day.revenue
            profit[day.date.month - 1] += day.settlement
    return [MonthlyActual(revenue=r, profit=p) for r, p in zip(revenue, profit)]


def build_goal_summary(
    goals: Sequence[GoalRecord],
    rollups: Sequence[PlatformRollup],
    platform_filter: PlatformFilter,
    year: int,
    today: date,
    start: Optional[date] = None,
) -> GoalSummary:
    """Everything the goals panel renders for one goal year."""
    display_type = resolve_display_type(goals, year)
    targets = targets_by_month(goals, year, display_type)
    actuals = monthly_actuals(rollups, platform_filter, year)

    def actual_of(m: MonthlyActual) -> float:
        return m.profit if display_type == GOAL_TYPE_PROFIT else m.revenue

    focus = resolve_focus_month(year, start, today)
    end_month = ytd_end_month(year, today)

    target_ytd = sum(t for t in targets[:end_month] if t is not None)
    actual_ytd = sum(actual_of(m) for m in actuals[:end_month])

    return GoalSummary(
        year=year,
        goal_years=goal_years(goals, year),
        display_type=display_type,
        has_any_target=any(t is not None for t in targets),
        targets_by_month=tuple(targets),
        monthly_actuals=tuple(actuals),
        focus_month=focus,
        month_label=f"{THAI_MONTHS[focus - 1]} {year + BUDDHIST_YEAR_OFFSET}",
        month_progress=progress(actual_of(actuals[focus - 1]), targets[focus - 1]),
        ytd_end_month=end_month,
        ytd_label=ytd_label(year, today),
        ytd_progress=progress(actual_ytd, target_ytd),
    )
