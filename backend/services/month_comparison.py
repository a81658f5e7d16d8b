"""
Month Comparison - Month-over-month settlement change per platform.

Each platform's daily records are bucketed by YYYY-MM, summed, sorted
ascending and compared with the immediately preceding bucket (not the same
month last year).

The first bucket has no predecessor: previous, change_amount and
change_percent are all None. change_percent is also None when the previous
settlement is 0. None means "no baseline" and is never coerced to 0; a real
0 settlement in the previous bucket is kept as previous=0.0.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from constants import format_month_label
from services.platform_data import PlatformRollup


@dataclass(frozen=True)
class MonthData:
    month: str
    month_name: str
    revenue: float = 0.0
    fees: float = 0.0
    adjustments: float = 0.0

    @property
    def settlement(self) -> float:
        return self.revenue + self.fees + self.adjustments


@dataclass(frozen=True)
class MonthChange:
    month: str
    month_name: str
    current: float
    previous: Optional[float]
    previous_month_name: Optional[str]
    change_percent: Optional[float]
    change_amount: Optional[float]

    @property
    def is_baseline(self) -> bool:
        return self.change_amount is None


@dataclass(frozen=True)
class MonthComparison:
    platform: str
    months: Tuple[MonthData, ...]
    comparisons: Tuple[MonthChange, ...]


def bucket_by_month(rollup: PlatformRollup) -> List[MonthData]:
    """Monthly sums of the rollup's daily records, oldest first."""
    sums: Dict[str, List[float]] = {}
    for day in rollup.per_day:
        totals = sums.setdefault(day.month_key, [0.0, 0.0, 0.0])
        totals[0] += day.revenue
        totals[1] += day.fees
        totals[2] += day.adjustments

    # Zero-padded keys sort chronologically
    return [
        MonthData(
            month=key,
            month_name=format_month_label(key),
            revenue=revenue,
            fees=fees,
            adjustments=adjustments,
        )
        for key, (revenue, fees, adjustments) in sorted(sums.items())
    ]


def compare_months(months: Sequence[MonthData]) -> List[MonthChange]:
    changes = []
    previous: Optional[MonthData] = None
    for current in months:
        if previous is None:
            change_amount = None
            change_percent = None
        else:
            change_amount = current.settlement - previous.settlement
            change_percent = (
                change_amount / previous.settlement * 100
                if previous.settlement != 0 else None
            )
        changes.append(MonthChange(
            month=current.month,
            month_name=current.month_name,
            current=current.settlement,
            previous=previous.settlement if previous is not None else None,
            previous_month_name=previous.month_name if previous is not None else None,
            change_percent=change_percent,
            change_amount=change_amount,
        ))
        previous = current
    return changes


def calculate_month_comparison(rollups: Sequence[PlatformRollup]) -> List[MonthComparison]:
    """One MonthComparison per rollup, in input order."""
    result = []
    for rollup in rollups:
        months = bucket_by_month(rollup)
        result.append(MonthComparison(
            platform=rollup.platform,
            months=tuple(months),
            comparisons=tuple(compare_months(months)),
        ))
    return result
