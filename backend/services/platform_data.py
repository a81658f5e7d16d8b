"""
Platform Data - Daily financial records and per-platform rollups.

Every consumer derives settlement as revenue + fees + adjustments from the
same three fields (fees and adjustments are stored signed, usually negative),
so no component ever sums settlement values built with a different sign
convention.

Rollups are immutable: filtering by platform or date range always produces a
new PlatformRollup with re-aggregated totals.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from constants import DATE_BASIS_PAYMENT
from schemas.api_contract import PlatformFilter
from utils.normalize import coerce_to_date

logger = logging.getLogger('dashboard.platform_data')


@dataclass(frozen=True)
class DailyRecord:
    date: date
    revenue: float = 0.0
    fees: float = 0.0
    adjustments: float = 0.0

    @property
    def settlement(self) -> float:
        return self.revenue + self.fees + self.adjustments

    @property
    def month_key(self) -> str:
        return f"{self.date.year:04d}-{self.date.month:02d}"

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'DailyRecord':
        """Build from a stored per-day entry: {date, revenue, fees, adjustments}."""
        day = coerce_to_date(raw['date'])
        if day is None:
            raise ValueError("day entry has no date")
        return cls(
            date=day,
            revenue=float(raw.get('revenue') or 0),
            fees=float(raw.get('fees') or 0),
            adjustments=float(raw.get('adjustments') or 0),
        )


@dataclass(frozen=True)
class PlatformRollup:
    platform: str
    revenue: float = 0.0
    fees: float = 0.0
    adjustments: float = 0.0
    per_day: Tuple[DailyRecord, ...] = field(default_factory=tuple)

    @property
    def settlement(self) -> float:
        return self.revenue + self.fees + self.adjustments

    @classmethod
    def from_days(cls, platform: str, days: Iterable[DailyRecord]) -> 'PlatformRollup':
        """Aggregate totals from daily records (sorted by date)."""
        ordered = tuple(sorted(days, key=lambda d: d.date))
        return cls(
            platform=platform,
            revenue=sum(d.revenue for d in ordered),
            fees=sum(d.fees for d in ordered),
            adjustments=sum(d.adjustments for d in ordered),
            per_day=ordered,
        )

    def filter_dates(self, start: Optional[date] = None, end: Optional[date] = None) -> 'PlatformRollup':
        """New rollup restricted to start <= day <= end (either bound optional)."""
        days = [
            d for d in self.per_day
            if (start is None or d.date >= start) and (end is None or d.date <= end)
        ]
        return PlatformRollup.from_days(self.platform, days)


def filter_rollups(
    rollups: Sequence[PlatformRollup],
    platform_filter: PlatformFilter,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[PlatformRollup]:
    """Select rollups matching the platform filter and re-aggregate them for the date range."""
    return [
        r.filter_dates(start, end)
        for r in rollups
        if platform_filter.matches(r.platform)
    ]


def _parse_days(raw_days: Optional[List[Dict[str, Any]]], platform: str) -> List[DailyRecord]:
    days = []
    for raw in raw_days or []:
        try:
            days.append(DailyRecord.from_dict(raw))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("skip_bad_day platform=%s day=%r err=%s", platform, raw, e)
    return days


def rollup_from_metric(metric, date_basis: str = 'order') -> PlatformRollup:
    """
    Convert a PlatformMetric row to a PlatformRollup.

    With date_basis='payment' the per-payment-date series is used, falling
    back to the per-order-date series when none was stored.
    """
    raw_days = metric.per_day
    if date_basis == DATE_BASIS_PAYMENT and metric.per_day_paid:
        raw_days = metric.per_day_paid
    return PlatformRollup.from_days(metric.platform, _parse_days(raw_days, metric.platform))


def load_platform_rollups(date_basis: str = 'order') -> List[PlatformRollup]:
    """Load one rollup per stored platform, ordered by platform name."""
    from models.platform_metric import PlatformMetric

    metrics = PlatformMetric.query.order_by(PlatformMetric.platform.asc()).all()
    if not metrics:
        logger.warning("no_platform_metrics")
    return [rollup_from_metric(m, date_basis) for m in metrics]
