"""
Pydantic models for /api/dashboard/* endpoint params.

TopParams carries exactly the three values the top-entities cache key is
built from, so two requests that differ only in ignored query args share a
cache entry.
"""

from datetime import date
from typing import Iterable, Optional

from pydantic import Field, model_validator

from .base import BaseParamsModel
from .types import CoercedDate, CoercedInt, DateBasis


class DateRangeParams(BaseParamsModel):
    """Base for params carrying an inclusive start/end range."""

    start: CoercedDate = Field(default=None, description="Start date (inclusive)")
    end: CoercedDate = Field(default=None, description="End date (inclusive)")

    @model_validator(mode='after')
    def check_date_order(self):
        if self.start is not None and self.end is not None and self.start > self.end:
            raise ValueError("start must be on or before end")
        return self


class TopParams(DateRangeParams):
    """GET /api/dashboard/top"""

    platform: str = Field(default='all', description="all, Shopee, TikTok or Lazada")


class MonthComparisonParams(DateRangeParams):
    """GET /api/dashboard/month-comparison"""

    platform: str = Field(default='all')
    basis: DateBasis = Field(default='order', description="order or payment date series")


class GoalProgressParams(BaseParamsModel):
    """GET /api/dashboard/goals"""

    year: CoercedInt = Field(default=None, ge=2000, le=2200, description="Goal year (default: current year, else the latest goal year)")
    start: CoercedDate = Field(default=None, description="Selected range start; picks the focus month")
    platform: str = Field(default='all')
    basis: DateBasis = Field(default='order')

    def resolved_year(self, today: date, goal_years: Iterable[int] = ()) -> int:
        """Explicit year, else the current year if it has goals, else the latest goal year."""
        if self.year is not None:
            return self.year
        years = set(goal_years)
        if not years or today.year in years:
            return today.year
        return max(years)


class CacheClearParams(BaseParamsModel):
    """DELETE /api/dashboard/cache"""

    prefix: Optional[str] = Field(default=None, description="Only drop keys containing this text")
