"""
API Contract Schema - Single Source of Truth

Defines the stable API interface between backend and dashboard frontend.
- Platform filters are an explicit All | Specific(platform) value inside the
  backend; the 'all' wire string only exists at the request/response edges.
- Response fields: camelCase (topProducts, imageUrl, changePercent)
- Nullable numbers stay null on the wire. A null changePercent means
  "no baseline", which the UI renders differently from 0%.
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from constants import PLATFORM_ALL, normalize_platform_label
from utils.normalize import ValidationError

# =============================================================================
# API CONTRACT VERSIONING
# =============================================================================

_DEFAULT_CONTRACT_VERSION = "v1"
CURRENT_API_CONTRACT_VERSION = os.environ.get(
    'API_CONTRACT_VERSION_OVERRIDE',
    _DEFAULT_CONTRACT_VERSION
)

# HTTP Header name for contract version (debugging via Network tab)
API_CONTRACT_HEADER = 'X-API-Contract-Version'


# =============================================================================
# PLATFORMS
# =============================================================================

class Platform(str, Enum):
    """Canonical marketplace names."""
    SHOPEE = 'Shopee'
    TIKTOK = 'TikTok'
    LAZADA = 'Lazada'

    @classmethod
    def from_label(cls, label: Optional[str]) -> Optional['Platform']:
        """Resolve a raw label ('tik tok', 'SHOPEE'); None when unrecognized."""
        name = normalize_platform_label(label)
        return cls(name) if name else None


@dataclass(frozen=True)
class PlatformFilter:
    """
    Platform selection: every platform (platform is None) or exactly one.

    Build with PlatformFilter.all() / PlatformFilter.of(Platform.SHOPEE), or
    from a request value with from_wire().
    """
    platform: Optional[Platform] = None

    @classmethod
    def all(cls) -> 'PlatformFilter':
        return cls(None)

    @classmethod
    def of(cls, platform: Platform) -> 'PlatformFilter':
        return cls(platform)

    @classmethod
    def from_wire(cls, value: Optional[str], field: str = 'platform') -> 'PlatformFilter':
        """
        Parse a wire value. None, '' and 'all' (any case) select every platform.

        Raises:
            ValidationError: If the value names no known platform
        """
        if value is None or str(value).strip() == '' or str(value).strip().lower() == PLATFORM_ALL:
            return cls.all()
        platform = Platform.from_label(value)
        if platform is None:
            raise ValidationError(
                f"Unknown platform: {value!r}. Expected all, Shopee, TikTok or Lazada",
                field=field,
                received_value=value
            )
        return cls.of(platform)

    @property
    def is_all(self) -> bool:
        return self.platform is None

    def to_wire(self) -> str:
        return PLATFORM_ALL if self.platform is None else self.platform.value

    def query_value(self) -> Optional[str]:
        """Value passed to the rollup functions: None means unfiltered."""
        return None if self.platform is None else self.platform.value

    def matches(self, name: Optional[str]) -> bool:
        if self.platform is None:
            return True
        return Platform.from_label(name) is self.platform


# =============================================================================
# RESPONSE SERIALIZERS
# =============================================================================

def serialize_top_product(product) -> Dict[str, Any]:
    return {
        'name': product.name,
        'variant': product.variant,
        'revenue': product.revenue,
        'qty': product.qty,
        'returned': product.returned,
        'platforms': list(product.platforms),
        'latestAt': product.latest_at,
        'imageUrl': product.image_url,
    }


def serialize_top_province(province) -> Dict[str, Any]:
    return {
        'name': province.name,
        'revenue': province.revenue,
        'qty': province.qty,
    }


def serialize_top_platform(card) -> Optional[Dict[str, Any]]:
    if card is None:
        return None
    return {
        'platform': card.platform,
        'variant': card.variant,
        'revenue': card.revenue,
        'qty': card.qty,
    }


def serialize_top_response(result) -> Dict[str, Any]:
    """Serialize a TopEntitiesResult for GET /api/dashboard/top."""
    return {
        'ok': True,
        'topProducts': [serialize_top_product(p) for p in result.top_products],
        'topProvinces': [serialize_top_province(p) for p in result.top_provinces],
        'platforms': [serialize_top_platform(c) for c in result.platforms],
    }


def serialize_month_comparisons(comparisons: List) -> List[Dict[str, Any]]:
    """Serialize MonthComparison objects. Null change fields stay null."""
    return [
        {
            'platform': item.platform,
            'months': [
                {
                    'month': m.month,
                    'monthName': m.month_name,
                    'revenue': m.revenue,
                    'fees': m.fees,
                    'adjustments': m.adjustments,
                    'settlement': m.settlement,
                }
                for m in item.months
            ],
            'comparisons': [
                {
                    'month': c.month,
                    'monthName': c.month_name,
                    'current': c.current,
                    'previous': c.previous,
                    'previousMonthName': c.previous_month_name,
                    'changePercent': c.change_percent,
                    'changeAmount': c.change_amount,
                }
                for c in item.comparisons
            ],
        }
        for item in comparisons
    ]


def serialize_goal(goal) -> Dict[str, Any]:
    return {
        'id': goal.id,
        'platform': goal.platform,
        'year': goal.year,
        'month': goal.month,
        'type': goal.type,
        'target': goal.target,
        'updatedAt': goal.updated_at.isoformat() if goal.updated_at else None,
    }


def serialize_goal_summary(summary) -> Dict[str, Any]:
    """Serialize a GoalSummary for GET /api/dashboard/goals."""
    return {
        'year': summary.year,
        'goalYears': list(summary.goal_years),
        'displayType': summary.display_type,
        'hasAnyTarget': summary.has_any_target,
        'targetsByMonth': list(summary.targets_by_month),
        'monthlyActuals': [
            {'revenue': m.revenue, 'profit': m.profit} for m in summary.monthly_actuals
        ],
        'month': {
            'month': summary.focus_month,
            'label': summary.month_label,
            'target': summary.month_progress.target,
            'actual': summary.month_progress.actual,
            'percent': summary.month_progress.percent,
            'remaining': summary.month_progress.remaining,
        },
        'ytd': {
            'endMonth': summary.ytd_end_month,
            'label': summary.ytd_label,
            'target': summary.ytd_progress.target,
            'actual': summary.ytd_progress.actual,
            'percent': summary.ytd_progress.percent,
            'remaining': summary.ytd_progress.remaining,
        },
    }
