"""
Tests for the request param models in api.contracts.pydantic_models.

Each model's .parse() must either return a frozen, normalized instance or
raise utils.normalize.ValidationError naming the first bad field.
"""

from datetime import date

import pytest
from werkzeug.datastructures import MultiDict

from api.contracts.pydantic_models import (
    CacheClearParams,
    GoalProgressParams,
    GoalQueryParams,
    GoalUpsertBody,
    MonthComparisonParams,
    TopParams,
)
from schemas.api_contract import Platform
from utils.normalize import ValidationError


class TestTopParams:
    def test_defaults(self):
        params = TopParams.parse({})

        assert params.platform == "all"
        assert params.start is None and params.end is None
        assert params.platform_filter.is_all

    @pytest.mark.parametrize("raw,expected", [
        ("all", "all"),
        ("ALL", "all"),
        ("", "all"),
        ("shopee", "Shopee"),
        ("Tik Tok", "TikTok"),
        ("TikTok Shop", "TikTok"),
        (" lazada ", "Lazada"),
    ])
    def test_platform_spellings(self, raw, expected):
        assert TopParams.parse({"platform": raw}).platform == expected

    def test_platform_filter_is_typed(self):
        params = TopParams.parse({"platform": "shopee"})

        assert params.platform_filter.platform is Platform.SHOPEE
        assert params.platform_filter.query_value() == "Shopee"

    def test_unknown_platform(self):
        with pytest.raises(ValidationError) as exc:
            TopParams.parse({"platform": "ebay"})

        assert exc.value.field == "platform"
        assert "Unknown platform" in str(exc.value)

    def test_dates_from_multidict(self):
        params = TopParams.parse(MultiDict([
            ("start", "2025-01-01"), ("end", "2025-01-31T10:00:00Z"), ("junk", "x"),
        ]))

        assert params.start == date(2025, 1, 1)
        assert params.end == date(2025, 1, 31)

    def test_single_day_range_is_allowed(self):
        params = TopParams.parse({"start": "2025-01-05", "end": "2025-01-05"})

        assert params.start == params.end

    def test_reversed_range(self):
        with pytest.raises(ValidationError) as exc:
            TopParams.parse({"start": "2025-02-01", "end": "2025-01-01"})

        assert str(exc.value) == "start must be on or before end"

    def test_bad_date(self):
        with pytest.raises(ValidationError) as exc:
            TopParams.parse({"start": "yesterday"})

        assert exc.value.field == "start"
        assert exc.value.received_value == "yesterday"

    def test_frozen(self):
        params = TopParams.parse({})

        with pytest.raises(Exception):
            params.platform = "Shopee"


class TestMonthComparisonParams:
    def test_basis_normalized(self):
        assert MonthComparisonParams.parse({}).basis == "order"
        assert MonthComparisonParams.parse({"basis": "PAYMENT"}).basis == "payment"

    def test_unknown_basis(self):
        with pytest.raises(ValidationError) as exc:
            MonthComparisonParams.parse({"basis": "ship"})

        assert exc.value.field == "basis"


class TestGoalProgressParams:
    def test_year_defaults_to_today(self):
        params = GoalProgressParams.parse({})

        assert params.resolved_year(date(2026, 3, 1)) == 2026

    def test_current_year_without_goals_falls_back_to_latest_goal_year(self):
        params = GoalProgressParams.parse({})

        assert params.resolved_year(date(2026, 3, 1), [2023, 2025, 2024]) == 2025
        assert params.resolved_year(date(2026, 3, 1), [2025, 2026]) == 2026

    def test_explicit_year(self):
        params = GoalProgressParams.parse({"year": "2024", "start": "2024-05-01"})

        assert params.resolved_year(date(2026, 3, 1)) == 2024
        assert params.start == date(2024, 5, 1)

    def test_year_out_of_range(self):
        with pytest.raises(ValidationError) as exc:
            GoalProgressParams.parse({"year": "1850"})

        assert exc.value.field == "year"


class TestGoalQueryParams:
    def test_absent_platform_means_any(self):
        params = GoalQueryParams.parse({})

        assert params.platform is None
        assert params.type is None

    def test_filters_normalized(self):
        params = GoalQueryParams.parse({"platform": "tiktok", "type": " Profit ", "month": "3"})

        assert params.platform == "TikTok"
        assert params.type == "profit"
        assert params.month == 3

    def test_all_platform_row(self):
        assert GoalQueryParams.parse({"platform": "all"}).platform == "all"


class TestGoalUpsertBody:
    def test_valid(self):
        body = GoalUpsertBody.parse({
            "platform": "shopee", "year": 2025, "month": 12, "type": "profit", "target": 0,
        })

        assert body.platform == "Shopee"
        assert body.month == 12
        assert body.target == 0.0

    def test_missing_field(self):
        with pytest.raises(ValidationError) as exc:
            GoalUpsertBody.parse({"platform": "all", "year": 2025, "month": 1, "type": "revenue"})

        assert exc.value.field == "target"

    def test_platform_required(self):
        with pytest.raises(ValidationError) as exc:
            GoalUpsertBody.parse({"platform": "  ", "year": 2025, "month": 1, "type": "revenue", "target": 1})

        assert exc.value.field == "platform"
        assert str(exc.value) == "platform is required"


def test_cache_clear_prefix_optional():
    assert CacheClearParams.parse({}).prefix is None
    assert CacheClearParams.parse({"prefix": " dashboard-top "}).prefix == "dashboard-top"
