"""
Rollup Repository - Typed access to the sales rollup functions.

The database exposes three set-returning functions, each taking
(platform_filter, start_date, end_date) with NULL meaning "unfiltered":

    top_products(...)   -> name, variant, revenue, qty, returned, platforms, latest_at
    top_provinces(...)  -> name, revenue, qty
    top_platforms(...)  -> platform, variant, revenue, qty

Rows come back already sorted by revenue descending. Every row is validated
into a pydantic model here, so a renamed column or a NULL where a number is
expected fails fast with RollupQueryError instead of leaking None into the
response.

Each call opens its own connection from the engine. The aggregation fetcher
runs these calls on worker threads, where the Flask-SQLAlchemy scoped session
is not available.
"""

import logging
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from db.sql import run_sql
from services.errors import RollupQueryError

logger = logging.getLogger('dashboard.rollups')

RowT = TypeVar('RowT', bound=BaseModel)


# =============================================================================
# ROW MODELS
# =============================================================================

class RollupRow(BaseModel):
    model_config = ConfigDict(frozen=True, extra='ignore')


class ProductRow(RollupRow):
    name: Optional[str] = None
    variant: Optional[str] = None
    revenue: float = 0.0
    qty: int = 0
    returned: int = 0
    platforms: List[str] = Field(default_factory=list)
    latest_at: Optional[datetime] = None


class ProvinceRow(RollupRow):
    name: Optional[str] = None
    revenue: float = 0.0
    qty: int = 0


class PlatformRow(RollupRow):
    platform: Optional[str] = None
    variant: Optional[str] = None
    revenue: float = 0.0
    qty: int = 0


def parse_rows(query: str, model: Type[RowT], rows: Iterable[Dict[str, Any]]) -> List[RowT]:
    """
    Validate raw rows into row models.

    NULL numeric columns are read as 0 (the functions aggregate with SUM,
    which yields NULL over an empty group).

    Raises:
        RollupQueryError: If any row does not match the model
    """
    parsed = []
    for index, raw in enumerate(rows):
        cleaned = {k: v for k, v in raw.items() if v is not None}
        try:
            parsed.append(model.model_validate(cleaned))
        except PydanticValidationError as e:
            raise RollupQueryError(query, f"row {index}: {e.errors()[0]['msg']} ({e.errors()[0]['loc']})") from e
    return parsed


# =============================================================================
# REPOSITORIES
# =============================================================================

class RollupRepository:
    """Interface consumed by TopEntitiesService. Tests supply in-memory fakes."""

    def top_products(self, platform: Optional[str], start: Optional[date], end: Optional[date]) -> List[ProductRow]:
        raise NotImplementedError

    def top_provinces(self, platform: Optional[str], start: Optional[date], end: Optional[date]) -> List[ProvinceRow]:
        raise NotImplementedError

    def top_platforms(self, platform: Optional[str], start: Optional[date], end: Optional[date]) -> List[PlatformRow]:
        raise NotImplementedError

    def product_images(self, names: Sequence[str]) -> Dict[str, Optional[str]]:
        raise NotImplementedError


class SqlRollupRepository(RollupRepository):
    """RollupRepository backed by the Postgres rollup functions."""

    TOP_PRODUCTS_SQL = "SELECT * FROM top_products(:platform_filter, :start_date, :end_date)"
    TOP_PROVINCES_SQL = "SELECT * FROM top_provinces(:platform_filter, :start_date, :end_date)"
    TOP_PLATFORMS_SQL = "SELECT * FROM top_platforms(:platform_filter, :start_date, :end_date)"

    def __init__(self, engine):
        self._engine = engine

    def _call(self, query: str, sql: str, model: Type[RowT], platform, start, end) -> List[RowT]:
        try:
            with self._engine.connect() as conn:
                rows = run_sql(
                    conn,
                    sql,
                    platform_filter=platform,
                    start_date=start,
                    end_date=end,
                )
        except SQLAlchemyError as e:
            logger.error("rollup_query_failed query=%s platform=%s start=%s end=%s err=%s",
                         query, platform, start, end, e)
            raise RollupQueryError(query, str(e)) from e
        return parse_rows(query, model, rows)

    def top_products(self, platform, start, end):
        return self._call('top_products', self.TOP_PRODUCTS_SQL, ProductRow, platform, start, end)

    def top_provinces(self, platform, start, end):
        return self._call('top_provinces', self.TOP_PROVINCES_SQL, ProvinceRow, platform, start, end)

    def top_platforms(self, platform, start, end):
        return self._call('top_platforms', self.TOP_PLATFORMS_SQL, PlatformRow, platform, start, end)

    def product_images(self, names):
        """Batch lookup of product_master images. Names without a row are absent from the result."""
        from models.product_master import ProductMaster

        if not names:
            return {}
        stmt = (
            select(ProductMaster.name, ProductMaster.image_url)
            .where(ProductMaster.name.in_(list(names)))
        )
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(stmt).all()
        except SQLAlchemyError as e:
            raise RollupQueryError('product_images', str(e)) from e
        return {row.name: row.image_url for row in rows}
