"""
Top Entities Service - Cached fan-out over the three rollup queries.

Serves GET /api/dashboard/top. For one (platform, start, end) combination:

1. Look up the cache (60s TTL, single-flight per key).
2. On miss, run top_products / top_provinces / top_platforms concurrently on
   a worker pool owned by that computation. The query timeout counts from
   submission, so every query shares one deadline.
3. Products and provinces are required: a failure aborts the fetch with
   AggregationError. Platforms are optional: a failure is logged as
   DegradedDataError and the result carries no platform cards.
4. Normalize platform labels, truncate to the top 5 in returned order,
   attach product images from one batched lookup, and lay the platform
   cards out in the fixed Shopee / TikTok / Lazada slots.

Failed computations are never cached (see TTLCache.cached).
"""

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from api.middleware.query_timing import bind_request_timing, current_timing_context
from constants import (
    MSG_PRODUCTS_FAILED,
    MSG_PROVINCES_FAILED,
    MSG_TOP_FETCH_FAILED,
    PLATFORM_SLOTS,
    TOP_ENTITY_LIMIT,
    UNKNOWN_PRODUCT,
    UNKNOWN_PROVINCE,
    normalize_platform_label,
)
from schemas.api_contract import PlatformFilter
from services.cache_service import TTLCache
from services.errors import AggregationError, CacheComputeError, DegradedDataError
from services.rollup_repository import PlatformRow, ProductRow, ProvinceRow, RollupRepository
from utils.cache_key import get_cache_key

logger = logging.getLogger('dashboard.top')

CACHE_PREFIX = 'dashboard-top'


@dataclass(frozen=True)
class TopProduct:
    name: str
    variant: str
    revenue: float
    qty: int
    returned: int
    platforms: Tuple[str, ...]
    latest_at: Optional[str]
    image_url: Optional[str] = None


@dataclass(frozen=True)
class TopProvince:
    name: str
    revenue: float
    qty: int


@dataclass(frozen=True)
class TopPlatform:
    platform: str
    variant: Optional[str]
    revenue: float
    qty: int


@dataclass(frozen=True)
class TopEntitiesResult:
    top_products: Tuple[TopProduct, ...]
    top_provinces: Tuple[TopProvince, ...]
    # Three slots in PLATFORM_SLOTS order, or empty when top_platforms failed
    platforms: Tuple[Optional[TopPlatform], ...]

    @property
    def degraded(self) -> bool:
        return not self.platforms


# =============================================================================
# ROW SHAPING
# =============================================================================

def normalize_platforms(labels: Sequence[str]) -> Tuple[str, ...]:
    """Canonical platform names in first-seen order. Unknown labels are dropped."""
    seen = []
    for label in labels:
        name = normalize_platform_label(label)
        if name and name not in seen:
            seen.append(name)
    return tuple(seen)


def build_top_products(rows: Sequence[ProductRow], limit: int = TOP_ENTITY_LIMIT) -> List[TopProduct]:
    products = []
    for row in rows[:limit]:
        name = row.name or row.variant or UNKNOWN_PRODUCT
        products.append(TopProduct(
            name=name,
            variant=row.variant or name,
            revenue=row.revenue,
            qty=row.qty,
            returned=row.returned,
            platforms=normalize_platforms(row.platforms),
            latest_at=row.latest_at.isoformat() if row.latest_at else None,
        ))
    return products


def build_top_provinces(rows: Sequence[ProvinceRow], limit: int = TOP_ENTITY_LIMIT) -> List[TopProvince]:
    known = [
        row for row in rows
        if row.name and row.name.strip() and row.name != UNKNOWN_PROVINCE
    ]
    return [TopProvince(name=row.name, revenue=row.revenue, qty=row.qty) for row in known[:limit]]


def build_platform_slots(rows: Sequence[PlatformRow]) -> Tuple[Optional[TopPlatform], ...]:
    """
    One card per slot: the first (highest revenue) row whose label normalizes
    to that platform, or None.
    """
    best: Dict[str, TopPlatform] = {}
    for row in rows:
        name = normalize_platform_label(row.platform)
        if name is None:
            logger.debug("drop_unknown_platform label=%r", row.platform)
            continue
        if name not in best:
            best[name] = TopPlatform(platform=name, variant=row.variant, revenue=row.revenue, qty=row.qty)
    return tuple(best.get(slot) for slot in PLATFORM_SLOTS)


def attach_images(products: List[TopProduct], images: Dict[str, Optional[str]]) -> Tuple[TopProduct, ...]:
    return tuple(
        TopProduct(
            name=p.name,
            variant=p.variant,
            revenue=p.revenue,
            qty=p.qty,
            returned=p.returned,
            platforms=p.platforms,
            latest_at=p.latest_at,
            image_url=images.get(p.name) or None,
        )
        for p in products
    )


# =============================================================================
# SERVICE
# =============================================================================

class TopEntitiesService:
    """
    Aggregation fetcher for the top-N dashboard panels.

    Args:
        repository: RollupRepository issuing the rollup and image queries
        cache: TTLCache shared by every request of the app
        ttl: Cache TTL in seconds
        timeout: Per-query timeout in seconds, measured from submission
        max_workers: Threads in the pool each cache miss creates (at least 3)
    """

    def __init__(
        self,
        repository: RollupRepository,
        cache: TTLCache,
        ttl: float = 60,
        timeout: float = 5.0,
        max_workers: int = 3,
    ):
        self._repository = repository
        self._cache = cache
        self._ttl = ttl
        self._timeout = timeout
        self._max_workers = max(max_workers, 3)

    @staticmethod
    def cache_key(platform_filter: PlatformFilter, start: Optional[date], end: Optional[date]) -> str:
        return get_cache_key(CACHE_PREFIX, {
            'platform': platform_filter.query_value(),
            'start': start,
            'end': end,
        })

    def fetch(
        self,
        platform_filter: PlatformFilter,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> TopEntitiesResult:
        """
        Return the top entities for the filter, from cache when live.

        Raises:
            AggregationError: If a required query failed or timed out
        """
        key = self.cache_key(platform_filter, start, end)
        try:
            return self._cache.cached(
                key,
                lambda: self._compute(platform_filter, start, end),
                ttl=self._ttl,
            )
        except CacheComputeError as e:
            if isinstance(e.original, AggregationError):
                raise e.original from e
            raise AggregationError(MSG_TOP_FETCH_FAILED, details=str(e.original)) from e

    def is_cached(self, platform_filter: PlatformFilter, start: Optional[date], end: Optional[date]) -> bool:
        return self._cache.get(self.cache_key(platform_filter, start, end)) is not None

    # ------------------------------------------------------------------
    # Computation (runs once per cache miss)
    # ------------------------------------------------------------------

    def _compute(self, platform_filter: PlatformFilter, start, end) -> TopEntitiesResult:
        started = time.perf_counter()
        platform = platform_filter.query_value()

        # One pool per computation. Timed-out queries are abandoned, not joined.
        pool = ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix='rollup')
        try:
            deadline = time.monotonic() + self._timeout
            products_f = self._submit(pool, self._repository.top_products, platform, start, end)
            provinces_f = self._submit(pool, self._repository.top_provinces, platform, start, end)
            platforms_f = self._submit(pool, self._repository.top_platforms, platform, start, end)

            product_rows = self._required(products_f, 'top_products', MSG_PRODUCTS_FAILED, deadline)
            province_rows = self._required(provinces_f, 'top_provinces', MSG_PROVINCES_FAILED, deadline)
            platform_rows = self._optional(platforms_f, 'top_platforms', deadline)

            products = build_top_products(product_rows)
            provinces = build_top_provinces(province_rows)
            slots = build_platform_slots(platform_rows) if platform_rows is not None else ()
            images = self._lookup_images(pool, products)
        finally:
            pool.shutdown(wait=False)

        result = TopEntitiesResult(
            top_products=attach_images(products, images),
            top_provinces=tuple(provinces),
            platforms=slots,
        )
        logger.info(
            "top_computed platform=%s start=%s end=%s products=%d provinces=%d degraded=%s elapsed_ms=%.1f",
            platform_filter.to_wire(), start, end, len(result.top_products),
            len(result.top_provinces), result.degraded, (time.perf_counter() - started) * 1000,
        )
        return result

    @staticmethod
    def _submit(pool: ThreadPoolExecutor, fn, *args) -> Future:
        queries, request_id = current_timing_context()

        def run():
            bind_request_timing(queries, request_id)
            try:
                return fn(*args)
            finally:
                bind_request_timing(None)

        return pool.submit(run)

    def _wait(self, future: Future, query: str, deadline: float):
        try:
            return future.result(timeout=max(0.0, deadline - time.monotonic()))
        except FutureTimeoutError:
            future.cancel()
            raise TimeoutError(f"{query} timed out after {self._timeout}s")

    def _required(self, future: Future, query: str, message: str, deadline: float):
        try:
            return self._wait(future, query, deadline)
        except Exception as e:
            logger.error("rollup_required_failed query=%s err=%s", query, e)
            raise AggregationError(message, details=_details(e), query=query) from e

    def _optional(self, future: Future, query: str, deadline: float):
        try:
            return self._wait(future, query, deadline)
        except Exception as e:
            degraded = DegradedDataError(query, _details(e))
            logger.warning("rollup_degraded query=%s err=%s", query, degraded)
            return None

    def _lookup_images(self, pool: ThreadPoolExecutor, products: Sequence[TopProduct]) -> Dict[str, Optional[str]]:
        names = sorted({p.name for p in products})
        if not names:
            return {}
        deadline = time.monotonic() + self._timeout
        future = self._submit(pool, self._repository.product_images, names)
        try:
            return self._wait(future, 'product_images', deadline) or {}
        except Exception as e:
            logger.warning("image_lookup_failed names=%d err=%s", len(names), e)
            return {}


def _details(error: BaseException) -> str:
    return getattr(error, 'details', None) or str(error) or type(error).__name__
