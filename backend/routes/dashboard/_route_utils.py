"""
Shared route utilities for dashboard endpoints.

Goals:
- Structured logger usage instead of ad-hoc prints
- Keep endpoint handlers small and consistent
"""

import time
import logging
from typing import Any, Dict, Optional


def route_logger(name: str) -> logging.Logger:
    """Return namespaced logger for dashboard routes."""
    return logging.getLogger(f"dashboard.routes.{name}")


def elapsed_ms(start_time: float) -> int:
    """Milliseconds since a time.perf_counter() start value."""
    return int((time.perf_counter() - start_time) * 1000)


def log_success(
    logger: logging.Logger,
    route: str,
    start_time: float,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    payload = {"route": route, "elapsed_ms": elapsed_ms(start_time)}
    if details:
        payload.update(details)
    logger.info("route_success %s", payload)


def log_error(
    logger: logging.Logger,
    route: str,
    start_time: float,
    err: Exception,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    payload = {"route": route, "elapsed_ms": elapsed_ms(start_time)}
    if details:
        payload.update(details)
    logger.error("route_error %s err=%s", payload, err)


def cache_control_header(config) -> str:
    """Cache-Control value for cacheable dashboard responses."""
    max_age = config.get('HTTP_CACHE_MAX_AGE', 60)
    swr = config.get('HTTP_CACHE_STALE_WHILE_REVALIDATE', 300)
    return f"public, max-age={max_age}, s-maxage={max_age}, stale-while-revalidate={swr}"
