"""
Request logging middleware - lightweight usage sampling.

Logs API requests with sampling and a path watchlist. Dashboard routes set
g.cache_status ('hit' / 'miss') so cache effectiveness shows up per request.
"""

import logging
import random
import time
from typing import List

from flask import Flask, g, request


logger = logging.getLogger("api.request")


def _parse_watchlist(raw: str) -> List[str]:
    if not raw:
        return []
    return [p.strip() for p in raw.split(",") if p.strip()]


def _should_log(path: str, watchlist: List[str], sample_rate: float) -> bool:
    if watchlist:
        return any(path.startswith(prefix) for prefix in watchlist)
    if sample_rate <= 0:
        return False
    if sample_rate >= 1:
        return True
    return random.random() <= sample_rate


def setup_request_logging_middleware(app: Flask) -> None:
    """
    Set up request logging middleware on Flask app.

    Config keys (see config.Config):
      - REQUEST_LOG_ENABLED
      - REQUEST_LOG_SAMPLE_RATE
      - REQUEST_LOG_ENDPOINTS (comma-separated path prefixes to always log)
    """
    if not app.config.get("REQUEST_LOG_ENABLED", True):
        return

    try:
        sample_rate = float(app.config.get("REQUEST_LOG_SAMPLE_RATE", 0.0))
    except (TypeError, ValueError):
        sample_rate = 0.0
    watchlist = _parse_watchlist(app.config.get("REQUEST_LOG_ENDPOINTS", ""))

    @app.before_request
    def _start_timer():
        g.request_start = time.perf_counter()

    @app.after_request
    def _log_request(response):
        path = request.path
        if not path.startswith("/api"):
            return response

        if not _should_log(path, watchlist, sample_rate):
            return response

        duration_ms = None
        if hasattr(g, "request_start"):
            duration_ms = round((time.perf_counter() - g.request_start) * 1000, 2)

        logger.info(
            "api_request path=%s method=%s status=%s duration_ms=%s cache=%s request_id=%s",
            path,
            request.method,
            response.status_code,
            duration_ms,
            getattr(g, "cache_status", None),
            getattr(g, "request_id", None),
        )
        return response
