"""
Query timing middleware - Lightweight SQL timing for observability.

Captures per request:
- Query execution time (X-DB-Time-Ms)
- Query count (X-Query-Count)

Rollup queries run on worker threads, so timings are collected in a
per-request list shared with those threads (see bind_request_timing) rather
than in plain thread-local storage.

Log format:
    SLOW_QUERY request_id=<uuid> elapsed_ms=<float> stmt=<first 80 chars>
    REQUEST_TIMING request_id=<uuid> db_time_ms=<float> query_count=<int>
"""

import logging
import threading
import time
from typing import List, Optional

from flask import Flask, g
from sqlalchemy import event
from sqlalchemy.engine import Engine

logger = logging.getLogger('query_timing')

_local = threading.local()
_lock = threading.Lock()

SLOW_QUERY_THRESHOLD_MS = 500
REQUEST_TIMING_LOG_MS = 200


def _current() -> Optional[List[dict]]:
    return getattr(_local, 'queries', None)


def bind_request_timing(queries: Optional[List[dict]], request_id: Optional[str] = None) -> None:
    """Attach the calling thread (e.g. a pool worker) to a request's timing list."""
    _local.queries = queries
    _local.request_id = request_id


def current_timing_context():
    """(queries, request_id) of the calling thread, for handing to worker threads."""
    return _current(), getattr(_local, 'request_id', None)


def _before_execute(conn, cursor, statement, parameters, context, executemany):
    context._query_start_time = time.perf_counter()


def _after_execute(conn, cursor, statement, parameters, context, executemany):
    start_time = getattr(context, '_query_start_time', None)
    if start_time is None:
        return

    elapsed_ms = (time.perf_counter() - start_time) * 1000

    queries = _current()
    if queries is not None:
        with _lock:
            queries.append({
                'elapsed_ms': round(elapsed_ms, 2),
                'rows_affected': cursor.rowcount if cursor.rowcount >= 0 else None,
            })

    if elapsed_ms > SLOW_QUERY_THRESHOLD_MS:
        stmt_preview = (statement[:80] + '...') if statement and len(statement) > 80 else statement
        logger.warning(
            "SLOW_QUERY request_id=%s elapsed_ms=%.2f stmt=%s",
            getattr(_local, 'request_id', 'no-request-id'), elapsed_ms, stmt_preview,
        )


def setup_query_timing_middleware(app: Flask) -> None:
    """
    Set up query timing middleware on Flask app.

    Engine listeners are registered once per process; request hooks are
    registered per app.
    """
    if not event.contains(Engine, "before_cursor_execute", _before_execute):
        event.listen(Engine, "before_cursor_execute", _before_execute)
        event.listen(Engine, "after_cursor_execute", _after_execute)

    @app.before_request
    def reset_query_timing():
        bind_request_timing([], getattr(g, 'request_id', None))

    @app.after_request
    def inject_timing_headers(response):
        queries = _current() or []
        if not queries:
            return response

        with _lock:
            total_db_ms = sum(q['elapsed_ms'] for q in queries)
            query_count = len(queries)

        response.headers['X-DB-Time-Ms'] = str(round(total_db_ms, 2))
        response.headers['X-Query-Count'] = str(query_count)

        if total_db_ms > REQUEST_TIMING_LOG_MS:
            logger.info(
                "REQUEST_TIMING request_id=%s db_time_ms=%.2f query_count=%d",
                getattr(g, 'request_id', 'no-request-id'), total_db_ms, query_count,
            )

        return response

    @app.teardown_request
    def release_query_timing(exc=None):
        bind_request_timing(None)
