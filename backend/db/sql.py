"""
SQL execution helper with enforced parameter conventions.

Rules:
1. Use :name param style only (SQLAlchemy bind params)
2. Pass Python date objects directly (no .isoformat() conversion)
3. Never use percent-paren psycopg2-specific style

Usage:
    from db.sql import run_sql

    rows = run_sql(
        conn,
        "SELECT * FROM top_products(:platform_filter, :start_date, :end_date)",
        platform_filter='Shopee',
        start_date=date(2025, 1, 1),
        end_date=None,
    )
"""
import re
from datetime import date, datetime
from typing import Any, Dict, List
from sqlalchemy import text


PSYCOPG2_PARAM_PATTERN = re.compile(r'%\([a-zA-Z_][a-zA-Z0-9_]*\)s')


class SQLParamStyleError(Exception):
    """Raised when SQL uses incorrect parameter style."""
    pass


class SQLDateParamError(Exception):
    """Raised when date parameters are not Python date/datetime objects."""
    pass


def validate_sql_text(sql: str) -> None:
    """
    Validate that SQL text uses correct :name param style.

    Raises SQLParamStyleError if psycopg2 percent-paren style is detected.
    """
    matches = PSYCOPG2_PARAM_PATTERN.findall(sql)
    if matches:
        raise SQLParamStyleError(
            f"SQL contains psycopg2-style params: {matches}. "
            f"Use SQLAlchemy :name style instead."
        )


def validate_params(params: Dict[str, Any]) -> None:
    """
    Validate that date parameters are Python date/datetime objects.

    Raises SQLDateParamError if date params are strings.
    """
    for key, value in params.items():
        is_date_param = key.endswith('_date') or key.startswith('date_')

        if is_date_param and value is not None:
            if isinstance(value, str):
                raise SQLDateParamError(
                    f"Date parameter '{key}' is a string ('{value}'). "
                    f"Pass a Python date or datetime object instead."
                )
            if not isinstance(value, (date, datetime)):
                raise SQLDateParamError(
                    f"Date parameter '{key}' has type {type(value).__name__}. "
                    f"Expected date or datetime."
                )


def run_sql(
    db,
    sql: str,
    validate: bool = True,
    **params
) -> List[Dict[str, Any]]:
    """
    Execute SQL with validation and return rows as dicts.

    Args:
        db: SQLAlchemy connection, session, or object with .session
        sql: SQL text using :name param style
        validate: Whether to validate SQL and params (default True)
        **params: Named parameters to pass to the query

    Raises:
        SQLParamStyleError: If SQL uses psycopg2 percent-paren style
        SQLDateParamError: If date params are strings instead of date objects
    """
    if validate:
        validate_sql_text(sql)
        validate_params(params)

    session = getattr(db, 'session', db)

    result = session.execute(text(sql), params)
    return [dict(row) for row in result.mappings()]
