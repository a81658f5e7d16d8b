"""
Shared Pydantic types and validators for API params.

These replicate the normalization logic from utils/normalize.py:
- DateCoercion: "2024-01-01" -> date(2024, 1, 1), ISO timestamps keep the date
- IntCoercion: "2025" -> 2025
- DateBasis: "Payment" -> "payment"
"""

from datetime import date, datetime
from typing import Annotated, Any, Literal, Optional

from pydantic import BeforeValidator

from constants import DATE_BASES, DATE_BASIS_ORDER


def coerce_date(v: Any) -> Optional[date]:
    """
    Coerce value to date object.

    Handles:
    - date object: passthrough
    - string: parse as YYYY-MM-DD or an ISO timestamp
    - None/empty: None

    Examples:
        "2024-01-01" -> date(2024, 1, 1)
        "2024-01-01T10:00:00Z" -> date(2024, 1, 1)
        None -> None
    """
    if v is None or v == '':
        return None
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    if isinstance(v, str):
        try:
            if len(v) > 10:
                return datetime.fromisoformat(v.replace('Z', '+00:00')).date()
            return datetime.strptime(v, '%Y-%m-%d').date()
        except ValueError:
            # Let Pydantic validation handle the error
            return v  # type: ignore
    return v  # type: ignore


def coerce_int(v: Any) -> Optional[int]:
    """Coerce value to int."""
    if v is None or v == '':
        return None
    if isinstance(v, bool):
        return v  # type: ignore
    if isinstance(v, int):
        return v
    if isinstance(v, str):
        try:
            return int(v)
        except ValueError:
            return v  # type: ignore
    return v  # type: ignore


def normalize_date_basis(v: Any) -> str:
    """None/empty -> 'order'; otherwise lowercased. Unknown values fail the Literal check."""
    if v is None or v == '':
        return DATE_BASIS_ORDER
    if isinstance(v, str):
        key = v.strip().lower()
        if key in DATE_BASES:
            return key
    return v


# Annotated types for use in Pydantic models
CoercedDate = Annotated[Optional[date], BeforeValidator(coerce_date)]
CoercedInt = Annotated[Optional[int], BeforeValidator(coerce_int)]
DateBasis = Annotated[Literal["order", "payment"], BeforeValidator(normalize_date_basis)]
