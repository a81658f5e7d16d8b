"""
Cache key helpers.

Provides stable, normalized cache key construction to avoid drift between callers.
Keys are a pure function of (prefix, params): parameter order never matters
and a None value is treated the same as an absent key.
"""

from datetime import date, datetime
from enum import Enum
import json
from typing import Any, Dict, Iterable, Optional


def _normalize_cache_value(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_normalize_cache_value(v) for v in value]
    if isinstance(value, dict):
        return {k: _normalize_cache_value(v) for k, v in sorted(value.items())}
    return value


def normalize_cache_params(
    params: Dict[str, Any],
    *,
    include_keys: Optional[Iterable[str]] = None,
) -> Dict[str, Any]:
    """
    Normalize params for cache keys.

    - Skips None values (None and absent produce the same key)
    - Sorts keys for stability
    - Normalizes dates, enums and nested structures
    """
    allowed = set(include_keys) if include_keys is not None else None
    filtered: Dict[str, Any] = {}
    for key, value in params.items():
        if allowed is not None and key not in allowed:
            continue
        if value is None:
            continue
        filtered[key] = _normalize_cache_value(value)
    return {k: filtered[k] for k in sorted(filtered.keys())}


def build_json_cache_key(
    prefix: str,
    params: Dict[str, Any],
    *,
    include_keys: Optional[Iterable[str]] = None
) -> str:
    normalized = normalize_cache_params(params, include_keys=include_keys)
    return f"{prefix}:{json.dumps(normalized, sort_keys=True, ensure_ascii=False)}"


def get_cache_key(prefix: str, params: Dict[str, Any]) -> str:
    """
    Build the cache key for a cached computation.

    JSON encoding keeps values unambiguous, so '&' or '=' inside a value can
    never make two different parameter sets collide.
    """
    return build_json_cache_key(prefix, params)
