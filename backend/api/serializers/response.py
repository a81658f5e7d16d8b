"""
Response envelope helpers.

Two shapes are in use:
- success_envelope: {"data": ..., "meta": {...}} for the goals, comparison
  and cache endpoints.
- aggregation_error_body: {"error": "...", "details": "..."} for dashboard
  fetch failures. The dashboard client renders `error` verbatim, so it
  carries the localized message; `details` is the machine-readable cause.
"""

from typing import Any, Dict, List, Optional
from flask import g


def success_envelope(
    data: Any,
    meta: Optional[Dict[str, Any]] = None,
    warnings: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """
    Build a standardized success response envelope.

    Returns:
        {
            "data": ...,
            "meta": {...},      # requestId always included when known
            "warnings": [...]   # if any
        }
    """
    response = {"data": data}

    meta = dict(meta) if meta else {}
    if hasattr(g, 'request_id'):
        meta['requestId'] = g.request_id
    response['meta'] = meta

    if warnings:
        response['warnings'] = warnings

    return response


def aggregation_error_body(message: str, details: Optional[str] = None) -> Dict[str, Any]:
    body = {"error": message}
    if details:
        body["details"] = details
    if hasattr(g, 'request_id'):
        body["requestId"] = g.request_id
    return body
