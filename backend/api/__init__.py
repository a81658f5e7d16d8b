"""
API package - Request boundary layer.

This package provides:
- Pydantic param models (api.contracts.pydantic_models)
- Response envelope helpers (api.serializers)
- Global middleware (request_id, error_envelope, request_logging, query_timing)
"""
