"""
Request contract package.

Param models validate and normalize query strings and JSON bodies at the
route boundary; see api.contracts.pydantic_models.
"""
