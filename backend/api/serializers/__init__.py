"""
Response serializers and envelope helpers.
"""

from .response import success_envelope, aggregation_error_body

__all__ = ['success_envelope', 'aggregation_error_body']
