"""
Request ID middleware - Inject X-Request-ID for request correlation.

A caller-supplied X-Request-ID is reused when it looks like an identifier
(at most 64 chars of [A-Za-z0-9._-]); anything else is replaced so log lines
cannot be forged through the header.
"""

import re
import uuid
from flask import Flask, request, g

_REQUEST_ID_PATTERN = re.compile(r'^[A-Za-z0-9._-]{1,64}$')


def setup_request_id_middleware(app: Flask) -> None:
    """
    Set up request ID middleware on Flask app.

    Injects X-Request-ID into:
    - Flask's g object (g.request_id)
    - Response headers (X-Request-ID)
    """

    @app.before_request
    def inject_request_id():
        incoming = request.headers.get('X-Request-ID', '')
        g.request_id = incoming if _REQUEST_ID_PATTERN.match(incoming) else str(uuid.uuid4())

    @app.after_request
    def add_request_id_header(response):
        if hasattr(g, 'request_id'):
            response.headers['X-Request-ID'] = g.request_id
        return response
