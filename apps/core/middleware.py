# apps/core/middleware.py

"""
Django middleware binding request context to structlog.

Every log line emitted while a request is being processed carries the
request id, method and path, so payment and webhook events can be traced
back to the HTTP call that produced them.
"""

import uuid
from collections.abc import Callable

import structlog
from django.http import HttpRequest, HttpResponse


class RequestContextMiddleware:
    """Bind a request id and the request path to structlog's context."""

    header_name = "X-Request-ID"

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        request_id = request.headers.get(self.header_name) or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.path,
        )

        try:
            response = self.get_response(request)
        finally:
            structlog.contextvars.clear_contextvars()

        response[self.header_name] = request_id
        return response
