# shared/common/middleware.py
"""
Request Middleware

RequestIDMiddleware tags every request so log lines and error bodies can
be correlated; LoggingMiddleware writes one access line per request.
"""

import uuid
import time
import logging
from typing import Callable
from django.http import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = 'X-Request-ID'
PROBE_PATHS = ('/health/', '/ready/')


class RequestIDMiddleware:

    def __init__(self, get_response: Callable):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        request.request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex

        response = self.get_response(request)
        response[REQUEST_ID_HEADER] = request.request_id
        return response


class LoggingMiddleware:
    """Access log; health and readiness probes are not logged."""

    def __init__(self, get_response: Callable):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        if request.path in PROBE_PATHS:
            return self.get_response(request)

        started = time.monotonic()
        response = self.get_response(request)
        elapsed_ms = round((time.monotonic() - started) * 1000, 2)

        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            level,
            f"{request.method} {request.path} {response.status_code}",
            extra={
                'request_id': getattr(request, 'request_id', None),
                'method': request.method,
                'path': request.path,
                'status_code': response.status_code,
                'duration_ms': elapsed_ms,
                'client_ip': client_ip(request),
                'user_id': getattr(getattr(request, 'user', None), 'id', None),
            }
        )

        response['X-Response-Time'] = f"{elapsed_ms}ms"
        return response


def client_ip(request: HttpRequest) -> str:
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR', '')
