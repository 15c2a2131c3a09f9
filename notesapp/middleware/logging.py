"""
Notes Backend - Request Logging Middleware
===========================================

What:  One access-log line per HTTP request.
How:   Measures the time spent below this middleware and logs method, path,
       status, duration, request id and client IP.
When:  Runs inside RequestIDMiddleware, so the request id is available.

What we log vs what we DON'T log (privacy):
    Log:       method, path, status, duration, IP, request ID
    Never log: request bodies (emails, passcodes), Authorization headers
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from notesapp.middleware.request_id import request_id_var

logger = logging.getLogger("notesapp.access")

# Probed every few seconds by load balancers
_SKIP_PATHS = frozenset({"/health"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Level by status class: 5xx → ERROR, 4xx → WARNING, otherwise INFO.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in _SKIP_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
