"""
Notes Backend - Request ID Middleware
======================================

What:  Assigns an id to each incoming request and echoes it in X-Request-ID.
Why:   Every log line and every error envelope of one request share the id,
       so a user-reported request_id leads straight to the server logs.
How:   Takes the client's X-Request-ID if present, otherwise generates a
       short UUID; stores it in a ContextVar and on request.state.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one thread each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. Use the client's X-Request-ID header when it is present
        2. Otherwise generate a new id (first 8 chars of a UUID4)
        3. Store it in the ContextVar for loggers and exception handlers
        4. Add it to the response headers
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = rid
        return response
