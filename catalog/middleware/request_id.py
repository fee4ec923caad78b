"""
Catalog Backend: Request ID Middleware
=======================================

What:  Tags every request with a short correlation id, echoed back in the
       `X-Request-ID` response header and included in every error body.
How:   Reuses a client-supplied X-Request-ID when present, otherwise makes
       one from a UUID4. The id lives in a ContextVar so exception handlers
       and loggers can read it without access to the request object.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns `request.state.request_id` and the `X-Request-ID` header."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]

        # Not reset afterwards: the catch-all 500 handler runs outside this
        # middleware and still needs the id
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
