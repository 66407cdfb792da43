"""
Bookstore Backend — Request ID Middleware
===========================================

What:  Assigns an ID to each incoming request and returns it in the response.
Why:   Every log line of one request shares the ID; clients can quote it.
How:   Accepts a client-supplied X-Request-ID when it looks like an ID,
       otherwise generates a short UUID. The ID lives in a ContextVar and in
       request.state, and is echoed in the response header.

The ContextVar is not reset after the response. Errors that escape to
Starlette's ServerErrorMiddleware are rendered outside this middleware,
and their handler reads the ID back from it.
"""

import re
import uuid
from typing import Optional
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Client IDs end up in log lines and response headers
_CLIENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9._:-]{1,64}$")

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def resolve_request_id(client_value: Optional[str]) -> str:
    """Return the client's ID if it is usable, else a fresh 8-char ID."""
    if client_value and _CLIENT_ID_PATTERN.match(client_value):
        return client_value
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
