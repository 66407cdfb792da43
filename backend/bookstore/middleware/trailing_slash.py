"""
Bookstore Backend — Trailing Slash Middleware
===============================================

What:  Serves `/books/` as `/books` and `/books/{isbn}/` as `/books/{isbn}`.
Why:   The catch-all 404 route fully matches any path, so the router's own
       redirect_slashes never gets a chance to run.
How:   Strips one trailing slash from the ASGI path before routing. The root
       path is left alone.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response


def normalize_path(path: str) -> str:
    if len(path) > 1 and path.endswith("/"):
        return path[:-1]
    return path


class TrailingSlashMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.scope["path"]
        normalized = normalize_path(path)
        if normalized != path:
            request.scope["path"] = normalized
            raw_path = request.scope.get("raw_path")
            if raw_path and raw_path.endswith(b"/"):
                request.scope["raw_path"] = raw_path[:-1]
        return await call_next(request)
