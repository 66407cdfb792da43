# Middleware package init
"""
Bookstore Backend — Middleware Package
========================================

Cross-cutting concerns applied to every request.

Middleware Chain (order matters):
    Request → [Request ID] → [Access Logging] → [CORS] → [Trailing Slash] → Route Handler

    1. Request ID: generate (or accept) a correlation ID
    2. Logging: log method, path, status and duration with that ID
    3. CORS: FastAPI's CORSMiddleware (handles preflight)
    4. Trailing slash: route `/books/` like `/books`
"""
