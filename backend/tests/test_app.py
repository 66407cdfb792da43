"""
Bookstore Backend — Application Plumbing Tests
================================================

What:  Health check, request IDs, lifespan and the terminal error mapper.
"""

import logging
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient, ASGITransport

from bookstore.exceptions import DatabaseError
from bookstore.main import create_app
from bookstore.middleware.request_id import resolve_request_id
from bookstore.middleware.trailing_slash import normalize_path
from bookstore.services.book_store import BookStore


class TestHealth:

    @pytest.mark.asyncio
    async def test_health_reports_connected_database(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["version"] == "1.0.0"

    @pytest.mark.asyncio
    async def test_health_reports_unreachable_database(self, app, test_client):
        with patch.object(app.state.database, "ping", AsyncMock(return_value=False)):
            response = await test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "unhealthy"
        assert response.json()["database"] == "disconnected"


class TestRequestId:

    @pytest.mark.asyncio
    async def test_generates_request_id(self, test_client):
        response = await test_client.get("/books")

        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_echoes_client_request_id(self, test_client):
        response = await test_client.get("/books/missing", headers={"X-Request-ID": "abc-123"})

        assert response.status_code == 404
        assert response.headers["X-Request-ID"] == "abc-123"

    @pytest.mark.asyncio
    async def test_replaces_unusable_client_request_id(self, test_client):
        response = await test_client.get("/books", headers={"X-Request-ID": "x" * 65})

        rid = response.headers["X-Request-ID"]
        assert rid != "x" * 65
        assert len(rid) == 8

    def test_resolve_request_id(self):
        assert resolve_request_id("req-42.a:b_c") == "req-42.a:b_c"
        assert len(resolve_request_id(None)) == 8
        assert len(resolve_request_id("has spaces")) == 8


class TestErrorMapping:

    @pytest.mark.asyncio
    async def test_database_error_uses_envelope(self, test_client):
        with patch(
            "bookstore.routes.books.BookStore.get_all",
            AsyncMock(side_effect=DatabaseError(message="Could not retrieve books. Please try again.")),
        ):
            response = await test_client.get("/books")

        assert response.status_code == 500
        assert response.json() == {
            "error": {"message": "Could not retrieve books. Please try again.", "status": 500}
        }

    @pytest.mark.asyncio
    async def test_unexpected_error_is_500_without_details(self, app):
        # The fallback handler answers, then Starlette re-raises for the server
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            with patch(
                "bookstore.routes.books.BookStore.get_all",
                AsyncMock(side_effect=RuntimeError("secret connection string")),
            ):
                response = await client.get("/books", headers={"X-Request-ID": "abc"})

        assert response.status_code == 500
        assert response.json() == {
            "error": {"message": "An unexpected error occurred", "status": 500}
        }
        assert response.headers["X-Request-ID"] == "abc"

    @pytest.mark.asyncio
    async def test_integer_too_large_for_database_is_wrapped(self, test_client, book1):
        response = await test_client.post(
            "/books", json={**book1, "pages": 10**30}, headers={"X-Request-ID": "big-int"}
        )

        assert response.status_code == 500
        assert response.json() == {
            "error": {"message": "Could not create the book. Please try again.", "status": 500}
        }
        assert response.headers["X-Request-ID"] == "big-int"
        assert (await test_client.get("/books")).json() == {"books": []}


class TestTrailingSlash:

    def test_normalize_path(self):
        assert normalize_path("/books/") == "/books"
        assert normalize_path("/books/0691161518/") == "/books/0691161518"
        assert normalize_path("/books") == "/books"
        assert normalize_path("/") == "/"


class TestLifespan:

    @pytest.mark.asyncio
    async def test_auto_create_tables_on_startup(self, test_settings, book):
        settings = test_settings.model_copy(update={"auto_create_tables": True})
        app = create_app(settings)
        database = app.state.database

        async with app.router.lifespan_context(app):
            async with database.session_factory() as session:
                store = BookStore(session)
                await store.create(book)
                assert [b.isbn for b in await store.get_all()] == [book["isbn"]]

        await database.dispose()


class TestAccessLog:

    @pytest.mark.asyncio
    async def test_logs_status_and_request_id(self, test_client, caplog):
        caplog.set_level(logging.INFO, logger="bookstore.access")

        await test_client.get("/books/missing?verbose=1", headers={"X-Request-ID": "log-1"})

        record = next(r for r in caplog.records if r.name == "bookstore.access")
        assert record.levelno == logging.WARNING
        assert record.status == 404
        assert record.request_id == "log-1"
        assert "/books/missing?verbose=1" in record.getMessage()

    @pytest.mark.asyncio
    async def test_unhandled_error_logged_as_500(self, app, caplog):
        caplog.set_level(logging.INFO, logger="bookstore.access")
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            with patch(
                "bookstore.routes.books.BookStore.get_all",
                AsyncMock(side_effect=RuntimeError("boom")),
            ):
                await client.get("/books")

        record = next(r for r in caplog.records if r.name == "bookstore.access")
        assert record.levelno == logging.ERROR
        assert record.status == 500
        assert record.getMessage().endswith(" unhandled")

    @pytest.mark.asyncio
    async def test_health_is_not_logged(self, test_client, caplog):
        caplog.set_level(logging.INFO, logger="bookstore.access")

        await test_client.get("/health")

        assert not [r for r in caplog.records if r.name == "bookstore.access"]
