"""Application-level tests: health, root, request ids and error rendering."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from account_service import __version__
from account_service.api.errors import register_exception_handlers
from account_service.core.config import settings
from account_service.core.exceptions import NotFoundError


class TestHealthEndpoints:
    async def test_health(self, async_client):
        response = await async_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    async def test_root(self, async_client):
        response = await async_client.get("/")

        assert response.json() == {
            "name": settings.PROJECT_NAME,
            "version": __version__,
            "docs": "/docs",
        }


class TestRequestId:
    async def test_generated_when_absent(self, async_client):
        response = await async_client.get("/health")

        assert len(response.headers["X-Request-ID"]) == 32

    async def test_echoes_incoming_id(self, async_client):
        response = await async_client.get("/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"


@pytest.fixture
def error_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/missing")
    async def missing() -> None:
        raise NotFoundError("Widget not found", details={"id": 7})

    @app.get("/boom")
    async def boom() -> None:
        raise RuntimeError("kaboom")

    @app.get("/typed")
    async def typed(count: int) -> dict[str, int]:
        return {"count": count}

    return app


class TestErrorRendering:
    async def test_app_error(self, error_app):
        transport = ASGITransport(app=error_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/missing")

        assert response.status_code == 404
        assert response.json() == {
            "error": "NotFoundError",
            "message": "Widget not found",
            "details": {"id": 7},
        }

    async def test_query_validation(self, error_app):
        transport = ASGITransport(app=error_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/typed", params={"count": "many"})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "ValidationError"
        assert body["details"]["errors"][0]["field"] == "count"

    async def test_unhandled_exception(self, error_app):
        # The server error middleware re-raises after responding
        transport = ASGITransport(app=error_app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/boom")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "InternalError"
        # DEBUG is on in tests
        assert body["message"] == "kaboom"
