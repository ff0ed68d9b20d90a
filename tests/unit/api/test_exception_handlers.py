"""Unit tests for exception handlers."""

import json
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from api.exception_handlers import setup_exception_handlers
from core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BillNotFoundError,
    DuplicateBillInstanceError,
)


def _create_test_app() -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)
    return app


async def _request(app: FastAPI, method: str, path: str, **kwargs):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        return await c.request(method, path, **kwargs)


class TestExceptionHandlers:
    @pytest.mark.asyncio
    async def test_not_found_returns_error_code_and_details(self) -> None:
        app = _create_test_app()

        @app.get("/raise-app")
        async def _() -> None:
            raise BillNotFoundError("some-id")

        response = await _request(app, "GET", "/raise-app")

        assert response.status_code == 404
        body = response.json()
        assert body["error_code"] == "BILL_NOT_FOUND"
        assert "some-id" in body["message"]
        assert body["details"]["bill_id"] == "some-id"

    @pytest.mark.asyncio
    async def test_authorization_error_returns_403(self) -> None:
        app = _create_test_app()

        @app.get("/raise-forbidden")
        async def _() -> None:
            raise AuthorizationError("Unauthorized to update this bill")

        response = await _request(app, "GET", "/raise-forbidden")

        assert response.status_code == 403
        assert response.json()["error_code"] == "FORBIDDEN"
        assert response.json()["message"] == "Unauthorized to update this bill"

    @pytest.mark.asyncio
    async def test_authentication_error_returns_401(self) -> None:
        app = _create_test_app()

        @app.get("/raise-unauthenticated")
        async def _() -> None:
            raise AuthenticationError()

        response = await _request(app, "GET", "/raise-unauthenticated")

        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_duplicate_instance_returns_409(self) -> None:
        app = _create_test_app()

        @app.get("/raise-duplicate")
        async def _() -> None:
            raise DuplicateBillInstanceError("bill-1", "2024-11")

        response = await _request(app, "GET", "/raise-duplicate")

        assert response.status_code == 409
        body = response.json()
        assert body["error_code"] == "DUPLICATE_BILL_INSTANCE"
        assert body["details"] == {"bill_id": "bill-1", "period": "2024-11"}

    @pytest.mark.asyncio
    async def test_http_exception_returns_standard_format(self) -> None:
        from starlette.exceptions import HTTPException

        app = _create_test_app()

        @app.get("/raise-http")
        async def _() -> None:
            raise HTTPException(status_code=403, detail="Forbidden")

        response = await _request(app, "GET", "/raise-http")

        assert response.status_code == 403
        body = response.json()
        assert body["error_code"] == "HTTP_ERROR"
        assert body["message"] == "Forbidden"

    @pytest.mark.asyncio
    async def test_validation_error_returns_field_details(self) -> None:
        from pydantic import BaseModel, Field

        app = _create_test_app()

        class Body(BaseModel):
            name: str = Field(..., min_length=1)

        @app.post("/validate")
        async def _(body: Body) -> dict[str, bool]:
            return {"ok": True}

        response = await _request(app, "POST", "/validate", json={"name": ""})

        assert response.status_code == 422
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert body["details"][0]["field"] == "body.name"

    @pytest.mark.asyncio
    async def test_unhandled_exception_returns_500(self) -> None:
        app = _create_test_app()

        mock_request = MagicMock()
        mock_request.state.request_id = "test-req-id"

        handler = app.exception_handlers.get(Exception)
        assert handler is not None, "Global exception handler not registered"

        response = await handler(mock_request, RuntimeError("Something went wrong"))  # type: ignore[misc]

        assert response.status_code == 500
        body = json.loads(response.body)
        assert body["error_code"] == "INTERNAL_ERROR"
        assert body["details"]["request_id"] == "test-req-id"
