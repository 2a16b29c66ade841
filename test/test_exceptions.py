"""
Tests for custom exception classes and handlers

Tests exception status codes, error codes, details and the JSON error shape.
"""

import logging

import pytest
from fastapi import FastAPI, status
from httpx import ASGITransport, AsyncClient

from consent_log.exception_handlers import (
    create_error_response,
    get_error_type,
    get_http_error_code,
    register_exception_handlers,
)
from consent_log.exceptions import (
    ConsentAlreadyExistsError,
    ConsentLogError,
    ConsentNotFoundError,
    DatabaseError,
    ErrorCode,
    InvalidConsentStatusError,
)


class TestConsentLogError:
    """Test base ConsentLogError class"""

    def test_defaults(self):
        exc = ConsentLogError("Test error")
        assert str(exc) == "Test error"
        assert exc.message == "Test error"
        assert exc.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert exc.details == {}
        assert exc.error_code is ErrorCode.UNKNOWN_ERROR

    def test_with_details(self):
        exc = ConsentLogError("Test error", status_code=status.HTTP_400_BAD_REQUEST, details={"key": "value"})
        assert exc.status_code == status.HTTP_400_BAD_REQUEST
        assert exc.details["key"] == "value"


class TestConsentExceptions:
    """Test consent-specific exceptions"""

    def test_not_found(self):
        exc = ConsentNotFoundError("a@b.com", "form_1")
        assert exc.status_code == status.HTTP_404_NOT_FOUND
        assert exc.error_code is ErrorCode.CONSENT_NOT_FOUND
        assert "form_1" in str(exc)
        assert exc.details == {"user_id": "a@b.com", "consent_id": "form_1"}

    def test_already_exists(self):
        exc = ConsentAlreadyExistsError("a@b.com", "form_1")
        assert exc.status_code == status.HTTP_409_CONFLICT
        assert exc.error_code is ErrorCode.CONSENT_ALREADY_EXISTS

    def test_invalid_status(self):
        exc = InvalidConsentStatusError("maybe")
        assert exc.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert exc.details["value"] == "maybe"

    def test_database_error(self):
        exc = DatabaseError(operation="insert")
        assert str(exc) == "A database error occurred"
        assert exc.details == {"operation": "insert"}
        assert isinstance(exc, ConsentLogError)


class TestErrorResponseHelpers:
    """Test response helper functions"""

    def test_error_types(self):
        assert get_error_type(404) == "Not Found"
        assert get_error_type(409) == "Conflict"
        assert get_error_type(418) == "Error"

    def test_http_error_codes(self):
        assert get_http_error_code(404) == "RESOURCE_NOT_FOUND"
        assert get_http_error_code(418) == "UNKNOWN_ERROR"

    def test_create_error_response_omits_empty_parts(self):
        response = create_error_response(400, "Bad")
        assert response.status_code == 400
        assert b'"details"' not in response.body
        assert b'"path"' not in response.body


def _app_raising(exc: Exception) -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/boom")
    async def boom():
        raise exc

    return app


class TestRegisteredHandlers:
    """Test handlers installed by register_exception_handlers"""

    @pytest.mark.asyncio
    async def test_domain_error_rendered(self):
        app = _app_raising(ConsentNotFoundError("a@b.com", "form_1"))

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/boom")

        assert response.status_code == 404
        error = response.json()["error"]
        assert error["error_code"] == "CONSENT_NOT_FOUND"
        assert error["path"] == "/boom"

    @pytest.mark.asyncio
    async def test_domain_error_logged_at_error_level(self, caplog):
        app = _app_raising(ConsentAlreadyExistsError("a@b.com", "form_1"))

        with caplog.at_level(logging.INFO, logger="consent_log.exception_handlers"):
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
                await client.get("/boom")

        records = [r for r in caplog.records if r.name == "consent_log.exception_handlers"]
        assert len(records) == 1
        assert records[0].levelno == logging.ERROR
        assert records[0].error_code == "CONSENT_ALREADY_EXISTS"

    @pytest.mark.asyncio
    async def test_unknown_route_uses_http_handler(self):
        app = _app_raising(RuntimeError("unused"))

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/missing")

        assert response.status_code == 404
        assert response.json()["error"]["error_code"] == "RESOURCE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_unhandled_error_hides_details(self):
        app = _app_raising(RuntimeError("secret connection string"))

        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/boom")

        assert response.status_code == 500
        body = response.json()
        assert body["error"]["error_code"] == "INTERNAL_ERROR"
        assert "secret" not in response.text
