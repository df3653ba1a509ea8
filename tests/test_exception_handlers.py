"""Tests for global exception handlers.

Every error type must produce the same JSON envelope, the right status code
and no internal details.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from debate_api.adapters.rate_limit.base import RateLimitResult
from debate_api.core.errors import AppError, RateLimitExceededError
from debate_api.core.exception_handlers import (
    general_exception_handler,
    setup_exception_handlers,
)


@pytest.fixture
def app_with_handlers() -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    return TestClient(app_with_handlers, raise_server_exceptions=False)


class TestAppErrorHandler:
    def test_app_error_returns_400_envelope(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-app-error")
        async def endpoint():
            raise AppError(code="bad_input", message="Bad input", details={"hint": "fix it"})

        response = client.get("/test-app-error")

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "bad_input"
        assert error["message"] == "Bad input"
        assert error["details"] == {"hint": "fix it"}
        assert "request_id" in error

    def test_details_omitted_when_absent(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-no-details")
        async def endpoint():
            raise AppError(code="bad_input", message="Bad input")

        assert "details" not in client.get("/test-no-details").json()["error"]


class TestRateLimitExceededHandler:
    def test_returns_429_with_limiter_headers(self, client: TestClient, app_with_handlers: FastAPI):
        result = RateLimitResult(
            allowed=False,
            remaining=0,
            reset_at=1_700_000_060_000,
            headers={
                "X-RateLimit-Limit": "5",
                "X-RateLimit-Remaining": "0",
                "X-RateLimit-Reset": "1700000060",
                "Retry-After": "42",
            },
        )

        @app_with_handlers.get("/test-limited")
        async def endpoint():
            raise RateLimitExceededError(result=result)

        response = client.get("/test-limited")

        assert response.status_code == 429
        assert response.json()["error"]["code"] == "rate_limited"
        assert response.headers["Retry-After"] == "42"
        assert response.headers["X-RateLimit-Reset"] == "1700000060"

    def test_without_result_still_returns_429(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-limited-bare")
        async def endpoint():
            raise RateLimitExceededError()

        response = client.get("/test-limited-bare")

        assert response.status_code == 429
        assert response.json()["error"]["message"] == "Too many requests. Please try again later."
        assert "Retry-After" not in response.headers

    def test_rate_limit_error_is_an_app_error(self):
        exc = RateLimitExceededError()

        assert isinstance(exc, AppError)
        assert str(exc) == "Too many requests. Please try again later."


class TestGeneralExceptionHandler:
    def test_unexpected_exception_returns_generic_500(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-boom")
        async def endpoint():
            raise RuntimeError("database connection failed")

        response = client.get("/test-boom")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "internal_server_error"
        assert "database connection" not in response.text

    def test_never_leaks_stack_trace(self):
        request = AsyncMock()
        request.url.path = "/test"
        request.method = "GET"

        response = asyncio.run(general_exception_handler(request, ValueError("secret detail")))

        body = bytes(response.body).decode()
        data = json.loads(body)
        assert response.status_code == 500
        assert "Traceback" not in body
        assert "ValueError" not in body
        assert "secret detail" not in data["error"]["message"]


def test_setup_registers_all_handlers(app_with_handlers: FastAPI):
    assert RateLimitExceededError in app_with_handlers.exception_handlers
    assert AppError in app_with_handlers.exception_handlers
    assert Exception in app_with_handlers.exception_handlers
