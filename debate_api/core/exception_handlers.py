"""Global exception handlers for consistent error responses.

Every error leaves the API as ``{"error": {"code", "message", "request_id"}}``:

- RateLimitExceededError → 429 with the limiter's headers
- other AppError → 400
- unexpected Exception → generic 500, nothing internal leaked
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from debate_api.core.errors import AppError, RateLimitExceededError
from debate_api.core.logging import get_request_id
from debate_api.core.rate_limit import rate_limit_response

logger = logging.getLogger(__name__)


async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceededError
) -> JSONResponse:
    """Render a rejected limiter result as HTTP 429.

    The ``Retry-After`` and ``X-RateLimit-*`` headers come straight from the
    limiter result so clients can back off precisely.
    """
    if exc.result is not None:
        return rate_limit_response(exc.result, request_id=get_request_id())

    return JSONResponse(
        status_code=429,
        content={
            "error": {
                "code": exc.code,
                "message": exc.message,
                "request_id": get_request_id(),
            }
        },
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with the standard JSON envelope.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with status 400 and error details.
    """
    status_code = 400

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_id": get_request_id(),
        },
    )

    error_content = {
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }
    if exc.details:
        error_content["details"] = exc.details

    return JSONResponse(
        status_code=status_code,
        content={"error": error_content},
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback for unexpected errors.

    Logs the exception type and path for debugging; the client only gets a
    generic message.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": get_request_id(),
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": get_request_id(),
            }
        },
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with a FastAPI app.

    Starlette dispatches on the most specific class in the exception's MRO,
    so the 429 handler wins over the generic AppError one.
    """
    app.exception_handler(RateLimitExceededError)(rate_limit_exceeded_handler)
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
