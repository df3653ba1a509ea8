"""HTTP middleware for request ID propagation.

Every request/response pair gets a correlation id: the incoming header value
when the client sends a usable one, a fresh UUID otherwise. The id is stored
in a ContextVar for the logging filters and echoed back on the response
together with the handling time.

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import re
import time
import uuid

from fastapi import Request, Response

from debate_api.core.config import settings
from debate_api.core.logging import clear_request_id, set_request_id

# Client-supplied ids end up in every log line; keep them short and printable.
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._:\-]{1,128}$")


def resolve_request_id(incoming: str | None) -> str:
    """Return ``incoming`` if it is a safe correlation id, else a new UUID4."""

    if incoming and _REQUEST_ID_PATTERN.match(incoming):
        return incoming
    return str(uuid.uuid4())


async def request_id_middleware(request: Request, call_next) -> Response:
    """Attach a request id to the logging context and the response.

    Args:
        request: The incoming HTTP request.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response: The downstream response with the request id header
            (``LOG_REQUEST_ID_HEADER``) and ``X-Request-Duration-ms`` set.
    """

    header_name = settings.log.request_id_header
    request_id = resolve_request_id(request.headers.get(header_name))
    set_request_id(request_id)

    started = time.perf_counter()
    try:
        response: Response = await call_next(request)
    finally:
        clear_request_id()

    response.headers[header_name] = request_id
    response.headers.setdefault(
        "X-Request-Duration-ms", f"{(time.perf_counter() - started) * 1000:.2f}"
    )
    return response
