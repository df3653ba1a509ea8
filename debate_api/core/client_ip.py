"""Rate limit key derivation from request metadata."""

from __future__ import annotations

from typing import Mapping

UNKNOWN_CLIENT = "unknown"


def get_client_ip(headers: Mapping[str, str]) -> str:
    """Extract the client IP from proxy headers.

    Checks, in order, ``x-forwarded-for`` (first hop), ``cf-connecting-ip``
    and ``x-real-ip``. Starlette ``Headers`` are case-insensitive; plain dicts
    must use lower-case names.

    Args:
        headers: Request headers.

    Returns:
        The client IP, or ``"unknown"`` when no header is present.

    Examples:
        >>> get_client_ip({"x-forwarded-for": " 1.2.3.4 , 5.6.7.8"})
        '1.2.3.4'
        >>> get_client_ip({})
        'unknown'
    """

    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()

    cf_ip = headers.get("cf-connecting-ip")
    if cf_ip:
        return cf_ip

    real_ip = headers.get("x-real-ip")
    if real_ip:
        return real_ip

    return UNKNOWN_CLIENT


def user_rate_limit_key(user_id: str) -> str:
    """Namespaced key for per-user limits."""

    return f"user:{user_id}"
