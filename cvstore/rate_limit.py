"""Rate limiting singleton using slowapi."""

from fastapi import Request
from slowapi import Limiter


def _get_real_ip(request: Request) -> str:
    """Extract client IP, supporting X-Forwarded-For behind a reverse proxy."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def _client_key(request: Request) -> str:
    """Key by logged-in user when a session exists, otherwise by client IP."""
    if "session" in request.scope:
        user_id = request.session.get("user_id")
        if user_id:
            return f"user:{user_id}"
    return f"ip:{_get_real_ip(request)}"


limiter = Limiter(key_func=_client_key)
