"""Security headers and request rate limiting."""

from collections.abc import Callable

from fastapi import Request
from fastapi.responses import Response
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware


PRIVATE_PATH_PREFIXES = ("/api/v1/progress", "/api/v1/users/me")


def rate_limit_key(request: Request) -> str:
    """Bucket requests per learner, falling back to the client address.

    Guests behind one address still share a bucket unless they send their
    own guest id.
    """
    user_id = request.headers.get("x-user-id")
    if user_id:
        return f"user:{user_id}"
    guest_id = request.headers.get("x-guest-id")
    if guest_id:
        return f"guest:{guest_id}"
    return get_remote_address(request)


limiter = Limiter(key_func=rate_limit_key)


class SimpleSecurityMiddleware(BaseHTTPMiddleware):
    """Adds security headers to every response and keeps per-learner data out of caches."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        if request.url.path.startswith(PRIVATE_PATH_PREFIXES):
            response.headers["Cache-Control"] = "no-store"
            response.headers["Vary"] = "X-User-Id, X-Guest-Id"

        return response
