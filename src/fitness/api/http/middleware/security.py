"""Response hardening headers applied by every service."""

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from src.fitness.runtime.context import get_config

BASE_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Cache-Control": "no-store",
}
HSTS_VALUE = "max-age=31536000; includeSubDomains"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds security headers without overriding ones an endpoint (or upstream) set."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in BASE_SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        if get_config().app.environment == "production":
            response.headers.setdefault("Strict-Transport-Security", HSTS_VALUE)
        return response
