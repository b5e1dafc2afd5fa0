"""
Security middleware for the Movies API

Adds browser security headers to every response and marks responses to
authenticated callers as private, since those carry the caller's own rating.
"""
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

# Swagger UI loads its assets from the jsdelivr CDN
CSP_DIRECTIVES = [
    "default-src 'self'",
    "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net",
    "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net",
    "img-src 'self' https://fastapi.tiangolo.com data:",
]


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers (CSP, HSTS, framing) and per-caller cache control"""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        response.headers["Content-Security-Policy"] = "; ".join(CSP_DIRECTIVES)
        response.headers["Referrer-Policy"] = "no-referrer"

        if request.method == "GET" and (
            "authorization" in request.headers or "x-api-key" in request.headers
        ):
            # user_rating differs per caller
            response.headers.setdefault("Cache-Control", "private, no-store")
        response.headers.add_vary_header("Authorization")

        return response
