"""Response headers for a JSON-only API.

Production additionally gets HSTS and a deny-everything CSP. Anything
under the auth prefix is marked non-cacheable because it carries tokens.
"""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from onboard.config import settings

ALWAYS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=(), payment=()",
}

PRODUCTION_ONLY = {
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'; base-uri 'none'",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):

    def __init__(self, app, auth_prefix: str = "/api/v1/auth", production: bool | None = None):
        super().__init__(app)
        self.auth_prefix = auth_prefix
        self.production = settings.is_production if production is None else production

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        headers = dict(ALWAYS)
        if self.production:
            headers.update(PRODUCTION_ONLY)
        if request.url.path.startswith(self.auth_prefix):
            headers["Cache-Control"] = "no-store"

        for name, value in headers.items():
            response.headers.setdefault(name, value)
        return response
