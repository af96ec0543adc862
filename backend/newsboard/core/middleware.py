from __future__ import annotations

import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from newsboard.core.logging import log

class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        # vote tokens travel in query strings; keep them out of Referer headers
        response.headers["Referrer-Policy"] = "no-referrer"
        return response

class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response: Response = await call_next(request)
        ms = (time.perf_counter() - start) * 1000.0
        log.info("{method} {path} -> {status} ({ms:.1f} ms)",
                 method=request.method, path=request.url.path, status=response.status_code, ms=ms)
        response.headers["Server-Timing"] = f"app;dur={ms:.2f}"
        return response
