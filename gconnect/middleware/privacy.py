"""Request logging with PII masking, plus security headers.

Every request is logged once on arrival and once on completion.  Paths
and query strings can carry e-mail addresses or phone numbers (search
boxes, login redirects), so they are masked before they reach the log.
"""

from __future__ import annotations

import re
import time
import uuid
from typing import Final

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# PII sanitisation patterns
# ---------------------------------------------------------------------------

# Indian mobile numbers: optional +91, then 10 digits starting with 6-9.
# Only the last 4 digits survive.
_PHONE_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"(?:\+91[\s-]?|(?<!\d))([6-9]\d{5})(\d{4})(?!\d)"
)

_EMAIL_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"\b[A-Za-z0-9._%+-]+(?:@|%40)[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"
)


def sanitize_phone(text: str) -> str:
    """Mask phone numbers in *text*.

    Both ``+91-9876543210`` and ``9876543210`` become ``XXXXXX3210``.
    """
    return _PHONE_PATTERN.sub(lambda m: f"XXXXXX{m.group(2)}", text)


def sanitize_email(text: str) -> str:
    """Replace e-mail addresses (plain or URL-encoded ``%40``) in *text*."""
    return _EMAIL_PATTERN.sub("[EMAIL_REDACTED]", text)


def sanitize_pii(text: str) -> str:
    """Apply all PII masks; e-mail first so digits inside an address are not split."""
    return sanitize_phone(sanitize_email(text))


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

_SECURITY_HEADERS: Final[dict[str, str]] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Strict-Transport-Security": "max-age=63072000; includeSubDomains",
    "Cache-Control": "no-store",
}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs sanitised request/response info and adds security headers."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        path = request.url.path
        if request.url.query:
            path = f"{path}?{request.url.query}"
        path = sanitize_pii(path)

        logger.info("request.incoming", method=request.method, path=path)
        start = time.perf_counter()

        response = await call_next(request)

        logger.info(
            "request.completed",
            method=request.method,
            path=path,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )

        for header, value in _SECURITY_HEADERS.items():
            response.headers[header] = value
        response.headers["X-Request-ID"] = request_id
        return response
