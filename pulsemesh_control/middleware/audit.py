"""
Audit Logging Middleware

Logs all modifying requests (POST, PATCH, PUT, DELETE) to the audit logger.
Captures action, path, client address, status code and duration, so every
privileged restart leaves a trace.
"""

import time
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ..common.logging_setup import get_service_logger

logger = get_service_logger("audit")


# Paths to exclude from audit logging
EXCLUDED_PATHS = [
    "/",
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
]

# HTTP methods to log (only modifying operations)
LOGGED_METHODS = ["POST", "PATCH", "PUT", "DELETE"]


def parse_action_from_path(path: str) -> Optional[str]:
    """
    Derive an action name from the URL path.

    Examples:
    - /api/restart → "restart"
    - /api/service/status → "service.status"
    - /health → None
    """
    if not path.startswith("/api/"):
        return None

    parts = [part for part in path[5:].split("/") if part]
    if not parts:
        return None
    return ".".join(parts)


def get_client_host(request: Request) -> Optional[str]:
    """Client address, preferring the first X-Forwarded-For entry."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


class AuditLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that logs modifying HTTP requests.

    Only logs POST, PATCH, PUT, DELETE requests.
    Excludes health checks and docs.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        """Process request and log if it's a modifying operation."""

        # Skip non-modifying methods
        if request.method not in LOGGED_METHODS:
            return await call_next(request)

        # Skip excluded paths
        path = request.url.path
        if path in EXCLUDED_PATHS:
            return await call_next(request)

        start_time = time.monotonic()
        # Execute the request first
        response = await call_next(request)
        duration_ms = (time.monotonic() - start_time) * 1000

        # Now log the action (after we know the status code)
        self._log_action(request, response, duration_ms)

        return response

    def _log_action(self, request: Request, response: Response, duration_ms: float) -> None:
        """Write one audit record."""
        action = parse_action_from_path(request.url.path)
        if not action:
            return  # Not an API endpoint we care about

        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={
                "action": action,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "client": get_client_host(request),
                "duration_ms": round(duration_ms),
            },
        )
