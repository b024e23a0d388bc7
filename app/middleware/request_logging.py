import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("app")


def _route_name(request: Request) -> str:
    """Matched route template (``/api/posts/{post_id}``), or the raw path when nothing matched"""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request with its matched route, status and duration.

    The duration is also returned to the client in ``X-Process-Time``.
    """

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        client = request.client.host if request.client else "-"

        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Process-Time"] = f"{elapsed_ms:.1f}ms"

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            f"{request.method} {_route_name(request)} -> {response.status_code} "
            f"in {elapsed_ms:.1f}ms (client {client})",
        )
        return response
