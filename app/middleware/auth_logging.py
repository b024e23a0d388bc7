from fastapi import Request
import logging
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import settings

logger = logging.getLogger("app")

PUBLIC_PATHS = ("/register", "/login", "/media/")


class AuthLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        api_path = path[len(settings.API_V1_STR):] if path.startswith(settings.API_V1_STR) else None

        # Protected API endpoint hit without a credential
        if (
            api_path is not None
            and not api_path.startswith(PUBLIC_PATHS)
            and not request.headers.get("Authorization")
        ):
            logger.warning(f"Protected endpoint {path} accessed without auth header")

        response = await call_next(request)

        # Log auth-related status codes
        if response.status_code in [401, 403]:
            logger.warning(f"Auth error: {response.status_code} on {request.method} {path}")

        return response
