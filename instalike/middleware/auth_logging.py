from fastapi import Request
import logging
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("instalike")

class AuthLoggingMiddleware(BaseHTTPMiddleware):
    """Warn about requests that end in 401 or 403"""

    async def dispatch(self, request: Request, call_next):
        has_auth = request.headers.get("Authorization") is not None
        path = request.url.path

        response = await call_next(request)

        if response.status_code in (401, 403):
            logger.warning(
                f"Auth error: {response.status_code} on {request.method} {path} "
                f"({'with' if has_auth else 'without'} auth header)"
            )

        return response
