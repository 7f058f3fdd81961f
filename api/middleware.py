import time
import logging

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.time()
        response = await call_next(request)
        duration_ms = int((time.time() - start) * 1000)
        target = request.query_params.get("url")
        logger.info(
            "%s %s%s -> %d (%dms)",
            request.method,
            request.url.path,
            f" [{target}]" if target else "",
            response.status_code,
            duration_ms,
        )
        return response
