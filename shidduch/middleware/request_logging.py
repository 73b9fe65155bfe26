# shidduch/middleware/request_logging.py
# Structured request logs. Ids and paths only, never profile content.

import logging
import time
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger("shidduch.request")

# Routes that fan out to the completion service; always logged with latency
SLOW_PREFIXES = ("/ai-search", "/library/upload", "/ai-profiles")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:12]
        start = time.perf_counter()
        response = await call_next(request)
        latency_ms = round((time.perf_counter() - start) * 1000, 2)
        response.headers["x-request-id"] = request_id

        path = request.url.path
        payload = {
            "request_id": request_id,
            "status": response.status_code,
            "path": path,
            "method": request.method,
            "latency_ms": latency_ms,
        }
        if response.status_code >= 400:
            logger.warning("4xx_5xx_response", extra=payload)
        elif path.startswith(SLOW_PREFIXES) and request.method != "GET":
            logger.info("pipeline_request", extra=payload)
        return response
