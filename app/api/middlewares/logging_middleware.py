"""
Request logging middleware for the API

Logs one line when a request starts and one when it finishes, tagged
with a request id that is echoed back in the X-Request-ID header.
"""

import time
import uuid
import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.config.settings import settings

# Configure logging
logger = logging.getLogger(__name__)

# Probe endpoints are polled constantly; keep them out of the info log
QUIET_PATHS = tuple(f"{settings.API_PREFIX}/{probe}" for probe in ("health", "readiness", "liveness"))


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for logging requests and responses
    """

    async def dispatch(self, request: Request, call_next):
        # Reuse the caller's request id when one is supplied
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        client_host = request.client.host if request.client else "unknown"
        log = logger.debug if request.url.path in QUIET_PATHS else logger.info

        start_time = time.time()
        log(f"Request {request_id} started: {request.method} {request.url.path} from {client_host}")

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(f"Request {request_id} failed: {str(e)} in {process_time:.3f}s")
            raise

        process_time = time.time() - start_time
        log(f"Request {request_id} completed: {response.status_code} in {process_time:.3f}s")

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{process_time:.6f}"
        return response
