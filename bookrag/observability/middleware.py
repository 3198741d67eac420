"""
FastAPI middleware for observability.

Request logging with timing and a correlation id echoed back to the
caller.

Dependencies: fastapi, starlette
System role: Request/response observability injection
"""

import logging
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each HTTP request and response with timing and correlation id."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        correlation_id = request.headers.get(CORRELATION_HEADER, str(uuid.uuid4()))
        method = request.method
        path = request.url.path

        try:
            response: Response = await call_next(request)
        except Exception as e:
            logger.exception(
                f"{method} {path} - Exception",
                extra={
                    "correlation_id": correlation_id,
                    "process_time_ms": round((time.time() - start_time) * 1000, 2),
                    "error_type": type(e).__name__,
                },
            )
            raise

        logger.info(
            f"{method} {path} - {response.status_code}",
            extra={
                "correlation_id": correlation_id,
                "status_code": response.status_code,
                "process_time_ms": round((time.time() - start_time) * 1000, 2),
            },
        )
        response.headers[CORRELATION_HEADER] = correlation_id
        return response
