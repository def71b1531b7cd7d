"""
Correlation ID Middleware
Adds unique request ID for log correlation
"""
from __future__ import annotations

import time
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from src.shared.infrastructure.observability.logger import bind_context, clear_context, get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Extracts or generates the X-Request-ID header, stores it on
    request.state.request_id (read by the error handlers) and binds it to the
    structlog context so every log line of the request carries it.

    Also measures request duration and adds it to response headers.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        correlation_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = correlation_id

        clear_context()
        bind_context(
            request_id=correlation_id,
            method=request.method,
            path=request.url.path,
        )

        start_time = time.perf_counter()
        logger.info(
            "request_started",
            client_ip=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = int((time.perf_counter() - start_time) * 1000)
            logger.error("request_failed", duration_ms=duration_ms, exc_info=True)
            raise

        duration_ms = int((time.perf_counter() - start_time) * 1000)
        response.headers[REQUEST_ID_HEADER] = correlation_id
        response.headers["X-Response-Time"] = f"{duration_ms}ms"
        logger.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=duration_ms,
        )
        clear_context()
        return response
