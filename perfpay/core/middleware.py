"""
HTTP middleware: request correlation and access logging.
"""
import logging
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from perfpay.core.config import settings
from perfpay.core.logging import request_id_var

logger = logging.getLogger(__name__)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Reuses the caller's X-Request-ID or mints one, exposes it to log records
    through ``request_id_var`` and echoes it on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        header = settings.request_id_header
        request_id = request.headers.get(header) or uuid.uuid4().hex
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers[header] = request_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time

        log_level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            log_level,
            f"{request.method} {request.url.path} - {response.status_code} - {duration:.3f}s",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration": round(duration, 4),
            }
        )
        response.headers["X-Process-Time"] = f"{duration:.3f}"
        return response
