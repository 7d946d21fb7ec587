"""
HTTP middleware for the shopkeep service
"""
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from shopkeep.core.logger import get_logger


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log requests and their outcome for audit purposes"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        logger = get_logger("requests")

        client_ip = request.client.host if request.client else "unknown"
        logger.info(f"{request.method} {request.url.path} - IP: {client_ip}")

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        logger.info(
            f"{request.method} {request.url.path} - Status: {response.status_code} - {elapsed_ms:.1f}ms"
        )
        return response
