"""
Logging middleware for the Leaderboards backend
Logs all requests and responses with timing information
"""

import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from leaderboard_backend.core.logging import LoggerFactory

logger = LoggerFactory.get_request_logger()

QUIET_PATHS = {"/health", "/metrics"}


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all HTTP requests and responses
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        request_info = {
            "method": request.method,
            "path": request.url.path,
            "client": request.client.host if request.client else "unknown",
        }

        try:
            response = await call_next(request)
        except Exception:
            logger.error(
                "Request failed",
                extra={**request_info, "process_time": round(time.perf_counter() - start_time, 3)},
                exc_info=True,
            )
            raise

        process_time = time.perf_counter() - start_time

        if response.status_code >= 500:
            level = logging.ERROR
        elif response.status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO

        logger.log(
            level,
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={
                **request_info,
                "status_code": response.status_code,
                "process_time": round(process_time, 3),
            },
        )

        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        return response
