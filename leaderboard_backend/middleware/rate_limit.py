"""
Rate limiting for the Leaderboards backend
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from leaderboard_backend.core.config import settings
from leaderboard_backend.core.exceptions import create_error_response
from leaderboard_backend.core.logging import LoggerFactory

security_logger = LoggerFactory.get_security_logger()


def create_limiter() -> Limiter:
    """Limiter applying the configured default limit to every route, per client address"""
    return Limiter(
        key_func=get_remote_address,
        default_limits=[f"{settings.RATE_LIMIT_REQUESTS}/{settings.RATE_LIMIT_PERIOD} seconds"],
        enabled=settings.RATE_LIMIT_ENABLED,
        headers_enabled=True,
    )


# SlowAPIMiddleware calls this synchronously, so it must not be a coroutine
def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Render a rejected request in the standard error envelope"""
    security_logger.info(f"Rate limit exceeded by {get_remote_address(request)}: {exc.detail}")

    response = create_error_response(
        request=request,
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        error_code="RATE_LIMITED",
        message=f"Rate limit exceeded: {exc.detail}",
    )

    view_rate_limit = getattr(request.state, "view_rate_limit", None)
    if view_rate_limit is not None:
        response = request.app.state.limiter._inject_headers(response, view_rate_limit)
    return response


def add_rate_limiting(app: FastAPI) -> Limiter:
    """Add rate limiting to application"""
    limiter = create_limiter()

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    return limiter
