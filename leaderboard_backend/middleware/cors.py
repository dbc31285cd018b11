"""
CORS configuration for the Leaderboards backend
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from leaderboard_backend.core.config import settings


def setup_cors(app: FastAPI) -> None:
    """
    Configure CORS middleware

    Args:
        app: FastAPI application instance
    """
    allow_origins = settings.get_cors_origins()

    # Browsers reject credentialed requests against a wildcard origin
    allow_credentials = settings.CORS_ALLOW_CREDENTIALS and "*" not in allow_origins

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=allow_credentials,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID", "X-Process-Time"],
    )
