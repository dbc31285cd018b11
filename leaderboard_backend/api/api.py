"""
API main router
Combines all endpoint routers
"""

from fastapi import APIRouter

from leaderboard_backend.api.endpoints import (
    account,
    categories,
    health,
    leaderboards,
    runs,
    users,
)

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(account.router, tags=["Account"])
api_router.include_router(users.router, tags=["Users"])
api_router.include_router(leaderboards.router, tags=["Leaderboards"])
api_router.include_router(categories.router, tags=["Categories"])
api_router.include_router(runs.router, tags=["Runs"])
api_router.include_router(health.router, tags=["Health"])
