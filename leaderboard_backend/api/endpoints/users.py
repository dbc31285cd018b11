"""
User endpoints
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from leaderboard_backend.api.deps import parse_uuid
from leaderboard_backend.core.database import get_db
from leaderboard_backend.core.security import get_current_user, require_admin
from leaderboard_backend.models.user import User
from leaderboard_backend.schemas.user import UpdateUserRequest, UserView
from leaderboard_backend.services.users import user_service

router = APIRouter()


# Registered before /api/users/{user_id} so "me" is not taken for an ID
@router.get("/api/users/me", response_model=UserView)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get the authenticated user"""
    return current_user


@router.get("/api/users/{user_id}", response_model=UserView)
async def get_user(user_id: str, db: Session = Depends(get_db)):
    """Get user by ID"""
    return user_service.get_user(db, parse_uuid(user_id))


@router.patch("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_user(
    user_id: str,
    request: UpdateUserRequest,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Confirm or ban a user"""
    user_service.update_role(db, parse_uuid(user_id), request.role, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
