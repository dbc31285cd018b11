"""
Security utilities for authentication and authorization
Handles JWT tokens, password hashing, and role checks
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from leaderboard_backend.core.config import settings
from leaderboard_backend.core.database import get_db
from leaderboard_backend.core.exceptions import AuthenticationException, AuthorizationException
from leaderboard_backend.core.logging import LoggerFactory
from leaderboard_backend.models.user import User, UserRole

security_logger = LoggerFactory.get_security_logger()

# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS
)

# A missing header is reported as 401 by get_current_user rather than 403
security = HTTPBearer(auto_error=False)


class SecurityUtils:
    """Security utility functions"""

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verify a plain password against hashed password"""
        try:
            return pwd_context.verify(plain_password, hashed_password)
        except ValueError:
            # Stored value is not a recognised hash
            return False

    @staticmethod
    def get_password_hash(password: str) -> str:
        """Hash a password using bcrypt"""
        return pwd_context.hash(password)

    @staticmethod
    def create_access_token(
        user: User, now: Optional[datetime] = None, expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Create JWT access token for a user

        Args:
            user: Authenticated user
            now: Issue time, defaults to the current UTC time
            expires_delta: Token lifetime

        Returns:
            Encoded JWT token
        """
        issued_at = now or datetime.now(timezone.utc)
        expire = issued_at + (
            expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        )

        to_encode = {
            "sub": str(user.id),
            "email": user.email,
            "iss": settings.JWT_ISSUER,
            "iat": int(issued_at.timestamp()),
            "exp": int(expire.timestamp()),
        }

        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def decode_token(token: str) -> Dict[str, Any]:
        """
        Decode JWT token

        Raises:
            AuthenticationException: If token is invalid, expired or from another issuer
        """
        try:
            return jwt.decode(
                token,
                settings.SECRET_KEY,
                algorithms=[settings.ALGORITHM],
                issuer=settings.JWT_ISSUER,
            )
        except JWTError as e:
            security_logger.info(f"Rejected access token: {e}")
            raise AuthenticationException("Could not validate credentials")


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the user a bearer token was issued to

    Raises:
        AuthenticationException: If the token is missing, invalid, or its user is gone
    """
    if credentials is None:
        raise AuthenticationException("Not authenticated")

    payload = SecurityUtils.decode_token(credentials.credentials)

    try:
        user_id = uuid.UUID(payload.get("sub") or "")
    except ValueError:
        raise AuthenticationException("Invalid authentication credentials")

    user = db.get(User, user_id)
    if user is None:
        raise AuthenticationException("Invalid authentication credentials")

    return user


def require_roles(*allowed_roles: UserRole):
    """
    Dependency factory requiring one of the given roles

    Banned users are refused even if their role were listed.
    """

    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role == UserRole.BANNED or current_user.role not in allowed_roles:
            raise AuthorizationException()
        return current_user

    return role_checker


def require_not_banned(current_user: User = Depends(get_current_user)) -> User:
    """Dependency for actions any non-banned user may attempt"""
    if current_user.role == UserRole.BANNED:
        raise AuthorizationException()
    return current_user


require_admin = require_roles(UserRole.ADMINISTRATOR)
require_run_submitter = require_roles(UserRole.CONFIRMED, UserRole.ADMINISTRATOR)
