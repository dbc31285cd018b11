"""User service"""

import logging
import uuid
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from leaderboard_backend.core.database import is_unique_violation
from leaderboard_backend.core.exceptions import (
    AuthenticationException,
    AuthorizationException,
    DuplicateException,
    NotFoundException,
)
from leaderboard_backend.core.logging import LoggerFactory
from leaderboard_backend.core.security import SecurityUtils
from leaderboard_backend.models.user import User, UserRole
from leaderboard_backend.schemas.user import RegisterRequest

logger = logging.getLogger(__name__)
security_logger = LoggerFactory.get_security_logger()
audit_logger = LoggerFactory.get_audit_logger()


class UserService:
    @staticmethod
    def get_user(db: Session, user_id: uuid.UUID) -> User:
        """Get user by ID"""
        user = db.get(User, user_id)
        if user is None:
            raise NotFoundException()
        return user

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        """Get user by email, ignoring case"""
        return db.scalar(select(User).where(func.lower(User.email) == email.lower()))

    @staticmethod
    def get_user_by_username(db: Session, username: str) -> Optional[User]:
        """Get user by username, ignoring case"""
        return db.scalar(select(User).where(func.lower(User.username) == username.lower()))

    @staticmethod
    def get_user_by_name_and_email(db: Session, username: str, email: str) -> Optional[User]:
        return db.scalar(
            select(User).where(
                func.lower(User.username) == username.lower(),
                func.lower(User.email) == email.lower(),
            )
        )

    @staticmethod
    def create_user(db: Session, request: RegisterRequest) -> User:
        """
        Create a registered user

        Raises:
            DuplicateException: If the username is taken, ignoring case
        """
        user = User(
            username=request.username,
            email=request.email,
            password=SecurityUtils.get_password_hash(request.password),
            role=UserRole.REGISTERED,
        )
        db.add(user)

        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if is_unique_violation(e) and UserService.get_user_by_username(db, request.username):
                raise DuplicateException(
                    "User",
                    details={"errors": [{"field": "username", "type": "username_taken"}]},
                )
            raise

        logger.info(f"Created user {user.id}")
        return user

    @staticmethod
    def login(db: Session, email: str, password: str) -> str:
        """
        Check credentials and issue an access token

        Raises:
            AuthenticationException: Unknown email or wrong password
            AuthorizationException: The user is banned
        """
        user = UserService.get_user_by_email(db, email)

        if user is None or not SecurityUtils.verify_password(password, user.password):
            security_logger.info("Failed login attempt")
            raise AuthenticationException("Incorrect email or password")

        if user.role == UserRole.BANNED:
            security_logger.info(f"Banned user {user.id} attempted to log in")
            raise AuthorizationException("User is banned")

        return SecurityUtils.create_access_token(user)

    @staticmethod
    def update_role(db: Session, user_id: uuid.UUID, role: UserRole, current_user: User) -> None:
        """
        Confirm or ban a user

        Raises:
            NotFoundException: Unknown user
            AuthorizationException: The target is an administrator
        """
        user = UserService.get_user(db, user_id)

        if user.role == UserRole.ADMINISTRATOR:
            raise AuthorizationException("Administrators cannot be modified")

        previous = user.role
        user.role = role
        db.commit()

        audit_logger.info(
            f"User {current_user.id} changed role of {user.id} from {previous.value} to {role.value}"
        )


user_service = UserService()
