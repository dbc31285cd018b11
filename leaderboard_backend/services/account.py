"""
Account confirmation and recovery service
Issues single-use tokens, emails links to them and redeems them
"""

import logging
import uuid
from datetime import timedelta

from sqlalchemy.orm import Session

from leaderboard_backend.core.config import settings
from leaderboard_backend.core.database import session_now
from leaderboard_backend.core.exceptions import (
    AuthorizationException,
    EmailFailedException,
    NotFoundException,
    StateConflictException,
)
from leaderboard_backend.core.logging import LoggerFactory
from leaderboard_backend.core.security import SecurityUtils
from leaderboard_backend.models.user import AccountConfirmation, AccountRecovery, User, UserRole
from leaderboard_backend.schemas.user import RecoverAccountRequest, RegisterRequest
from leaderboard_backend.services.email import EmailService
from leaderboard_backend.services.users import UserService

logger = logging.getLogger(__name__)
audit_logger = LoggerFactory.get_audit_logger()


class AccountService:
    """Registration, confirmation and recovery flows"""

    @staticmethod
    async def register(db: Session, request: RegisterRequest, emails: EmailService) -> None:
        """
        Register a new user, or nudge the owner of an address already in use

        Raises:
            DuplicateException: If the username is taken
        """
        existing = UserService.get_user_by_email(db, request.email)

        try:
            if existing is None:
                user = UserService.create_user(db, request)
                await AccountService.create_confirmation_and_send(db, user, emails)
            elif existing.role == UserRole.REGISTERED:
                await AccountService.create_confirmation_and_send(db, existing, emails)
            else:
                await emails.send_registration_attempt(existing)
        except EmailFailedException:
            # The registration itself stands; the user can ask for a new link
            logger.warning("Registration email could not be delivered")

    @staticmethod
    async def create_confirmation_and_send(
        db: Session, user: User, emails: EmailService
    ) -> AccountConfirmation:
        """
        Issue a confirmation token and email its link

        Raises:
            StateConflictException: If the user is no longer registered
            EmailFailedException: If the email could not be sent
        """
        if user.role != UserRole.REGISTERED:
            raise StateConflictException("Account is already confirmed")

        confirmation = AccountConfirmation(
            user_id=user.id,
            expires_at=session_now(db)
            + timedelta(minutes=settings.ACCOUNT_CONFIRMATION_EXPIRY_MINUTES),
        )
        db.add(confirmation)
        db.commit()

        await emails.send_account_confirmation(user, confirmation)
        return confirmation

    @staticmethod
    def confirm_account(db: Session, confirmation_id: uuid.UUID) -> None:
        """
        Redeem a confirmation token

        Raises:
            NotFoundException: Unknown, used or expired token
            StateConflictException: The user is not in the registered role
        """
        now = session_now(db)
        confirmation = db.get(AccountConfirmation, confirmation_id)

        if confirmation is None or confirmation.used_at is not None or confirmation.expires_at <= now:
            raise NotFoundException()

        user = confirmation.user
        if user.role != UserRole.REGISTERED:
            raise StateConflictException("Account is already confirmed or banned")

        user.role = UserRole.CONFIRMED
        confirmation.used_at = now
        db.commit()

        logger.info(f"Confirmed account {user.id}")

    @staticmethod
    async def recover_account(
        db: Session, request: RecoverAccountRequest, emails: EmailService
    ) -> None:
        """Email a recovery link if the user exists; never reveals whether it did"""
        user = UserService.get_user_by_name_and_email(db, request.username, request.email)

        if user is None:
            logger.warning(f"Account recovery attempt failed. User not found: {request.username}")
            return

        if user.role == UserRole.BANNED:
            logger.warning(f"Account recovery attempt for banned user {user.id}")
            return

        logger.info(f"Sending account recovery email to user: {user.id}")
        recovery = AccountRecovery(
            user_id=user.id,
            expires_at=session_now(db) + timedelta(minutes=settings.ACCOUNT_RECOVERY_EXPIRY_MINUTES),
        )
        db.add(recovery)
        db.commit()

        try:
            await emails.send_account_recovery(user, recovery)
        except EmailFailedException:
            logger.warning(f"Recovery email to user {user.id} could not be delivered")

    @staticmethod
    def _get_live_recovery(db: Session, recovery_id: uuid.UUID) -> AccountRecovery:
        recovery = db.get(AccountRecovery, recovery_id)
        if (
            recovery is None
            or recovery.used_at is not None
            or recovery.expires_at <= session_now(db)
        ):
            raise NotFoundException()
        return recovery

    @staticmethod
    def test_recovery(db: Session, recovery_id: uuid.UUID) -> None:
        """
        Check that a recovery token can still be used

        Raises:
            NotFoundException: Unknown, used or expired token, or a banned user
        """
        recovery = AccountService._get_live_recovery(db, recovery_id)
        if recovery.user.role == UserRole.BANNED:
            raise NotFoundException()

    @staticmethod
    def reset_password(db: Session, recovery_id: uuid.UUID, password: str) -> None:
        """
        Redeem a recovery token by setting a new password

        Raises:
            NotFoundException: Unknown, used or expired token
            AuthorizationException: The user is banned
            StateConflictException: The new password equals the current one
        """
        recovery = AccountService._get_live_recovery(db, recovery_id)
        user = recovery.user

        if user.role == UserRole.BANNED:
            raise AuthorizationException("User is banned")

        if SecurityUtils.verify_password(password, user.password):
            raise StateConflictException("New password must differ from the current one")

        user.password = SecurityUtils.get_password_hash(password)
        recovery.used_at = session_now(db)
        db.commit()

        audit_logger.info(f"Password reset for user {user.id} using recovery {recovery.id}")


account_service = AccountService()
