"""Email service"""

import logging
import smtplib
from email.message import EmailMessage
from email.utils import formataddr

from starlette.concurrency import run_in_threadpool

from leaderboard_backend.core.config import settings
from leaderboard_backend.core.exceptions import EmailFailedException
from leaderboard_backend.models.user import AccountConfirmation, AccountRecovery, User

logger = logging.getLogger(__name__)


def confirmation_link(confirmation: AccountConfirmation) -> str:
    return f"{settings.WEBSITE_URL.rstrip('/')}/confirm-account?code={confirmation.id}"


def recovery_link(recovery: AccountRecovery) -> str:
    return f"{settings.WEBSITE_URL.rstrip('/')}/reset-password?code={recovery.id}"


class EmailService:
    @staticmethod
    def is_configured() -> bool:
        """Check if email service is configured"""
        return settings.EMAILS_ENABLED and settings.SMTP_HOST is not None

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(
            settings.SMTP_HOST, settings.SMTP_PORT, timeout=settings.SMTP_TIMEOUT
        ) as smtp:
            if settings.SMTP_TLS:
                smtp.starttls()
            if settings.SMTP_USER and settings.SMTP_PASSWORD:
                smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
            smtp.send_message(message)

    async def send(self, recipient: str, subject: str, body: str) -> None:
        """
        Send a plain text email

        Raises:
            EmailFailedException: If the SMTP server could not be reached or refused the message
        """
        if not self.is_configured():
            logger.warning(f"Email service not configured, not sending '{subject}' to {recipient}")
            return

        message = EmailMessage()
        message["From"] = formataddr((settings.EMAIL_FROM_NAME, settings.EMAIL_FROM_ADDRESS))
        message["To"] = recipient
        message["Subject"] = subject
        message.set_content(body)

        try:
            await run_in_threadpool(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send '{subject}' to {recipient}: {e}")
            raise EmailFailedException(details={"recipient": recipient})

        logger.info(f"Sent '{subject}' to {recipient}")

    async def send_account_confirmation(self, user: User, confirmation: AccountConfirmation):
        """Send the link that confirms a newly registered account"""
        body = (
            f"Hi {user.username},\n\n"
            f"Click the link below to confirm your account:\n\n"
            f"{confirmation_link(confirmation)}\n\n"
            f"The link expires in {settings.ACCOUNT_CONFIRMATION_EXPIRY_MINUTES} minutes."
        )
        await self.send(user.email, "Confirm Your Account", body)

    async def send_registration_attempt(self, user: User):
        """Tell an existing user that someone tried to register with their address"""
        body = (
            f"Hi {user.username},\n\n"
            f"Someone tried to create an account with this email address, but it is already "
            f"registered to you. If this was you, you can log in or recover your account. "
            f"Otherwise you can ignore this email."
        )
        await self.send(user.email, "A Registration Attempt Was Made With Your Email", body)

    async def send_account_recovery(self, user: User, recovery: AccountRecovery):
        """Send the password reset link"""
        body = (
            f"Hi {user.username},\n\n"
            f"Click the link below to change your password:\n\n"
            f"{recovery_link(recovery)}\n\n"
            f"The link expires in {settings.ACCOUNT_RECOVERY_EXPIRY_MINUTES} minutes. "
            f"If you did not request this, you can ignore this email."
        )
        await self.send(user.email, "Recover Your Account", body)


email_service = EmailService()


def get_email_service() -> EmailService:
    """Dependency returning the email sender"""
    return email_service
