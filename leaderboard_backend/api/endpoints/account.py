"""
Account endpoints: registration, login, confirmation and recovery
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from leaderboard_backend.api.deps import (
    login_enabled,
    parse_uuid,
    recovery_enabled,
    registration_enabled,
)
from leaderboard_backend.core.database import get_db
from leaderboard_backend.core.security import get_current_user
from leaderboard_backend.models.user import User
from leaderboard_backend.schemas.user import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    RecoverAccountRequest,
    RegisterRequest,
)
from leaderboard_backend.services.account import account_service
from leaderboard_backend.services.email import EmailService, get_email_service
from leaderboard_backend.services.users import user_service

router = APIRouter()


@router.post(
    "/account/register",
    status_code=status.HTTP_202_ACCEPTED,
    dependencies=[Depends(registration_enabled)],
    response_class=Response,
)
async def register(
    request: RegisterRequest,
    db: Session = Depends(get_db),
    emails: EmailService = Depends(get_email_service),
):
    """
    Register a new user

    An email is always sent to the address: a confirmation link for new or
    unconfirmed accounts, otherwise a notice about the attempt.
    """
    await account_service.register(db, request, emails)
    return Response(status_code=status.HTTP_202_ACCEPTED)


@router.post("/login", response_model=LoginResponse, dependencies=[Depends(login_enabled)])
async def login(request: LoginRequest, db: Session = Depends(get_db)):
    """Exchange credentials for an access token"""
    return LoginResponse(token=user_service.login(db, request.email, request.password))


@router.post("/account/confirm")
async def resend_confirmation(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    emails: EmailService = Depends(get_email_service),
):
    """Resend the account confirmation link"""
    await account_service.create_confirmation_and_send(db, current_user, emails)
    return Response(status_code=status.HTTP_200_OK)


@router.put("/account/confirm/{confirmation_id}")
async def confirm_account(confirmation_id: str, db: Session = Depends(get_db)):
    """Confirm an account with the token from the confirmation email"""
    account_service.confirm_account(db, parse_uuid(confirmation_id))
    return Response(status_code=status.HTTP_200_OK)


@router.post("/account/recover", dependencies=[Depends(recovery_enabled)])
async def recover_account(
    request: RecoverAccountRequest,
    db: Session = Depends(get_db),
    emails: EmailService = Depends(get_email_service),
):
    """Send an account recovery email; succeeds whether or not the user exists"""
    await account_service.recover_account(db, request, emails)
    return Response(status_code=status.HTTP_200_OK)


@router.get("/account/recover/{recovery_id}", dependencies=[Depends(recovery_enabled)])
async def test_recovery(recovery_id: str, db: Session = Depends(get_db)):
    """Check that a recovery token is still valid"""
    account_service.test_recovery(db, parse_uuid(recovery_id))
    return Response(status_code=status.HTTP_200_OK)


@router.post("/account/recover/{recovery_id}", dependencies=[Depends(recovery_enabled)])
async def reset_password(
    recovery_id: str,
    request: ChangePasswordRequest,
    db: Session = Depends(get_db),
):
    """Reset the password of the account a recovery token was issued for"""
    account_service.reset_password(db, parse_uuid(recovery_id), request.password)
    return Response(status_code=status.HTTP_200_OK)
