"""Auth routes: signup, login, token rotation, password reset, email verification.

Route overview:
  POST /signup             → create an account + onboarding progress, log in
  POST /login              → email + password login
  POST /refresh            → exchange a refresh token for a new pair (rotation)
  POST /logout             → drop the presented refresh token (all of them when authenticated)
  POST /forgot-password    → email a reset link; same answer whether or not the account exists
  POST /reset-password     → set a new password with a reset token
  POST /verify-email       → mark the email verified with a verification token
  POST /send-verification  → re-send the verification email (requires auth)
"""

import logging
from datetime import timedelta

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from onboard.auth.deps import get_current_client, get_optional_client
from onboard.auth.password import hash_password, verify_password
from onboard.auth.tokens import (
    TokenPair,
    consume_single_use_token,
    issue_single_use_token,
    issue_token_pair,
    revoke_refresh_tokens,
    rotate_refresh_token,
)
from onboard.config import settings
from onboard.database import get_db
from onboard.middleware.exceptions import (
    BadRequestError,
    ConflictError,
    UnauthorizedError,
)
from onboard.models.client import Client
from onboard.models.onboarding import OnboardingProgress, OnboardingStatus
from onboard.models.tokens import EmailVerificationToken, PasswordResetToken
from onboard.schemas.auth import (
    AuthResult,
    ClientSummary,
    ForgotPasswordRequest,
    LoginRequest,
    LogoutRequest,
    RefreshRequest,
    RefreshResult,
    ResetPasswordRequest,
    SignupRequest,
    Tokens,
    VerifyEmailRequest,
)
from onboard.schemas.common import ApiResponse, MessageResponse
from onboard.services import email

logger = logging.getLogger(__name__)

router = APIRouter()

FORGOT_PASSWORD_MESSAGE = (
    "If an account with that email exists, a password reset link has been sent."
)


# ── Helpers ──────────────────────────────────────────────────

def _tokens(pair: TokenPair) -> Tokens:
    return Tokens(access_token=pair.access_token, refresh_token=pair.refresh_token)


async def _find_by_email(db: AsyncSession, address: str) -> Client | None:
    result = await db.execute(select(Client).where(Client.email == address.lower()))
    return result.scalar_one_or_none()


async def _issue_verification(
    db: AsyncSession, client: Client, background: BackgroundTasks
) -> None:
    token = await issue_single_use_token(
        db,
        EmailVerificationToken,
        client.id,
        timedelta(hours=settings.email_verification_expire_hours),
    )
    background.add_task(email.send_verification_email, client.email, client.first_name, token)


# ── POST /signup ─────────────────────────────────────────────

@router.post(
    "/signup",
    response_model=ApiResponse[AuthResult],
    status_code=status.HTTP_201_CREATED,
)
async def signup(
    body: SignupRequest,
    background: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    """Create the client and its onboarding progress in one transaction."""
    if await _find_by_email(db, body.email):
        raise ConflictError("Email already registered")

    client = Client(
        email=body.email.lower(),
        password_hash=hash_password(body.password),
        first_name=body.first_name,
        last_name=body.last_name,
    )
    db.add(client)
    await db.flush()

    db.add(OnboardingProgress(
        client_id=client.id,
        current_step=1,
        status=OnboardingStatus.PENDING,
    ))
    await db.flush()

    pair = await issue_token_pair(db, client)
    await _issue_verification(db, client, background)

    logger.info("New client signed up: %s", client.email)
    return {
        "data": AuthResult(
            client=ClientSummary.model_validate(client),
            tokens=_tokens(pair),
        ),
    }


# ── POST /login ──────────────────────────────────────────────

@router.post("/login", response_model=ApiResponse[AuthResult])
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    client = await _find_by_email(db, body.email)

    # Same answer for unknown email and wrong password
    if not client or not verify_password(body.password, client.password_hash):
        raise UnauthorizedError("Invalid email or password")

    pair = await issue_token_pair(db, client)
    return {
        "data": AuthResult(
            client=ClientSummary.model_validate(client),
            tokens=_tokens(pair),
        ),
    }


# ── POST /refresh ────────────────────────────────────────────

@router.post("/refresh", response_model=ApiResponse[RefreshResult])
async def refresh(body: RefreshRequest, db: AsyncSession = Depends(get_db)):
    """Rotate: the presented token is consumed and can never be used again."""
    pair = await rotate_refresh_token(db, body.refresh_token)
    return {"data": RefreshResult(tokens=_tokens(pair))}


# ── POST /logout ─────────────────────────────────────────────

@router.post("/logout", response_model=MessageResponse)
async def logout(
    body: LogoutRequest | None = None,
    db: AsyncSession = Depends(get_db),
    client: Client | None = Depends(get_optional_client),
):
    await revoke_refresh_tokens(
        db,
        token=body.refresh_token if body else None,
        client_id=client.id if client else None,
    )
    return {"message": "Logged out successfully"}


# ── POST /forgot-password ───────────────────────────────────

@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    body: ForgotPasswordRequest,
    background: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    client = await _find_by_email(db, body.email)
    if client:
        token = await issue_single_use_token(
            db,
            PasswordResetToken,
            client.id,
            timedelta(minutes=settings.password_reset_expire_minutes),
        )
        background.add_task(
            email.send_password_reset_email, client.email, client.first_name, token
        )
    else:
        logger.info("Password reset requested for unknown email")

    return {"message": FORGOT_PASSWORD_MESSAGE}


# ── POST /reset-password ────────────────────────────────────

@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(body: ResetPasswordRequest, db: AsyncSession = Depends(get_db)):
    client_id = await consume_single_use_token(
        db, PasswordResetToken, body.token, label="reset"
    )
    client = await db.get(Client, client_id)
    client.password_hash = hash_password(body.password)

    # Every existing session ends with the old password
    await revoke_refresh_tokens(db, client_id=client_id)

    logger.info("Password reset for client %s", client_id)
    return {"message": "Password reset successfully. Please log in with your new password."}


# ── POST /verify-email ──────────────────────────────────────

@router.post("/verify-email", response_model=MessageResponse)
async def verify_email(
    body: VerifyEmailRequest,
    background: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    client_id = await consume_single_use_token(
        db, EmailVerificationToken, body.token, label="verification"
    )
    client = await db.get(Client, client_id)
    client.email_verified = True

    background.add_task(email.send_welcome_email, client.email, client.first_name)
    return {"message": "Email verified successfully."}


# ── POST /send-verification ─────────────────────────────────

@router.post("/send-verification", response_model=MessageResponse)
async def send_verification(
    background: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    client: Client = Depends(get_current_client),
):
    if client.email_verified:
        raise BadRequestError("Email is already verified")

    await _issue_verification(db, client, background)
    return {"message": "Verification email sent successfully."}
