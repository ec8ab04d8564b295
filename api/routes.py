"""
Application routes: status, current session, and the email-trigger
endpoints mounted next to the auth delegate under /api/auth.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Request, status
from fastapi.responses import JSONResponse

from api.dependencies import get_mailer
from auth.delegate import AuthDelegate
from auth.dependencies import get_auth_delegate
from auth.tokens import (
    PURPOSE_RESET_PASSWORD,
    PURPOSE_VERIFY_EMAIL,
    InvalidTokenError,
    verify_email_token,
)
from core.mailer import AccountMailer, SentEmail
from utils.errors import AppError, AuthenticationError, ValidationError, error_body
from utils.schemas import (
    EmailTriggerRequest,
    ResetPasswordConfirmRequest,
    VerifyEmailConfirmRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()

ENDPOINTS = {
    "auth": "/api/auth/*",
    "me": "/api/me",
    "verifyEmail": "/api/auth/verify-email",
    "resetPassword": "/api/auth/reset-password",
}


def _require_email(body: Optional[EmailTriggerRequest]) -> str:
    # Blank-only input counts as missing; otherwise the address is echoed as given
    email = body.email if body else None
    if not email or not email.strip():
        raise ValidationError("Email is required")
    return email


def _send_failed(message: str, exc: AppError) -> JSONResponse:
    body = error_body(message)
    body["error"] = exc.public_message
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)


def _sent(message: str, sent: SentEmail) -> Dict[str, Any]:
    return {
        "success": True,
        "message": message,
        "data": {"email": sent.email, "token": sent.token},
    }


def _claims_or_400(token: str, purpose: str, mailer: AccountMailer):
    try:
        return verify_email_token(token, purpose, mailer.tokens.secret)
    except InvalidTokenError as exc:
        logger.info("Rejected %s token: %s", purpose, exc)
        raise ValidationError("Invalid or expired token") from exc


# ── Status / session ───────────────────────────────────────────────────


@router.get("/")
async def index() -> Dict[str, Any]:
    return {
        "message": "Better Auth + AutoSend Integration Server",
        "status": "running",
        "endpoints": ENDPOINTS,
    }


@router.get("/api/me")
async def me(
    request: Request,
    auth: AuthDelegate = Depends(get_auth_delegate),
) -> Any:
    """Return the caller's session as resolved by the auth delegate."""
    try:
        session = await auth.get_session(request.headers)
    except Exception:
        logger.exception("Error getting session")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body("Failed to get session"),
        )

    if not session:
        raise AuthenticationError("Not authenticated")

    return {"success": True, "session": session}


# ── Email triggers ─────────────────────────────────────────────────────


@router.post("/api/auth/verify-email")
async def send_verification_email(
    body: Optional[EmailTriggerRequest] = Body(default=None),
    mailer: AccountMailer = Depends(get_mailer),
) -> Any:
    email = _require_email(body)
    try:
        sent = await mailer.send_verification_email(email, body.name)
    except AppError as exc:
        logger.error("Verification email to %s failed: %s", email, exc.message)
        return _send_failed("Failed to send verification email", exc)
    return _sent("Verification email sent successfully", sent)


@router.post("/api/auth/reset-password")
async def send_password_reset_email(
    body: Optional[EmailTriggerRequest] = Body(default=None),
    mailer: AccountMailer = Depends(get_mailer),
) -> Any:
    email = _require_email(body)
    try:
        sent = await mailer.send_password_reset_email(email, body.name)
    except AppError as exc:
        logger.error("Password reset email to %s failed: %s", email, exc.message)
        return _send_failed("Failed to send password reset email", exc)
    return _sent("Password reset email sent successfully", sent)


@router.post("/api/auth/verify-email/confirm")
async def confirm_email(
    req: VerifyEmailConfirmRequest,
    mailer: AccountMailer = Depends(get_mailer),
    auth: AuthDelegate = Depends(get_auth_delegate),
) -> Dict[str, Any]:
    claims = _claims_or_400(req.token, PURPOSE_VERIFY_EMAIL, mailer)
    if not await auth.mark_email_verified(claims.email):
        raise ValidationError("Invalid or expired token")
    return {"success": True, "message": "Email verified successfully"}


@router.post("/api/auth/reset-password/confirm")
async def confirm_password_reset(
    req: ResetPasswordConfirmRequest,
    mailer: AccountMailer = Depends(get_mailer),
    auth: AuthDelegate = Depends(get_auth_delegate),
) -> Dict[str, Any]:
    claims = _claims_or_400(req.token, PURPOSE_RESET_PASSWORD, mailer)
    if not await auth.reset_password(claims.email, req.new_password):
        raise ValidationError("Invalid or expired token")
    return {"success": True, "message": "Password has been reset"}
