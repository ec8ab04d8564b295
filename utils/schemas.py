"""
Pydantic schemas shared by the routes, the auth delegate and the AutoSend connector.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from auth.password import MAX_PASSWORD_BYTES, password_too_long


# ═══════════════════════════════════════════════════════════════════════════════
# Email send request (internal → AutoSend connector)
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class UserRef:
    """Recipient identity. ``name`` falls back to the email address."""

    email: str
    name: str

    @classmethod
    def of(cls, email: str, name: Optional[str] = None) -> "UserRef":
        return cls(email=email, name=name or email)


class EmailAddress(BaseModel):
    email: str
    name: Optional[str] = None


class EmailSendRequest(BaseModel):
    """
    What the application wants sent. The sender identity is not part of
    the request; the connector fills it from configuration.

    At least one of ``template_id`` / ``html`` should be set for the
    message to render. This is not enforced.
    """

    model_config = ConfigDict(populate_by_name=True)

    to: EmailAddress
    subject: Optional[str] = None
    html: Optional[str] = None
    template_id: Optional[str] = Field(default=None, alias="templateId")
    dynamic_data: Optional[Dict[str, str]] = Field(default=None, alias="dynamicData")

    @classmethod
    def for_user(cls, user: UserRef, **fields: Any) -> "EmailSendRequest":
        return cls(to=EmailAddress(email=user.email, name=user.name), **fields)


# ═══════════════════════════════════════════════════════════════════════════════
# Custom email-trigger routes
# ═══════════════════════════════════════════════════════════════════════════════


def _check_password_bytes(value: str) -> str:
    if password_too_long(value):
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


class EmailTriggerRequest(BaseModel):
    # Optional so a missing email yields our own 400 message
    email: Optional[str] = None
    name: Optional[str] = None


class VerifyEmailConfirmRequest(BaseModel):
    token: str = Field(..., min_length=1)


class ResetPasswordConfirmRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str = Field(..., min_length=1)
    new_password: str = Field(..., alias="newPassword", min_length=8, max_length=MAX_PASSWORD_BYTES)

    @field_validator("new_password")
    @classmethod
    def fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


# ═══════════════════════════════════════════════════════════════════════════════
# Auth delegate
# ═══════════════════════════════════════════════════════════════════════════════


class SignUpEmailRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=8, max_length=MAX_PASSWORD_BYTES)
    name: Optional[str] = Field(default=None, max_length=128)

    @field_validator("password")
    @classmethod
    def fits_bcrypt(cls, value: str) -> str:
        return _check_password_bytes(value)


class SignInEmailRequest(BaseModel):
    email: str
    password: str
