"""
Account emails — welcome, verify-email and reset-password.

``AccountMailer`` turns account events into ``EmailSendRequest`` objects
and hands them to the AutoSend connector. The welcome email is rendered
by AutoSend from a stored template (``templateId`` + ``dynamicData``);
verification and reset emails are rendered here and sent as raw HTML.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlencode

from auth.hooks import SignupCompleted
from auth.tokens import (
    PURPOSE_RESET_PASSWORD,
    PURPOSE_VERIFY_EMAIL,
    create_email_token,
)
from config.settings import Settings
from connectors.autosend import AutoSendClient
from utils.email_templates import (
    PASSWORD_RESET_SUBJECT,
    VERIFICATION_SUBJECT,
    render_password_reset_email,
    render_verification_email,
)
from utils.schemas import EmailSendRequest, UserRef

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LinkBuilder:
    """Builds absolute links into the front-end from ``APP_BASE_URL``."""

    base_url: str

    def url(self, path: str, **params: str) -> str:
        base = self.base_url.rstrip("/")
        link = f"{base}/{path.lstrip('/')}"
        return f"{link}?{urlencode(params)}" if params else link

    def verify_email(self, token: str) -> str:
        return self.url("/verify-email", token=token)

    def reset_password(self, token: str) -> str:
        return self.url("/reset-password", token=token)

    def dashboard(self) -> str:
        return self.url("/dashboard")


@dataclass(frozen=True)
class TokenPolicy:
    secret: str
    verify_expiry_seconds: int = 86400
    reset_expiry_seconds: int = 3600


@dataclass(frozen=True)
class SentEmail:
    """Outcome of a verify/reset send: the token embedded in the link."""

    email: str
    token: str
    provider_response: Dict[str, Any]


class AccountMailer:
    def __init__(
        self,
        client: AutoSendClient,
        links: LinkBuilder,
        tokens: TokenPolicy,
        *,
        welcome_template_id: str,
    ):
        self.client = client
        self.links = links
        self.tokens = tokens
        self.welcome_template_id = welcome_template_id

    @classmethod
    def from_settings(cls, settings: Settings, client: AutoSendClient) -> "AccountMailer":
        return cls(
            client,
            LinkBuilder(settings.app_base_url),
            TokenPolicy(
                secret=settings.auth_secret,
                verify_expiry_seconds=settings.email_token_expiry_seconds,
                reset_expiry_seconds=settings.reset_token_expiry_seconds,
            ),
            welcome_template_id=settings.autosend_welcome_template_id,
        )

    # ── Welcome (after sign-up) ─────────────────────────────────────────

    def welcome_request(self, event: SignupCompleted) -> EmailSendRequest:
        user = UserRef.of(event.email, event.name)
        return EmailSendRequest.for_user(
            user,
            template_id=self.welcome_template_id,
            dynamic_data={
                "firstName": user.name,
                "dashboardLink": self.links.dashboard(),
            },
        )

    async def on_signup_completed(self, event: SignupCompleted) -> None:
        """
        Best-effort welcome email. Errors are logged and swallowed so the
        sign-up response never depends on email delivery.
        """
        try:
            await self.client.send_email(self.welcome_request(event))
        except Exception:
            logger.exception("Failed to send welcome email to %s", event.email)

    # ── Verify email / reset password ───────────────────────────────────

    async def send_verification_email(self, email: str, name: Optional[str] = None) -> SentEmail:
        user = UserRef.of(email, name)
        token = create_email_token(
            user.email,
            PURPOSE_VERIFY_EMAIL,
            self.tokens.secret,
            self.tokens.verify_expiry_seconds,
        )
        request = EmailSendRequest.for_user(
            user,
            subject=VERIFICATION_SUBJECT,
            html=render_verification_email(user.name, self.links.verify_email(token)),
        )
        response = await self.client.send_email(request)
        return SentEmail(email=user.email, token=token, provider_response=response)

    async def send_password_reset_email(self, email: str, name: Optional[str] = None) -> SentEmail:
        user = UserRef.of(email, name)
        token = create_email_token(
            user.email,
            PURPOSE_RESET_PASSWORD,
            self.tokens.secret,
            self.tokens.reset_expiry_seconds,
        )
        request = EmailSendRequest.for_user(
            user,
            subject=PASSWORD_RESET_SUBJECT,
            html=render_password_reset_email(user.name, self.links.reset_password(token)),
        )
        response = await self.client.send_email(request)
        return SentEmail(email=user.email, token=token, provider_response=response)
