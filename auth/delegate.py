"""
AuthDelegate — email + password accounts, sessions and after-hooks.

Owns the ``users`` / ``auth_sessions`` tables. The HTTP layer in
``auth/routes.py`` is a thin shell over this class; application code only
talks to it through ``get_session(headers)`` and after-hooks.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.requests import cookie_parser

from auth.hooks import AfterHook, AfterHookContext
from auth.password import (
    BCRYPT_ROUNDS,
    MAX_PASSWORD_BYTES,
    hash_password,
    password_too_long,
    verify_password,
)
from auth.tokens import new_session_token, sign_session_token, unsign_session_token
from database.models import AuthSession, User
from utils.errors import AuthenticationError, ConflictError, ValidationError

logger = logging.getLogger(__name__)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything we store is UTC.
    if value is None:
        return None
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _iso(value: Optional[datetime]) -> Optional[str]:
    value = _as_utc(value)
    return value.isoformat() if value else None


def _check_password(password: str) -> None:
    if password_too_long(password):
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def serialize_user(user: User) -> Dict[str, Any]:
    return {
        "id": user.user_id,
        "email": user.email,
        "name": user.name,
        "emailVerified": bool(user.email_verified),
        "createdAt": _iso(user.created_at),
        "updatedAt": _iso(user.updated_at),
    }


def serialize_session(auth_session: AuthSession, user: User) -> Dict[str, Any]:
    return {
        "session": {
            "id": auth_session.session_id,
            "userId": auth_session.user_id,
            "expiresAt": _iso(auth_session.expires_at),
            "createdAt": _iso(auth_session.created_at),
            "ipAddress": auth_session.ip_address,
            "userAgent": auth_session.user_agent,
        },
        "user": serialize_user(user),
    }


class AuthDelegate:
    """Account store + session issuer with post-request hooks."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        secret: str,
        session_expiry_seconds: int = 604800,
        cookie_name: str = "autosend_demo.session_token",
        bcrypt_rounds: int = BCRYPT_ROUNDS,
    ):
        self._session_factory = session_factory
        self._secret = secret
        self._session_expiry = timedelta(seconds=session_expiry_seconds)
        self._bcrypt_rounds = bcrypt_rounds
        self.cookie_name = cookie_name
        self._after_hooks: List[AfterHook] = []

    # ── Hooks ───────────────────────────────────────────────────────────

    def add_after_hook(self, hook: AfterHook) -> None:
        self._after_hooks.append(hook)

    async def run_after_hooks(self, ctx: AfterHookContext) -> None:
        """Run every hook; a failing hook never fails the request."""
        for hook in self._after_hooks:
            try:
                await hook(ctx)
            except Exception:
                logger.exception(
                    "After-hook %s failed for %s",
                    getattr(hook, "__name__", repr(hook)),
                    ctx.path,
                )

    # ── Cookies / headers ───────────────────────────────────────────────

    @property
    def session_max_age(self) -> int:
        return int(self._session_expiry.total_seconds())

    def cookie_value(self, token: str) -> str:
        return sign_session_token(token, self._secret)

    def session_token_from_headers(self, headers: Mapping[str, str]) -> Optional[str]:
        """Pull the opaque session token from the cookie or a Bearer header."""
        candidates = []
        cookie_header = headers.get("cookie")
        if cookie_header:
            candidates.append(cookie_parser(cookie_header).get(self.cookie_name))
        authorization = headers.get("authorization") or ""
        if authorization.lower().startswith("bearer "):
            candidates.append(authorization[7:].strip())

        for raw in candidates:
            token = unsign_session_token(raw, self._secret) if raw else None
            if token:
                return token
        return None

    # ── Accounts ────────────────────────────────────────────────────────

    async def _open_session(
        self,
        db: AsyncSession,
        user: User,
        ip_address: Optional[str],
        user_agent: Optional[str],
    ) -> Tuple[AuthSession, str]:
        token = new_session_token()
        auth_session = AuthSession(
            user_id=user.user_id,
            token=token,
            expires_at=datetime.now(timezone.utc) + self._session_expiry,
            created_at=datetime.now(timezone.utc),
            ip_address=ip_address,
            user_agent=(user_agent or "")[:512] or None,
        )
        db.add(auth_session)
        await db.flush()
        return auth_session, token

    async def sign_up_email(
        self,
        email: str,
        password: str,
        name: Optional[str] = None,
        *,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Tuple[Dict[str, Any], str]:
        """Create a user and sign them in. Returns ``(session object, token)``."""
        email = normalize_email(email)
        if "@" not in email:
            raise ValidationError("Invalid email")
        _check_password(password)

        password_hash = await asyncio.to_thread(hash_password, password, self._bcrypt_rounds)

        async with self._session_factory() as db:
            result = await db.execute(select(User).where(User.email == email))
            if result.scalar_one_or_none() is not None:
                raise ConflictError("User already exists")

            user = User(
                email=email,
                name=(name or "").strip() or email,
                email_verified=False,
                password_hash=password_hash,
                created_at=datetime.now(timezone.utc),
                updated_at=datetime.now(timezone.utc),
            )
            db.add(user)
            try:
                await db.flush()
            except IntegrityError as exc:
                # Lost a race with a concurrent sign-up for the same email
                await db.rollback()
                raise ConflictError("User already exists") from exc
            auth_session, token = await self._open_session(db, user, ip_address, user_agent)
            session_obj = serialize_session(auth_session, user)
            await db.commit()

        logger.info("Signed up user %s (%s)", user.email, user.user_id)
        return session_obj, token

    async def sign_in_email(
        self,
        email: str,
        password: str,
        *,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Tuple[Dict[str, Any], str]:
        email = normalize_email(email)
        async with self._session_factory() as db:
            result = await db.execute(select(User).where(User.email == email))
            user = result.scalar_one_or_none()
            ok = user is not None and await asyncio.to_thread(
                verify_password, password, user.password_hash
            )
            if not ok:
                raise AuthenticationError("Invalid email or password")

            auth_session, token = await self._open_session(db, user, ip_address, user_agent)
            session_obj = serialize_session(auth_session, user)
            await db.commit()

        logger.info("Signed in %s (%s)", user.email, user.user_id)
        return session_obj, token

    async def sign_out(self, headers: Mapping[str, str]) -> bool:
        """Delete the caller's session. Returns False if there was none."""
        token = self.session_token_from_headers(headers)
        if token is None:
            return False
        async with self._session_factory() as db:
            result = await db.execute(delete(AuthSession).where(AuthSession.token == token))
            await db.commit()
        return bool(result.rowcount)

    async def get_session(self, headers: Mapping[str, str]) -> Optional[Dict[str, Any]]:
        """Resolve the session for a request's headers, or ``None``."""
        token = self.session_token_from_headers(headers)
        if token is None:
            return None
        async with self._session_factory() as db:
            result = await db.execute(
                select(AuthSession, User)
                .join(User, User.user_id == AuthSession.user_id)
                .where(AuthSession.token == token)
            )
            row = result.first()
            if row is None:
                return None
            auth_session, user = row
            if _as_utc(auth_session.expires_at) <= datetime.now(timezone.utc):
                await db.delete(auth_session)
                await db.commit()
                logger.debug("Expired session %s removed", auth_session.session_id)
                return None
            return serialize_session(auth_session, user)

    async def mark_email_verified(self, email: str) -> bool:
        email = normalize_email(email)
        async with self._session_factory() as db:
            result = await db.execute(select(User).where(User.email == email))
            user = result.scalar_one_or_none()
            if user is None:
                return False
            user.email_verified = True
            user.updated_at = datetime.now(timezone.utc)
            await db.commit()
        logger.info("Email verified for %s", email)
        return True

    async def reset_password(self, email: str, new_password: str) -> bool:
        """Replace the password and revoke every open session for the user."""
        email = normalize_email(email)
        _check_password(new_password)
        password_hash = await asyncio.to_thread(hash_password, new_password, self._bcrypt_rounds)
        async with self._session_factory() as db:
            result = await db.execute(select(User).where(User.email == email))
            user = result.scalar_one_or_none()
            if user is None:
                return False
            user.password_hash = password_hash
            user.updated_at = datetime.now(timezone.utc)
            await db.execute(delete(AuthSession).where(AuthSession.user_id == user.user_id))
            await db.commit()
        logger.info("Password reset for %s", email)
        return True
