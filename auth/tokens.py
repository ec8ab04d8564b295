"""
Signed tokens: session cookies and email-action links.

Session cookies carry ``<opaque token>.<hex HMAC>``. The opaque part is the
row key in ``auth_sessions``; the signature stops forged cookies before
any database lookup.

Email-action tokens (verify-email, reset-password) are stateless: an
unpadded base64url JSON document ``{email, purpose, exp, nonce, sig}``
where ``sig`` is HMAC-SHA256 over the other fields. They are bound to a
purpose and expire.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import secrets
import time
from dataclasses import dataclass
from typing import Optional

PURPOSE_VERIFY_EMAIL = "verify-email"
PURPOSE_RESET_PASSWORD = "reset-password"


class InvalidTokenError(ValueError):
    """Raised when an email-action token is malformed, tampered or expired."""


def _sign(secret: str, raw: bytes) -> str:
    return hmac.new(secret.encode(), raw, hashlib.sha256).hexdigest()


# ── Session tokens ─────────────────────────────────────────────────────


def new_session_token() -> str:
    return secrets.token_urlsafe(32)


def sign_session_token(token: str, secret: str) -> str:
    return f"{token}.{_sign(secret, token.encode())}"


def unsign_session_token(value: str, secret: str) -> Optional[str]:
    """Return the opaque token if the signature matches, else ``None``."""
    token, sep, sig = value.rpartition(".")
    if not sep or not token:
        return None
    if not hmac.compare_digest(sig, _sign(secret, token.encode())):
        return None
    return token


# ── Email-action tokens ────────────────────────────────────────────────


@dataclass(frozen=True)
class EmailTokenClaims:
    email: str
    purpose: str
    exp: int


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def _b64decode(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def _canonical(email: str, purpose: str, exp: int, nonce: str) -> bytes:
    return json.dumps(
        {"email": email, "exp": exp, "nonce": nonce, "purpose": purpose},
        sort_keys=True,
        separators=(",", ":"),
    ).encode()


def create_email_token(
    email: str,
    purpose: str,
    secret: str,
    expires_in: int,
    *,
    now: Optional[float] = None,
) -> str:
    """Issue a URL-safe token for ``email`` valid for ``expires_in`` seconds."""
    exp = int(now if now is not None else time.time()) + expires_in
    nonce = secrets.token_urlsafe(12)
    sig = _sign(secret, _canonical(email, purpose, exp, nonce))
    doc = {"email": email, "purpose": purpose, "exp": exp, "nonce": nonce, "sig": sig}
    return _b64encode(json.dumps(doc, separators=(",", ":")).encode())


def verify_email_token(
    token: str,
    purpose: str,
    secret: str,
    *,
    now: Optional[float] = None,
) -> EmailTokenClaims:
    """
    Verify an email-action token and return its claims.

    Raises ``InvalidTokenError`` on bad format, bad signature, wrong
    purpose or expiry.
    """
    try:
        doc = json.loads(_b64decode(token))
        email = doc["email"]
        token_purpose = doc["purpose"]
        exp = int(doc["exp"])
        nonce = doc["nonce"]
        sig = doc["sig"]
    except (ValueError, KeyError, TypeError) as exc:
        raise InvalidTokenError("malformed token") from exc

    expected = _sign(secret, _canonical(email, token_purpose, exp, nonce))
    if not isinstance(sig, str) or not hmac.compare_digest(sig, expected):
        raise InvalidTokenError("bad signature")
    if token_purpose != purpose:
        raise InvalidTokenError("wrong token purpose")
    if exp < (now if now is not None else time.time()):
        raise InvalidTokenError("token expired")
    return EmailTokenClaims(email=email, purpose=token_purpose, exp=exp)
