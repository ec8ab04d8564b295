"""
Tests for session-cookie signing and email-action tokens.
"""

import base64
import json
import re

import pytest

from auth.tokens import (
    PURPOSE_RESET_PASSWORD,
    PURPOSE_VERIFY_EMAIL,
    InvalidTokenError,
    create_email_token,
    new_session_token,
    sign_session_token,
    unsign_session_token,
    verify_email_token,
)

SECRET = "s3cret"


class TestSessionTokens:
    def test_signed_value_unsigns(self):
        token = new_session_token()
        assert unsign_session_token(sign_session_token(token, SECRET), SECRET) == token

    def test_wrong_secret_rejected(self):
        signed = sign_session_token(new_session_token(), SECRET)
        assert unsign_session_token(signed, "other") is None

    @pytest.mark.parametrize("value", ["", "no-signature", ".abc", "token.deadbeef"])
    def test_garbage_rejected(self, value):
        assert unsign_session_token(value, SECRET) is None


class TestEmailTokens:
    def test_token_is_base64url(self):
        token = create_email_token("a@b.com", PURPOSE_VERIFY_EMAIL, SECRET, 60)
        assert re.fullmatch(r"[A-Za-z0-9_-]+", token)

    def test_round_trip_claims(self):
        token = create_email_token("a@b.com", PURPOSE_VERIFY_EMAIL, SECRET, 60, now=1000)
        claims = verify_email_token(token, PURPOSE_VERIFY_EMAIL, SECRET, now=1030)
        assert claims.email == "a@b.com"
        assert claims.exp == 1060

    def test_tokens_are_unique(self):
        first = create_email_token("a@b.com", PURPOSE_VERIFY_EMAIL, SECRET, 60, now=1000)
        second = create_email_token("a@b.com", PURPOSE_VERIFY_EMAIL, SECRET, 60, now=1000)
        assert first != second

    def test_expired(self):
        token = create_email_token("a@b.com", PURPOSE_VERIFY_EMAIL, SECRET, 60, now=1000)
        with pytest.raises(InvalidTokenError, match="expired"):
            verify_email_token(token, PURPOSE_VERIFY_EMAIL, SECRET, now=1061)

    def test_purpose_is_bound(self):
        token = create_email_token("a@b.com", PURPOSE_VERIFY_EMAIL, SECRET, 60)
        with pytest.raises(InvalidTokenError, match="purpose"):
            verify_email_token(token, PURPOSE_RESET_PASSWORD, SECRET)

    def test_tampered_email_rejected(self):
        token = create_email_token("a@b.com", PURPOSE_RESET_PASSWORD, SECRET, 60)
        doc = json.loads(base64.urlsafe_b64decode(token + "=" * (-len(token) % 4)))
        doc["email"] = "mallory@b.com"
        forged = base64.urlsafe_b64encode(json.dumps(doc).encode()).rstrip(b"=").decode()
        with pytest.raises(InvalidTokenError, match="signature"):
            verify_email_token(forged, PURPOSE_RESET_PASSWORD, SECRET)

    def test_wrong_secret_rejected(self):
        token = create_email_token("a@b.com", PURPOSE_VERIFY_EMAIL, SECRET, 60)
        with pytest.raises(InvalidTokenError):
            verify_email_token(token, PURPOSE_VERIFY_EMAIL, "other")

    @pytest.mark.parametrize("token", ["", "not-base64!", "bm90IGpzb24"])
    def test_malformed(self, token):
        with pytest.raises(InvalidTokenError):
            verify_email_token(token, PURPOSE_VERIFY_EMAIL, SECRET)
