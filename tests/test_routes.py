"""
HTTP-level tests: status, session, email triggers and the welcome hook.
"""

import re

import pytest


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


class TestStatus:
    @pytest.mark.asyncio
    async def test_index(self, client):
        resp = await client.get("/")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "running"
        assert body["endpoints"]["auth"] == "/api/auth/*"
        assert "x-process-time" in resp.headers

    @pytest.mark.asyncio
    async def test_auth_ok(self, client):
        resp = await client.get("/api/auth/ok")
        assert resp.json() == {"ok": True}


class TestEmailTriggers:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/api/auth/verify-email", "/api/auth/reset-password"])
    @pytest.mark.parametrize("body", [{}, {"email": ""}, {"email": "   "}, {"name": "Ada"}])
    async def test_missing_email_is_400(self, client, provider, path, body):
        resp = await client.post(path, json=body)
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "Email is required"}
        assert provider.requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/api/auth/verify-email", "/api/auth/reset-password"])
    async def test_no_body_is_400(self, client, provider, path):
        resp = await client.post(path)
        assert resp.status_code == 400
        assert resp.json()["success"] is False
        assert provider.requests == []

    @pytest.mark.asyncio
    async def test_verify_email_sends_one_email(self, client, provider):
        resp = await client.post("/api/auth/verify-email", json={"email": "a@b.com"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == "Verification email sent successfully"
        assert body["data"]["email"] == "a@b.com"
        assert re.fullmatch(r"[A-Za-z0-9_-]+", body["data"]["token"])

        assert len(provider.payloads) == 1
        payload = provider.payloads[0]
        assert payload["to"] == {"email": "a@b.com", "name": "a@b.com"}
        assert payload["from"] == {"email": "noreply@example.com", "name": "Example App"}
        assert payload["subject"] == "Verify Your Email Address"
        assert payload["test"] is True
        assert "templateId" not in payload
        assert "dynamicData" not in payload
        assert f"https://app.example.com/verify-email?token={body['data']['token']}" in payload["html"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/api/auth/verify-email", "/api/auth/reset-password"])
    async def test_email_is_echoed_as_given(self, client, provider, path):
        resp = await client.post(path, json={"email": " Ada@Example.com "})

        assert resp.status_code == 200
        assert resp.json()["data"]["email"] == " Ada@Example.com "
        assert provider.payloads[0]["to"]["email"] == " Ada@Example.com "

    @pytest.mark.asyncio
    async def test_reset_password_sends_one_email(self, client, provider):
        resp = await client.post("/api/auth/reset-password", json={"email": "a@b.com", "name": "Ada"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "Password reset email sent successfully"
        assert len(provider.payloads) == 1
        payload = provider.payloads[0]
        assert payload["to"] == {"email": "a@b.com", "name": "Ada"}
        assert payload["subject"] == "Reset Your Password"
        assert "https://app.example.com/reset-password?token=" in payload["html"]

    @pytest.mark.asyncio
    async def test_provider_failure_is_500(self, client, provider):
        provider.fail_with(400, {"success": False, "message": "Invalid recipient"})
        resp = await client.post("/api/auth/verify-email", json={"email": "a@b.com"})

        assert resp.status_code == 500
        assert resp.json() == {
            "success": False,
            "message": "Failed to send verification email",
            "error": "Invalid recipient",
        }

    @pytest.mark.asyncio
    async def test_missing_config_makes_no_request(self, build_client, provider):
        async with build_client(autosend_api_key="") as client:
            resp = await client.post("/api/auth/reset-password", json={"email": "a@b.com"})

        assert resp.status_code == 500
        body = resp.json()
        assert body["message"] == "Failed to send password reset email"
        assert body["error"] == "Email service is not configured"
        assert provider.requests == []


class TestSession:
    @pytest.mark.asyncio
    async def test_me_without_session_is_401(self, client):
        resp = await client.get("/api/me")
        assert resp.status_code == 401
        assert resp.json() == {"success": False, "message": "Not authenticated"}

    @pytest.mark.asyncio
    async def test_me_with_forged_token_is_401(self, client):
        resp = await client.get("/api/me", headers=_auth("forged.deadbeef"))
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_me_echoes_session(self, client, sign_up):
        token = (await sign_up()).json()["token"]

        delegate_view = (await client.get("/api/auth/get-session", headers=_auth(token))).json()
        resp = await client.get("/api/me", headers=_auth(token))

        assert resp.status_code == 200
        assert resp.json() == {"success": True, "session": delegate_view}
        assert delegate_view["user"]["email"] == "ada@example.com"

    @pytest.mark.asyncio
    async def test_me_lookup_failure_is_500(self, app, client, monkeypatch):
        async def broken(headers):
            raise RuntimeError("database is locked")

        monkeypatch.setattr(app.state.auth, "get_session", broken)
        resp = await client.get("/api/me")
        assert resp.status_code == 500
        assert resp.json() == {"success": False, "message": "Failed to get session"}


class TestWelcomeHook:
    @pytest.mark.asyncio
    async def test_signup_sends_one_welcome_email(self, client, provider, sign_up):
        resp = await sign_up(email="ada@example.com", name="Ada")

        assert resp.status_code == 200
        assert len(provider.payloads) == 1
        payload = provider.payloads[0]
        assert payload["to"]["email"] == "ada@example.com"
        assert payload["templateId"] == "tmpl_welcome"
        assert payload["dynamicData"] == {
            "firstName": "Ada",
            "dashboardLink": "https://app.example.com/dashboard",
        }

    @pytest.mark.asyncio
    async def test_first_name_defaults_to_email(self, client, provider, sign_up):
        await sign_up(email="grace@example.com", name=None)
        assert provider.payloads[0]["dynamicData"]["firstName"] == "grace@example.com"

    @pytest.mark.asyncio
    async def test_signup_succeeds_when_provider_fails(self, client, provider, sign_up):
        provider.fail_with(500, {"message": "AutoSend is down"})
        resp = await sign_up()

        assert resp.status_code == 200
        assert resp.json()["user"]["email"] == "ada@example.com"
        assert len(provider.requests) == 1

    @pytest.mark.asyncio
    async def test_sign_in_does_not_send_welcome(self, client, provider, sign_up):
        await sign_up()
        resp = await client.post(
            "/api/auth/sign-in/email",
            json={"email": "ada@example.com", "password": "correct-horse"},
        )
        assert resp.status_code == 200
        assert len(provider.requests) == 1

