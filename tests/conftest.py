"""
Shared fixtures: a throwaway SQLite file per test, a fake AutoSend
endpoint that records every request, and an ASGI client for the app.
"""

from __future__ import annotations

import contextlib
import json
from typing import Any, AsyncIterator, Dict, List

import httpx
import pytest
import pytest_asyncio

from config.settings import Settings
from database.session import create_tables
from main import create_app


class FakeAutoSend:
    """``httpx.MockTransport`` handler standing in for the AutoSend API."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.status_code = 200
        self.body: Dict[str, Any] = {"success": True, "data": {"emailId": "email_123"}}
        self.headers: Dict[str, str] = {}
        self.error: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json=self.body, headers=self.headers)

    @property
    def payloads(self) -> List[Dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests]

    def fail_with(self, status_code: int, body: Dict[str, Any], **headers: str) -> None:
        self.status_code = status_code
        self.body = body
        self.headers = headers

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def make_settings(tmp_path, **overrides) -> Settings:
    values: Dict[str, Any] = dict(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        autosend_api_key="as_test_key",
        autosend_from_email="noreply@example.com",
        autosend_from_name="Example App",
        autosend_welcome_template_id="tmpl_welcome",
        app_base_url="https://app.example.com",
        auth_secret="test-secret",
        test_env=True,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def provider() -> FakeAutoSend:
    return FakeAutoSend()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def app(settings, provider):
    return create_app(settings, email_transport=provider.transport, bcrypt_rounds=4)


@contextlib.asynccontextmanager
async def asgi_client(app) -> AsyncIterator[httpx.AsyncClient]:
    await create_tables(app.state.engine)
    transport = httpx.ASGITransport(app=app)
    try:
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
            yield c
    finally:
        await app.state.engine.dispose()


@pytest_asyncio.fixture
async def client(app):
    async with asgi_client(app) as c:
        yield c


@pytest.fixture
def build_client(tmp_path, provider):
    """Client for an app built from settings overrides."""

    def _build(**overrides):
        app = create_app(
            make_settings(tmp_path, **overrides),
            email_transport=provider.transport,
            bcrypt_rounds=4,
        )
        return asgi_client(app)

    return _build


@pytest.fixture
def sign_up(client):
    """POST /api/auth/sign-up/email with sensible defaults."""

    async def _sign_up(
        email: str = "ada@example.com",
        name: str | None = "Ada",
        password: str = "correct-horse",
    ) -> httpx.Response:
        body: Dict[str, Any] = {"email": email, "password": password}
        if name is not None:
            body["name"] = name
        return await client.post("/api/auth/sign-up/email", json=body)

    return _sign_up
