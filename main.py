"""
Auth + AutoSend demo server — application entry point.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI

from api.middleware import register_middleware
from api.routes import router as api_router
from auth.delegate import AuthDelegate
from auth.hooks import on_signup_completed
from auth.routes import router as auth_router
from config.settings import Settings, config
from connectors.autosend import AutoSendClient, AutoSendConfig
from core.mailer import AccountMailer
from database.session import build_engine, build_session_factory, create_tables
from utils.errors import register_exception_handlers

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("httpcore", "httpx", "aiosqlite", "sqlalchemy.engine"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def _endpoint_lines(port: int) -> list[str]:
    base = f"http://localhost:{port}"
    return [
        f"  - POST {base}/api/auth/sign-up/email",
        f"  - POST {base}/api/auth/sign-in/email",
        f"  - POST {base}/api/auth/sign-out",
        f"  - GET  {base}/api/auth/get-session",
        f"  - GET  {base}/api/auth/ok",
        f"  - POST {base}/api/auth/verify-email",
        f"  - POST {base}/api/auth/reset-password",
        f"  - GET  {base}/api/me",
    ]


def create_app(
    settings: Optional[Settings] = None,
    *,
    email_transport: Optional[httpx.AsyncBaseTransport] = None,
    bcrypt_rounds: Optional[int] = None,
) -> FastAPI:
    settings = settings or config

    app = FastAPI(
        title="Auth + AutoSend Integration Server",
        version="1.0.0",
        description="Email + password auth with AutoSend transactional emails.",
    )

    engine = build_engine(settings.database_url)
    auth_kwargs = {"bcrypt_rounds": bcrypt_rounds} if bcrypt_rounds else {}
    auth = AuthDelegate(
        build_session_factory(engine),
        secret=settings.auth_secret,
        session_expiry_seconds=settings.session_expiry_seconds,
        cookie_name=settings.session_cookie_name,
        **auth_kwargs,
    )
    autosend = AutoSendClient(AutoSendConfig.from_settings(settings), transport=email_transport)
    mailer = AccountMailer.from_settings(settings, autosend)
    auth.add_after_hook(on_signup_completed(mailer.on_signup_completed))

    app.state.settings = settings
    app.state.engine = engine
    app.state.auth = auth
    app.state.mailer = mailer

    register_middleware(app, settings)
    register_exception_handlers(app)

    # Custom routes go first so /api/auth/verify-email is not shadowed
    app.include_router(api_router)
    app.include_router(auth_router, prefix="/api/auth")

    @app.on_event("startup")
    async def on_startup():
        await create_tables(engine)

        missing = autosend.config.missing()
        if missing:
            logger.warning("%s not set — emails will fail until configured", ", ".join(missing))
        if settings.auth_secret == Settings.model_fields["auth_secret"].default:
            logger.warning("AUTH_SECRET is the development default; set it before deploying")

        logger.info("Server is running on http://localhost:%d", settings.port)
        logger.info("AutoSend integration is active (test mode=%s)", autosend.config.test_mode)
        logger.info("Available endpoints:\n%s", "\n".join(_endpoint_lines(settings.port)))

    @app.on_event("shutdown")
    async def on_shutdown():
        await engine.dispose()

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
