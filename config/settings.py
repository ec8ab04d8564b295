"""
Application settings loaded from environment variables.
"""

from pydantic_settings import BaseSettings
from typing import Optional

DEFAULT_WELCOME_TEMPLATE_ID = "A-61522f2bc3a4d0a0"


class Settings(BaseSettings):
    # ── AutoSend ──────────────────────────────────────────────────────────
    autosend_api_key: str = ""                 # required at send time, not at startup
    autosend_from_email: str = ""              # required at send time, not at startup
    autosend_from_name: Optional[str] = None   # falls back to "The App"
    autosend_api_url: str = "https://api.autosend.com/v1/mails/send"
    autosend_timeout_seconds: float = 10.0
    autosend_welcome_template_id: str = DEFAULT_WELCOME_TEMPLATE_ID
    test_env: bool = False                     # true → AutoSend sandbox sends

    # ── Links in outgoing emails ─────────────────────────────────────────
    app_base_url: str = "http://localhost:3000"

    # ── Auth ──────────────────────────────────────────────────────────────
    auth_secret: str = "change-me-auth-secret"          # HMAC secret for cookies & email tokens
    session_expiry_seconds: int = 604800                # 7 days
    session_cookie_name: str = "autosend_demo.session_token"
    email_token_expiry_seconds: int = 86400             # verify-email links
    reset_token_expiry_seconds: int = 3600              # reset-password links

    # ── Database ─────────────────────────────────────────────────────────
    database_url: str = "sqlite+aiosqlite:///./database.db"

    # ── Server ───────────────────────────────────────────────────────────
    port: int = 3000
    host: str = "0.0.0.0"
    debug: bool = False
    cors_origin: str = "http://localhost:3000"

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore",
    }


config = Settings()
