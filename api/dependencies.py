"""
FastAPI dependencies (shared across routes).
"""

from __future__ import annotations

from fastapi import Request

from config.settings import Settings
from core.mailer import AccountMailer


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_mailer(request: Request) -> AccountMailer:
    return request.app.state.mailer
