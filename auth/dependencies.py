"""
FastAPI dependencies for authentication.

The ``AuthDelegate`` is built once in ``create_app`` and parked on
``app.state``; these helpers fetch it for route handlers.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Depends, Request

from auth.delegate import AuthDelegate


def get_auth_delegate(request: Request) -> AuthDelegate:
    return request.app.state.auth


async def get_optional_session(
    request: Request,
    auth: AuthDelegate = Depends(get_auth_delegate),
) -> Optional[Dict[str, Any]]:
    """The caller's session object, or ``None`` when signed out."""
    return await auth.get_session(request.headers)
