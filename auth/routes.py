"""
Auth API routes — sign-up, sign-in, sign-out, session, health.

Route prefix: /api/auth
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from auth.delegate import AuthDelegate
from auth.dependencies import get_auth_delegate, get_optional_session
from auth.hooks import AfterHookContext
from utils.schemas import SignInEmailRequest, SignUpEmailRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


def _client_info(request: Request) -> Dict[str, Optional[str]]:
    return {
        "ip_address": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
    }


def _with_session_cookie(
    request: Request,
    auth: AuthDelegate,
    body: Dict[str, Any],
    token: str,
) -> JSONResponse:
    signed = auth.cookie_value(token)
    body = {**body, "token": signed}
    response = JSONResponse(body)
    response.set_cookie(
        auth.cookie_name,
        signed,
        max_age=auth.session_max_age,
        httponly=True,
        samesite="lax",
        secure=request.url.scheme == "https",
        path="/",
    )
    return response


@router.post("/sign-up/email")
async def sign_up_email(
    req: SignUpEmailRequest,
    request: Request,
    auth: AuthDelegate = Depends(get_auth_delegate),
) -> JSONResponse:
    """Create an account; the new session triggers the sign-up hooks."""
    session_obj, token = await auth.sign_up_email(
        req.email, req.password, req.name, **_client_info(request)
    )
    await auth.run_after_hooks(AfterHookContext(path="/sign-up/email", new_session=session_obj))
    return _with_session_cookie(request, auth, {"user": session_obj["user"]}, token)


@router.post("/sign-in/email")
async def sign_in_email(
    req: SignInEmailRequest,
    request: Request,
    auth: AuthDelegate = Depends(get_auth_delegate),
) -> JSONResponse:
    session_obj, token = await auth.sign_in_email(
        req.email, req.password, **_client_info(request)
    )
    await auth.run_after_hooks(AfterHookContext(path="/sign-in/email", new_session=session_obj))
    return _with_session_cookie(
        request, auth, {"redirect": False, "user": session_obj["user"]}, token
    )


@router.post("/sign-out")
async def sign_out(
    request: Request,
    auth: AuthDelegate = Depends(get_auth_delegate),
) -> JSONResponse:
    removed = await auth.sign_out(request.headers)
    await auth.run_after_hooks(AfterHookContext(path="/sign-out"))
    logger.debug("Sign-out (session removed=%s)", removed)
    response = JSONResponse({"success": True})
    response.delete_cookie(auth.cookie_name, path="/")
    return response


@router.get("/get-session")
@router.get("/session")
async def get_session(
    session: Optional[Dict[str, Any]] = Depends(get_optional_session),
) -> Optional[Dict[str, Any]]:
    """Current session object, or ``null``."""
    return session


@router.get("/ok")
async def ok() -> Dict[str, bool]:
    return {"ok": True}
