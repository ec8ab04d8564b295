"""
After-request hooks fired by the auth delegate.

The delegate hands every hook an ``AfterHookContext``. Consumers that only
care about sign-ups should not inspect paths themselves: they register
through ``on_signup_completed`` and receive a narrow ``SignupCompleted``
event instead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)

SIGN_UP_PATH_PREFIX = "/sign-up"


@dataclass(frozen=True)
class AfterHookContext:
    """
    What the delegate knows once it has handled a request.

    ``path`` is relative to the auth mount (``/sign-up/email``).
    ``new_session`` is the session object created by this request, if any.
    """

    path: str
    new_session: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class SignupCompleted:
    email: str
    name: str


AfterHook = Callable[[AfterHookContext], Awaitable[None]]
SignupHandler = Callable[[SignupCompleted], Awaitable[None]]


def signup_event_from_context(ctx: AfterHookContext) -> Optional[SignupCompleted]:
    """Return a ``SignupCompleted`` event when ``ctx`` is a finished sign-up."""
    if not ctx.path.startswith(SIGN_UP_PATH_PREFIX):
        return None
    user = (ctx.new_session or {}).get("user")
    if not user or not user.get("email"):
        return None
    return SignupCompleted(email=user["email"], name=user.get("name") or user["email"])


def on_signup_completed(handler: SignupHandler) -> AfterHook:
    """Wrap a sign-up handler as a generic after-hook."""

    async def _hook(ctx: AfterHookContext) -> None:
        event = signup_event_from_context(ctx)
        if event is None:
            return
        logger.info("Sign-up completed for %s", event.email)
        await handler(event)

    _hook.__name__ = getattr(handler, "__name__", "signup_hook")
    return _hook
