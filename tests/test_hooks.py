"""
Tests for after-hook narrowing and the delegate's hook isolation.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from auth.delegate import AuthDelegate
from auth.hooks import (
    AfterHookContext,
    SignupCompleted,
    on_signup_completed,
    signup_event_from_context,
)


def _session(email="ada@example.com", name="Ada"):
    return {"session": {"id": "s1"}, "user": {"id": "u1", "email": email, "name": name}}


class TestSignupEventFromContext:
    def test_signup_with_session(self):
        ctx = AfterHookContext(path="/sign-up/email", new_session=_session())
        assert signup_event_from_context(ctx) == SignupCompleted(email="ada@example.com", name="Ada")

    def test_name_falls_back_to_email(self):
        ctx = AfterHookContext(path="/sign-up/email", new_session=_session(name=""))
        assert signup_event_from_context(ctx).name == "ada@example.com"

    def test_other_paths_ignored(self):
        ctx = AfterHookContext(path="/sign-in/email", new_session=_session())
        assert signup_event_from_context(ctx) is None

    @pytest.mark.parametrize("new_session", [None, {}, {"session": {"id": "s1"}}])
    def test_signup_without_user_ignored(self, new_session):
        ctx = AfterHookContext(path="/sign-up/email", new_session=new_session)
        assert signup_event_from_context(ctx) is None


class TestOnSignupCompleted:
    @pytest.mark.asyncio
    async def test_handler_called_once_for_signup(self):
        handler = AsyncMock()
        hook = on_signup_completed(handler)

        await hook(AfterHookContext(path="/sign-up/email", new_session=_session()))
        await hook(AfterHookContext(path="/sign-in/email", new_session=_session()))
        await hook(AfterHookContext(path="/sign-out"))

        handler.assert_awaited_once_with(SignupCompleted(email="ada@example.com", name="Ada"))


class TestRunAfterHooks:
    @pytest.mark.asyncio
    async def test_failing_hook_does_not_stop_others(self):
        delegate = AuthDelegate(MagicMock(), secret="s")
        boom = AsyncMock(side_effect=RuntimeError("boom"))
        after = AsyncMock()
        delegate.add_after_hook(boom)
        delegate.add_after_hook(after)

        ctx = AfterHookContext(path="/sign-up/email", new_session=_session())
        await delegate.run_after_hooks(ctx)

        boom.assert_awaited_once_with(ctx)
        after.assert_awaited_once_with(ctx)
