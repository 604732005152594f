"""Tests for the auth session wrapper."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from tribute_tracker.core.config import RemoteConfig
from tribute_tracker.core.remote import RemoteNotConfigured, RemoteStore
from tribute_tracker.domain.auth import AuthSession


@pytest.mark.anyio
async def test_restore_without_session_stays_signed_out(remote: RemoteStore, fake_client) -> None:
    auth = AuthSession(remote)
    listener = AsyncMock()
    auth.on_change(listener)

    assert await auth.restore() is None
    assert auth.signed_in is False
    assert fake_client.auth.callback is not None
    listener.assert_not_called()


@pytest.mark.anyio
async def test_restore_picks_up_existing_session(remote: RemoteStore, fake_client) -> None:
    fake_client.auth.session = SimpleNamespace(user=SimpleNamespace(id="user-7"))
    auth = AuthSession(remote)
    seen = []
    auth.on_change(seen.append)

    assert await auth.restore() == "user-7"
    assert seen == ["user-7"]


@pytest.mark.anyio
async def test_sign_in_and_out_notify_listeners(remote: RemoteStore) -> None:
    auth = AuthSession(remote)
    listener = AsyncMock()
    auth.on_change(listener)

    await auth.sign_in("gilmour@example.com", "shine-on")
    assert auth.user_id == "user-gilmour@example.com"

    # Same identity again is not a change
    await auth.sign_in("gilmour@example.com", "shine-on")

    await auth.sign_out()
    assert auth.signed_in is False
    assert [c.args[0] for c in listener.await_args_list] == ["user-gilmour@example.com", None]


@pytest.mark.anyio
async def test_sign_up_creates_profile(remote: RemoteStore, fake_client) -> None:
    auth = AuthSession(remote)

    user_id = await auth.sign_up("waters@example.com", "wall", full_name="Roger")

    assert user_id == "user-waters@example.com"
    assert fake_client.rows["profiles"] == [
        {"id": user_id, "email": "waters@example.com", "full_name": "Roger"}
    ]


@pytest.mark.anyio
async def test_sign_up_survives_profile_failure(remote: RemoteStore, fake_client) -> None:
    fake_client.fail("profiles", "upsert")
    auth = AuthSession(remote)

    assert await auth.sign_up("mason@example.com", "drums") == "user-mason@example.com"
    assert auth.signed_in is True


@pytest.mark.anyio
async def test_auth_without_remote_raises() -> None:
    auth = AuthSession(RemoteStore(RemoteConfig()))
    with pytest.raises(RemoteNotConfigured):
        await auth.sign_in("a@example.com", "pw")


def test_close_unsubscribes(remote: RemoteStore, fake_client) -> None:
    auth = AuthSession(remote)
    auth._subscription = fake_client.auth.on_auth_state_change(lambda *_: None)
    auth.close()
    assert fake_client.auth.unsubscribed is True
