"""Tests for the remote store accessor."""

from unittest.mock import AsyncMock, patch

import pytest

from tribute_tracker.core.config import RemoteConfig
from tribute_tracker.core.remote import RemoteNotConfigured, RemoteStore, has_remote


def test_unconfigured_store() -> None:
    remote = RemoteStore(RemoteConfig())

    assert has_remote(RemoteConfig()) is False
    assert remote.configured is False
    assert remote.connected is False
    with pytest.raises(RemoteNotConfigured):
        remote.table("songs")


def test_unknown_table_rejected(remote: RemoteStore) -> None:
    with pytest.raises(ValueError, match="Unknown table"):
        remote.table("setlists")


def test_table_returns_query_builder(remote: RemoteStore, fake_client) -> None:
    query = remote.table("practice_schedule")
    assert query.table == "practice_schedule"


def test_configured_but_not_connected() -> None:
    remote = RemoteStore(RemoteConfig(url="https://abc.supabase.co", anon_key="anon"))

    assert remote.configured is True
    assert remote.connected is False
    with pytest.raises(RemoteNotConfigured, match="not connected"):
        remote.table("songs")


@pytest.mark.anyio
async def test_connect_creates_client_once(fake_client) -> None:
    remote = RemoteStore(RemoteConfig(url="https://abc.supabase.co", anon_key="anon"))

    with patch(
        "tribute_tracker.core.remote.acreate_client", new=AsyncMock(return_value=fake_client)
    ) as create:
        assert await remote.connect() is fake_client
        assert await remote.connect() is fake_client

    create.assert_awaited_once_with("https://abc.supabase.co", "anon")
    assert remote.connected is True
    assert remote.auth is fake_client.auth


@pytest.mark.anyio
async def test_connect_without_credentials_raises() -> None:
    with pytest.raises(RemoteNotConfigured):
        await RemoteStore(RemoteConfig()).connect()
