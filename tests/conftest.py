"""Shared fixtures: an in-memory stand-in for the Supabase async client."""

import asyncio
import itertools
from types import SimpleNamespace
from typing import Any, Optional

import pytest
from loguru import logger

from tribute_tracker.core.config import RemoteConfig
from tribute_tracker.core.output import set_quiet
from tribute_tracker.core.remote import RemoteStore
from tribute_tracker.domain.store import AppStore


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def quiet_output():
    """Keep log() from printing and loguru from writing to stderr during tests."""
    logger.remove()
    set_quiet(True)
    yield
    set_quiet(False)


class FakeQuery:
    """Records one chained PostgREST-style call and applies it on execute()."""

    def __init__(self, client: "FakeClient", table: str) -> None:
        self.client = client
        self.table = table
        self.op: Optional[str] = None
        self.payload: Any = None
        self.columns: Optional[str] = None
        self.filters: list[tuple[str, Any]] = []

    def select(self, columns: str = "*") -> "FakeQuery":
        self.op, self.columns = "select", columns
        return self

    def insert(self, payload: Any) -> "FakeQuery":
        self.op, self.payload = "insert", payload
        return self

    def update(self, payload: dict) -> "FakeQuery":
        self.op, self.payload = "update", payload
        return self

    def upsert(self, payload: dict) -> "FakeQuery":
        self.op, self.payload = "upsert", payload
        return self

    def delete(self) -> "FakeQuery":
        self.op = "delete"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append((column, value))
        return self

    def _matches(self, row: dict) -> bool:
        return all(row.get(column) == value for column, value in self.filters)

    async def execute(self) -> SimpleNamespace:
        # Yield once so concurrent writes really interleave
        await asyncio.sleep(0)
        self.client.calls.append(self)
        error = self.client.failures.get((self.table, self.op))
        if error is not None:
            raise error

        rows = self.client.rows.setdefault(self.table, [])
        if self.op == "select":
            data = [dict(row) for row in rows if self._matches(row)]
            if self.table == "songs" and "song_components" in (self.columns or ""):
                components = self.client.rows.get("song_components", [])
                for song in data:
                    song["song_components"] = [
                        dict(c) for c in components if c.get("song_id") == song["id"]
                    ]
        elif self.op == "insert":
            payloads = self.payload if isinstance(self.payload, list) else [self.payload]
            data = []
            for payload in payloads:
                row = {**payload, "id": self.client.next_id(self.table)}
                rows.append(row)
                data.append(dict(row))
        elif self.op == "update":
            data = []
            for row in rows:
                if self._matches(row):
                    row.update(self.payload)
                    data.append(dict(row))
        elif self.op == "upsert":
            rows[:] = [r for r in rows if r.get("id") != self.payload.get("id")]
            rows.append(dict(self.payload))
            data = [dict(self.payload)]
        elif self.op == "delete":
            data = [dict(row) for row in rows if self._matches(row)]
            rows[:] = [row for row in rows if not self._matches(row)]
        else:
            raise AssertionError(f"execute() without an operation on {self.table}")
        return SimpleNamespace(data=data)


class FakeAuth:
    def __init__(self) -> None:
        self.session: Any = None
        self.callback: Any = None
        self.unsubscribed = False
        self.sign_in_error: Optional[Exception] = None

    def on_auth_state_change(self, callback):
        self.callback = callback

        def unsubscribe() -> None:
            self.unsubscribed = True

        return SimpleNamespace(unsubscribe=unsubscribe)

    async def get_session(self):
        return self.session

    async def sign_in_with_password(self, credentials: dict):
        if self.sign_in_error is not None:
            raise self.sign_in_error
        self.session = SimpleNamespace(user=SimpleNamespace(id=f"user-{credentials['email']}"))
        return self.session

    async def sign_up(self, credentials: dict):
        self.session = SimpleNamespace(user=SimpleNamespace(id=f"user-{credentials['email']}"))
        return self.session

    async def sign_out(self) -> None:
        self.session = None


class FakeClient:
    """Tables are lists of dict rows; inserts get sequential server ids."""

    def __init__(self) -> None:
        self.rows: dict[str, list[dict]] = {}
        self.calls: list[FakeQuery] = []
        self.failures: dict[tuple[str, str], Exception] = {}
        self.auth = FakeAuth()
        self._ids = itertools.count(1)

    def next_id(self, table: str) -> str:
        return f"{table}-{next(self._ids)}"

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def fail(self, table: str, op: str, error: Optional[Exception] = None) -> None:
        self.failures[(table, op)] = error or RuntimeError(f"{op} on {table} rejected")

    def calls_to(self, table: str, op: Optional[str] = None) -> list[FakeQuery]:
        return [
            c for c in self.calls if c.table == table and (op is None or c.op == op)
        ]


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def remote(fake_client: FakeClient) -> RemoteStore:
    return RemoteStore(RemoteConfig(), client=fake_client)


@pytest.fixture
def store(remote: RemoteStore) -> AppStore:
    return AppStore(remote=remote, user_id="user-1")


@pytest.fixture
def local_store() -> AppStore:
    """A store without any remote store."""
    return AppStore()
