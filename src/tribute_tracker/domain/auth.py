"""
Auth session handling on top of Supabase auth.

AuthSession tracks who is signed in and tells listeners whenever that
identity changes, which is what drives store reset/load.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional, Union

from loguru import logger

from tribute_tracker.core.remote import RemoteNotConfigured, RemoteStore

UserListener = Callable[[Optional[str]], Union[None, Awaitable[None]]]


def _user_id_of(session: Any) -> Optional[str]:
    user = getattr(session, "user", None) if session is not None else None
    return getattr(user, "id", None)


class AuthSession:
    def __init__(self, remote: RemoteStore) -> None:
        self._remote = remote
        self._user_id: Optional[str] = None
        self._listeners: list[UserListener] = []
        self._subscription: Any = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def user_id(self) -> Optional[str]:
        return self._user_id

    @property
    def signed_in(self) -> bool:
        return self._user_id is not None

    def on_change(self, listener: UserListener) -> None:
        """Register a callback fired with the new user id (None on sign-out)."""
        self._listeners.append(listener)

    def _auth(self) -> Any:
        if not self._remote.configured:
            raise RemoteNotConfigured("Supabase not configured")
        return self._remote.auth

    async def _set_user(self, user_id: Optional[str]) -> None:
        if user_id == self._user_id:
            return
        logger.info(f"Auth user changed: {self._user_id} -> {user_id}")
        self._user_id = user_id
        for listener in list(self._listeners):
            result = listener(user_id)
            if inspect.isawaitable(result):
                await result

    def _handle_auth_event(self, event: Any, session: Any) -> None:
        """Supabase auth state callback; runs synchronously inside the client."""
        logger.debug(f"Auth event: {event}")
        task = asyncio.get_running_loop().create_task(
            self._set_user(_user_id_of(session))
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def restore(self) -> Optional[str]:
        """Pick up an existing session and subscribe to auth state changes."""
        await self._remote.connect()
        auth = self._auth()
        if self._subscription is None:
            self._subscription = auth.on_auth_state_change(self._handle_auth_event)
        session = await auth.get_session()
        await self._set_user(_user_id_of(session))
        return self._user_id

    async def sign_in(self, email: str, password: str) -> Optional[str]:
        await self._remote.connect()
        response = await self._auth().sign_in_with_password(
            {"email": email, "password": password}
        )
        await self._set_user(_user_id_of(response))
        return self._user_id

    async def sign_up(
        self, email: str, password: str, full_name: Optional[str] = None
    ) -> Optional[str]:
        await self._remote.connect()
        response = await self._auth().sign_up({"email": email, "password": password})
        user_id = _user_id_of(response)
        if user_id:
            try:
                await self._remote.table("profiles").upsert(
                    {"id": user_id, "email": email, "full_name": full_name}
                ).execute()
            except Exception as e:
                # Profile row is optional; the account exists either way
                logger.warning(f"Could not create profile for {email}: {e}")
        await self._set_user(user_id)
        return self._user_id

    async def sign_out(self) -> None:
        await self._auth().sign_out()
        await self._set_user(None)

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
