"""Application context for explicit state passing.

AppContext is built once per process and handed to every command handler. It
owns the store's lifecycle: the store is loaded after sign-in, reset on
sign-out and reloaded whenever the signed-in user changes.
"""

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from tribute_tracker.core.config import Config
from tribute_tracker.core.remote import RemoteStore
from tribute_tracker.domain.auth import AuthSession
from tribute_tracker.domain.media import MediaHost
from tribute_tracker.domain.store import AppStore


@dataclass
class AppContext:
    """Everything a command handler needs.

    Attributes:
        config: Application configuration
        remote: Supabase accessor (may be unconfigured)
        auth: Auth session bound to the remote store
        store: The application state store
    """

    config: Config
    remote: RemoteStore
    auth: AuthSession
    store: AppStore

    @classmethod
    def create(cls, config: Config, remote: Optional[RemoteStore] = None) -> "AppContext":
        """Create the context; nothing touches the network until start()."""
        remote = remote or RemoteStore(config.remote)
        media = MediaHost(config.media)
        ctx = cls(
            config=config,
            remote=remote,
            auth=AuthSession(remote),
            store=AppStore(remote=remote, media=media),
        )
        ctx.auth.on_change(ctx.switch_user)
        return ctx

    async def switch_user(self, user_id: Optional[str]) -> None:
        """Reset the store for the new identity and load its data."""
        if user_id == self.store.user_id:
            return
        self.store.reset(user_id)
        if user_id is not None:
            await self.store.load()

    async def start(self) -> None:
        """Connect, restore or open a session, and load the store once."""
        if not self.remote.configured:
            logger.info("Running without a remote store (demo mode)")
            await self.store.load()
            return

        try:
            await self.remote.connect()
            user_id = await self.auth.restore()
            if user_id is None and self.config.auth.email and self.config.auth.password:
                await self.auth.sign_in(self.config.auth.email, self.config.auth.password)
        except Exception as e:
            logger.exception("Could not start remote session")
            self.store.data_error = f"Failed to connect: {e}"

        if not self.auth.signed_in:
            # Anonymous sessions still load whatever row-level security allows
            await self.store.load()

    async def close(self) -> None:
        """Wait for in-flight writes before the process exits."""
        await self.store.flush()
        self.auth.close()
