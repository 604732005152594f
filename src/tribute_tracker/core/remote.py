"""
Remote store accessor for the hosted Supabase backend.

Two questions are answered here and nothing else:
- is a remote store configured at all (otherwise the app runs on local/demo state)
- give me the query builder for table T

Everything above this layer works with normalized models, never with the client.
"""

from typing import Any, Optional

from loguru import logger
from supabase import AsyncClient, acreate_client

from .config import RemoteConfig

TABLES = frozenset(
    {
        "projects",
        "songs",
        "song_components",
        "tone_presets",
        "practice_schedule",
        "practice_sessions",
        "practice_videos",
        "profiles",
    }
)


class RemoteNotConfigured(RuntimeError):
    """Raised when a remote operation is requested without Supabase credentials."""


def has_remote(remote_config: RemoteConfig) -> bool:
    """Check if Supabase credentials are present."""
    return remote_config.configured


class RemoteStore:
    """Wrapper around the async Supabase client.

    The client is created lazily by connect(); an unconfigured store never
    creates one and reports configured == False.
    """

    def __init__(
        self, remote_config: RemoteConfig, client: Optional[AsyncClient] = None
    ) -> None:
        self._config = remote_config
        self._client = client

    @property
    def configured(self) -> bool:
        return self._client is not None or has_remote(self._config)

    @property
    def connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> AsyncClient:
        """Create the Supabase client once and return it."""
        if self._client is not None:
            return self._client
        if not has_remote(self._config):
            raise RemoteNotConfigured(
                "Supabase not configured. Set SUPABASE_URL and SUPABASE_ANON_KEY."
            )
        logger.debug(f"Connecting to Supabase at {self._config.url}")
        self._client = await acreate_client(self._config.url, self._config.anon_key)
        return self._client

    def _require_client(self) -> AsyncClient:
        if self._client is None:
            raise RemoteNotConfigured(
                "Remote store is not connected. Call connect() first."
            )
        return self._client

    def table(self, name: str) -> Any:
        """Return the query builder for one of the known tables.

        Raises:
            ValueError: If the table is not part of the schema
            RemoteNotConfigured: If there is no connected client
        """
        if name not in TABLES:
            raise ValueError(f"Unknown table: {name}")
        return self._require_client().table(name)

    @property
    def auth(self) -> Any:
        """The client's auth namespace (sessions, sign in/up/out)."""
        return self._require_client().auth
