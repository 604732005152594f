"""
Application state store.

AppStore is the single owner of the in-memory collections and the single
place mutations originate from. Every mutation runs in two phases:

1. The change is applied to local state synchronously and the optimistic
   record (carrying a client-side id) is returned to the caller.
2. If a remote store is connected, the write runs as an asyncio.Task. Its
   done-callback reconciles on success, looking the record up by the
   client-side id and swapping in the normalized server copy. On failure the
   local change stays and data_error is overwritten with a message.

Writes are never queued, retried or awaited by the caller; flush() exists for
the CLI and tests to wait for whatever is in flight. Reads never touch the
remote store. Mutations must be called from inside a running event loop.
"""

import asyncio
from dataclasses import fields as dataclass_fields
from dataclasses import replace
from datetime import date, datetime
from functools import partial
from pathlib import Path
from typing import Any, Awaitable, Callable, Iterable, Optional, TypeVar, Union

from loguru import logger

from tribute_tracker.core.remote import RemoteStore

from . import demo
from . import schedule as schedule_ops
from . import stats
from .media import MediaHost, MediaUploadError
from .models import (
    AmpSettings,
    EffectPedal,
    PracticeSession,
    PracticeVideo,
    Project,
    Schedule,
    ScheduleItem,
    Song,
    SongComponent,
    TonePreset,
    new_id,
)
from .normalize import (
    PROJECT_FIELDS,
    SCHEDULE_FIELDS,
    SONG_FIELDS,
    TONE_PRESET_FIELDS,
    component_from_row,
    component_to_row,
    practice_session_from_row,
    practice_session_to_row,
    practice_video_from_row,
    practice_video_to_row,
    project_from_row,
    project_to_row,
    schedule_item_from_row,
    schedule_item_to_row,
    song_from_row,
    song_to_row,
    to_row_changes,
    tone_preset_from_row,
    tone_preset_to_row,
    utc_now,
)
from .schedule import DateLike

SONG_SELECT = "*, song_components(*)"

T = TypeVar("T")


class StoreError(Exception):
    """Raised for mutations that reference an entity the store does not hold."""


def describe_error(error: BaseException) -> str:
    """Human-readable text for a remote failure (PostgREST errors carry .message)."""
    message = getattr(error, "message", None)
    return str(message or error or type(error).__name__)


def _keep_local_edits(server: T, sent: T, local: T) -> T:
    """The server copy, except fields changed locally after the write was sent.

    Covers edits made while the write was in flight as well as references
    re-keyed in the meantime (a song's project_id, tone_preset_id).
    """
    edited = {
        f.name: getattr(local, f.name)
        for f in dataclass_fields(local)
        if f.name != "id" and getattr(local, f.name) != getattr(sent, f.name)
    }
    return replace(server, **edited)


class AppStore:
    """Canonical collections plus optimistic mutations with background persistence."""

    def __init__(
        self,
        remote: Optional[RemoteStore] = None,
        media: Optional[MediaHost] = None,
        user_id: Optional[str] = None,
    ) -> None:
        self.remote = remote
        self.media = media
        self.user_id = user_id

        self.projects: list[Project] = []
        self.songs: list[Song] = []
        self.tone_presets: list[TonePreset] = []
        self.scheduled_songs: Schedule = {}
        self.practice_sessions: dict[str, list[PracticeSession]] = {}
        self.practice_videos: dict[str, list[PracticeVideo]] = {}

        # Last remote failure; last write wins until clear_data_error()
        self.data_error: Optional[str] = None

        self._pending: set[asyncio.Task] = set()
        # Client song id -> server song id, for writes that settle after a re-key
        self._song_ids: dict[str, str] = {}
        self._session_ids: dict[str, str] = {}
        # Client ids whose insert is in flight, and those deleted meanwhile
        self._unsaved: set[str] = set()
        self._deleted_unsaved: set[str] = set()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def remote_enabled(self) -> bool:
        return self.remote is not None and self.remote.connected

    @property
    def pending_writes(self) -> int:
        return len(self._pending)

    def reset(self, user_id: Optional[str] = None) -> None:
        """Drop all state, e.g. on sign-out or before loading another user."""
        self.user_id = user_id
        self.projects = []
        self.songs = []
        self.tone_presets = []
        self.scheduled_songs = {}
        self.practice_sessions = {}
        self.practice_videos = {}
        self.data_error = None
        self._song_ids = {}
        self._session_ids = {}
        self._unsaved = set()
        self._deleted_unsaved = set()

    def load_demo(self) -> None:
        self.reset(self.user_id)
        self.projects = demo.demo_projects()
        self.tone_presets = demo.demo_tone_presets()
        self.songs = demo.demo_songs()
        self.scheduled_songs = demo.demo_schedule()
        self._refresh_project_counts()

    async def load(self) -> bool:
        """Populate every collection from the remote store in one pass.

        Without a remote store the demo data set is installed instead.

        Returns:
            True if remote data was loaded
        """
        if self.remote is None or not self.remote.configured:
            logger.info("No remote store configured, loading demo data")
            self.load_demo()
            return False
        if not self.remote.connected:
            logger.warning("Remote store configured but not connected, nothing loaded")
            return False

        try:
            (
                projects,
                songs,
                presets,
                schedule_rows,
                session_rows,
                video_rows,
            ) = await asyncio.gather(
                self.remote.table("projects").select("*").execute(),
                self.remote.table("songs").select(SONG_SELECT).execute(),
                self.remote.table("tone_presets").select("*").execute(),
                self.remote.table("practice_schedule").select("*").execute(),
                self.remote.table("practice_sessions").select("*").execute(),
                self.remote.table("practice_videos").select("*").execute(),
            )
        except Exception as e:
            logger.exception("Failed to load data from remote store")
            self._set_error("load your data", e)
            return False

        self.projects = [project_from_row(row) for row in projects.data or []]
        self.songs = [song_from_row(row) for row in songs.data or []]
        self.tone_presets = [tone_preset_from_row(row) for row in presets.data or []]

        scheduled: Schedule = {}
        for row in schedule_rows.data or []:
            day, item = schedule_item_from_row(row)
            if day is None or schedule_ops.find_entry(scheduled, item.song_id, day):
                continue
            scheduled.setdefault(day, []).append(item)
        self.scheduled_songs = dict(sorted(scheduled.items()))

        self.practice_sessions = {}
        for session in sorted(
            (practice_session_from_row(row) for row in session_rows.data or []),
            key=lambda s: s.practiced_at,
        ):
            self.practice_sessions.setdefault(session.song_id, []).append(session)

        self.practice_videos = {}
        for video in sorted(
            (practice_video_from_row(row) for row in video_rows.data or []),
            key=lambda v: v.recorded_at,
        ):
            self.practice_videos.setdefault(video.song_id, []).append(video)

        self._refresh_project_counts()
        logger.info(
            f"Loaded {len(self.projects)} projects, {len(self.songs)} songs, "
            f"{len(self.tone_presets)} tone presets"
        )
        return True

    async def flush(self) -> None:
        """Wait until every in-flight remote write (and its follow-ups) settled."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def clear_data_error(self) -> None:
        self.data_error = None

    # ------------------------------------------------------------------
    # Background writes
    # ------------------------------------------------------------------

    def _set_error(self, action: str, error: BaseException) -> None:
        self.data_error = f"Failed to {action}: {describe_error(error)}"

    def _submit(
        self,
        action: str,
        write: Callable[[], Awaitable[Any]],
        on_success: Optional[Callable[[Any], None]] = None,
        require_remote: bool = True,
    ) -> Optional[asyncio.Task]:
        """Start a background write; on_success receives the write's result."""
        if require_remote and not self.remote_enabled:
            return None
        task = asyncio.get_running_loop().create_task(write(), name=action)
        self._pending.add(task)
        task.add_done_callback(partial(self._settle, action, on_success))
        return task

    def _settle(
        self,
        action: str,
        on_success: Optional[Callable[[Any], None]],
        task: asyncio.Task,
    ) -> None:
        self._pending.discard(task)
        if task.cancelled():
            logger.warning(f"Write cancelled: {action}")
            return
        error = task.exception()
        if error is not None:
            logger.opt(exception=error).error(f"Failed to {action}")
            self._set_error(action, error)
            return
        if on_success is None:
            return
        try:
            on_success(task.result())
        except Exception as e:
            logger.exception(f"Failed to reconcile after: {action}")
            self._set_error(action, e)

    def _submit_insert(
        self,
        action: str,
        table: str,
        temp_id: str,
        row: dict[str, Any],
        on_success: Callable[[Optional[dict[str, Any]]], None],
    ) -> None:
        """Insert a row for an entity that can be deleted before the insert settles."""
        task = self._submit(
            action,
            partial(self._insert_one, table, row),
            partial(self._settle_insert, table, temp_id, on_success),
        )
        if task is not None:
            self._unsaved.add(temp_id)

    def _settle_insert(
        self,
        table: str,
        temp_id: str,
        on_success: Callable[[Optional[dict[str, Any]]], None],
        row: Optional[dict[str, Any]],
    ) -> None:
        self._unsaved.discard(temp_id)
        if temp_id not in self._deleted_unsaved:
            on_success(row)
            return
        self._deleted_unsaved.discard(temp_id)
        if row is not None:
            self._submit(
                f"delete {table} row {row['id']}",
                partial(self._delete_by_id, table, row["id"]),
            )

    def _delete_remote(self, action: str, table: str, row_id: str) -> None:
        """Delete a row now, or once its in-flight insert reports the server id."""
        if row_id in self._unsaved:
            self._deleted_unsaved.add(row_id)
            logger.debug(f"Deferring remote delete of {table} {row_id} until its insert settles")
            return
        self._submit(action, partial(self._delete_by_id, table, row_id))

    async def _insert_one(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        response = await self.remote.table(table).insert(row).execute()
        if not response.data:
            raise StoreError(f"Insert into {table} returned no row")
        return response.data[0]

    async def _insert_many(
        self, table: str, rows: list[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        response = await self.remote.table(table).insert(rows).execute()
        return response.data or []

    async def _update_by_id(
        self, table: str, row_id: str, payload: dict[str, Any]
    ) -> Optional[dict[str, Any]]:
        response = await self.remote.table(table).update(payload).eq("id", row_id).execute()
        return response.data[0] if response.data else None

    async def _delete_by_id(self, table: str, row_id: str) -> None:
        await self.remote.table(table).delete().eq("id", row_id).execute()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_project(self, project_id: str) -> Optional[Project]:
        return next((p for p in self.projects if p.id == project_id), None)

    def get_song(self, song_id: str) -> Optional[Song]:
        return next((s for s in self.songs if s.id == song_id), None)

    def get_tone_preset(self, preset_id: str) -> Optional[TonePreset]:
        return next((t for t in self.tone_presets if t.id == preset_id), None)

    def songs_for_project(self, project_id: str) -> list[Song]:
        return stats.project_songs(project_id, self.songs)

    def sessions_for(self, song_id: str) -> list[PracticeSession]:
        return list(self.practice_sessions.get(song_id, []))

    def videos_for(self, song_id: str) -> list[PracticeVideo]:
        return list(self.practice_videos.get(song_id, []))

    def schedule_for(self, on: DateLike = None) -> list[ScheduleItem]:
        return schedule_ops.entries_for(self.scheduled_songs, on)

    @property
    def todays_schedule(self) -> list[ScheduleItem]:
        return self.schedule_for(None)

    @property
    def todays_schedule_ids(self) -> list[str]:
        return schedule_ops.todays_schedule_ids(self.scheduled_songs)

    def _require_project(self, project_id: str) -> Project:
        project = self.get_project(project_id)
        if project is None:
            raise StoreError(f"Unknown project: {project_id}")
        return project

    def _require_song(self, song_id: str) -> Song:
        song = self.get_song(song_id)
        if song is None:
            raise StoreError(f"Unknown song: {song_id}")
        return song

    def _require_tone_preset(self, preset_id: str) -> TonePreset:
        preset = self.get_tone_preset(preset_id)
        if preset is None:
            raise StoreError(f"Unknown tone preset: {preset_id}")
        return preset

    # ------------------------------------------------------------------
    # Local bookkeeping
    # ------------------------------------------------------------------

    def _refresh_project_counts(self) -> None:
        """Recompute the mirrored counters from actual song membership."""
        self.projects = [
            replace(
                p,
                song_count=stats.project_song_count(p.id, self.songs),
                completed_count=stats.project_completed_count(p.id, self.songs),
            )
            for p in self.projects
        ]

    def _replace_song(self, song_id: str, song: Song) -> None:
        self.songs = [song if s.id == song_id else s for s in self.songs]

    def _rekey_project(self, old_id: str, new_id: str) -> None:
        if old_id == new_id:
            return
        self.songs = [
            replace(s, project_id=new_id) if s.project_id == old_id else s
            for s in self.songs
        ]

    def _current_song_id(self, song_id: str) -> str:
        return self._song_ids.get(song_id, song_id)

    def _rekey_song(self, old_id: str, new_id: str) -> None:
        if old_id == new_id:
            return
        self._song_ids[old_id] = new_id
        self.scheduled_songs = {
            day: [
                replace(item, song_id=new_id) if item.song_id == old_id else item
                for item in items
            ]
            for day, items in self.scheduled_songs.items()
        }
        if old_id in self.practice_sessions:
            self.practice_sessions[new_id] = [
                replace(s, song_id=new_id) for s in self.practice_sessions.pop(old_id)
            ]
        if old_id in self.practice_videos:
            self.practice_videos[new_id] = [
                replace(v, song_id=new_id) for v in self.practice_videos.pop(old_id)
            ]

    def _rekey_tone_preset(self, old_id: str, new_id: Optional[str]) -> None:
        if old_id == new_id:
            return
        self.songs = [
            replace(s, tone_preset_id=new_id) if s.tone_preset_id == old_id else s
            for s in self.songs
        ]

    def _drop_song_references(self, song_ids: set[str]) -> None:
        schedule: Schedule = {}
        for day, items in self.scheduled_songs.items():
            kept = [item for item in items if item.song_id not in song_ids]
            if kept:
                schedule[day] = kept
        self.scheduled_songs = schedule
        for song_id in song_ids:
            self.practice_sessions.pop(song_id, None)
            self.practice_videos.pop(song_id, None)

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def add_project(self, name: str, band_name: str = "", description: str = "") -> Project:
        project = Project(
            id=new_id(), name=name, band_name=band_name, description=description
        )
        self.projects = [*self.projects, project]
        logger.info(f"Added project '{name}' ({project.id})")

        self._submit_insert(
            f"save project '{name}'",
            "projects",
            project.id,
            project_to_row(project, self.user_id),
            partial(self._reconcile_project, project.id, project),
        )
        return project

    def _reconcile_project(
        self, temp_id: str, sent: Project, row: Optional[dict[str, Any]]
    ) -> None:
        local = self.get_project(temp_id)
        if row is None or local is None:
            return
        server = _keep_local_edits(project_from_row(row), sent, local)
        self.projects = [server if p.id == temp_id else p for p in self.projects]
        self._rekey_project(temp_id, server.id)
        self._refresh_project_counts()

    def update_project(self, project_id: str, changes: dict[str, Any]) -> Project:
        project = self._require_project(project_id)
        payload = to_row_changes(PROJECT_FIELDS, changes)
        updated = replace(project, **changes)
        self.projects = [updated if p.id == project_id else p for p in self.projects]

        self._submit(
            f"update project '{updated.name}'",
            partial(self._update_by_id, "projects", project_id, payload),
            partial(self._reconcile_project, project_id, updated),
        )
        return updated

    def delete_project(self, project_id: str) -> None:
        """Remove a project and, locally, its songs (the backend cascades)."""
        project = self._require_project(project_id)
        song_ids = {s.id for s in self.songs if s.project_id == project_id}
        self.projects = [p for p in self.projects if p.id != project_id]
        self.songs = [s for s in self.songs if s.project_id != project_id]
        self._drop_song_references(song_ids)
        logger.info(f"Deleted project '{project.name}' with {len(song_ids)} songs")

        self._delete_remote(f"delete project '{project.name}'", "projects", project_id)

    # ------------------------------------------------------------------
    # Songs
    # ------------------------------------------------------------------

    def add_song(
        self,
        project_id: str,
        title: str,
        components: Iterable[SongComponent] = (),
        **fields: Any,
    ) -> Song:
        """Add a song to a project.

        The song row and its component rows are two separate remote inserts;
        components are written once the server id of the song is known.
        """
        self._require_project(project_id)
        song = Song(
            id=new_id(),
            project_id=project_id,
            title=title,
            components=list(components),
            **fields,
        )
        self.songs = [*self.songs, song]
        self._refresh_project_counts()
        logger.info(f"Added song '{title}' to project {project_id}")

        self._submit_insert(
            f"save song '{title}'",
            "songs",
            song.id,
            song_to_row(song),
            partial(self._reconcile_song, song.id, song),
        )
        return song

    @staticmethod
    def _server_song(sent: Song, local: Song, row: dict[str, Any]) -> Song:
        """Server copy of a song row; sections live in their own table."""
        server = _keep_local_edits(song_from_row(row, []), sent, local)
        return replace(server, components=local.components)

    def _reconcile_song(
        self, temp_id: str, sent: Song, row: Optional[dict[str, Any]]
    ) -> None:
        local = self.get_song(temp_id)
        if row is None or local is None:
            return
        server = self._server_song(sent, local, row)
        self._replace_song(temp_id, server)
        self._rekey_song(temp_id, server.id)
        self._refresh_project_counts()

        if local.components:
            rows = [component_to_row(c, server.id) for c in local.components]
            self._submit(
                f"save sections of '{server.title}'",
                partial(self._insert_many, "song_components", rows),
                partial(
                    self._reconcile_components,
                    server.id,
                    [c.id for c in local.components],
                ),
            )

    def _reconcile_components(
        self, song_id: str, temp_ids: list[str], rows: list[dict[str, Any]]
    ) -> None:
        song = self.get_song(song_id)
        if song is None:
            return
        by_temp_id = {
            temp_id: component_from_row(row) for temp_id, row in zip(temp_ids, rows)
        }
        components = [by_temp_id.get(c.id, c) for c in song.components]
        self._replace_song(song_id, replace(song, components=components))

    def update_song(self, song_id: str, changes: dict[str, Any]) -> Song:
        """Apply a sparse set of field changes to a song.

        A components-only change is persisted as one write per changed
        section (child table) instead of a song row update.
        """
        song = self._require_song(song_id)
        row_changes = {k: v for k, v in changes.items() if k != "components"}
        payload = to_row_changes(SONG_FIELDS, row_changes)

        local_changes = dict(row_changes)
        if "components" in changes:
            local_changes["components"] = list(changes["components"])
        updated = replace(song, **local_changes)
        self._replace_song(song_id, updated)
        self._refresh_project_counts()

        if "components" in changes:
            self._persist_component_changes(song, updated.components)
        if payload:
            self._submit(
                f"update song '{updated.title}'",
                partial(self._update_by_id, "songs", song_id, payload),
                partial(self._reconcile_song_update, song_id, updated),
            )
        return updated

    def _persist_component_changes(
        self, before: Song, components: list[SongComponent]
    ) -> None:
        previous = {c.id: c for c in before.components}
        for component in components:
            old = previous.get(component.id)
            if old is None:
                self._submit(
                    f"save section '{component.name}'",
                    partial(
                        self._insert_one,
                        "song_components",
                        component_to_row(component, before.id),
                    ),
                    partial(self._reconcile_component, before.id, component.id),
                )
                continue
            payload = {}
            if component.progress != old.progress:
                payload["progress"] = component.progress
            if component.name != old.name:
                payload["name"] = component.name
            if component.type != old.type:
                payload["type"] = component.type.value
            if payload:
                self._submit(
                    f"update section '{component.name}'",
                    partial(self._update_by_id, "song_components", component.id, payload),
                )

        removed = set(previous) - {c.id for c in components}
        if removed:
            logger.warning(
                f"Sections {sorted(removed)} removed locally from song {before.id}; "
                "section rows are never deleted remotely"
            )

    def _reconcile_component(
        self, song_id: str, temp_id: str, row: Optional[dict[str, Any]]
    ) -> None:
        if row is not None:
            self._reconcile_components(song_id, [temp_id], [row])

    def _reconcile_song_update(
        self, song_id: str, sent: Song, row: Optional[dict[str, Any]]
    ) -> None:
        local = self.get_song(song_id)
        if row is None or local is None:
            return
        server = self._server_song(sent, local, row)
        self._replace_song(song_id, server)
        self._refresh_project_counts()

    def mark_played(self, song_id: str, when: Optional[datetime] = None) -> Song:
        return self.update_song(song_id, {"last_played": when or utc_now()})

    def delete_song(self, song_id: str) -> None:
        song = self._require_song(song_id)
        self.songs = [s for s in self.songs if s.id != song_id]
        self._drop_song_references({song_id})
        self._refresh_project_counts()
        logger.info(f"Deleted song '{song.title}'")

        self._delete_remote(f"delete song '{song.title}'", "songs", song_id)

    # ------------------------------------------------------------------
    # Tone presets
    # ------------------------------------------------------------------

    def add_tone_preset(
        self,
        name: str,
        amp_settings: Optional[AmpSettings] = None,
        effects: Iterable[EffectPedal] = (),
        tags: Iterable[str] = (),
        **fields: Any,
    ) -> TonePreset:
        preset = TonePreset(
            id=new_id(),
            name=name,
            amp_settings=amp_settings or AmpSettings(),
            effects=list(effects),
            tags=list(dict.fromkeys(tags)),
            **fields,
        )
        self.tone_presets = [*self.tone_presets, preset]
        logger.info(f"Added tone preset '{name}'")

        self._submit_insert(
            f"save tone preset '{name}'",
            "tone_presets",
            preset.id,
            tone_preset_to_row(preset, self.user_id),
            partial(self._reconcile_tone_preset, preset.id, preset),
        )
        return preset

    def _reconcile_tone_preset(
        self, temp_id: str, sent: TonePreset, row: Optional[dict[str, Any]]
    ) -> None:
        local = self.get_tone_preset(temp_id)
        if row is None or local is None:
            return
        server = _keep_local_edits(tone_preset_from_row(row), sent, local)
        self.tone_presets = [
            server if t.id == temp_id else t for t in self.tone_presets
        ]
        self._rekey_tone_preset(temp_id, server.id)

    def update_tone_preset(self, preset_id: str, changes: dict[str, Any]) -> TonePreset:
        preset = self._require_tone_preset(preset_id)
        payload = to_row_changes(TONE_PRESET_FIELDS, changes)
        updated = replace(preset, **changes)
        self.tone_presets = [
            updated if t.id == preset_id else t for t in self.tone_presets
        ]

        self._submit(
            f"update tone preset '{updated.name}'",
            partial(self._update_by_id, "tone_presets", preset_id, payload),
            partial(self._reconcile_tone_preset, preset_id, updated),
        )
        return updated

    def delete_tone_preset(self, preset_id: str) -> None:
        """Remove a preset; linked songs lose their link locally."""
        preset = self._require_tone_preset(preset_id)
        self.tone_presets = [t for t in self.tone_presets if t.id != preset_id]
        self._rekey_tone_preset(preset_id, None)
        logger.info(f"Deleted tone preset '{preset.name}'")

        self._delete_remote(
            f"delete tone preset '{preset.name}'", "tone_presets", preset_id
        )

    # ------------------------------------------------------------------
    # Schedule
    # ------------------------------------------------------------------

    def _schedule_filter(self, query: Any, day: date, item: ScheduleItem) -> Any:
        if item.id:
            return query.eq("id", item.id)
        return query.eq("song_id", item.song_id).eq("scheduled_date", day.isoformat())

    def add_to_schedule(self, song_id: str, on: DateLike = None) -> Optional[ScheduleItem]:
        """Schedule a song for a day (today by default).

        Returns:
            The new entry, or None if the song was already scheduled that day
        """
        self._require_song(song_id)
        day = schedule_ops.date_key(on)
        self.scheduled_songs, item = schedule_ops.add_entry(
            self.scheduled_songs, song_id, day
        )
        if item is None:
            return None

        self._submit(
            f"schedule song for {day.isoformat()}",
            partial(
                self._insert_one,
                "practice_schedule",
                schedule_item_to_row(day, item, self.user_id),
            ),
            partial(self._reconcile_schedule_item, day, song_id),
        )
        return item

    def _reconcile_schedule_item(
        self, day: date, song_id: str, row: Optional[dict[str, Any]]
    ) -> None:
        if row is None:
            return
        _, server = schedule_item_from_row(row)
        song_id = self._current_song_id(song_id)
        self.scheduled_songs = schedule_ops.replace_entry(
            self.scheduled_songs, day, song_id, replace(server, song_id=song_id)
        )

    def remove_from_schedule(self, song_id: str, on: DateLike = None) -> bool:
        day = schedule_ops.date_key(on)
        self.scheduled_songs, removed = schedule_ops.remove_entry(
            self.scheduled_songs, song_id, day
        )
        if removed is None:
            return False

        async def delete_entry() -> None:
            query = self.remote.table("practice_schedule").delete()
            await self._schedule_filter(query, day, removed).execute()

        self._submit(f"unschedule song for {day.isoformat()}", delete_entry)
        return True

    def update_schedule_item(
        self, song_id: str, changes: dict[str, Any], on: DateLike = None
    ) -> Optional[ScheduleItem]:
        """Merge completed/notes into a day's entry; completing stamps completed_at."""
        day = schedule_ops.date_key(on)
        self.scheduled_songs, item = schedule_ops.update_entry(
            self.scheduled_songs, song_id, changes, day
        )
        if item is None:
            return None

        fields = list(changes)
        if "completed" in changes:
            fields.append("completed_at")
        payload = to_row_changes(
            SCHEDULE_FIELDS, {name: getattr(item, name) for name in fields}
        )

        async def update_entry() -> Optional[dict[str, Any]]:
            query = self.remote.table("practice_schedule").update(payload)
            response = await self._schedule_filter(query, day, item).execute()
            return response.data[0] if response.data else None

        self._submit(
            f"update schedule for {day.isoformat()}",
            update_entry,
            partial(self._reconcile_schedule_item, day, song_id),
        )
        return item

    # ------------------------------------------------------------------
    # Practice log
    # ------------------------------------------------------------------

    def add_practice_session(
        self,
        song_id: str,
        duration_minutes: int,
        recording: Optional[Union[str, Path]] = None,
        title: Optional[str] = None,
        practiced_at: Optional[datetime] = None,
    ) -> PracticeSession:
        """Log practice time; an optional recording is uploaded and kept as a video."""
        song = self._require_song(song_id)
        session = PracticeSession(
            id=new_id(),
            song_id=song_id,
            practiced_at=practiced_at or utc_now(),
            duration_minutes=max(0, int(duration_minutes)),
        )
        self.practice_sessions.setdefault(song_id, []).append(session)
        logger.info(f"Logged {session.duration_minutes} min on '{song.title}'")

        self._submit(
            f"log practice on '{song.title}'",
            partial(
                self._insert_one,
                "practice_sessions",
                practice_session_to_row(session, self.user_id),
            ),
            partial(self._reconcile_session, session.id, session),
        )
        self.mark_played(song_id, session.practiced_at)

        if recording is not None:
            self._upload_recording(song, session, Path(recording), title)
        return session

    def _find_session(self, session_id: str) -> Optional[PracticeSession]:
        # Searched across groups: the song may have been re-keyed meanwhile
        for sessions in self.practice_sessions.values():
            for session in sessions:
                if session.id == session_id:
                    return session
        return None

    def _replace_session(self, session_id: str, session: PracticeSession) -> None:
        self.practice_sessions = {
            song_id: [session if s.id == session_id else s for s in sessions]
            for song_id, sessions in self.practice_sessions.items()
        }

    def _reconcile_session(
        self, temp_id: str, sent: PracticeSession, row: Optional[dict[str, Any]]
    ) -> None:
        local = self._find_session(temp_id)
        if row is None or local is None:
            return
        server = _keep_local_edits(practice_session_from_row(row), sent, local)
        self._session_ids[temp_id] = server.id
        self._replace_session(temp_id, server)
        if server.recording_url and server.recording_url != row.get("recording_url"):
            # The upload finished before the session row existed
            self._save_recording_url(server.id, server.recording_url)

    def _save_recording_url(self, session_id: str, url: str) -> None:
        self._submit(
            f"save recording of session {session_id}",
            partial(
                self._update_by_id,
                "practice_sessions",
                session_id,
                {"recording_url": url},
            ),
        )

    def _attach_recording_url(self, temp_id: str, url: str) -> None:
        session_id = self._session_ids.get(temp_id, temp_id)
        session = self._find_session(session_id)
        if session is None:
            return
        self._replace_session(session_id, replace(session, recording_url=url))
        if session_id != temp_id:
            self._save_recording_url(session_id, url)

    def _upload_recording(
        self,
        song: Song,
        session: PracticeSession,
        recording: Path,
        title: Optional[str],
    ) -> None:
        if self.media is None or not self.media.configured:
            logger.warning(f"Recording {recording} skipped: media host not configured")
            self._set_error(
                f"upload {recording.name}", MediaUploadError("media host not configured")
            )
            return

        video_title = title or f"{song.title} practice {session.practiced_at:%Y-%m-%d}"

        def attach(url: str) -> None:
            self._attach_recording_url(session.id, url)
            # The song may have been re-keyed or deleted while uploading
            song_id = self._current_song_id(song.id)
            if self.get_song(song_id) is not None:
                self.add_practice_video(
                    song_id, video_title, url, recorded_at=session.practiced_at
                )

        self._submit(
            f"upload {recording.name}",
            partial(self.media.upload, recording),
            attach,
            require_remote=False,
        )

    def add_practice_video(
        self,
        song_id: str,
        title: str,
        url: str,
        description: Optional[str] = None,
        recorded_at: Optional[datetime] = None,
    ) -> PracticeVideo:
        self._require_song(song_id)
        video = PracticeVideo(
            id=new_id(),
            song_id=song_id,
            title=title,
            url=url,
            description=description,
            recorded_at=recorded_at or utc_now(),
        )
        self.practice_videos.setdefault(song_id, []).append(video)

        self._submit(
            f"save video '{title}'",
            partial(
                self._insert_one,
                "practice_videos",
                practice_video_to_row(video, self.user_id),
            ),
            partial(self._reconcile_video, video.id),
        )
        return video

    def _reconcile_video(self, temp_id: str, row: Optional[dict[str, Any]]) -> None:
        if row is None:
            return
        server = practice_video_from_row(row)
        self.practice_videos = {
            song_id: [
                replace(server, song_id=song_id) if v.id == temp_id else v
                for v in videos
            ]
            for song_id, videos in self.practice_videos.items()
        }
