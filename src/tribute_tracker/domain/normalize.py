"""
Row <-> model normalization.

Remote rows are flat, snake_case and nullable everywhere; the models in
domain.models are typed and nested. Every *_from_row function is total: a
missing or malformed field becomes a documented default instead of raising,
so one bad row can never break a load.

Partial updates go through to_row_changes() with one of the *_FIELDS maps,
which only emits the columns for fields actually present in the change set.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Callable, Mapping, Optional, TypeVar

from .models import (
    AmpSettings,
    ComponentType,
    Difficulty,
    EffectPedal,
    PracticeSession,
    PracticeVideo,
    Project,
    ScheduleItem,
    Song,
    SongComponent,
    SongStatus,
    TonePreset,
    clamp_progress,
)

E = TypeVar("E", bound=Enum)

AMP_KNOBS = ("gain", "bass", "mid", "treble", "reverb", "volume")


# ---------------------------------------------------------------------------
# Scalar helpers
# ---------------------------------------------------------------------------


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with server timestamps."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO timestamp from the backend; None when absent or invalid."""
    if isinstance(value, datetime):
        return ensure_utc(value)
    if not value or not isinstance(value, str):
        return None
    try:
        return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        return None


def parse_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def _iso(value: Optional[datetime]) -> Optional[str]:
    return ensure_utc(value).isoformat() if value else None


def _enum(enum_cls: type[E], value: Any, default: E) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        return default


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _str(value: Any, default: str = "") -> str:
    return default if value is None else str(value)


def _identity(value: Any) -> Any:
    return value


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


def project_from_row(row: Mapping[str, Any]) -> Project:
    return Project(
        id=_str(row.get("id")),
        name=_str(row.get("name")),
        band_name=_str(row.get("band_name")),
        description=_str(row.get("description")),
        song_count=_int(row.get("song_count")),
        completed_count=_int(row.get("completed_count")),
    )


def project_to_row(project: Project, user_id: Optional[str] = None) -> dict[str, Any]:
    row: dict[str, Any] = {
        "name": project.name,
        "band_name": project.band_name,
        "description": project.description,
        "song_count": project.song_count,
        "completed_count": project.completed_count,
    }
    if user_id:
        row["user_id"] = user_id
    return row


# ---------------------------------------------------------------------------
# Songs and components
# ---------------------------------------------------------------------------


def component_from_row(row: Mapping[str, Any]) -> SongComponent:
    return SongComponent(
        id=_str(row.get("id")),
        name=_str(row.get("name")),
        type=_enum(ComponentType, row.get("type"), ComponentType.CUSTOM),
        progress=clamp_progress(_int(row.get("progress"))),
    )


def component_to_row(component: SongComponent, song_id: str) -> dict[str, Any]:
    return {
        "song_id": song_id,
        "name": component.name,
        "type": component.type.value,
        "progress": component.progress,
    }


def song_from_row(
    row: Mapping[str, Any],
    component_rows: Optional[list[Mapping[str, Any]]] = None,
) -> Song:
    """Build a Song; components come from the nested select or a separate list."""
    if component_rows is None:
        component_rows = row.get("song_components") or []
    return Song(
        id=_str(row.get("id")),
        project_id=_str(row.get("project_id")),
        title=_str(row.get("title")),
        artist=_str(row.get("artist")),
        album=row.get("album"),
        key=row.get("key"),
        bpm=_optional_int(row.get("tempo")),
        difficulty=_enum(Difficulty, row.get("difficulty"), Difficulty.BEGINNER),
        status=_enum(SongStatus, row.get("status"), SongStatus.NOT_STARTED),
        tab_url=row.get("tab_url"),
        tab_content=row.get("tab_content"),
        backing_track_url=row.get("backing_track_url"),
        reference_url=row.get("reference_url"),
        notes=row.get("notes"),
        duration=row.get("duration"),
        last_played=parse_datetime(row.get("last_played")),
        tone_preset_id=row.get("tone_preset_id") or None,
        components=[component_from_row(c) for c in component_rows],
    )


SONG_FIELDS: dict[str, tuple[str, Callable[[Any], Any]]] = {
    "project_id": ("project_id", _identity),
    "title": ("title", _identity),
    "artist": ("artist", _identity),
    "album": ("album", _identity),
    "key": ("key", _identity),
    "bpm": ("tempo", _identity),
    "difficulty": ("difficulty", _enum_value),
    "status": ("status", _enum_value),
    "tab_url": ("tab_url", _identity),
    "tab_content": ("tab_content", _identity),
    "backing_track_url": ("backing_track_url", _identity),
    "reference_url": ("reference_url", _identity),
    "notes": ("notes", _identity),
    "duration": ("duration", _identity),
    "last_played": ("last_played", _iso),
    "tone_preset_id": ("tone_preset_id", _identity),
}


def song_to_row(song: Song) -> dict[str, Any]:
    """Full insert payload for a song row (components are a separate table)."""
    return to_row_changes(
        SONG_FIELDS,
        {name: getattr(song, name) for name in SONG_FIELDS},
    )


# ---------------------------------------------------------------------------
# Tone presets
# ---------------------------------------------------------------------------


def amp_settings_from_value(value: Any) -> AmpSettings:
    """Absent or malformed amp settings become all-zero knobs."""
    if not isinstance(value, Mapping):
        return AmpSettings()
    return AmpSettings(**{knob: _int(value.get(knob)) for knob in AMP_KNOBS})


def amp_settings_to_value(settings: AmpSettings) -> dict[str, int]:
    return {knob: getattr(settings, knob) for knob in AMP_KNOBS}


def effect_from_value(value: Any, fallback_id: str) -> Optional[EffectPedal]:
    if not isinstance(value, Mapping):
        return None
    # Older rows stored the flag as isOn / is_on
    enabled = value.get("enabled", value.get("is_on", value.get("isOn", True)))
    return EffectPedal(
        id=_str(value.get("id"), fallback_id) or fallback_id,
        name=_str(value.get("name")),
        type=_str(value.get("type")),
        enabled=bool(enabled),
    )


def effects_from_value(value: Any, preset_id: str) -> list[EffectPedal]:
    if not isinstance(value, list):
        return []
    effects = []
    for index, item in enumerate(value):
        effect = effect_from_value(item, f"{preset_id}-fx{index}")
        if effect is not None:
            effects.append(effect)
    return effects


def effects_to_value(effects: list[EffectPedal]) -> list[dict[str, Any]]:
    return [
        {"id": e.id, "name": e.name, "type": e.type, "enabled": e.enabled}
        for e in effects
    ]


def tags_from_value(value: Any) -> list[str]:
    """Tags behave as a set; first occurrence wins the position."""
    if not isinstance(value, list):
        return []
    seen: dict[str, None] = {}
    for tag in value:
        if isinstance(tag, str) and tag.strip():
            seen.setdefault(tag.strip(), None)
    return list(seen)


def tone_preset_from_row(row: Mapping[str, Any]) -> TonePreset:
    preset_id = _str(row.get("id"))
    return TonePreset(
        id=preset_id,
        name=_str(row.get("name")),
        description=_str(row.get("description")),
        guitar_model=_str(row.get("guitar_model")),
        pickup_position=_str(row.get("pickup_position")),
        amp_settings=amp_settings_from_value(row.get("amp_settings")),
        effects=effects_from_value(row.get("effects_chain"), preset_id),
        tags=tags_from_value(row.get("style_tags")),
    )


TONE_PRESET_FIELDS: dict[str, tuple[str, Callable[[Any], Any]]] = {
    "name": ("name", _identity),
    "description": ("description", _identity),
    "guitar_model": ("guitar_model", _identity),
    "pickup_position": ("pickup_position", _identity),
    "amp_settings": ("amp_settings", amp_settings_to_value),
    "effects": ("effects_chain", effects_to_value),
    "tags": ("style_tags", tags_from_value),
}


def tone_preset_to_row(
    preset: TonePreset, user_id: Optional[str] = None
) -> dict[str, Any]:
    row = to_row_changes(
        TONE_PRESET_FIELDS,
        {name: getattr(preset, name) for name in TONE_PRESET_FIELDS},
    )
    if user_id:
        row["user_id"] = user_id
    return row


PROJECT_FIELDS: dict[str, tuple[str, Callable[[Any], Any]]] = {
    "name": ("name", _identity),
    "band_name": ("band_name", _identity),
    "description": ("description", _identity),
}


# ---------------------------------------------------------------------------
# Schedule, sessions, videos
# ---------------------------------------------------------------------------


def schedule_item_from_row(
    row: Mapping[str, Any],
) -> tuple[Optional[date], ScheduleItem]:
    """Returns (day, item); day is None when the row has no usable date."""
    item = ScheduleItem(
        song_id=_str(row.get("song_id")),
        completed=bool(row.get("completed") or False),
        notes=_str(row.get("notes")),
        id=_str(row.get("id")) or None,
        completed_at=parse_datetime(row.get("completed_at")),
    )
    return parse_date(row.get("scheduled_date")), item


def schedule_item_to_row(
    day: date, item: ScheduleItem, user_id: Optional[str] = None
) -> dict[str, Any]:
    row: dict[str, Any] = {
        "song_id": item.song_id,
        "scheduled_date": day.isoformat(),
        "completed": item.completed,
        "completed_at": _iso(item.completed_at),
        "notes": item.notes,
    }
    if user_id:
        row["user_id"] = user_id
    return row


SCHEDULE_FIELDS: dict[str, tuple[str, Callable[[Any], Any]]] = {
    "completed": ("completed", bool),
    "completed_at": ("completed_at", _iso),
    "notes": ("notes", _identity),
}


def practice_session_from_row(row: Mapping[str, Any]) -> PracticeSession:
    return PracticeSession(
        id=_str(row.get("id")),
        song_id=_str(row.get("song_id")),
        practiced_at=parse_datetime(row.get("practiced_at")) or utc_now(),
        duration_minutes=max(0, _int(row.get("duration_minutes"))),
        recording_url=row.get("recording_url"),
    )


def practice_session_to_row(
    session: PracticeSession, user_id: Optional[str] = None
) -> dict[str, Any]:
    row: dict[str, Any] = {
        "song_id": session.song_id,
        "practiced_at": _iso(session.practiced_at),
        "duration_minutes": session.duration_minutes,
        "recording_url": session.recording_url,
    }
    if user_id:
        row["user_id"] = user_id
    return row


def practice_video_from_row(row: Mapping[str, Any]) -> PracticeVideo:
    return PracticeVideo(
        id=_str(row.get("id")),
        song_id=_str(row.get("song_id")),
        title=_str(row.get("title")),
        url=_str(row.get("url")),
        recorded_at=parse_datetime(row.get("recorded_at")) or utc_now(),
        description=row.get("description"),
    )


def practice_video_to_row(
    video: PracticeVideo, user_id: Optional[str] = None
) -> dict[str, Any]:
    row: dict[str, Any] = {
        "song_id": video.song_id,
        "title": video.title,
        "url": video.url,
        "description": video.description,
        "recorded_at": _iso(video.recorded_at),
    }
    if user_id:
        row["user_id"] = user_id
    return row


# ---------------------------------------------------------------------------
# Partial updates
# ---------------------------------------------------------------------------


def to_row_changes(
    field_map: Mapping[str, tuple[str, Callable[[Any], Any]]],
    changes: Mapping[str, Any],
) -> dict[str, Any]:
    """Translate a sparse set of model fields into a sparse remote payload.

    Raises:
        ValueError: If a field has no remote column in field_map
    """
    payload: dict[str, Any] = {}
    for name, value in changes.items():
        if name not in field_map:
            raise ValueError(f"Unknown field: {name}")
        column, convert = field_map[name]
        payload[column] = convert(value)
    return payload
