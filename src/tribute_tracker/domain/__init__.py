"""
Practice tracker domain module.

Projects, songs, tone presets, the practice schedule and practice logs, held
in an optimistic in-memory store that persists to Supabase in the background.
"""

from .auth import AuthSession
from .media import MediaHost, MediaUploadError
from .models import (
    AmpSettings,
    ComponentType,
    Difficulty,
    EffectPedal,
    PracticeSession,
    PracticeVideo,
    Project,
    Schedule,
    ScheduleItem,
    Song,
    SongComponent,
    SongStatus,
    TonePreset,
)
from .schedule import date_key, todays_schedule_ids
from .stats import (
    day_streak,
    library_completion,
    needs_attention,
    practice_minutes,
    project_completion,
    song_mastery,
    week_activity,
)
from .store import AppStore, StoreError

__all__ = [
    "AmpSettings",
    "AppStore",
    "AuthSession",
    "ComponentType",
    "Difficulty",
    "EffectPedal",
    "MediaHost",
    "MediaUploadError",
    "PracticeSession",
    "PracticeVideo",
    "Project",
    "Schedule",
    "ScheduleItem",
    "Song",
    "SongComponent",
    "SongStatus",
    "StoreError",
    "TonePreset",
    "date_key",
    "day_streak",
    "library_completion",
    "needs_attention",
    "practice_minutes",
    "project_completion",
    "song_mastery",
    "todays_schedule_ids",
    "week_activity",
]
