"""
Practice statistics.

Derived views computed on every read from the canonical collections. Project
completion is always recomputed from song membership; the denormalized
counters on Project are never consulted here.
"""

from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from .models import PracticeSession, Schedule, Song, SongStatus
from .normalize import ensure_utc, utc_now

ATTENTION_DAYS = 7


def song_mastery(song: Song) -> int:
    """Rounded mean of component progress; 0 for a song without components."""
    if not song.components:
        return 0
    return round(sum(c.progress for c in song.components) / len(song.components))


def is_completed(song: Song) -> bool:
    return song.status == SongStatus.PERFORMANCE_READY


def project_songs(project_id: str, songs: Iterable[Song]) -> list[Song]:
    return [s for s in songs if s.project_id == project_id]


def project_song_count(project_id: str, songs: Iterable[Song]) -> int:
    return len(project_songs(project_id, songs))


def project_completed_count(project_id: str, songs: Iterable[Song]) -> int:
    return sum(1 for s in project_songs(project_id, songs) if is_completed(s))


def project_completion(project_id: str, songs: Iterable[Song]) -> int:
    """Percentage of the project's songs that are Performance Ready (0 if empty)."""
    members = project_songs(project_id, songs)
    if not members:
        return 0
    completed = sum(1 for s in members if is_completed(s))
    return round(completed / len(members) * 100)


def library_completion(songs: Iterable[Song]) -> int:
    """Percentage of all songs that are Performance Ready."""
    songs = list(songs)
    if not songs:
        return 0
    return round(sum(1 for s in songs if is_completed(s)) / len(songs) * 100)


def _has_completed_entry(schedule: Schedule, day: date) -> bool:
    return any(item.completed for item in schedule.get(day, []))


def day_streak(schedule: Schedule, today: Optional[date] = None) -> int:
    """Consecutive days ending today with at least one completed entry.

    Stops at the first day (today included) without a completed entry.
    """
    day = today or date.today()
    streak = 0
    while _has_completed_entry(schedule, day):
        streak += 1
        day -= timedelta(days=1)
    return streak


def week_activity(schedule: Schedule, today: Optional[date] = None) -> list[int]:
    """Completed entries per day for the last 7 days, oldest first."""
    day = today or date.today()
    return [
        sum(1 for item in schedule.get(day - timedelta(days=offset), []) if item.completed)
        for offset in range(6, -1, -1)
    ]


def needs_attention(
    songs: Iterable[Song],
    now: Optional[datetime] = None,
    days: int = ATTENTION_DAYS,
) -> list[Song]:
    """Songs in progress, or last played more than `days` days ago."""
    cutoff = ensure_utc(now or utc_now()) - timedelta(days=days)
    return [
        s
        for s in songs
        if s.status == SongStatus.IN_PROGRESS
        or (s.last_played is not None and ensure_utc(s.last_played) < cutoff)
    ]


def practice_minutes(
    sessions: dict[str, list[PracticeSession]], song_id: Optional[str] = None
) -> int:
    """Total practice time, for one song or across all of them."""
    if song_id is not None:
        return sum(s.duration_minutes for s in sessions.get(song_id, []))
    return sum(s.duration_minutes for group in sessions.values() for s in group)
