"""
Practice schedule management.

A schedule maps a calendar day to an ordered list of ScheduleItems. The
helpers here are pure: they take a schedule and return a new one, leaving
persistence to the store. "Today's schedule" is just the list stored under
today's key.
"""

from dataclasses import replace
from datetime import date, datetime
from typing import Any, Optional, Union

from .models import Schedule, ScheduleItem
from .normalize import parse_date, utc_now

DateLike = Union[date, datetime, str, None]

SCHEDULE_ITEM_FIELDS = frozenset({"completed", "notes"})


def date_key(value: DateLike = None) -> date:
    """Normalize a date, datetime or ISO string to a day key (default: today).

    Raises:
        ValueError: If a string cannot be parsed as a date
    """
    if value is None:
        return date.today()
    if isinstance(value, str):
        parsed = parse_date(value)
        if parsed is None:
            raise ValueError(
                f"Invalid date: '{value}'. Expected 'YYYY-MM-DD' (e.g., '2024-05-01')"
            )
        return parsed
    if isinstance(value, datetime):
        return value.date()
    return value


def entries_for(schedule: Schedule, day: DateLike = None) -> list[ScheduleItem]:
    return list(schedule.get(date_key(day), []))


def find_entry(
    schedule: Schedule, song_id: str, day: DateLike = None
) -> Optional[ScheduleItem]:
    for item in schedule.get(date_key(day), []):
        if item.song_id == song_id:
            return item
    return None


def add_entry(
    schedule: Schedule, song_id: str, day: DateLike = None
) -> tuple[Schedule, Optional[ScheduleItem]]:
    """Append song_id to a day's list.

    Returns:
        (new schedule, created item) - item is None when the song was already
        scheduled for that day, in which case the schedule is unchanged.
    """
    key = date_key(day)
    if find_entry(schedule, song_id, key) is not None:
        return schedule, None
    item = ScheduleItem(song_id=song_id)
    updated = dict(schedule)
    updated[key] = [*schedule.get(key, []), item]
    return updated, item


def remove_entry(
    schedule: Schedule, song_id: str, day: DateLike = None
) -> tuple[Schedule, Optional[ScheduleItem]]:
    """Filter song_id out of a day's list; returns the removed item if any."""
    key = date_key(day)
    removed = find_entry(schedule, song_id, key)
    if removed is None:
        return schedule, None
    updated = dict(schedule)
    remaining = [item for item in schedule[key] if item.song_id != song_id]
    if remaining:
        updated[key] = remaining
    else:
        del updated[key]
    return updated, removed


def update_entry(
    schedule: Schedule,
    song_id: str,
    changes: dict[str, Any],
    day: DateLike = None,
) -> tuple[Schedule, Optional[ScheduleItem]]:
    """Merge completed/notes into an existing entry.

    Setting completed=True stamps completed_at; clearing it removes the stamp.

    Raises:
        ValueError: If changes contains fields other than completed/notes
    """
    unknown = set(changes) - SCHEDULE_ITEM_FIELDS
    if unknown:
        raise ValueError(f"Unknown schedule fields: {sorted(unknown)}")

    key = date_key(day)
    existing = find_entry(schedule, song_id, key)
    if existing is None:
        return schedule, None

    merged = dict(changes)
    if "completed" in merged:
        merged["completed"] = bool(merged["completed"])
        merged["completed_at"] = utc_now() if merged["completed"] else None
    item = replace(existing, **merged)

    updated = dict(schedule)
    updated[key] = [item if i.song_id == song_id else i for i in schedule[key]]
    return updated, item


def replace_entry(
    schedule: Schedule, day: date, song_id: str, item: ScheduleItem
) -> Schedule:
    """Swap in a reconciled item; no-op if the entry was removed meanwhile."""
    if find_entry(schedule, song_id, day) is None:
        return schedule
    updated = dict(schedule)
    updated[day] = [item if i.song_id == song_id else i for i in schedule[day]]
    return updated


def todays_schedule_ids(schedule: Schedule, today: Optional[date] = None) -> list[str]:
    return [item.song_id for item in schedule.get(today or date.today(), [])]
