"""
Practice schedule command handlers.

Handles: schedule show, schedule add, schedule done, schedule remove
"""

import argparse
from datetime import date, timedelta
from typing import Optional

from rich.table import Table

from tribute_tracker.context import AppContext
from tribute_tracker.core.console import get_console
from tribute_tracker.core.output import log
from tribute_tracker.domain import stats
from tribute_tracker.domain.schedule import date_key
from tribute_tracker.helpers import resolve_song


def _day_from_args(args: argparse.Namespace) -> Optional[date]:
    """Parse --date (YYYY-MM-DD); None on a bad value after reporting it."""
    try:
        return date_key(getattr(args, "date", None))
    except ValueError:
        log(f"Invalid date '{args.date}', expected YYYY-MM-DD", level="error")
        return None


def handle_schedule_show_command(ctx: AppContext, args: argparse.Namespace) -> int:
    """Show one day's schedule, or the coming week with --week."""
    store = ctx.store
    start = _day_from_args(args)
    if start is None:
        return 1

    days = 7 if getattr(args, "week", False) else 1
    console = get_console()
    any_entries = False
    for offset in range(days):
        day = start + timedelta(days=offset)
        items = store.schedule_for(day)
        if not items and days > 1:
            continue
        any_entries = any_entries or bool(items)

        table = Table(title=f"Practice for {day:%A %Y-%m-%d}")
        table.add_column("", width=2)
        table.add_column("Song")
        table.add_column("Status")
        table.add_column("Notes")
        for item in items:
            song = store.get_song(item.song_id)
            if song is None:
                continue
            table.add_row(
                "✓" if item.completed else "·",
                song.title,
                song.status.value,
                item.notes,
            )
        if items:
            console.print(table)

    if not any_entries:
        log("Nothing scheduled. Add a song with: schedule add <song>")
    console.print(f"[bold]Day streak:[/bold] {stats.day_streak(store.scheduled_songs)}")
    return 0


def handle_schedule_add_command(ctx: AppContext, args: argparse.Namespace) -> int:
    song = resolve_song(ctx.store, args.song)
    if song is None:
        log(f"Song not found: {args.song}", level="error")
        return 1
    day = _day_from_args(args)
    if day is None:
        return 1

    item = ctx.store.add_to_schedule(song.id, day)
    if item is None:
        log(f"'{song.title}' is already scheduled for {day.isoformat()}", level="warning")
        return 0
    log(f"📅 Scheduled '{song.title}' for {day.isoformat()}", level="success")
    return 0


def handle_schedule_done_command(ctx: AppContext, args: argparse.Namespace) -> int:
    """Mark a scheduled entry completed (or undo with --undo), with optional notes."""
    song = resolve_song(ctx.store, args.song)
    if song is None:
        log(f"Song not found: {args.song}", level="error")
        return 1
    day = _day_from_args(args)
    if day is None:
        return 1

    changes: dict = {"completed": not getattr(args, "undo", False)}
    if args.notes is not None:
        changes["notes"] = args.notes

    item = ctx.store.update_schedule_item(song.id, changes, day)
    if item is None:
        log(f"'{song.title}' is not scheduled for {day.isoformat()}", level="error")
        return 1

    if item.completed:
        ctx.store.mark_played(song.id)
        log(f"✅ Practiced '{song.title}'", level="success")
    else:
        log(f"Marked '{song.title}' as not done")
    return 0


def handle_schedule_remove_command(ctx: AppContext, args: argparse.Namespace) -> int:
    song = resolve_song(ctx.store, args.song)
    if song is None:
        log(f"Song not found: {args.song}", level="error")
        return 1
    day = _day_from_args(args)
    if day is None:
        return 1

    if not ctx.store.remove_from_schedule(song.id, day):
        log(f"'{song.title}' is not scheduled for {day.isoformat()}", level="warning")
        return 0
    log(f"Removed '{song.title}' from {day.isoformat()}")
    return 0
