"""
Practice log command handlers.

Handles: practice log, practice videos
"""

import argparse
from pathlib import Path

from rich.table import Table

from tribute_tracker.context import AppContext
from tribute_tracker.core.console import get_console
from tribute_tracker.core.output import log
from tribute_tracker.helpers import resolve_song


def handle_practice_log_command(ctx: AppContext, args: argparse.Namespace) -> int:
    """Log minutes on a song, optionally uploading a recording of the session."""
    song = resolve_song(ctx.store, args.song)
    if song is None:
        log(f"Song not found: {args.song}", level="error")
        return 1
    if args.minutes <= 0:
        log("Minutes must be positive", level="error")
        return 1

    recording = None
    if args.recording:
        recording = Path(args.recording).expanduser()
        if not recording.is_file():
            log(f"Recording not found: {recording}", level="error")
            return 1

    ctx.store.add_practice_session(
        song.id, args.minutes, recording=recording, title=args.title
    )
    log(f"⏱ Logged {args.minutes} min on '{song.title}'", level="success")
    if recording is not None:
        log(f"Uploading {recording.name}...")
    return 0


def handle_practice_videos_command(ctx: AppContext, args: argparse.Namespace) -> int:
    store = ctx.store
    if args.song:
        song = resolve_song(store, args.song)
        if song is None:
            log(f"Song not found: {args.song}", level="error")
            return 1
        videos = store.videos_for(song.id)
    else:
        videos = [v for group in store.practice_videos.values() for v in group]

    if not videos:
        log("No practice videos yet. Attach one with: practice log <song> <minutes> --recording <file>")
        return 0

    table = Table(title="Practice videos")
    table.add_column("Recorded")
    table.add_column("Song")
    table.add_column("Title")
    table.add_column("URL", overflow="fold")
    for video in sorted(videos, key=lambda v: v.recorded_at, reverse=True):
        song = store.get_song(video.song_id)
        table.add_row(
            f"{video.recorded_at:%Y-%m-%d}",
            song.title if song else "?",
            video.title,
            video.url,
        )
    get_console().print(table)
    return 0
