"""
Song command handlers.

Handles: songs list, songs add, songs show, songs status, songs progress,
         songs tone, songs delete
"""

import argparse
from dataclasses import replace
from typing import Optional

from rich.table import Table

from tribute_tracker.context import AppContext
from tribute_tracker.core.console import get_console
from tribute_tracker.core.output import log
from tribute_tracker.domain import stats
from tribute_tracker.domain.models import (
    ComponentType,
    Difficulty,
    SongComponent,
    SongStatus,
    new_id,
)
from tribute_tracker.helpers import (
    progress_bar,
    resolve_project,
    resolve_song,
    resolve_tone_preset,
)


def parse_section(spec: str) -> SongComponent:
    """Parse "Name" or "Name:Type" (type is case-insensitive, default Custom).

    Raises:
        ValueError: If the type is not a known section type
    """
    name, _, type_name = spec.partition(":")
    name = name.strip()
    if not name:
        raise ValueError(f"Section name missing in '{spec}'")
    section_type = ComponentType.CUSTOM
    if type_name.strip():
        section_type = _parse_choice(ComponentType, type_name)
        if section_type is None:
            valid = ", ".join(t.value for t in ComponentType)
            raise ValueError(f"Invalid section type '{type_name}'. Valid types: {valid}")
    return SongComponent(id=new_id(), name=name, type=section_type)


def _parse_choice(enum_cls, value: str):
    lowered = value.strip().lower()
    for member in enum_cls:
        if member.value.lower() == lowered:
            return member
    return None


def handle_songs_list_command(ctx: AppContext, args: argparse.Namespace) -> int:
    store = ctx.store
    songs = store.songs
    if args.project:
        project = resolve_project(store, args.project)
        if project is None:
            log(f"Project not found: {args.project}", level="error")
            return 1
        songs = store.songs_for_project(project.id)

    if not songs:
        log("No songs yet. Add one with: songs add <project> <title>")
        return 0

    table = Table(title="Songs")
    table.add_column("Title")
    table.add_column("Artist")
    table.add_column("Difficulty")
    table.add_column("Status")
    table.add_column("Mastery", justify="right")
    for song in songs:
        table.add_row(
            song.title,
            song.artist,
            song.difficulty.value,
            song.status.value,
            f"{stats.song_mastery(song)}%",
        )
    get_console().print(table)
    return 0


def handle_songs_add_command(ctx: AppContext, args: argparse.Namespace) -> int:
    store = ctx.store
    title = (args.title or "").strip()
    if not title:
        log("Song title is required", level="error")
        return 1

    project = resolve_project(store, args.project)
    if project is None:
        log(f"Project not found: {args.project}", level="error")
        return 1

    difficulty = _parse_choice(Difficulty, args.difficulty)
    if difficulty is None:
        log(f"Invalid difficulty: {args.difficulty}", level="error")
        return 1

    status = _parse_choice(SongStatus, args.status)
    if status is None:
        log(f"Invalid status: {args.status}", level="error")
        return 1

    try:
        sections = [parse_section(spec) for spec in args.section or []]
    except ValueError as e:
        log(str(e), level="error")
        return 1

    tone_preset_id: Optional[str] = None
    if args.tone:
        preset = resolve_tone_preset(store, args.tone)
        if preset is None:
            log(f"Tone preset not found: {args.tone}", level="error")
            return 1
        tone_preset_id = preset.id

    song = store.add_song(
        project.id,
        title,
        components=sections,
        artist=args.artist or "",
        album=args.album,
        key=args.key,
        bpm=args.bpm,
        difficulty=difficulty,
        status=status,
        tab_url=args.tab_url,
        backing_track_url=args.backing_track_url,
        reference_url=args.reference_url,
        tone_preset_id=tone_preset_id,
    )
    log(
        f"✅ Added '{song.title}' to {project.name} with {len(sections)} sections",
        level="success",
    )
    return 0


def handle_songs_show_command(ctx: AppContext, args: argparse.Namespace) -> int:
    store = ctx.store
    song = resolve_song(store, args.song)
    if song is None:
        log(f"Song not found: {args.song}", level="error")
        return 1

    console = get_console()
    console.print(f"[bold]{song.title}[/bold] - {song.artist}")
    details = [
        f"Status: {song.status.value}",
        f"Difficulty: {song.difficulty.value}",
    ]
    if song.key:
        details.append(f"Key: {song.key}")
    if song.bpm:
        details.append(f"BPM: {song.bpm}")
    console.print("  ".join(details))

    if song.tone_preset_id:
        preset = store.get_tone_preset(song.tone_preset_id)
        if preset:
            console.print(f"Tone: {preset.name} ({preset.guitar_model}, {preset.pickup_position})")

    for label, url in (
        ("Tab", song.tab_url),
        ("Backing track", song.backing_track_url),
        ("Reference", song.reference_url),
    ):
        if url:
            console.print(f"{label}: {url}")

    if song.components:
        table = Table(title=f"Sections ({stats.song_mastery(song)}% mastered)")
        table.add_column("Section")
        table.add_column("Type")
        table.add_column("Progress")
        for component in song.components:
            table.add_row(
                component.name,
                component.type.value,
                f"{progress_bar(component.progress)} {component.progress}%",
            )
        console.print(table)

    minutes = stats.practice_minutes(store.practice_sessions, song.id)
    if minutes:
        console.print(f"Practiced {minutes} min over {len(store.sessions_for(song.id))} sessions")
    if song.notes:
        console.print(f"[dim]{song.notes}[/dim]")
    return 0


def handle_songs_status_command(ctx: AppContext, args: argparse.Namespace) -> int:
    song = resolve_song(ctx.store, args.song)
    if song is None:
        log(f"Song not found: {args.song}", level="error")
        return 1
    status = _parse_choice(SongStatus, args.status)
    if status is None:
        valid = ", ".join(s.value for s in SongStatus)
        log(f"Invalid status '{args.status}'. Valid statuses: {valid}", level="error")
        return 1

    ctx.store.update_song(song.id, {"status": status})
    log(f"'{song.title}' is now {status.value}", level="success")
    return 0


def handle_songs_progress_command(ctx: AppContext, args: argparse.Namespace) -> int:
    """Set one section's progress; persisted as a single section write."""
    song = resolve_song(ctx.store, args.song)
    if song is None:
        log(f"Song not found: {args.song}", level="error")
        return 1

    lowered = args.section.strip().lower()
    target = next(
        (c for c in song.components if c.id == args.section or c.name.lower() == lowered),
        None,
    )
    if target is None:
        log(f"Section not found in '{song.title}': {args.section}", level="error")
        return 1

    components = [
        replace(c, progress=args.value) if c.id == target.id else c
        for c in song.components
    ]
    updated = ctx.store.update_song(song.id, {"components": components})
    log(
        f"{target.name}: {min(100, max(0, args.value))}% "
        f"(song mastery {stats.song_mastery(updated)}%)",
        level="success",
    )
    return 0


def handle_songs_delete_command(ctx: AppContext, args: argparse.Namespace) -> int:
    song = resolve_song(ctx.store, args.song)
    if song is None:
        log(f"Song not found: {args.song}", level="error")
        return 1
    ctx.store.delete_song(song.id)
    log(f"🗑 Deleted '{song.title}'")
    return 0


def handle_songs_tone_command(ctx: AppContext, args: argparse.Namespace) -> int:
    """Link a tone preset to a song, or unlink it with "none"."""
    song = resolve_song(ctx.store, args.song)
    if song is None:
        log(f"Song not found: {args.song}", level="error")
        return 1

    if args.preset.strip().lower() == "none":
        ctx.store.update_song(song.id, {"tone_preset_id": None})
        log(f"'{song.title}' no longer has a tone preset")
        return 0

    preset = resolve_tone_preset(ctx.store, args.preset)
    if preset is None:
        log(f"Tone preset not found: {args.preset}", level="error")
        return 1
    ctx.store.update_song(song.id, {"tone_preset_id": preset.id})
    log(f"🎛 '{song.title}' now uses '{preset.name}'", level="success")
    return 0
