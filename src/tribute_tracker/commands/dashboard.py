"""
Dashboard command: the overview shown when the app is opened.
"""

import argparse

from rich.table import Table

from tribute_tracker.context import AppContext
from tribute_tracker.core.console import get_console
from tribute_tracker.domain import stats
from tribute_tracker.helpers import progress_bar


def handle_dashboard_command(ctx: AppContext, args: argparse.Namespace) -> int:
    """Show streak, overall mastery, songs needing attention and project progress."""
    store = ctx.store
    console = get_console()

    streak = stats.day_streak(store.scheduled_songs)
    mastery = stats.library_completion(store.songs)
    console.print(
        f"[bold]Day streak:[/bold] {streak}    "
        f"[bold]Mastery:[/bold] {mastery}%    "
        f"[bold]Songs:[/bold] {len(store.songs)}    "
        f"[bold]Practice:[/bold] {stats.practice_minutes(store.practice_sessions)} min"
    )

    activity = stats.week_activity(store.scheduled_songs)
    console.print(f"[dim]Last 7 days:[/dim] {' '.join(str(n) for n in activity)}")
    console.print()

    attention = stats.needs_attention(
        store.songs, days=ctx.config.ui.attention_days
    )
    if attention:
        table = Table(title="Needs attention")
        table.add_column("Song")
        table.add_column("Status")
        table.add_column("Mastery", justify="right")
        for song in attention:
            table.add_row(song.title, song.status.value, f"{stats.song_mastery(song)}%")
        console.print(table)
    else:
        console.print("Nothing needs urgent attention. Great job!", style="green")

    if store.projects:
        table = Table(title="Projects")
        table.add_column("Project")
        table.add_column("Band")
        table.add_column("Progress")
        table.add_column("Ready", justify="right")
        for project in store.projects:
            percent = stats.project_completion(project.id, store.songs)
            completed = stats.project_completed_count(project.id, store.songs)
            total = stats.project_song_count(project.id, store.songs)
            table.add_row(
                project.name,
                project.band_name,
                f"{progress_bar(percent)} {percent}%",
                f"{completed} of {total}",
            )
        console.print(table)

    todays = store.todays_schedule
    if todays:
        console.print(f"[bold]Today:[/bold] {len(todays)} songs scheduled")
    return 0
