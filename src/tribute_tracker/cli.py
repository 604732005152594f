"""
Tribute Tracker CLI - Entry point

Parses the command line, loads configuration, starts the app context and
dispatches to a command handler. Running without a subcommand shows the
dashboard.
"""

import argparse
import asyncio
import inspect
import sys
from typing import Callable, Optional

from loguru import logger

from tribute_tracker.commands import auth as auth_commands
from tribute_tracker.commands import dashboard, practice, projects, schedule, songs, tones
from tribute_tracker.context import AppContext
from tribute_tracker.core.config import Config, load_config
from tribute_tracker.core.console import configure_console
from tribute_tracker.core.output import set_quiet, setup_from_config
from tribute_tracker.domain.models import Difficulty, SongStatus
from tribute_tracker.helpers import show_data_error

_AMP_HELP = "Amp knob, usually 0-10"


def _add_date_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--date', help='Day as YYYY-MM-DD (default: today)')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='tribute-tracker',
        description="Tribute Tracker - Practice tracking for tribute band musicians",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument('--quiet', action='store_true', help='Only log, do not print')
    parser.set_defaults(handler=dashboard.handle_dashboard_command)

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    dash_parser = subparsers.add_parser('dashboard', help='Show practice overview')
    dash_parser.set_defaults(handler=dashboard.handle_dashboard_command)

    # Projects
    projects_parser = subparsers.add_parser('projects', help='Manage band projects')
    projects_sub = projects_parser.add_subparsers(dest='action', required=True)
    p = projects_sub.add_parser('list', help='List projects')
    p.set_defaults(handler=projects.handle_projects_list_command)
    p = projects_sub.add_parser('add', help='Create a project')
    p.add_argument('name', help='Project name')
    p.add_argument('--band', help='Band being covered')
    p.add_argument('--description', help='Free-form description')
    p.set_defaults(handler=projects.handle_projects_add_command)
    p = projects_sub.add_parser('delete', help='Delete a project and its songs')
    p.add_argument('project', help='Project id or name')
    p.set_defaults(handler=projects.handle_projects_delete_command)

    # Songs
    songs_parser = subparsers.add_parser('songs', help='Manage songs')
    songs_sub = songs_parser.add_subparsers(dest='action', required=True)
    p = songs_sub.add_parser('list', help='List songs')
    p.add_argument('--project', help='Only songs in this project')
    p.set_defaults(handler=songs.handle_songs_list_command)
    p = songs_sub.add_parser('add', help='Add a song to a project')
    p.add_argument('project', help='Project id or name')
    p.add_argument('title', help='Song title')
    p.add_argument('--artist')
    p.add_argument('--album')
    p.add_argument('--key', help='Musical key, e.g. "Bm"')
    p.add_argument('--bpm', type=int)
    p.add_argument(
        '--difficulty',
        default=Difficulty.BEGINNER.value,
        help=f"One of: {', '.join(d.value for d in Difficulty)}"
    )
    p.add_argument(
        '--status',
        default=SongStatus.NOT_STARTED.value,
        help=f"One of: {', '.join(s.value for s in SongStatus)}"
    )
    p.add_argument(
        '--section',
        action='append',
        help='Section as NAME or NAME:TYPE, repeatable (e.g. "Second solo:Solo")'
    )
    p.add_argument('--tone', help='Tone preset id or name')
    p.add_argument('--tab-url', dest='tab_url')
    p.add_argument('--backing-track-url', dest='backing_track_url')
    p.add_argument('--reference-url', dest='reference_url')
    p.set_defaults(handler=songs.handle_songs_add_command)
    p = songs_sub.add_parser('show', help='Show a song with its sections')
    p.add_argument('song', help='Song id or title')
    p.set_defaults(handler=songs.handle_songs_show_command)
    p = songs_sub.add_parser('status', help='Set a song status')
    p.add_argument('song', help='Song id or title')
    p.add_argument('status', help=f"One of: {', '.join(s.value for s in SongStatus)}")
    p.set_defaults(handler=songs.handle_songs_status_command)
    p = songs_sub.add_parser('progress', help="Set a section's progress")
    p.add_argument('song', help='Song id or title')
    p.add_argument('section', help='Section id or name')
    p.add_argument('value', type=int, help='Progress 0-100')
    p.set_defaults(handler=songs.handle_songs_progress_command)
    p = songs_sub.add_parser('tone', help='Link a tone preset to a song')
    p.add_argument('song', help='Song id or title')
    p.add_argument('preset', help='Tone preset id or name, or "none" to unlink')
    p.set_defaults(handler=songs.handle_songs_tone_command)
    p = songs_sub.add_parser('delete', help='Delete a song')
    p.add_argument('song', help='Song id or title')
    p.set_defaults(handler=songs.handle_songs_delete_command)

    # Schedule
    schedule_parser = subparsers.add_parser('schedule', help='Plan daily practice')
    schedule_sub = schedule_parser.add_subparsers(dest='action', required=True)
    p = schedule_sub.add_parser('show', help="Show a day's practice list")
    _add_date_option(p)
    p.add_argument('--week', action='store_true', help='Show seven days from --date')
    p.set_defaults(handler=schedule.handle_schedule_show_command)
    p = schedule_sub.add_parser('add', help='Schedule a song')
    p.add_argument('song', help='Song id or title')
    _add_date_option(p)
    p.set_defaults(handler=schedule.handle_schedule_add_command)
    p = schedule_sub.add_parser('done', help='Mark a scheduled song practiced')
    p.add_argument('song', help='Song id or title')
    p.add_argument('--notes')
    p.add_argument('--undo', action='store_true', help='Mark as not done')
    _add_date_option(p)
    p.set_defaults(handler=schedule.handle_schedule_done_command)
    p = schedule_sub.add_parser('remove', help='Unschedule a song')
    p.add_argument('song', help='Song id or title')
    _add_date_option(p)
    p.set_defaults(handler=schedule.handle_schedule_remove_command)

    # Tone presets
    tones_parser = subparsers.add_parser('tones', help='Manage tone presets')
    tones_sub = tones_parser.add_subparsers(dest='action', required=True)
    p = tones_sub.add_parser('list', help='List tone presets')
    p.add_argument('--tag', help='Only presets with this style tag')
    p.set_defaults(handler=tones.handle_tones_list_command)
    p = tones_sub.add_parser('add', help='Save a tone preset')
    p.add_argument('name')
    p.add_argument('--description')
    p.add_argument('--guitar', help='Guitar model')
    p.add_argument('--pickup', help='Pickup position')
    for knob in tones.AMP_KNOBS:
        p.add_argument(f'--{knob}', type=int, default=0, help=_AMP_HELP)
    p.add_argument(
        '--effect',
        action='append',
        help='Pedal as NAME, NAME:TYPE or NAME:TYPE:off; repeatable'
    )
    p.add_argument('--tag', action='append', help='Style tag, repeatable')
    p.set_defaults(handler=tones.handle_tones_add_command)
    p = tones_sub.add_parser('delete', help='Delete a tone preset')
    p.add_argument('preset', help='Preset id or name')
    p.set_defaults(handler=tones.handle_tones_delete_command)

    # Practice log
    practice_parser = subparsers.add_parser('practice', help='Log practice sessions')
    practice_sub = practice_parser.add_subparsers(dest='action', required=True)
    p = practice_sub.add_parser('log', help='Log minutes practiced on a song')
    p.add_argument('song', help='Song id or title')
    p.add_argument('minutes', type=int)
    p.add_argument('--recording', help='Video or audio file to upload')
    p.add_argument('--title', help='Title for the uploaded recording')
    p.set_defaults(handler=practice.handle_practice_log_command)
    p = practice_sub.add_parser('videos', help='List practice videos')
    p.add_argument('song', nargs='?', help='Only videos for this song')
    p.set_defaults(handler=practice.handle_practice_videos_command)

    # Account
    p = subparsers.add_parser('login', help='Sign in to sync your data')
    p.add_argument('--email')
    p.set_defaults(handler=auth_commands.handle_login_command)
    p = subparsers.add_parser('signup', help='Create an account')
    p.add_argument('--email')
    p.add_argument('--name', help='Full name for your profile')
    p.set_defaults(handler=auth_commands.handle_signup_command)
    p = subparsers.add_parser('logout', help='Sign out')
    p.set_defaults(handler=auth_commands.handle_logout_command)

    return parser


async def run(
    config: Config, args: argparse.Namespace, ctx: Optional[AppContext] = None
) -> int:
    """Start the context, run one handler and wait for its writes to land."""
    ctx = ctx or AppContext.create(config)
    handler: Callable = args.handler
    await ctx.start()
    try:
        result = handler(ctx, args)
        if inspect.isawaitable(result):
            result = await result
    finally:
        await ctx.close()
        show_data_error(ctx.store)
    return result


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the tribute-tracker command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = load_config()
    setup_from_config(config.logging)
    configure_console(config.ui.use_colors)
    set_quiet(args.quiet)
    logger.debug(f"Command: {args.command} {getattr(args, 'action', '') or ''}")

    try:
        sys.exit(asyncio.run(run(config, args)))
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
