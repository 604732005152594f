"""Tests for argument parsing and the command runner."""

from unittest.mock import patch

import pytest

from tribute_tracker import cli
from tribute_tracker.commands import dashboard, schedule, songs
from tribute_tracker.context import AppContext
from tribute_tracker.core.config import Config


def test_no_subcommand_shows_dashboard() -> None:
    args = cli.build_parser().parse_args([])
    assert args.handler is dashboard.handle_dashboard_command


def test_subcommands_route_to_handlers() -> None:
    parser = cli.build_parser()

    assert parser.parse_args(["songs", "list"]).handler is songs.handle_songs_list_command
    args = parser.parse_args(["schedule", "done", "Time", "--undo"])
    assert args.handler is schedule.handle_schedule_done_command
    assert args.undo is True


def test_subcommand_action_is_required() -> None:
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["songs"])


@pytest.mark.anyio
async def test_run_loads_demo_data_without_remote() -> None:
    ctx = AppContext.create(Config())
    args = cli.build_parser().parse_args(["songs", "status", "Time", "Ready for Review"])

    assert await cli.run(Config(), args, ctx=ctx) == 0
    assert ctx.store.get_song("s2").status.value == "Ready for Review"


@pytest.mark.anyio
async def test_run_awaits_async_handlers() -> None:
    args = cli.build_parser().parse_args(["logout"])
    # Demo mode has no remote, so logout reports an error
    assert await cli.run(Config(), args) == 1


def test_main_exits_with_handler_result() -> None:
    with patch.object(cli, "load_config", return_value=Config()), \
         patch.object(cli, "setup_from_config"):
        with pytest.raises(SystemExit) as exc:
            cli.main(["--quiet", "projects", "list"])

    assert exc.value.code == 0
