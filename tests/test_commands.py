"""Tests for the command handlers, run against the demo data set."""

from datetime import date

import pytest

from tribute_tracker.cli import build_parser
from tribute_tracker.context import AppContext
from tribute_tracker.core.config import Config
from tribute_tracker.domain import stats
from tribute_tracker.domain.models import ComponentType, SongStatus
from tribute_tracker.helpers import progress_bar, resolve_song, show_data_error


@pytest.fixture
def ctx() -> AppContext:
    context = AppContext.create(Config())
    context.store.load_demo()
    return context


def run(ctx: AppContext, *argv: str) -> int:
    args = build_parser().parse_args(list(argv))
    return args.handler(ctx, args)


class TestSongs:
    def test_add_with_sections(self, ctx: AppContext) -> None:
        rc = run(
            ctx, "songs", "add", "The Dark", "Echoes",
            "--artist", "Pink Floyd",
            "--section", "Intro:intro",
            "--section", "Second half",
            "--difficulty", "expert",
            "--tone", "Gilmour",
        )

        assert rc == 0
        song = resolve_song(ctx.store, "Echoes")
        assert song.project_id == "p1"
        assert [c.type for c in song.components] == [ComponentType.INTRO, ComponentType.CUSTOM]
        assert song.tone_preset_id == "t1"
        assert ctx.store.get_project("p1").song_count == 4

    def test_add_rejects_bad_section_type(self, ctx: AppContext) -> None:
        assert run(ctx, "songs", "add", "The Dark", "Echoes", "--section", "Solo:Shred") == 1
        assert resolve_song(ctx.store, "Echoes") is None

    def test_add_requires_title(self, ctx: AppContext) -> None:
        assert run(ctx, "songs", "add", "The Dark", "   ") == 1
        assert len(ctx.store.songs) == 3

    def test_add_unknown_project(self, ctx: AppContext) -> None:
        assert run(ctx, "songs", "add", "Wall Project", "Hey You") == 1

    def test_progress_updates_one_section(self, ctx: AppContext) -> None:
        assert run(ctx, "songs", "progress", "Comfortably", "solo 2 (outro)", "90") == 0

        song = ctx.store.get_song("s1")
        assert [c.progress for c in song.components] == [100, 100, 100, 75, 90]

    def test_progress_unknown_section(self, ctx: AppContext) -> None:
        assert run(ctx, "songs", "progress", "Time", "Outro", "50") == 1

    def test_status_is_case_insensitive(self, ctx: AppContext) -> None:
        assert run(ctx, "songs", "status", "Time", "performance ready") == 0
        assert ctx.store.get_song("s2").status == SongStatus.PERFORMANCE_READY
        assert ctx.store.get_project("p1").completed_count == 2

    def test_status_rejects_unknown(self, ctx: AppContext) -> None:
        assert run(ctx, "songs", "status", "Time", "Gig Ready") == 1

    def test_show_and_list(self, ctx: AppContext, capsys) -> None:
        assert run(ctx, "songs", "show", "Comfortably") == 0
        assert run(ctx, "songs", "list", "--project", "p1") == 0
        out = capsys.readouterr().out
        assert "Comfortably Numb" in out
        assert "Gilmour Lead" in out

    def test_add_with_initial_status(self, ctx: AppContext) -> None:
        assert run(ctx, "songs", "add", "The Dark", "Echoes", "--status", "needs work") == 0
        assert resolve_song(ctx.store, "Echoes").status is SongStatus.NEEDS_WORK

    def test_add_rejects_unknown_status(self, ctx: AppContext) -> None:
        assert run(ctx, "songs", "add", "The Dark", "Echoes", "--status", "Gig Ready") == 1
        assert resolve_song(ctx.store, "Echoes") is None

    def test_link_and_unlink_tone(self, ctx: AppContext) -> None:
        assert run(ctx, "songs", "tone", "Money", "Gilmour") == 0
        assert ctx.store.get_song("s3").tone_preset_id == "t1"

        assert run(ctx, "songs", "tone", "Money", "none") == 0
        assert ctx.store.get_song("s3").tone_preset_id is None

    def test_link_unknown_tone(self, ctx: AppContext) -> None:
        assert run(ctx, "songs", "tone", "Money", "Brown Sound") == 1
        assert ctx.store.get_song("s3").tone_preset_id == "t2"

    def test_delete(self, ctx: AppContext) -> None:
        assert run(ctx, "songs", "delete", "Money") == 0
        assert ctx.store.get_song("s3") is None
        assert "s3" not in ctx.store.todays_schedule_ids


class TestSchedule:
    def test_add_done_remove(self, ctx: AppContext) -> None:
        assert run(ctx, "schedule", "add", "Time", "--date", "2024-05-01") == 0
        assert run(ctx, "schedule", "add", "Time", "--date", "2024-05-01") == 0
        assert [i.song_id for i in ctx.store.schedule_for(date(2024, 5, 1))] == ["s2"]

        assert run(ctx, "schedule", "done", "Time", "--date", "2024-05-01", "--notes", "tight") == 0
        [item] = ctx.store.schedule_for(date(2024, 5, 1))
        assert item.completed is True
        assert item.notes == "tight"

        assert run(ctx, "schedule", "remove", "Time", "--date", "2024-05-01") == 0
        assert ctx.store.schedule_for(date(2024, 5, 1)) == []

    def test_done_today_extends_streak(self, ctx: AppContext) -> None:
        assert run(ctx, "schedule", "done", "Comfortably") == 0
        assert stats.day_streak(ctx.store.scheduled_songs) == 2

    def test_done_requires_entry(self, ctx: AppContext) -> None:
        assert run(ctx, "schedule", "done", "Time", "--date", "2024-05-01") == 1

    def test_bad_date(self, ctx: AppContext) -> None:
        assert run(ctx, "schedule", "add", "Time", "--date", "05/01/2024") == 1

    def test_show_week(self, ctx: AppContext, capsys) -> None:
        assert run(ctx, "schedule", "show", "--week") == 0
        assert "Money" in capsys.readouterr().out


class TestTones:
    def test_add_preset(self, ctx: AppContext) -> None:
        rc = run(
            ctx, "tones", "add", "Brown Sound",
            "--guitar", "Frankenstrat",
            "--pickup", "Bridge",
            "--gain", "9",
            "--effect", "Phaser:Modulation",
            "--effect", "Chorus:Modulation:off",
            "--tag", "Rock",
            "--tag", "Rock",
        )

        assert rc == 0
        preset = ctx.store.tone_presets[-1]
        assert preset.amp_settings.gain == 9
        assert preset.amp_settings.bass == 0
        assert [(e.name, e.enabled) for e in preset.effects] == [("Phaser", True), ("Chorus", False)]
        assert preset.tags == ["Rock"]

    def test_delete_unlinks(self, ctx: AppContext) -> None:
        assert run(ctx, "tones", "delete", "Funky") == 0
        assert ctx.store.get_song("s2").tone_preset_id is None

    def test_list(self, ctx: AppContext, capsys) -> None:
        assert run(ctx, "tones", "list") == 0
        assert "Funky" in capsys.readouterr().out

    def test_list_filters_by_tag(self, ctx: AppContext, capsys) -> None:
        assert run(ctx, "tones", "list", "--tag", "funk") == 0
        out = capsys.readouterr().out
        assert "Funky" in out
        assert "Gilmour" not in out

    def test_list_unknown_tag(self, ctx: AppContext, capsys) -> None:
        assert run(ctx, "tones", "list", "--tag", "Metal") == 0
        assert "Gilmour" not in capsys.readouterr().out


class TestPractice:
    def test_log_minutes(self, ctx: AppContext) -> None:
        before = ctx.store.get_song("s2").last_played
        assert run(ctx, "practice", "log", "Time", "30") == 0

        assert [s.duration_minutes for s in ctx.store.sessions_for("s2")] == [30]
        assert ctx.store.get_song("s2").last_played > before

    def test_log_rejects_missing_recording(self, ctx: AppContext, tmp_path) -> None:
        missing = tmp_path / "take.mp4"
        assert run(ctx, "practice", "log", "Time", "30", "--recording", str(missing)) == 1
        assert ctx.store.sessions_for("s2") == []

    def test_log_rejects_non_positive_minutes(self, ctx: AppContext) -> None:
        assert run(ctx, "practice", "log", "Time", "0") == 1

    def test_videos_empty(self, ctx: AppContext) -> None:
        assert run(ctx, "practice", "videos") == 0


class TestProjects:
    def test_add_and_delete(self, ctx: AppContext) -> None:
        assert run(ctx, "projects", "add", "Wall Tour", "--band", "Floyd Tribute") == 0
        assert run(ctx, "projects", "delete", "Wall") == 0
        assert [p.id for p in ctx.store.projects] == ["p1", "p2"]

    def test_add_requires_name(self, ctx: AppContext) -> None:
        assert run(ctx, "projects", "add", "") == 1


def test_dashboard(ctx: AppContext, capsys) -> None:
    assert run(ctx, "dashboard") == 0
    out = capsys.readouterr().out
    assert "Day streak" in out
    assert "Needs attention" in out


@pytest.mark.anyio
async def test_login_requires_remote(ctx: AppContext) -> None:
    args = build_parser().parse_args(["login", "--email", "gilmour@example.com"])
    assert await args.handler(ctx, args) == 1


def test_data_error_banner_is_shown_once(ctx: AppContext, capsys) -> None:
    ctx.store.data_error = "Failed to save song 'Time': timeout"
    show_data_error(ctx.store)

    assert "Failed to save song 'Time': timeout" in capsys.readouterr().out
    assert ctx.store.data_error is None


def test_progress_bar() -> None:
    assert progress_bar(0, width=4) == "░░░░"
    assert progress_bar(50, width=4) == "██░░"
    assert progress_bar(130, width=4) == "████"
