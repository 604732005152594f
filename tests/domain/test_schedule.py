"""Tests for the pure schedule helpers."""

from datetime import date, datetime

import pytest

from tribute_tracker.domain import schedule as schedule_ops
from tribute_tracker.domain.models import ScheduleItem

DAY = date(2024, 5, 1)


class TestDateKey:
    def test_accepts_dates_datetimes_and_strings(self) -> None:
        assert schedule_ops.date_key(DAY) == DAY
        assert schedule_ops.date_key(datetime(2024, 5, 1, 23, 59)) == DAY
        assert schedule_ops.date_key("2024-05-01") == DAY

    def test_defaults_to_today(self) -> None:
        assert schedule_ops.date_key() == date.today()

    def test_rejects_garbage(self) -> None:
        with pytest.raises(ValueError, match="Invalid date"):
            schedule_ops.date_key("next tuesday")


def test_add_entry_is_idempotent_per_day() -> None:
    schedule, first = schedule_ops.add_entry({}, "s1", DAY)
    again, second = schedule_ops.add_entry(schedule, "s1", DAY)
    other_day, third = schedule_ops.add_entry(schedule, "s1", "2024-05-02")

    assert first == ScheduleItem(song_id="s1")
    assert second is None
    assert again is schedule
    assert third is not None
    assert len(other_day) == 2


def test_add_entry_does_not_mutate_input() -> None:
    original = {DAY: [ScheduleItem(song_id="s1")]}
    updated, _ = schedule_ops.add_entry(original, "s2", DAY)

    assert [i.song_id for i in original[DAY]] == ["s1"]
    assert [i.song_id for i in updated[DAY]] == ["s1", "s2"]


def test_remove_entry_drops_empty_day() -> None:
    schedule = {DAY: [ScheduleItem(song_id="s1")]}
    updated, removed = schedule_ops.remove_entry(schedule, "s1", DAY)

    assert removed == ScheduleItem(song_id="s1")
    assert updated == {}


class TestUpdateEntry:
    def test_completing_stamps_and_clearing_unstamps(self) -> None:
        schedule = {DAY: [ScheduleItem(song_id="s1")]}

        schedule, item = schedule_ops.update_entry(schedule, "s1", {"completed": True}, DAY)
        assert item.completed is True
        assert item.completed_at is not None

        schedule, item = schedule_ops.update_entry(schedule, "s1", {"completed": False}, DAY)
        assert item.completed is False
        assert item.completed_at is None

    def test_notes_only(self) -> None:
        schedule = {DAY: [ScheduleItem(song_id="s1")]}
        _, item = schedule_ops.update_entry(schedule, "s1", {"notes": "slow it down"}, DAY)

        assert item.notes == "slow it down"
        assert item.completed_at is None

    def test_missing_entry_returns_none(self) -> None:
        schedule, item = schedule_ops.update_entry({}, "s1", {"completed": True}, DAY)
        assert item is None
        assert schedule == {}

    def test_unknown_fields_rejected(self) -> None:
        with pytest.raises(ValueError):
            schedule_ops.update_entry({}, "s1", {"song_id": "s2"}, DAY)


def test_todays_schedule_ids_are_todays_list() -> None:
    schedule = {
        DAY: [ScheduleItem(song_id="s2"), ScheduleItem(song_id="s1")],
        date(2024, 5, 2): [ScheduleItem(song_id="s3")],
    }
    assert schedule_ops.todays_schedule_ids(schedule, DAY) == ["s2", "s1"]
    assert schedule_ops.todays_schedule_ids(schedule, date(2024, 5, 3)) == []
