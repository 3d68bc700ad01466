"""Tests for the day/hour history timeline."""

from datetime import datetime, timezone

import pytest

from dochistory.services.history_graph import compute_char_diffs, group_by_date, hour_label


def _entry(entry_id, created_at, char_count=0):
    return {"id": entry_id, "created_at": created_at, "char_count": char_count}


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


@pytest.mark.parametrize("hour, label", [
    (0, "12a"),
    (1, "1a"),
    (9, "9a"),
    (11, "11a"),
    (12, "12p"),
    (13, "1p"),
    (23, "11p"),
])
def test_hour_label(hour, label):
    assert hour_label(hour) == label


class TestGroupByDate:

    def test_empty(self):
        assert group_by_date([]) == []

    def test_winter_hour_uses_standard_time(self):
        days = group_by_date(compute_char_diffs([_entry(1, _utc(2025, 1, 15, 15, 0))]))
        assert days[0].date == "Wed Jan 15"
        assert days[0].hours[0].hour == 10
        assert days[0].hours[0].label == "10a"

    def test_summer_hour_uses_daylight_time(self):
        days = group_by_date(compute_char_diffs([_entry(1, _utc(2025, 7, 15, 15, 0))]))
        assert days[0].date == "Tue Jul 15"
        assert days[0].hours[0].label == "11a"

    def test_naive_timestamps_read_as_utc(self):
        days = group_by_date(compute_char_diffs([_entry(1, datetime(2025, 1, 15, 15, 0))]))
        assert days[0].hours[0].label == "10a"

    def test_days_newest_first_hours_and_entries_oldest_first(self):
        entries = [
            _entry(1, _utc(2025, 1, 15, 14, 10), 10),
            _entry(2, _utc(2025, 1, 15, 15, 0), 20),
            _entry(3, _utc(2025, 1, 15, 15, 20), 35),
            # Still Jan 15 in Toronto.
            _entry(4, _utc(2025, 1, 16, 3, 30), 40),
            _entry(5, _utc(2025, 1, 16, 5, 30), 38),
        ]
        days = group_by_date(compute_char_diffs(entries))

        assert [day.date for day in days] == ["Thu Jan 16", "Wed Jan 15"]
        assert [group.label for group in days[0].hours] == ["12a"]
        assert [group.label for group in days[1].hours] == ["9a", "10a", "10p"]

        ten_am = days[1].hours[1]
        assert [item.entry["id"] for item in ten_am.entries] == [2, 3]
        assert [item.char_diff for item in ten_am.entries] == [10, 15]
        assert days[0].hours[0].entries[0].char_diff == -2

    def test_other_timezone(self):
        days = group_by_date(compute_char_diffs([_entry(1, _utc(2025, 1, 16, 3, 30))]), tz="UTC")
        assert days[0].date == "Thu Jan 16"
        assert days[0].hours[0].label == "3a"
