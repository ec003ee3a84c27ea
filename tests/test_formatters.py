"""Tests for TimeFormatter."""
from datetime import datetime, timedelta, timezone

import pytest

from ticktask.formatters import TimeFormatter


class TestSecondsToHms:
    @pytest.mark.parametrize("seconds, expected", [
        (0, "00:00:00"),
        (59, "00:00:59"),
        (1500, "00:25:00"),
        (3661, "01:01:01"),
        (90000, "25:00:00"),
    ])
    def test_formats(self, seconds, expected):
        assert TimeFormatter.seconds_to_hms(seconds) == expected

    def test_negative_clamps_to_zero(self):
        assert TimeFormatter.seconds_to_hms(-5) == "00:00:00"


class TestDatetimeToDisplay:
    def test_datetime(self):
        assert TimeFormatter.datetime_to_display(datetime(2026, 3, 5, 14, 30)) == "05/03/2026, 14:30:00"

    def test_iso_string(self):
        assert TimeFormatter.datetime_to_display("2026-03-05T14:30:15") == "05/03/2026, 14:30:15"

    def test_none_and_garbage_render_empty(self):
        assert TimeFormatter.datetime_to_display(None) == ""
        assert TimeFormatter.datetime_to_display("not a date") == ""


class TestRangeToDisplay:
    def test_both_ends(self):
        start = datetime(2026, 3, 5, 9, 0)
        end = datetime(2026, 3, 5, 10, 0)
        assert TimeFormatter.range_to_display(start, end) == "05/03/2026, 09:00:00 - 05/03/2026, 10:00:00"

    def test_missing_end_is_empty(self):
        assert TimeFormatter.range_to_display(datetime(2026, 3, 5, 9, 0), None) == ""
        assert TimeFormatter.range_to_display(None, datetime(2026, 3, 5, 9, 0)) == ""


class TestParseTimestamp:
    @pytest.mark.parametrize("raw", [
        "2026-03-05T14:30",
        "2026-03-05T14:30:00",
        "2026-03-05 14:30",
        " 2026-03-05 14:30:00 ",
    ])
    def test_accepted_formats(self, raw):
        assert TimeFormatter.parse_timestamp(raw) == datetime(2026, 3, 5, 14, 30)

    def test_iso_with_microseconds(self):
        parsed = TimeFormatter.parse_timestamp("2026-03-05T14:30:00.250000")
        assert parsed == datetime(2026, 3, 5, 14, 30, 0, 250000)

    @pytest.mark.parametrize("raw", [None, "", "   ", "yesterday", "2026-13-40T99:99"])
    def test_blank_or_invalid_is_none(self, raw):
        assert TimeFormatter.parse_timestamp(raw) is None


class TestToInputValue:
    def test_minutes_only(self):
        assert TimeFormatter.to_input_value(datetime(2026, 3, 5, 14, 30)) == "2026-03-05T14:30"

    def test_keeps_seconds(self):
        assert TimeFormatter.to_input_value(datetime(2026, 3, 5, 14, 30, 5)) == "2026-03-05T14:30:05"

    def test_none(self):
        assert TimeFormatter.to_input_value(None) == ""

    def test_parses_back(self):
        value = datetime(2026, 3, 5, 14, 30, 5)
        assert TimeFormatter.parse_timestamp(TimeFormatter.to_input_value(value)) == value


class TestTimezoneOffsets:
    def test_offset_becomes_naive_local(self):
        parsed = TimeFormatter.parse_timestamp("2026-03-02T09:00:00+00:00")
        expected = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
        assert parsed == expected
        assert parsed.tzinfo is None

    def test_zulu_suffix(self):
        parsed = TimeFormatter.parse_timestamp("2026-03-02T09:00:00Z")
        assert parsed.tzinfo is None
        assert parsed == datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)

    def test_minutes_with_offset(self):
        parsed = TimeFormatter.parse_timestamp("2026-03-02T09:00+02:00")
        offset = timezone(timedelta(hours=2))
        assert parsed == datetime(2026, 3, 2, 9, 0, tzinfo=offset).astimezone().replace(tzinfo=None)

    def test_comparable_with_local_now(self):
        parsed = TimeFormatter.parse_timestamp("2026-03-02T09:00:00+05:30")
        assert isinstance(parsed < datetime.now(), bool)


class TestParseTimeInput:
    @pytest.mark.parametrize("raw", [None, "", "  "])
    def test_blank_is_unset(self, raw):
        assert TimeFormatter.parse_time_input(raw) is None

    def test_valid(self):
        assert TimeFormatter.parse_time_input("2026-03-05T14:30") == datetime(2026, 3, 5, 14, 30)

    @pytest.mark.parametrize("raw", ["tomorrow", "2026-03-05 25:00", "14:30"])
    def test_garbage_raises(self, raw):
        with pytest.raises(ValueError):
            TimeFormatter.parse_time_input(raw)
