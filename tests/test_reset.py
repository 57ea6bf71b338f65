"""Tests for the weekly reset boundary."""

from datetime import datetime, timedelta, timezone

import pytest

from wow_guild_reset import (
    get_next_reset_time,
    get_reset_date_stamp,
    get_reset_time,
    parse_timestamp,
)

from helpers import utc


class TestGetResetTime:
    def test_wednesday_before_reset_hour_uses_previous_week(self):
        assert get_reset_time(utc(2024, 6, 5, 7, 0)) == utc(2024, 5, 29, 8, 0)

    def test_wednesday_at_reset_hour_is_that_day(self):
        assert get_reset_time(utc(2024, 6, 5, 8, 0)) == utc(2024, 6, 5, 8, 0)

    def test_tuesday_night_still_belongs_to_last_week(self):
        assert get_reset_time(utc(2024, 6, 4, 23, 59)) == utc(2024, 5, 29, 8, 0)

    @pytest.mark.parametrize("now", [
        utc(2024, 6, 6, 0, 30),   # Thursday
        utc(2024, 6, 8, 12, 0),   # Saturday
        utc(2024, 6, 9, 23, 0),   # Sunday
        utc(2024, 6, 10, 1, 0),   # Monday
    ])
    def test_later_in_the_week(self, now):
        assert get_reset_time(now) == utc(2024, 6, 5, 8, 0)

    def test_naive_datetime_is_treated_as_utc(self):
        assert get_reset_time(datetime(2024, 6, 5, 9, 0)) == utc(2024, 6, 5, 8, 0)

    def test_other_timezones_are_converted(self):
        # 09:30 in UTC+2 is 07:30 UTC, before the reset
        cest = timezone(timedelta(hours=2))
        assert get_reset_time(datetime(2024, 6, 5, 9, 30, tzinfo=cest)) == utc(2024, 5, 29, 8, 0)

    def test_boundary_is_never_in_the_future_or_older_than_a_week(self):
        start = utc(2024, 6, 1, 0, 0)
        for hours in range(0, 24 * 15, 7):
            now = start + timedelta(hours=hours, minutes=13)
            reset = get_reset_time(now)
            assert reset <= now
            assert now - reset < timedelta(days=7)
            assert reset.weekday() == 2
            assert (reset.hour, reset.minute, reset.second) == (8, 0, 0)

    def test_year_rollover(self):
        # 2025-01-01 was a Wednesday
        assert get_reset_time(utc(2025, 1, 1, 7, 59)) == utc(2024, 12, 25, 8, 0)


def test_next_reset_is_one_week_later():
    assert get_next_reset_time(utc(2024, 6, 7, 12, 0)) == utc(2024, 6, 12, 8, 0)


def test_date_stamp():
    assert get_reset_date_stamp(utc(2024, 6, 7, 12, 0)) == "2024-06-05"
    assert get_reset_date_stamp(utc(2024, 6, 5, 7, 0)) == "2024-05-29"


class TestParseTimestamp:
    def test_iso_with_z_suffix(self):
        assert parse_timestamp("2024-06-05T12:30:00.000Z") == utc(2024, 6, 5, 12, 30)

    def test_epoch_milliseconds(self):
        assert parse_timestamp(1717588800000) == utc(2024, 6, 5, 12, 0)

    def test_naive_iso_is_utc(self):
        assert parse_timestamp("2024-06-05T12:30:00") == utc(2024, 6, 5, 12, 30)
