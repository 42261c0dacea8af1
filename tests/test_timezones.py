"""
Tests for venue time zone helpers
"""
import pytest
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from utils.errors import ValidationError
from utils.timezones import (
    parse_event_date,
    start_at_for_local_time,
    to_utc_iso,
    today_in_time_zone,
    utc_offset_at,
)


class TestStartAt:
    """7pm local start time in UTC"""

    def test_winter_date_uses_standard_time(self):
        start = start_at_for_local_time(date(2025, 12, 22), "America/Denver", 19)
        assert start == datetime(2025, 12, 23, 2, 0, tzinfo=timezone.utc)

    def test_summer_date_uses_daylight_time(self):
        start = start_at_for_local_time(date(2025, 7, 4), "America/Denver", 19)
        assert start == datetime(2025, 7, 5, 1, 0, tzinfo=timezone.utc)

    def test_spring_forward_day(self):
        # Clocks jump at 2am on 2025-03-09; the evening is already on MDT
        start = start_at_for_local_time(date(2025, 3, 9), "America/Denver", 19)
        assert start == datetime(2025, 3, 10, 1, 0, tzinfo=timezone.utc)

    def test_fall_back_day(self):
        start = start_at_for_local_time(date(2025, 11, 2), "America/Denver", 19)
        assert start == datetime(2025, 11, 3, 2, 0, tzinfo=timezone.utc)

    def test_second_pass_corrects_guess_across_transition(self):
        # 03:00 local on spring-forward morning is MDT (09:00Z). The first
        # offset guess is read before the jump (MST) and lands an hour late.
        start = start_at_for_local_time(date(2025, 3, 9), "America/Denver", 3)
        assert start == datetime(2025, 3, 9, 9, 0, tzinfo=timezone.utc)

    def test_hour_before_spring_forward_stays_standard(self):
        start = start_at_for_local_time(date(2025, 3, 9), "America/Denver", 1)
        assert start == datetime(2025, 3, 9, 8, 0, tzinfo=timezone.utc)

    def test_round_trips_to_local_wall_clock(self):
        for tz in ("America/New_York", "Europe/London", "Australia/Sydney", "UTC"):
            start = start_at_for_local_time(date(2025, 10, 5), tz, 19)
            local = start.astimezone(ZoneInfo(tz))
            assert (local.date(), local.hour, local.minute) == (date(2025, 10, 5), 19, 0)

    def test_offset_at(self):
        instant = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)
        assert utc_offset_at(instant, "America/Denver") == timedelta(hours=-7)


class TestCalendar:
    def test_today_follows_venue_zone(self):
        # 03:00 UTC on the 23rd is still the evening of the 22nd in Denver
        now = datetime(2025, 12, 23, 3, 0, tzinfo=timezone.utc)
        assert today_in_time_zone("America/Denver", now) == date(2025, 12, 22)
        assert today_in_time_zone("UTC", now) == date(2025, 12, 23)

    def test_naive_now_is_treated_as_utc(self):
        assert today_in_time_zone("America/Denver", datetime(2025, 12, 23, 3, 0)) == date(2025, 12, 22)

    @pytest.mark.parametrize("value", ["2025-1-5", "22-12-2025", "2025-02-30", "", "today"])
    def test_rejects_bad_dates(self, value):
        with pytest.raises(ValidationError):
            parse_event_date(value)

    def test_unknown_zone_is_validation_error(self):
        with pytest.raises(ValidationError):
            today_in_time_zone("Mars/Olympus_Mons")

    def test_iso_output_carries_offset(self):
        assert to_utc_iso(datetime(2025, 12, 23, 2, 0)) == "2025-12-23T02:00:00+00:00"
        assert to_utc_iso(None) is None
