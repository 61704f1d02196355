"""Tests for cadence/timeutil.py."""

from datetime import datetime, timedelta, timezone

from cadence.timeutil import (
    format_clock,
    format_duration,
    format_relative_due,
    minutes_between,
    parse_timestamp,
    resolve_now,
    round_half_up,
    seconds_between,
    start_of_day,
)

T0 = datetime(2026, 2, 11, 9, 30, 15, tzinfo=timezone.utc)


def test_seconds_and_minutes_between():
    assert seconds_between(T0, T0 + timedelta(seconds=90.9)) == 90
    assert minutes_between(T0, T0 + timedelta(seconds=179)) == 2
    assert seconds_between(T0, T0 - timedelta(minutes=5)) == 0
    assert minutes_between(T0, T0 - timedelta(minutes=5)) == 0


def test_differences_accept_iso_strings():
    assert minutes_between("2026-02-11T09:00:00Z", "2026-02-11T10:30:00+00:00") == 90


def test_start_of_day():
    local = datetime(2026, 2, 11, 9, 30).astimezone()
    assert start_of_day(local) == datetime(2026, 2, 11).astimezone()
    assert start_of_day(local).utcoffset() == local.utcoffset()


def test_start_of_day_uses_the_local_day(new_york):
    # 03:00Z is 22:00 the previous evening in New York
    midnight = start_of_day(datetime(2026, 2, 11, 3, 0, tzinfo=timezone.utc))
    assert midnight == datetime(2026, 2, 10, 5, 0, tzinfo=timezone.utc)


def test_start_of_day_across_dst_change(new_york):
    edt = timezone(timedelta(hours=-4))
    midnight = start_of_day(datetime(2026, 3, 8, 12, 0, tzinfo=edt))
    assert midnight == datetime(2026, 3, 8, 5, 0, tzinfo=timezone.utc)
    assert midnight.utcoffset() == timedelta(hours=-5)


def test_resolve_now_truncates_microseconds():
    assert resolve_now(T0.replace(microsecond=999)) == T0
    assert resolve_now().microsecond == 0


def test_parse_timestamp_zulu():
    assert parse_timestamp("2026-02-11T09:30:15Z") == T0


def test_round_half_up():
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(-0.5) == 0
    assert round_half_up(66.4) == 66


def test_format_duration_tiers():
    assert format_duration(0) == "0s"
    assert format_duration(42) == "42s"
    assert format_duration(330) == "5m 30s"
    assert format_duration(3600) == "1h 0m"
    assert format_duration(3 * 3600 + 25 * 60 + 9) == "3h 25m"
    assert format_duration(-10) == "0s"


def test_format_relative_due():
    assert format_relative_due(T0 + timedelta(seconds=20), T0) == "now"
    assert format_relative_due(T0 - timedelta(seconds=20), T0) == "now"
    assert format_relative_due(T0 + timedelta(minutes=25), T0) == "in 25m"
    assert format_relative_due(T0 + timedelta(hours=1, minutes=5), T0) == "in 1h 5m"
    assert format_relative_due(T0 - timedelta(minutes=20), T0) == "20m overdue"
    assert format_relative_due(T0 - timedelta(hours=2), T0) == "2h 0m overdue"


def test_format_clock():
    assert format_clock(datetime(2026, 2, 11, 9, 30).astimezone()) == "09:30"


def test_format_clock_converts_to_local(new_york):
    assert format_clock(T0) == "04:30"
