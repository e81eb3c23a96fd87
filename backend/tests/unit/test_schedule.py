import pytest
from datetime import datetime, timedelta, timezone
from trackodds.core.schedule import (
    get_countdown,
    race_status,
    format_countdown,
    format_race_date,
    format_race_time,
)

START = datetime(2026, 2, 15, 19, 30, tzinfo=timezone.utc)


def test_countdown_before_start():
    countdown = get_countdown(START, START - timedelta(days=2, hours=3, minutes=15, seconds=30))
    assert (countdown["days"], countdown["hours"], countdown["minutes"]) == (2, 3, 15)
    assert not countdown["is_live"]
    assert not countdown["is_past"]
    assert format_countdown(countdown) == "2d 3h 15m"


def test_countdown_at_green_flag_is_live():
    countdown = get_countdown(START, START)
    assert countdown["is_live"]
    assert not countdown["is_past"]
    assert countdown["days"] == countdown["hours"] == countdown["minutes"] == 0


@pytest.mark.parametrize("elapsed, live, past", [
    (timedelta(hours=3, minutes=59), True, False),
    (timedelta(hours=4), False, True),
    (timedelta(days=1), False, True),
])
def test_live_window_lasts_four_hours(elapsed, live, past):
    countdown = get_countdown(START, START + elapsed)
    assert countdown["is_live"] is live
    assert countdown["is_past"] is past


def test_naive_dates_are_utc():
    naive = START.replace(tzinfo=None)
    assert get_countdown(naive, START - timedelta(hours=1))["hours"] == 1


@pytest.mark.parametrize("now, expected", [
    (START - timedelta(minutes=1), "Upcoming"),
    (START, "Live"),
    (START + timedelta(hours=4), "Completed"),
])
def test_race_status(now, expected):
    assert race_status(START, now) == expected


def test_race_status_without_date():
    assert race_status(None, START) == "Upcoming"


def test_display_formats():
    assert format_race_date(START) == "Sunday, Feb 15"
    assert format_race_time(START) == "7:30 PM UTC"
    assert format_race_time(START.replace(hour=0, minute=5)) == "12:05 AM UTC"
    assert format_countdown({"is_live": True, "is_past": False}) == "LIVE NOW"
