"""
Race timing helpers: countdown to the green flag, live window and display dates.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

# A race is treated as running for this long after its scheduled start
LIVE_WINDOW = timedelta(hours=4)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def get_countdown(scheduled: datetime, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Time left before a race starts.

    Args:
        scheduled (datetime): Scheduled start; naive values are read as UTC.
        now (datetime): Reference time, defaults to the current UTC time.

    Returns:
        Dict[str, Any]: `days`, `hours`, `minutes` until the start (all 0 once started),
        `is_live` during the first four hours from the start, `is_past` afterwards.
    """
    now = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    remaining = _as_utc(scheduled) - now

    if remaining <= timedelta(0):
        elapsed = -remaining
        return {
            "days": 0,
            "hours": 0,
            "minutes": 0,
            "is_live": elapsed < LIVE_WINDOW,
            "is_past": elapsed >= LIVE_WINDOW,
        }

    total_minutes = int(remaining.total_seconds() // 60)
    return {
        "days": total_minutes // (24 * 60),
        "hours": (total_minutes // 60) % 24,
        "minutes": total_minutes % 60,
        "is_live": False,
        "is_past": False,
    }


def race_status(scheduled: Optional[datetime], now: Optional[datetime] = None) -> str:
    """'Upcoming', 'Live' or 'Completed'; an unknown date counts as upcoming."""
    if scheduled is None:
        return "Upcoming"
    countdown = get_countdown(scheduled, now)
    if countdown["is_live"]:
        return "Live"
    if countdown["is_past"]:
        return "Completed"
    return "Upcoming"


def format_countdown(countdown: Dict[str, Any]) -> str:
    if countdown["is_live"]:
        return "LIVE NOW"
    if countdown["is_past"]:
        return "Finished"
    return f"{countdown['days']}d {countdown['hours']}h {countdown['minutes']}m"


def format_race_date(scheduled: datetime) -> str:
    # e.g. "Sunday, Feb 15"
    moment = _as_utc(scheduled)
    return f"{moment.strftime('%A, %b')} {moment.day}"


def format_race_time(scheduled: datetime) -> str:
    # e.g. "7:30 PM UTC"
    moment = _as_utc(scheduled)
    return f"{moment.hour % 12 or 12}:{moment.minute:02d} {'AM' if moment.hour < 12 else 'PM'} UTC"
