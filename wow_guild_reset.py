"""
Weekly reset boundary arithmetic

Raid lockouts and weekly caps clear every Wednesday at 08:00 UTC. Every
function here takes "now" as an argument; none of them reads the clock.
"""

from datetime import datetime, timedelta, timezone
from typing import Union

RESET_WEEKDAY = 2  # Wednesday (Monday == 0)
RESET_HOUR = 8     # 08:00 UTC
ONE_WEEK = timedelta(days=7)


def to_utc(moment: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken to be UTC already."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def parse_timestamp(value: Union[str, int, float, datetime]) -> datetime:
    """Parse an API timestamp into an aware UTC datetime.

    Accepts ISO-8601 strings (with or without a trailing 'Z'), epoch
    milliseconds as WarcraftLogs reports them, or a datetime.
    """
    if isinstance(value, datetime):
        return to_utc(value)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    return to_utc(datetime.fromisoformat(text))


def get_reset_time(now: datetime) -> datetime:
    """Timestamp of the most recent weekly reset at or before `now`.

    On a Wednesday before 08:00 UTC the current week's reset has not
    happened yet, so the previous Wednesday is returned.
    """
    now = to_utc(now)
    days_since = (now.weekday() - RESET_WEEKDAY) % 7
    reset = now.replace(hour=RESET_HOUR, minute=0, second=0, microsecond=0) - timedelta(days=days_since)
    if reset > now:
        reset -= ONE_WEEK
    return reset


def get_next_reset_time(now: datetime) -> datetime:
    return get_reset_time(now) + ONE_WEEK


def get_reset_date_stamp(now: datetime) -> str:
    """ISO calendar date of the current reset, used to tag baselines."""
    return get_reset_time(now).date().isoformat()
