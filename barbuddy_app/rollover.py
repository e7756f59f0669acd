"""Daily 4 AM rollover for the running drink count.

The "current" total covers drinks logged at or after the most recent 04:00
local boundary. Drinks before it are history, never deleted by the rollover.
Times are naive local datetimes.
"""

from datetime import date, datetime, time, timedelta

RESET_HOUR = 4


def last_reset(now: datetime) -> datetime:
    """Most recent 04:00 at or before ``now``."""
    boundary = datetime.combine(now.date(), time(hour=RESET_HOUR))
    if now < boundary:
        boundary -= timedelta(days=1)
    return boundary


def next_reset(now: datetime) -> datetime:
    return last_reset(now) + timedelta(days=1)


def time_until_reset(now: datetime) -> timedelta:
    """Always in (0, 24h]."""
    return next_reset(now) - now


def is_current(timestamp: datetime, now: datetime) -> bool:
    return timestamp >= last_reset(now)


def drinking_day(timestamp: datetime) -> date:
    """Calendar day a drink is attributed to; 01:30 belongs to the night before."""
    return last_reset(timestamp).date()


def format_duration(delta: timedelta) -> str:
    seconds = max(0, int(delta.total_seconds()))
    hours, rem = divmod(seconds, 3600)
    minutes = rem // 60
    if hours > 0:
        return f"{hours} hours and {minutes} minutes"
    return f"{minutes} minutes"
