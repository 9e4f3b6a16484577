"""Next-occurrence computation for scheduled notification types."""

import datetime as dt
from typing import Optional

import pytz
from croniter import croniter

from modules.notifications.domain.models import ScheduledSchedule


def _parse_time(value: str) -> dt.time:
    hours, minutes = value.split(":")
    return dt.time(int(hours), int(minutes))


def next_occurrence(
    schedule: ScheduledSchedule,
    after: dt.datetime,
    timezone_name: str = "UTC",
) -> Optional[dt.datetime]:
    """Return the first due occurrence strictly after ``after``.

    Times, days and dates are interpreted in ``timezone_name``; the result
    is timezone-aware UTC. Precedence: date > cron > days at time > daily
    at time.

    Args:
        schedule: Scheduled variant of a notification schedule.
        after: Reference instant (naive values are treated as UTC).
        timezone_name: pytz time zone name.

    Returns:
        The occurrence, or None when a one-off date is already past.
    """
    tz = pytz.timezone(timezone_name)
    if after.tzinfo is None:
        after = pytz.utc.localize(after)
    local_after = after.astimezone(tz)

    if schedule.date is not None and schedule.time is not None:
        candidate = tz.localize(
            dt.datetime.combine(schedule.date, _parse_time(schedule.time))
        )
        return candidate.astimezone(pytz.utc) if candidate > local_after else None

    if schedule.cron is not None:
        iterator = croniter(schedule.cron, local_after)
        return iterator.get_next(dt.datetime).astimezone(pytz.utc)

    at = _parse_time(schedule.time)
    allowed_days = {day.index for day in schedule.days}
    for offset in range(0, 8):
        day = local_after.date() + dt.timedelta(days=offset)
        if allowed_days and day.weekday() not in allowed_days:
            continue
        candidate = tz.localize(dt.datetime.combine(day, at))
        if candidate > local_after:
            return candidate.astimezone(pytz.utc)
    return None
