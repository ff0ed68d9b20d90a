"""Monthly schedule arithmetic for the background bill generator."""

from datetime import datetime, timedelta, timezone


def next_monthly_run(now: datetime, day: int, hour: int, minute: int) -> datetime:
    """Next UTC instant strictly after ``now`` matching day/hour/minute.

    ``day`` is capped at 28 by configuration, so every month has it.
    Naive datetimes are treated as UTC.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)

    candidate = now.replace(day=day, hour=hour, minute=minute, second=0, microsecond=0)
    if candidate > now:
        return candidate

    if now.month == 12:
        return candidate.replace(year=now.year + 1, month=1)
    return candidate.replace(month=now.month + 1)


def seconds_until(moment: datetime, now: datetime) -> float:
    """Non-negative delay in seconds from ``now`` to ``moment``."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return max((moment - now) / timedelta(seconds=1), 0.0)
