from datetime import datetime, timedelta, timezone
from typing import Optional


def next_run_time(now: datetime, interval_minutes: int = 5) -> datetime:
    """
    Next wall-clock boundary strictly after `now`.

    Boundaries are the minutes divisible by `interval_minutes`
    (0, 5, 10, ... 55 for the default), with seconds zeroed.
    Rolls over hours and days; keeps the tzinfo of `now`.
    """
    floored = now.replace(
        minute=(now.minute // interval_minutes) * interval_minutes,
        second=0,
        microsecond=0,
    )
    return floored + timedelta(minutes=interval_minutes)


def seconds_until_next_run(now: datetime, interval_minutes: int = 5) -> float:
    return (next_run_time(now, interval_minutes) - now).total_seconds()


def format_ts(ts_ms: int, fmt: str = "%Y-%m-%d %H:%M", tz: Optional[timezone] = None) -> str:
    """Render an epoch-millisecond timestamp (local time unless `tz` is given)."""
    dt = datetime.fromtimestamp(int(ts_ms) / 1000, tz=timezone.utc)
    return dt.astimezone(tz).strftime(fmt)
