"""Calendar-day helpers shared by the stores."""

from datetime import datetime
from zoneinfo import ZoneInfo


def to_local(moment: datetime, tz: ZoneInfo) -> datetime:
    """Return the moment in the given timezone; naive values are taken as local."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


def start_of_day(moment: datetime, tz: ZoneInfo) -> datetime:
    """Truncate a moment to local midnight."""
    return to_local(moment, tz).replace(hour=0, minute=0, second=0, microsecond=0)


def day_key(moment: datetime, tz: ZoneInfo) -> str:
    """Year-month-day key of the local calendar day."""
    return to_local(moment, tz).date().isoformat()


def epoch_millis(moment: datetime) -> int:
    """Milliseconds since the epoch for an aware datetime."""
    return int(moment.timestamp() * 1000)
