"""
Timezone-aware time helpers. Every timestamp in the system is UTC.
"""
from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def hours_since(published_at: datetime, now: Optional[datetime] = None) -> float:
    now = now or utc_now()
    return (ensure_utc(now) - ensure_utc(published_at)).total_seconds() / 3600.0
