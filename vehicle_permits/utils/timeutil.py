# vehicle_permits/utils/timeutil.py
"""Naive-UTC time helpers. All timestamps are stored as naive UTC datetimes."""

from datetime import datetime, timezone

DISPLAY_FORMAT = "%b %d, %Y %H:%M"   # Jan 05, 2026 09:00 (messages)
EXPORT_FORMAT = "%Y-%m-%d %H:%M"     # 2026-01-05 09:00 (CSV)


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Aware datetimes are converted to UTC; naive ones are assumed to be UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def format_export(value) -> str:
    return value.strftime(EXPORT_FORMAT) if value else ""
